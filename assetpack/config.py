"""Configuration settings for assetpack.

Uses pydantic-settings for config parsing from environment variables
and defaults. Configuration precedence: CLI flags > env vars > defaults.

Manifest-level defaults (source and target roots, version, actions) are
not settings; they are resolved per run into a BuildContext.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the ASSETPACK_ prefix.
    CLI flags can override these at runtime.
    """

    model_config = SettingsConfigDict(
        env_prefix="ASSETPACK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    tmp_dir: Path | None = Field(
        default=None,
        description="Parent directory for per-run temporary artifacts "
        "(uses system default if not set)",
    )

    # Watch mode
    quiet_interval: float = Field(
        default=1.0,
        ge=0,
        description="Minimum seconds between watch-triggered rebuilds",
    )
    settle_delay: float = Field(
        default=1.0,
        ge=0,
        description="Seconds to wait after a trigger before rebuilding",
    )
    watch_extensions: list[str] = Field(
        default_factory=lambda: [".js", ".css"],
        description="File extensions whose changes trigger a rebuild",
    )

    # Actions
    action_timeout: int | None = Field(
        default=None,
        ge=1,
        description="Timeout for a single output action (None = no timeout)",
    )

    @field_validator("watch_extensions")
    @classmethod
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        """Lowercase extensions and ensure a leading dot."""
        normalized = []
        for ext in v:
            ext = ext.strip().lower()
            if not ext:
                continue
            if not ext.startswith("."):
                ext = f".{ext}"
            normalized.append(ext)
        return normalized


def get_settings() -> Settings:
    """Get the application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()


def print_settings_json(settings: Settings | None = None) -> str:
    """Render effective settings as JSON.

    Args:
        settings: Optional settings instance; uses default if not provided.

    Returns:
        JSON string of effective settings.
    """
    if settings is None:
        settings = get_settings()
    return settings.model_dump_json(indent=2)


__all__ = ["Settings", "get_settings", "print_settings_json"]
