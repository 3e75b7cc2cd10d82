"""Build context resolution.

A BuildContext is resolved once per run from the manifest's root defaults
and caller-supplied overrides. For each key the override wins, the manifest
attribute is the fallback, and for the source and target roots the
manifest's own directory is the final fallback.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from assetpack.errors import ArgumentInvalidError
from assetpack.manifest.schema import ManifestSchema, coerce_bool

logger = logging.getLogger(__name__)

DEFAULT_DIRECTORY = "."

# Override keys understood by resolve_build_context
SRC_KEY = "src"
TARGET_KEY = "target"
VERSION_KEY = "version"
ACTIONS_KEY = "actions"


@dataclass(frozen=True)
class BuildContext:
    """Immutable configuration for one build run.

    Attributes:
        manifest_path: Absolute path of the manifest file.
        source_root: Absolute directory inputs are resolved against.
        target_root: Absolute directory outputs are published under.
        version: Version inserted into versioned output names (may be empty).
        actions_enabled: Whether post-processing actions run at all.
    """

    manifest_path: Path
    source_root: Path
    target_root: Path
    version: str
    actions_enabled: bool


def get_override(key: str, overrides: Mapping[str, str | None] | None) -> str:
    """Return the trimmed override for ``key``, or an empty string."""
    if not overrides:
        return ""
    return (overrides.get(key) or "").strip()


def parse_bool(value: str, key: str = ACTIONS_KEY) -> bool:
    """Parse a 'true'/'false' string.

    Raises:
        ArgumentInvalidError: If the value is neither 'true' nor 'false'.
    """
    try:
        return coerce_bool(value)
    except ValueError:
        raise ArgumentInvalidError(
            f'The manifest arguments are invalid.\n'
            f'Output {key} must be either "true" or "false".',
            key=key,
        ) from None


def resolve_directory(
    key: str,
    base_directory: Path,
    overrides: Mapping[str, str | None] | None,
    manifest_value: str | None,
) -> Path:
    """Resolve a root directory from an override, the manifest, or the default.

    Relative paths are resolved against ``base_directory`` (the manifest's
    directory). The result is absolute and normalized, without a trailing
    separator.
    """
    path = get_override(key, overrides)
    if not path and manifest_value:
        path = manifest_value.strip()
    if not path:
        path = DEFAULT_DIRECTORY

    resolved = Path(path).expanduser()
    if not resolved.is_absolute():
        resolved = base_directory / resolved
    return Path(os.path.normpath(resolved))


def resolve_build_context(
    manifest_path: str | Path,
    manifest: ManifestSchema,
    overrides: Mapping[str, str | None] | None = None,
) -> BuildContext:
    """Resolve the build context for a run.

    Args:
        manifest_path: Path to the manifest file.
        manifest: Validated manifest.
        overrides: Optional overrides keyed by ``src``, ``target``,
            ``version`` and ``actions``; empty values are ignored.

    Returns:
        BuildContext for the run.

    Raises:
        ArgumentInvalidError: If the manifest path does not exist, or the
            actions flag is malformed or missing from both sources.
    """
    path = Path(manifest_path).expanduser().resolve()
    if not path.is_file():
        raise ArgumentInvalidError(
            f"The specified manifest path does not exist: {path}", key="manifest"
        )
    base_directory = path.parent

    source_root = resolve_directory(SRC_KEY, base_directory, overrides, manifest.src)
    target_root = resolve_directory(
        TARGET_KEY, base_directory, overrides, manifest.target
    )

    version = get_override(VERSION_KEY, overrides)
    if not version and manifest.version:
        version = manifest.version.strip()

    actions = get_override(ACTIONS_KEY, overrides)
    if actions:
        actions_enabled = parse_bool(actions)
    elif manifest.actions is not None:
        actions_enabled = manifest.actions
    else:
        raise ArgumentInvalidError(
            "The manifest arguments are invalid.\n"
            'Output actions must be set to "true" or "false" in the manifest '
            "or on the command line.",
            key=ACTIONS_KEY,
        )

    context = BuildContext(
        manifest_path=path,
        source_root=source_root,
        target_root=target_root,
        version=version,
        actions_enabled=actions_enabled,
    )
    logger.debug("Resolved build context: %s", context)
    return context


__all__ = [
    "ACTIONS_KEY",
    "DEFAULT_DIRECTORY",
    "SRC_KEY",
    "TARGET_KEY",
    "VERSION_KEY",
    "BuildContext",
    "get_override",
    "parse_bool",
    "resolve_build_context",
    "resolve_directory",
]
