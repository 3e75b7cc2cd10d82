"""Shared type definitions for assetpack.

This module contains enums and dataclasses shared across subpackages to
avoid circular imports.
"""

from dataclasses import dataclass, field
from enum import Enum


class OutputStatus(str, Enum):
    """Status of a single output within a build run."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"


class WatchState(str, Enum):
    """State of the watch scheduler."""

    IDLE = "idle"
    PENDING_REBUILD = "pending_rebuild"
    REBUILDING = "rebuilding"


@dataclass
class OutputResult:
    """Result of building one output.

    Attributes:
        label: Output name, or its path when unnamed.
        status: Whether the output succeeded.
        message: Diagnostic text (verbatim error reason on failure).
        code: Stable error code on failure.
        published_path: Final target path, if the output was published.
    """

    label: str
    status: OutputStatus
    message: str = ""
    code: str | None = None
    published_path: str | None = None

    @property
    def success(self) -> bool:
        return self.status == OutputStatus.SUCCEEDED


@dataclass
class RunOutcome:
    """Ordered record of per-output results for one build run."""

    results: list[OutputResult] = field(default_factory=list)
    total: int = 0

    @property
    def success(self) -> bool:
        """True when every declared output was attempted and succeeded."""
        return len(self.results) == self.total and all(
            r.success for r in self.results
        )

    @property
    def failure(self) -> OutputResult | None:
        """The output that aborted the run, if any."""
        for result in self.results:
            if not result.success:
                return result
        return None

    @property
    def attempted(self) -> int:
        return len(self.results)


__all__ = [
    "OutputResult",
    "OutputStatus",
    "RunOutcome",
    "WatchState",
]
