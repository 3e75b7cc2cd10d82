"""Error taxonomy for assetpack.

Every error raised by the build pipeline derives from AssetPackError and
carries a stable ``code`` that callers can match on. Messages are meant to
be shown to the user verbatim.
"""

from __future__ import annotations

# Error code constants
MANIFEST_INVALID = "manifest_invalid"
ARGUMENT_INVALID = "argument_invalid"
SOURCE_NOT_FOUND = "source_not_found"
SOURCE_UNREADABLE = "source_unreadable"
MISSING_NAMED_IMPORT = "missing_named_import"
ACTION_LAUNCH_FAILED = "action_launch_failed"
ACTION_FAILED = "action_failed"
ACTION_TIMEOUT = "action_timeout"
PUBLISH_IO_FAILED = "publish_io_failed"


class AssetPackError(Exception):
    """Base error for assetpack operations."""

    def __init__(self, message: str, code: str = "assetpack_error") -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class ManifestInvalidError(AssetPackError):
    """Raised when a manifest cannot be parsed or fails validation."""

    def __init__(self, reason: str, code: str = MANIFEST_INVALID) -> None:
        super().__init__(reason, code=code)
        self.reason = reason


class ArgumentInvalidError(AssetPackError):
    """Raised when a build context override or manifest default is malformed."""

    def __init__(
        self, message: str, key: str | None = None, code: str = ARGUMENT_INVALID
    ) -> None:
        super().__init__(message, code=code)
        self.key = key


class SourceNotFoundError(AssetPackError):
    """Raised when a declared input file does not exist."""

    def __init__(self, path: str, code: str = SOURCE_NOT_FOUND) -> None:
        super().__init__(f"The specified input path does not exist: {path}", code)
        self.path = path


class SourceUnreadableError(AssetPackError):
    """Raised when an input or imported artifact exists but cannot be read."""

    def __init__(self, path: str, reason: str, code: str = SOURCE_UNREADABLE) -> None:
        super().__init__(f"Failed to read {path}: {reason}", code)
        self.path = path
        self.reason = reason


class MissingNamedImportError(AssetPackError):
    """Raised when an import names an output that has not been built yet."""

    def __init__(self, name: str, code: str = MISSING_NAMED_IMPORT) -> None:
        super().__init__(
            f'Import "{name}" does not refer to an output built earlier in this run.',
            code,
        )
        self.name = name


class ActionLaunchFailedError(AssetPackError):
    """Raised when an action's executable cannot be started."""

    def __init__(
        self,
        executable: str | None,
        message: str | None = None,
        code: str = ACTION_LAUNCH_FAILED,
    ) -> None:
        if message is None:
            if executable:
                message = f'Failed to start "{executable}".'
            else:
                message = "There was no executable defined for execution."
        super().__init__(message, code)
        self.executable = executable


class ActionFailedError(AssetPackError):
    """Raised when an action exits with a non-zero code."""

    def __init__(
        self,
        action: str,
        stderr: str,
        exit_code: int | None = None,
        code: str = ACTION_FAILED,
    ) -> None:
        message = stderr.strip() or f'Action "{action}" failed with exit code {exit_code}.'
        super().__init__(message, code)
        self.action = action
        self.stderr = stderr
        self.exit_code = exit_code


class PublishIOError(AssetPackError):
    """Raised when a finished artifact cannot be copied to its target path."""

    def __init__(self, path: str, reason: str, code: str = PUBLISH_IO_FAILED) -> None:
        super().__init__(f"Failed to publish {path}: {reason}", code)
        self.path = path
        self.reason = reason


__all__ = [
    "ACTION_FAILED",
    "ACTION_LAUNCH_FAILED",
    "ACTION_TIMEOUT",
    "ARGUMENT_INVALID",
    "MANIFEST_INVALID",
    "MISSING_NAMED_IMPORT",
    "PUBLISH_IO_FAILED",
    "SOURCE_NOT_FOUND",
    "SOURCE_UNREADABLE",
    "ActionFailedError",
    "ActionLaunchFailedError",
    "ArgumentInvalidError",
    "AssetPackError",
    "ManifestInvalidError",
    "MissingNamedImportError",
    "PublishIOError",
    "SourceNotFoundError",
    "SourceUnreadableError",
]
