"""Path resolution for inputs and outputs.

Pure functions; nothing here touches the filesystem.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from assetpack.build.graph import OutputSpec


def resolve_input(source_root: Path, declared_path: str | Path) -> Path:
    """Resolve an input path against the source root.

    Args:
        source_root: Absolute source directory.
        declared_path: Path as declared in the manifest.

    Returns:
        ``declared_path`` unchanged if absolute, otherwise joined to the root.
    """
    path = Path(declared_path)
    if path.is_absolute():
        return path
    return source_root / path


def versioned_name(filename: str, version: str) -> str:
    """Insert ``-{version}`` before the final extension of a filename.

    >>> versioned_name("app.min.js", "1.2")
    'app.min-1.2.js'
    """
    path = Path(filename)
    return f"{path.stem}-{version}{path.suffix}"


def resolve_output_path(target_root: Path, version: str, spec: OutputSpec) -> Path:
    """Resolve the final published path of an output.

    Args:
        target_root: Absolute target directory.
        version: Build version; ignored when empty.
        spec: Output whose ``path`` and ``versioned`` flag are used.

    Returns:
        Absolute output path, versioned when requested.
    """
    path = Path(spec.path)
    if not path.is_absolute():
        path = target_root / path

    if spec.versioned and version:
        path = path.with_name(versioned_name(path.name, version))

    return path


__all__ = ["resolve_input", "resolve_output_path", "versioned_name"]
