"""Output assembly.

This module handles:
- Per-run temporary artifact files (ArtifactStore)
- The table of named artifacts built so far in a run (NamedArtifactTable)
- Concatenating an output's steps into a single artifact
"""

from __future__ import annotations

import codecs
import logging
import os
import shutil
import tempfile
from collections.abc import Iterator
from pathlib import Path

from assetpack.build.graph import ImportNamed, OutputSpec, ReadSource
from assetpack.build.paths import resolve_input
from assetpack.errors import (
    MissingNamedImportError,
    SourceNotFoundError,
    SourceUnreadableError,
)

logger = logging.getLogger(__name__)

# Appended after every step's content
LINE_SEPARATOR = b"\n"


class ArtifactStore:
    """Owner of every temporary artifact file created during one run.

    Files live in a private directory created on first use, so names are
    unique per run. ``cleanup`` deletes each remaining file exactly once and
    removes the directory.
    """

    def __init__(self, tmp_dir: Path | None = None) -> None:
        self._parent = tmp_dir
        self._directory: Path | None = None
        self._paths: list[Path] = []

    @property
    def directory(self) -> Path | None:
        return self._directory

    def __iter__(self) -> Iterator[Path]:
        return iter(list(self._paths))

    def __len__(self) -> int:
        return len(self._paths)

    def create(self, prefix: str = "artifact-") -> Path:
        """Create a new empty, uniquely named artifact file."""
        if self._directory is None:
            if self._parent is not None:
                self._parent.mkdir(parents=True, exist_ok=True)
            self._directory = Path(
                tempfile.mkdtemp(prefix="assetpack-", dir=self._parent)
            )
        fd, name = tempfile.mkstemp(prefix=prefix, dir=self._directory)
        os.close(fd)
        path = Path(name)
        self._paths.append(path)
        return path

    def discard(self, path: Path) -> None:
        """Delete one artifact now and stop tracking it."""
        if path in self._paths:
            self._paths.remove(path)
        path.unlink(missing_ok=True)

    def forget(self, path: Path) -> None:
        """Stop tracking a file that was renamed onto another artifact."""
        if path in self._paths:
            self._paths.remove(path)

    def cleanup(self) -> int:
        """Delete every tracked artifact and the run directory.

        Returns:
            Number of artifacts deleted.
        """
        deleted = 0
        for path in self._paths:
            try:
                path.unlink()
                deleted += 1
            except FileNotFoundError:
                logger.debug("Temporary artifact already gone: %s", path)
        self._paths.clear()

        if self._directory is not None:
            shutil.rmtree(self._directory, ignore_errors=True)
            self._directory = None

        logger.debug("Removed %d temporary artifact(s)", deleted)
        return deleted


class NamedArtifactTable:
    """Mapping of output name to the location of its artifact for one run.

    Entries are added once and never replaced. Post-processing replaces an
    artifact's bytes at the same path, so a lookup always yields the most
    recent content.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Path] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def register(self, name: str, path: Path) -> None:
        if name in self._entries:
            raise ValueError(f"Named output already registered: {name}")
        self._entries[name] = path

    def resolve(self, name: str) -> Path:
        """Return the artifact path for ``name``.

        Raises:
            MissingNamedImportError: If no earlier output registered the name.
        """
        try:
            return self._entries[name]
        except KeyError:
            raise MissingNamedImportError(name) from None

    def names(self) -> list[str]:
        return list(self._entries)


def read_content(path: Path) -> bytes:
    """Read a step's bytes, dropping a leading UTF-8 byte order mark.

    Raises:
        SourceUnreadableError: If the file cannot be read.
    """
    try:
        data = path.read_bytes()
    except OSError as e:
        raise SourceUnreadableError(str(path), e.strerror or str(e)) from e
    return data.removeprefix(codecs.BOM_UTF8)


def assemble_output(
    spec: OutputSpec,
    source_root: Path,
    table: NamedArtifactTable,
    store: ArtifactStore,
) -> Path:
    """Concatenate an output's steps into a fresh temporary artifact.

    Each step's bytes are written unchanged, in declared order, followed by
    LINE_SEPARATOR. Only a leading UTF-8 byte order mark is dropped, so
    sources in any encoding pass through intact. A named output is
    registered in ``table`` once its artifact is complete, before any
    post-processing, so an output can never import itself.

    Args:
        spec: Output to assemble.
        source_root: Root for relative input paths.
        table: Named artifacts built earlier in this run.
        store: Owner of the new artifact file.

    Returns:
        Path of the new artifact.

    Raises:
        MissingNamedImportError: If an import names an unknown output.
        SourceNotFoundError: If an input file does not exist.
        SourceUnreadableError: If an input or imported artifact can't be read.
    """
    artifact = store.create()

    with artifact.open("wb") as out:
        for step in spec.steps:
            if isinstance(step, ImportNamed):
                content = read_content(table.resolve(step.name))
            elif isinstance(step, ReadSource):
                path = resolve_input(source_root, step.path)
                if not path.is_file():
                    raise SourceNotFoundError(str(path))
                content = read_content(path)
            else:
                raise TypeError(f"Unknown step: {step!r}")
            out.write(content)
            out.write(LINE_SEPARATOR)

    if spec.name:
        table.register(spec.name, artifact)

    logger.debug(
        "Assembled %s from %d step(s) into %s", spec.label, len(spec.steps), artifact
    )
    return artifact


__all__ = [
    "LINE_SEPARATOR",
    "ArtifactStore",
    "NamedArtifactTable",
    "assemble_output",
    "read_content",
]
