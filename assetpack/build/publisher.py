"""Publishing finished artifacts to their target paths."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from assetpack.build.graph import OutputSpec
from assetpack.build.paths import resolve_output_path
from assetpack.context import BuildContext
from assetpack.errors import PublishIOError

logger = logging.getLogger(__name__)


def publish_output(
    spec: OutputSpec,
    artifact: Path,
    context: BuildContext,
) -> Path | None:
    """Copy an artifact to its resolved target path.

    Destination directories are created as needed and an existing file is
    overwritten. Temporary outputs are never published.

    Args:
        spec: Output being published.
        artifact: Finished artifact.
        context: Build context providing the target root and version.

    Returns:
        The published path, or None for temporary outputs.

    Raises:
        PublishIOError: If the directory or the copy cannot be created.
    """
    if spec.temporary:
        logger.debug("Not publishing temporary output %s", spec.label)
        return None

    destination = resolve_output_path(context.target_root, context.version, spec)

    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(artifact, destination)
    except OSError as e:
        raise PublishIOError(str(destination), e.strerror or str(e)) from e

    logger.debug("Published %s to %s", spec.label, destination)
    return destination


__all__ = ["publish_output"]
