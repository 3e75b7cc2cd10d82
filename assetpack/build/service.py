"""Build service module.

This module provides the high-level build API:
- run_build(): one full pass over every output in manifest order
- Packer: a loaded manifest plus its context, rebuilt on demand
- find_stale_inputs(): inputs modified after the manifest

Every run starts from scratch: a fresh artifact store and named table. The
first failing output aborts the run; temporary artifacts are removed
whether the run succeeds or not.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path

from assetpack.build.actions import apply_actions, resolve_actions
from assetpack.build.assembler import (
    ArtifactStore,
    NamedArtifactTable,
    assemble_output,
)
from assetpack.build.graph import OutputGraph, OutputSpec
from assetpack.build.paths import resolve_input
from assetpack.build.publisher import publish_output
from assetpack.context import BuildContext
from assetpack.errors import AssetPackError
from assetpack.types import OutputResult, OutputStatus, RunOutcome

logger = logging.getLogger(__name__)


def describe_output(index: int, total: int, spec: OutputSpec) -> str:
    """Progress line for one output."""
    info = f"Concatenating output {index} of {total}"
    if spec.name:
        return f"{info} ({spec.name})."
    if spec.path:
        return f"{info} ({spec.path})."
    return f"{info}."


def build_output(
    spec: OutputSpec,
    graph: OutputGraph,
    context: BuildContext,
    table: NamedArtifactTable,
    store: ArtifactStore,
    action_timeout: int | None = None,
) -> Path | None:
    """Assemble, post-process and publish a single output.

    Returns:
        The published path, or None for temporary outputs.

    Raises:
        AssetPackError: On any failure; the run should stop.
    """
    artifact = assemble_output(spec, context.source_root, table, store)

    if context.actions_enabled and spec.actions_allowed:
        apply_actions(
            resolve_actions(graph, spec),
            artifact,
            store,
            spec.label,
            timeout=action_timeout,
        )

    return publish_output(spec, artifact, context)


def run_build(
    graph: OutputGraph,
    context: BuildContext,
    tmp_dir: Path | None = None,
    action_timeout: int | None = None,
) -> RunOutcome:
    """Run one full build over every output in order.

    Args:
        graph: Outputs and action declarations.
        context: Resolved build context.
        tmp_dir: Optional parent directory for temporary artifacts.
        action_timeout: Optional per-action timeout in seconds.

    Returns:
        RunOutcome with one result per attempted output.
    """
    outcome = RunOutcome(total=len(graph))
    table = NamedArtifactTable()
    store = ArtifactStore(tmp_dir)

    try:
        for index, spec in enumerate(graph, start=1):
            logger.info(describe_output(index, len(graph), spec))
            try:
                published = build_output(
                    spec, graph, context, table, store, action_timeout
                )
            except AssetPackError as e:
                logger.debug("Output %s failed (%s)", spec.label, e.code)
                outcome.results.append(
                    OutputResult(
                        label=spec.label,
                        status=OutputStatus.FAILED,
                        message=e.message,
                        code=e.code,
                    )
                )
                break

            outcome.results.append(
                OutputResult(
                    label=spec.label,
                    status=OutputStatus.SUCCEEDED,
                    published_path=str(published) if published else None,
                )
            )
    finally:
        store.cleanup()

    return outcome


def find_stale_inputs(graph: OutputGraph, context: BuildContext) -> list[Path]:
    """List inputs modified after the manifest itself.

    Missing inputs are not reported here; the build reports them.

    Args:
        graph: Outputs whose inputs are checked.
        context: Context providing the source root and manifest path.

    Returns:
        Resolved paths of stale inputs, in build order.
    """
    manifest_mtime = context.manifest_path.stat().st_mtime
    stale: list[Path] = []
    for declared in graph.input_paths():
        path = resolve_input(context.source_root, declared)
        if path.is_file() and path.stat().st_mtime > manifest_mtime:
            stale.append(path)
    return stale


@dataclass
class PackResult:
    """A build outcome with its timing."""

    outcome: RunOutcome
    started_at: float
    duration: float


class Packer:
    """A manifest's graph and context, ready to be built repeatedly.

    Each call to ``pack`` is an independent run.
    """

    def __init__(
        self,
        graph: OutputGraph,
        context: BuildContext,
        tmp_dir: Path | None = None,
        action_timeout: int | None = None,
    ) -> None:
        self.graph = graph
        self.context = context
        self.tmp_dir = tmp_dir
        self.action_timeout = action_timeout

    def pack(self) -> PackResult:
        started_at = time.time()
        start = time.monotonic()
        outcome = run_build(
            self.graph,
            self.context,
            tmp_dir=self.tmp_dir,
            action_timeout=self.action_timeout,
        )
        return PackResult(
            outcome=outcome,
            started_at=started_at,
            duration=time.monotonic() - start,
        )


__all__ = [
    "PackResult",
    "Packer",
    "build_output",
    "describe_output",
    "find_stale_inputs",
    "run_build",
]
