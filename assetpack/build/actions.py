"""Post-processing actions.

This module handles:
- Resolving which actions apply to an output
- Piping an artifact through an external executable
- Replacing the artifact only when the executable succeeds

The executable's stdin, stdout and stderr are serviced by separate threads.
Either direction can block once an OS pipe buffer fills, so no single
thread may write all input before reading output.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
import threading
from dataclasses import replace
from pathlib import Path
from typing import IO

from assetpack.build.assembler import ArtifactStore
from assetpack.build.graph import ActionSpec, OutputGraph, OutputSpec
from assetpack.errors import (
    ACTION_TIMEOUT,
    ActionFailedError,
    ActionLaunchFailedError,
)

logger = logging.getLogger(__name__)

# Chunk size for streaming artifact bytes through a process
PIPE_CHUNK_SIZE = 64 * 1024


def resolve_actions(graph: OutputGraph, output: OutputSpec) -> list[ActionSpec]:
    """Resolve the actions to run on an output, in execution order.

    Global actions come first, in declaration order. Each of the output's
    references then either overrides the arguments of an action already in
    the list, adds a top-level action (with its arguments optionally
    overridden), or adds an ad hoc action carrying its own executable.
    References that match nothing are skipped.

    Args:
        graph: Graph holding the top-level action declarations.
        output: Output whose references are resolved.

    Returns:
        Resolved actions; a name appears at most once.
    """
    resolved: dict[str, ActionSpec] = {a.name: a for a in graph.global_actions}

    for ref in output.action_refs:
        base = resolved.get(ref.name) or graph.actions.get(ref.name)
        if base is not None:
            if ref.arguments:
                base = replace(base, arguments=ref.arguments)
            resolved[ref.name] = base
        elif ref.executable:
            resolved[ref.name] = ActionSpec(
                name=ref.name,
                executable=ref.executable,
                arguments=ref.arguments or "",
            )
        else:
            logger.debug(
                "No action named %s is declared; skipping it on %s",
                ref.name,
                output.label,
            )

    return list(resolved.values())


def compose_action_command(action: ActionSpec) -> list[str]:
    """Compose the argv for an action.

    Args:
        action: Resolved action.

    Returns:
        Executable followed by its shell-split arguments.
    """
    return [action.executable, *shlex.split(action.arguments or "")]


def _feed(source: Path, sink: IO[bytes]) -> None:
    try:
        with source.open("rb") as f:
            shutil.copyfileobj(f, sink, PIPE_CHUNK_SIZE)
    except BrokenPipeError:
        # The process exited without reading all input; its exit code decides.
        logger.debug("Action closed its input early")
    finally:
        try:
            sink.close()
        except BrokenPipeError:
            pass


def _drain(source: IO[bytes], sink: IO[bytes]) -> None:
    with source:
        shutil.copyfileobj(source, sink, PIPE_CHUNK_SIZE)


def _collect(source: IO[bytes], chunks: list[bytes]) -> None:
    with source:
        while chunk := source.read(PIPE_CHUNK_SIZE):
            chunks.append(chunk)


def run_action(
    action: ActionSpec,
    artifact: Path,
    store: ArtifactStore,
    timeout: int | None = None,
) -> None:
    """Pipe an artifact through an action, replacing it on success.

    The artifact's bytes are written to the process's stdin while stdout is
    drained into a new temporary file and stderr is captured. On exit code
    zero the new file atomically replaces the artifact at the same path. On
    any failure the artifact is left untouched and the new file discarded.

    Args:
        action: Resolved action to execute.
        artifact: Artifact to transform in place.
        store: Owner of the intermediate output file.
        timeout: Seconds to wait for the process (None = no timeout).

    Raises:
        ActionLaunchFailedError: If there is no executable or it won't start.
        ActionFailedError: If the process exits non-zero or times out.
    """
    if not action.executable:
        raise ActionLaunchFailedError(None)

    cmd = compose_action_command(action)
    logger.debug("Executing action %s: %s", action.name, shlex.join(cmd))

    try:
        proc = subprocess.Popen(
            cmd,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except (OSError, ValueError) as e:
        logger.debug("Failed to launch %s: %s", action.executable, e)
        raise ActionLaunchFailedError(action.executable) from e

    if proc.stdin is None or proc.stdout is None or proc.stderr is None:
        proc.kill()
        proc.wait()
        raise ActionLaunchFailedError(action.executable)

    output = store.create(prefix="action-")
    stderr_chunks: list[bytes] = []

    with output.open("wb") as out:
        threads = [
            threading.Thread(target=_feed, args=(artifact, proc.stdin), daemon=True),
            threading.Thread(target=_drain, args=(proc.stdout, out), daemon=True),
            threading.Thread(
                target=_collect, args=(proc.stderr, stderr_chunks), daemon=True
            ),
        ]
        for thread in threads:
            thread.start()

        try:
            exit_code = proc.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.wait()
            for thread in threads:
                thread.join()
            store.discard(output)
            raise ActionFailedError(
                action.name,
                f'Action "{action.name}" timed out after {timeout} seconds.',
                exit_code=proc.returncode,
                code=ACTION_TIMEOUT,
            ) from None

        for thread in threads:
            thread.join()

    if exit_code != 0:
        store.discard(output)
        stderr = b"".join(stderr_chunks).decode("utf-8", errors="replace")
        logger.debug("Action %s exited with code %d", action.name, exit_code)
        raise ActionFailedError(action.name, stderr, exit_code=exit_code)

    os.replace(output, artifact)
    store.forget(output)


def apply_actions(
    actions: list[ActionSpec],
    artifact: Path,
    store: ArtifactStore,
    label: str,
    timeout: int | None = None,
) -> None:
    """Run actions on an artifact in order, stopping at the first failure.

    Raises:
        ActionLaunchFailedError: If an executable cannot be started.
        ActionFailedError: If an action fails.
    """
    for action in actions:
        logger.info("Executing action %s on %s.", action.name, label)
        run_action(action, artifact, store, timeout=timeout)


__all__ = [
    "PIPE_CHUNK_SIZE",
    "apply_actions",
    "compose_action_command",
    "resolve_actions",
    "run_action",
]
