"""In-memory output graph built from a validated manifest.

Outputs are stored in manifest order. The only link between outputs is by
name, through the NamedArtifactTable at build time; no output holds a
reference to another.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from assetpack.manifest.schema import ImportStepSchema, ManifestSchema, OutputSchema


@dataclass(frozen=True)
class ImportNamed:
    """Append the current artifact of an earlier named output."""

    name: str


@dataclass(frozen=True)
class ReadSource:
    """Append the content of a source file."""

    path: str


Step = ImportNamed | ReadSource


@dataclass(frozen=True)
class ActionRef:
    """An output's reference to a post-processing action.

    ``arguments`` overrides the referenced action's arguments when non-empty.
    ``executable`` is only used when no top-level action has this name.
    """

    name: str
    arguments: str | None = None
    executable: str | None = None


@dataclass(frozen=True)
class ActionSpec:
    """A fully resolved action: what to launch and with which arguments."""

    name: str
    executable: str
    arguments: str = ""
    is_global: bool = False


@dataclass(frozen=True)
class OutputSpec:
    """One declared output bundle."""

    path: str
    name: str | None = None
    temporary: bool = False
    versioned: bool = False
    actions_allowed: bool = False
    steps: tuple[Step, ...] = ()
    action_refs: tuple[ActionRef, ...] = ()

    @property
    def label(self) -> str:
        """Name if set, otherwise the declared path."""
        return self.name or self.path

    @classmethod
    def from_schema(cls, schema: OutputSchema) -> OutputSpec:
        steps: list[Step] = []
        for step in schema.steps:
            if isinstance(step, ImportStepSchema):
                steps.append(ImportNamed(step.name))
            else:
                steps.append(ReadSource(step.input))

        return cls(
            path=schema.path,
            name=schema.name,
            temporary=schema.temporary,
            versioned=schema.versioned,
            actions_allowed=schema.actions,
            steps=tuple(steps),
            action_refs=tuple(
                ActionRef(a.name, a.arguments, a.executable)
                for a in schema.post_actions
            ),
        )


@dataclass(frozen=True)
class OutputGraph:
    """Outputs in build order plus top-level action declarations."""

    outputs: tuple[OutputSpec, ...] = ()
    actions: dict[str, ActionSpec] = field(default_factory=dict)

    def __iter__(self) -> Iterator[OutputSpec]:
        return iter(self.outputs)

    def __len__(self) -> int:
        return len(self.outputs)

    @property
    def global_actions(self) -> list[ActionSpec]:
        """Top-level actions applied to every actions-enabled output."""
        return [a for a in self.actions.values() if a.is_global]

    def input_paths(self) -> list[str]:
        """Every declared input path, in build order, without duplicates."""
        paths: list[str] = []
        for output in self.outputs:
            for step in output.steps:
                if isinstance(step, ReadSource) and step.path not in paths:
                    paths.append(step.path)
        return paths

    @classmethod
    def from_manifest(cls, manifest: ManifestSchema) -> OutputGraph:
        """Build the graph from a validated manifest."""
        return cls(
            outputs=tuple(OutputSpec.from_schema(o) for o in manifest.outputs),
            actions={
                a.name: ActionSpec(
                    name=a.name,
                    executable=a.executable,
                    arguments=a.arguments,
                    is_global=a.is_global,
                )
                for a in manifest.output_actions
            },
        )


__all__ = [
    "ActionRef",
    "ActionSpec",
    "ImportNamed",
    "OutputGraph",
    "OutputSpec",
    "ReadSource",
    "Step",
]
