"""Pydantic models for manifest schema validation.

A manifest ("map") declares the build context defaults, a list of
reusable output actions, and an ordered list of outputs. The same schema
validates XML, YAML and JSON manifests once they are parsed into plain
data by ``assetpack.manifest.io``.
"""

from typing import Annotated, Any

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


def coerce_bool(value: Any) -> Any:
    """Accept real booleans and the strings 'true'/'false' (any case).

    Anything else is rejected, including '1', 'yes' and 'on', which
    pydantic would otherwise accept.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text == "true":
            return True
        if text == "false":
            return False
    raise ValueError(f'must be either "true" or "false", got {value!r}')


ManifestBool = Annotated[bool, BeforeValidator(coerce_bool)]


class ImportStepSchema(BaseModel):
    """Step that appends a previously built named output."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str = Field(alias="import", min_length=1, description="Output name")


class InputStepSchema(BaseModel):
    """Step that appends a source file."""

    model_config = ConfigDict(extra="forbid")

    input: str = Field(min_length=1, description="Source file path")


StepSchema = ImportStepSchema | InputStepSchema


class ActionRefSchema(BaseModel):
    """Per-output action reference.

    Attributes:
        name: Name of a top-level output action, or of an ad hoc action.
        arguments: Optional argument string overriding the referenced action's.
        executable: Executable for an ad hoc action with no top-level match.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    arguments: str | None = Field(default=None)
    executable: str | None = Field(default=None)


class OutputActionSchema(BaseModel):
    """Top-level output action declaration.

    Attributes:
        name: Unique action name.
        executable: Executable to launch.
        arguments: Argument string passed to the executable.
        is_global: Apply to every actions-enabled output.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str = Field(min_length=1)
    executable: str = Field(min_length=1)
    arguments: str = Field(default="")
    is_global: ManifestBool = Field(default=False, alias="global")


class OutputSchema(BaseModel):
    """Schema for a single output bundle.

    Attributes:
        name: Optional name, importable by later outputs.
        path: Target path, relative to the target root unless absolute.
        temporary: Never published; only importable during the run.
        versioned: Insert the build version before the file extension.
        actions: Allow post-processing actions on this output.
        steps: Ordered import/input steps.
        post_actions: Ordered action references.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None)
    path: str = Field(min_length=1)
    temporary: ManifestBool = Field(default=False)
    versioned: ManifestBool = Field(default=False)
    actions: ManifestBool = Field(default=False)
    steps: list[StepSchema] = Field(default_factory=list)
    post_actions: list[ActionRefSchema] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def empty_name_is_none(cls, v: str | None) -> str | None:
        """Treat blank names as unnamed outputs."""
        if v is None or not v.strip():
            return None
        return v


class ManifestSchema(BaseModel):
    """Complete manifest schema.

    Attributes:
        src: Default source root, relative to the manifest directory.
        target: Default target root, relative to the manifest directory.
        version: Default version string for versioned outputs.
        actions: Default for whether post-processing actions run.
        output_actions: Top-level output action declarations.
        outputs: Outputs in build order.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    src: str | None = Field(default=None)
    target: str | None = Field(default=None)
    version: str | None = Field(default=None)
    actions: ManifestBool | None = Field(default=None)
    output_actions: list[OutputActionSchema] = Field(
        default_factory=list, alias="outputActions"
    )
    outputs: list[OutputSchema] = Field(default_factory=list)

    @field_validator("version", mode="before")
    @classmethod
    def version_as_text(cls, v: Any) -> Any:
        """YAML reads 1.2 as a float; keep versions as text."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @model_validator(mode="after")
    def validate_unique_names(self) -> "ManifestSchema":
        """Output names and output action names must be unique."""
        seen: set[str] = set()
        for output in self.outputs:
            if output.name is None:
                continue
            if output.name in seen:
                raise ValueError(f"duplicate output name '{output.name}'")
            seen.add(output.name)

        seen = set()
        for action in self.output_actions:
            if action.name in seen:
                raise ValueError(f"duplicate output action name '{action.name}'")
            seen.add(action.name)
        return self


__all__ = [
    "ActionRefSchema",
    "ImportStepSchema",
    "InputStepSchema",
    "ManifestBool",
    "ManifestSchema",
    "OutputActionSchema",
    "OutputSchema",
    "StepSchema",
    "coerce_bool",
]
