"""Manifest loading and validation.

This module handles:
- Parsing XML, YAML and JSON manifests
- Schema validation with pydantic
"""

from assetpack.manifest.io import ManifestLoadResult, load_manifest
from assetpack.manifest.schema import (
    ActionRefSchema,
    ImportStepSchema,
    InputStepSchema,
    ManifestSchema,
    OutputActionSchema,
    OutputSchema,
)

__all__ = [
    "ActionRefSchema",
    "ImportStepSchema",
    "InputStepSchema",
    "ManifestLoadResult",
    "ManifestSchema",
    "OutputActionSchema",
    "OutputSchema",
    "load_manifest",
]
