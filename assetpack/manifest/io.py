"""Manifest loading.

Manifests may be written as XML (the map format), YAML or JSON.
Each format is parsed into plain data and validated with ManifestSchema.
``load_manifest`` never raises for bad input; it reports validity and a
reason the way the CLI needs to print it.
"""

import json
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from assetpack.manifest.schema import ManifestSchema

INVALID_PREFIX = "The manifest is invalid."

XML_ROOT_TAG = "assetpack"

# XML attribute spellings that differ from the schema field names
_XML_OUTPUT_ATTRIBUTES = {"version": "versioned"}


@dataclass
class ManifestLoadResult:
    """Result of loading a manifest.

    Attributes:
        path: Absolute path of the manifest file.
        manifest: Validated manifest, or None when invalid.
        is_valid: Whether the manifest parsed and validated.
        invalid_reason: Human-readable reason when invalid.
    """

    path: Path
    manifest: ManifestSchema | None
    is_valid: bool
    invalid_reason: str | None = None


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
        ValueError: If the document is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a YAML mapping, got {type(data).__name__}")
    return data


def load_json(path: Path) -> dict[str, Any]:
    """Load a JSON file and return its contents as a dict.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        ValueError: If the document is not an object.
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def _xml_output(element: ET.Element) -> dict[str, Any]:
    data: dict[str, Any] = {
        _XML_OUTPUT_ATTRIBUTES.get(k, k): v for k, v in element.attrib.items()
    }
    steps: list[dict[str, Any]] = []
    post_actions: list[dict[str, Any]] = []

    for child in element:
        if child.tag == "import":
            steps.append({"import": child.attrib.get("name", "")})
        elif child.tag == "input":
            steps.append({"input": child.attrib.get("path", "")})
        elif child.tag == "action":
            post_actions.append(dict(child.attrib))
        else:
            raise ValueError(f"Unexpected element <{child.tag}> in <output>")

    data["steps"] = steps
    data["post_actions"] = post_actions
    return data


def load_xml(path: Path) -> dict[str, Any]:
    """Load an XML map file and return its contents as schema-shaped data.

    Steps keep document order, so <import> and <input> may interleave.

    Raises:
        FileNotFoundError: If the file does not exist.
        xml.etree.ElementTree.ParseError: If the file is not well-formed.
        ValueError: If the document structure is not a manifest.
    """
    root = ET.parse(path).getroot()
    if root.tag != XML_ROOT_TAG:
        raise ValueError(f"Expected root element <{XML_ROOT_TAG}>, got <{root.tag}>")

    data: dict[str, Any] = dict(root.attrib)
    outputs: list[dict[str, Any]] = []
    output_actions: list[dict[str, Any]] = []

    for child in root:
        if child.tag == "output":
            outputs.append(_xml_output(child))
        elif child.tag == "outputAction":
            output_actions.append(dict(child.attrib))
        else:
            raise ValueError(f"Unexpected element <{child.tag}> in <{root.tag}>")

    data["outputs"] = outputs
    data["outputActions"] = output_actions
    return data


def load_manifest_data(path: Path) -> dict[str, Any]:
    """Parse a manifest file by extension without validating it.

    Raises:
        ValueError: If file extension is not supported.
    """
    suffix = path.suffix.lower()
    if suffix == ".xml":
        return load_xml(path)
    elif suffix in (".yaml", ".yml"):
        return load_yaml(path)
    elif suffix == ".json":
        return load_json(path)
    else:
        raise ValueError(
            f"Unsupported file extension '{suffix}'. Use .xml, .yaml, .yml, or .json"
        )


def parse_manifest_data(data: dict[str, Any]) -> ManifestSchema:
    """Validate manifest data using the schema.

    Raises:
        pydantic.ValidationError: If data does not match schema.
    """
    return ManifestSchema.model_validate(data)


def load_manifest(path: str | Path) -> ManifestLoadResult:
    """Load and validate a manifest file.

    Args:
        path: Path to the manifest (.xml, .yaml, .yml or .json).

    Returns:
        ManifestLoadResult; ``is_valid`` is False and ``invalid_reason`` set
        when the file is missing, malformed or fails validation.
    """
    manifest_path = Path(path).expanduser().resolve()

    try:
        data = load_manifest_data(manifest_path)
        manifest = parse_manifest_data(data)
    except ValidationError as e:
        reason = f"{INVALID_PREFIX}\nValidation error: {e}"
    except (yaml.YAMLError, json.JSONDecodeError, ET.ParseError) as e:
        reason = f"{INVALID_PREFIX}\nParse error: {e}"
    except FileNotFoundError:
        reason = f"{INVALID_PREFIX}\nFile not found: {manifest_path}"
    except (OSError, ValueError) as e:
        reason = f"{INVALID_PREFIX}\n{e}"
    else:
        return ManifestLoadResult(path=manifest_path, manifest=manifest, is_valid=True)

    return ManifestLoadResult(
        path=manifest_path,
        manifest=None,
        is_valid=False,
        invalid_reason=reason,
    )


__all__ = [
    "INVALID_PREFIX",
    "XML_ROOT_TAG",
    "ManifestLoadResult",
    "load_json",
    "load_manifest",
    "load_manifest_data",
    "load_xml",
    "load_yaml",
    "parse_manifest_data",
]
