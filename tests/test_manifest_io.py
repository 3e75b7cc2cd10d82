"""Tests for manifest/io.py module."""

import json

import pytest

from assetpack.manifest.io import (
    INVALID_PREFIX,
    load_manifest,
    load_manifest_data,
    load_xml,
)
from assetpack.manifest.schema import ImportStepSchema, InputStepSchema

XML_MANIFEST = """<?xml version="1.0" encoding="utf-8"?>
<assetpack src="src" target="dist" version="1.2.3.4" actions="true">
  <!-- shared actions -->
  <outputAction name="minify" executable="uglifyjs" arguments="-c" global="false" />
  <output name="core" path="core.js" temporary="true">
    <input path="a.js" />
    <input path="b.js" />
  </output>
  <output path="app.js" version="true" actions="true">
    <input path="header.js" />
    <import name="core" />
    <input path="footer.js" />
    <action name="minify" arguments="-m" />
  </output>
</assetpack>
"""


class TestLoadXml:
    """Tests for XML manifest parsing."""

    def test_structure(self, tmp_path):
        path = tmp_path / "map.xml"
        path.write_text(XML_MANIFEST, encoding="utf-8")

        data = load_xml(path)

        assert data["src"] == "src"
        assert data["outputActions"][0]["name"] == "minify"
        assert len(data["outputs"]) == 2
        # <output version="..."> is the versioned flag
        assert data["outputs"][1]["versioned"] == "true"

    def test_steps_in_document_order(self, tmp_path):
        path = tmp_path / "map.xml"
        path.write_text(XML_MANIFEST, encoding="utf-8")

        steps = load_xml(path)["outputs"][1]["steps"]

        assert steps == [
            {"input": "header.js"},
            {"import": "core"},
            {"input": "footer.js"},
        ]

    def test_wrong_root(self, tmp_path):
        path = tmp_path / "map.xml"
        path.write_text("<project />", encoding="utf-8")
        with pytest.raises(ValueError, match="root element"):
            load_xml(path)

    def test_unknown_element(self, tmp_path):
        path = tmp_path / "map.xml"
        path.write_text("<assetpack><bundle /></assetpack>", encoding="utf-8")
        with pytest.raises(ValueError, match="Unexpected element"):
            load_xml(path)


class TestLoadManifest:
    """Tests for load_manifest function."""

    def test_valid_xml(self, tmp_path):
        path = tmp_path / "map.xml"
        path.write_text(XML_MANIFEST, encoding="utf-8")

        result = load_manifest(path)

        assert result.is_valid is True
        assert result.invalid_reason is None
        assert result.path == path.resolve()
        manifest = result.manifest
        assert manifest is not None
        assert manifest.version == "1.2.3.4"
        assert manifest.actions is True
        app = manifest.outputs[1]
        assert app.versioned is True
        assert isinstance(app.steps[1], ImportStepSchema)
        assert app.post_actions[0].arguments == "-m"

    def test_valid_yaml(self, tmp_path):
        path = tmp_path / "map.yaml"
        path.write_text(
            "src: src\n"
            "actions: false\n"
            "outputs:\n"
            "  - name: core\n"
            "    path: core.js\n"
            "    steps:\n"
            "      - input: a.js\n"
            "      - import: other\n",
            encoding="utf-8",
        )

        result = load_manifest(path)

        assert result.is_valid is True
        steps = result.manifest.outputs[0].steps
        assert isinstance(steps[0], InputStepSchema)
        assert isinstance(steps[1], ImportStepSchema)

    def test_valid_json(self, tmp_path):
        path = tmp_path / "map.json"
        path.write_text(
            json.dumps({"actions": True, "outputs": [{"path": "a.js"}]}),
            encoding="utf-8",
        )
        result = load_manifest(path)
        assert result.is_valid is True
        assert result.manifest.outputs[0].path == "a.js"

    def test_missing_file(self, tmp_path):
        result = load_manifest(tmp_path / "nope.xml")
        assert result.is_valid is False
        assert result.manifest is None
        assert result.invalid_reason.startswith(INVALID_PREFIX)
        assert "File not found" in result.invalid_reason

    def test_malformed_xml(self, tmp_path):
        path = tmp_path / "map.xml"
        path.write_text("<assetpack><output></assetpack>", encoding="utf-8")
        result = load_manifest(path)
        assert result.is_valid is False
        assert "Parse error" in result.invalid_reason

    def test_schema_violation(self, tmp_path):
        path = tmp_path / "map.xml"
        path.write_text('<assetpack><output name="x" /></assetpack>', encoding="utf-8")
        result = load_manifest(path)
        assert result.is_valid is False
        assert "Validation error" in result.invalid_reason

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "map.toml"
        path.write_text("", encoding="utf-8")
        result = load_manifest(path)
        assert result.is_valid is False
        assert "Unsupported file extension" in result.invalid_reason

    def test_yaml_not_mapping(self, tmp_path):
        path = tmp_path / "map.yml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        result = load_manifest(path)
        assert result.is_valid is False
        assert "Expected a YAML mapping" in result.invalid_reason


def test_load_manifest_data_dispatch(tmp_path):
    """Should pick the parser from the extension, case-insensitively."""
    path = tmp_path / "MAP.JSON"
    path.write_text('{"outputs": []}', encoding="utf-8")
    assert load_manifest_data(path) == {"outputs": []}
