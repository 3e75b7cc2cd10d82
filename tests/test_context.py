"""Tests for context.py module."""

import dataclasses

import pytest

from assetpack.context import (
    BuildContext,
    get_override,
    parse_bool,
    resolve_build_context,
)
from assetpack.errors import ArgumentInvalidError
from assetpack.manifest.schema import ManifestSchema


@pytest.fixture
def manifest_path(tmp_path):
    path = tmp_path / "web" / "map.xml"
    path.parent.mkdir()
    path.write_text("<assetpack />", encoding="utf-8")
    return path


class TestGetOverride:
    """Tests for get_override function."""

    def test_missing(self):
        assert get_override("src", None) == ""
        assert get_override("src", {}) == ""
        assert get_override("src", {"src": None}) == ""

    def test_trimmed(self):
        assert get_override("version", {"version": " 1.0 "}) == "1.0"


class TestParseBool:
    """Tests for parse_bool function."""

    def test_valid(self):
        assert parse_bool("true") is True
        assert parse_bool("False") is False

    def test_invalid(self):
        with pytest.raises(ArgumentInvalidError) as exc_info:
            parse_bool("sometimes")
        assert exc_info.value.code == "argument_invalid"
        assert '"true" or "false"' in exc_info.value.message


class TestResolveBuildContext:
    """Tests for resolve_build_context function."""

    def test_manifest_defaults(self, manifest_path):
        """Should resolve relative roots against the manifest directory."""
        manifest = ManifestSchema(
            src="scripts", target="../dist", version="1.2.3.4", actions=True
        )

        context = resolve_build_context(manifest_path, manifest)

        base = manifest_path.parent
        assert context.manifest_path == manifest_path.resolve()
        assert context.source_root == base.resolve() / "scripts"
        assert context.target_root == base.resolve().parent / "dist"
        assert context.version == "1.2.3.4"
        assert context.actions_enabled is True

    def test_hardcoded_default_directory(self, manifest_path):
        """Should fall back to the manifest directory itself."""
        context = resolve_build_context(manifest_path, ManifestSchema(actions=False))
        assert context.source_root == manifest_path.parent.resolve()
        assert context.target_root == manifest_path.parent.resolve()
        assert context.version == ""

    def test_overrides_win(self, manifest_path, tmp_path):
        manifest = ManifestSchema(
            src="scripts", target="dist", version="1.0", actions=True
        )
        overrides = {
            "src": str(tmp_path / "other"),
            "target": "out",
            "version": "2.0",
            "actions": "false",
        }

        context = resolve_build_context(manifest_path, manifest, overrides)

        assert context.source_root == tmp_path / "other"
        assert context.target_root == manifest_path.parent.resolve() / "out"
        assert context.version == "2.0"
        assert context.actions_enabled is False

    def test_empty_override_falls_back(self, manifest_path):
        manifest = ManifestSchema(version="1.0", actions=True)
        context = resolve_build_context(
            manifest_path, manifest, {"version": "  ", "actions": ""}
        )
        assert context.version == "1.0"
        assert context.actions_enabled is True

    def test_trailing_separator_stripped(self, manifest_path):
        context = resolve_build_context(
            manifest_path, ManifestSchema(src="scripts/", actions=False)
        )
        assert not str(context.source_root).endswith("/")
        assert context.source_root.name == "scripts"

    def test_invalid_actions_override(self, manifest_path):
        with pytest.raises(ArgumentInvalidError):
            resolve_build_context(
                manifest_path, ManifestSchema(actions=True), {"actions": "yes"}
            )

    def test_actions_required(self, manifest_path):
        """Should fail when neither manifest nor override sets actions."""
        with pytest.raises(ArgumentInvalidError) as exc_info:
            resolve_build_context(manifest_path, ManifestSchema())
        assert exc_info.value.key == "actions"

    def test_missing_manifest(self, tmp_path):
        with pytest.raises(ArgumentInvalidError, match="does not exist"):
            resolve_build_context(tmp_path / "nope.xml", ManifestSchema(actions=True))

    def test_context_is_immutable(self, manifest_path):
        context = resolve_build_context(manifest_path, ManifestSchema(actions=True))
        assert isinstance(context, BuildContext)
        with pytest.raises(dataclasses.FrozenInstanceError):
            context.version = "9"  # type: ignore[misc]
