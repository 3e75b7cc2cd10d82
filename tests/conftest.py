"""Shared fixtures for assetpack tests."""

from pathlib import Path

import pytest

from assetpack.context import BuildContext


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Create a project directory with src/ and an empty manifest file."""
    (tmp_path / "src").mkdir()
    (tmp_path / "map.xml").write_text("<assetpack />", encoding="utf-8")
    return tmp_path


@pytest.fixture
def context(project: Path) -> BuildContext:
    """Build context rooted at the project fixture, actions enabled."""
    return BuildContext(
        manifest_path=project / "map.xml",
        source_root=project / "src",
        target_root=project / "dist",
        version="1.2.3.4",
        actions_enabled=True,
    )
