"""Fixtures for CLI tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

BROKEN_YAML = """\
records:
  - name: Broken
    table_name: broken
    fields:
      - {name: title, type: str}
"""


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Empty project directory used as --config-dir."""
    path = tmp_path / "project"
    path.mkdir()
    return path


@pytest.fixture
def broken_file(tmp_path: Path) -> Path:
    path = tmp_path / "broken.yaml"
    path.write_text(BROKEN_YAML)
    return path
