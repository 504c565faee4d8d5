"""Shared fixtures: small Go projects written to tmp_path."""

import textwrap
from pathlib import Path

import pytest

from gochunk_mcp.diagnostics import Diagnostics
from gochunk_mcp.frontend.packages import LoadConfig, load_packages
from gochunk_mcp.frontend.positions import PositionIndex


def write_files(root: Path, files: dict) -> None:
    for rel, text in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(text).lstrip("\n"), encoding="utf-8")


@pytest.fixture
def go_project(tmp_path):
    """Factory writing a Go module (go.mod + files) into tmp_path."""
    def make(files: dict, module: str = "example.com/app") -> Path:
        root = tmp_path / "project"
        root.mkdir(exist_ok=True)
        (root / "go.mod").write_text(f"module {module}\n\ngo 1.21\n", encoding="utf-8")
        write_files(root, files)
        return root
    return make


@pytest.fixture
def load_source(tmp_path):
    """Load a single-package module from one Go source and return its unit."""
    def load(source: str, module: str = "example.com/demo"):
        root = tmp_path / "single"
        root.mkdir(exist_ok=True)
        (root / "go.mod").write_text(f"module {module}\n", encoding="utf-8")
        write_files(root, {"main.go": source})
        units = load_packages(LoadConfig(dir=str(root), positions=PositionIndex()), Diagnostics())
        assert len(units) == 1
        return units[0]
    return load
