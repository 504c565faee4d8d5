"""Tests for package discovery and loading."""

import pytest

from gochunk_mcp.diagnostics import Diagnostics
from gochunk_mcp.errors import PackageLoadError
from gochunk_mcp.frontend.packages import LoadConfig, is_ignored, load_packages, should_skip_file
from gochunk_mcp.frontend.positions import PositionIndex


def _load(root, tests=False, diagnostics=None):
    config = LoadConfig(dir=str(root), positions=PositionIndex(), tests=tests)
    return load_packages(config, diagnostics if diagnostics is not None else Diagnostics())


def test_should_skip_file():
    """Only non-test, non-hidden .go files are loaded by default."""
    assert should_skip_file("main.go") is False
    assert should_skip_file("main_test.go") is True
    assert should_skip_file("main_test.go", tests=True) is False
    assert should_skip_file("_gen.go") is True
    assert should_skip_file(".hidden.go") is True
    assert should_skip_file("README.md") is True


def test_is_ignored():
    """An ignore build constraint before the package clause excludes a file."""
    assert is_ignored(b"//go:build ignore\n\npackage main\n") is True
    assert is_ignored(b"// +build ignore\n\npackage main\n") is True
    assert is_ignored(b"//go:build linux\n\npackage main\n") is False
    assert is_ignored(b"package main\n\n//go:build ignore\n") is False


def test_module_import_paths(go_project):
    """Import paths are the module path plus the package directory."""
    root = go_project({
        "main.go": "package main\n\nfunc main() {}\n",
        "internal/util/util.go": "package util\n\nfunc Do() {}\n",
    })
    units = _load(root)

    assert sorted(u.id for u in units) == ["example.com/app", "example.com/app/internal/util"]
    util = next(u for u in units if u.id.endswith("/util"))
    assert util.name == "util"
    assert util.type_info is not None
    assert util.go_files[0].endswith("util.go")


def test_skipped_directories_and_files(go_project):
    """testdata, vendor, hidden and nested-module directories are not walked."""
    root = go_project({
        "main.go": "package main\n\nfunc main() {}\n",
        "main_test.go": "package main\n\nfunc TestX() {}\n",
        "tool.go": "//go:build ignore\n\npackage main\n\nfunc Tool() {}\n",
        "testdata/fixture.go": "package fixture\n",
        "_scratch/scratch.go": "package scratch\n",
        ".cache/cache.go": "package cache\n",
        "nested/go.mod": "module example.com/nested\n",
        "nested/nested.go": "package nested\n",
    })
    units = _load(root)

    assert [u.id for u in units] == ["example.com/app"]
    assert [p.rsplit("/", 1)[-1] for p in units[0].go_files] == ["main.go"]


def test_tests_option_includes_test_files(go_project):
    root = go_project({
        "main.go": "package main\n\nfunc main() {}\n",
        "main_test.go": "package main\n\nfunc helper() {}\n",
    })
    units = _load(root, tests=True)

    assert len(units[0].files) == 2


def test_conflicting_package_clause_is_dropped(go_project):
    """The first file's package wins; the others become unit errors."""
    root = go_project({
        "a.go": "package alpha\n\nfunc A() {}\n",
        "b.go": "package beta\n\nfunc B() {}\n",
    })
    diagnostics = Diagnostics()
    units = _load(root, diagnostics=diagnostics)

    assert units[0].name == "alpha"
    assert len(units[0].files) == 1
    assert any("beta" in e for e in units[0].errors)
    assert any("beta" in m for m in diagnostics.messages())


def test_syntax_errors_are_recorded_but_kept(go_project):
    root = go_project({
        "main.go": "package main\n\nfunc Good() {}\n\nfunc Bad( {\n",
    })
    units = _load(root)

    assert len(units[0].files) == 1
    assert any("syntax error" in e for e in units[0].errors)


def test_vendored_imports_are_loaded_in_module_mode(go_project):
    """Vendored packages reached through imports join the module pass."""
    root = go_project({
        "main.go": '''
            package main

            import "example.com/lib/config"

            func main() { config.Load() }
        ''',
        "vendor/example.com/lib/config/config.go": '''
            package config

            import "example.com/lib/internal/env"

            func Load() string { return env.Get() }
        ''',
        "vendor/example.com/lib/internal/env/env.go": '''
            package env

            func Get() string { return "" }
        ''',
        "vendor/example.com/unused/unused.go": "package unused\n",
    })
    units = _load(root)

    assert [u.id for u in units] == [
        "example.com/app",
        "example.com/lib/config",
        "example.com/lib/internal/env",
    ]


def test_vendor_tree_import_paths(tmp_path):
    """Without go.mod, import paths are directories relative to the root."""
    vendor = tmp_path / "vendor"
    (vendor / "github.com/acme/log").mkdir(parents=True)
    (vendor / "github.com/acme/log/log.go").write_text("package log\n\nfunc Info() {}\n")
    (vendor / "modules.txt").write_text("# github.com/acme/log v1.0.0\n")

    units = _load(vendor)

    assert [u.id for u in units] == ["github.com/acme/log"]


def test_missing_root_raises(tmp_path):
    with pytest.raises(PackageLoadError) as excinfo:
        _load(tmp_path / "missing")
    assert excinfo.value.units == []


def test_directory_without_loadable_files_is_reported(go_project):
    """A directory whose only Go file cannot be loaded yields no unit and a warning."""
    root = go_project({
        "main.go": "package main\n\nfunc main() {}\n",
        "broken/empty.go": "",
    })
    diagnostics = Diagnostics()
    units = _load(root, diagnostics=diagnostics)

    assert [u.id for u in units] == ["example.com/app"]
    reported = [d for d in diagnostics.warnings if "No loadable Go files" in d.message]
    assert len(reported) == 1
    assert reported[0].context["directory"].endswith("broken")
    assert "empty.go" in reported[0].message
