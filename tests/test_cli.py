"""Tests for the go-chunk command line."""

import json

import pytest

from gochunk_mcp.cli import build_parser, main


def test_path_is_required(capsys):
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_cli_writes_chunks(go_project, tmp_path, capsys):
    root = go_project({
        "main.go": '''
            package main

            import "fmt"

            func Hello() {
                fmt.Println("hi")
            }
        ''',
    })
    output = tmp_path / "chunks.json"

    assert main(["--path", str(root), "--output", str(output)]) == 0

    out = capsys.readouterr().out
    assert f"Processing Go project at: {root.resolve()}" in out
    assert f"Successfully extracted 1 code chunks to {output}" in out
    data = json.loads(output.read_text(encoding="utf-8"))
    assert data[0]["metadata"]["entity_name"] == "Hello"


def test_cli_rejects_directory_without_go_mod(tmp_path, capsys):
    assert main(["--path", str(tmp_path)]) == 1
    assert "go.mod file not found" in capsys.readouterr().err


def test_cli_output_failure(go_project, tmp_path):
    root = go_project({"main.go": "package main\n\nfunc main() {}\n"})
    assert main(["--path", str(root), "--output", str(tmp_path / "missing" / "out.json")]) == 1
