"""Tests for tools module."""

import pytest

from gochunk_mcp.tools.chunk_project import chunk_project, validate_project_path
from gochunk_mcp.tools.get_chunk import get_chunk, get_chunks
from gochunk_mcp.tools.list_projects import list_projects
from gochunk_mcp.tools.search_chunks import search_chunks


@pytest.fixture
def chunked(go_project, tmp_path):
    """A small module with one vendored dependency, chunked into a fresh store."""
    root = go_project({
        "main.go": '''
            package main

            import (
                "fmt"
                cfg "example.com/lib/config"
            )

            // Greet prints a greeting.
            func Greet(name string) {
                fmt.Println("hello", name, cfg.Load())
            }
        ''',
        "server/server.go": '''
            package server

            import "net/http"

            type Server struct {
                Addr string
            }

            func (s *Server) Start() error {
                return http.ListenAndServe(s.Addr, nil)
            }
        ''',
        "vendor/example.com/lib/config/config.go": '''
            package config

            func Load() string { return "" }
        ''',
    })
    storage = str(tmp_path / "store")
    result = chunk_project(str(root), storage_path=storage)
    return result, storage


def test_validate_project_path(go_project, tmp_path):
    root = go_project({"main.go": "package main\n"})

    path, error = validate_project_path(str(root))
    assert error is None
    assert path == root.resolve()

    path, error = validate_project_path(str(tmp_path / "missing"))
    assert path is None
    assert "does not exist" in error

    plain = tmp_path / "plain"
    plain.mkdir()
    path, error = validate_project_path(str(plain))
    assert path is None
    assert "go.mod" in error


def test_chunk_project(chunked):
    result, _ = chunked

    assert result["success"] is True
    assert result["project"] == "local/project"
    assert result["package_count"] == 3
    assert result["chunk_count"] == 4
    assert result["vendored_chunk_count"] == 1
    assert result["entity_counts"] == {"function": 2, "type": 1, "method": 1}
    assert "warnings" not in result


def test_chunk_project_invalid_path(tmp_path):
    result = chunk_project(str(tmp_path / "missing"), storage_path=str(tmp_path / "store"))
    assert result["success"] is False
    assert "does not exist" in result["error"]


def test_chunk_project_reports_warnings(go_project, tmp_path):
    root = go_project({"main.go": "package main\n\nfunc main() {}\n", "empty.go": ""})
    result = chunk_project(str(root), storage_path=str(tmp_path / "store"))

    assert result["success"] is True
    assert any("package' clause" in w for w in result["warnings"])


def test_list_projects(chunked):
    _, storage = chunked
    result = list_projects(storage_path=storage)

    assert result["count"] == 1
    assert result["projects"][0]["project"] == "local/project"
    assert result["projects"][0]["chunk_count"] == 4


def test_search_and_get_chunk(chunked):
    _, storage = chunked

    found = search_chunks("project", "ListenAndServe", storage_path=storage)
    assert found["result_count"] == 1
    hit = found["results"][0]
    assert hit["entity_name"] == "*example.com/app/server.Server.Start"
    assert hit["accessed_symbols"] == ["net/http.ListenAndServe"]

    chunk = get_chunk("local/project", hit["id"], storage_path=storage)
    assert chunk["metadata"]["receiver_type"] == "*example.com/app/server.Server"
    assert "http.ListenAndServe(s.Addr, nil)" in chunk["document"]


def test_search_excludes_vendored_by_default(chunked):
    _, storage = chunked

    assert search_chunks("project", "Load", entity_type="function", storage_path=storage)["results"][0]["entity_name"] == "Greet"

    found = search_chunks("project", "Load", include_vendored=True, storage_path=storage)
    names = [r["entity_name"] for r in found["results"]]
    assert names[0] == "Load"
    assert found["results"][0]["is_vendored"] is True


def test_rewritten_document_is_stored(chunked):
    _, storage = chunked
    found = search_chunks("project", "Greet", storage_path=storage)
    chunk = get_chunk("project", found["results"][0]["id"], storage_path=storage)

    assert "example.com/lib/config.Load()" in chunk["document"]
    assert chunk["metadata"]["accessed_symbols"] == ["example.com/lib/config.Load", "fmt.Println"]


def test_get_chunks_reports_missing_ids(chunked):
    _, storage = chunked
    found = search_chunks("project", "Server", storage_path=storage)
    ids = [r["id"] for r in found["results"]]

    result = get_chunks("project", ids + ["nope"], storage_path=storage)
    assert len(result["chunks"]) == len(ids)
    assert result["errors"] == [{"id": "nope", "error": "Chunk not found: nope"}]


def test_unknown_project(tmp_path):
    storage = str(tmp_path / "store")
    assert "error" in search_chunks("nothing", "x", storage_path=storage)
    assert "error" in get_chunk("nothing", "x", storage_path=storage)
