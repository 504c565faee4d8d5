"""Tests for storage module."""

import json

import pytest

from gochunk_mcp.chunker.chunks import Chunk, ChunkMetadata, FunctionDetail, ValueDetail
from gochunk_mcp.errors import ChunkOutputError
from gochunk_mcp.storage import ChunkIndex, ChunkStore, write_chunks_json
from gochunk_mcp.storage.chunk_store import chunk_to_dict


def _chunk(name, entity_type="function", symbols=(), vendored=False, detail=None, document=None):
    meta = ChunkMetadata(
        file_path="/src/app/main.go",
        package_name="main",
        is_vendored=vendored,
        entity_type=entity_type,
        entity_name=name,
        accessed_symbols=tuple(symbols),
        detail=detail if detail is not None else FunctionDetail(),
    )
    return Chunk(
        id=f"/src/app/main.go:1-3-{name}",
        document=document or f"func {name}() {{}}",
        meta=meta,
        start_line=1,
        end_line=3,
    )


def test_write_chunks_json(tmp_path):
    """Chunks are written as an indented array with sorted metadata keys."""
    output = tmp_path / "code_chunks.json"
    chunks = [
        _chunk("Hello", symbols=["fmt.Println"]),
        _chunk("port", entity_type="var", detail=ValueDetail(type="int"), document="port = 8080"),
    ]

    assert write_chunks_json(chunks, str(output)) == 2

    text = output.read_text(encoding="utf-8")
    assert text.startswith("[\n  {")
    data = json.loads(text)
    assert [d["id"] for d in data] == [c.id for c in chunks]
    assert list(data[0]["metadata"]) == sorted(data[0]["metadata"])
    assert data[0]["metadata"]["accessed_symbols"] == ["fmt.Println"]
    assert data[1]["metadata"]["type"] == "int"
    assert "receiver_type" not in data[0]["metadata"]


def test_write_empty_chunk_list(tmp_path):
    output = tmp_path / "out.json"
    assert write_chunks_json([], str(output)) == 0
    assert json.loads(output.read_text()) == []


def test_write_failure_raises(tmp_path):
    with pytest.raises(ChunkOutputError):
        write_chunks_json([_chunk("F")], str(tmp_path / "missing" / "out.json"))


def test_save_and_load_index(tmp_path):
    """Test saving and loading an index."""
    store = ChunkStore(base_path=str(tmp_path))
    chunks = [_chunk("Hello"), _chunk("port", entity_type="var", detail=ValueDetail())]

    index = store.save_index(owner="local", name="app", path="/src/app", chunks=chunks)

    assert index.project == "local/app"
    assert index.entity_counts == {"function": 1, "var": 1}

    loaded = store.load_index("local", "app")
    assert loaded is not None
    assert loaded.path == "/src/app"
    assert len(loaded.chunks) == 2
    assert loaded.chunks[0] == chunk_to_dict(chunks[0])


def test_load_missing_index(tmp_path):
    store = ChunkStore(base_path=str(tmp_path))
    assert store.load_index("local", "nothing") is None


def test_store_path_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("CODE_CHUNKS_PATH", str(tmp_path / "env-store"))
    store = ChunkStore()
    assert store.base_path == tmp_path / "env-store"
    assert store.base_path.is_dir()


def test_list_and_resolve_projects(tmp_path):
    """Test listing chunked projects."""
    store = ChunkStore(base_path=str(tmp_path))
    for name in ("alpha", "beta"):
        store.save_index(owner="local", name=name, path=f"/src/{name}", chunks=[_chunk("F")])
    (tmp_path / "broken.json").write_text("{not json")

    projects = store.list_projects()
    assert [p["project"] for p in projects] == ["local/alpha", "local/beta"]
    assert projects[0]["chunk_count"] == 1

    assert store.resolve_project("beta") == ("local", "beta")
    assert store.resolve_project("local/alpha") == ("local", "alpha")
    assert store.resolve_project("gamma") is None


def _index(chunks):
    return ChunkIndex(
        project="local/app",
        owner="local",
        name="app",
        path="/src/app",
        chunked_at="2025-01-15T10:00:00",
        entity_counts={},
        chunks=[chunk_to_dict(c) for c in chunks],
    )


def test_chunkindex_get_chunk():
    index = _index([_chunk("Hello"), _chunk("Bye")])

    chunk = index.get_chunk("/src/app/main.go:1-3-Hello")
    assert chunk is not None
    assert chunk["metadata"]["entity_name"] == "Hello"
    assert index.get_chunk("nonexistent") is None


def test_chunkindex_search():
    """Names outrank accessed symbols, and vendored code is opt-in."""
    index = _index([
        _chunk("Fetch", symbols=["net/http.Get"]),
        _chunk("Serve", symbols=["net/http.ListenAndServe"]),
        _chunk("*Client.Fetch", entity_type="method", detail=FunctionDetail(receiver_type="*Client")),
        _chunk("Get", symbols=["net/http.Get"], vendored=True),
    ])

    results = index.search("fetch")
    names = [c["metadata"]["entity_name"] for _, c in results]
    assert set(names[:2]) == {"Fetch", "*Client.Fetch"}
    assert "Get" not in names

    results = index.search("net/http.Get")
    assert [c["metadata"]["entity_name"] for _, c in results] == ["Fetch"]

    results = index.search("net/http.Get", include_vendored=True)
    assert {c["metadata"]["entity_name"] for _, c in results} == {"Fetch", "Get"}

    results = index.search("fetch", entity_type="method")
    assert [c["metadata"]["entity_name"] for _, c in results] == ["*Client.Fetch"]

    assert index.search("fetch", file_pattern="*.py") == []
    assert len(index.search("fetch", file_pattern="main.go")) == 2
