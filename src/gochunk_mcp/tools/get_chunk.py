"""Get stored chunks."""

from typing import Optional

from ..storage import ChunkStore


def _load(project: str, storage_path: Optional[str]):
    store = ChunkStore(base_path=storage_path)
    resolved = store.resolve_project(project)
    if resolved is None:
        return None, {"error": f"Project not found: {project}"}
    owner, name = resolved
    index = store.load_index(owner, name)
    if not index:
        return None, {"error": f"Project not chunked: {owner}/{name}"}
    return index, None


def get_chunk(project: str, chunk_id: str, storage_path: Optional[str] = None) -> dict:
    """Get one chunk by ID.

    Args:
        project: Project identifier (local/name or just name)
        chunk_id: Chunk ID from search_chunks
        storage_path: Custom storage path

    Returns:
        Dict with the chunk's id, document and metadata
    """
    index, error = _load(project, storage_path)
    if error:
        return error

    chunk = index.get_chunk(chunk_id)
    if not chunk:
        return {"error": f"Chunk not found: {chunk_id}"}
    return chunk


def get_chunks(project: str, chunk_ids: list[str], storage_path: Optional[str] = None) -> dict:
    """Get several chunks in one call.

    Returns:
        Dict with chunks list and any errors
    """
    index, error = _load(project, storage_path)
    if error:
        return error

    chunks = []
    errors = []
    for chunk_id in chunk_ids:
        chunk = index.get_chunk(chunk_id)
        if not chunk:
            errors.append({"id": chunk_id, "error": f"Chunk not found: {chunk_id}"})
            continue
        chunks.append(chunk)

    return {
        "chunks": chunks,
        "errors": errors
    }
