"""Search chunks of a project."""

from typing import Optional

from ..storage import ChunkStore


def search_chunks(
    project: str,
    query: str,
    entity_type: Optional[str] = None,
    file_pattern: Optional[str] = None,
    include_vendored: bool = False,
    max_results: int = 10,
    storage_path: Optional[str] = None
) -> dict:
    """Search for chunks matching a query.

    Args:
        project: Project identifier (local/name or just name)
        query: Search query
        entity_type: Optional filter by entity type
        file_pattern: Optional glob pattern to filter files
        include_vendored: Also search vendored dependency code
        max_results: Maximum results to return
        storage_path: Custom storage path

    Returns:
        Dict with search results
    """
    store = ChunkStore(base_path=storage_path)
    resolved = store.resolve_project(project)
    if resolved is None:
        return {"error": f"Project not found: {project}"}
    owner, name = resolved

    index = store.load_index(owner, name)
    if not index:
        return {"error": f"Project not chunked: {owner}/{name}"}

    scored = index.search(
        query,
        entity_type=entity_type,
        file_pattern=file_pattern,
        include_vendored=include_vendored,
    )

    results = []
    for score, chunk in scored[:max_results]:
        meta = chunk.get("metadata", {})
        results.append({
            "id": chunk["id"],
            "entity_type": meta.get("entity_type"),
            "entity_name": meta.get("entity_name"),
            "package_name": meta.get("package_name"),
            "file_path": meta.get("file_path"),
            "is_vendored": meta.get("is_vendored", False),
            "accessed_symbols": meta.get("accessed_symbols", []),
            "score": score,
        })

    return {
        "project": f"{owner}/{name}",
        "query": query,
        "result_count": len(results),
        "results": results
    }
