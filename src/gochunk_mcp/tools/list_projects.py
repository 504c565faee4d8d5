"""List chunked projects."""

from typing import Optional

from ..storage import ChunkStore


def list_projects(storage_path: Optional[str] = None) -> dict:
    """List all chunked projects.

    Returns:
        Dict with count and list of projects
    """
    store = ChunkStore(base_path=storage_path)
    projects = store.list_projects()

    return {
        "count": len(projects),
        "projects": projects
    }
