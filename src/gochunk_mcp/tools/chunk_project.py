"""Chunk a local Go project tool - load, extract, save."""

from pathlib import Path
from typing import Optional

from ..chunker import extract_chunks, load_project
from ..diagnostics import Diagnostics
from ..errors import ChunkerError
from ..frontend.packages import GO_MOD_FILE
from ..storage import ChunkStore


# Warnings included in a tool response
MAX_REPORTED_WARNINGS = 50


def validate_project_path(path: str) -> tuple[Optional[Path], Optional[str]]:
    """Resolve a project root; returns ``(path, None)`` or ``(None, error)``."""
    project_path = Path(path).expanduser().resolve()

    if not project_path.exists():
        return None, f"Project path does not exist: {path}"
    if not project_path.is_dir():
        return None, f"Project path is not a directory: {path}"
    if not (project_path / GO_MOD_FILE).is_file():
        return None, f"go.mod file not found in project path: {path}"
    return project_path, None


def chunk_project(path: str, storage_path: Optional[str] = None) -> dict:
    """Chunk a Go module and store the result.

    Args:
        path: Module root directory (absolute or relative, supports ~)
        storage_path: Custom storage path (default: ~/.code-chunks/)

    Returns:
        Dict with chunk counts and any warnings
    """
    project_path, error = validate_project_path(path)
    if error:
        return {"success": False, "error": error}

    diagnostics = Diagnostics()
    try:
        units = load_project(str(project_path), diagnostics)
        chunks = extract_chunks(units, str(project_path), diagnostics)

        owner = "local"
        name = project_path.name
        store = ChunkStore(base_path=storage_path)
        index = store.save_index(owner=owner, name=name, path=str(project_path), chunks=chunks)
    except ChunkerError as e:
        return {"success": False, "error": f"Chunking failed: {e}"}

    result = {
        "success": True,
        "project": index.project,
        "path": str(project_path),
        "chunked_at": index.chunked_at,
        "package_count": len(units),
        "chunk_count": len(chunks),
        "vendored_chunk_count": sum(1 for c in chunks if c.meta.is_vendored),
        "entity_counts": index.entity_counts,
    }

    warnings = diagnostics.messages("warning")
    if warnings:
        result["warnings"] = warnings[:MAX_REPORTED_WARNINGS]
        if len(warnings) > MAX_REPORTED_WARNINGS:
            result["note"] = f"{len(warnings) - MAX_REPORTED_WARNINGS} more warnings not shown"

    return result
