"""Chunk output: the JSON array writer and the local chunk-index store."""

import fnmatch
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..chunker.chunks import Chunk
from ..errors import ChunkOutputError


DEFAULT_OUTPUT_FILE = "code_chunks.json"
STORE_ENV_VAR = "CODE_CHUNKS_PATH"


def chunk_to_dict(chunk: Chunk) -> dict:
    """Serialize a chunk with its metadata keys sorted."""
    return {
        "id": chunk.id,
        "document": chunk.document,
        "metadata": dict(sorted(chunk.metadata.items())),
    }


def write_chunks_json(chunks: list[Chunk], filename: str = DEFAULT_OUTPUT_FILE) -> int:
    """Write chunks as a pretty-printed JSON array.

    Returns:
        Number of chunks written

    Raises:
        ChunkOutputError: if serialization or the write fails.
    """
    try:
        payload = json.dumps([chunk_to_dict(c) for c in chunks], indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise ChunkOutputError(f"error marshaling chunks to JSON: {e}") from e
    try:
        with open(filename, "w", encoding="utf-8") as f:
            f.write(payload)
    except OSError as e:
        raise ChunkOutputError(f"error writing JSON to file: {e}") from e
    return len(chunks)


@dataclass
class ChunkIndex:
    """Stored chunks of one project."""
    project: str                 # "local/<name>"
    owner: str
    name: str
    path: str                    # Absolute project root
    chunked_at: str              # ISO timestamp
    entity_counts: dict[str, int]
    chunks: list[dict]           # Serialized chunks

    def get_chunk(self, chunk_id: str) -> Optional[dict]:
        """Find a chunk by ID."""
        for chunk in self.chunks:
            if chunk.get("id") == chunk_id:
                return chunk
        return None

    def search(
        self,
        query: str,
        entity_type: Optional[str] = None,
        file_pattern: Optional[str] = None,
        include_vendored: bool = False,
    ) -> list[tuple[int, dict]]:
        """Search chunks with weighted scoring, best first."""
        query_lower = query.lower()
        query_words = set(query_lower.split())

        scored = []
        for chunk in self.chunks:
            meta = chunk.get("metadata", {})
            if entity_type and meta.get("entity_type") != entity_type:
                continue
            if not include_vendored and meta.get("is_vendored"):
                continue
            if file_pattern and not self._match_pattern(meta.get("file_path", ""), file_pattern):
                continue

            score = score_chunk(chunk, query_lower, query_words)
            if score > 0:
                scored.append((score, chunk))

        scored.sort(key=lambda x: x[0], reverse=True)
        return scored

    def _match_pattern(self, file_path: str, pattern: str) -> bool:
        return fnmatch.fnmatch(file_path, pattern) or fnmatch.fnmatch(file_path, f"*/{pattern}")


def score_chunk(chunk: dict, query_lower: str, query_words: set) -> int:
    """Calculate search score for a chunk."""
    score = 0
    meta = chunk.get("metadata", {})

    # 1. Entity name (highest weight); methods also match on the bare name
    name_lower = meta.get("entity_name", "").lower()
    short_name = name_lower.rsplit(".", 1)[-1]
    if query_lower in (name_lower, short_name):
        score += 20
    elif query_lower in name_lower:
        score += 10
    for word in query_words:
        if word in name_lower:
            score += 5

    # 2. Accessed symbols
    for symbol in meta.get("accessed_symbols", []):
        symbol_lower = symbol.lower()
        if query_lower in symbol_lower:
            score += 4
        for word in query_words:
            if word in symbol_lower:
                score += 1

    # 3. Declared type / receiver
    type_lower = (meta.get("type") or meta.get("receiver_type") or "").lower()
    if query_lower and query_lower in type_lower:
        score += 3

    # 4. Document text
    doc_lower = chunk.get("document", "").lower()
    if query_lower in doc_lower:
        score += 2
    for word in query_words:
        if word in doc_lower:
            score += 1

    return score


class ChunkStore:
    """Storage for chunk indexes, one JSON file per project."""

    def __init__(self, base_path: Optional[str] = None):
        """Initialize store.

        Args:
            base_path: Base directory for storage. Defaults to $CODE_CHUNKS_PATH
                or ~/.code-chunks/
        """
        base_path = base_path or os.environ.get(STORE_ENV_VAR)
        if base_path:
            self.base_path = Path(base_path)
        else:
            self.base_path = Path.home() / ".code-chunks"

        self.base_path.mkdir(parents=True, exist_ok=True)

    def _index_path(self, owner: str, name: str) -> Path:
        return self.base_path / f"{owner}-{name}.json"

    def save_index(self, owner: str, name: str, path: str, chunks: list[Chunk]) -> ChunkIndex:
        """Save a project's chunks, replacing any previous index."""
        from datetime import datetime

        entity_counts: dict[str, int] = {}
        for chunk in chunks:
            entity_type = chunk.meta.entity_type
            entity_counts[entity_type] = entity_counts.get(entity_type, 0) + 1

        index = ChunkIndex(
            project=f"{owner}/{name}",
            owner=owner,
            name=name,
            path=path,
            chunked_at=datetime.now().isoformat(),
            entity_counts=entity_counts,
            chunks=[chunk_to_dict(c) for c in chunks],
        )

        try:
            with open(self._index_path(owner, name), "w", encoding="utf-8") as f:
                json.dump(self._index_to_dict(index), f, indent=2)
        except OSError as e:
            raise ChunkOutputError(f"error writing chunk index: {e}") from e
        return index

    def load_index(self, owner: str, name: str) -> Optional[ChunkIndex]:
        index_path = self._index_path(owner, name)

        if not index_path.exists():
            return None

        with open(index_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        return ChunkIndex(
            project=data["project"],
            owner=data["owner"],
            name=data["name"],
            path=data["path"],
            chunked_at=data["chunked_at"],
            entity_counts=data["entity_counts"],
            chunks=data["chunks"],
        )

    def resolve_project(self, project: str) -> Optional[tuple[str, str]]:
        """``(owner, name)`` for "owner/name" or a bare project name."""
        if "/" in project:
            owner, name = project.split("/", 1)
            return owner, name
        matching = [p for p in self.list_projects() if p["project"].endswith(f"/{project}")]
        if not matching:
            return None
        owner, name = matching[0]["project"].split("/", 1)
        return owner, name

    def list_projects(self) -> list[dict]:
        projects = []

        for index_file in sorted(self.base_path.glob("*.json")):
            try:
                with open(index_file, "r", encoding="utf-8") as f:
                    data = json.load(f)
                projects.append({
                    "project": data["project"],
                    "path": data["path"],
                    "chunked_at": data["chunked_at"],
                    "chunk_count": len(data["chunks"]),
                    "entity_counts": data["entity_counts"],
                })
            except (OSError, ValueError, KeyError):
                continue

        return projects

    def _index_to_dict(self, index: ChunkIndex) -> dict:
        return {
            "project": index.project,
            "owner": index.owner,
            "name": index.name,
            "path": index.path,
            "chunked_at": index.chunked_at,
            "entity_counts": index.entity_counts,
            "chunks": index.chunks,
        }
