"""Storage package for chunk output and the local chunk store."""

from .chunk_store import ChunkIndex, ChunkStore, DEFAULT_OUTPUT_FILE, write_chunks_json

__all__ = ["ChunkIndex", "ChunkStore", "DEFAULT_OUTPUT_FILE", "write_chunks_json"]
