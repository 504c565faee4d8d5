"""Chunking pipeline: load a Go corpus and carve declarations into chunks."""

from .chunks import Chunk, ChunkMetadata, FunctionDetail, TypeDetail, ValueDetail, make_chunk_id
from .loader import VENDOR_DIR_NAME, load_project, merge_units, resolve_vendor_path
from .resolver import accessed_symbols, signature_text, type_text
from .rewriter import apply_qualifier_replacements, discover_qualifiers, rewrite_qualifiers
from .extractor import extract_chunks

__all__ = [
    "Chunk",
    "ChunkMetadata",
    "FunctionDetail",
    "TypeDetail",
    "ValueDetail",
    "make_chunk_id",
    "VENDOR_DIR_NAME",
    "load_project",
    "merge_units",
    "resolve_vendor_path",
    "accessed_symbols",
    "signature_text",
    "type_text",
    "apply_qualifier_replacements",
    "discover_qualifiers",
    "rewrite_qualifiers",
    "extract_chunks",
]
