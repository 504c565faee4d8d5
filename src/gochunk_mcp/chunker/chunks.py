"""Chunk record and its per-entity-kind metadata."""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class FunctionDetail:
    """Extra metadata for functions and methods."""
    receiver_type: Optional[str] = None     # Set for methods only


@dataclass(frozen=True)
class TypeDetail:
    """Extra metadata for type bindings."""
    type_category: str                      # "struct" | "interface" | "alias_or_basic"


@dataclass(frozen=True)
class ValueDetail:
    """Extra metadata for const/var bindings."""
    type: Optional[str] = None              # Omitted from the output when None


EntityDetail = Union[FunctionDetail, TypeDetail, ValueDetail]


@dataclass(frozen=True)
class ChunkMetadata:
    """Metadata carried by every chunk."""
    file_path: str
    package_name: str
    is_vendored: bool
    entity_type: str                        # "function" | "method" | "type" | "const" | "var"
    entity_name: str
    accessed_symbols: tuple[str, ...] = ()
    detail: Optional[EntityDetail] = None

    def to_dict(self) -> dict:
        """Flatten to the open key/value mapping written to disk."""
        data = {
            "file_path": self.file_path,
            "package_name": self.package_name,
            "is_vendored": self.is_vendored,
            "entity_type": self.entity_type,
            "entity_name": self.entity_name,
            "accessed_symbols": list(self.accessed_symbols),
        }
        if isinstance(self.detail, FunctionDetail):
            if self.detail.receiver_type is not None:
                data["receiver_type"] = self.detail.receiver_type
        elif isinstance(self.detail, TypeDetail):
            data["type_category"] = self.detail.type_category
        elif isinstance(self.detail, ValueDetail):
            if self.detail.type is not None:
                data["type"] = self.detail.type
        return data


@dataclass(frozen=True)
class Chunk:
    """One extracted source fragment."""
    id: str                                 # "<file_path>:<start_line>-<end_line>-<entity_name>"
    document: str                           # Source text after qualifier rewriting
    meta: ChunkMetadata
    start_line: int = 0                     # 1-based
    end_line: int = 0                       # 1-based
    byte_offset: int = 0                    # Start byte in the source file
    byte_length: int = 0                    # Length of the unrewritten span

    @property
    def metadata(self) -> dict:
        return self.meta.to_dict()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "document": self.document,
            "metadata": self.metadata,
        }


def make_chunk_id(file_path: str, start_line: int, end_line: int, entity_name: str) -> str:
    """Generate a chunk ID.

    Format: {file_path}:{start_line}-{end_line}-{entity_name}
    Example: /src/app/main.go:12-20-*example.com/app.Server.Start
    """
    return f"{file_path}:{start_line}-{end_line}-{entity_name}"
