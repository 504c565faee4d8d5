"""Carve chunks out of loaded compilation units."""

import logging
import os
from dataclasses import dataclass, replace
from typing import Optional

from ..diagnostics import Diagnostics
from ..frontend.syntax import GO_GRAMMAR, field_child, iter_specs, node_text, spec_names
from .chunks import Chunk, ChunkMetadata, FunctionDetail, TypeDetail, ValueDetail, make_chunk_id
from .loader import resolve_vendor_path
from .resolver import accessed_symbols, type_text
from .rewriter import rewrite_qualifiers

logger = logging.getLogger(__name__)


@dataclass
class _Span:
    """A node's byte range and line range in its file."""
    start_offset: int
    end_offset: int
    start_line: int
    end_line: int


@dataclass
class _FileContext:
    """What every declaration of one file needs."""
    unit: object
    source_file: object
    content: bytes
    is_vendored: bool
    diagnostics: Diagnostics

    @property
    def path(self) -> str:
        return self.source_file.path

    @property
    def type_info(self):
        return self.unit.type_info


def is_vendored_path(file_path: str, abs_vendor_path: str) -> bool:
    return file_path.startswith(abs_vendor_path + os.sep)


def type_category(type_node) -> str:
    if type_node is not None and type_node.type == "struct_type":
        return "struct"
    if type_node is not None and type_node.type == "interface_type":
        return "interface"
    return "alias_or_basic"


def extract_chunks(units: list, project_root: str, diagnostics: Optional[Diagnostics] = None) -> list[Chunk]:
    """Extract chunks from every unit, in unit, file and declaration order.

    Units, files and declarations that cannot be processed are reported and
    skipped; chunks already produced are always kept.

    Raises:
        VendorPathError: if the vendor directory path cannot be resolved.
    """
    diagnostics = diagnostics if diagnostics is not None else Diagnostics(logger)
    abs_vendor_path = resolve_vendor_path(project_root)

    chunks: list[Chunk] = []
    for unit in units:
        if unit.type_info is None or not unit.files or unit.positions is None:
            diagnostics.warning(
                f"Skipping package {unit.id} due to missing type information, syntax trees, or position index.",
                logger=logger,
                package=unit.id,
            )
            continue
        try:
            chunks.extend(_process_unit(unit, abs_vendor_path, diagnostics))
        except Exception as e:
            diagnostics.error(f"Error processing package {unit.id}: {e}", logger=logger, package=unit.id)
    return chunks


def _process_unit(unit, abs_vendor_path: str, diagnostics: Diagnostics) -> list[Chunk]:
    chunks = []
    for source_file in unit.files:
        try:
            with open(source_file.path, "rb") as f:
                content = f.read()
        except OSError as e:
            diagnostics.error(f"Error reading file {source_file.path}: {e}", logger=logger, file=source_file.path)
            continue

        ctx = _FileContext(
            unit=unit,
            source_file=source_file,
            content=content,
            is_vendored=is_vendored_path(source_file.path, abs_vendor_path),
            diagnostics=diagnostics,
        )
        for decl in source_file.declarations():
            try:
                chunks.extend(_process_declaration(ctx, decl))
            except Exception as e:
                line = decl.start_point[0] + 1
                diagnostics.error(
                    f"Error processing declaration in {ctx.path} (line {line}): "
                    f"start={decl.start_byte}, end={decl.end_byte}: {e}. Skipping declaration.",
                    logger=logger,
                    file=ctx.path,
                    line=line,
                    start=decl.start_byte,
                    end=decl.end_byte,
                )
    return chunks


def _resolve_span(ctx: _FileContext, node, what: str) -> Optional[_Span]:
    """Byte and line range of ``node``, or None (reported) if out of bounds."""
    positions = ctx.unit.positions
    start = positions.position(ctx.source_file.pos(node))
    end = positions.position(ctx.source_file.end(node))
    size = len(ctx.content)
    if not (0 <= start.offset <= end.offset <= size) or not start.is_valid or not end.is_valid:
        ctx.diagnostics.warning(
            f"Invalid offsets for {what} in {ctx.path} (line {start.line}): "
            f"start={start.offset}, end={end.offset}, file_len={size}. Skipping {what}.",
            logger=logger,
            file=ctx.path,
            line=start.line,
            start=start.offset,
            end=end.offset,
        )
        return None
    return _Span(start.offset, end.offset, start.line, end.line)


def _slice(ctx: _FileContext, span: _Span) -> str:
    return ctx.content[span.start_offset:span.end_offset].decode("utf-8", errors="replace")


def _make_chunk(ctx: _FileContext, span: _Span, node, meta: ChunkMetadata) -> Chunk:
    document = rewrite_qualifiers(_slice(ctx, span), node, ctx.type_info)
    return Chunk(
        id=make_chunk_id(ctx.path, span.start_line, span.end_line, meta.entity_name),
        document=document,
        meta=meta,
        start_line=span.start_line,
        end_line=span.end_line,
        byte_offset=span.start_offset,
        byte_length=span.end_offset - span.start_offset,
    )


def _process_declaration(ctx: _FileContext, decl) -> list[Chunk]:
    kind = GO_GRAMMAR.declaration_node_types.get(decl.type)
    if kind is None or kind == "import":
        return []

    span = _resolve_span(ctx, decl, "declaration")
    if span is None:
        return []

    base = ChunkMetadata(
        file_path=ctx.path,
        package_name=ctx.unit.name,
        is_vendored=ctx.is_vendored,
        entity_type=kind,
        entity_name="",
        accessed_symbols=tuple(accessed_symbols(decl, ctx.type_info)),
    )

    if kind in ("function", "method"):
        chunk = _function_chunk(ctx, decl, span, base)
        return [chunk] if chunk is not None else []
    return _spec_chunks(ctx, decl, kind, base)


def _function_chunk(ctx: _FileContext, decl, span: _Span, base: ChunkMetadata) -> Optional[Chunk]:
    name_node = field_child(decl, "name")
    if name_node is None:
        ctx.diagnostics.warning(
            f"Function without a name in {ctx.path} (line {span.start_line}). Skipping declaration.",
            logger=logger,
            file=ctx.path,
            line=span.start_line,
        )
        return None
    name = node_text(name_node)

    receiver_type = None
    receiver = field_child(decl, "receiver")
    receiver_params = (
        [c for c in receiver.named_children if c.type == "parameter_declaration"]
        if receiver is not None else []
    )
    if receiver_params:
        receiver_type = type_text(field_child(receiver_params[0], "type"), ctx.type_info)

    if receiver_type is not None:
        meta = replace(
            base,
            entity_type="method",
            entity_name=f"{receiver_type}.{name}",
            detail=FunctionDetail(receiver_type=receiver_type),
        )
    else:
        meta = replace(base, entity_type="function", entity_name=name, detail=FunctionDetail())
    return _make_chunk(ctx, span, decl, meta)


def _spec_chunks(ctx: _FileContext, decl, kind: str, base: ChunkMetadata) -> list[Chunk]:
    chunks = []
    for spec in iter_specs(decl):
        span = _resolve_span(ctx, spec, "spec")
        if span is None:
            continue
        if kind == "type":
            meta = _type_metadata(spec, base)
        else:
            meta = _value_metadata(ctx, spec, kind, base)
        chunks.append(_make_chunk(ctx, span, spec, meta))
    return chunks


def _type_metadata(spec, base: ChunkMetadata) -> ChunkMetadata:
    return replace(
        base,
        entity_type="type",
        entity_name=node_text(field_child(spec, "name")),
        detail=TypeDetail(type_category=type_category(field_child(spec, "type"))),
    )


def _value_metadata(ctx: _FileContext, spec, kind: str, base: ChunkMetadata) -> ChunkMetadata:
    names = [node_text(n) for n in spec_names(spec)]

    declared_type = None
    type_node = field_child(spec, "type")
    values = field_child(spec, "value")
    if type_node is not None:
        declared_type = type_text(type_node, ctx.type_info)
    elif values is not None:
        initializers = [c for c in values.named_children if c.type != "comment"]
        if initializers and ctx.type_info is not None:
            declared_type = ctx.type_info.type_of(initializers[0])

    return replace(
        base,
        entity_type=kind,
        entity_name=", ".join(names),
        detail=ValueDetail(type=declared_type),
    )
