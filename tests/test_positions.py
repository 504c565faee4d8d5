"""Tests for the shared position index."""

from gochunk_mcp.frontend.positions import PositionIndex


def test_positions_are_unique_across_files():
    """Each file gets its own range of positions."""
    index = PositionIndex()
    first = index.add_file("a.go", b"package a\n")
    second = index.add_file("b.go", b"package b\n")

    assert first.base == 1
    assert second.base == first.base + first.size + 1
    assert index.file(first.pos(3)) is first
    assert index.file(second.pos(3)) is second


def test_position_lines_and_columns():
    """Lines and columns are 1-based; offsets are 0-based."""
    index = PositionIndex()
    token_file = index.add_file("a.go", b"package a\n\nfunc F() {}\n")

    pos = index.position(token_file.pos(11))
    assert pos.filename == "a.go"
    assert pos.offset == 11
    assert pos.line == 3
    assert pos.column == 1

    start = index.position(token_file.pos(0))
    assert (start.line, start.column) == (1, 1)


def test_end_of_file_position_is_valid():
    """One past the last byte is still inside the file."""
    content = b"package a\n"
    index = PositionIndex()
    token_file = index.add_file("a.go", content)

    end = index.position(token_file.pos(len(content)))
    assert end.is_valid
    assert end.offset == len(content)
    assert end.line == 2


def test_unknown_position_is_invalid():
    """Positions outside every file resolve to an invalid position."""
    index = PositionIndex()
    index.add_file("a.go", b"package a\n")

    assert not index.position(0).is_valid
    assert not index.position(10_000).is_valid
