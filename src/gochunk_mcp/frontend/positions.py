"""Shared position index mapping integer positions to file/line/column."""

import bisect
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Position:
    """A resolved source position."""
    filename: str
    offset: int     # 0-based byte offset into the file
    line: int       # 1-based; 0 means invalid
    column: int     # 1-based byte column

    @property
    def is_valid(self) -> bool:
        return self.line > 0

    def __str__(self) -> str:
        if not self.is_valid:
            return self.filename or "-"
        return f"{self.filename}:{self.line}:{self.column}"


NO_POSITION = Position(filename="", offset=-1, line=0, column=0)


class TokenFile:
    """One registered file: its base position and line table."""

    def __init__(self, name: str, base: int, content: bytes):
        self.name = name
        self.base = base
        self.size = len(content)
        self._line_starts = [0]
        start = content.find(b"\n")
        while start != -1:
            self._line_starts.append(start + 1)
            start = content.find(b"\n", start + 1)

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def pos(self, offset: int) -> int:
        """Position of a byte offset in this file."""
        return self.base + offset

    def offset(self, pos: int) -> int:
        return pos - self.base

    def position(self, pos: int) -> Position:
        offset = pos - self.base
        if offset < 0 or offset > self.size:
            return Position(filename=self.name, offset=offset, line=0, column=0)
        idx = bisect.bisect_right(self._line_starts, offset) - 1
        return Position(
            filename=self.name,
            offset=offset,
            line=idx + 1,
            column=offset - self._line_starts[idx] + 1,
        )


class PositionIndex:
    """Position index shared by every file loaded in a run.

    Each file gets a contiguous range ``[base, base + size]``; the extra slot
    makes the end-of-file position valid, and bases start at 1 so that 0 is
    never a valid position.
    """

    def __init__(self):
        self._files: list[TokenFile] = []
        self._bases: list[int] = []
        self._next_base = 1

    def add_file(self, filename: str, content: bytes) -> TokenFile:
        token_file = TokenFile(filename, self._next_base, content)
        self._files.append(token_file)
        self._bases.append(token_file.base)
        self._next_base += token_file.size + 1
        return token_file

    def file(self, pos: int) -> Optional[TokenFile]:
        """The file containing ``pos``, or None."""
        idx = bisect.bisect_right(self._bases, pos) - 1
        if idx < 0:
            return None
        token_file = self._files[idx]
        if pos > token_file.base + token_file.size:
            return None
        return token_file

    def position(self, pos: int) -> Position:
        token_file = self.file(pos)
        if token_file is None:
            return NO_POSITION
        return token_file.position(pos)

    def files(self) -> list[TokenFile]:
        return list(self._files)

    def __len__(self) -> int:
        return len(self._files)
