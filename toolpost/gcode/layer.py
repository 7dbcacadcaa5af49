"""G-code layer model — an ordered, mutable run of lines."""

from __future__ import annotations

from typing import Iterator

from .line import GCodeLine, NO_TOOL


class GCodeLayer:
    """One print slice.

    Layer 0 holds the file header.  In every other layer the first line
    is the ``; layer`` marker comment that opened it.
    """

    def __init__(self, number: int, lines: list[GCodeLine] | None = None) -> None:
        self.number = number
        self.lines: list[GCodeLine] = lines if lines is not None else []

    def add_line(
        self,
        line: GCodeLine | str,
        tool: int = NO_TOOL,
        feedrate: float = 0.0,
    ) -> GCodeLine:
        if isinstance(line, str):
            line = GCodeLine(line, tool=tool, feedrate=feedrate)
        self.lines.append(line)
        return line

    @property
    def marker(self) -> GCodeLine | None:
        return self.lines[0] if self.lines else None

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self) -> Iterator[GCodeLine]:
        return iter(self.lines)

    def __repr__(self) -> str:
        return f"GCodeLayer({self.number}, {len(self.lines)} lines)"
