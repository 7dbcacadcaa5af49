"""G-code line model — one command or comment plus its derived annotations.

A line keeps its raw text in ``content``.  Letter fields (``G1``,
``X12.5``, ``P2`` ...) are parsed lazily from the command part of the
text, i.e. everything before the first ``;``.  Reassigning ``content``
throws the cached parse away, so a rewritten line never reports fields
of its old text.

Each line also carries the tool that is active when it executes
(``-1`` = none) and the feed rate in mm/s at that point.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum, auto

from toolpost.config import PROCESSOR_RULES

NO_TOOL = -1

_INT_RE = re.compile(r"[-+]?\d+")
_FLOAT_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)")


class CommandKind(Enum):
    LAYER_MARKER = auto()
    COMMENT = auto()
    MOTION = auto()               # G0 / G1
    DWELL = auto()                # G4
    OFFSET_TEMPERATURE = auto()   # G10 P.. R.. S..
    FAN = auto()                  # M106
    TEMPERATURE_SET = auto()      # M104 S.. T..
    TOOL_SELECT = auto()          # Tn
    OTHER = auto()


_G_KINDS = {
    0: CommandKind.MOTION,
    1: CommandKind.MOTION,
    4: CommandKind.DWELL,
    10: CommandKind.OFFSET_TEMPERATURE,
}
_M_KINDS = {
    104: CommandKind.TEMPERATURE_SET,
    106: CommandKind.FAN,
}


class GCodeLine:
    """A single line of G-code."""

    __slots__ = ("_content", "_command", "_kind", "tool", "feedrate")

    def __init__(self, content: str, tool: int = NO_TOOL, feedrate: float = 0.0) -> None:
        self._content = content
        self._command: str | None = None
        self._kind: CommandKind | None = None
        self.tool = tool
        self.feedrate = feedrate

    @property
    def content(self) -> str:
        return self._content

    @content.setter
    def content(self, value: str) -> None:
        self._content = value
        self._command = None
        self._kind = None

    @property
    def is_comment(self) -> bool:
        return self._content.startswith(";")

    @property
    def command(self) -> str:
        """The command part of the line (text before the first ``;``)."""
        if self._command is None:
            self._command = self._content.split(";", 1)[0]
        return self._command

    def _field(self, letter: str, pattern: re.Pattern) -> str | None:
        idx = self.command.find(letter)
        if idx < 0:
            return None
        m = pattern.match(self.command, idx + 1)
        return m.group(0) if m else None

    def get_int(self, letter: str) -> int | None:
        raw = self._field(letter, _INT_RE)
        return int(raw) if raw is not None else None

    def get_float(self, letter: str) -> float | None:
        raw = self._field(letter, _FLOAT_RE)
        return float(raw) if raw is not None else None

    def has(self, letter: str) -> bool:
        return self._field(letter, _FLOAT_RE) is not None

    @property
    def kind(self) -> CommandKind:
        if self._kind is None:
            self._kind = self._classify()
        return self._kind

    def _classify(self) -> CommandKind:
        if self.is_comment:
            if self._content.startswith(PROCESSOR_RULES.layer_marker_prefix):
                return CommandKind.LAYER_MARKER
            return CommandKind.COMMENT

        g = self.get_int("G")
        if g is not None:
            return _G_KINDS.get(g, CommandKind.OTHER)
        m = self.get_int("M")
        if m is not None:
            return _M_KINDS.get(m, CommandKind.OTHER)
        if self.get_int("T") is not None:
            return CommandKind.TOOL_SELECT
        return CommandKind.OTHER

    @property
    def is_motion(self) -> bool:
        return self.kind is CommandKind.MOTION

    def __str__(self) -> str:
        return self._content

    def __repr__(self) -> str:
        return f"GCodeLine({self._content!r}, tool={self.tool}, feedrate={self.feedrate:g})"


@dataclass
class Position:
    """Cumulative machine position.  Axes not named by a move keep their value."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def update_from(self, line: GCodeLine) -> None:
        x = line.get_float("X")
        y = line.get_float("Y")
        z = line.get_float("Z")
        if x is not None:
            self.x = x
        if y is not None:
            self.y = y
        if z is not None:
            self.z = z

    def distance_to(self, other: Position) -> float:
        return math.sqrt(
            (self.x - other.x) ** 2 + (self.y - other.y) ** 2 + (self.z - other.z) ** 2
        )

    def assign(self, other: Position) -> None:
        self.x, self.y, self.z = other.x, other.y, other.z

    def copy(self) -> Position:
        return Position(self.x, self.y, self.z)


def format_number(value: float) -> str:
    """Render a temperature or parameter without a trailing ``.0``."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"
