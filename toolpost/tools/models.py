"""Tool configuration models — typed representations of tools.json entries.

Tools are numbered from 1, matching the ``T`` and ``P`` words the
firmware expects.  The models are mutable on purpose: ingest records the
active temperatures it discovers in the source file.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class ToolType(str, Enum):
    NOZZLE = "nozzle"
    SPINDLE = "spindle"
    LASER = "laser"
    NONE = "none"


class ToolSettings(BaseModel):
    """Settings of one tool head."""

    type: ToolType = ToolType.NOZZLE
    active_temperature: float = Field(default=0.0, ge=0)
    standby_temperature: float = Field(default=0.0, ge=0)
    preheat_time: float = Field(default=0.0, ge=0)     # seconds
    auto_clean: bool = False

    @property
    def is_nozzle(self) -> bool:
        return self.type is ToolType.NOZZLE

    @property
    def preheats(self) -> bool:
        """True if this tool is heated ahead of use instead of waited on."""
        return self.preheat_time > 0


class ToolConfig(BaseModel):
    """Ordered tool list, indexed 1..N."""

    tools: list[ToolSettings] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.tools)

    def in_range(self, number: int | None) -> bool:
        return number is not None and 0 < number <= len(self.tools)

    def get(self, number: int) -> ToolSettings:
        """Return tool *number* (1-based).  Raises KeyError when out of range."""
        if not self.in_range(number):
            raise KeyError(f"Tool {number} is not configured (1..{len(self.tools)})")
        return self.tools[number - 1]

    def is_nozzle(self, number: int | None) -> bool:
        return self.in_range(number) and self.tools[number - 1].is_nozzle

    def numbers(self) -> range:
        return range(1, len(self.tools) + 1)


class ToolConfigError(Exception):
    """Raised when a tool configuration cannot be read or is invalid."""

    def __init__(self, source: str, problems: list[str]) -> None:
        self.source = source
        self.problems = problems
        super().__init__(f"Invalid tool configuration ({source}): " + "; ".join(problems))
