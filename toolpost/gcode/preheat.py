"""
Preheat scheduler — heats each tool back up just in time for its next use.

Walks the combined layers backwards, from the last line of the file to
the first line of layer 1, and estimates how much machine time passes
between each line and the next use of every parked tool.  Whenever a
tool is displaced (seen backwards: whenever the walk leaves an island
of that tool) a counter starts for it.  Once the counter has covered
the tool's preheat time, a ``G10 P<tool> R<active>`` is inserted there,
so the heater starts ramping exactly that long before the tool is
needed.

The time estimate only considers XYZ travel at the programmed feed
rate, dwells and a fixed cost per tool change.  Acceleration and the
extruder axis are ignored.

Tools whose counter never completes (not enough printing before their
next use) fall back to heating straight to active temperature from the
start of the file.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from toolpost.config import PROCESSOR_RULES
from toolpost.tools import ToolConfig

from .layer import GCodeLayer
from .line import CommandKind, GCodeLine, Position, format_number
from .progress import NO_PROGRESS, Progress

log = logging.getLogger("toolpost.gcode.preheat")


@dataclass
class PreheatSchedule:
    """Layers after scheduling plus what the scheduler changed."""

    layers: list[GCodeLayer]
    inserted: int = 0
    removed: int = 0
    fallback_tools: list[int] = field(default_factory=list)


def _change_duration(tools: ToolConfig, tool_number: int) -> float:
    if tools.get(tool_number).auto_clean:
        return PROCESSOR_RULES.tool_change_duration_with_cleaning
    return PROCESSOR_RULES.tool_change_duration


def _line_duration(line: GCodeLine, position: Position, previous: Position) -> float:
    """Seconds spent on *line*; moves update the two tracked positions."""
    kind = line.kind
    if kind is CommandKind.MOTION:
        previous.update_from(line)
        distance = position.distance_to(previous)
        position.assign(previous)
        if line.feedrate > 0.0:
            return distance / line.feedrate
        return 0.0
    if kind is CommandKind.DWELL:
        seconds = line.get_float("S")
        if seconds is not None:
            return seconds
        millis = line.get_int("P")
        if millis is not None:
            return millis / 1000.0
    return 0.0


def schedule_preheat(
    layers: list[GCodeLayer],
    tools: ToolConfig,
    end_position: Position | None = None,
    progress: Progress = NO_PROGRESS,
) -> PreheatSchedule:
    """Insert preheat commands into *layers* (modified in place and returned).

    Parameters
    ----------
    layers : list[GCodeLayer]
        Output of the island combiner.  Layer 0 is only touched by the
        start-of-file fallback.
    tools : ToolConfig
        Tool settings; tools with ``preheat_time == 0`` are never scheduled.
    end_position : Position, optional
        Machine position after the last move of the file (from ingest).
    """
    end = end_position or Position()
    position = end.copy()
    previous = end.copy()
    selected_tool: int | None = None
    counters: dict[int, float] = {}     # tool number -> seconds until next use
    schedule = PreheatSchedule(layers=layers)

    progress.total(max(len(layers) - 1, 0))

    for iteration, layer_index in enumerate(range(len(layers) - 1, 0, -1), start=1):
        lines = layers[layer_index].lines
        cursor = len(lines) - 1
        while cursor >= 0:
            line = lines[cursor]
            time_spent = 0.0

            if selected_tool is None:
                selected_tool = line.tool
            elif selected_tool != line.tool:
                if tools.in_range(selected_tool):
                    time_spent += _change_duration(tools, selected_tool)
                    if tools.get(selected_tool).preheats:
                        counters[selected_tool] = 0.0
                selected_tool = line.tool

            if counters:
                time_spent += _line_duration(line, position, previous)

                if line.kind is CommandKind.OFFSET_TEMPERATURE:
                    p = line.get_int("P")
                    if line.get_int("R") is not None and tools.in_range(p) and p in counters:
                        # Parked and reheated before the counter ran out:
                        # the standby command is superfluous
                        del lines[cursor]
                        schedule.removed += 1

                for tool_number in list(counters):
                    total = counters[tool_number] + time_spent
                    tool = tools.get(tool_number)
                    if total > tool.preheat_time:
                        # The layer marker stays the first line
                        lines.insert(max(cursor, 1), GCodeLine(
                            f"G10 P{tool_number} R{format_number(tool.active_temperature)}",
                            tool=line.tool,
                            feedrate=line.feedrate,
                        ))
                        del counters[tool_number]
                        schedule.inserted += 1
                        log.debug(
                            "Preheat T%d in layer %d (%.1f s before use)",
                            tool_number, layers[layer_index].number, total,
                        )
                    else:
                        counters[tool_number] = total

            cursor -= 1

        progress.advance(iteration)

    if counters and layers:
        schedule.fallback_tools = sorted(counters)
        _heat_from_start(layers[0], tools, set(counters))

    log.info(
        "Preheat scheduling: %d commands inserted, %d removed, fallback for %s",
        schedule.inserted, schedule.removed, schedule.fallback_tools or "no tools",
    )
    return schedule


def _heat_from_start(header: GCodeLayer, tools: ToolConfig, pending: set[int]) -> None:
    """Make the first G10 of each *pending* tool heat straight to active temperature."""
    for line in header.lines:
        if not pending:
            break
        if line.kind is not CommandKind.OFFSET_TEMPERATURE:
            continue
        p = line.get_int("P")
        if p in pending:
            active = format_number(tools.get(p).active_temperature)
            line.content = f"G10 P{p} R{active} S{active}"
            pending.discard(p)
