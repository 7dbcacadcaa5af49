"""
Island combiner — regroups each layer into one contiguous block per tool.

Simplify3D switches tools whenever it likes inside a layer.  Every tool
change costs time (and possibly a priming/cleaning run), so each layer
after the header is rebuilt as tool islands in ascending tool order,
with exactly one tool change sequence where the active tool changes.
"""

from __future__ import annotations

import logging

from toolpost.tools import ToolConfig

from .layer import GCodeLayer
from .line import NO_TOOL, GCodeLine, format_number
from .progress import NO_PROGRESS, Progress

log = logging.getLogger("toolpost.gcode.islands")


def tool_change_sequence(
    tools: ToolConfig,
    previous_tool: int,
    next_tool: int,
    feedrate: float = 0.0,
) -> list[GCodeLine]:
    """Build the commands that switch from *previous_tool* to *next_tool*.

    A tool that is preheated ahead of time (positive preheat time) does
    not need to block on ``M116`` at the change; any other tool does.
    The previous tool is only parked at standby temperature when it
    will be preheated again later.
    """
    seq: list[str] = []

    if tools.in_range(previous_tool):
        old = tools.get(previous_tool)
        if old.preheats:
            seq.append(f"G10 P{previous_tool} R{format_number(old.standby_temperature)}")

    new = tools.get(next_tool)
    must_wait = previous_tool == NO_TOOL or not new.preheats
    if new.auto_clean:
        if must_wait:
            seq.append(f"T{next_tool} P0")
            seq.append(f"M116 P{next_tool}")
        seq.append(f'M98 P"tprime{next_tool}.g"')
    else:
        seq.append(f"T{next_tool}")
        if must_wait:
            seq.append(f"M116 P{next_tool}")

    return [GCodeLine(text, tool=next_tool, feedrate=feedrate) for text in seq]


def combine_islands(
    layers: list[GCodeLayer],
    tools: ToolConfig,
    progress: Progress = NO_PROGRESS,
) -> list[GCodeLayer]:
    """Rewrite every layer after layer 0 as tool islands.

    Lines tagged with a tool that is not a configured nozzle (including
    lines with no tool at all) are not carried into the rebuilt layer.
    The layer marker stays first and is re-tagged with the tool active
    when the layer starts.
    The active tool carries over from one layer to the next, so a layer
    that starts with the tool the previous one ended on gets no change
    sequence.
    """
    progress.total(max(len(layers) - 1, 0))

    current_tool = NO_TOOL
    changes = 0
    discarded = 0
    result = layers[:1]

    for iteration, layer in enumerate(layers[1:], start=1):
        replacement = GCodeLayer(layer.number)
        if layer.lines:
            # The marker runs before any island, i.e. with the tool the
            # previous layer ended on
            marker = layer.lines[0]
            marker.tool = current_tool
            replacement.add_line(marker)
        body = layer.lines[1:]

        for tool_number in tools.numbers():
            if not tools.is_nozzle(tool_number):
                continue
            for line in body:
                if line.tool != tool_number:
                    continue
                if current_tool != tool_number and line.is_motion:
                    replacement.lines.extend(
                        tool_change_sequence(tools, current_tool, tool_number, line.feedrate)
                    )
                    current_tool = tool_number
                    changes += 1
                replacement.add_line(line)

        discarded += sum(1 for line in body if not tools.is_nozzle(line.tool))
        result.append(replacement)
        progress.advance(iteration)

    log.info(
        "Combined %d layers into tool islands: %d tool changes, %d untagged lines dropped",
        len(layers) - 1, changes, discarded,
    )
    return result

