"""
Ingest — first pass over a Simplify3D G-code file.

Reads the file once, front to back, and produces the in-memory layer
list the later phases rewrite:

  * checks the first line for the Simplify3D signature (or for a file
    that was already converted),
  * drops noise: ``; tool`` / ``; process`` descriptions, header echo
    comments, fan commands and extrusion before any tool is selected,
  * turns ``M104 S.. T..`` into ``G10`` offset-temperature commands and
    records active temperatures in the tool configuration,
  * swallows tool selects — the island combiner writes proper tool
    change sequences later — while tagging every kept line with the
    active tool and feed rate,
  * splits the file into layers at each ``; layer`` comment.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from typing import TextIO

from toolpost.config import PROCESSOR_RULES
from toolpost.tools import ToolConfig

from .errors import (
    AlreadyProcessedError,
    EmptyInputError,
    InvalidToolConfigurationError,
    UnsupportedSourceError,
)
from .layer import GCodeLayer
from .line import NO_TOOL, CommandKind, GCodeLine, Position, format_number
from .progress import NO_PROGRESS, Progress

log = logging.getLogger("toolpost.gcode.ingest")


@dataclass
class IngestResult:
    """Layers read from the source plus the final machine position."""

    layers: list[GCodeLayer]
    end_position: Position = field(default_factory=Position)
    lines_read: int = 0
    lines_dropped: int = 0


def _stream_size(stream: TextIO) -> int | None:
    """Byte length of a seekable stream, restoring its position."""
    try:
        if not stream.seekable():
            return None
        here = stream.tell()
        end = stream.seek(0, io.SEEK_END)
        stream.seek(here)
    except (OSError, ValueError):
        return None
    if isinstance(stream, io.StringIO):
        # StringIO positions count characters, not bytes
        return len(stream.getvalue().encode("utf-8", "surrogateescape"))
    return end


def check_signature(first_line: str | None) -> None:
    """Raise unless *first_line* opens an unprocessed Simplify3D file."""
    if first_line is None:
        raise EmptyInputError()
    if PROCESSOR_RULES.processed_marker in first_line:
        raise AlreadyProcessedError()
    if PROCESSOR_RULES.source_signature not in first_line:
        raise UnsupportedSourceError(first_line)


def _drop_comment(line: GCodeLine, layer: GCodeLayer, line_number: int) -> bool:
    text = line.content
    if text.startswith("; tool") or text.startswith("; process"):
        return True
    return (
        layer.number == 0
        and line_number > PROCESSOR_RULES.header_lines_kept
        and "layerHeight" not in text
    )


def ingest(
    stream: TextIO,
    tools: ToolConfig,
    progress: Progress = NO_PROGRESS,
    *,
    total_bytes: int | None = None,
) -> IngestResult:
    """Read *stream* into layers.

    Parameters
    ----------
    stream : TextIO
        The Simplify3D G-code, one command or comment per line.
    tools : ToolConfig
        Tool settings.  Active temperatures found in the file are written
        into it.
    progress : Progress
        Receives the byte length once, then the bytes consumed so far.
    total_bytes : int, optional
        Byte length to report when *stream* is not seekable.

    Raises
    ------
    EmptyInputError, AlreadyProcessedError, UnsupportedSourceError
        When the first line is missing or not a Simplify3D signature.
    InvalidToolConfigurationError
        When a tool select targets a configured tool that is not a nozzle.
    """
    raw = stream.readline()
    check_signature(raw if raw else None)

    size = total_bytes if total_bytes is not None else _stream_size(stream)
    progress.total(size or 0)

    feedrate = PROCESSOR_RULES.default_feedrate
    selected_tool = NO_TOOL
    position = Position()
    layer = GCodeLayer(0)
    layers: list[GCodeLayer] = []
    line_number = 1
    consumed = 0
    dropped = 0

    while raw:
        consumed += len(raw.encode("utf-8", "surrogateescape"))
        line = GCodeLine(raw.rstrip("\r\n"))
        keep = True
        kind = line.kind

        if kind is CommandKind.LAYER_MARKER:
            layers.append(layer)
            layer = GCodeLayer(layer.number + 1)
        elif kind is CommandKind.COMMENT:
            # Keep the first two header lines, drop the S3D process
            # description and the "; tool" / "; process" lines.
            keep = not _drop_comment(line, layer, line_number)
        elif kind is CommandKind.MOTION:
            position.update_from(line)
            if line.has("E") and selected_tool == NO_TOOL:
                # Priming moves emitted before any tool is active
                keep = False
            f = line.get_float("F")
            if f is not None:
                feedrate = f / 60.0
        elif kind is CommandKind.OFFSET_TEMPERATURE:
            p = line.get_int("P")
            s = line.get_float("S")
            if tools.in_range(p) and s is not None:
                tools.get(p).active_temperature = s
        elif kind is CommandKind.FAN:
            keep = False
        elif kind is CommandKind.TEMPERATURE_SET:
            s = line.get_float("S")
            t = line.get_int("T")
            if s is not None and tools.in_range(t):
                tool = tools.get(t)
                if tool.active_temperature <= 0:
                    tool.active_temperature = s
                    text = (f"G10 P{t} R{format_number(tool.standby_temperature)} "
                            f"S{format_number(tool.active_temperature)}")
                else:
                    text = f"G10 P{t} S{format_number(s)}"
                layer.add_line(text, tool=selected_tool, feedrate=feedrate)
                keep = False
        elif kind is CommandKind.TOOL_SELECT:
            t = line.get_int("T")
            if tools.in_range(t):
                if not tools.is_nozzle(t):
                    raise InvalidToolConfigurationError(t, line_number)
                # Tool change sequences are written by the island combiner
                selected_tool = t
                keep = False
            else:
                selected_tool = NO_TOOL

        if keep:
            line.tool = selected_tool
            line.feedrate = feedrate
            layer.add_line(line)
        else:
            dropped += 1

        progress.advance(consumed)
        raw = stream.readline()
        line_number += 1

    layers.append(layer)

    log.info(
        "Ingested %d lines into %d layers (%d dropped), final position (%.3f, %.3f, %.3f)",
        line_number - 1, len(layers), dropped, position.x, position.y, position.z,
    )
    return IngestResult(
        layers=layers,
        end_position=position,
        lines_read=line_number - 1,
        lines_dropped=dropped,
    )
