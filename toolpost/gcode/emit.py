"""Emit — serialize the final layers, one text line per G-code line."""

from __future__ import annotations

import logging
from typing import TextIO

from .layer import GCodeLayer
from .progress import NO_PROGRESS, Progress

log = logging.getLogger("toolpost.gcode.emit")


def emit(layers: list[GCodeLayer], sink: TextIO, progress: Progress = NO_PROGRESS) -> int:
    """Write every line of *layers* to *sink* in order.  Returns the line count."""
    progress.total(len(layers))
    written = 0
    for i, layer in enumerate(layers):
        for line in layer.lines:
            sink.write(line.content)
            sink.write("\n")
            written += 1
        progress.advance(i + 1)
    sink.flush()
    log.debug("Wrote %d lines in %d layers", written, len(layers))
    return written
