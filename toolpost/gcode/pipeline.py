"""
Post-processing pipeline — the single entry point for a conversion.

Runs the phases in order, each taking the layer list from the previous
one:

1. ingest     — read, clean and tag the Simplify3D file
2. islands    — regroup each layer by tool, insert tool changes
3. preheat    — schedule heater commands by backward time estimate
4. emit       — write the result

Nothing is written to the output path unless every phase succeeds.
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from toolpost.tools import ToolConfig

from .emit import emit
from .ingest import ingest
from .islands import combine_islands
from .layer import GCodeLayer
from .preheat import schedule_preheat
from .progress import NO_PROGRESS, Progress

log = logging.getLogger("toolpost.gcode.pipeline")


@dataclass
class PostProcessResult:
    """Output of the post-processing step."""

    output_path: Path | None
    total_layers: int
    total_lines: int
    preheat_insertions: int = 0
    preheat_removals: int = 0
    fallback_tools: list[int] = field(default_factory=list)
    stages: list[str] = field(default_factory=list)


def process_layers(
    source: TextIO,
    tools: ToolConfig,
    progress: Progress = NO_PROGRESS,
) -> tuple[list[GCodeLayer], PostProcessResult]:
    """Run ingest, island combination and preheat scheduling on *source*."""
    stages: list[str] = []

    ingested = ingest(source, tools, progress)
    stages.append(
        f"Read {ingested.lines_read} lines into {len(ingested.layers)} layers "
        f"({ingested.lines_dropped} dropped or rewritten)"
    )

    layers = combine_islands(ingested.layers, tools, progress)
    stages.append(f"Combined tool islands in {max(len(layers) - 1, 0)} layers")

    schedule = schedule_preheat(layers, tools, ingested.end_position, progress)
    layers = schedule.layers
    stages.append(
        f"Preheat: {schedule.inserted} heater commands inserted, "
        f"{schedule.removed} standby commands removed"
    )
    if schedule.fallback_tools:
        stages.append(
            "Heating from file start (not enough time to preheat): "
            + ", ".join(f"T{t}" for t in schedule.fallback_tools)
        )

    result = PostProcessResult(
        output_path=None,
        total_layers=len(layers),
        total_lines=sum(len(layer) for layer in layers),
        preheat_insertions=schedule.inserted,
        preheat_removals=schedule.removed,
        fallback_tools=schedule.fallback_tools,
        stages=stages,
    )
    return layers, result


def process_stream(
    source: TextIO,
    sink: TextIO,
    tools: ToolConfig,
    progress: Progress = NO_PROGRESS,
) -> PostProcessResult:
    """Convert *source* into *sink*.  Both are open text streams."""
    layers, result = process_layers(source, tools, progress)
    result.total_lines = emit(layers, sink, progress)
    return result


def postprocess_gcode(
    input_path: Path,
    output_path: Path,
    tools: ToolConfig,
    progress: Progress = NO_PROGRESS,
) -> PostProcessResult:
    """Convert the file at *input_path* and write it to *output_path*.

    The output is first written to a temporary file next to
    *output_path* and renamed into place on success, so a failed
    conversion never leaves a partial file behind.

    Raises
    ------
    ProcessorError
        If the input is empty, already processed, not from Simplify3D,
        or selects a tool that is not a nozzle.
    """
    input_path = Path(input_path)
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    log.info("Post-processing %s → %s", input_path, output_path)
    with open(input_path, "r", encoding="utf-8", errors="surrogateescape", newline="") as src:
        layers, result = process_layers(src, tools, progress)

    fd, tmp_name = tempfile.mkstemp(
        prefix=output_path.name + ".", suffix=".tmp", dir=output_path.parent,
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8", errors="surrogateescape", newline="\n") as sink:
            result.total_lines = emit(layers, sink, progress)
        os.replace(tmp_name, output_path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    result.output_path = output_path
    result.stages.append(f"Wrote {result.total_lines} lines to {output_path}")
    log.info(
        "Post-processed G-code: %d layers, %d lines, %d preheats → %s",
        result.total_layers, result.total_lines, result.preheat_insertions, output_path,
    )
    return result
