"""Shared constants for the post-processing pipeline.

The source signature and layer-marker prefix describe what Simplify3D
writes; the durations describe how long the machine spends on a tool
change.  Ingest, the island combiner and the preheat scheduler all read
from this single instance.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ProcessorRules:
    """Fixed parameters of the conversion.

    Feed rates are in mm/s, durations in seconds.
    """

    source_signature: str = "G-Code generated by Simplify3D(R)"
    """Text the first line must contain for the file to be accepted."""

    processed_marker: str = "Diabase"
    """Text identifying a file that has already been converted."""

    layer_marker_prefix: str = "; layer "
    """Comment prefix that opens a new layer."""

    default_feedrate: float = 3000.0 / 60.0
    """Feed rate assumed before the first F word (firmware default)."""

    header_lines_kept: int = 2
    """Leading layer-0 comment lines that always survive ingest."""

    tool_change_duration: float = 4.0
    tool_change_duration_with_cleaning: float = 10.0


PROCESSOR_RULES = ProcessorRules()
