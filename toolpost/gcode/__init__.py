"""
G-code post-processing for multi-tool printers.

Rewrites Simplify3D output so that each layer prints one island per
tool, tool changes use the firmware's change and priming macros, and
every tool is preheated just in time for its next use.

Submodules:
  line      Line model (lazy field parsing, command kind) and Position.
  layer     Layer model.
  errors    Conversion errors.
  progress  Progress callbacks.
  ingest    Phase 1 — read, clean and tag the source file.
  islands   Phase 2 — per-layer tool islands and tool change sequences.
  preheat   Phase 3 — backward time simulation and heater commands.
  emit      Phase 4 — serialize layers.
  pipeline  Orchestration (postprocess_gcode, process_stream).
"""

from .line import GCodeLine, CommandKind, Position, NO_TOOL
from .layer import GCodeLayer
from .errors import (
    ProcessorError, EmptyInputError, AlreadyProcessedError,
    UnsupportedSourceError, InvalidToolConfigurationError,
)
from .progress import Progress
from .ingest import ingest, IngestResult
from .islands import combine_islands, tool_change_sequence
from .preheat import schedule_preheat, PreheatSchedule
from .emit import emit
from .pipeline import postprocess_gcode, process_stream, process_layers, PostProcessResult

__all__ = [
    # Models
    "GCodeLine", "CommandKind", "Position", "NO_TOOL", "GCodeLayer",
    # Errors
    "ProcessorError", "EmptyInputError", "AlreadyProcessedError",
    "UnsupportedSourceError", "InvalidToolConfigurationError",
    # Phases
    "Progress", "ingest", "IngestResult", "combine_islands", "tool_change_sequence",
    "schedule_preheat", "PreheatSchedule", "emit",
    # Pipeline
    "postprocess_gcode", "process_stream", "process_layers", "PostProcessResult",
]
