"""Tool configuration loader — reads tools.json, parses and validates it."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from .models import ToolConfig, ToolConfigError

log = logging.getLogger("toolpost.tools.loader")

TOOLS_PATH = Path(__file__).resolve().parent.parent.parent / "configs" / "tools.json"


def _describe(exc: ValidationError) -> list[str]:
    problems = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"])
        problems.append(f"{loc}: {err['msg']}")
    return problems


def tools_from_dict(data: dict | list, source: str = "<dict>") -> ToolConfig:
    """Validate raw JSON data into a ToolConfig.

    Accepts either ``{"tools": [...]}`` or a bare list of tool records.
    """
    if isinstance(data, list):
        data = {"tools": data}
    try:
        config = ToolConfig.model_validate(data)
    except ValidationError as exc:
        raise ToolConfigError(source, _describe(exc)) from exc

    if not config.tools:
        raise ToolConfigError(source, ["tools: at least one tool is required"])
    return config


def load_tools(path: Path | None = None) -> ToolConfig:
    """Load and validate a tool configuration file.

    Raises ToolConfigError on read errors, malformed JSON or schema
    violations; the message lists every offending field.
    """
    p = Path(path) if path is not None else TOOLS_PATH
    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ToolConfigError(str(p), [f"Parse error: {exc}"]) from exc
    except OSError as exc:
        raise ToolConfigError(str(p), [f"Read error: {exc}"]) from exc

    config = tools_from_dict(raw, source=str(p))
    nozzles = sum(1 for t in config.tools if t.is_nozzle)
    log.info("Loaded %d tools (%d nozzles) from %s", len(config), nozzles, p)
    return config
