"""Tool configuration serialization — JSON-safe dicts and file output."""

from __future__ import annotations

import json
from pathlib import Path

from .models import ToolConfig


def tools_to_dict(config: ToolConfig) -> dict:
    """Serialize a ToolConfig to a JSON-safe dict (same shape as tools.json)."""
    return config.model_dump(mode="json")


def save_tools(config: ToolConfig, path: Path) -> Path:
    """Write *config* to *path*, e.g. to keep active temperatures found during ingest."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(tools_to_dict(config), indent=2) + "\n", encoding="utf-8")
    return path
