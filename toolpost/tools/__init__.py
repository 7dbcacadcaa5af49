"""Tool configuration — load, validate, query, and serialize tools.json."""

from .models import ToolType, ToolSettings, ToolConfig, ToolConfigError
from .loader import load_tools, tools_from_dict, TOOLS_PATH
from .serialization import tools_to_dict, save_tools

__all__ = [
    # Models
    "ToolType", "ToolSettings", "ToolConfig", "ToolConfigError",
    # Loader
    "load_tools", "tools_from_dict", "TOOLS_PATH",
    # Serialization
    "tools_to_dict", "save_tools",
]
