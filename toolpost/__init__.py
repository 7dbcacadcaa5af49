"""toolpost — rewrites Simplify3D G-code for firmware with automatic tool changes."""

__version__ = "0.3.0"
