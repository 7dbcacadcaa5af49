"""Errors raised by the post-processor.  All of them abort the conversion."""

from __future__ import annotations


class ProcessorError(Exception):
    """Base class — the input cannot be converted."""


class EmptyInputError(ProcessorError):
    def __init__(self) -> None:
        super().__init__("File is empty")


class AlreadyProcessedError(ProcessorError):
    def __init__(self) -> None:
        super().__init__("File has been already processed")


class UnsupportedSourceError(ProcessorError):
    def __init__(self, first_line: str = "") -> None:
        self.first_line = first_line
        super().__init__("File was not generated by Simplify3D")


class InvalidToolConfigurationError(ProcessorError):
    """A tool-select references a configured tool that is not a nozzle."""

    def __init__(self, tool: int, line_number: int) -> None:
        self.tool = tool
        self.line_number = line_number
        super().__init__(
            f"Tool {tool} is not configured as a nozzle (see line {line_number})"
        )
