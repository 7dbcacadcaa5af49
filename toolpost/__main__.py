"""
toolpost — entry point.

Usage:
    python -m toolpost process INPUT [OUTPUT]
    python -m toolpost process INPUT --tools configs/tools.json --save-tools
    python -m toolpost process INPUT -v      # debug logging incl. progress
"""

import logging
import sys
from pathlib import Path

USAGE = "Usage: python -m toolpost process INPUT [OUTPUT] [--tools PATH] [--save-tools] [-v]"

log = logging.getLogger("toolpost")


def _default_output(input_path: Path) -> Path:
    return input_path.with_name(f"{input_path.stem}_processed{input_path.suffix}")


def _progress_logger():
    from toolpost.gcode import Progress

    state = {"total": 0}

    def total(value: int) -> None:
        state["total"] = value

    def advance(value: int) -> None:
        if state["total"]:
            log.debug("progress %d/%d", value, state["total"])

    return Progress(total=total, advance=advance)


def process(args: list[str]) -> int:
    from toolpost.gcode import ProcessorError, postprocess_gcode
    from toolpost.tools import ToolConfigError, load_tools, save_tools, TOOLS_PATH

    positional: list[str] = []
    tools_path = TOOLS_PATH
    save = False
    i = 0
    while i < len(args):
        a = args[i]
        if a == "--tools" and i + 1 < len(args):
            tools_path = Path(args[i + 1])
            i += 1
        elif a == "--save-tools":
            save = True
        elif a in ("-v", "--verbose"):
            pass
        elif a.startswith("-"):
            print(f"Unknown option: {a}")
            print(USAGE)
            return 2
        else:
            positional.append(a)
        i += 1

    if not positional or len(positional) > 2:
        print(USAGE)
        return 2

    input_path = Path(positional[0])
    output_path = Path(positional[1]) if len(positional) > 1 else _default_output(input_path)

    try:
        tools = load_tools(tools_path)
        result = postprocess_gcode(input_path, output_path, tools, _progress_logger())
    except (ProcessorError, ToolConfigError) as exc:
        log.error("%s", exc)
        return 1
    except OSError as exc:
        log.error("Cannot read or write G-code: %s", exc)
        return 1

    for stage in result.stages:
        print(f"  {stage}")

    if save:
        save_tools(tools, tools_path)
        log.info("Saved tool settings to %s", tools_path)
    return 0


def main():
    args = sys.argv[1:]
    verbose = "-v" in args or "--verbose" in args
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    cmd = args[0] if args else ""
    if cmd == "process":
        sys.exit(process(args[1:]))
    else:
        if cmd:
            print(f"Unknown command: {cmd}")
        print(USAGE)
        sys.exit(1)


if __name__ == "__main__":
    main()
