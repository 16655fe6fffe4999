"""Command-line entry point that runs a nelly script file."""

import sys
from pathlib import Path

from nelly.grammar import ParseError, parse_script
from nelly.interpreter import execute_program, register_default_commands
from nelly.state import ExecutionState


def main(argv=None) -> int:
    """Run the script named by the first argument; return the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        print("usage program script")
        return 1
    try:
        program = parse_script(Path(args[0]).read_text(encoding="utf-8", errors="replace"))
    except OSError as exc:
        print(f"could not read file: {exc}", file=sys.stderr)
        return 1
    except ParseError as exc:
        print(f"parse error: {exc}", file=sys.stderr)
        return 1
    register_default_commands()
    try:
        execute_program(program, ExecutionState())
    except Exception as exc:
        print(f"Runtime error: {exc}", file=sys.stderr)
    return 0