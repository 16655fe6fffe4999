"""Execution of parsed nelly scripts."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Optional

from nelly import gitcmd
from nelly.expr_eval import _format_value, evaluate
from nelly.grammar import CommandStmt, ExprStmt, ForStmt, IfStmt, LetStmt, Program, Statement
from nelly.state import CommandFunc, ExecutionState


class InterpreterError(Exception):
    """A script failed while it was running."""


COMMANDS: dict[str, Optional[CommandFunc]] = {}

_REMOTE_PREFIXES = ("http://", "https://", "git@")


def register_default_commands() -> None:
    """Install the built-in command handlers in ``COMMANDS``."""
    COMMANDS.update(
        {
            "clone": gitcmd.clone_command,
            "directory": None,
            "init": gitcmd.init_command,
            "createBranch": gitcmd.create_branch_command,
            "track": gitcmd.track_command,
        }
    )


def _handler(name: str, missing: str) -> CommandFunc:
    try:
        handler = COMMANDS[name]
    except KeyError:
        raise InterpreterError(f"{missing}: {name}") from None
    if handler is None:
        raise InterpreterError(f"command has no handler: {name}")
    return handler


def execute_program(program: Program, state: ExecutionState) -> None:
    """Set up the repository named in the header, then run every statement."""
    if program.repo is None:
        raise InterpreterError("no repo specified")
    if program.branch is None:
        raise InterpreterError("no branch specified")
    repo = program.repo.url.strip('"')
    branch = program.branch.name.strip('"')

    if repo.startswith(_REMOTE_PREFIXES):
        steps = [
            ("clone", {"url": repo}, "git clone failed"),
            ("checkout", {"name": branch}, "git checkout failed"),
        ]
    else:
        steps = [
            ("init", {"directory": repo}, "git init failed"),
            ("createBranch", {"name": branch}, "git create branch failed"),
            ("track", {"name": branch}, "git track branch failed"),
            ("push", {}, "git push failed"),
        ]

    for name, opts, failure in steps:
        try:
            _handler(name, "command not found")(state, opts)
        except Exception as exc:
            raise InterpreterError(f"{failure}: {exc}") from exc

    _execute_block(program.statements, state)


def _execute_block(statements: Iterable[Statement], state: ExecutionState) -> None:
    for statement in statements:
        execute_statement(statement, state)


def _execute_command(command: CommandStmt, state: ExecutionState) -> None:
    handler = _handler(command.name, "unknown command")
    opts: dict[str, str] = {}
    for option in command.options:
        if option.value is None:
            opts[option.name] = "true"
            continue
        try:
            value = evaluate(option.value, state)
        except Exception as exc:
            raise InterpreterError(f"invalid value for option {option.name}: {exc}") from exc
        opts[option.name] = _format_value(value)
    handler(state, opts)


def execute_statement(statement: Statement, state: ExecutionState) -> None:
    """Run a single statement against ``state``."""
    match statement:
        case LetStmt(name=name, value=value):
            state.set_var(name, evaluate(value, state))
        case CommandStmt():
            _execute_command(statement, state)
        case ForStmt(var=var, iterable=iterable, body=body):
            items = evaluate(iterable, state)
            if not isinstance(items, list):
                raise InterpreterError("for: range is not iterable")
            for item in items:
                state.set_var(var, item)
                _execute_block(body, state)
        case IfStmt(condition=condition, then=then, else_body=else_body):
            value = evaluate(condition, state)
            if not isinstance(value, bool):
                raise InterpreterError("if: condition is not boolean")
            if value:
                _execute_block(then, state)
            elif else_body is not None:
                _execute_block(else_body, state)
        case ExprStmt(expr=expr):
            evaluate(expr, state)