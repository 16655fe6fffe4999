import pytest

from nelly.expr_eval import EvalError
from nelly.grammar import parse_script
from nelly.interpreter import (
    COMMANDS,
    InterpreterError,
    execute_program,
    execute_statement,
    register_default_commands,
)
from nelly.state import ExecutionState

HANDLED = ("clone", "checkout", "init", "createBranch", "track", "push", "deploy", "record")


@pytest.fixture
def commands():
    saved = dict(COMMANDS)
    COMMANDS.clear()
    yield COMMANDS
    COMMANDS.clear()
    COMMANDS.update(saved)


@pytest.fixture
def calls(commands):
    log = []

    def make(name):
        def handler(state, opts):
            log.append((name, dict(opts)))

        return handler

    for name in HANDLED:
        commands[name] = make(name)
    return log


def run(body, repo="myrepo", branch="main"):
    state = ExecutionState()
    execute_program(parse_script(f'repo "{repo}"\nbranch "{branch}"\n{body}\n'), state)
    return state


def test_register_default_commands(commands):
    register_default_commands()
    assert set(commands) == {"clone", "directory", "init", "createBranch", "track"}
    assert commands["directory"] is None


def test_default_local_header_fails_at_push(commands):
    register_default_commands()
    with pytest.raises(InterpreterError, match="git push failed: command not found: push"):
        run("")


def test_default_remote_header_fails_at_checkout(commands):
    register_default_commands()
    with pytest.raises(InterpreterError, match="git checkout failed: command not found: checkout"):
        run("", repo="https://example.com/project.git")


def test_local_header_steps(calls):
    state = run("let x = 1")
    assert state.get_var("x") == 1.0
    assert calls == [
        ("init", {"directory": "myrepo"}),
        ("createBranch", {"name": "main"}),
        ("track", {"name": "main"}),
        ("push", {}),
    ]


@pytest.mark.parametrize(
    "repo",
    ["https://example.com/project.git", "http://example.com/p.git", "git@example.com:p.git"],
)
def test_remote_header_steps(calls, repo):
    run("", repo=repo, branch="dev")
    assert calls == [("clone", {"url": repo}), ("checkout", {"name": "dev"})]


def test_header_failure_is_wrapped(calls, commands):
    def failing(state, opts):
        raise RuntimeError("boom")

    commands["init"] = failing
    with pytest.raises(InterpreterError, match="git init failed: boom") as info:
        run("")
    assert isinstance(info.value.__cause__, RuntimeError)


def test_unknown_command(calls):
    with pytest.raises(InterpreterError, match="unknown command: launch"):
        run("launch .now")


def test_command_without_handler(commands, calls):
    register_default_commands()
    with pytest.raises(InterpreterError, match="directory"):
        run('directory .path "x"')


def test_invalid_option_value(calls):
    with pytest.raises(InterpreterError, match="invalid value for option target"):
        run("deploy .target missing")


def test_let_binds_variable(calls):
    state = run('let greeting = "hi"')
    assert state.get_var("greeting") == "hi"


def test_for_runs_body_per_item(calls):
    state = run('for item in ["a", "b"] { record .value item }')
    assert [opts["value"] for name, opts in calls if name == "record"] == ["a", "b"]
    assert state.get_var("item") == "b"


def test_for_requires_list(calls):
    with pytest.raises(InterpreterError, match="for: range is not iterable"):
        run('for item in "abc" { record .value item }')


@pytest.mark.parametrize("condition, expected", [("1 < 2", "yes"), ("2 < 1", "no")])
def test_if_else(calls, condition, expected):
    state = run(f'if {condition} {{ let r = "yes" }} else {{ let r = "no" }}')
    assert state.get_var("r") == expected


def test_if_without_else_skips(calls):
    state = run('if false { let r = "yes" }')
    with pytest.raises(KeyError):
        state.get_var("r")


def test_if_requires_boolean(calls):
    with pytest.raises(InterpreterError, match="if: condition is not boolean"):
        run('if 1 { let r = "yes" }')


def test_expression_statement_errors_propagate(calls):
    with pytest.raises(EvalError, match="undefined variable: nothing"):
        run("print(nothing)")


def test_execute_statement_directly():
    program = parse_script('repo "r"\nbranch "b"\nlet n = 4\n')
    state = ExecutionState()
    execute_statement(program.statements[0], state)
    assert state.get_var("n") == 4.0