import threading

import pytest

from nelly.state import ExecutionState


def test_new_state_is_empty():
    state = ExecutionState()
    assert state.variables == {}
    assert state.current_repo == ""
    assert state.current_branch == ""


def test_set_then_get_round_trip():
    state = ExecutionState()
    state.set_var("answer", 42.0)
    assert state.get_var("answer") == 42.0


def test_set_var_overwrites_previous_value():
    state = ExecutionState()
    state.set_var("x", "first")
    state.set_var("x", "second")
    assert state.get_var("x") == "second"
    assert state.variables == {"x": "second"}


def test_get_missing_var_raises_key_error():
    state = ExecutionState()
    with pytest.raises(KeyError):
        state.get_var("missing")


def test_set_repo_and_branch():
    state = ExecutionState()
    state.set_repo("https://example.com/repo.git")
    state.set_branch("main")
    assert state.current_repo == "https://example.com/repo.git"
    assert state.current_branch == "main"


def test_states_compare_by_content():
    first = ExecutionState()
    second = ExecutionState()
    first.set_var("a", [1, 2])
    second.set_var("a", [1, 2])
    assert first == second


def test_concurrent_set_var_keeps_every_binding():
    state = ExecutionState()
    names = [f"v{n}" for n in range(50)]

    def worker(name):
        state.set_var(name, name.upper())

    threads = [threading.Thread(target=worker, args=(name,)) for name in names]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(state.variables) == sorted(names)
    assert all(state.get_var(name) == name.upper() for name in names)