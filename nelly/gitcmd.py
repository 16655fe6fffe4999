"""Handlers for the repository commands a script can run."""

from __future__ import annotations

from collections.abc import Mapping

from nelly.state import ExecutionState


def clone_command(state: ExecutionState, opts: Mapping[str, str]) -> None:
    """Handle ``clone``: remember the cloned URL as the current repository."""
    if "url" in opts:
        state.set_repo(opts["url"])


def create_branch_command(state: ExecutionState, opts: Mapping[str, str]) -> None:
    """Handle ``createBranch``: remember the new branch as the current one."""
    if "name" in opts:
        state.set_branch(opts["name"])


def init_command(state: ExecutionState, opts: Mapping[str, str]) -> None:
    """Handle ``init``: remember the directory as the current repository."""
    if "directory" in opts:
        state.set_repo(opts["directory"])


def track_command(state: ExecutionState, opts: Mapping[str, str]) -> None:
    """Handle ``track``: remember the tracked branch as the current one."""
    if "name" in opts:
        state.set_branch(opts["name"])