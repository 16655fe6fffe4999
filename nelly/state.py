"""Mutable state shared by a running script and its commands."""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass
class ExecutionState:
    """Variables and repository context of a running script."""

    current_repo: str = ""
    current_branch: str = ""
    variables: dict[str, Any] = field(default_factory=dict)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    def set_var(self, name: str, value: Any) -> None:
        with self._lock:
            self.variables[name] = value

    def get_var(self, name: str) -> Any:
        """Return the value bound to ``name``; raise KeyError if unbound."""
        with self._lock:
            return self.variables[name]

    def set_repo(self, repo: str) -> None:
        self.current_repo = repo

    def set_branch(self, branch: str) -> None:
        self.current_branch = branch


CommandFunc = Callable[[ExecutionState, Mapping[str, str]], None]