"""
src/data/store.py
─────────────────
In-memory state registry owned by a simulator instance.

Provides:
  - get_or_create() : lazy construction on the first tick of an unseen id
  - get() / put()   : direct access, used to seed scenarios

No locking: a registry is only touched by the single tick loop that owns it.
State does not survive a process restart.
"""
from __future__ import annotations

from collections.abc import Callable
from typing import Generic, TypeVar

T = TypeVar("T")


class StateRegistry(Generic[T]):
    def __init__(self) -> None:
        self._states: dict[str, T] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._states

    def __len__(self) -> int:
        return len(self._states)

    def get_or_create(self, key: str, factory: Callable[[str], T]) -> T:
        state = self._states.get(key)
        if state is None:
            state = factory(key)
            self._states[key] = state
        return state

    def get(self, key: str) -> T | None:
        return self._states.get(key)

    def put(self, key: str, state: T) -> None:
        self._states[key] = state
