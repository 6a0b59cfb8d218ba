"""Bug Entity Store: an immutable board state, a pure reducer, and the single owner that holds it."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace

from bug_board_interface.board import FilterState
from bug_board_interface.bug import Bug

__all__ = [
    "AddBug",
    "BoardState",
    "BugStore",
    "ClearFilters",
    "DeleteBug",
    "SetBugs",
    "SetError",
    "SetFilters",
    "SetLoading",
    "UpdateBug",
    "reduce",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoardState:
    bugs: tuple[Bug, ...] = ()
    loading: bool = True
    error: str | None = None
    filters: FilterState = field(default_factory=FilterState)

    def find(self, bug_id: str) -> Bug | None:
        return next((bug for bug in self.bugs if bug.id == bug_id), None)


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SetBugs:
    bugs: tuple[Bug, ...]


@dataclass(frozen=True)
class AddBug:
    bug: Bug


@dataclass(frozen=True)
class UpdateBug:
    bug: Bug


@dataclass(frozen=True)
class DeleteBug:
    bug_id: str


@dataclass(frozen=True)
class SetLoading:
    loading: bool


@dataclass(frozen=True)
class SetError:
    message: str


@dataclass(frozen=True)
class SetFilters:
    changes: dict


@dataclass(frozen=True)
class ClearFilters:
    pass


def _unique(bugs: Iterable[Bug]) -> tuple[Bug, ...]:
    seen: set[str] = set()
    kept = []
    for bug in bugs:
        if bug.id in seen:
            continue
        seen.add(bug.id)
        kept.append(bug)
    return tuple(kept)


def _replace_in_place(bugs: tuple[Bug, ...], updated: Bug) -> tuple[Bug, ...]:
    return tuple(updated if bug.id == updated.id else bug for bug in bugs)


def reduce(state: BoardState, action: object) -> BoardState:
    """Return the state that results from applying ``action`` to ``state``.

    Re-applying the same successful response is a no-op: adds are insert-if-absent,
    updates replace by id, deletes remove by id.
    """
    if isinstance(action, SetBugs):
        return replace(state, bugs=_unique(action.bugs), loading=False, error=None)

    if isinstance(action, AddBug):
        if state.find(action.bug.id) is not None:
            #a replayed create response; keep position, take the newer record
            return replace(state, bugs=_replace_in_place(state.bugs, action.bug), error=None)
        return replace(state, bugs=(action.bug, *state.bugs), error=None)

    if isinstance(action, UpdateBug):
        return replace(state, bugs=_replace_in_place(state.bugs, action.bug), error=None)

    if isinstance(action, DeleteBug):
        return replace(state, bugs=tuple(bug for bug in state.bugs if bug.id != action.bug_id), error=None)

    if isinstance(action, SetLoading):
        return replace(state, loading=action.loading)

    if isinstance(action, SetError):
        return replace(state, error=action.message, loading=False)

    if isinstance(action, SetFilters):
        return replace(state, filters=state.filters.merge(**action.changes))

    if isinstance(action, ClearFilters):
        return replace(state, filters=FilterState())

    return state


class BugStore:
    """Owns the board state. Readers get immutable snapshots; only ``dispatch`` writes.

    After ``close()`` the store no longer accepts actions, so a response that
    arrives for a board that has gone away is dropped instead of applied.
    """

    def __init__(self, initial: BoardState | None = None) -> None:
        self._state = initial or BoardState()
        self._lock = threading.Lock()
        self._listeners: list[Callable[[BoardState], None]] = []
        self._closed = False

    @property
    def state(self) -> BoardState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    def dispatch(self, action: object) -> BoardState:
        with self._lock:
            if self._closed:
                logger.debug("Ignoring %s dispatched to a closed store", type(action).__name__)
                return self._state
            previous = self._state
            self._state = reduce(previous, action)
            current = self._state

        if current is not previous:
            for listener in list(self._listeners):
                listener(current)
        return current

    def subscribe(self, listener: Callable[[BoardState], None]) -> Callable[[], None]:
        """Register ``listener`` for state changes and return a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def close(self) -> None:
        with self._lock:
            self._closed = True
        self._listeners.clear()
