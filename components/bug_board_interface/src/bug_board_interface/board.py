"""Board contract: columns, filter state and the derived views built from a bug list."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace

from bug_board_interface.bug import Bug, Status

__all__ = [
    "BOARD_COLUMNS",
    "BoardColumn",
    "DEBOUNCE_DELAY",
    "FilterState",
    "MOBILE_BREAKPOINT",
    "filter_bugs",
    "group_bugs_by_status",
]

# viewports narrower than this (px) get the tap-to-change-status selector
MOBILE_BREAKPOINT = 768

# seconds callers should wait after the last keystroke before applying a search
DEBOUNCE_DELAY = 0.3


@dataclass(frozen=True)
class BoardColumn:
    """One status column. Its drop-zone id is the status value itself."""

    status: Status
    name: str
    description: str = ""

    @property
    def drop_zone_id(self) -> str:
        return self.status.value


BOARD_COLUMNS: tuple[BoardColumn, ...] = (
    BoardColumn(Status.OPEN, "Open", "Bug is reported and awaiting action"),
    BoardColumn(Status.IN_PROGRESS, "In Progress", "Bug is being worked on"),
    BoardColumn(Status.RESOLVED, "Resolved", "Bug has been fixed"),
    BoardColumn(Status.CLOSED, "Closed", "Bug is closed and verified"),
)


def _as_values(values: Iterable) -> frozenset[str]:
    return frozenset(getattr(v, "value", v) for v in values)


@dataclass(frozen=True)
class FilterState:
    """Search text plus the three multi-select facets. An empty facet matches everything."""

    search: str = ""
    priority: frozenset[str] = field(default_factory=frozenset)
    severity: frozenset[str] = field(default_factory=frozenset)
    status: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        #accept lists or enum members from callers and normalise to frozensets of raw values
        for name in ("priority", "severity", "status"):
            object.__setattr__(self, name, _as_values(getattr(self, name)))

    def merge(self, **changes) -> FilterState:
        """Return a copy with the given fields replaced, leaving the others as they are."""
        return replace(self, **changes)

    @property
    def is_empty(self) -> bool:
        return not (self.search or self.priority or self.severity or self.status)


def _value(member) -> str | None:
    return member.value if member is not None else None


def _matches_search(bug: Bug, needle: str) -> bool:
    return (
        needle in bug.title.lower()
        or needle in bug.description.lower()
        or needle in (bug.created_by or "").lower()
    )


def filter_bugs(bugs: Sequence[Bug], filters: FilterState) -> tuple[Bug, ...]:
    """Narrow ``bugs`` to the ones passing every active predicate, keeping their order."""
    needle = filters.search.lower()

    def keep(bug: Bug) -> bool:
        if needle and not _matches_search(bug, needle):
            return False
        if filters.priority and _value(bug.priority) not in filters.priority:
            return False
        if filters.severity and _value(bug.severity) not in filters.severity:
            return False
        if filters.status and bug.effective_status.value not in filters.status:
            return False
        return True

    return tuple(bug for bug in bugs if keep(bug))


def group_bugs_by_status(bugs: Iterable[Bug]) -> dict[Status, tuple[Bug, ...]]:
    """Partition bugs into one bucket per status, preserving input order within each bucket.

    A bug whose status is missing or unknown goes to the open bucket. Statuses with
    no bugs are left out of the mapping, so callers must default to an empty column.
    """
    buckets: dict[Status, list[Bug]] = {}
    for bug in bugs:
        buckets.setdefault(bug.effective_status, []).append(bug)
    return {status: tuple(items) for status, items in buckets.items()}
