"""Bug contract - Core bug representation."""

from __future__ import annotations

from dataclasses import dataclass, fields as dataclass_fields
from enum import Enum

from bug_board_interface.errors import BugTrackerError

__all__ = [
    "Bug",
    "BugUpdate",
    "Priority",
    "Severity",
    "Status",
    "VALIDATION_RULES",
    "build_bug",
]


class Status(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Severity(str, Enum):
    MINOR = "minor"
    MAJOR = "major"
    CRITICAL = "critical"


# (min, max) lengths for the free-text fields, after trimming
VALIDATION_RULES: dict[str, tuple[int, int]] = {
    "title": (3, 100),
    "description": (10, 1000),
    "createdBy": (2, 50),
}


@dataclass(frozen=True)
class Bug:
    """A tracked defect as acknowledged by the bug service.

    ``status`` is None when the service sent a missing or unknown value;
    use ``effective_status`` wherever a column has to be chosen.
    """

    id: str
    title: str
    description: str
    status: Status | None
    priority: Priority | None
    severity: Severity | None
    created_by: str | None = None
    created_by_user: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def effective_status(self) -> Status:
        return self.status or Status.OPEN

    def __repr__(self) -> str:
        return f"<Bug id={self.id!r} title={self.title!r} status={self.status}>"


#wire names differ from attribute names only for the creator field
_WIRE_NAMES = {"created_by": "createdBy"}


@dataclass
class BugUpdate:
    """
    All fields default to None. During an update, only fields explicitly changed to non-None value will be sent.
    """

    title: str | None = None
    description: str | None = None
    status: Status | None = None
    priority: Priority | None = None
    severity: Severity | None = None
    created_by: str | None = None

    def set_fields(self) -> dict:
        """Return a wire-ready dict containing only the fields explicitly set to non-None values."""
        changed = {}
        for f in dataclass_fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, Enum):
                value = value.value
            changed[_WIRE_NAMES.get(f.name, f.name)] = value
        return changed


def _coerce(enum_cls: type[Enum], value: object) -> Enum | None:
    #unknown values are kept as None instead of raising, the board decides how to show them
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _creator_ref(raw: dict) -> str | None:
    ref = raw.get("createdByUser")
    if isinstance(ref, dict):
        return ref.get("_id") or ref.get("id") or ref.get("name")
    return ref or None


def build_bug(raw_data: dict) -> Bug:
    """
    Purpose: Builds a Bug from the JSON object the bug service returns.

    Args:
        raw_data: One bug object, as found under ``data`` in a service response.
                  Both Mongo-style ``_id`` and plain ``id`` keys are accepted.

    Returns:
        Bug: A frozen Bug instance.

    Raises:
        BugTrackerError: If the payload carries no identifier.
    """
    bug_id = raw_data.get("_id") or raw_data.get("id")
    if not bug_id:
        raise BugTrackerError("Bug payload has no identifier")

    return Bug(
        id=str(bug_id),
        title=raw_data.get("title") or "",
        description=raw_data.get("description") or "",
        status=_coerce(Status, raw_data.get("status")),
        priority=_coerce(Priority, raw_data.get("priority")),
        severity=_coerce(Severity, raw_data.get("severity")),
        created_by=raw_data.get("createdBy"),
        created_by_user=_creator_ref(raw_data),
        created_at=raw_data.get("createdAt"),
        updated_at=raw_data.get("updatedAt"),
    )
