"""Text helpers for rendering bugs and notification messages."""

from __future__ import annotations

from datetime import datetime, timezone

from bug_board_interface.board import BOARD_COLUMNS
from bug_board_interface.bug import Status

_LABELS = {column.status: column.name for column in BOARD_COLUMNS}


def status_label(status: Status | str | None) -> str:
    """Title-case label for a status ("In Progress"); unknown values fall back to the open label."""
    try:
        return _LABELS[Status(status)]
    except ValueError:
        return _LABELS[Status.OPEN]


def humanize_status(status: Status | str) -> str:
    """Lower-case status with hyphens replaced by spaces, as used in "Bug moved to in progress"."""
    return str(getattr(status, "value", status)).replace("-", " ")


def _parse(date_string: str | None) -> datetime | None:
    if not date_string:
        return None
    try:
        #the service emits JavaScript ISO strings ending in "Z"
        parsed = datetime.fromisoformat(date_string.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_date(date_string: str | None) -> str:
    """Format an ISO timestamp as e.g. "Jan 15, 2024"; empty for missing or unparseable input."""
    parsed = _parse(date_string)
    if parsed is None:
        return ""
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit if count == 1 else unit + 's'} ago"


def format_relative_time(date_string: str | None, *, now: datetime | None = None) -> str:
    parsed = _parse(date_string)
    if parsed is None:
        return ""
    now = now or datetime.now(timezone.utc)

    seconds = int((now - parsed).total_seconds())
    if seconds < 60:
        return "just now"
    minutes = seconds // 60
    if minutes < 60:
        return _plural(minutes, "minute")
    hours = minutes // 60
    if hours < 24:
        return _plural(hours, "hour")
    days = hours // 24
    if days < 30:
        return _plural(days, "day")
    months = days // 30
    if months < 12:
        return _plural(months, "month")
    return _plural(months // 12, "year")


def capitalize(text: str | None) -> str:
    if not text:
        return ""
    return text[0].upper() + text[1:]


def truncate_text(text: str | None, max_length: int = 100) -> str:
    if not text:
        return ""
    if len(text) <= max_length:
        return text
    return text[:max_length].strip() + "..."
