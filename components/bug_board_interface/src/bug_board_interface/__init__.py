"""Contract shared by bug board clients: domain types, the service client ABC and board views."""

from bug_board_interface.board import (
    BOARD_COLUMNS,
    BoardColumn,
    FilterState,
    filter_bugs,
    group_bugs_by_status,
)
from bug_board_interface.bug import Bug, BugUpdate, Priority, Severity, Status, build_bug
from bug_board_interface.client import BugPage, BugServiceClient, BugStats, Pagination
from bug_board_interface.errors import (
    BugAuthorizationError,
    BugNetworkError,
    BugNotFoundError,
    BugRequestTimeoutError,
    BugServiceError,
    BugTrackerError,
    BugValidationError,
    DuplicateBugError,
)
from bug_board_interface.notifications import Notifier

__all__ = [
    "BOARD_COLUMNS",
    "Bug",
    "BugAuthorizationError",
    "BugNetworkError",
    "BugNotFoundError",
    "BugPage",
    "BugRequestTimeoutError",
    "BugServiceClient",
    "BugServiceError",
    "BugStats",
    "BugTrackerError",
    "BugUpdate",
    "BugValidationError",
    "BoardColumn",
    "DuplicateBugError",
    "FilterState",
    "Notifier",
    "Pagination",
    "Priority",
    "Severity",
    "Status",
    "build_bug",
    "filter_bugs",
    "group_bugs_by_status",
]
