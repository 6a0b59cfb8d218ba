"""Board controller: the one owner of the bug store, and the flows that drive it."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from bug_board_interface.board import BOARD_COLUMNS, MOBILE_BREAKPOINT, FilterState, filter_bugs, group_bugs_by_status
from bug_board_interface.bug import Bug, Status
from bug_board_interface.client import BugServiceClient
from bug_board_interface.errors import BugTrackerError
from bug_board_interface.notifications import Notifier

from bug_board_client_impl.drag import DragCoordinator, DropOutcome, DropResult, change_status
from bug_board_client_impl.formatters import format_date, format_relative_time, status_label, truncate_text
from bug_board_client_impl.gateway import MutationGateway
from bug_board_client_impl.notifier import LoggingNotifier
from bug_board_client_impl.store import BoardState, BugStore, ClearFilters, SetFilters

__all__ = ["BoardController", "CardView", "ColumnView", "MobileStatusSelector", "StatusOption"]

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CardView:
    bug_id: str
    title: str
    summary: str
    priority: str
    severity: str
    created_by: str
    created: str
    updated: str

    @classmethod
    def from_bug(cls, bug: Bug) -> CardView:
        return cls(
            bug_id=bug.id,
            title=bug.title,
            summary=truncate_text(bug.description, 100),
            priority=bug.priority.value if bug.priority else "",
            severity=bug.severity.value if bug.severity else "",
            created_by=bug.created_by or "",
            created=format_date(bug.created_at),
            updated=format_relative_time(bug.updated_at),
        )


@dataclass(frozen=True)
class ColumnView:
    status: Status
    title: str
    bugs: tuple[Bug, ...]
    is_over: bool = False

    @property
    def count(self) -> int:
        return len(self.bugs)

    @property
    def cards(self) -> tuple[CardView, ...]:
        return tuple(CardView.from_bug(bug) for bug in self.bugs)


@dataclass(frozen=True)
class StatusOption:
    status: Status
    label: str
    description: str
    is_current: bool


# ---------------------------------------------------------------------------
# Mobile status selector
# ---------------------------------------------------------------------------

class MobileStatusSelector:
    """Tap-to-move list shown instead of drag and drop on narrow screens."""

    def __init__(self, gateway: MutationGateway, state: Callable[[], BoardState]) -> None:
        self._gateway = gateway
        self._state = state
        self._bug_id: str | None = None

    @property
    def is_open(self) -> bool:
        return self._bug_id is not None

    @property
    def bug(self) -> Bug | None:
        return self._state().find(self._bug_id) if self._bug_id else None

    def open(self, bug_id: str) -> None:
        self._bug_id = bug_id

    def close(self) -> None:
        self._bug_id = None

    def options(self) -> list[StatusOption]:
        bug = self.bug
        current = bug.effective_status if bug else None
        return [
            StatusOption(column.status, column.name, column.description, column.status == current)
            for column in BOARD_COLUMNS
        ]

    def select(self, status: Status | str) -> DropResult:
        """Pick a status. The current one just closes the list; a failed move leaves it open."""
        try:
            status = Status(status)
        except ValueError:
            logger.debug("Ignoring unknown status %r from the selector", status)
            bug_id = self._bug_id
            self.close()
            return DropResult(DropOutcome.NO_OP, bug_id)
        bug = self.bug
        if bug is None:
            self.close()
            return DropResult(DropOutcome.MISSING_BUG, None, status)

        result = change_status(self._gateway, bug, status)
        if result.outcome is not DropOutcome.FAILED:
            self.close()
        return result


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------

class BoardController:
    """
    Owns the board's store and hands everyone else read-only views of it.

    Args:
        client:   Service client; closed along with the board when it has a close() method
        notifier: Where success/error messages go. Defaults to the log
        viewport_width: Width in px used to decide between drag and tap-to-move
    """

    def __init__(self, client: BugServiceClient, notifier: Notifier | None = None, *, viewport_width: int = 1280, clock: Callable[[], float] = time.monotonic) -> None:
        self._client = client
        self.store = BugStore()
        self.notifier = notifier or LoggingNotifier()
        self.gateway = MutationGateway(client, self.store, self.notifier)
        self.drag = DragCoordinator(self.gateway, lambda: self.store.state.bugs, clock=clock)
        self.status_selector = MobileStatusSelector(self.gateway, lambda: self.store.state)
        self.viewport_width = viewport_width

        self.busy = False
        self._bug_to_delete: str | None = None

    @property
    def state(self) -> BoardState:
        return self.store.state

    @property
    def is_mobile(self) -> bool:
        return self.viewport_width < MOBILE_BREAKPOINT

    # ------------------------------------------------------------------
    # Loading and derived views
    # ------------------------------------------------------------------

    def load(self, **params) -> None:
        """Fetch the board. Failures are already reported and recorded in ``state.error``."""
        try:
            self.gateway.fetch_bugs(**params)
        except BugTrackerError:
            logger.debug("Board load failed; state.error is %r", self.state.error)

    def visible_bugs(self) -> tuple[Bug, ...]:
        return filter_bugs(self.state.bugs, self.state.filters)

    def columns(self) -> list[ColumnView]:
        grouped = group_bugs_by_status(self.visible_bugs())
        over = self.drag.over_column_id
        return [
            ColumnView(
                status=column.status,
                title=status_label(column.status),
                bugs=grouped.get(column.status, ()),
                is_over=over == column.drop_zone_id,
            )
            for column in BOARD_COLUMNS
        ]

    def set_filters(self, **changes) -> FilterState:
        return self.store.dispatch(SetFilters(changes)).filters

    def clear_filters(self) -> FilterState:
        return self.store.dispatch(ClearFilters()).filters

    # ------------------------------------------------------------------
    # Card taps (mobile)
    # ------------------------------------------------------------------

    def click_card(self, bug_id: str) -> bool:
        """Open the status selector for a tapped card on narrow screens. Returns whether it opened."""
        if not self.is_mobile:
            return False
        self.status_selector.open(bug_id)
        return True

    # ------------------------------------------------------------------
    # Form and delete flows
    # ------------------------------------------------------------------

    def submit_bug(self, data: dict, bug_id: str | None = None, *, created_by_user: str | None = None) -> Bug:
        """Create a bug, or update ``bug_id`` when editing. Errors propagate so the form stays open."""
        self.busy = True
        try:
            if bug_id:
                return self.gateway.update_bug(bug_id, data)
            return self.gateway.create_bug(data, created_by_user=created_by_user)
        finally:
            self.busy = False

    @property
    def bug_to_delete(self) -> Bug | None:
        return self.state.find(self._bug_to_delete) if self._bug_to_delete else None

    def request_delete(self, bug_id: str) -> Bug | None:
        """Remember which bug the confirmation dialog is about."""
        self._bug_to_delete = bug_id if self.state.find(bug_id) else None
        return self.bug_to_delete

    def cancel_delete(self) -> None:
        self._bug_to_delete = None

    def confirm_delete(self) -> bool:
        """Delete the remembered bug. On failure the dialog target is kept so the user can retry."""
        if self._bug_to_delete is None:
            return False
        self.busy = True
        try:
            self.gateway.delete_bug(self._bug_to_delete)
        except BugTrackerError:
            return False
        finally:
            self.busy = False
        self._bug_to_delete = None
        return True

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Detach the store so responses that arrive later are dropped, then release the HTTP session."""
        self.drag.cancel()
        self.status_selector.close()
        self.store.close()
        close = getattr(self._client, "close", None)
        if callable(close):
            close()
