"""Unit tests for BoardController flows and the mobile status selector."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from bug_board_interface.bug import BugUpdate, Status
from bug_board_interface.client import BugPage, BugServiceClient, Pagination
from bug_board_interface.errors import BugNetworkError, BugServiceError, BugValidationError

from bug_board_client_impl.controller import BoardController
from bug_board_client_impl.drag import DropOutcome, PointerSensor, Rect
from bug_board_client_impl.store import AddBug
from bug_board_client_impl.formatters import (
    capitalize,
    format_date,
    format_relative_time,
    humanize_status,
    status_label,
    truncate_text,
)


@pytest.fixture
def board(service, notifier, make_bug):
    """Returns a loaded BoardController with bugs 1 (open), 2 (in-progress), 3 (open)."""
    service.list_bugs.return_value = BugPage(
        (make_bug("1", "open"), make_bug("2", "in-progress", priority="high"), make_bug("3", "open")),
        Pagination(total=3),
    )
    controller = BoardController(service, notifier, viewport_width=1280, clock=lambda: 0.0)
    controller.load()
    return controller


@pytest.fixture
def mobile_board(service, notifier, make_bug):
    service.list_bugs.return_value = BugPage((make_bug("1", "open"),), Pagination(total=1))
    controller = BoardController(service, notifier, viewport_width=375)
    controller.load()
    return controller


def column_ids(board):
    return {column.status: [bug.id for bug in column.bugs] for column in board.columns()}

#--------------------------- tests for loading and columns --------------------------

def test_columns_always_lists_four_columns(board):
    columns = board.columns()

    assert [c.status for c in columns] == [Status.OPEN, Status.IN_PROGRESS, Status.RESOLVED, Status.CLOSED]
    assert [c.title for c in columns] == ["Open", "In Progress", "Resolved", "Closed"]
    assert column_ids(board)[Status.OPEN] == ["1", "3"]
    # an empty status still renders, with no bugs
    assert column_ids(board)[Status.RESOLVED] == []
    assert columns[2].count == 0


def test_load_failure_is_recorded_not_raised(service, notifier):
    service.list_bugs.side_effect = BugNetworkError("down")
    controller = BoardController(service, notifier)

    controller.load()

    assert controller.state.error == "Failed to load bugs"
    assert controller.columns()[0].bugs == ()


def test_filters_narrow_columns_and_clear_restores(board):
    board.set_filters(priority=["high"])

    assert column_ids(board)[Status.OPEN] == []
    assert column_ids(board)[Status.IN_PROGRESS] == ["2"]

    board.clear_filters()
    assert column_ids(board)[Status.OPEN] == ["1", "3"]


def test_hovered_column_is_highlighted(board):
    for status, left in (("open", 0), ("in-progress", 300), ("resolved", 600), ("closed", 900)):
        board.drag.register_drop_zone(status, Rect(left, 0, 280, 800))
    board.drag.press(PointerSensor(), "1", (100, 100), Rect(10, 50, 260, 100))
    board.drag.move((400, 100))

    highlighted = [c.status for c in board.columns() if c.is_over]

    assert highlighted == [Status.IN_PROGRESS]


def test_card_view_formats_bug(board, make_bug):
    bug = make_bug("5", description="x" * 150, createdAt="2024-01-15T10:00:00.000Z")
    board.store.dispatch(AddBug(bug))

    card = board.columns()[0].cards[0]

    assert card.bug_id == "5"
    assert card.summary == "x" * 100 + "..."
    assert card.created == "Jan 15, 2024"
    assert card.priority == "medium"

#--------------------------- tests for the mobile selector --------------------------

def test_tap_on_desktop_does_not_open_selector(board):
    assert board.click_card("1") is False
    assert not board.status_selector.is_open


def test_tap_on_mobile_opens_selector_with_current_status(mobile_board):
    assert mobile_board.click_card("1") is True

    options = mobile_board.status_selector.options()

    assert [o.status for o in options if o.is_current] == [Status.OPEN]
    assert options[1].description == "Bug is being worked on"


def test_selecting_current_status_just_closes(mobile_board, service, notifier):
    mobile_board.click_card("1")

    result = mobile_board.status_selector.select("open")

    assert result.outcome is DropOutcome.NO_OP
    assert not mobile_board.status_selector.is_open
    service.patch_bug.assert_not_called()
    notifier.success.assert_not_called()


def test_selecting_new_status_patches_and_closes(mobile_board, service, notifier, make_bug):
    service.patch_bug.return_value = make_bug("1", "in-progress")
    mobile_board.click_card("1")

    result = mobile_board.status_selector.select(Status.IN_PROGRESS)

    assert result.outcome is DropOutcome.MOVED
    service.patch_bug.assert_called_once_with("1", BugUpdate(status=Status.IN_PROGRESS))
    assert mobile_board.state.find("1").status is Status.IN_PROGRESS
    notifier.success.assert_called_once_with("Bug moved to in progress")
    assert not mobile_board.status_selector.is_open


def test_failed_selection_keeps_selector_open(mobile_board, service, notifier):
    service.patch_bug.side_effect = BugServiceError("500")
    mobile_board.click_card("1")

    result = mobile_board.status_selector.select("closed")

    assert result.outcome is DropOutcome.FAILED
    assert mobile_board.status_selector.is_open
    assert mobile_board.state.find("1").status is Status.OPEN
    notifier.error.assert_called_once_with("Failed to update bug status")

#--------------------------- tests for form and delete flows --------------------------

def test_submit_without_id_creates(board, service, make_bug):
    service.create_bug.return_value = make_bug("99")

    board.submit_bug({
        "title": "New bug",
        "description": "Something broke badly",
        "priority": "low",
        "severity": "minor",
        "createdBy": "Ana",
    })

    assert board.state.bugs[0].id == "99"
    assert board.busy is False


def test_submit_with_id_updates(board, service, make_bug):
    service.update_bug.return_value = make_bug("3", "open", title="Edited title")

    board.submit_bug({"title": "Edited title"}, bug_id="3")

    assert board.state.find("3").title == "Edited title"
    service.create_bug.assert_not_called()


def test_submit_failure_propagates_and_clears_busy(board):
    with pytest.raises(BugValidationError):
        board.submit_bug({"title": "x"})

    assert board.busy is False


def test_confirm_delete_removes_bug(board, service):
    service.delete_bug.return_value = "2"

    assert board.request_delete("2").id == "2"
    assert board.confirm_delete() is True

    assert [b.id for b in board.state.bugs] == ["1", "3"]
    assert board.bug_to_delete is None
    assert board.busy is False


def test_failed_delete_keeps_dialog_target(board, service):
    service.delete_bug.side_effect = BugNetworkError("down")
    board.request_delete("2")

    assert board.confirm_delete() is False

    assert board.bug_to_delete.id == "2"
    assert [b.id for b in board.state.bugs] == ["1", "2", "3"]


def test_cancel_delete(board, service):
    board.request_delete("2")
    board.cancel_delete()

    assert board.confirm_delete() is False
    service.delete_bug.assert_not_called()

#--------------------------- tests for close --------------------------

def test_close_detaches_store_and_closes_client(make_bug):
    client = MagicMock()
    client.list_bugs.return_value = BugPage((make_bug("1"),), Pagination(total=1))
    board = BoardController(client, MagicMock())
    board.load()

    board.close()
    client.patch_bug.return_value = make_bug("1", "closed")
    board.gateway.patch_bug("1", BugUpdate(status=Status.CLOSED))

    client.close.assert_called_once()
    assert board.state.find("1").status is Status.OPEN


def test_close_without_client_close_method(service, notifier):
    board = BoardController(service, notifier)

    board.close()

    assert board.store.closed

#--------------------------- tests for formatters --------------------------

def test_status_text_helpers():
    assert status_label(Status.IN_PROGRESS) == "In Progress"
    assert status_label("bogus") == "Open"
    assert humanize_status(Status.IN_PROGRESS) == "in progress"
    assert capitalize("open") == "Open"
    assert capitalize("") == ""


def test_truncate_text():
    assert truncate_text("short", 10) == "short"
    assert truncate_text("a long sentence here", 6) == "a long..."
    assert truncate_text(None) == ""


def test_format_date_handles_bad_input():
    assert format_date("2024-01-15T10:00:00.000Z") == "Jan 15, 2024"
    assert format_date("not a date") == ""
    assert format_date(None) == ""


@pytest.mark.parametrize("stamp, expected", [
    ("2024-03-01T11:59:30Z", "just now"),
    ("2024-03-01T11:59:00Z", "1 minute ago"),
    ("2024-03-01T09:00:00Z", "3 hours ago"),
    ("2024-02-28T12:00:00Z", "2 days ago"),
    ("2023-12-01T12:00:00Z", "3 months ago"),
    ("2022-01-01T12:00:00Z", "2 years ago"),
])
def test_format_relative_time(stamp, expected):
    now = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)

    assert format_relative_time(stamp, now=now) == expected


def test_controller_accepts_any_service_client(notifier):
    client = MagicMock(spec=BugServiceClient)

    assert BoardController(client, notifier).is_mobile is False


def test_selecting_unknown_status_just_closes(mobile_board, service):
    mobile_board.click_card("1")

    result = mobile_board.status_selector.select("archived")

    assert result.outcome is DropOutcome.NO_OP
    assert result.bug_id == "1"
    assert not mobile_board.status_selector.is_open
    service.patch_bug.assert_not_called()
