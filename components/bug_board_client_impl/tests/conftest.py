"""Shared fixtures for the bug board client tests."""

from unittest.mock import MagicMock

import pytest

from bug_board_interface.bug import build_bug
from bug_board_interface.client import BugServiceClient
from bug_board_interface.notifications import Notifier

from bug_board_client_impl.gateway import MutationGateway
from bug_board_client_impl.store import BoardState, BugStore


@pytest.fixture
def make_bug():
    """Returns a factory building a Bug from a few fields, the way the service would send it."""
    def factory(bug_id, status="open", **overrides):
        raw = {
            "_id": bug_id,
            "title": f"Bug {bug_id}",
            "description": f"Description for bug {bug_id}",
            "status": status,
            "priority": "medium",
            "severity": "minor",
            "createdBy": "Ana",
        }
        raw.update(overrides)
        return build_bug(raw)
    return factory


@pytest.fixture
def service():
    """A BugServiceClient whose every call is a MagicMock, so no HTTP is made."""
    return MagicMock(spec=BugServiceClient)


@pytest.fixture
def notifier():
    return MagicMock(spec=Notifier)


@pytest.fixture
def store(make_bug):
    """A loaded store holding bugs 1, 2 and 3 (open, in-progress, open)."""
    return BugStore(BoardState(
        bugs=(make_bug("1", "open"), make_bug("2", "in-progress"), make_bug("3", "open")),
        loading=False,
    ))


@pytest.fixture
def gateway(service, store, notifier):
    return MutationGateway(service, store, notifier)
