"""Mutation gateway: sends bug mutations to the service and commits them to the store once confirmed.

Nothing is written to the store ahead of the response, so a failed request
leaves the board exactly as it was and no rollback is ever needed.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from typing import TypeVar

from bug_board_interface.bug import Bug, BugUpdate, Priority, Severity, Status
from bug_board_interface.client import BugServiceClient
from bug_board_interface.errors import BugTrackerError
from bug_board_interface.notifications import Notifier

from bug_board_client_impl.store import AddBug, BugStore, DeleteBug, SetBugs, SetError, SetLoading, UpdateBug
from bug_board_client_impl.validators import validate_bug_data

__all__ = ["MutationGateway", "user_message"]

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _update_from_payload(payload: dict) -> BugUpdate:
    def member(enum_cls, key):
        return enum_cls(payload[key]) if key in payload else None

    return BugUpdate(
        title=payload.get("title"),
        description=payload.get("description"),
        status=member(Status, "status"),
        priority=member(Priority, "priority"),
        severity=member(Severity, "severity"),
        created_by=payload.get("createdBy"),
    )


def user_message(error: Exception, fallback: str) -> str:
    """The service's own message when it sent one, otherwise ``fallback``."""
    if isinstance(error, BugTrackerError) and error.server_message:
        return error.server_message
    return fallback


class MutationGateway:
    """
    Args:
        client:   Service client used for every round trip
        store:    The board's store; only confirmed responses are dispatched to it
        notifier: Receives one success or one error message per operation
    """

    def __init__(self, client: BugServiceClient, store: BugStore, notifier: Notifier) -> None:
        self._client = client
        self._store = store
        self._notifier = notifier

    def _run(self, operation: str, call: Callable[[], T], failure_message: str) -> T:
        try:
            return call()
        except BugTrackerError as exc:
            logger.warning("%s failed: %s", operation, exc)
            self._notifier.error(user_message(exc, failure_message))
            raise

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def fetch_bugs(self, **params) -> tuple[Bug, ...]:
        """Load the board from the service, replacing whatever the store held."""
        self._store.dispatch(SetLoading(True))
        try:
            page = self._client.list_bugs(**params)
        except BugTrackerError as exc:
            message = user_message(exc, "Failed to load bugs")
            logger.warning("fetch_bugs failed: %s", exc)
            self._store.dispatch(SetError(message))
            self._notifier.error(message)
            raise
        self._store.dispatch(SetBugs(page.bugs))
        return page.bugs

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_bug(self, data: dict, *, created_by_user: str | None = None) -> Bug:
        """Validate, create, then prepend the acknowledged bug."""
        def call() -> Bug:
            payload = validate_bug_data(data, created_by_user=created_by_user)
            #one key per logical create; a retry of this call sends the same key
            return self._client.create_bug(payload, idempotency_key=idempotency_key)

        idempotency_key = str(uuid.uuid4())
        bug = self._run("create_bug", call, "Failed to create bug")
        self._store.dispatch(AddBug(bug))
        self._notifier.success("Bug created successfully")
        return bug

    def update_bug(self, bug_id: str, data: dict) -> Bug:
        """Full update: any editable subset, validated, then replaced in place."""
        def call() -> Bug:
            payload = validate_bug_data(data, partial=True)
            return self._client.update_bug(bug_id, _update_from_payload(payload))

        bug = self._run("update_bug", call, "Failed to update bug")
        self._store.dispatch(UpdateBug(bug))
        self._notifier.success("Bug updated successfully")
        return bug

    def patch_bug(
        self,
        bug_id: str,
        changes: BugUpdate,
        *,
        success_message: str = "Bug updated successfully",
        failure_message: str = "Failed to update bug",
        ) -> Bug:
        """Status-only partial update, replaced in place once the service confirms it."""
        bug = self._run("patch_bug", lambda: self._client.patch_bug(bug_id, changes), failure_message)
        self._store.dispatch(UpdateBug(bug))
        self._notifier.success(success_message)
        return bug

    def delete_bug(self, bug_id: str) -> str:
        self._run("delete_bug", lambda: self._client.delete_bug(bug_id), "Failed to delete bug")
        #remove the card that was asked for, whatever id format the service echoes
        self._store.dispatch(DeleteBug(bug_id))
        self._notifier.success("Bug deleted successfully")
        return bug_id
