"""Core client contract definitions and factory placeholder."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass, field

from bug_board_interface.bug import Bug, BugUpdate, Priority, Severity, Status

__all__ = ["BugPage", "BugServiceClient", "BugStats", "Pagination", "get_client"]


@dataclass(frozen=True)
class Pagination:
    page: int = 1
    limit: int = 0
    total: int = 0
    pages: int = 0


@dataclass(frozen=True)
class BugPage:
    """One page of results from the list endpoint."""

    bugs: tuple[Bug, ...]
    pagination: Pagination


@dataclass(frozen=True)
class BugStats:
    total: int = 0
    by_status: dict[str, int] = field(default_factory=dict)
    by_priority: dict[str, int] = field(default_factory=dict)
    by_severity: dict[str, int] = field(default_factory=dict)


class BugServiceClient(ABC):
    """Talks to the bug service."""

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    @abstractmethod
    def list_bugs(
        self,
        *,
        status: Status | None = None,
        priority: Priority | None = None,
        severity: Severity | None = None,
        created_by: str | None = None,
        page: int | None = None,
        limit: int | None = None,
        sort_by: str = "createdAt",
        order: str = "desc",
        ) -> BugPage:
        """List bugs."""
        """
        Args:
            status, priority, severity, created_by: Filters, combined with AND logic.
            page, limit: Pagination controls, left to the service default when None.
            sort_by, order: Sort field and direction. Defaults to newest first.

        Returns:
            A BugPage holding the bugs and the pagination block.

        """
        raise NotImplementedError

    @abstractmethod
    def iter_bugs(self, *, max_results: int = 100, page_size: int = 20, **filters) -> Iterator[Bug]:
        """Yield bugs across pages until max_results have been yielded or the pages run out."""
        raise NotImplementedError

    @abstractmethod
    def get_bug(self, bug_id: str) -> Bug:
        """Get a bug."""
        """
        Raises:
            BugNotFoundError: If no bug with that ID exists

        """
        raise NotImplementedError

    @abstractmethod
    def get_stats(self) -> BugStats:
        """Return aggregate counts (public endpoint)."""
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Mutations (all require authentication)
    # ------------------------------------------------------------------
    @abstractmethod
    def create_bug(self, data: dict, *, idempotency_key: str | None = None) -> Bug:
        """Create a bug."""
        """
        Args:
            data: title, description, priority, severity, createdBy and optionally status.
            idempotency_key: Client-generated token sent with the request so the service
                             can recognise a retried create.

        Returns:
            The newly created Bug, with id and timestamps assigned by the service.

        """
        raise NotImplementedError

    @abstractmethod
    def update_bug(self, bug_id: str, update: BugUpdate) -> Bug:
        """Full update of the editable fields carried by ``update``."""
        raise NotImplementedError

    @abstractmethod
    def patch_bug(self, bug_id: str, update: BugUpdate) -> Bug:
        """Partial update. Only the status field is sent in this client."""
        raise NotImplementedError

    @abstractmethod
    def delete_bug(self, bug_id: str) -> str:
        """Delete a bug."""
        """
        Returns:
            The id of the deleted bug, as confirmed by the service.

        Raises:
            BugNotFoundError: If no bug with that ID exists.

        """
        raise NotImplementedError


def get_client(*, interactive: bool = False) -> BugServiceClient:
    """Create instance of client."""
    """
    Args:
        interactive: When True, the implementation can prompt for missing settings.
                     When False, it relies solely on environment variables.

    Raises:
        NotImplementedError: Until replaced by a concrete factory.

    """
    raise NotImplementedError
