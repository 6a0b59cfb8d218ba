"""
Configuration
-------------
The client reads its settings from the environment:

        BUG_TRACKER_API_URL     http://localhost:5000/api  (default)
        BUG_TRACKER_API_TOKEN   JWT issued by the bug service's auth endpoints
        BUG_TRACKER_TIMEOUT     request time limit in seconds, 10 by default

1. When get_client(interactive = True)
    User is prompted for the URL and token at runtime if they are missing from the environment.
2. When get_client(interactive = False) - Default
    Missing values fall back to the defaults; reads work without a token, mutations will be rejected.

Dependencies:
    uv add requests

"""
#to avoid having to consider forward declarations, the below line must be first line in the file
from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from getpass import getpass
from typing import Any

import requests

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

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:5000/api"
DEFAULT_TIMEOUT = 10.0

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

#status code -> (exception class, log label)
_ERRORS_BY_STATUS: dict[int, tuple[type[BugTrackerError], str]] = {
    400: (BugValidationError, "Bad Request"),
    401: (BugAuthorizationError, "Unauthorized"),
    403: (BugAuthorizationError, "Forbidden"),
    404: (BugNotFoundError, "Not Found"),
    409: (DuplicateBugError, "Conflict"),
    422: (BugValidationError, "Validation Error"),
}

#python keyword names -> query parameter names the service understands
_QUERY_NAMES = {"created_by": "createdBy", "sort_by": "sortBy"}


def _error_body(response: requests.Response) -> dict:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _query(**params: Any) -> dict:
    query = {}
    for name, value in params.items():
        if value is None:
            continue
        query[_QUERY_NAMES.get(name, name)] = getattr(value, "value", value)
    return query


# ---------------------------------------------------------------------------
# Client implementation
# ---------------------------------------------------------------------------

class HttpBugServiceClient(BugServiceClient):
    """
    Args:
        base_url:  Root URL of the bug service API (e.g. 'http://localhost:5000/api')
        api_token: Bearer token for mutating endpoints, or None for read-only use
        timeout:   Upper bound in seconds for every request
    """

    def __init__(self, base_url: str = DEFAULT_BASE_URL, api_token: str | None = None, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = requests.Session()
        self._session.headers.update({"Accept": "application/json", "Content-Type": "application/json"})
        if api_token:
            self._session.headers["Authorization"] = f"Bearer {api_token}"

    # ------------------------------------------------------------------
    # Internal HTTP helpers
    # ------------------------------------------------------------------

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = self._session.request(method, self._url(path), timeout=self._timeout, **kwargs)
        except requests.Timeout as exc:
            logger.warning("Request timeout - please try again (%s %s)", method, path)
            raise BugRequestTimeoutError(f"{method} {path} timed out after {self._timeout}s") from exc
        except requests.ConnectionError as exc:
            logger.warning("Network error - please check your connection (%s %s)", method, path)
            raise BugNetworkError(f"{method} {path} failed: {exc}") from exc
        except requests.RequestException as exc:
            logger.warning("Request failed (%s %s): %s", method, path, exc)
            raise BugNetworkError(f"{method} {path} failed: {exc}") from exc
        self._raise_for_status(response)
        return self._unwrap(response)

    def _get(self, path: str, params: dict | None = None) -> Any:
        return self._request("GET", path, params=params)

    def _post(self, path: str, body: dict, headers: dict | None = None) -> Any:
        return self._request("POST", path, json=body, headers=headers)

    def _put(self, path: str, body: dict) -> Any:
        return self._request("PUT", path, json=body)

    def _patch(self, path: str, body: dict) -> Any:
        return self._request("PATCH", path, json=body)

    def _delete(self, path: str) -> Any:
        return self._request("DELETE", path)

    @staticmethod
    def _raise_for_status(response: requests.Response) -> None:
        if response.ok:
            return
        body = _error_body(response)
        server_message = body.get("message")
        error_cls, label = _ERRORS_BY_STATUS.get(response.status_code, (BugServiceError, "Server Error"))
        logger.warning("%s: %s", label, server_message or response.url)

        message = f"Bug service error {response.status_code}: {server_message or response.reason}"
        if error_cls is BugValidationError:
            raise BugValidationError(
                message,
                errors=body.get("errors"),
                server_message=server_message,
                status_code=response.status_code,
            )
        raise error_cls(message, server_message=server_message, status_code=response.status_code)

    @staticmethod
    def _unwrap(response: requests.Response) -> Any:
        #every success body is an envelope: {"success": true, "data": ..., "pagination"?: ...}
        if response.status_code == 204 or not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise BugServiceError(f"Bug service returned a non-JSON body: {response.text[:200]}") from exc

    @staticmethod
    def _data(payload: Any) -> Any:
        if not isinstance(payload, dict) or "data" not in payload:
            raise BugServiceError(f"Unexpected response shape: {payload!r}")
        return payload["data"]

    # ------------------------------------------------------------------
    # BugServiceClient contract
    # ------------------------------------------------------------------

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
        """Fetch one page of bugs matching all supplied filters."""
        payload = self._get(
            "/bugs",
            params=_query(
                status=status,
                priority=priority,
                severity=severity,
                created_by=created_by,
                page=page,
                limit=limit,
                sort_by=sort_by,
                order=order,
            ),
        )
        raw_bugs = self._data(payload)
        if not isinstance(raw_bugs, list):
            raw_bugs = []
        bugs = tuple(build_bug(raw) for raw in raw_bugs if isinstance(raw, dict))

        raw_pagination = payload.get("pagination") or {}
        pagination = Pagination(
            page=int(raw_pagination.get("page", page or 1)),
            limit=int(raw_pagination.get("limit", limit or len(bugs))),
            total=int(raw_pagination.get("total", len(bugs))),
            pages=int(raw_pagination.get("pages", 1)),
        )
        return BugPage(bugs=bugs, pagination=pagination)

    def iter_bugs(self, *, max_results: int = 100, page_size: int = 20, **filters) -> Iterator[Bug]:
        """
        Iteration stops once "max_results" bugs have been yielded or the service reports no more pages.
        """
        page = 1
        yielded = 0
        #Each iteration makes one API request, fetching the next page
        while yielded < max_results:
            result = self.list_bugs(page=page, limit=page_size, **filters)
            if not result.bugs:
                break

            for bug in result.bugs:
                if yielded >= max_results:
                    return
                yield bug
                yielded += 1

            if page >= result.pagination.pages:
                break
            page += 1

    def get_bug(self, bug_id: str) -> Bug:
        """Fetch a single bug by id."""
        return build_bug(self._data(self._get(f"/bugs/{bug_id}")))

    def get_stats(self) -> BugStats:
        """Fetch the aggregate counts."""
        data = self._data(self._get("/bugs/stats"))
        return BugStats(
            total=int(data.get("total", 0)),
            by_status=dict(data.get("byStatus") or {}),
            by_priority=dict(data.get("byPriority") or {}),
            by_severity=dict(data.get("bySeverity") or {}),
        )

    def create_bug(self, data: dict, *, idempotency_key: str | None = None) -> Bug:
        """Create a new bug and return it as acknowledged by the service."""
        headers = {"Idempotency-Key": idempotency_key} if idempotency_key else None
        return build_bug(self._data(self._post("/bugs", data, headers=headers)))

    def update_bug(self, bug_id: str, update: BugUpdate) -> Bug:
        """
        Args:
            bug_id: The bug id
            update: A "BugUpdate" dataclass instance with the desired changes

        Notes on usage:
            Fields left as "None" are not sent and remain unchanged on the service

        Raises:
            BugNotFoundError: If the bug does not exist.
            BugValidationError: If the service rejects a field.
        """
        return build_bug(self._data(self._put(f"/bugs/{bug_id}", update.set_fields())))

    def patch_bug(self, bug_id: str, update: BugUpdate) -> Bug:
        """Send a status-only partial update."""
        if update.status is None:
            raise BugValidationError(
                "A partial update must carry a status",
                errors=[{"field": "status", "message": "Status is required"}],
            )
        body = {"status": Status(update.status).value}
        return build_bug(self._data(self._patch(f"/bugs/{bug_id}", body)))

    def delete_bug(self, bug_id: str) -> str:
        """
        Notes on usage:
            Deletes a bug, and will raise error if the bug is not found
        Raises:
            BugNotFoundError: If no bug with that ID exists.

        """
        data = self._data(self._delete(f"/bugs/{bug_id}"))
        if isinstance(data, dict):
            return str(data.get("id") or data.get("_id") or bug_id)
        return bug_id

    def close(self) -> None:
        """Close the underlying HTTP session, dropping pooled connections."""
        self._session.close()


# ---------------------------------------------------------------------------
# Get client
# ---------------------------------------------------------------------------

def get_client(*, interactive: bool = False) -> HttpBugServiceClient:
    """Return a configured HttpBugServiceClient.

    Reads settings from environment variables. If "interactive = True" and
    the URL or token is missing, the user will be prompted.

    Environment variables:
        BUG_TRACKER_API_URL:   Base URL of the bug service API.
        BUG_TRACKER_API_TOKEN: Bearer token for mutating endpoints.
        BUG_TRACKER_TIMEOUT:   Request time limit in seconds.
    """
    base_url = os.environ.get("BUG_TRACKER_API_URL", "")
    api_token = os.environ.get("BUG_TRACKER_API_TOKEN", "")
    raw_timeout = os.environ.get("BUG_TRACKER_TIMEOUT", "")

    if interactive:
        if not base_url:
            base_url = input(f"Bug service URL [{DEFAULT_BASE_URL}]: ").strip()
        if not api_token:
            api_token = getpass("API token (leave empty for read-only): ")

    try:
        timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
    except ValueError:
        raise EnvironmentError(f"BUG_TRACKER_TIMEOUT must be a number of seconds, got {raw_timeout!r}") from None
    if timeout <= 0:
        raise EnvironmentError(f"BUG_TRACKER_TIMEOUT must be positive, got {raw_timeout!r}")

    return HttpBugServiceClient(base_url or DEFAULT_BASE_URL, api_token or None, timeout)
