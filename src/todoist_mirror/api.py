"""Todoist API client."""

from typing import Any

import requests
from loguru import logger

from todoist_mirror.exceptions import TransportError
from todoist_mirror.models.project import RemoteProject

API_BASE_URL = "https://api.todoist.com/api/v1"

# Seconds to wait for the server before giving up on a request.
REQUEST_TIMEOUT = 30

# Page size for cursor-paginated list endpoints.
PAGE_LIMIT = 200


class TodoistApi:
    """Encapsulated Todoist API, authenticated with a bearer token."""

    def __init__(
        self,
        api_token: str,
        *,
        base_url: str = API_BASE_URL,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        if not api_token:
            msg = "Todoist API token is empty"
            raise ValueError(msg)
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.sess = requests.Session()
        self.sess.headers.update({"Authorization": f"Bearer {api_token}"})
        logger.debug("API ready: base_url {!r}, timeout {!r}", self.base_url, self.timeout)

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Invoke an endpoint and return the decoded JSON body."""
        url = f"{self.base_url}/{path}"
        logger.debug("Making request: {} {!r}", method, path)
        try:
            r = self.sess.request(method, url, timeout=self.timeout, **kwargs)
            r.raise_for_status()
            return r.json()
        except requests.RequestException as e:
            msg = f"API call failed: {method} {path!r}: {e}"
            raise TransportError(msg) from e
        except ValueError as e:
            msg = f"API call returned invalid JSON: {method} {path!r}: {e}"
            raise TransportError(msg) from e

    def list_projects(self) -> list[RemoteProject]:
        """Fetch all active projects, following pagination cursors.

        Projects archived on the Todoist side are left out, so their notes
        get archived locally.
        """
        raw: list[dict[str, Any]] = []
        cursor: str | None = None
        while True:
            params: dict[str, Any] = {"limit": PAGE_LIMIT}
            if cursor:
                params["cursor"] = cursor
            page = self._request("GET", "projects", params=params)
            if isinstance(page, list):
                # Unpaginated response shape (REST v2).
                raw.extend(page)
                break
            if not isinstance(page, dict) or not isinstance(page.get("results"), list):
                msg = f"bad projects response: {type(page).__name__}"
                raise TransportError(msg)
            raw.extend(page["results"])
            cursor = page.get("next_cursor")
            if not cursor:
                break

        try:
            projects = [RemoteProject.from_api(p) for p in raw if not p.get("is_archived")]
        except (KeyError, TypeError, AttributeError) as e:
            msg = f"bad project object in response: {e!r}"
            raise TransportError(msg) from e
        logger.debug("Fetched {} projects ({} archived skipped)", len(projects), len(raw) - len(projects))
        return projects

    def create_task(self, content: str, project_id: str) -> dict[str, Any]:
        """Create a task in the given project."""
        task = self._request("POST", "tasks", json={"content": content, "project_id": project_id})
        if not isinstance(task, dict):
            msg = f"bad task response: {type(task).__name__}"
            raise TransportError(msg)
        return task
