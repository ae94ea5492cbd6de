"""GitLab REST API client.

The client is a thin JSON-over-HTTP layer: one coroutine per endpoint,
no retries, no interpretation of the payloads beyond error extraction.
MrLifecycleClient (lifecycle.py) builds the merge request workflow on
top of it.
"""

from __future__ import annotations

from typing import Any, Protocol
from urllib.parse import quote

import httpx

from gitlab_mr.core.errors import ForgeConflict, ForgeError
from gitlab_mr.core.log import logger

API_PREFIX = "/api/v4"


class ForgeClient(Protocol):
    """Operations the workflows need from a GitLab-compatible forge.

    ``repo_id`` is the URL-encoded project path or the numeric id.
    """

    async def get_project(self, repo_id: str) -> dict[str, Any]: ...

    async def create_merge_request(
        self, repo_id: str, fields: dict[str, Any]
    ) -> dict[str, Any]: ...

    async def list_merge_requests(
        self, repo_id: str, state: str = "opened"
    ) -> list[dict[str, Any]]: ...

    async def update_merge_request(
        self, repo_id: str, iid: int, fields: dict[str, Any]
    ) -> dict[str, Any]: ...

    async def get_approvals(
        self, repo_id: str, iid: int
    ) -> dict[str, Any]: ...

    async def update_approvers(
        self,
        repo_id: str,
        iid: int,
        approver_ids: list[int],
        approver_group_ids: list[int],
    ) -> dict[str, Any]: ...

    async def list_labels(self, repo_id: str) -> list[dict[str, Any]]: ...

    async def search_users(self, query: str) -> list[dict[str, Any]]: ...


def error_message(response: httpx.Response) -> str:
    """Extract GitLab's error text from a failed response.

    GitLab answers with ``{"message": ...}`` or ``{"error": ...}``; the
    message may be a string, a list of strings, or a mapping of field
    names to lists of strings. All of them collapse to one line.
    """
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        raw = payload.get("message") or payload.get("error")
        if raw is None:
            raw = payload
    else:
        raw = payload

    text = _flatten(raw) if raw is not None else ""
    return text or response.text.strip() or response.reason_phrase


def _flatten(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return "; ".join(_flatten(item) for item in value)
    if isinstance(value, dict):
        return "; ".join(
            f"{key} {_flatten(item)}" for key, item in value.items()
        )
    return str(value)


def _project(repo_id: str) -> str:
    # Already-encoded paths keep their %2F, bare paths get encoded
    return repo_id if "%" in repo_id else quote(str(repo_id), safe="")


class GitLabClient:
    """ForgeClient over httpx with private-token authentication."""

    def __init__(
        self,
        api_url: str,
        token: str,
        timeout: float = 30.0,
        per_page: int = 100,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Create a client for one GitLab host.

        Args:
            api_url: Base URL of the GitLab instance (no /api/v4)
            token: Personal access token
            timeout: Request timeout in seconds
            per_page: Page size for list endpoints
            transport: Optional transport (httpx.MockTransport in tests)
        """
        self.api_url = api_url.rstrip("/")
        self.per_page = per_page
        self._client = httpx.AsyncClient(
            base_url=f"{self.api_url}{API_PREFIX}",
            headers={"PRIVATE-TOKEN": token},
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> GitLabClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> httpx.Response:
        logger.debug(
            "Forge request", method=method, path=path, params=params
        )
        try:
            response = await self._client.request(
                method, path, params=params, json=json_body
            )
        except httpx.HTTPError as e:
            raise ForgeError(0, f"{method} {path} failed: {e}") from e

        if response.status_code == 409:
            raise ForgeConflict(error_message(response))
        if response.is_error:
            message = error_message(response)
            logger.debug(
                "Forge error",
                status=response.status_code,
                message=message,
            )
            raise ForgeError(response.status_code, message)
        return response

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> Any:
        response = await self._send(
            method, path, params=params, json_body=json_body
        )
        if not response.content:
            return None
        return response.json()

    async def _paginate(
        self, path: str, params: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """GET every page of a list endpoint.

        GitLab names the following page in the X-Next-Page header and
        leaves it empty on the last one.
        """
        items = []
        page, seen = "1", set()
        while page and page not in seen:
            seen.add(page)
            response = await self._send("GET", path, params={
                **(params or {}),
                "per_page": self.per_page,
                "page": page,
            })
            if response.content:
                items.extend(response.json() or [])
            page = response.headers.get("X-Next-Page", "").strip()
        return items

    async def get_project(self, repo_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/projects/{_project(repo_id)}")

    async def create_merge_request(
        self, repo_id: str, fields: dict[str, Any]
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            f"/projects/{_project(repo_id)}/merge_requests",
            json_body=fields,
        )

    async def list_merge_requests(
        self, repo_id: str, state: str = "opened"
    ) -> list[dict[str, Any]]:
        return await self._paginate(
            f"/projects/{_project(repo_id)}/merge_requests",
            params={"state": state},
        )

    async def update_merge_request(
        self, repo_id: str, iid: int, fields: dict[str, Any]
    ) -> dict[str, Any]:
        return await self._request(
            "PUT",
            f"/projects/{_project(repo_id)}/merge_requests/{iid}",
            json_body=fields,
        )

    async def get_approvals(
        self, repo_id: str, iid: int
    ) -> dict[str, Any]:
        return await self._request(
            "GET",
            f"/projects/{_project(repo_id)}/merge_requests/{iid}/approvals",
        )

    async def update_approvers(
        self,
        repo_id: str,
        iid: int,
        approver_ids: list[int],
        approver_group_ids: list[int],
    ) -> dict[str, Any]:
        return await self._request(
            "PUT",
            f"/projects/{_project(repo_id)}/merge_requests/{iid}/approvers",
            json_body={
                "approver_ids": approver_ids,
                "approver_group_ids": approver_group_ids,
            },
        )

    async def list_labels(self, repo_id: str) -> list[dict[str, Any]]:
        return await self._paginate(f"/projects/{_project(repo_id)}/labels")

    async def search_users(self, query: str) -> list[dict[str, Any]]:
        return await self._request(
            "GET", "/users", params={"search": query}
        ) or []
