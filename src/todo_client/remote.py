"""HTTP client for the remote task service.

Wraps the four task endpoints. The client holds no auth state: every
call takes the current token explicitly and sends it verbatim in the
``Authorization`` header.

Usage:
    async with RemoteTaskClient("http://localhost:5000") as client:
        tasks = await client.fetch_all(token)
        task = await client.create(token, "Buy milk")
        await client.update(token, task.id, "Buy milk", completed=True)
        await client.delete(token, task.id)

Errors:
    NetworkError   transport failure, timeout, unexpected status, bad body
    AuthError      401 / 403
    NotFoundError  404
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx

from todo_client.errors import AuthError, NetworkError, NotFoundError
from todo_client.logging import Loggers
from todo_client.models import Task, TaskId

if TYPE_CHECKING:
    from todo_client.config import TodoSettings

logger = Loggers.remote()

AUTH_STATUSES = frozenset({401, 403})


def _is_task_id(value: Any) -> bool:
    return isinstance(value, (int, str)) and not isinstance(value, bool)


class RemoteTaskClient:
    """Stateless request wrapper, one coroutine per endpoint.

    No retries: every call may raise a RemoteError and the caller decides
    what to do with it.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: "TodoSettings",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "RemoteTaskClient":
        return cls(
            settings.api_host,
            timeout=settings.request_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "RemoteTaskClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ---- endpoints ----

    async def fetch_all(self, token: str) -> list[Task]:
        """List the user's tasks in server order."""
        response = await self._request("GET", "/tasks", token)
        data = self._json(response)
        items = data.get("tasks")
        if not isinstance(items, list):
            raise NetworkError("Malformed task list response", status_code=response.status_code)
        return [self._task(item, response) for item in items]

    async def create(self, token: str, title: str) -> Task:
        """Create a task; the server assigns its id."""
        response = await self._request("POST", "/tasks", token, json={"title": title})
        data = self._json(response)
        return self._task(data.get("task"), response)

    async def update(self, token: str, task_id: TaskId, title: str, completed: bool) -> None:
        """Replace both mutable fields of a task. The response body is ignored."""
        await self._request(
            "PUT",
            self._task_path(task_id),
            token,
            json={"title": title, "completed": completed},
        )

    async def delete(self, token: str, task_id: TaskId) -> None:
        """Delete a task."""
        await self._request("DELETE", self._task_path(task_id), token)

    # ---- helpers ----

    @staticmethod
    def _task_path(task_id: TaskId) -> str:
        return f"/tasks/{quote(str(task_id), safe='')}"

    async def _request(
        self,
        method: str,
        path: str,
        token: str,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method,
                path,
                headers={"Authorization": token},
                json=json,
            )
        except httpx.TimeoutException as e:
            raise NetworkError(f"{method} {path} timed out") from e
        except httpx.RequestError as e:
            raise NetworkError(f"{method} {path} failed: {e}") from e

        status = response.status_code
        logger.debug("remote_response", method=method, path=path, status=status)

        if status in AUTH_STATUSES:
            raise AuthError(f"{method} {path} rejected the token", status_code=status)
        if status == 404:
            raise NotFoundError(f"{method} {path}: task not found", status_code=status)
        if not response.is_success:
            raise NetworkError(
                f"{method} {path} returned {status}",
                status_code=status,
                details={"body": response.text[:200]},
            )
        return response

    @staticmethod
    def _json(response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise NetworkError("Response body is not JSON", status_code=response.status_code) from e
        if not isinstance(data, dict):
            raise NetworkError("Response body is not a JSON object", status_code=response.status_code)
        return data

    @staticmethod
    def _task(item: Any, response: httpx.Response) -> Task:
        # Ids are JSON numbers or strings; None would read as "no task"
        if not isinstance(item, dict) or not _is_task_id(item.get("id")):
            raise NetworkError("Malformed task in response", status_code=response.status_code)
        return Task.from_dict(item)
