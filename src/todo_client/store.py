"""Local task collection kept in step with the remote service.

Every mutation is confirm-then-apply: the remote call runs first and the
in-memory collection changes only after it succeeds. Remote failures are
logged and leave local state untouched.

Example:
    >>> store = TaskStore(client, credentials, notices)
    >>> await store.refresh()
    >>> await store.create_task("Buy milk")
    >>> await store.toggle_completion(task.id, task.completed, task.title)
"""

import asyncio
from collections.abc import AsyncIterator, Callable, Iterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from todo_client.errors import RemoteError
from todo_client.logging import Loggers
from todo_client.models import Task, TaskId
from todo_client.notifications import NotificationChannel

if TYPE_CHECKING:
    from todo_client.persistence.credentials import CredentialStore
    from todo_client.remote import RemoteTaskClient

logger = Loggers.sync()

EMPTY_TITLE_MESSAGE = "Task cannot be empty"

# Generic notices used when failure notices are enabled
FAILURE_MESSAGES = {
    "refresh": "Could not load tasks",
    "create": "Could not create task",
    "update": "Could not update task",
    "delete": "Could not delete task",
}

ChangeListener = Callable[[], None]


class TaskStore:
    """Owns the ordered in-memory task collection.

    Order is the server's order after ``refresh()``; created tasks are
    appended; updates keep position; deletes remove in place. Ids are
    unique within the collection.

    Args:
        client: Remote client used for every mutation.
        credentials: Source of the current token.
        notices: Channel for user-facing notices.
        serialize_mutations: Run update/toggle/delete of the same task one
            at a time, in call order.
        notify_on_failure: Publish a generic error notice when a remote
            call fails (otherwise failures are only logged).
    """

    def __init__(
        self,
        client: "RemoteTaskClient",
        credentials: "CredentialStore",
        notices: NotificationChannel,
        serialize_mutations: bool = True,
        notify_on_failure: bool = False,
    ) -> None:
        self._client = client
        self._credentials = credentials
        self._notices = notices
        self._serialize_mutations = serialize_mutations
        self._notify_on_failure = notify_on_failure
        self._tasks: list[Task] = []
        self._listeners: list[ChangeListener] = []
        self._locks: dict[TaskId, asyncio.Lock] = {}
        self._lock_users: dict[TaskId, int] = {}

    # ---- read side ----

    @property
    def tasks(self) -> tuple[Task, ...]:
        """Snapshot of the collection, in order."""
        return tuple(self._tasks)

    def get(self, task_id: TaskId) -> Task | None:
        """Get a task by id."""
        index = self._index_of(task_id)
        return None if index is None else self._tasks[index]

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return any(task.id == task_id for task in self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(self.tasks)

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Call ``listener`` after every change to the collection.

        Returns:
            A function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def clear(self) -> None:
        """Drop the local collection without touching the service."""
        if self._tasks:
            self._tasks = []
            self._changed()

    # ---- operations ----

    async def refresh(self) -> bool:
        """Replace the collection with the server's list."""
        token = self._current_token("refresh")
        if token is None:
            return False

        try:
            fetched = await self._client.fetch_all(token)
        except RemoteError as e:
            self._remote_failed("refresh", e)
            return False

        if not self._token_unchanged(token, "refresh"):
            return False

        self._tasks = self._unique(fetched)
        logger.info("tasks_refreshed", count=len(self._tasks))
        self._changed()
        return True

    async def create_task(self, title: str) -> bool:
        """Create a task and append it once the server confirms.

        Empty or whitespace-only titles are rejected locally with an error
        notice and never reach the network.
        """
        if not title or not title.strip():
            self._notices.error(EMPTY_TITLE_MESSAGE)
            logger.info("create_rejected", reason="empty_title")
            return False

        token = self._current_token("create")
        if token is None:
            return False

        try:
            task = await self._client.create(token, title)
        except RemoteError as e:
            self._remote_failed("create", e)
            return False

        if not self._token_unchanged(token, "create"):
            return False

        index = self._index_of(task.id)
        if index is None:
            self._tasks.append(task)
        else:
            logger.warning("create_returned_existing_id", task_id=task.id)
            self._tasks[index] = task
        self._notices.clear()
        logger.info("task_created", task_id=task.id)
        self._changed()
        return True

    async def update_task(self, task_id: TaskId, title: str, completed: bool) -> bool:
        """Replace a task's title and completion flag.

        Both fields are always sent. The local entry keeps its position and
        changes only after the server confirms.
        """
        async with self._task_lock(task_id):
            # Token is read under the lock; a logout while queued cancels the call
            token = self._current_token("update", task_id)
            if token is None:
                return False

            try:
                await self._client.update(token, task_id, title, completed)
            except RemoteError as e:
                self._remote_failed("update", e, task_id)
                return False

            if not self._token_unchanged(token, "update"):
                return False

            index = self._index_of(task_id)
            if index is not None:
                self._tasks[index] = Task(id=task_id, title=title, completed=completed)
                self._changed()
            logger.info("task_updated", task_id=task_id, completed=completed)
            return True

    async def toggle_completion(self, task_id: TaskId, completed: bool, title: str) -> bool:
        """Flip completion; ``completed`` is the value the caller last saw."""
        return await self.update_task(task_id, title, not completed)

    async def delete_task(self, task_id: TaskId) -> bool:
        """Delete a task, removing it locally once the server confirms."""
        async with self._task_lock(task_id):
            token = self._current_token("delete", task_id)
            if token is None:
                return False

            try:
                await self._client.delete(token, task_id)
            except RemoteError as e:
                self._remote_failed("delete", e, task_id)
                return False

            if not self._token_unchanged(token, "delete"):
                return False

            remaining = [task for task in self._tasks if task.id != task_id]
            if len(remaining) != len(self._tasks):
                self._tasks = remaining
                self._changed()
            logger.info("task_deleted", task_id=task_id)
            return True

    # ---- helpers ----

    def _index_of(self, task_id: TaskId) -> int | None:
        for index, task in enumerate(self._tasks):
            if task.id == task_id:
                return index
        return None

    @staticmethod
    def _unique(tasks: list[Task]) -> list[Task]:
        seen: set[TaskId] = set()
        result: list[Task] = []
        for task in tasks:
            if task.id in seen:
                logger.warning("duplicate_task_id_dropped", task_id=task.id)
                continue
            seen.add(task.id)
            result.append(task)
        return result

    def _current_token(self, operation: str, task_id: TaskId | None = None) -> str | None:
        token = self._credentials.get()
        if token is None:
            logger.warning("operation_without_token", operation=operation, task_id=task_id)
        return token

    def _token_unchanged(self, token: str, operation: str) -> bool:
        # A response for a previous login must not land in the current collection
        if self._credentials.get() == token:
            return True
        logger.info("stale_response_discarded", operation=operation)
        return False

    def _remote_failed(
        self,
        operation: str,
        error: RemoteError,
        task_id: TaskId | None = None,
    ) -> None:
        logger.error(
            "remote_call_failed",
            operation=operation,
            task_id=task_id,
            error_code=error.error_code,
            status=error.status_code,
            error=error.message,
        )
        if self._notify_on_failure:
            self._notices.error(FAILURE_MESSAGES[operation])

    def _changed(self) -> None:
        for listener in list(self._listeners):
            listener()

    @asynccontextmanager
    async def _task_lock(self, task_id: TaskId) -> AsyncIterator[None]:
        if not self._serialize_mutations:
            yield
            return

        lock = self._locks.setdefault(task_id, asyncio.Lock())
        self._lock_users[task_id] = self._lock_users.get(task_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[task_id] -= 1
            if self._lock_users[task_id] == 0:
                del self._lock_users[task_id]
                del self._locks[task_id]
