"""Inline title editing.

A two-state machine, Idle and Editing(task_id, draft). At most one task is
edited at a time. The draft never reaches the service until ``confirm()``;
``cancel()`` discards it.

Commit and focus-loss signals both map to ``confirm()``; the abort key maps
to ``cancel()``.
"""

from enum import Enum
from typing import TYPE_CHECKING

from todo_client.logging import Loggers
from todo_client.models import TaskId

if TYPE_CHECKING:
    from todo_client.store import TaskStore

logger = Loggers.sync()


class EditState(Enum):
    IDLE = "idle"
    EDITING = "editing"


class EditSession:
    """Tracks which task, if any, is being edited and its unsaved title."""

    def __init__(self, store: "TaskStore") -> None:
        self._store = store
        self._editing_id: TaskId | None = None
        self._draft_title = ""
        self._unsubscribe = store.subscribe(self._on_tasks_changed)

    @property
    def state(self) -> EditState:
        return EditState.IDLE if self._editing_id is None else EditState.EDITING

    @property
    def is_editing(self) -> bool:
        return self._editing_id is not None

    @property
    def editing_id(self) -> TaskId | None:
        return self._editing_id

    @property
    def draft_title(self) -> str:
        return self._draft_title

    async def start_edit(self, task_id: TaskId, current_title: str) -> bool:
        """Begin editing ``task_id`` with its current title as the draft.

        Starting on another task while editing confirms the current edit
        first. Unknown ids are refused.
        """
        if task_id not in self._store:
            logger.warning("edit_refused_unknown_task", task_id=task_id)
            return False
        if self._editing_id == task_id:
            return True
        if self.is_editing:
            await self.confirm()

        self._editing_id = task_id
        self._draft_title = current_title
        logger.debug("edit_started", task_id=task_id)
        return True

    def keystroke(self, text: str) -> None:
        """Replace the draft with the current input text."""
        if not self.is_editing:
            return
        self._draft_title = text

    async def confirm(self) -> bool:
        """Leave Editing, committing the draft if it is not blank.

        The session is Idle before the update is awaited, so a second
        confirm signal for the same edit does nothing.

        Returns:
            True if an update was sent and confirmed by the service.
        """
        if not self.is_editing:
            return False

        task_id, draft = self._editing_id, self._draft_title
        self._reset()

        if not draft.strip():
            logger.debug("edit_discarded_blank", task_id=task_id)
            return False

        task = self._store.get(task_id)
        if task is None:
            return False
        return await self._store.update_task(task_id, draft, task.completed)

    def cancel(self) -> None:
        """Discard the draft without updating. No-op while Idle."""
        if self.is_editing:
            logger.debug("edit_cancelled", task_id=self._editing_id)
            self._reset()

    # Input signals

    async def on_commit_key(self) -> bool:
        return await self.confirm()

    async def on_focus_lost(self) -> bool:
        return await self.confirm()

    def on_abort_key(self) -> None:
        self.cancel()

    def close(self) -> None:
        """Stop following the task store."""
        self._unsubscribe()

    def _reset(self) -> None:
        self._editing_id = None
        self._draft_title = ""

    def _on_tasks_changed(self) -> None:
        if self._editing_id is not None and self._editing_id not in self._store:
            logger.info("edit_dropped_task_gone", task_id=self._editing_id)
            self._reset()
