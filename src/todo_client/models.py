"""Data model: tasks and notices."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

TaskId = int | str


@dataclass(frozen=True)
class Task:
    """A single task as held by the client.

    Tasks are immutable; local updates replace the entry.
    """

    id: TaskId
    title: str
    completed: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Task":
        """Build a task from its wire form.

        Raises:
            KeyError: If ``id`` is missing.
        """
        return cls(
            id=data["id"],
            title=str(data.get("title") or ""),
            completed=bool(data.get("completed", False)),
        )


class NoticeKind(Enum):
    """Classification of a user-facing notice."""

    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    """A user-facing status message."""

    message: str
    kind: NoticeKind

    @property
    def is_error(self) -> bool:
        return self.kind is NoticeKind.ERROR
