"""Single-slot user-facing notice."""

from todo_client.models import Notice, NoticeKind


class NotificationChannel:
    """Holds at most one notice; each write replaces the previous one."""

    def __init__(self) -> None:
        self._notice: Notice | None = None

    @property
    def notice(self) -> Notice | None:
        return self._notice

    def set_notice(self, message: str, kind: NoticeKind) -> Notice:
        self._notice = Notice(message=message, kind=kind)
        return self._notice

    def success(self, message: str) -> Notice:
        return self.set_notice(message, NoticeKind.SUCCESS)

    def error(self, message: str) -> Notice:
        return self.set_notice(message, NoticeKind.ERROR)

    def clear(self) -> None:
        self._notice = None
