"""todo-client - a client for a personal task list.

Keeps a local view of the user's tasks in step with a remote task service:

- CredentialStore persists the auth token across restarts
- RemoteTaskClient wraps the list/create/update/delete endpoints
- TaskStore holds the ordered collection and applies confirmed mutations
- EditSession drives inline title editing
- NotificationChannel holds the single current notice
- TodoSession ties them together and owns login/logout
"""

from todo_client.config import (
    SettingsContext,
    TodoSettings,
    get_settings,
    reload_settings,
    set_settings,
    validate_settings,
)
from todo_client.editing import EditSession, EditState
from todo_client.errors import (
    AuthError,
    ConfigurationError,
    NetworkError,
    NotFoundError,
    RemoteError,
    TodoClientError,
    ValidationError,
)
from todo_client.models import Notice, NoticeKind, Task
from todo_client.notifications import NotificationChannel
from todo_client.persistence.credentials import CredentialStore
from todo_client.remote import RemoteTaskClient
from todo_client.session import TodoSession
from todo_client.store import TaskStore

__all__ = [
    # Settings
    "TodoSettings",
    "SettingsContext",
    "get_settings",
    "set_settings",
    "reload_settings",
    "validate_settings",
    # Core
    "CredentialStore",
    "RemoteTaskClient",
    "TaskStore",
    "EditSession",
    "EditState",
    "NotificationChannel",
    "TodoSession",
    # Data
    "Task",
    "Notice",
    "NoticeKind",
    # Errors
    "TodoClientError",
    "ValidationError",
    "ConfigurationError",
    "RemoteError",
    "NetworkError",
    "AuthError",
    "NotFoundError",
]

__version__ = "0.1.0"
