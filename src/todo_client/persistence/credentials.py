"""Auth token persistence.

The token is opaque: it is stored and returned as-is, never inspected.
Stored as ``{"token": "..."}`` in a single JSON file so that it survives
process restarts.
"""

import json
from pathlib import Path
from typing import TYPE_CHECKING

from todo_client.logging import Loggers
from todo_client.persistence._utils import atomic_write_json, read_json

if TYPE_CHECKING:
    from todo_client.config import TodoSettings

logger = Loggers.credentials()

TOKEN_KEY = "token"


class CredentialStore:
    """Persists the auth token across process restarts.

    The value is loaded once at construction and cached; every ``set`` and
    ``clear`` writes through to disk before returning.

    Example:
        >>> store = CredentialStore(settings.credentials_path)
        >>> store.set("abc123")
        >>> CredentialStore(settings.credentials_path).get()
        'abc123'
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._token: str | None = self._load()

    @classmethod
    def from_settings(cls, settings: "TodoSettings") -> "CredentialStore":
        return cls(settings.credentials_path)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    def _load(self) -> str | None:
        try:
            data = read_json(self._path)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("credentials_unreadable", path=str(self._path), error=str(e))
            return None
        if not isinstance(data, dict):
            return None
        token = data.get(TOKEN_KEY)
        if not isinstance(token, str) or not token:
            return None
        logger.debug("credentials_loaded", path=str(self._path))
        return token

    def get(self) -> str | None:
        """Return the current token, or None when unauthenticated."""
        return self._token

    def set(self, token: str) -> None:
        """Store a token and persist it.

        An empty token is treated as ``clear()``.
        """
        if not token:
            self.clear()
            return
        atomic_write_json(self._path, {TOKEN_KEY: token})
        self._token = token
        logger.info("credentials_saved", path=str(self._path))

    def clear(self) -> None:
        """Forget the token, removing the persisted copy."""
        self._path.unlink(missing_ok=True)
        self._token = None
        logger.info("credentials_cleared", path=str(self._path))
