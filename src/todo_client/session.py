"""Client state container.

TodoSession composes the credential store, remote client, task store,
edit session and notice channel, and owns the authentication lifecycle:

    unauthenticated --login(token)--> authenticated   (one refresh)
    authenticated   --logout()------> unauthenticated (collection cleared)

Example:
    async with TodoSession.from_settings(settings) as session:
        await session.restore()
        if not session.is_authenticated:
            await session.login(token)
        await session.tasks.create_task("Buy milk")
"""

from typing import TYPE_CHECKING

import httpx

from todo_client.editing import EditSession
from todo_client.errors import ValidationError
from todo_client.logging import Loggers
from todo_client.notifications import NotificationChannel
from todo_client.persistence.credentials import CredentialStore
from todo_client.remote import RemoteTaskClient
from todo_client.store import TaskStore

if TYPE_CHECKING:
    from todo_client.config import TodoSettings

logger = Loggers.sync()

LOGOUT_MESSAGE = "Successfully logged out."


class TodoSession:
    """Holds all client state and exposes it to a presentation layer."""

    def __init__(
        self,
        credentials: CredentialStore,
        client: RemoteTaskClient,
        notices: NotificationChannel | None = None,
        serialize_mutations: bool = True,
        notify_on_failure: bool = False,
    ) -> None:
        self.credentials = credentials
        self.client = client
        self.notices = notices or NotificationChannel()
        self.tasks = TaskStore(
            client,
            credentials,
            self.notices,
            serialize_mutations=serialize_mutations,
            notify_on_failure=notify_on_failure,
        )
        self.editor = EditSession(self.tasks)

    @classmethod
    def from_settings(
        cls,
        settings: "TodoSettings",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "TodoSession":
        """Build a session wired from settings."""
        return cls(
            CredentialStore.from_settings(settings),
            RemoteTaskClient.from_settings(settings, transport=transport),
            serialize_mutations=settings.serialize_mutations,
            notify_on_failure=settings.notify_on_failure,
        )

    async def __aenter__(self) -> "TodoSession":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    @property
    def token(self) -> str | None:
        return self.credentials.get()

    @property
    def is_authenticated(self) -> bool:
        return self.credentials.is_authenticated

    async def restore(self) -> bool:
        """Fetch tasks for a token persisted by a previous run.

        Returns:
            True if a token was found and the fetch succeeded.
        """
        if not self.is_authenticated:
            logger.debug("no_stored_token")
            return False
        logger.info("session_restored")
        return await self.tasks.refresh()

    async def login(self, token: str, notice: str | None = None) -> bool:
        """Accept a token produced by the login or registration form.

        The collection is fetched only on the unauthenticated to
        authenticated transition; replacing a token while authenticated just
        stores it.

        Args:
            token: Opaque credential.
            notice: Optional message from the form, shown as a success notice.

        Returns:
            True if a fetch ran and succeeded.

        Raises:
            ValidationError: If the token is empty.
        """
        if not token:
            raise ValidationError("Token cannot be empty")

        was_authenticated = self.is_authenticated
        self.credentials.set(token)
        if notice:
            self.notices.success(notice)
        if was_authenticated:
            return False
        logger.info("logged_in")
        return await self.tasks.refresh()

    def logout(self) -> None:
        """Forget the token and everything fetched with it."""
        self.credentials.clear()
        self.editor.cancel()
        self.tasks.clear()
        self.notices.success(LOGOUT_MESSAGE)
        logger.info("logged_out")

    async def aclose(self) -> None:
        self.editor.close()
        await self.client.aclose()
