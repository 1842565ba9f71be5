"""Shared test fixtures and utilities for todo-client tests.

Provides:
- MockContext for isolating tests from global state
- A temporary workspace and credential store
- A task store, edit session and session wired to an in-memory service
"""

import os
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from todo_client.config import (
    TodoSettings,
    reload_settings,
    set_settings,
)
from todo_client.editing import EditSession
from todo_client.notifications import NotificationChannel
from todo_client.persistence.credentials import CredentialStore
from todo_client.session import TodoSession
from todo_client.store import TaskStore
from tests.fakes import FakeRemoteTaskClient

TEST_TOKEN = "test-token"


class MockContext:
    """Context manager for isolating tests from global state.

    Handles:
    - Resetting global settings singleton
    - Providing a temporary workspace directory
    - Hiding TODO_CLIENT_* environment variables

    Usage:
        with MockContext(api_host="http://api.test") as ctx:
            settings = ctx.settings
            workspace = ctx.workspace_dir
    """

    def __init__(self, **settings_kwargs):
        self._settings_kwargs = settings_kwargs
        self._temp_dir: tempfile.TemporaryDirectory | None = None
        self._settings: TodoSettings | None = None
        self._original_env: dict[str, str] = {}

    def __enter__(self) -> "MockContext":
        self._temp_dir = tempfile.TemporaryDirectory()
        workspace_dir = Path(self._temp_dir.name)

        for var in list(os.environ):
            if var.startswith("TODO_CLIENT_"):
                self._original_env[var] = os.environ.pop(var)

        self._settings = TodoSettings(
            workspace_dir=workspace_dir,
            **self._settings_kwargs,
        )
        set_settings(self._settings)

        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        os.environ.update(self._original_env)
        reload_settings()
        if self._temp_dir:
            self._temp_dir.cleanup()

    @property
    def settings(self) -> TodoSettings:
        if self._settings is None:
            raise RuntimeError("MockContext not entered")
        return self._settings

    @property
    def workspace_dir(self) -> Path:
        if self._temp_dir is None:
            raise RuntimeError("MockContext not entered")
        return Path(self._temp_dir.name)


@pytest.fixture
def mock_context() -> Generator[MockContext, None, None]:
    """Fixture providing an isolated test context."""
    with MockContext() as ctx:
        yield ctx


@pytest.fixture
def temp_workspace(tmp_path: Path) -> Path:
    workspace = tmp_path / "workspace"
    workspace.mkdir(parents=True)
    return workspace


@pytest.fixture
def credentials(temp_workspace: Path) -> CredentialStore:
    """Credential store already holding a token."""
    store = CredentialStore(temp_workspace / "credentials.json")
    store.set(TEST_TOKEN)
    return store


@pytest.fixture
def fake_client() -> FakeRemoteTaskClient:
    return FakeRemoteTaskClient(accepted_token=TEST_TOKEN)


@pytest.fixture
def notices() -> NotificationChannel:
    return NotificationChannel()


@pytest.fixture
def store(
    fake_client: FakeRemoteTaskClient,
    credentials: CredentialStore,
    notices: NotificationChannel,
) -> TaskStore:
    return TaskStore(fake_client, credentials, notices)


@pytest.fixture
def editor(store: TaskStore) -> EditSession:
    return EditSession(store)


@pytest.fixture
def session(temp_workspace: Path, fake_client: FakeRemoteTaskClient) -> TodoSession:
    """Logged-out session backed by the fake service."""
    return TodoSession(CredentialStore(temp_workspace / "credentials.json"), fake_client)
