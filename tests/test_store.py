"""Tests for the task store."""

import asyncio

import pytest

from todo_client.errors import AuthError, NetworkError, NotFoundError
from todo_client.models import NoticeKind, Task
from todo_client.notifications import NotificationChannel
from todo_client.persistence.credentials import CredentialStore
from todo_client.store import EMPTY_TITLE_MESSAGE, TaskStore
from tests.conftest import TEST_TOKEN
from tests.fakes import FakeRemoteTaskClient

SEED = [
    {"id": 3, "title": "Walk dog", "completed": False},
    {"id": 1, "title": "Buy milk", "completed": True},
    {"id": 2, "title": "Pay rent", "completed": False},
]


@pytest.fixture
def seeded_client() -> FakeRemoteTaskClient:
    return FakeRemoteTaskClient(SEED, accepted_token=TEST_TOKEN)


@pytest.fixture
def seeded_store(
    seeded_client: FakeRemoteTaskClient,
    credentials: CredentialStore,
    notices: NotificationChannel,
) -> TaskStore:
    return TaskStore(seeded_client, credentials, notices)


def ids(store: TaskStore) -> list:
    return [task.id for task in store.tasks]


class TestRefresh:
    """Tests for TaskStore.refresh()."""

    @pytest.mark.asyncio
    async def test_refresh_keeps_server_order(self, seeded_store: TaskStore):
        assert await seeded_store.refresh() is True
        assert ids(seeded_store) == [3, 1, 2]
        assert seeded_store.get(1) == Task(1, "Buy milk", True)

    @pytest.mark.asyncio
    async def test_refresh_replaces_collection(self, seeded_store, seeded_client):
        await seeded_store.refresh()
        seeded_client.server_tasks = [{"id": 9, "title": "Other", "completed": False}]

        await seeded_store.refresh()

        assert ids(seeded_store) == [9]

    @pytest.mark.asyncio
    async def test_refresh_failure_keeps_collection(self, seeded_store, seeded_client, notices):
        await seeded_store.refresh()
        before = seeded_store.tasks
        seeded_client.failures["fetch_all"] = NetworkError("down")

        assert await seeded_store.refresh() is False

        assert seeded_store.tasks == before
        assert notices.notice is None

    @pytest.mark.asyncio
    async def test_refresh_drops_duplicate_ids(self, credentials, notices):
        client = FakeRemoteTaskClient(
            [
                {"id": 1, "title": "first", "completed": False},
                {"id": 1, "title": "second", "completed": True},
                {"id": 2, "title": "other", "completed": False},
            ],
            accepted_token=TEST_TOKEN,
        )
        store = TaskStore(client, credentials, notices)

        await store.refresh()

        assert ids(store) == [1, 2]
        assert store.get(1).title == "first"

    @pytest.mark.asyncio
    async def test_refresh_without_token_makes_no_call(self, seeded_store, seeded_client, credentials):
        credentials.clear()

        assert await seeded_store.refresh() is False
        assert seeded_client.calls == []


class TestCreateTask:
    """Tests for TaskStore.create_task()."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("title", ["", "   ", "\t\n"])
    async def test_blank_title_rejected_locally(self, store, fake_client, notices, title):
        assert await store.create_task(title) is False

        assert len(store) == 0
        assert fake_client.calls == []
        assert notices.notice.message == EMPTY_TITLE_MESSAGE
        assert notices.notice.kind is NoticeKind.ERROR

    @pytest.mark.asyncio
    async def test_create_appends_and_clears_notice(self, store, notices):
        notices.error(EMPTY_TITLE_MESSAGE)

        assert await store.create_task("Buy milk") is True

        assert len(store) == 1
        assert store.tasks[0] == Task(1, "Buy milk", False)
        assert notices.notice is None

    @pytest.mark.asyncio
    async def test_create_appends_at_end(self, seeded_store):
        await seeded_store.refresh()

        await seeded_store.create_task("New one")

        assert ids(seeded_store) == [3, 1, 2, 4]

    @pytest.mark.asyncio
    async def test_create_sends_title_unchanged(self, store, fake_client):
        await store.create_task("  padded  ")

        assert fake_client.calls_to("create") == [("create", "  padded  ")]

    @pytest.mark.asyncio
    async def test_many_creates_never_duplicate_ids(self, store):
        for n in range(20):
            await store.create_task(f"task {n}")

        assert len(ids(store)) == len(set(ids(store))) == 20

    @pytest.mark.asyncio
    async def test_create_with_existing_id_replaces_entry(self, seeded_store, seeded_client):
        await seeded_store.refresh()
        seeded_client.next_id = 1

        await seeded_store.create_task("Buy oat milk")

        assert ids(seeded_store) == [3, 1, 2]
        assert seeded_store.get(1).title == "Buy oat milk"

    @pytest.mark.asyncio
    async def test_create_failure_leaves_collection(self, store, fake_client, notices):
        fake_client.failures["create"] = NetworkError("down")

        assert await store.create_task("Buy milk") is False

        assert len(store) == 0
        assert notices.notice is None


class TestUpdateTask:
    """Tests for update_task() and toggle_completion()."""

    @pytest.mark.asyncio
    async def test_update_sends_both_fields(self, seeded_store, seeded_client):
        await seeded_store.refresh()

        await seeded_store.update_task(1, "Buy bread", True)

        assert seeded_client.calls_to("update") == [("update", 1, "Buy bread", True)]

    @pytest.mark.asyncio
    async def test_update_preserves_position(self, seeded_store):
        await seeded_store.refresh()

        assert await seeded_store.update_task(1, "Buy bread", False) is True

        assert ids(seeded_store) == [3, 1, 2]
        assert seeded_store.tasks[1] == Task(1, "Buy bread", False)

    @pytest.mark.asyncio
    async def test_failed_update_leaves_state_identical(self, seeded_store, seeded_client, notices):
        await seeded_store.refresh()
        before = seeded_store.tasks
        seeded_client.failures["update"] = NetworkError("timeout")

        assert await seeded_store.update_task(1, "Changed", False) is False

        assert seeded_store.tasks == before
        assert all(a is b for a, b in zip(seeded_store.tasks, before))
        assert notices.notice is None

    @pytest.mark.asyncio
    async def test_update_unknown_id_is_swallowed(self, seeded_store):
        await seeded_store.refresh()
        before = seeded_store.tasks

        assert await seeded_store.update_task(42, "Nope", False) is False

        assert seeded_store.tasks == before

    @pytest.mark.asyncio
    async def test_toggle_flips_completed(self, seeded_store, seeded_client):
        await seeded_store.refresh()

        await seeded_store.toggle_completion(2, False, "Pay rent")

        assert seeded_store.get(2) == Task(2, "Pay rent", True)
        assert seeded_client.calls_to("update") == [("update", 2, "Pay rent", True)]

    @pytest.mark.asyncio
    async def test_toggle_twice_restores_value(self, seeded_store):
        await seeded_store.refresh()

        task = seeded_store.get(2)
        await seeded_store.toggle_completion(task.id, task.completed, task.title)
        task = seeded_store.get(2)
        await seeded_store.toggle_completion(task.id, task.completed, task.title)

        assert seeded_store.get(2).completed is False

    @pytest.mark.asyncio
    async def test_auth_error_is_swallowed(self, seeded_store, seeded_client):
        await seeded_store.refresh()
        seeded_client.failures["update"] = AuthError("expired", status_code=401)

        assert await seeded_store.toggle_completion(2, False, "Pay rent") is False
        assert seeded_store.get(2).completed is False


class TestDeleteTask:
    """Tests for TaskStore.delete_task()."""

    @pytest.mark.asyncio
    async def test_delete_removes_only_that_task(self, seeded_store):
        await seeded_store.refresh()

        assert await seeded_store.delete_task(1) is True

        assert ids(seeded_store) == [3, 2]

    @pytest.mark.asyncio
    async def test_delete_failure_keeps_entry(self, seeded_store, seeded_client, notices):
        await seeded_store.refresh()
        seeded_client.failures["delete"] = NotFoundError("gone", status_code=404)

        assert await seeded_store.delete_task(1) is False

        assert ids(seeded_store) == [3, 1, 2]
        assert notices.notice is None


class TestFailureNotices:
    """Tests for the opt-in failure notices."""

    @pytest.mark.asyncio
    async def test_failure_notice_when_enabled(self, seeded_client, credentials, notices):
        store = TaskStore(seeded_client, credentials, notices, notify_on_failure=True)
        await store.refresh()
        seeded_client.failures["delete"] = NetworkError("down")

        await store.delete_task(1)

        assert notices.notice.kind is NoticeKind.ERROR
        assert notices.notice.message == "Could not delete task"


class TestConcurrency:
    """Tests for overlapping mutations of the same task."""

    @pytest.mark.asyncio
    async def test_serialized_mutations_apply_in_call_order(self, seeded_store, seeded_client):
        await seeded_store.refresh()
        # First request is slow, second is fast
        seeded_client.latency["update"] = [0.05, 0.0]

        await asyncio.gather(
            seeded_store.update_task(2, "first", True),
            seeded_store.update_task(2, "second", False),
        )

        assert seeded_store.get(2) == Task(2, "second", False)
        assert seeded_client.server_tasks[2]["title"] == "second"

    @pytest.mark.asyncio
    async def test_unserialized_last_response_wins(self, seeded_client, credentials, notices):
        store = TaskStore(seeded_client, credentials, notices, serialize_mutations=False)
        await store.refresh()
        seeded_client.latency["update"] = [0.05, 0.0]

        await asyncio.gather(
            store.update_task(2, "first", True),
            store.update_task(2, "second", False),
        )

        assert store.get(2) == Task(2, "first", True)

    @pytest.mark.asyncio
    async def test_response_after_logout_is_discarded(self, seeded_store, seeded_client, credentials):
        seeded_client.latency["fetch_all"] = [0.02]

        refresh = asyncio.create_task(seeded_store.refresh())
        await asyncio.sleep(0)
        credentials.clear()

        assert await refresh is False
        assert len(seeded_store) == 0

    @pytest.mark.asyncio
    async def test_queued_mutation_not_sent_after_logout(self, seeded_store, seeded_client, credentials):
        await seeded_store.refresh()
        seeded_client.latency["delete"] = [0.02]

        delete = asyncio.create_task(seeded_store.delete_task(1))
        await asyncio.sleep(0)
        update = asyncio.create_task(seeded_store.update_task(1, "b", True))
        await asyncio.sleep(0)
        credentials.clear()

        assert await delete is False
        assert await update is False
        assert seeded_client.calls_to("update") == []


class TestChangeListeners:
    """Tests for TaskStore.subscribe()."""

    @pytest.mark.asyncio
    async def test_listener_called_on_change(self, seeded_store):
        calls = []
        unsubscribe = seeded_store.subscribe(lambda: calls.append(len(seeded_store)))

        await seeded_store.refresh()
        await seeded_store.delete_task(3)
        unsubscribe()
        await seeded_store.delete_task(1)

        assert calls == [3, 2]

    def test_clear_is_local(self, seeded_store, seeded_client):
        seeded_store.clear()

        assert len(seeded_store) == 0
        assert seeded_client.calls == []
