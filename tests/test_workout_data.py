"""Tests for WorkoutDataService and authentication events."""

import asyncio

import pytest
import pytest_asyncio

from conftest import insert_document, make_workout
from liftbook.db.kv import FileKeyValueStorage
from liftbook.db.local import LocalWorkoutStore
from liftbook.errors import DataAccessError, NetworkError, WorkoutNotFoundError
from liftbook.services.auth import AuthStateNotifier, SessionFileProvider
from liftbook.services.sync import SyncState
from liftbook.services.workout_data import (
    CLEAR_FAILED,
    DELETE_FAILED,
    SAVE_FAILED,
    SUBSCRIPTION_FAILED,
    SYNC_FAILED,
    WorkoutDataService,
    open_workout_data,
)


class UnclearableStorage(FileKeyValueStorage):
    """Storage that cannot delete keys."""

    def remove(self, key):
        raise OSError(13, "Permission denied")


@pytest_asyncio.fixture
async def service(local_store, remote_store):
    service = WorkoutDataService(local_store, remote_store)
    yield service
    service.close()


@pytest.fixture
def auth(service):
    notifier = AuthStateNotifier()
    service.attach(notifier)
    return notifier


class TestAuthStateNotifier:
    """Tests for auth event delivery."""

    @pytest.mark.asyncio
    async def test_listeners_receive_events_in_order(self):
        notifier = AuthStateNotifier()
        seen = []

        async def first(user_id):
            seen.append(("first", user_id))

        async def second(user_id):
            seen.append(("second", user_id))

        notifier.on_auth_state_changed(first)
        notifier.on_auth_state_changed(second)
        await notifier.sign_in("alice")
        await notifier.sign_out()

        assert seen == [
            ("first", "alice"),
            ("second", "alice"),
            ("first", None),
            ("second", None),
        ]
        assert notifier.current_user is None

    @pytest.mark.asyncio
    async def test_unsubscribe(self):
        notifier = AuthStateNotifier()
        seen = []

        async def listener(user_id):
            seen.append(user_id)

        unsubscribe = notifier.on_auth_state_changed(listener)
        unsubscribe()
        unsubscribe()
        await notifier.sign_in("alice")

        assert seen == []

    @pytest.mark.asyncio
    async def test_empty_user_id_rejected(self):
        with pytest.raises(ValueError):
            await AuthStateNotifier().sign_in("")

    @pytest.mark.asyncio
    async def test_session_file_persists_user(self, storage):
        provider = SessionFileProvider(storage)
        await provider.sign_in("alice")

        restored = SessionFileProvider(storage)
        seen = []

        async def listener(user_id):
            seen.append(user_id)

        restored.on_auth_state_changed(listener)
        assert await restored.restore() == "alice"
        assert seen == ["alice"]

        await restored.sign_out()
        assert SessionFileProvider(storage).stored_user is None

    @pytest.mark.asyncio
    async def test_restore_without_session(self, storage):
        assert await SessionFileProvider(storage).restore() is None


class TestSignedOut:
    """Without a user everything goes to the local store."""

    @pytest.mark.asyncio
    async def test_create_then_list(self, service, remote_store, monkeypatch):
        async def unreachable(*args, **kwargs):
            raise AssertionError("remote store contacted")

        monkeypatch.setattr(remote_store, "create", unreachable)
        monkeypatch.setattr(remote_store, "list_for_user", unreachable)

        created = await service.create(make_workout())

        assert [w.id for w in await service.list()] == [created.id]
        assert not service.authenticated

    @pytest.mark.asyncio
    async def test_update_delete_get(self, service):
        created = await service.create(make_workout())

        await service.update(created.id, make_workout(exercises=[("Row", 60, 8)]))
        assert (await service.get_by_id(created.id)).exercises[0].name == "Row"

        await service.delete(created.id)
        assert await service.list() == []

    @pytest.mark.asyncio
    async def test_missing_workout_maps_to_data_access_error(self, service):
        with pytest.raises(DataAccessError) as exc_info:
            await service.delete("missing")

        assert str(exc_info.value) == DELETE_FAILED
        assert service.error == DELETE_FAILED
        assert isinstance(exc_info.value.__cause__, WorkoutNotFoundError)

    @pytest.mark.asyncio
    async def test_next_write_clears_error(self, service):
        with pytest.raises(DataAccessError):
            await service.delete("missing")

        await service.create(make_workout())

        assert service.error == ""


class TestLogin:
    """Migration and live data after sign in."""

    @pytest.mark.asyncio
    async def test_login_migrates_local_workouts(self, service, auth, local_store, remote_store):
        await remote_store.create("alice", make_workout(date="2024-01-01"))
        await service.create(make_workout(date="2024-01-01"))
        await service.create(make_workout(date="2024-01-02"))

        await auth.sign_in("alice")
        workouts = await service.list()

        assert service.authenticated
        assert service.session.state == SyncState.SYNCED
        assert (service.last_sync.synced, service.last_sync.skipped) == (1, 1)
        assert [w.day.isoformat() for w in workouts] == ["2024-01-02", "2024-01-01"]
        assert local_store.list() == []

    @pytest.mark.asyncio
    async def test_writes_reach_list_through_subscription(self, service, auth):
        await auth.sign_in("alice")

        created = await service.create(make_workout())
        await service.settled()
        assert [w.id for w in await service.list()] == [created.id]

        await service.update(created.id, make_workout(exercises=[("Row", 60, 8)]))
        await service.settled()
        assert (await service.list())[0].exercises[0].name == "Row"
        assert (await service.get_by_id(created.id)).exercises[0].name == "Row"

        await service.delete(created.id)
        await service.settled()
        assert await service.list() == []

    @pytest.mark.asyncio
    async def test_signed_in_writes_skip_local_store(self, service, auth, local_store):
        await auth.sign_in("alice")

        await service.create(make_workout())

        assert local_store.list() == []

    @pytest.mark.asyncio
    async def test_same_user_event_does_not_migrate_again(self, service, auth, local_store):
        await auth.sign_in("alice")
        local_store.create(make_workout())

        await auth.sign_in("alice")

        assert len(local_store.list()) == 1

    @pytest.mark.asyncio
    async def test_logout_reverts_to_local_store(self, service, auth, local_store):
        await auth.sign_in("alice")
        await service.create(make_workout(date="2024-01-01"))
        await service.settled()

        await auth.sign_out()

        assert not service.authenticated
        assert service.session.state == SyncState.NOT_SYNCED
        assert await service.list() == []

        local = await service.create(make_workout(date="2024-02-01"))
        assert [w.id for w in local_store.list()] == [local.id]

    @pytest.mark.asyncio
    async def test_migrates_again_after_next_login(self, service, auth, remote_store):
        await auth.sign_in("alice")
        await auth.sign_out()
        await service.create(make_workout(date="2024-03-01"))

        await auth.sign_in("alice")
        await service.settled()

        assert service.last_sync.synced == 1
        assert len(await service.list()) == 1

    @pytest.mark.asyncio
    async def test_switching_users(self, service, auth, remote_store):
        await remote_store.create("bob", make_workout(date="2024-05-01"))
        await auth.sign_in("alice")

        await auth.sign_in("bob")

        assert service.user_id == "bob"
        assert [w.day.isoformat() for w in await service.list()] == ["2024-05-01"]

    @pytest.mark.asyncio
    async def test_failed_migration_keeps_local_data(self, service, auth, local_store, remote_store, monkeypatch):
        local_store.create(make_workout())

        async def unreachable(user_id):
            raise NetworkError("offline")

        monkeypatch.setattr(remote_store, "list_for_user", unreachable)
        await auth.sign_in("alice")

        assert service.error == SYNC_FAILED
        assert service.session.state == SyncState.SYNCED
        assert len(local_store.list()) == 1

    @pytest.mark.asyncio
    async def test_remote_write_failure(self, service, auth, remote_store, monkeypatch):
        await auth.sign_in("alice")

        async def unreachable(user_id, record):
            raise NetworkError("offline")

        monkeypatch.setattr(remote_store, "create", unreachable)

        with pytest.raises(DataAccessError, match="Failed to save workout"):
            await service.create(make_workout())
        assert service.error == SAVE_FAILED

    @pytest.mark.asyncio
    async def test_subscription_error_sets_error(self, service, auth, remote_store, monkeypatch):
        await auth.sign_in("alice")
        await service.settled()

        async def unreachable(user_id):
            raise NetworkError("offline")

        monkeypatch.setattr(remote_store, "list_for_user", unreachable)
        await remote_store.create("alice", make_workout())
        await service.settled()

        assert service.error == SUBSCRIPTION_FAILED


class TestMigrationSequencing:
    """Migrations across quick session changes."""

    @pytest.mark.asyncio
    async def test_relogin_during_migration_migrates_once(self, service, local_store, remote_store, monkeypatch):
        local_store.create(make_workout())
        fetching = asyncio.Event()
        list_for_user = remote_store.list_for_user

        async def tracked(user_id):
            fetching.set()
            return await list_for_user(user_id)

        monkeypatch.setattr(remote_store, "list_for_user", tracked)

        async def relogin():
            await fetching.wait()
            await service.handle_auth_state(None)
            await service.handle_auth_state("alice")

        await asyncio.gather(service.handle_auth_state("alice"), relogin())
        await service.settled()

        assert len(await list_for_user("alice")) == 1
        assert local_store.list() == []
        assert service.session.state == SyncState.SYNCED
        assert len(await service.list()) == 1

    @pytest.mark.asyncio
    async def test_logout_during_migration_does_not_subscribe(self, service, local_store, remote_store, monkeypatch):
        local_store.create(make_workout())
        fetching = asyncio.Event()
        list_for_user = remote_store.list_for_user

        async def tracked(user_id):
            fetching.set()
            return await list_for_user(user_id)

        monkeypatch.setattr(remote_store, "list_for_user", tracked)

        async def logout():
            await fetching.wait()
            await service.handle_auth_state(None)

        await asyncio.gather(service.handle_auth_state("alice"), logout())

        assert not service.authenticated
        assert service.session.state == SyncState.NOT_SYNCED
        assert service._subscription is None
        assert len(await list_for_user("alice")) == 1

    @pytest.mark.asyncio
    async def test_malformed_remote_document(self, service, auth, local_store, remote_store):
        await insert_document(remote_store.db_path, "alice", '{"exercises": []}')
        local_store.create(make_workout())

        await auth.sign_in("alice")

        assert service.session.state == SyncState.SYNCED
        assert service.error == SYNC_FAILED
        assert len(local_store.list()) == 1

        await service.settled()
        assert service.error == SUBSCRIPTION_FAILED

    @pytest.mark.asyncio
    async def test_clear_failure_after_sync(self, remote_store, tmp_path):
        local_store = LocalWorkoutStore(UnclearableStorage(tmp_path / "stuck"))
        local_store.create(make_workout())
        service = WorkoutDataService(local_store, remote_store)
        notifier = AuthStateNotifier()
        service.attach(notifier)

        try:
            await notifier.sign_in("alice")

            assert service.error == CLEAR_FAILED
            assert service.session.state == SyncState.SYNCED
            assert len(await remote_store.list_for_user("alice")) == 1
        finally:
            service.close()

        # The next login skips what already reached the remote store
        retry = WorkoutDataService(
            LocalWorkoutStore(FileKeyValueStorage(tmp_path / "stuck")), remote_store
        )
        await retry.handle_auth_state("alice")
        retry.close()

        assert (retry.last_sync.synced, retry.last_sync.skipped) == (0, 1)


class TestImport:
    """Tests for import_records."""

    @pytest.mark.asyncio
    async def test_sees_workout_created_just_before(self, service, auth):
        await auth.sign_in("alice")
        await service.create(make_workout())

        result = await service.import_records([make_workout()])

        assert (result.synced, result.skipped) == (0, 1)

    @pytest.mark.asyncio
    async def test_duplicates_within_batch(self, service, auth, remote_store):
        await auth.sign_in("alice")

        result = await service.import_records([make_workout(), make_workout()])

        assert (result.synced, result.skipped) == (1, 1)
        assert len(await remote_store.list_for_user("alice")) == 1

    @pytest.mark.asyncio
    async def test_signed_out_replaces_local_data(self, service, local_store):
        await service.create(make_workout(date="2023-01-01"))

        result = await service.import_records(
            [make_workout(date="2024-01-01"), make_workout(date="2024-01-02")]
        )

        assert result.synced == 2
        assert result.message == "Successfully imported 2 workouts"
        assert [w.day.isoformat() for w in local_store.list()] == [
            "2024-01-02",
            "2024-01-01",
        ]

    @pytest.mark.asyncio
    async def test_signed_in_skips_duplicates(self, service, auth, remote_store):
        await remote_store.create("alice", make_workout(date="2024-01-01"))
        await auth.sign_in("alice")

        result = await service.import_records(
            [make_workout(date="2024-01-01"), make_workout(date="2024-01-02")]
        )
        await service.settled()

        assert (result.synced, result.skipped) == (1, 1)
        assert len(await remote_store.list_for_user("alice")) == 2
        assert len(await service.list()) == 2


class TestOpenWorkoutData:
    """Tests for open_workout_data."""

    @pytest.mark.asyncio
    async def test_restores_saved_session(self, tmp_path):
        service, provider = await open_workout_data(tmp_path)
        try:
            await service.create(make_workout())
            await provider.sign_in("alice")
            assert service.last_sync.synced == 1
        finally:
            service.close()
            service.remote_store.close()

        reopened, _ = await open_workout_data(tmp_path)
        try:
            assert reopened.user_id == "alice"
            assert len(await reopened.list()) == 1
        finally:
            reopened.close()
            reopened.remote_store.close()
