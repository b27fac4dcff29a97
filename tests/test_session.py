"""Tests for tracker/session: store, storage backends, scope, registry."""
import pytest

from tracker.session.registry import SessionRegistry
from tracker.session.storage import FileTokenStorage, MemoryTokenStorage, TokenStorage
from tracker.session.store import (
    SessionScopeError, SessionStore, current_session, session_scope,
)


@pytest.fixture
def storage():
    return MemoryTokenStorage()


@pytest.fixture
def store(storage):
    s = SessionStore(storage)
    s.initialize()
    return s


class TestLoginLogout:
    def test_starts_logged_out(self, store, storage):
        assert store.is_logged_in is False
        assert store.token is None
        assert storage.read() is None

    def test_login_writes_through(self, store, storage):
        store.login("abc123")
        assert store.is_logged_in is True
        assert storage.read() == "abc123"

    def test_logout_clears_memory_and_storage(self, store, storage):
        store.login("abc123")
        store.logout()
        assert store.is_logged_in is False
        assert store.token is None
        assert storage.read() is None

    def test_logout_twice_same_as_once(self, store, storage):
        store.login("abc123")
        store.logout()
        store.logout()
        assert store.is_logged_in is False
        assert storage.read() is None

    def test_logout_when_never_logged_in(self, store, storage):
        store.logout()
        assert store.is_logged_in is False
        assert storage.read() is None

    def test_storage_mirrors_memory_over_sequence(self, store, storage):
        for token in ["t1", None, "t2", "t3", None, None]:
            if token:
                store.login(token)
            else:
                store.logout()
            assert storage.read() == store.token
            assert store.is_logged_in == (token is not None)

    @pytest.mark.parametrize("bad", ["", None, 42])
    def test_login_rejects_empty_or_non_string(self, store, bad):
        with pytest.raises(ValueError):
            store.login(bad)
        assert store.is_logged_in is False


class BrokenDiskStorage(TokenStorage):
    """Holds a token but refuses every write or clear."""

    def __init__(self, token=None):
        self.token = token

    def read(self):
        return self.token

    def write(self, token):
        raise OSError("read-only file system")

    def clear(self):
        raise OSError("read-only file system")


class TestStorageFailure:
    def test_failed_login_leaves_memory_unchanged(self):
        storage = BrokenDiskStorage()
        s = SessionStore(storage)
        s.initialize()
        with pytest.raises(OSError):
            s.login("abc123")
        assert s.token is None
        assert s.is_logged_in is False
        assert storage.read() == s.token

    def test_failed_logout_keeps_token(self):
        storage = BrokenDiskStorage("abc123")
        s = SessionStore(storage)
        s.initialize()
        with pytest.raises(OSError):
            s.logout()
        assert s.token == "abc123"
        assert s.is_logged_in is True
        assert storage.read() == s.token


class TestInitialize:
    def test_restores_after_reload(self, storage):
        first = SessionStore(storage)
        first.initialize()
        first.login("abc123")

        reloaded = SessionStore(storage)
        reloaded.initialize()
        assert reloaded.is_logged_in is True
        assert reloaded.token == "abc123"

    def test_empty_storage_stays_logged_out(self, storage):
        s = SessionStore(storage)
        s.initialize()
        assert s.is_logged_in is False

    def test_no_storage_is_noop(self):
        s = SessionStore(None)
        s.initialize()
        assert s.is_logged_in is False
        s.login("x")
        assert s.is_logged_in is True
        s.logout()
        assert s.is_logged_in is False

    def test_only_first_call_reads_storage(self, storage):
        s = SessionStore(storage)
        s.initialize()
        storage.write("late")
        s.initialize()
        assert s.is_logged_in is False


class TestAuthHeader:
    def test_bearer_when_logged_in(self, store):
        store.login("abc123")
        assert store.get_auth_header() == {"Authorization": "Bearer abc123"}

    def test_empty_when_logged_out(self, store):
        assert store.get_auth_header() == {}


class TestSubscribe:
    def test_listener_called_on_changes(self, store):
        seen = []
        store.subscribe(lambda s: seen.append(s.is_logged_in))
        store.login("a")
        store.logout()
        assert seen == [True, False]

    def test_unsubscribe_stops_calls(self, store):
        seen = []
        unsubscribe = store.subscribe(lambda s: seen.append(s.token))
        unsubscribe()
        unsubscribe()
        store.login("a")
        assert seen == []

    def test_logout_when_logged_out_does_not_publish(self, store):
        seen = []
        store.subscribe(lambda s: seen.append(s.token))
        store.logout()
        assert seen == []


class TestScope:
    def test_current_session_outside_scope_raises(self):
        with pytest.raises(SessionScopeError):
            current_session()

    def test_current_session_inside_scope(self, store):
        with session_scope(store):
            assert current_session() is store
        with pytest.raises(SessionScopeError):
            current_session()

    def test_nested_scopes_restore_outer(self, store):
        inner = SessionStore()
        with session_scope(store):
            with session_scope(inner):
                assert current_session() is inner
            assert current_session() is store


class TestFileTokenStorage:
    def test_missing_file_reads_none(self, tmp_path):
        assert FileTokenStorage(tmp_path / "token").read() is None

    def test_write_read_clear(self, tmp_path):
        path = tmp_path / "nested" / "token"
        fs = FileTokenStorage(path)
        fs.write("abc123")
        assert path.read_text() == "abc123"
        assert fs.read() == "abc123"
        fs.clear()
        assert not path.exists()
        fs.clear()

    def test_blank_file_is_logged_out(self, tmp_path):
        path = tmp_path / "token"
        path.write_text("  \n")
        assert FileTokenStorage(path).read() is None


class TestRegistry:
    def test_one_store_per_user(self, tmp_path):
        reg = SessionRegistry(tmp_path)
        assert reg.get(1) is reg.get(1)
        assert reg.get(1) is not reg.get(2)

    def test_users_do_not_share_tokens(self, tmp_path):
        reg = SessionRegistry(tmp_path)
        reg.get(1).login("one")
        assert reg.get(2).is_logged_in is False
        assert (tmp_path / "1.token").read_text() == "one"

    def test_restores_from_disk(self, tmp_path):
        SessionRegistry(tmp_path).get(7).login("seven")
        assert SessionRegistry(tmp_path).get(7).token == "seven"
