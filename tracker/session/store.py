"""Authentication state for one client.

The token lives in memory and is written through to durable storage on
every change, so the two never diverge. ``is_logged_in`` is always derived
from the token.
"""
import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Callable, Iterator

from tracker.metrics import session_events_total
from tracker.session.storage import TokenStorage

logger = logging.getLogger(__name__)

Listener = Callable[["SessionStore"], None]


class SessionScopeError(RuntimeError):
    """Session accessed outside of an active session scope."""


class SessionStore:
    def __init__(self, storage: TokenStorage | None = None):
        self._storage = storage
        self._token: str | None = None
        self._initialized = False
        self._listeners: list[Listener] = []

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def is_logged_in(self) -> bool:
        return bool(self._token)

    def initialize(self) -> None:
        """Restore the persisted token. Only the first call reads storage."""
        if self._initialized:
            return
        self._initialized = True
        if self._storage is None:
            return
        stored = self._storage.read()
        if stored:
            self._token = stored
            session_events_total.labels(event="restore").inc()
            logger.debug("Session restored from storage")
            self._publish()

    def login(self, token: str) -> None:
        if not isinstance(token, str) or not token:
            raise ValueError("login() needs a non-empty token")
        if self._storage is not None:
            self._storage.write(token)
        self._token = token
        session_events_total.labels(event="login").inc()
        self._publish()

    def logout(self) -> None:
        was_logged_in = self.is_logged_in
        if self._storage is not None:
            self._storage.clear()
        self._token = None
        if was_logged_in:
            session_events_total.labels(event="logout").inc()
            self._publish()

    def get_auth_header(self) -> dict[str, str]:
        if not self._token:
            return {}
        return {"Authorization": f"Bearer {self._token}"}

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* after every change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self) -> None:
        for listener in list(self._listeners):
            listener(self)


_current: ContextVar[SessionStore | None] = ContextVar("current_session", default=None)


@contextmanager
def session_scope(store: SessionStore) -> Iterator[SessionStore]:
    """Make *store* the session seen by ``current_session()`` inside the block."""
    token = _current.set(store)
    try:
        yield store
    finally:
        _current.reset(token)


def current_session() -> SessionStore:
    store = _current.get()
    if store is None:
        raise SessionScopeError("current_session() used outside of session_scope()")
    return store
