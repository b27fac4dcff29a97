"""One SessionStore per Telegram user, each backed by its own token file."""
from pathlib import Path

from tracker.session.storage import FileTokenStorage
from tracker.session.store import SessionStore


class SessionRegistry:
    def __init__(self, token_dir: str | Path):
        self.token_dir = Path(token_dir)
        self._stores: dict[int, SessionStore] = {}

    def get(self, user_id: int) -> SessionStore:
        store = self._stores.get(user_id)
        if store is None:
            store = SessionStore(FileTokenStorage(self.token_dir / f"{user_id}.token"))
            store.initialize()
            self._stores[user_id] = store
        return store
