"""Login, signup and logout flows.

Each flow talks to the backend, updates the session and reports the outcome
through the notifier. Backend failures never propagate out of here.
"""
import logging

from tracker.api.client import BackendClient, BackendError
from tracker.notifications import Notifier
from tracker.session.store import SessionStore

logger = logging.getLogger(__name__)


class AuthFlows:
    def __init__(self, client: BackendClient | None, session: SessionStore, notifier: Notifier | None = None):
        self.client = client
        self.session = session
        self.notifier = notifier or Notifier()

    async def login_user(self, email: str, password: str) -> bool:
        try:
            token = await self.client.login(email, password)
        except BackendError as e:
            logger.error(f"Login error: {e.message}")
            self.notifier.error(e.backend_message or "Login failed")
            return False
        self.session.login(token)
        self.notifier.success("Login successful!")
        return True

    async def register_user(self, username: str, email: str, password: str, phone: str) -> bool:
        try:
            data = await self.client.register(username, email, password, phone)
        except BackendError as e:
            logger.error(f"Signup error: {e.message}")
            self.notifier.error(f"Error: {e.message}")
            return False
        user = data.get("user") if isinstance(data, dict) else None
        name = (user or {}).get("username") or username
        self.notifier.success(f"Registered successfully as {name}")
        return True

    def logout_user(self) -> None:
        self.session.logout()
        self.notifier.success("Logged out successfully!")
