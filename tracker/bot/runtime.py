"""Per-user session lookup and per-command screen wiring for the bot."""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from telegram import Update

from tracker.api.client import BackendClient
from tracker.bot.render import DashboardView
from tracker.config import settings
from tracker.notifications import Notifier
from tracker.portfolio.viewmodel import PortfolioViewModel
from tracker.session.registry import SessionRegistry
from tracker.session.store import SessionStore

logger = logging.getLogger(__name__)
registry = SessionRegistry(settings.token_dir)


def get_session(update: Update) -> SessionStore:
    return registry.get(update.effective_user.id)


def make_client(session: SessionStore | None = None) -> BackendClient:
    return BackendClient(settings.api_base_url, session=session, timeout=settings.request_timeout)


@asynccontextmanager
async def dashboard_screen(session: SessionStore) -> AsyncIterator[tuple[PortfolioViewModel, DashboardView]]:
    """One dashboard screen: view-model + subscribed view, torn down on exit."""
    client = make_client(session)
    vm = PortfolioViewModel(client, session=session, notifier=Notifier(),
                            enrich=settings.enrich_holdings)
    view = DashboardView()
    vm.subscribe(view)
    view(vm.snapshot())
    try:
        yield vm, view
    finally:
        vm.close()
        await client.aclose()
