import asyncio
import logging

from telegram.ext import Application

from tracker.bot.handlers.auth import get_handlers as auth_handlers
from tracker.bot.handlers.dashboard import get_handlers as dashboard_handlers
from tracker.bot.handlers.help import get_handlers as help_handlers
from tracker.config import app_config, settings
from tracker.metrics import start_metrics_server

logger = logging.getLogger(__name__)


def build_application() -> Application:
    app = Application.builder().token(settings.telegram_apikey).build()
    for handler in auth_handlers():
        app.add_handler(handler)
    for handler in dashboard_handlers():
        app.add_handler(handler)
    for handler in help_handlers():          # ← LAST: fallback catches unknown commands
        app.add_handler(handler)
    return app


async def run() -> None:
    if not settings.telegram_apikey:
        raise RuntimeError("TELEGRAM_APIKEY is not set")
    metrics_port = app_config.get("metrics", {}).get("port", 9090)
    start_metrics_server(metrics_port)

    app = build_application()
    async with app:
        await app.start()
        logger.info(f"Stock tracker bot starting — backend {settings.api_base_url}")
        await app.updater.start_polling(drop_pending_updates=True)
        try:
            await asyncio.sleep(float("inf"))
        except (KeyboardInterrupt, asyncio.CancelledError):
            pass
        finally:
            await app.updater.stop()
            await app.stop()
