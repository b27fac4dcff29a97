"""Audit logger for bot commands.

Every command outcome is logged and counted in
stocktracker_commands_total. Auditing never breaks the main flow.
"""
import logging

from telegram import Update

from tracker.metrics import commands_total

logger = logging.getLogger(__name__)


def log_command(
    update: Update,
    command: str,
    success: bool,
    message: str = "",
    args: str | None = None,
) -> None:
    """Record one command outcome.

    Args:
        update:  Telegram Update object (provides tg_id / username).
        command: Command name, e.g. "/add".
        success: True if the command completed without error.
        message: Human-readable outcome (confirmation text or error).
        args:    Argument string with secrets removed, e.g. "AAPL 3 150".
    """
    try:
        tg_user = update.effective_user
        commands_total.labels(command=command, success=str(success).lower()).inc()
        logger.info(
            f"command={command} tg_id={tg_user.id} user={tg_user.username} "
            f"success={success} args={args!r} message={message!r}"
        )
    except Exception as exc:
        logger.error(f"audit.log_command failed: {exc}")
