import logging

from telegram import Update
from telegram.ext import ContextTypes, CommandHandler

from tracker.auth import AuthFlows
from tracker.bot.audit import log_command
from tracker.bot.render import render_notifications
from tracker.bot.runtime import get_session, make_client

logger = logging.getLogger(__name__)


async def _forget_message(update: Update) -> None:
    """Delete a message that carried a password."""
    try:
        await update.message.delete()
    except Exception as e:
        logger.warning(f"Could not delete credentials message: {e}")


async def cmd_signup(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if context.args:
        await _forget_message(update)
    if len(context.args) != 4:
        await update.effective_chat.send_message(
            "Usage: `/signup username email password phone`", parse_mode="Markdown",
        )
        return
    username, email, password, phone = context.args

    session = get_session(update)
    async with make_client() as client:
        flows = AuthFlows(client, session)
        ok = await flows.register_user(username, email, password, phone)
    text = render_notifications(flows.notifier.drain())
    if ok:
        text += "\nNow log in with /login email password"
    await update.effective_chat.send_message(text)
    log_command(update, "/signup", ok, text, f"{username} {email}")


async def cmd_login(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if context.args:
        await _forget_message(update)
    if len(context.args) != 2:
        await update.effective_chat.send_message(
            "Usage: `/login email password`", parse_mode="Markdown",
        )
        return
    email, password = context.args

    session = get_session(update)
    async with make_client() as client:
        flows = AuthFlows(client, session)
        ok = await flows.login_user(email, password)
    text = render_notifications(flows.notifier.drain())
    if ok:
        text += "\nOpen your portfolio with /dashboard"
    await update.effective_chat.send_message(text)
    log_command(update, "/login", ok, text, email)


async def cmd_logout(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    flows = AuthFlows(None, get_session(update))
    flows.logout_user()
    text = render_notifications(flows.notifier.drain())
    await update.message.reply_text(text)
    log_command(update, "/logout", True, text)


def get_handlers():
    return [
        CommandHandler("signup", cmd_signup),
        CommandHandler("login", cmd_login),
        CommandHandler("logout", cmd_logout),
    ]
