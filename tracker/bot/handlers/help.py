import logging

from telegram import Update
from telegram.ext import ContextTypes, CommandHandler, MessageHandler, filters

from tracker.bot.handlers.dashboard import cmd_dashboard
from tracker.bot.runtime import get_session

logger = logging.getLogger(__name__)

# (command, args_hint, description)
# Use "" for args_hint when command takes no arguments.
COMMAND_LIST = [
    # --- Account ---
    ("__header__", "", "🔑 *Account*"),
    ("start", "", "Welcome, or your dashboard when logged in"),
    ("signup", "username email password phone", "Create an account"),
    ("login", "email password", "Log in"),
    ("logout", "", "Log out"),

    # --- Portfolio ---
    ("__header__", "", "💼 *Portfolio*"),
    ("dashboard", "", "Holdings, totals and investment distribution"),
    ("add", "SYMBOL quantity buy\\_price", "Add a stock"),
    ("edit", "ID quantity buy\\_price [SYMBOL]", "Edit a stock"),
    ("delete", "ID", "Delete a stock"),
    ("symbols", "", "Known ticker symbols"),
]

WELCOME_TEXT = (
    "📈 *Stock Tracker*\n\n"
    "Track your portfolio: add, update and remove stocks and see your "
    "profit/loss at a glance.\n\n"
    "New here? /signup — already registered? /login"
)


def _build_help_text() -> str:
    lines = ["📈 *Stock Tracker — Commands*", ""]
    for cmd, args, desc in COMMAND_LIST:
        if cmd == "__header__":
            lines += ["", desc]
        elif args:
            lines.append(f"`/{cmd} {args}` — {desc}")
        else:
            lines.append(f"`/{cmd}` — {desc}")
    return "\n".join(lines)


_HELP_TEXT = _build_help_text()


async def cmd_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if get_session(update).is_logged_in:
        await cmd_dashboard(update, context)
        return
    await update.message.reply_text(WELCOME_TEXT, parse_mode="Markdown")


async def cmd_help(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not update.message:
        return
    await update.message.reply_text(_HELP_TEXT, parse_mode="Markdown")


async def cmd_unknown(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not update.message:
        return
    raw = update.message.text or ""
    token = raw.split()[0] if raw.split() else "unknown"
    cmd = token.split("@")[0]  # strip @botname suffix for group chats
    await update.message.reply_text(
        f"❓ Unknown command: `{cmd}`\n\n{_HELP_TEXT}",
        parse_mode="Markdown",
    )


def get_handlers():
    return [
        CommandHandler("start", cmd_start),
        CommandHandler("help", cmd_help),
        MessageHandler(filters.COMMAND, cmd_unknown),
    ]
