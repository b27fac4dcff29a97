import logging

from telegram import Update
from telegram.ext import ContextTypes, CommandHandler

from tracker.bot.audit import log_command
from tracker.bot.render import render_notifications
from tracker.bot.runtime import dashboard_screen, get_session
from tracker.portfolio.models import HoldingForm
from tracker.utils.symbols import (
    ENUMERATED, is_allowed_symbol, known_symbols, normalize_symbol, symbol_policy,
)

logger = logging.getLogger(__name__)

LOGIN_HINT = "🔒 Log in first: /login email password"


def _symbol_error(symbol: str) -> str | None:
    if is_allowed_symbol(symbol):
        return None
    if not normalize_symbol(symbol):
        return "Symbol is required."
    return f"Unknown symbol {normalize_symbol(symbol)}. See /symbols."


async def _reply(update: Update, vm, view) -> str:
    """Send notifications plus the redrawn dashboard. Returns the notice text."""
    notices = render_notifications(vm.notifier.drain())
    if notices:
        await update.message.reply_text(notices)
    await update.message.reply_text(view.render(), parse_mode="Markdown")
    return notices


async def cmd_dashboard(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    session = get_session(update)
    if not session.is_logged_in:
        await update.message.reply_text(LOGIN_HINT)
        return
    async with dashboard_screen(session) as (vm, view):
        ok = await vm.load_holdings()
        notices = await _reply(update, vm, view)
    log_command(update, "/dashboard", ok, notices)


async def cmd_add(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    raw_args = " ".join(context.args) if context.args else ""
    if len(context.args) != 3:
        await update.message.reply_text(
            "Usage: `/add SYMBOL quantity buy_price`\nExample: `/add TSLA 5 200`",
            parse_mode="Markdown",
        )
        return
    session = get_session(update)
    if not session.is_logged_in:
        await update.message.reply_text(LOGIN_HINT)
        return

    symbol, quantity, buy_price = context.args
    err = _symbol_error(symbol)
    if err:
        await update.message.reply_text(err)
        return

    async with dashboard_screen(session) as (vm, view):
        vm.form = HoldingForm(normalize_symbol(symbol), quantity, buy_price)
        ok = await vm.submit()
        notices = await _reply(update, vm, view)
    log_command(update, "/add", ok, notices, raw_args)


async def cmd_edit(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    raw_args = " ".join(context.args) if context.args else ""
    if len(context.args) not in (3, 4):
        await update.message.reply_text(
            "Usage: `/edit ID quantity buy_price [SYMBOL]`\n"
            "The ID is shown after # on /dashboard.",
            parse_mode="Markdown",
        )
        return
    session = get_session(update)
    if not session.is_logged_in:
        await update.message.reply_text(LOGIN_HINT)
        return

    holding_id, quantity, buy_price = context.args[:3]
    holding_id = holding_id.lstrip("#")
    new_symbol = context.args[3] if len(context.args) == 4 else None
    if new_symbol is not None:
        err = _symbol_error(new_symbol)
        if err:
            await update.message.reply_text(err)
            return

    async with dashboard_screen(session) as (vm, view):
        if not await vm.load_holdings():
            await _reply(update, vm, view)
            log_command(update, "/edit", False, "load failed", raw_args)
            return
        holding = vm.find(holding_id)
        if holding is None:
            await update.message.reply_text(f"No stock with id #{holding_id}.")
            log_command(update, "/edit", False, "not found", raw_args)
            return
        vm.begin_edit(holding)
        vm.form.quantity = quantity
        vm.form.buy_price = buy_price
        if new_symbol is not None:
            vm.form.symbol = normalize_symbol(new_symbol)
        ok = await vm.submit()
        notices = await _reply(update, vm, view)
    log_command(update, "/edit", ok, notices, raw_args)


async def cmd_delete(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    raw_args = " ".join(context.args) if context.args else ""
    if len(context.args) != 1:
        await update.message.reply_text("Usage: `/delete ID`", parse_mode="Markdown")
        return
    session = get_session(update)
    if not session.is_logged_in:
        await update.message.reply_text(LOGIN_HINT)
        return

    holding_id = context.args[0].lstrip("#")
    async with dashboard_screen(session) as (vm, view):
        await vm.load_holdings()
        ok = await vm.delete_holding(holding_id)
        notices = await _reply(update, vm, view)
    log_command(update, "/delete", ok, notices, raw_args)


async def cmd_symbols(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    symbols = known_symbols()
    if symbol_policy() == ENUMERATED:
        header = "Allowed symbols:"
    else:
        header = "Any ticker is accepted. Common ones:"
    await update.message.reply_text(f"{header}\n" + ", ".join(symbols) if symbols else header)


def get_handlers():
    return [
        CommandHandler("dashboard", cmd_dashboard),
        CommandHandler("add", cmd_add),
        CommandHandler("edit", cmd_edit),
        CommandHandler("delete", cmd_delete),
        CommandHandler("symbols", cmd_symbols),
    ]
