"""Text rendering of portfolio snapshots for Telegram."""
from datetime import datetime
from decimal import Decimal

from tracker.config import app_config
from tracker.notifications import ERROR, Notification
from tracker.portfolio.models import PortfolioSnapshot, ViewState

CURRENCY = app_config.get("display", {}).get("currency", "₹")


def _fmt(val, decimals=2) -> str:
    return f"{val:,.{decimals}f}"


def _qty(val: Decimal) -> str:
    return _fmt(val, 0) if val == val.to_integral_value() else _fmt(val, 4)


def _arrow(pnl) -> str:
    return "📈" if pnl >= 0 else "📉"


def _signed(val) -> str:
    sign = "+" if val >= 0 else "-"
    return f"{sign}{CURRENCY}{_fmt(abs(val))}"


def render_notifications(items: list[Notification]) -> str:
    return "\n".join(("❌ " if n.level == ERROR else "✅ ") + n.message for n in items)


class DashboardView:
    """Subscriber that keeps the latest snapshot and renders it on demand."""

    def __init__(self):
        self.snapshot: PortfolioSnapshot | None = None
        self.redraws = 0

    def __call__(self, snapshot: PortfolioSnapshot) -> None:
        self.snapshot = snapshot
        self.redraws += 1

    def render(self) -> str:
        snap = self.snapshot
        if snap is None or snap.state == ViewState.UNAUTHENTICATED:
            return "🔒 Log in first: /login email password"
        m = snap.metrics
        lines = [
            f"📊 *Dashboard* — {datetime.now().strftime('%d %b %Y %H:%M')}",
            "",
            f"💼 Total investment: {CURRENCY}{_fmt(m.total_investment)}",
            f"{_arrow(m.total_profit_loss)} Total P&L: {_signed(m.total_profit_loss)}",
            f"🧾 Stocks: {m.holding_count}",
        ]
        if not snap.holdings:
            lines += ["", "No stocks yet. Add one with /add SYMBOL quantity price"]
            return "\n".join(lines)

        lines += ["", "```"]
        for h in snap.holdings:
            pnl = h.effective_profit_loss
            lines.append(
                f"{h.symbol:<8} {_qty(h.quantity)} × {_fmt(h.effective_price)} "
                f"(buy {_fmt(h.buy_price)}) {_arrow(pnl)} {_signed(pnl)}  #{h.id}"
            )
        lines.append("```")

        # labels and ids are user data: keep them inside code spans
        lines += ["", "🥧 *Investment distribution*", "```"]
        for point in m.investment_series:
            lines.append(f"{point.label:<8} {CURRENCY}{_fmt(point.value)} ({_fmt(point.pct)}%)")
        lines.append("```")

        if snap.editing_id:
            lines += ["", f"✏️ Editing `#{snap.editing_id}`"]
        return "\n".join(lines)
