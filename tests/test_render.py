from decimal import Decimal

from tracker.bot.render import DashboardView, render_notifications
from tracker.notifications import Notifier
from tracker.portfolio.aggregates import compute_metrics
from tracker.portfolio.models import Holding, HoldingForm, PortfolioSnapshot, ViewState


def _snapshot(holdings, state=ViewState.READY, editing_id=None):
    return PortfolioSnapshot(
        state=state, holdings=tuple(holdings), metrics=compute_metrics(holdings),
        form=HoldingForm(), editing_id=editing_id,
    )


def test_unauthenticated_renders_login_hint():
    view = DashboardView()
    view(_snapshot([], state=ViewState.UNAUTHENTICATED))
    assert "/login" in view.render()


def test_empty_portfolio():
    view = DashboardView()
    view(_snapshot([]))
    text = view.render()
    assert "Stocks: 0" in text
    assert "No stocks yet" in text


def test_loss_uses_down_arrow_and_minus():
    h = Holding(id="x", symbol="TSLA", quantity=Decimal("5"), buy_price=Decimal("200"),
                current_price=Decimal("180"))
    view = DashboardView()
    view(_snapshot([h], editing_id="x"))
    text = view.render()
    assert "📉 Total P&L: -₹100.00" in text
    assert "Editing `#x`" in text


def test_view_counts_redraws():
    view = DashboardView()
    view(_snapshot([]))
    view(_snapshot([]))
    assert view.redraws == 2


def test_render_notifications_marks_levels():
    n = Notifier()
    n.success("ok")
    n.error("bad")
    assert render_notifications(n.drain()) == "✅ ok\n❌ bad"
    assert n.items == []


def test_user_labels_stay_inside_code_blocks():
    h = Holding(id="id_1", symbol="BRK_B", quantity=Decimal("1"), buy_price=Decimal("100"))
    view = DashboardView()
    view(_snapshot([h], editing_id="id_1"))
    text = view.render()

    assert "BRK_B" in text
    # even-indexed chunks sit outside ``` fences; inline `spans` are removed too
    outside = "".join(text.split("```")[::2])
    outside = "".join(outside.split("`")[::2])
    assert "_" not in outside
