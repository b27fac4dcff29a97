from decimal import Decimal
from typing import Sequence

from tracker.portfolio.models import Holding, PortfolioMetrics, SeriesPoint

ZERO = Decimal("0")


def _pct(value: Decimal, total: Decimal) -> Decimal:
    if not total:
        return ZERO
    return (value / total * 100).quantize(Decimal("0.01"))


def compute_metrics(holdings: Sequence[Holding]) -> PortfolioMetrics:
    """Totals and chart series for *holdings*, one series point per holding."""
    total_investment = sum((h.investment for h in holdings), ZERO)
    total_profit_loss = sum((h.effective_profit_loss for h in holdings), ZERO)

    return PortfolioMetrics(
        total_investment=total_investment,
        total_profit_loss=total_profit_loss,
        holding_count=len(holdings),
        profit_loss_series=[SeriesPoint(h.symbol, h.effective_profit_loss) for h in holdings],
        quantity_series=[SeriesPoint(h.symbol, h.quantity) for h in holdings],
        investment_series=[
            SeriesPoint(h.symbol, h.investment, _pct(h.investment, total_investment))
            for h in holdings
        ],
    )
