from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum


class ViewState(str, Enum):
    UNAUTHENTICATED = "UNAUTHENTICATED"
    LOADING = "LOADING"
    READY = "READY"
    SUBMITTING = "SUBMITTING"


def to_decimal(value) -> Decimal | None:
    if value is None or value == "":
        return None
    return Decimal(str(value))


@dataclass
class Holding:
    id: str
    symbol: str
    quantity: Decimal
    buy_price: Decimal
    current_price: Decimal | None = None
    profit_loss: Decimal | None = None

    @classmethod
    def from_api(cls, data: dict) -> Holding:
        return cls(
            id=str(data["_id"] if "_id" in data else data["id"]),
            symbol=data["symbol"],
            quantity=to_decimal(data["quantity"]),
            buy_price=to_decimal(data["buyPrice"]),
            current_price=to_decimal(data.get("currentPrice")),
            profit_loss=to_decimal(data.get("profitLoss")),
        )

    @property
    def effective_price(self) -> Decimal:
        return self.current_price if self.current_price is not None else self.buy_price

    @property
    def investment(self) -> Decimal:
        return self.buy_price * self.quantity

    @property
    def effective_profit_loss(self) -> Decimal:
        """Backend value when present, otherwise (price - buy) × quantity."""
        if self.profit_loss is not None:
            return self.profit_loss
        return (self.effective_price - self.buy_price) * self.quantity

    @property
    def is_gain(self) -> bool:
        return self.effective_profit_loss >= 0


@dataclass
class HoldingForm:
    symbol: str = ""
    quantity: str = ""
    buy_price: str = ""

    @classmethod
    def from_holding(cls, holding: Holding) -> HoldingForm:
        return cls(symbol=holding.symbol, quantity=str(holding.quantity),
                   buy_price=str(holding.buy_price))

    def is_empty(self) -> bool:
        return not (self.symbol or self.quantity or self.buy_price)


@dataclass
class SeriesPoint:
    label: str
    value: Decimal
    pct: Decimal | None = None   # share of total, pie series only


@dataclass
class PortfolioMetrics:
    total_investment: Decimal = Decimal("0")
    total_profit_loss: Decimal = Decimal("0")
    holding_count: int = 0
    profit_loss_series: list[SeriesPoint] = field(default_factory=list)
    quantity_series: list[SeriesPoint] = field(default_factory=list)
    investment_series: list[SeriesPoint] = field(default_factory=list)


@dataclass(frozen=True)
class PortfolioSnapshot:
    state: ViewState
    holdings: tuple[Holding, ...]
    metrics: PortfolioMetrics
    form: HoldingForm
    editing_id: str | None
