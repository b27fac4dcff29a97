"""Portfolio screen state: holdings list, pending form, derived metrics.

One instance per screen. The holdings list is rebuilt from the backend on
every new instance and thrown away by ``close()``. Every change publishes a
PortfolioSnapshot to the subscribers; rendering lives in the subscribers.
"""
import asyncio
import logging
from dataclasses import replace
from decimal import Decimal, InvalidOperation
from typing import Callable

from tracker.api.client import BackendClient, BackendError
from tracker.metrics import enrichment_fallbacks_total
from tracker.notifications import Notifier
from tracker.portfolio.aggregates import compute_metrics
from tracker.portfolio.models import (
    Holding, HoldingForm, PortfolioMetrics, PortfolioSnapshot, ViewState,
)
from tracker.session.store import SessionStore, current_session

logger = logging.getLogger(__name__)

Subscriber = Callable[[PortfolioSnapshot], None]

# view-model field -> backend field
_API_FIELDS = {"symbol": "symbol", "quantity": "quantity", "buy_price": "buyPrice"}


def parse_form(form: HoldingForm) -> dict:
    """Turn raw form strings into holding fields. Raises ValueError."""
    symbol = form.symbol.strip().upper()
    if not symbol:
        raise ValueError("Symbol is required")
    values = {}
    for name, raw, label in (("quantity", form.quantity, "Quantity"),
                             ("buy_price", form.buy_price, "Buy price")):
        try:
            value = Decimal(str(raw).strip())
        except InvalidOperation:
            raise ValueError(f"{label} must be a number") from None
        if not value.is_finite() or value <= 0:
            raise ValueError(f"{label} must be positive")
        values[name] = value
    return {"symbol": symbol, **values}


class PortfolioViewModel:
    def __init__(
        self,
        client: BackendClient,
        session: SessionStore | None = None,
        notifier: Notifier | None = None,
        enrich: bool = True,
    ):
        self.client = client
        self.session = session if session is not None else current_session()
        self.notifier = notifier or Notifier()
        self.enrich = enrich

        self.holdings: list[Holding] = []
        self.form = HoldingForm()
        self.editing_id: str | None = None
        self.state = ViewState.READY if self.session.is_logged_in else ViewState.UNAUTHENTICATED
        self._subscribers: list[Subscriber] = []
        self._closed = False

    # --- observation --------------------------------------------------------

    @property
    def metrics(self) -> PortfolioMetrics:
        return compute_metrics(self.holdings)

    def snapshot(self) -> PortfolioSnapshot:
        return PortfolioSnapshot(
            state=self.state,
            holdings=tuple(self.holdings),
            metrics=self.metrics,
            form=replace(self.form),
            editing_id=self.editing_id,
        )

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return unsubscribe

    def _publish(self) -> None:
        if self._closed:
            return
        snap = self.snapshot()
        for subscriber in list(self._subscribers):
            subscriber(snap)

    def _set_state(self, state: ViewState) -> None:
        if self._closed:
            return
        self.state = state
        self._publish()

    def close(self) -> None:
        """Screen teardown. Results of in-flight calls are discarded."""
        self._closed = True
        self._subscribers.clear()

    @property
    def closed(self) -> bool:
        return self._closed

    def find(self, holding_id: str) -> Holding | None:
        return next((h for h in self.holdings if h.id == holding_id), None)

    def _require_login(self) -> bool:
        if self.session.is_logged_in:
            return True
        self.notifier.error("Please log in first")
        self._set_state(ViewState.UNAUTHENTICATED)
        return False

    # --- loading ------------------------------------------------------------

    async def load_holdings(self) -> bool:
        if self._closed:
            return False
        if not self.session.is_logged_in:
            self._set_state(ViewState.UNAUTHENTICATED)
            return False

        self._set_state(ViewState.LOADING)
        try:
            rows = await self.client.list_holdings()
            holdings = [Holding.from_api(row) for row in rows]
        except (BackendError, KeyError, TypeError, InvalidOperation) as e:
            if self._closed:
                return False
            msg = e.message if isinstance(e, BackendError) else f"unexpected response ({e!r})"
            logger.error(f"Error fetching stocks: {msg}")
            self.notifier.error(f"Error fetching stocks: {msg}")
            self._set_state(ViewState.READY)
            return False

        if self.enrich and holdings:
            holdings = list(await asyncio.gather(*(self._enrich(h) for h in holdings)))

        if self._closed:
            return False
        self.holdings = holdings
        self._set_state(ViewState.READY)
        return True

    async def _enrich(self, holding: Holding) -> Holding:
        price, profit_loss = await asyncio.gather(
            self.client.get_current_price(holding.symbol),
            self.client.get_profit_loss(holding.symbol, holding.buy_price, holding.quantity),
            return_exceptions=True,
        )
        failure = next((r for r in (price, profit_loss) if isinstance(r, BaseException)), None)
        if failure is not None:
            if not isinstance(failure, Exception):
                raise failure
            logger.warning(f"Pricing {holding.symbol} failed, using buy price: {failure}")
            enrichment_fallbacks_total.inc()
            return replace(holding, current_price=holding.buy_price, profit_loss=Decimal("0"))

        if profit_loss is None:
            profit_loss = (price - holding.buy_price) * holding.quantity
        return replace(holding, current_price=price, profit_loss=profit_loss)

    # --- mutations ----------------------------------------------------------

    async def add_holding(self, symbol: str, quantity, buy_price) -> bool:
        if self._closed or not self._require_login():
            return False
        self._set_state(ViewState.SUBMITTING)
        try:
            await self.client.add_holding(symbol, quantity, buy_price)
        except BackendError as e:
            if self._closed:
                return False
            logger.error(f"Error saving stock {symbol}: {e.message}")
            self.notifier.error(f"Error saving stock: {e.message}")
            self._set_state(ViewState.READY)
            return False

        if self._closed:
            return False
        self.form = HoldingForm()
        self.notifier.success(f"{symbol} added")
        await self.load_holdings()
        return True

    async def update_holding(self, holding_id: str, fields: dict) -> bool:
        """Send *fields* (symbol/quantity/buy_price) and patch the local entry.

        current_price and profit_loss keep their old values until the next load.
        """
        if self._closed or not self._require_login():
            return False
        unknown = set(fields) - set(_API_FIELDS)
        if unknown:
            raise ValueError(f"Holdings cannot update {sorted(unknown)}")

        self._set_state(ViewState.SUBMITTING)
        try:
            await self.client.update_holding(
                holding_id, {_API_FIELDS[k]: v for k, v in fields.items()},
            )
        except BackendError as e:
            if self._closed:
                return False
            logger.error(f"Error updating stock {holding_id}: {e.message}")
            self.notifier.error(f"Error saving stock: {e.message}")
            self._set_state(ViewState.READY)
            return False

        if self._closed:
            return False
        self.holdings = [replace(h, **fields) if h.id == holding_id else h for h in self.holdings]
        self.editing_id = None
        self.form = HoldingForm()
        self.notifier.success("Stock updated")
        self._set_state(ViewState.READY)
        return True

    async def delete_holding(self, holding_id: str) -> bool:
        if self._closed or not self._require_login():
            return False
        self._set_state(ViewState.SUBMITTING)
        try:
            await self.client.delete_holding(holding_id)
        except BackendError as e:
            if self._closed:
                return False
            logger.error(f"Error deleting stock {holding_id}: {e.message}")
            self.notifier.error(f"Error deleting stock: {e.message}")
            self._set_state(ViewState.READY)
            return False

        if self._closed:
            return False
        self.holdings = [h for h in self.holdings if h.id != holding_id]
        self.notifier.success("Stock deleted")
        self._set_state(ViewState.READY)
        return True

    # --- form ---------------------------------------------------------------

    def begin_edit(self, holding: Holding) -> None:
        self.form = HoldingForm.from_holding(holding)
        self.editing_id = holding.id
        self._publish()

    def cancel_edit(self) -> None:
        self.form = HoldingForm()
        self.editing_id = None
        self._publish()

    async def submit(self) -> bool:
        """Save the pending form: update when editing, add otherwise."""
        try:
            fields = parse_form(self.form)
        except ValueError as e:
            self.notifier.error(str(e))
            return False
        if self.editing_id is not None:
            return await self.update_holding(self.editing_id, fields)
        return await self.add_holding(fields["symbol"], fields["quantity"], fields["buy_price"])
