import logging
from decimal import Decimal
from typing import Any

import httpx

from tracker.metrics import backend_requests_total
from tracker.session.store import SessionStore

logger = logging.getLogger(__name__)


class BackendError(Exception):
    """A backend call failed: transport error or non-2xx response."""

    def __init__(self, message: str, status_code: int | None = None,
                 backend_message: str | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.backend_message = backend_message   # the response's "message" field, if any


def _backend_message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return None


def _json_number(value: Decimal | int | float | str) -> float | int:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, str):
        return _json_number(Decimal(value))
    return value


class BackendClient:
    """Async client for the portfolio REST backend.

    Every portfolio call carries ``session.get_auth_header()``. Auth calls
    (register/login) are sent without credentials.
    """

    def __init__(
        self,
        base_url: str,
        session: SessionStore | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session
        kwargs: dict[str, Any] = {"base_url": self.base_url, "transport": transport}
        if timeout is not None:
            kwargs["timeout"] = timeout
        self._http = httpx.AsyncClient(**kwargs)

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def _auth_headers(self) -> dict[str, str]:
        return self.session.get_auth_header() if self.session is not None else {}

    async def _request(self, endpoint: str, method: str, path: str,
                       auth: bool = True, **kwargs) -> Any:
        headers = self._auth_headers() if auth else {}
        try:
            response = await self._http.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            backend_requests_total.labels(endpoint=endpoint, success="false").inc()
            raise BackendError(str(e) or type(e).__name__) from e

        if response.is_error:
            backend_requests_total.labels(endpoint=endpoint, success="false").inc()
            backend_message = _backend_message(response)
            raise BackendError(
                backend_message or f"HTTP {response.status_code}",
                response.status_code, backend_message,
            )

        backend_requests_total.labels(endpoint=endpoint, success="true").inc()
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise BackendError(f"Invalid JSON from {path}", response.status_code) from e

    # --- auth ---------------------------------------------------------------

    async def register(self, username: str, email: str, password: str, phone: str) -> dict:
        return await self._request(
            "register", "POST", "/api/auth/register", auth=False,
            json={"username": username, "email": email, "password": password, "phone": phone},
        )

    async def login(self, email: str, password: str) -> str:
        data = await self._request(
            "login", "POST", "/api/auth/login", auth=False,
            json={"email": email, "password": password},
        )
        token = data.get("token") if isinstance(data, dict) else None
        if not isinstance(token, str) or not token:
            raise BackendError("Login response did not include a token")
        return token

    # --- dashboard ----------------------------------------------------------

    async def list_holdings(self) -> list[dict]:
        data = await self._request("list_holdings", "GET", "/api/dashboard/")
        if isinstance(data, list):
            return data
        return data.get("stocks") or []

    async def add_holding(self, symbol: str, quantity, buy_price) -> dict:
        return await self._request(
            "add_holding", "POST", "/api/dashboard/add",
            json={"symbol": symbol, "quantity": _json_number(quantity),
                  "buyPrice": _json_number(buy_price)},
        )

    async def update_holding(self, holding_id: str, fields: dict[str, Any]) -> dict:
        body = {k: (v if k == "symbol" else _json_number(v)) for k, v in fields.items()}
        return await self._request(
            "update_holding", "PUT", f"/api/dashboard/update/{holding_id}", json=body,
        )

    async def delete_holding(self, holding_id: str) -> dict:
        return await self._request(
            "delete_holding", "DELETE", f"/api/dashboard/delete/{holding_id}",
        )

    # --- pricing ------------------------------------------------------------

    async def get_current_price(self, symbol: str) -> Decimal:
        data = await self._request(
            "price", "GET", "/api/stocks/price", params={"symbol": symbol},
        )
        price = data.get("currentPrice") if isinstance(data, dict) else None
        if price is None:
            raise BackendError(f"No price for {symbol}")
        return Decimal(str(price))

    async def get_profit_loss(self, symbol: str, buy_price, quantity) -> Decimal | None:
        """Backend profit/loss for one position, or None when it sends none."""
        data = await self._request(
            "profit_loss", "POST", "/api/stocks/profit-loss",
            json={"symbol": symbol, "buyPrice": _json_number(buy_price),
                  "quantity": _json_number(quantity)},
        )
        value = data.get("profitLoss") if isinstance(data, dict) else None
        return Decimal(str(value)) if value is not None else None
