"""SURBTC REST client."""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Mapping

from .bitcoin import to_cents, to_satoshi, validate_address
from .dispatcher import DEFAULT_API, ProxyConfig, RequestDispatcher
from .envelope import Envelope
from .errors import INVALID_BITCOIN_ADDRESS, ORDER_NOT_VALID_FOR_CANCELING
from .models import CANCELED_STATES, Network, OrderState
from .pagination import fetch_all_orders
from .polling import DEFAULT_INTERVAL, order_from, poll_order_state
from .settings import Settings

logger = logging.getLogger(__name__)

CENT_CURRENCIES = frozenset({"CLP", "COP"})


class SurbtcClient:
    """One method per exchange operation; every method returns an ``Envelope``.

    Configuration is fixed at construction. Methods that need a signed
    request return an ``InvalidRequest:ApiKeyRequired`` failure without any
    network I/O when the client has no secret.
    """

    def __init__(
        self,
        api: str = DEFAULT_API,
        api_key: str = "",
        api_secret: str = "",
        *,
        network: Network | str = Network.MAIN,
        headers: Mapping[str, str] | None = None,
        proxy: ProxyConfig | None = None,
        request_timeout: float | None = None,
        poll_interval: float = DEFAULT_INTERVAL,
        poll_max_attempts: int | None = None,
        poll_timeout: float | None = None,
    ):
        self.network = Network(network)
        self.dispatcher = RequestDispatcher(
            api,
            api_key,
            api_secret,
            headers=headers,
            proxy=proxy,
            request_timeout=request_timeout,
        )
        self.poll_interval = poll_interval
        self.poll_max_attempts = poll_max_attempts
        self.poll_timeout = poll_timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "SurbtcClient":
        creds = settings.credentials
        proxy = None
        if settings.proxy.enabled:
            proxy = ProxyConfig(
                url=settings.proxy.url,
                username=settings.proxy.username,
                password=settings.proxy.password.get_secret_value() if settings.proxy.password else None,
            )
        return cls(
            settings.api,
            creds.api_key.get_secret_value() if creds else "",
            creds.api_secret.get_secret_value() if creds else "",
            network=settings.network,
            headers=settings.headers,
            proxy=proxy,
            request_timeout=settings.request_timeout,
            poll_interval=settings.polling.interval,
            poll_max_attempts=settings.polling.max_attempts,
            poll_timeout=settings.polling.timeout,
        )

    @property
    def api(self) -> str:
        return self.dispatcher.api

    async def __aenter__(self) -> "SurbtcClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self.dispatcher.close()

    # Market data

    async def get_markets(self) -> Envelope:
        return await self.dispatcher.request("GET", "/markets", auth=False)

    async def get_order_book(self, market_id: str) -> Envelope:
        return await self.dispatcher.request("GET", f"/markets/{market_id}/order_book", auth=False)

    async def get_balances(self, currency: str | None = None) -> Envelope:
        path = "/balances"
        if currency:
            path = f"{path}/{currency}"
        return await self.dispatcher.request("GET", path)

    async def get_exchange_fee(self, market_id: str, type: str, market_order: bool = False) -> Envelope:
        """Fee percentage for ``type`` ("bid" or "ask") orders in a market."""
        path = f"/markets/{market_id}/fee_percentage?type={type.capitalize()}"
        if market_order:
            path += "&market_order=true"
        return await self.dispatcher.request("GET", path)

    async def get_quotation(self, market_id: str, type: str, amount: float) -> Envelope:
        return await self._quotation(market_id, type, amount, reverse=False)

    async def get_reverse_quotation(self, market_id: str, type: str, amount: float) -> Envelope:
        return await self._quotation(market_id, type, amount, reverse=True)

    async def _quotation(self, market_id: str, type: str, amount: float, *, reverse: bool) -> Envelope:
        data = {
            "quotation": {
                "type": type.lower(),
                "reverse": reverse,
                "amount": amount,
            }
        }
        return await self.dispatcher.request("POST", f"/markets/{market_id}/quotations", data)

    # Orders

    async def create_order(self, market_id: str, order: Mapping[str, Any]) -> Envelope:
        return await self.dispatcher.request("POST", f"/markets/{market_id}/orders", dict(order))

    async def get_orders_raw(self, market_id: str, page: int | None = None) -> Envelope:
        """Fetch a single page of a market's orders."""
        path = f"/markets/{market_id}/orders"
        if page:
            path += f"?page={page}"
        return await self.dispatcher.request("GET", path)

    async def get_orders(self, market_id: str) -> Envelope:
        """Fetch every page of a market's orders."""
        return await self.get_orders_by_state(market_id, None)

    async def get_orders_by_state(self, market_id: str, state: OrderState | str | None) -> Envelope:
        """Fetch every page of a market's orders, keeping only ``state``."""
        async def fetch_page(page: int) -> Envelope:
            return await self.get_orders_raw(market_id, page)

        state = getattr(state, "value", state)
        return await fetch_all_orders(fetch_page, state or None)

    async def get_order(self, order_id: Any) -> Envelope:
        return await self.dispatcher.request("GET", f"/orders/{order_id}")

    async def cancel_order(self, order_id: Any) -> Envelope:
        """Request cancellation; fails if the order did not enter a canceled state."""
        result = await self.dispatcher.request(
            "PUT", f"/orders/{order_id}", {"state": OrderState.CANCELING.value}
        )
        if not result.success:
            return result

        state = order_from(result.data).get("state")
        if state not in CANCELED_STATES:
            logger.warning("Order %s not cancelable, state is %s", order_id, state)
            return Envelope.fail(ORDER_NOT_VALID_FOR_CANCELING, result.data)
        return result

    async def poll_order_state(
        self,
        order: Envelope,
        state: OrderState | str,
        *,
        interval: float | None = None,
        max_attempts: int | None = None,
        timeout: float | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> Envelope:
        """Refetch ``order`` until it reaches ``state``.

        Unset limits fall back to the ones the client was built with.
        """
        return await poll_order_state(
            order,
            state,
            self.get_order,
            interval=self.poll_interval if interval is None else interval,
            max_attempts=self.poll_max_attempts if max_attempts is None else max_attempts,
            timeout=self.poll_timeout if timeout is None else timeout,
            cancel_event=cancel_event,
        )

    async def create_and_trade_order(
        self,
        market_id: str,
        order: Mapping[str, Any],
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> Envelope:
        """Create an order and wait until it is traded."""
        created = await self.create_order(market_id, order)
        if not created.success:
            return created
        return await self.poll_order_state(created, OrderState.TRADED, cancel_event=cancel_event)

    # Funds

    async def register_bank_account(
        self,
        *,
        currency: str,
        bank_id: int | str,
        email: str,
        phone: str,
        holder_id: str,
        holder_name: str,
        account_number: str,
        account_type: str,
    ) -> Envelope:
        data = {
            "email": email,
            "phone": phone,
            "document_number": holder_id,
            "full_name": holder_name,
            "account_number": account_number,
            "account_type": account_type,
            "bank_id": bank_id,
        }
        return await self.dispatcher.request("PUT", f"/fiat_accounts/{currency.upper()}", data)

    async def request_withdrawal(
        self,
        currency: str,
        amount: float | str,
        target_address: str | None = None,
    ) -> Envelope:
        """Withdraw funds.

        BTC withdrawals validate ``target_address`` against the configured
        network before anything is sent and convert ``amount`` to satoshis.
        CLP and COP amounts are sent in cents.
        """
        currency = currency.upper()
        data: dict[str, Any] = {
            "withdrawal_data": {},
            "amount": amount,
            "currency": currency,
        }

        if currency == "BTC":
            if not validate_address(target_address, self.network):
                logger.warning("Rejected %s bitcoin address %r", self.network.value, target_address)
                return Envelope.fail(INVALID_BITCOIN_ADDRESS)
            data["withdrawal_data"]["target_address"] = target_address
            data["amount"] = to_satoshi(amount)
        elif currency in CENT_CURRENCIES:
            data["amount"] = to_cents(amount)

        return await self.dispatcher.request("POST", "/withdrawals", data)

    async def register_deposit(self, currency: str, amount: float | str) -> Envelope:
        data = {
            "amount": to_cents(amount),
            "currency": currency.upper(),
        }
        return await self.dispatcher.request("POST", "/deposits", data)

    async def generate_uuid(self) -> Envelope:
        return Envelope.ok({"status": "success", "uuid": str(uuid.uuid4())})
