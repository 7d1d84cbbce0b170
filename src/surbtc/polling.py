"""Wait for an order to reach a given state."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

from .envelope import Envelope
from .errors import POLL_CANCELLED, POLL_TIMEOUT

logger = logging.getLogger(__name__)

OrderFetcher = Callable[[Any], Awaitable[Envelope]]

DEFAULT_INTERVAL = 0.5


def order_from(data: Any) -> dict[str, Any]:
    """Return the order mapping from an order response body."""
    if isinstance(data, dict):
        order = data.get("order", data)
        if isinstance(order, dict):
            return order
    return {}


async def poll_order_state(
    envelope: Envelope,
    target_state: str,
    fetch_order: OrderFetcher,
    *,
    interval: float = DEFAULT_INTERVAL,
    max_attempts: int | None = None,
    timeout: float | None = None,
    cancel_event: asyncio.Event | None = None,
) -> Envelope:
    """Refetch an order until it reports ``target_state``.

    Each attempt refetches the order and then waits ``interval`` seconds
    before checking it. A failed envelope, either the one passed in or one
    returned by a refetch, is returned as is.

    Args:
        envelope: Envelope wrapping the order to watch
        target_state: State to wait for
        fetch_order: Coroutine function fetching an order by id
        interval: Delay between attempts, in seconds
        max_attempts: Maximum number of refetches (None for no limit)
        timeout: Overall deadline in seconds (None for no deadline)
        cancel_event: Stops polling once set

    Returns:
        The envelope of the order in ``target_state``, or a failure tagged
        ``OrderPollTimeout`` / ``OrderPollCancelled``
    """
    target_state = getattr(target_state, "value", target_state)
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout if timeout is not None else None
    attempts = 0
    current = envelope

    while True:
        if not current.success:
            return current

        order = order_from(current.data)
        if order.get("state") == target_state:
            return current

        if cancel_event is not None and cancel_event.is_set():
            logger.info("Polling order %s cancelled", order.get("id"))
            return Envelope.fail(POLL_CANCELLED, current.data)

        if max_attempts is not None and attempts >= max_attempts:
            logger.warning("Order %s not %s after %s attempts", order.get("id"), target_state, attempts)
            return Envelope.fail(POLL_TIMEOUT, current.data)

        if deadline is not None and loop.time() >= deadline:
            logger.warning("Order %s not %s after %ss", order.get("id"), target_state, timeout)
            return Envelope.fail(POLL_TIMEOUT, current.data)

        attempts += 1
        current = await fetch_order(order.get("id"))
        if not current.success:
            return current

        await asyncio.sleep(interval)
