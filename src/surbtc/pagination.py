"""Fetch every page of an order listing."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable

from .envelope import Envelope

logger = logging.getLogger(__name__)

PageFetcher = Callable[[int], Awaitable[Envelope]]


@dataclass(frozen=True, slots=True)
class OrderListing:
    """Orders accumulated so far plus the pagination cursor."""

    orders: tuple[dict[str, Any], ...]
    current_page: int
    total_pages: int
    total_count: int | None = None
    pages_fetched: int = 1

    @classmethod
    def from_page(cls, data: dict[str, Any]) -> "OrderListing":
        meta = data.get("meta") or {}
        total_count = meta.get("total_count")
        return cls(
            orders=tuple(data.get("orders") or ()),
            current_page=int(meta.get("current_page") or 0),
            total_pages=int(meta.get("total_pages") or 0),
            total_count=int(total_count) if total_count is not None else None,
        )

    @property
    def complete(self) -> bool:
        return self.pages_fetched >= self.total_pages

    def merge(self, orders: list[dict[str, Any]], page: int) -> "OrderListing":
        return replace(
            self,
            orders=self.orders + tuple(orders),
            current_page=page,
            pages_fetched=self.pages_fetched + 1,
        )

    def filtered(self, state: str) -> "OrderListing":
        return replace(self, orders=tuple(o for o in self.orders if o.get("state") == state))

    def to_dict(self) -> dict[str, Any]:
        return {
            "orders": list(self.orders),
            "meta": {
                "current_page": self.current_page,
                "total_pages": self.total_pages,
                "total_count": self.total_count,
            },
        }


async def fetch_all_orders(fetch_page: PageFetcher, state: str | None = None) -> Envelope:
    """Collect all pages of an order listing into one envelope.

    The first page is requested as page 0; each further request asks for the
    page after the cursor reported by the server, until as many pages have
    been fetched as the server reports in total. Both 0- and 1-based servers
    get exactly ``total_pages`` requests. With ``state`` set, orders are filtered after every merge and the
    final ``total_count`` is the size of the filtered set. Any failed page
    fails the whole listing.
    """
    first = await fetch_page(0)
    if not first.success:
        return first

    listing = OrderListing.from_page(first.data or {})
    while True:
        if state:
            listing = listing.filtered(state)
            if listing.complete:
                listing = replace(listing, total_count=len(listing.orders))

        if listing.complete:
            return Envelope.ok(listing.to_dict())

        page = listing.current_page + 1
        logger.debug("Fetching order page %s of %s", page, listing.total_pages)
        result = await fetch_page(page)
        if not result.success:
            logger.warning("Order page %s failed: %s", page, result.error_type)
            return result

        listing = listing.merge((result.data or {}).get("orders") or [], page)
