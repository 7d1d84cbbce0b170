"""Tests for fetching every page of an order listing."""

from unittest.mock import AsyncMock

import pytest

from surbtc.envelope import Envelope
from surbtc.pagination import OrderListing, fetch_all_orders


def make_page(page, total_pages, orders, total_count=None):
    return Envelope.ok({
        "orders": orders,
        "meta": {
            "current_page": page,
            "total_pages": total_pages,
            "total_count": total_count,
        },
    })


PAGES = {
    0: make_page(1, 3, [{"id": 1, "state": "traded"}, {"id": 2, "state": "pending"}], 5),
    2: make_page(2, 3, [{"id": 3, "state": "traded"}, {"id": 4, "state": "canceled"}], 5),
    3: make_page(3, 3, [{"id": 5, "state": "traded"}], 5),
}


@pytest.fixture
def fetch_page():
    return AsyncMock(side_effect=lambda page: PAGES[page])


class TestFetchAllOrders:
    """Tests for fetch_all_orders."""

    @pytest.mark.asyncio
    async def test_concatenates_pages_in_order(self, fetch_page):
        result = await fetch_all_orders(fetch_page)

        assert result.success
        assert fetch_page.await_count == 3
        assert [call.args[0] for call in fetch_page.await_args_list] == [0, 2, 3]
        assert [o["id"] for o in result.data["orders"]] == [1, 2, 3, 4, 5]
        assert result.data["meta"]["total_count"] == 5

    @pytest.mark.asyncio
    async def test_zero_based_pages(self):
        pages = {
            0: make_page(0, 3, [{"id": 1, "state": "traded"}], 3),
            1: make_page(1, 3, [{"id": 2, "state": "pending"}], 3),
            2: make_page(2, 3, [{"id": 3, "state": "traded"}], 3),
        }
        fetch_page = AsyncMock(side_effect=lambda page: pages[page])

        result = await fetch_all_orders(fetch_page)

        assert result.success
        assert fetch_page.await_count == 3
        assert [call.args[0] for call in fetch_page.await_args_list] == [0, 1, 2]
        assert [o["id"] for o in result.data["orders"]] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_zero_based_pages_with_filter(self):
        pages = {
            0: make_page(0, 3, [{"id": 1, "state": "traded"}], 3),
            1: make_page(1, 3, [{"id": 2, "state": "pending"}], 3),
            2: make_page(2, 3, [{"id": 3, "state": "traded"}], 3),
        }
        fetch_page = AsyncMock(side_effect=lambda page: pages[page])

        result = await fetch_all_orders(fetch_page, "traded")

        assert fetch_page.await_count == 3
        assert [o["id"] for o in result.data["orders"]] == [1, 3]
        assert result.data["meta"]["total_count"] == 2

    @pytest.mark.asyncio
    async def test_state_filter_recounts(self, fetch_page):
        result = await fetch_all_orders(fetch_page, "traded")

        assert result.success
        assert [o["id"] for o in result.data["orders"]] == [1, 3, 5]
        assert result.data["meta"]["total_count"] == 3

    @pytest.mark.asyncio
    async def test_single_page(self):
        fetch_page = AsyncMock(return_value=make_page(1, 1, [{"id": 9, "state": "pending"}], 1))

        result = await fetch_all_orders(fetch_page, "traded")

        assert fetch_page.await_count == 1
        assert result.data["orders"] == []
        assert result.data["meta"]["total_count"] == 0

    @pytest.mark.asyncio
    async def test_first_page_failure(self):
        fetch_page = AsyncMock(return_value=Envelope.fail("not_authorized"))

        result = await fetch_all_orders(fetch_page)

        assert not result.success
        assert result.error_type == "not_authorized"
        assert fetch_page.await_count == 1

    @pytest.mark.asyncio
    async def test_later_page_failure_discards_partial(self):
        responses = [PAGES[0], Envelope.fail("HTTP:500")]
        fetch_page = AsyncMock(side_effect=responses)

        result = await fetch_all_orders(fetch_page)

        assert not result.success
        assert result.error_type == "HTTP:500"
        assert result.data is None
        assert fetch_page.await_count == 2


class TestOrderListing:
    """Tests for the accumulator value."""

    def test_merge_returns_new_listing(self):
        listing = OrderListing.from_page(PAGES[0].data)
        merged = listing.merge([{"id": 3}], 2)

        assert len(listing.orders) == 2
        assert len(merged.orders) == 3
        assert merged.current_page == 2
        assert merged.pages_fetched == 2
        assert listing.current_page == 1

    def test_missing_meta_is_complete(self):
        listing = OrderListing.from_page({"orders": [{"id": 1}]})
        assert listing.complete
