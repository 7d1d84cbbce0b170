"""Pytest configuration and fixtures."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from surbtc.client import SurbtcClient


def create_async_response(status=200, json_data=None):
    """Create a mock async response."""
    resp = AsyncMock()
    resp.status = status
    resp.json = AsyncMock(return_value=json_data)
    resp.__aenter__ = AsyncMock(return_value=resp)
    resp.__aexit__ = AsyncMock(return_value=None)
    return resp


def mock_session(client, *responses):
    """Attach a session to ``client`` that answers with ``responses`` in order."""
    session = MagicMock()
    session.request = MagicMock(side_effect=list(responses))
    client.dispatcher._ensure_session = AsyncMock(return_value=session)
    return session


@pytest.fixture
def api_key():
    """Test API key."""
    return "test_api_key_123456"


@pytest.fixture
def api_secret():
    """Test API secret."""
    return "test_api_secret_789012"


@pytest.fixture
def client(api_key, api_secret):
    """Authenticated client against the production endpoint."""
    return SurbtcClient(api_key=api_key, api_secret=api_secret)


@pytest.fixture
def anonymous_client():
    """Client without credentials."""
    return SurbtcClient()


@pytest.fixture
def sample_order():
    """Sample order response body."""
    return {
        "order": {
            "id": 1234,
            "market_id": "BTC-CLP",
            "type": "Bid",
            "state": "received",
            "price_type": "limit",
            "limit": ["1000000.0", "CLP"],
            "amount": ["0.01", "BTC"],
        }
    }


@pytest.fixture
def order_request():
    """Order creation payload."""
    return {
        "order": {
            "type": "Bid",
            "price_type": "limit",
            "limit": 1000000,
            "amount": 0.01,
        }
    }
