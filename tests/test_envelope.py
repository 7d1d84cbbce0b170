"""Tests for envelope normalization."""

import aiohttp
import pytest

from surbtc.envelope import Envelope, normalize
from surbtc.errors import TRANSPORT_ERROR, EnvelopeError


class TestEnvelope:
    """Tests for the envelope invariants."""

    def test_ok(self):
        result = Envelope.ok({"markets": []})
        assert result.success
        assert result.data == {"markets": []}
        assert result.error_type is None
        assert result.error is None

    def test_fail_requires_error_type(self):
        with pytest.raises(ValueError):
            Envelope(False, None, None)

    def test_success_cannot_carry_error(self):
        with pytest.raises(ValueError):
            Envelope(True, {}, "boom")

    def test_unwrap_failure_raises(self):
        result = Envelope.fail("not_authorized", {"message": "Invalid credentials"})
        with pytest.raises(EnvelopeError) as exc_info:
            result.unwrap()
        assert exc_info.value.error_type == "not_authorized"
        assert exc_info.value.data == {"message": "Invalid credentials"}

    def test_error_channel(self):
        result = Envelope.fail("not_authorized")
        assert result.error == {"success": False, "error_type": "not_authorized", "data": None}


class TestNormalize:
    """Tests for classifying raw HTTP outcomes."""

    def test_success_passes_body_through(self):
        body = {"order_book": {"asks": [], "bids": []}}
        result = normalize(200, body)
        assert result.success
        assert result.data is body

    def test_server_declared_code(self):
        body = {"message": "Not found", "code": "not_found"}
        result = normalize(404, body)
        assert not result.success
        assert result.error_type == "not_found"
        assert result.data == body

    def test_status_fallback(self):
        result = normalize(500, None)
        assert result.error_type == "HTTP:500"
        assert result.data is None

    def test_transport_failure(self):
        result = normalize(None, None, aiohttp.ClientConnectionError("connection reset"))
        assert not result.success
        assert result.error_type == TRANSPORT_ERROR
        assert result.data == {"message": "connection reset"}
