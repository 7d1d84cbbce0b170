"""Error kinds and exceptions for the SURBTC client."""

from __future__ import annotations

API_KEY_REQUIRED = "InvalidRequest:ApiKeyRequired"
INVALID_BITCOIN_ADDRESS = "InvalidRequest:InvalidBitcoinAddress"
ORDER_NOT_VALID_FOR_CANCELING = "order_not_valid_for_canceling"
TRANSPORT_ERROR = "TransportError"
POLL_TIMEOUT = "OrderPollTimeout"
POLL_CANCELLED = "OrderPollCancelled"


def http_error_kind(status: int) -> str:
    """Error kind for a non-2xx response without a server-declared code."""
    return f"HTTP:{status}"


class SurbtcError(Exception):
    """Base exception for client errors."""


class ConfigurationError(SurbtcError, ValueError):
    """Raised when the client is asked to do something it cannot be configured for."""


class EnvelopeError(SurbtcError):
    """Raised by ``Envelope.unwrap`` when the envelope holds a failure."""

    def __init__(self, error_type: str, data: object = None):
        super().__init__(error_type)
        self.error_type = error_type
        self.data = data
