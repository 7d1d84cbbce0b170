"""Uniform result shape returned by every client operation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .errors import TRANSPORT_ERROR, EnvelopeError, http_error_kind

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Envelope:
    """Outcome of a single operation.

    Exactly one of the two channels is meaningful: a successful envelope
    carries ``data`` and no ``error_type``; a failed one always carries an
    ``error_type`` and, when the server supplied one, the error body in
    ``data``.
    """

    success: bool
    data: Any = None
    error_type: str | None = None

    def __post_init__(self) -> None:
        if self.success and self.error_type is not None:
            raise ValueError("Successful envelope cannot carry an error type")
        if not self.success and not self.error_type:
            raise ValueError("Failed envelope requires an error type")

    @classmethod
    def ok(cls, data: Any) -> "Envelope":
        return cls(True, data, None)

    @classmethod
    def fail(cls, error_type: str, data: Any = None) -> "Envelope":
        return cls(False, data, error_type)

    @property
    def error(self) -> dict[str, Any] | None:
        """Error channel as a mapping, or None on success."""
        if self.success:
            return None
        return {"success": False, "error_type": self.error_type, "data": self.data}

    def unwrap(self) -> Any:
        """Return ``data`` or raise ``EnvelopeError`` for a failure."""
        if not self.success:
            raise EnvelopeError(self.error_type or "", self.data)
        return self.data

    def to_dict(self) -> dict[str, Any]:
        return {"success": self.success, "data": self.data, "error_type": self.error_type}


def server_error_kind(body: Any) -> str | None:
    """Extract the error kind the server declared in its error body."""
    if isinstance(body, dict):
        for key in ("code", "error_type"):
            value = body.get(key)
            if value:
                return str(value)
    return None


def normalize(status: int | None, body: Any, transport_error: BaseException | None = None) -> Envelope:
    """Classify a raw HTTP outcome into an ``Envelope``.

    Args:
        status: HTTP status, or None when no response was received
        body: Parsed JSON body, or None
        transport_error: Network-level failure, if any
    """
    if transport_error is not None:
        kind = server_error_kind(body) or TRANSPORT_ERROR
        logger.warning("Transport failure: %s", transport_error)
        return Envelope.fail(kind, body if body is not None else {"message": str(transport_error)})

    if status is None or not 200 <= status < 300:
        kind = server_error_kind(body) or http_error_kind(status or 0)
        logger.warning("Request failed with status %s (%s)", status, kind)
        return Envelope.fail(kind, body)

    return Envelope.ok(body)
