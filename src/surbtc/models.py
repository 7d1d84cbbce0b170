"""Order states and network identifiers."""

from __future__ import annotations

from enum import Enum


class OrderState(str, Enum):
    """Order lifecycle states reported by the exchange."""

    RECEIVED = "received"
    PENDING = "pending"
    TRADED = "traded"
    CANCELING = "canceling"
    CANCELED = "canceled"


CANCELED_STATES = frozenset({OrderState.CANCELING.value, OrderState.CANCELED.value})


class Network(str, Enum):
    """Bitcoin network the configured endpoint settles on."""

    MAIN = "main"
    TEST = "test"
