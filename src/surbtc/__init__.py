"""surbtc: async REST client for the SURBTC exchange."""

from .client import SurbtcClient
from .envelope import Envelope
from .models import Network, OrderState
from .settings import Settings

__all__ = [
    "SurbtcClient",
    "Envelope",
    "Network",
    "OrderState",
    "Settings",
]
