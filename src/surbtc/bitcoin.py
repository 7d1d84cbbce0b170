"""Bitcoin address checks and amount conversion for withdrawals."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

import base58
import bech32

from .models import Network

SATOSHIS_PER_BTC = 10**8

# BIP173 and BIP350 checksum constants
BECH32_CONST = 1
BECH32M_CONST = 0x2BC830A3

_BASE58_VERSIONS = {
    Network.MAIN: {0x00, 0x05},
    Network.TEST: {0x6F, 0xC4},
}

_SEGWIT_HRP = {
    Network.MAIN: "bc",
    Network.TEST: "tb",
}


def _valid_base58(address: str, network: Network) -> bool:
    try:
        payload = base58.b58decode_check(address)
    except ValueError:
        return False
    return len(payload) == 21 and payload[0] in _BASE58_VERSIONS[network]


def _valid_segwit(address: str, network: Network) -> bool:
    """Check a segwit address: bech32 for witness v0, bech32m for v1 and up."""
    if address.lower() != address and address.upper() != address:
        return False
    address = address.lower()
    hrp = _SEGWIT_HRP[network]
    sep = address.rfind("1")
    if address[:sep] != hrp or not 8 <= len(address) <= 90 or len(address) - sep < 8:
        return False
    if any(c not in bech32.CHARSET for c in address[sep + 1 :]):
        return False

    data = [bech32.CHARSET.find(c) for c in address[sep + 1 :]]
    witver = data[0]
    expected = BECH32_CONST if witver == 0 else BECH32M_CONST
    if witver > 16 or bech32.bech32_polymod(bech32.bech32_hrp_expand(hrp) + data) != expected:
        return False

    witprog = bech32.convertbits(data[1:-6], 5, 8, False)
    if witprog is None or not 2 <= len(witprog) <= 40:
        return False
    return witver != 0 or len(witprog) in (20, 32)


def validate_address(address: str | None, network: Network | str = Network.MAIN) -> bool:
    """Return True if ``address`` is a valid Bitcoin address on ``network``."""
    if not address or not isinstance(address, str):
        return False
    network = Network(network)
    address = address.strip()
    if address.lower().startswith(_SEGWIT_HRP[network] + "1"):
        return _valid_segwit(address, network)
    return _valid_base58(address, network)


def to_satoshi(amount: float | int | str | Decimal) -> int:
    """Convert a BTC amount to satoshis, rounding half up."""
    value = Decimal(str(amount)) * SATOSHIS_PER_BTC
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def to_cents(amount: float | int | str | Decimal) -> int | float:
    """Scale a fiat amount by 100, the unit the exchange expects."""
    value = Decimal(str(amount)) * 100
    return int(value) if value == value.to_integral_value() else float(value)
