"""Static token table for EDU Chain symbol lookups."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from .chains import WEDU_ADDRESS

TOKEN_REGISTRY: Dict[str, Dict[str, Any]] = {
    "EDU": {
        "symbol": "EDU",
        "name": "EDU (wrapped for routing)",
        "address": WEDU_ADDRESS,
        "decimals": 18,
    },
    "WEDU": {
        "symbol": "WEDU",
        "name": "Wrapped EDU",
        "address": WEDU_ADDRESS,
        "decimals": 18,
    },
    "USDC": {
        "symbol": "USDC",
        "name": "USD Coin",
        "address": "0x836d275563bAb5E93Fd6Ca62a95dB7065Da94342",
        "decimals": 6,
    },
    "USDT": {
        "symbol": "USDT",
        "name": "Tether USD",
        "address": "0x7277Cc818e3F3FFBb169c6Da9CC77Fc2d2a34895",
        "decimals": 6,
    },
}


def build_symbol_table(extra: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Upper-cased symbol -> address, with configured overrides applied last."""

    table = {symbol.upper(): entry["address"] for symbol, entry in TOKEN_REGISTRY.items()}
    for symbol, address in (extra or {}).items():
        table[symbol.strip().upper()] = address
    return table


def known_decimals(address: str) -> Optional[int]:
    for entry in TOKEN_REGISTRY.values():
        if entry["address"].lower() == address.lower():
            return entry["decimals"]
    return None
