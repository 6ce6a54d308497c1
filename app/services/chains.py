"""Chain metadata, well-known contracts and target chain inference."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

EDUCHAIN_CHAIN_ID = 41923
ARBITRUM_CHAIN_ID = 42161
BSC_CHAIN_ID = 56

CHAIN_NAMES: Dict[int, str] = {
    EDUCHAIN_CHAIN_ID: 'EDU Chain',
    ARBITRUM_CHAIN_ID: 'Arbitrum One',
    BSC_CHAIN_ID: 'BNB Smart Chain',
}

# SailFish DEX (Uniswap v3 fork) on EDU Chain
SAILFISH_SWAP_ROUTER = "0x1a1e967e523435CeF20642e3D7811F7d0da9a704"
SAILFISH_QUOTER_V2 = "0x83EE12582E3448Ab69E664A2ba69b6AedE112205"
WEDU_ADDRESS = "0xd02E8c38a8E3db71f8b2ae30B8186d7874934e12"
SAILFISH_FEE_TIERS = (100, 500, 3000, 10000)

# EDU on Arbitrum and the canonical Arbitrum -> EDU Chain bridge
ARB_EDU_TOKEN_ADDRESS = "0xf8173a39c56a554837C4C7f104153A005D284D11"
ARB_TO_EDU_BRIDGE_ADDRESS = "0x590044e628ea1B9C10a86738Cf7a7eeF52D031B8"

# EDU on BSC and its LayerZero OFT adapter (BSC -> Arbitrum)
BSC_EDU_TOKEN_ADDRESS = "0xBdEAe1cA48894A1759A8374D63925f21f2Ee2639"
BSC_EDU_OFT_ADDRESS = "0x67fb304001aD03C282266B965b51E97Aa54A2FAB"
LAYERZERO_ARBITRUM_CHAIN_ID = 110

ARBITRUM_ADDRESSES = frozenset(
    address.lower() for address in (ARB_EDU_TOKEN_ADDRESS, ARB_TO_EDU_BRIDGE_ADDRESS)
)
BSC_ADDRESSES = frozenset(
    address.lower() for address in (BSC_EDU_TOKEN_ADDRESS, BSC_EDU_OFT_ADDRESS)
)


def chain_name(chain_id: int) -> str:
    return CHAIN_NAMES.get(chain_id, f"chain {chain_id}")


def chain_for_address(address: Any) -> Optional[int]:
    """Chain a known contract lives on, None for anything unrecognised."""

    if not isinstance(address, str):
        return None
    if address.lower() in ARBITRUM_ADDRESSES:
        return ARBITRUM_CHAIN_ID
    if address.lower() in BSC_ADDRESSES:
        return BSC_CHAIN_ID
    return None


def infer_target_chain(
    *,
    descriptor_chain_id: Optional[int] = None,
    tool_chain_id: Optional[int] = None,
    addresses: Iterable[Any] = (),
    profile_chain_id: Optional[int] = None,
    default_chain_id: int = EDUCHAIN_CHAIN_ID,
) -> int:
    """Pick the network a tool's transaction must be signed on.

    An explicit chain on the prepared transaction wins, then the tool's own
    network, then any argument that is a known Arbitrum or BSC contract, then
    the agent profile's chain, and finally the configured default.
    """

    if descriptor_chain_id:
        return int(descriptor_chain_id)
    if tool_chain_id:
        return tool_chain_id
    for address in addresses:
        found = chain_for_address(address)
        if found is not None:
            return found
    if profile_chain_id:
        return profile_chain_id
    return default_chain_id


__all__ = [
    "ARBITRUM_ADDRESSES",
    "ARBITRUM_CHAIN_ID",
    "ARB_EDU_TOKEN_ADDRESS",
    "ARB_TO_EDU_BRIDGE_ADDRESS",
    "BSC_ADDRESSES",
    "BSC_CHAIN_ID",
    "BSC_EDU_OFT_ADDRESS",
    "BSC_EDU_TOKEN_ADDRESS",
    "CHAIN_NAMES",
    "EDUCHAIN_CHAIN_ID",
    "LAYERZERO_ARBITRUM_CHAIN_ID",
    "SAILFISH_FEE_TIERS",
    "SAILFISH_QUOTER_V2",
    "SAILFISH_SWAP_ROUTER",
    "WEDU_ADDRESS",
    "chain_for_address",
    "chain_name",
    "infer_target_chain",
]
