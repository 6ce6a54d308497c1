"""SailFish DEX quotes and unsigned swap transactions on EDU Chain."""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ..providers.base import ProviderError
from ..providers.rpc import EvmRpcProvider
from ..providers.sailfish import SailfishSubgraphProvider
from ..services.abi import (
    decode_uint,
    encode_call,
    encode_exact_input,
    encode_multicall,
    encode_path,
    encode_quote_exact_input,
    from_base_units,
    selector,
    to_base_units,
    to_positive_base_units,
)
from ..services.address import ZERO_ADDRESS, checksum, same_address
from ..services.chains import (
    EDUCHAIN_CHAIN_ID,
    SAILFISH_FEE_TIERS,
    SAILFISH_QUOTER_V2,
    SAILFISH_SWAP_ROUTER,
    WEDU_ADDRESS,
)
from ..services.erc20 import erc20_metadata

logger = logging.getLogger(__name__)

DEFAULT_SLIPPAGE_PERCENT = 0.5
DEFAULT_DEADLINE_MINUTES = 20


@dataclass
class SwapRoute:
    """Token path through SailFish pools"""
    tokens: List[str]
    fees: List[int]
    pools: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def is_direct(self) -> bool:
        return len(self.fees) == 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "direct" if self.is_direct else "indirect",
            "path": self.tokens,
            "fees": self.fees,
            "pools": [pool.get("id") for pool in self.pools],
        }


def minimum_amount_out(amount_out: int, slippage_percent: float) -> int:
    """Apply slippage in basis points: out * (10000 - bps) / 10000"""
    bps = int(round(slippage_percent * 100))
    if bps < 0 or bps >= 10000:
        raise ValueError(f"Slippage must be between 0 and 100 percent, got {slippage_percent}")
    return amount_out * (10000 - bps) // 10000


def swap_deadline(minutes: int = DEFAULT_DEADLINE_MINUTES) -> int:
    return int(time.time()) + minutes * 60


def _pool_fee(pool: Dict[str, Any]) -> int:
    fee = int(pool["feeTier"])
    if fee not in SAILFISH_FEE_TIERS:
        logger.warning(f"Pool {pool.get('id')} has unexpected fee tier {fee}")
    return fee


async def find_route(sailfish: SailfishSubgraphProvider, token_in: str, token_out: str) -> SwapRoute:
    """Deepest direct pool, otherwise a two-hop route through WEDU"""
    if same_address(token_in, token_out):
        raise ValueError("tokenIn and tokenOut must be different tokens")

    direct = await sailfish.get_pools_for_pair(token_in, token_out)
    if direct:
        pool = direct[0]
        return SwapRoute(tokens=[token_in, token_out], fees=[_pool_fee(pool)], pools=[pool])

    if not same_address(token_in, WEDU_ADDRESS) and not same_address(token_out, WEDU_ADDRESS):
        first, second = await asyncio.gather(
            sailfish.get_pools_for_pair(token_in, WEDU_ADDRESS),
            sailfish.get_pools_for_pair(WEDU_ADDRESS, token_out),
        )
        if first and second:
            return SwapRoute(
                tokens=[token_in, WEDU_ADDRESS, token_out],
                fees=[_pool_fee(first[0]), _pool_fee(second[0])],
                pools=[first[0], second[0]],
            )

    raise ProviderError(f"No SailFish liquidity route between {token_in} and {token_out}")


def _mid_price(route: SwapRoute) -> Optional[Decimal]:
    """Spot price of tokenIn in tokenOut across the route's pools"""
    price = Decimal(1)
    for index, pool in enumerate(route.pools):
        hop_in = route.tokens[index]
        # token1Price is token1 per token0
        if same_address(pool["token0"]["id"], hop_in):
            hop_price = Decimal(pool["token1Price"])
        else:
            hop_price = Decimal(pool["token0Price"])
        price *= hop_price
    return price if route.pools else None


async def quote_amount_out(rpc: EvmRpcProvider, route: SwapRoute, amount_in: int) -> int:
    """Exact-input quote from QuoterV2, in tokenOut base units"""
    if route.is_direct:
        data = encode_call(
            "quoteExactInputSingle((address,address,uint256,uint24,uint160))",
            route.tokens[0],
            route.tokens[1],
            amount_in,
            route.fees[0],
            0,
        )
    else:
        data = encode_quote_exact_input(encode_path(route.tokens, route.fees), amount_in)
    result = await rpc.call(SAILFISH_QUOTER_V2, data)
    return decode_uint(result)


async def get_swap_quote(
    rpc: EvmRpcProvider,
    sailfish: SailfishSubgraphProvider,
    token_in: str,
    token_out: str,
    amount_in: str,
    slippage_percent: float = DEFAULT_SLIPPAGE_PERCENT,
) -> Dict[str, Any]:
    """Expected output, minimum output after slippage and price impact"""
    route = await find_route(sailfish, token_in, token_out)
    meta_in, meta_out = await asyncio.gather(
        erc20_metadata(rpc, token_in),
        erc20_metadata(rpc, token_out),
    )

    amount_in_units = to_base_units(amount_in, meta_in["decimals"])
    if amount_in_units <= 0:
        raise ValueError("amountIn is too small for this token's decimals")
    amount_out = await quote_amount_out(rpc, route, amount_in_units)
    min_out = minimum_amount_out(amount_out, slippage_percent)

    formatted_in = Decimal(from_base_units(amount_in_units, meta_in["decimals"]))
    formatted_out = Decimal(from_base_units(amount_out, meta_out["decimals"]))
    execution_price = formatted_out / formatted_in
    mid_price = _mid_price(route)

    price_impact = None
    if mid_price:
        impact = (mid_price - execution_price) / mid_price * 100
        price_impact = max(impact, Decimal(0)).quantize(Decimal("0.01"))

    return {
        "tokenIn": {"address": checksum(token_in), "symbol": meta_in["symbol"], "decimals": meta_in["decimals"]},
        "tokenOut": {"address": checksum(token_out), "symbol": meta_out["symbol"], "decimals": meta_out["decimals"]},
        "amountIn": amount_in_units,
        "amountOut": amount_out,
        "formattedAmountIn": from_base_units(amount_in_units, meta_in["decimals"]),
        "formattedAmountOut": from_base_units(amount_out, meta_out["decimals"]),
        "minimumAmountOut": min_out,
        "formattedMinimumAmountOut": from_base_units(min_out, meta_out["decimals"]),
        "slippagePercentage": slippage_percent,
        "executionPrice": execution_price,
        "midPrice": mid_price,
        "priceImpact": price_impact,
        "route": route.to_dict(),
        "chainId": EDUCHAIN_CHAIN_ID,
    }


def prepare_wrap_edu_tx(amount: str) -> Dict[str, Any]:
    return {
        "to": WEDU_ADDRESS,
        "data": selector("deposit()"),
        "value": to_positive_base_units(amount, 18),
        "chainId": EDUCHAIN_CHAIN_ID,
        "description": f"Wrap {amount} EDU into WEDU",
    }


def prepare_unwrap_wedu_tx(amount: str) -> Dict[str, Any]:
    return {
        "to": WEDU_ADDRESS,
        "data": encode_call("withdraw(uint256)", to_positive_base_units(amount, 18)),
        "value": 0,
        "chainId": EDUCHAIN_CHAIN_ID,
        "description": f"Unwrap {amount} WEDU into EDU",
    }


def _swap_call(route: SwapRoute, recipient: str, deadline: int, amount_in: int, min_out: int) -> str:
    if route.is_direct:
        return encode_call(
            "exactInputSingle((address,address,uint24,address,uint256,uint256,uint256,uint160))",
            route.tokens[0],
            route.tokens[1],
            route.fees[0],
            recipient,
            deadline,
            amount_in,
            min_out,
            0,
        )
    return encode_exact_input(encode_path(route.tokens, route.fees), recipient, deadline, amount_in, min_out)


async def _quote_for_swap(
    rpc: EvmRpcProvider,
    sailfish: SailfishSubgraphProvider,
    token_in: str,
    token_out: str,
    amount_in: str,
    slippage_percent: float,
):
    route = await find_route(sailfish, token_in, token_out)
    meta_in = await erc20_metadata(rpc, token_in)
    amount_in_units = to_base_units(amount_in, meta_in["decimals"])
    if amount_in_units <= 0:
        raise ValueError("amountIn is too small for this token's decimals")
    amount_out = await quote_amount_out(rpc, route, amount_in_units)
    return route, amount_in_units, minimum_amount_out(amount_out, slippage_percent)


async def prepare_swap_edu_for_tokens_tx(
    rpc: EvmRpcProvider,
    sailfish: SailfishSubgraphProvider,
    token_out: str,
    amount_in: str,
    recipient: str,
    slippage_percent: float = DEFAULT_SLIPPAGE_PERCENT,
    deadline_minutes: int = DEFAULT_DEADLINE_MINUTES,
) -> Dict[str, Any]:
    """Native EDU in; the router wraps ``msg.value`` before swapping"""
    route, amount_in_units, min_out = await _quote_for_swap(
        rpc, sailfish, WEDU_ADDRESS, token_out, amount_in, slippage_percent
    )
    data = _swap_call(route, recipient, swap_deadline(deadline_minutes), amount_in_units, min_out)
    return {
        "to": SAILFISH_SWAP_ROUTER,
        "data": data,
        "value": amount_in_units,
        "chainId": EDUCHAIN_CHAIN_ID,
        "description": f"Swap {amount_in} EDU for token {token_out} on SailFish (min out {min_out})",
    }


async def prepare_swap_tokens_for_edu_tx(
    rpc: EvmRpcProvider,
    sailfish: SailfishSubgraphProvider,
    token_in: str,
    amount_in: str,
    recipient: str,
    slippage_percent: float = DEFAULT_SLIPPAGE_PERCENT,
    deadline_minutes: int = DEFAULT_DEADLINE_MINUTES,
) -> Dict[str, Any]:
    """Swap into WEDU held by the router, then unwrap to the recipient"""
    route, amount_in_units, min_out = await _quote_for_swap(
        rpc, sailfish, token_in, WEDU_ADDRESS, amount_in, slippage_percent
    )
    # Zero recipient leaves the WEDU with the router for unwrapWETH9.
    swap = _swap_call(route, ZERO_ADDRESS, swap_deadline(deadline_minutes), amount_in_units, min_out)
    unwrap = encode_call("unwrapWETH9(uint256,address)", min_out, recipient)
    return {
        "to": SAILFISH_SWAP_ROUTER,
        "data": encode_multicall([swap, unwrap]),
        "value": 0,
        "chainId": EDUCHAIN_CHAIN_ID,
        "description": (
            f"Swap {amount_in} of token {token_in} for EDU on SailFish (min out {min_out}). "
            f"Requires the SwapRouter to be approved for {token_in}."
        ),
    }


async def prepare_swap_tokens_tx(
    rpc: EvmRpcProvider,
    sailfish: SailfishSubgraphProvider,
    token_in: str,
    token_out: str,
    amount_in: str,
    recipient: str,
    slippage_percent: float = DEFAULT_SLIPPAGE_PERCENT,
    deadline_minutes: int = DEFAULT_DEADLINE_MINUTES,
) -> Dict[str, Any]:
    route, amount_in_units, min_out = await _quote_for_swap(
        rpc, sailfish, token_in, token_out, amount_in, slippage_percent
    )
    data = _swap_call(route, recipient, swap_deadline(deadline_minutes), amount_in_units, min_out)
    return {
        "to": SAILFISH_SWAP_ROUTER,
        "data": data,
        "value": 0,
        "chainId": EDUCHAIN_CHAIN_ID,
        "description": (
            f"Swap {amount_in} of token {token_in} for token {token_out} on SailFish (min out {min_out}). "
            f"Requires the SwapRouter to be approved for {token_in}."
        ),
    }
