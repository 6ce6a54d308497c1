"""Read-only ERC-20, ERC-721 and ERC-1155 calls over JSON-RPC."""

from __future__ import annotations

import asyncio
from typing import Any, Dict

from ..providers.rpc import EvmRpcProvider
from .abi import decode_string, decode_uint, encode_call, selector
from .chains import EDUCHAIN_CHAIN_ID
from .tokens import known_decimals


async def erc20_decimals(rpc: EvmRpcProvider, token: str) -> int:
    cached = known_decimals(token) if rpc.chain_id == EDUCHAIN_CHAIN_ID else None
    if cached is not None:
        return cached
    return decode_uint(await rpc.call(token, selector("decimals()")))


async def erc20_symbol(rpc: EvmRpcProvider, token: str) -> str:
    return decode_string(await rpc.call(token, selector("symbol()")))


async def erc20_name(rpc: EvmRpcProvider, token: str) -> str:
    return decode_string(await rpc.call(token, selector("name()")))


async def erc20_balance_of(rpc: EvmRpcProvider, token: str, owner: str) -> int:
    return decode_uint(await rpc.call(token, encode_call("balanceOf(address)", owner)))


async def erc20_allowance(rpc: EvmRpcProvider, token: str, owner: str, spender: str) -> int:
    data = encode_call("allowance(address,address)", owner, spender)
    return decode_uint(await rpc.call(token, data))


async def erc20_metadata(rpc: EvmRpcProvider, token: str) -> Dict[str, Any]:
    decimals, symbol, name = await asyncio.gather(
        erc20_decimals(rpc, token),
        erc20_symbol(rpc, token),
        erc20_name(rpc, token),
    )
    return {"address": token, "decimals": decimals, "symbol": symbol, "name": name}


# ERC-721 shares balanceOf(address), name() and symbol() with ERC-20
erc721_balance_of = erc20_balance_of


async def erc721_token_of_owner_by_index(rpc: EvmRpcProvider, nft: str, owner: str, index: int) -> int:
    data = encode_call("tokenOfOwnerByIndex(address,uint256)", owner, index)
    return decode_uint(await rpc.call(nft, data))


async def erc1155_balance_of(rpc: EvmRpcProvider, nft: str, owner: str, token_id: int) -> int:
    data = encode_call("balanceOf(address,uint256)", owner, token_id)
    return decode_uint(await rpc.call(nft, data))


async def erc1155_uri(rpc: EvmRpcProvider, nft: str, token_id: int) -> str:
    return decode_string(await rpc.call(nft, encode_call("uri(uint256)", token_id)))
