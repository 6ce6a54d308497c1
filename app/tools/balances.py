"""Wallet balance and price lookups on EDU Chain."""

import asyncio
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

import httpx

from ..providers.base import ProviderError
from ..providers.rpc import EvmRpcProvider
from ..providers.sailfish import SailfishSubgraphProvider
from ..services.abi import from_base_units
from ..services.address import checksum
from ..services.chains import EDUCHAIN_CHAIN_ID, WEDU_ADDRESS
from ..services.erc20 import (
    erc20_balance_of,
    erc20_metadata,
    erc20_name,
    erc20_symbol,
    erc721_balance_of,
    erc721_token_of_owner_by_index,
    erc1155_balance_of,
    erc1155_uri,
)

logger = logging.getLogger(__name__)


async def get_edu_balance(rpc: EvmRpcProvider, wallet_address: str) -> Dict[str, Any]:
    """Native EDU balance of a wallet"""
    balance = await rpc.get_balance(wallet_address)
    return {
        "address": checksum(wallet_address),
        "symbol": "EDU",
        "decimals": 18,
        "balance": balance,
        "formattedBalance": from_base_units(balance, 18),
        "chainId": EDUCHAIN_CHAIN_ID,
    }


async def _price_or_none(sailfish: SailfishSubgraphProvider, token_address: str) -> Optional[Decimal]:
    if not await sailfish.ready():
        return None
    try:
        price = await sailfish.get_token_price_usd(token_address)
    except (ProviderError, httpx.HTTPError) as e:
        logger.warning(f"Price lookup failed for {token_address}: {e}")
        return None
    return price["price_usd"] if price else None


async def get_token_balance(
    rpc: EvmRpcProvider,
    sailfish: SailfishSubgraphProvider,
    token_address: str,
    wallet_address: str,
) -> Dict[str, Any]:
    """ERC-20 balance with token metadata and, when priced, a USD value"""
    metadata, balance = await asyncio.gather(
        erc20_metadata(rpc, token_address),
        erc20_balance_of(rpc, token_address, wallet_address),
    )
    formatted = from_base_units(balance, metadata["decimals"])
    price = await _price_or_none(sailfish, token_address)

    result: Dict[str, Any] = {
        "tokenAddress": checksum(token_address),
        "walletAddress": checksum(wallet_address),
        "symbol": metadata["symbol"],
        "name": metadata["name"],
        "decimals": metadata["decimals"],
        "balance": balance,
        "formattedBalance": formatted,
    }
    if price is not None:
        result["priceUsd"] = price
        result["usdValue"] = (Decimal(formatted) * price).quantize(Decimal("0.01"))
    return result


async def get_multiple_token_balances(
    rpc: EvmRpcProvider,
    sailfish: SailfishSubgraphProvider,
    token_addresses: List[str],
    wallet_address: str,
) -> List[Dict[str, Any]]:
    """Balances for several tokens; a failing token is reported, not fatal"""
    results = await asyncio.gather(
        *(get_token_balance(rpc, sailfish, token, wallet_address) for token in token_addresses),
        return_exceptions=True,
    )

    balances: List[Dict[str, Any]] = []
    for token, result in zip(token_addresses, results):
        if isinstance(result, Exception):
            balances.append({"tokenAddress": token, "error": str(result)})
        else:
            balances.append(result)
    return balances


async def get_wallet_overview(
    rpc: EvmRpcProvider,
    sailfish: SailfishSubgraphProvider,
    wallet_address: str,
    token_addresses: List[str],
) -> Dict[str, Any]:
    """Native balance plus token balances with an aggregate USD value"""
    edu, tokens = await asyncio.gather(
        get_edu_balance(rpc, wallet_address),
        get_multiple_token_balances(rpc, sailfish, token_addresses, wallet_address),
    )

    total = Decimal("0")
    priced = False
    edu_price = await _price_or_none(sailfish, WEDU_ADDRESS)
    if edu_price is not None:
        edu["priceUsd"] = edu_price
        edu["usdValue"] = (Decimal(edu["formattedBalance"]) * edu_price).quantize(Decimal("0.01"))
        total += edu["usdValue"]
        priced = True
    for token in tokens:
        if "usdValue" in token:
            total += token["usdValue"]
            priced = True

    return {
        "address": checksum(wallet_address),
        "chainId": EDUCHAIN_CHAIN_ID,
        "edu": edu,
        "tokens": tokens,
        "totalUsdValue": total if priced else None,
    }


async def get_token_price(sailfish: SailfishSubgraphProvider, token_address: str) -> Dict[str, Any]:
    """Spot USD price of a SailFish-listed token"""
    price = await sailfish.get_token_price_usd(token_address)
    if not price:
        raise ProviderError(f"No SailFish price data for token {token_address}")
    return {
        "tokenAddress": checksum(token_address),
        "symbol": price["symbol"],
        "name": price["name"],
        "priceUsd": price["price_usd"],
        "source": "sailfish",
    }


async def get_erc721_balance(
    rpc: EvmRpcProvider,
    nft_address: str,
    wallet_address: str,
    fetch_token_ids: bool = True,
) -> Dict[str, Any]:
    """Number of NFTs a wallet owns in an ERC-721 collection, with their ids.

    Token ids come from ``tokenOfOwnerByIndex``; collections that are not
    enumerable simply report no ids.
    """
    balance, name, symbol = await asyncio.gather(
        erc721_balance_of(rpc, nft_address, wallet_address),
        erc20_name(rpc, nft_address),
        erc20_symbol(rpc, nft_address),
    )

    result: Dict[str, Any] = {
        "contractAddress": checksum(nft_address),
        "walletAddress": checksum(wallet_address),
        "name": name,
        "symbol": symbol,
        "balance": balance,
        "chainId": EDUCHAIN_CHAIN_ID,
    }
    if fetch_token_ids and balance > 0:
        token_ids = []
        for index in range(balance):
            try:
                token_id = await erc721_token_of_owner_by_index(rpc, nft_address, wallet_address, index)
            except (ProviderError, httpx.HTTPError, ValueError) as e:
                logger.warning(f"tokenOfOwnerByIndex({index}) failed for {nft_address}: {e}")
                continue
            token_ids.append(str(token_id))
        result["tokenIds"] = token_ids
    return result


async def get_erc1155_balance(
    rpc: EvmRpcProvider,
    nft_address: str,
    wallet_address: str,
    token_id: int,
) -> Dict[str, Any]:
    """Balance of one ERC-1155 token id, with its metadata URI when the contract serves one"""
    balance = await erc1155_balance_of(rpc, nft_address, wallet_address, token_id)
    result: Dict[str, Any] = {
        "contractAddress": checksum(nft_address),
        "walletAddress": checksum(wallet_address),
        "tokenId": str(token_id),
        "balance": balance,
        "chainId": EDUCHAIN_CHAIN_ID,
    }
    try:
        result["uri"] = await erc1155_uri(rpc, nft_address, token_id)
    except (ProviderError, httpx.HTTPError, ValueError) as e:
        logger.warning(f"uri({token_id}) failed for {nft_address}: {e}")
    return result
