"""SailFish DEX subgraph client (Uniswap v3 schema)."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional

import httpx

from .base import Provider, ProviderError


POOLS_FOR_PAIR_QUERY = """
query PoolsForPair($tokens: [String!]!) {
  pools(
    where: { token0_in: $tokens, token1_in: $tokens }
    orderBy: totalValueLockedUSD
    orderDirection: desc
    first: 10
  ) {
    id
    feeTier
    liquidity
    token0Price
    token1Price
    totalValueLockedUSD
    token0 { id symbol decimals }
    token1 { id symbol decimals }
  }
}
"""

TOKEN_PRICE_QUERY = """
query TokenPrice($id: ID!) {
  bundle(id: "1") { ethPriceUSD }
  token(id: $id) { id symbol name decimals derivedETH }
}
"""


class SailfishSubgraphProvider(Provider):
    """Price and pool lookups against the SailFish subgraph"""

    name = "sailfish"

    def __init__(self, url: str, timeout_s: float = 15):
        self.url = url
        self.timeout_s = timeout_s

    async def ready(self) -> bool:
        return bool(self.url)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "unavailable", "reason": "Subgraph URL not configured"}
        try:
            await self._query("query Health { bundle(id: \"1\") { ethPriceUSD } }", {})
        except (ProviderError, httpx.HTTPError) as e:
            return {"status": "error", "reason": str(e)}
        return {"status": "healthy"}

    async def _query(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        if not self.url:
            raise ProviderError("SailFish subgraph URL is not configured")

        async with httpx.AsyncClient(timeout=self.timeout_s) as client:
            response = await client.post(self.url, json={"query": query, "variables": variables})
            response.raise_for_status()
            payload = response.json()

        if payload.get("errors"):
            messages = "; ".join(str(err.get("message", err)) for err in payload["errors"])
            raise ProviderError(f"SailFish subgraph error: {messages}")
        return payload.get("data") or {}

    async def get_pools_for_pair(self, token_a: str, token_b: str) -> List[Dict[str, Any]]:
        """Pools holding exactly this pair, deepest first, empty pools dropped"""
        tokens = [token_a.lower(), token_b.lower()]
        if tokens[0] == tokens[1]:
            return []
        data = await self._query(POOLS_FOR_PAIR_QUERY, {"tokens": tokens})
        pools = []
        for pool in data.get("pools") or []:
            pair = {pool["token0"]["id"].lower(), pool["token1"]["id"].lower()}
            if pair != set(tokens):
                continue
            if int(pool.get("liquidity") or 0) <= 0:
                continue
            pools.append(pool)
        return pools

    async def get_token_price_usd(self, token_address: str) -> Optional[Dict[str, Any]]:
        """USD price derived from the token's ETH-denominated price"""
        data = await self._query(TOKEN_PRICE_QUERY, {"id": token_address.lower()})
        token = data.get("token")
        bundle = data.get("bundle")
        if not token or not bundle:
            return None

        price = Decimal(token["derivedETH"]) * Decimal(bundle["ethPriceUSD"])
        return {
            "address": token["id"],
            "symbol": token.get("symbol"),
            "name": token.get("name"),
            "decimals": int(token.get("decimals") or 18),
            "price_usd": price,
        }
