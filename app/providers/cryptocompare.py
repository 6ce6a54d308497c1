"""CryptoCompare spot prices for assets SailFish does not list (BNB)."""

from decimal import Decimal
from typing import Any, Dict

import httpx

from .base import Provider, ProviderError


class CryptoCompareProvider(Provider):
    """USD prices from the public ``pricemultifull`` endpoint"""

    name = "cryptocompare"

    def __init__(self, url: str, timeout_s: float = 10):
        self.url = url
        self.timeout_s = timeout_s

    async def ready(self) -> bool:
        return bool(self.url)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "unavailable", "reason": "Price URL not configured"}
        try:
            await self.get_price_usd("BNB")
        except (ProviderError, httpx.HTTPError) as e:
            return {"status": "error", "reason": str(e)}
        return {"status": "healthy"}

    async def get_price_usd(self, symbol: str) -> Decimal:
        symbol = symbol.upper()
        async with httpx.AsyncClient(timeout=self.timeout_s) as client:
            response = await client.get(self.url, params={"fsyms": symbol, "tsyms": "USD"})
            response.raise_for_status()
            payload = response.json()

        try:
            price = payload["RAW"][symbol]["USD"]["PRICE"]
        except (KeyError, TypeError) as e:
            raise ProviderError(f"CryptoCompare returned no USD price for {symbol}") from e
        return Decimal(str(price))
