"""Async client for the Arbitrum <-> EDU Chain bridge backend."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel

from ..config import settings
from .base import Provider

logger = logging.getLogger(__name__)

BRIDGE_ACTIONS = ("approve", "deposit", "withdraw")


class BridgeBackendResult(BaseModel):
    """Field-signalled outcome: ``error`` is set instead of raising."""

    data: Any = None
    error: Optional[str] = None


class YuzuBridgeProvider(Provider):
    """Thin wrapper around the bridge backend's prepare endpoints.

    Each endpoint returns an unsigned transaction (sometimes JSON-encoded as a
    string) for the caller's wallet to sign.
    """

    name = "yuzu_bridge"

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        timeout_s: float = 20,
    ) -> None:
        self.base_url = (base_url or settings.bridge_api_base_url).rstrip("/")
        self.timeout_s = timeout_s

    async def ready(self) -> bool:
        return bool(self.base_url)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "unavailable", "reason": "Bridge API URL not configured"}
        return {"status": "configured", "base_url": self.base_url}

    async def _prepare(self, action: str, address: str, amount: str) -> BridgeBackendResult:
        path = f"/{address}/{action}/edu/{amount}"
        try:
            async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout_s) as client:
                response = await client.get(path, headers={"accept": "application/json"})
                response.raise_for_status()
                return BridgeBackendResult(data=response.json())
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(f"Bridge backend {action} failed for {address}: {exc}")
            return BridgeBackendResult(data=None, error=f"Failed to {action} tokens")

    async def approve(self, address: str, amount: str) -> BridgeBackendResult:
        return await self._prepare("approve", address, amount)

    async def deposit(self, address: str, amount: str) -> BridgeBackendResult:
        return await self._prepare("deposit", address, amount)

    async def withdraw(self, address: str, amount: str) -> BridgeBackendResult:
        return await self._prepare("withdraw", address, amount)

    async def run(self, action: str, address: str, amount: str) -> BridgeBackendResult:
        if action not in BRIDGE_ACTIONS:
            return BridgeBackendResult(data=None, error=f"Unsupported bridge action: {action}")
        return await self._prepare(action, address, amount)
