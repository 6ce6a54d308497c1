from typing import Any, Dict, List

import httpx

from .base import Provider, ProviderError


class EvmRpcProvider(Provider):
    """JSON-RPC client for a single EVM chain"""

    def __init__(self, name: str, chain_id: int, rpc_url: str, timeout_s: float = 15):
        self.name = name
        self.chain_id = chain_id
        self.rpc_url = rpc_url
        self.timeout_s = timeout_s
        self._request_id = 0

    async def ready(self) -> bool:
        return bool(self.rpc_url)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "unavailable", "reason": "RPC URL not configured"}

        try:
            remote_chain_id = int(await self._call("eth_chainId", []), 16)
        except (ProviderError, httpx.HTTPError) as e:
            return {"status": "error", "reason": str(e)}
        if remote_chain_id != self.chain_id:
            return {
                "status": "error",
                "reason": f"RPC reports chain {remote_chain_id}, expected {self.chain_id}",
            }
        return {"status": "healthy", "chain_id": remote_chain_id}

    async def _call(self, method: str, params: List[Any]) -> Any:
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": self._request_id,
        }

        async with httpx.AsyncClient() as client:
            response = await client.post(
                self.rpc_url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout_s,
            )
            response.raise_for_status()
            data = response.json()

        if "error" in data:
            error = data["error"]
            message = error.get("message") if isinstance(error, dict) else error
            raise ProviderError(f"{self.name} RPC error in {method}: {message}")

        return data.get("result")

    async def get_balance(self, address: str, block: str = "latest") -> int:
        """Native balance in wei"""
        result = await self._call("eth_getBalance", [address, block])
        return int(result, 16)

    async def call(self, to: str, data: str, block: str = "latest") -> str:
        """Read-only contract call, returns the raw hex result"""
        result = await self._call("eth_call", [{"to": to, "data": data}, block])
        if not isinstance(result, str):
            raise ProviderError(f"{self.name} RPC returned no data for eth_call to {to}")
        return result

