from typing import Any, Dict

from fastapi import APIRouter

from ..config import settings
from ..tools.clients import build_chain_clients

router = APIRouter()


@router.get("/healthz")
async def health_check() -> Dict[str, Any]:
    """Health check endpoint that verifies provider status"""

    clients = build_chain_clients(settings)
    providers = {
        "educhain_rpc": clients.educhain,
        "arbitrum_rpc": clients.arbitrum,
        "bsc_rpc": clients.bsc,
        "sailfish": clients.sailfish,
        "bridge": clients.bridge,
        "prices": clients.prices,
    }

    provider_status = {}
    for name, provider in providers.items():
        provider_status[name] = await provider.health_check()

    # RPC endpoints are required; the rest only degrade individual tools
    rpc_healthy = all(
        provider_status[name]["status"] == "healthy"
        for name in ("educhain_rpc", "arbitrum_rpc")
    )

    return {
        "status": "healthy" if rpc_healthy and settings.has_llm_key else "degraded",
        "llm_configured": settings.has_llm_key,
        "providers": provider_status,
    }
