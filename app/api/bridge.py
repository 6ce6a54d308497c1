import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..core.agent.errors import MalformedAmountError
from ..core.agent.resolver import normalize_amount
from ..providers.bridge_api import BRIDGE_ACTIONS, YuzuBridgeProvider
from ..services.address import is_evm_address
from ..types import BridgeRequest, BridgeResponse

router = APIRouter()
logger = logging.getLogger(__name__)

_bridge_provider = None


def get_bridge_provider() -> YuzuBridgeProvider:
    global _bridge_provider
    if _bridge_provider is None:
        _bridge_provider = YuzuBridgeProvider()
    return _bridge_provider


def _bridge_error(error: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=BridgeResponse(error=error).model_dump(exclude_none=True),
    )


@router.post("/api/bridge")
async def bridge_endpoint(
    request: BridgeRequest,
    provider: YuzuBridgeProvider = Depends(get_bridge_provider),
) -> JSONResponse:
    """Prepare an unsigned Arbitrum <-> EDU Chain bridge transaction"""

    action = request.action.strip().lower()
    if action not in BRIDGE_ACTIONS:
        return _bridge_error("Invalid action", 400)
    if not is_evm_address(request.address):
        return _bridge_error("Invalid address", 400)
    try:
        amount = normalize_amount(request.amount, "amount")
    except MalformedAmountError as e:
        return _bridge_error(str(e), 400)

    result = await provider.run(action, request.address.strip(), amount)
    if result.error:
        logger.warning(f"Bridge {action} failed: {result.error}")
        return _bridge_error(result.error, 502)

    return JSONResponse(content=BridgeResponse(data=result.data).model_dump(exclude_none=True))
