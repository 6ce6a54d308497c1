import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..core.agent import Agent
from ..core.chat import get_agent, run_chat
from ..providers.llm.base import LLMProviderError
from ..types import ChatRequest, ErrorResponse

router = APIRouter()
logger = logging.getLogger(__name__)

APOLOGY = "Sorry, I encountered an error while processing your request. Please try again."


def error_response(error: str, status_code: int = 500, content: str = APOLOGY) -> JSONResponse:
    """``{content, error}`` body used for every failed chat request"""
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(content=content, error=error).model_dump(),
    )


def get_chat_agent() -> Agent:
    return get_agent()


@router.post("/api/chat")
async def chat_endpoint(request: ChatRequest, agent: Agent = Depends(get_chat_agent)) -> JSONResponse:
    """Run one chat turn through the agent's tool loop"""

    try:
        response = await run_chat(request, agent)
    except LLMProviderError as e:
        logger.error(f"Chat request failed calling the LLM: {e}")
        return error_response(f"Failed to process request: {e}")
    except Exception as e:
        logger.exception(f"Chat processing failed: {e}")
        return error_response("Failed to process request")

    return JSONResponse(content=response.to_wire())
