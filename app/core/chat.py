"""
Chat entry point for the HTTP layer.

Builds the process-wide Agent (LLM provider, chain clients, tool registry and
agent profiles) once and runs chat requests through it.
"""

import logging
from typing import Dict, Optional

from ..config import settings
from ..providers.llm import canonical_provider_name, get_llm_provider
from ..tools.clients import build_chain_clients
from ..types import ChatRequest, ChatResponse
from .agent import Agent, AgentProfileManager, ArgumentResolver, ToolExecutor, ToolRegistry

# Cache of agents keyed by provider/model so the HTTP layer reuses collaborators
_agent_cache: Dict[str, Agent] = {}
_logger = logging.getLogger(__name__)


def _agent_cache_key(provider_name: Optional[str], model: Optional[str]) -> str:
    provider = canonical_provider_name(provider_name or settings.llm_provider)
    model_value = (model or settings.llm_model or "").strip()
    return f"{provider}:{model_value}"


def _create_agent(provider_name: Optional[str] = None, model: Optional[str] = None) -> Agent:
    llm_provider = get_llm_provider(provider_name=provider_name, model=model)

    registry = ToolRegistry(clients=build_chain_clients(settings), logger=_logger)
    profiles = AgentProfileManager(registry=registry, profiles_dir=settings.profiles_dir)
    executor = ToolExecutor(
        registry,
        resolver=ArgumentResolver(),
        timeout_s=settings.tool_timeout_seconds,
        default_chain_id=settings.default_chain_id,
    )

    agent = Agent(
        llm_provider=llm_provider,
        registry=registry,
        profiles=profiles,
        executor=executor,
        max_iterations=settings.max_tool_iterations,
        oracle_timeout_s=settings.oracle_timeout_seconds,
        logger=_logger,
    )

    _logger.info(
        "Agent system initialized for provider=%s model=%s with profiles=%s",
        canonical_provider_name(provider_name or settings.llm_provider),
        llm_provider.model,
        ", ".join(profiles.list_profiles()),
    )
    return agent


class AgentUnavailableError(RuntimeError):
    """The agent could not be built (missing API key, bad profile files)"""


def get_agent(provider_name: Optional[str] = None, model: Optional[str] = None) -> Agent:
    key = _agent_cache_key(provider_name, model)
    agent = _agent_cache.get(key)
    if agent is None:
        try:
            agent = _create_agent(provider_name, model)
        except ValueError as exc:
            _logger.error(f"Agent initialization failed: {exc}")
            raise AgentUnavailableError(str(exc)) from exc
        _agent_cache[key] = agent
    return agent


def reset_agent_cache() -> None:
    _agent_cache.clear()


async def run_chat(request: ChatRequest, agent: Optional[Agent] = None) -> ChatResponse:
    """Process a chat request with the cached Agent; oracle errors propagate."""
    agent = agent or get_agent()
    return await agent.process_message(request)
