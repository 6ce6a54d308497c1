"""Shared fixtures: a scripted LLM, stubbed tool handlers and the real profiles."""

from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.config import BASE_DIR
from app.core.agent import (
    Agent,
    AgentProfileManager,
    ArgumentResolver,
    ToolExecutor,
    ToolRegistry,
)
from app.providers.llm.base import LLMProvider, LLMResponse, ToolCall
from app.tools.clients import ChainClients

CALLER = "0x1111111111111111111111111111111111111111"
RECIPIENT = "0x2222222222222222222222222222222222222222"
USDC = "0x836d275563bAb5E93Fd6Ca62a95dB7065Da94342"


class ScriptedLLMProvider(LLMProvider):
    """Replays canned responses; the last one repeats once the script runs out."""

    supports_tools = True

    def __init__(self, responses: List[Any]):
        self.responses = list(responses)
        self.calls: List[Dict[str, Any]] = []
        super().__init__(api_key="test-key", model="test-model")

    def _setup_client(self, **kwargs) -> None:
        pass

    async def generate_response(self, messages, max_tokens=None, temperature=None, tools=None, **kwargs):
        self.calls.append({"messages": list(messages), "tools": tools})
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, BaseException):
            raise item
        return item

    async def health_check(self) -> Dict[str, Any]:
        return {"status": "healthy"}


def tool_call(name: str, call_id: Optional[str] = None, **arguments) -> LLMResponse:
    return LLMResponse(
        content=None,
        tool_calls=[ToolCall(id=call_id or f"call_{name}", name=name, arguments=arguments)],
        finish_reason="tool_use",
    )


def text(content: str) -> LLMResponse:
    return LLMResponse(content=content, finish_reason="end_turn")


def stub_handler(registry: ToolRegistry, name: str, **mock_kwargs) -> AsyncMock:
    """Swap a registered tool's handler for an AsyncMock and return it."""
    handler = AsyncMock(**mock_kwargs)
    registry.get_tool(name).handler = handler
    return handler


@pytest.fixture
def clients():
    return ChainClients(
        educhain=MagicMock(name="educhain"),
        arbitrum=MagicMock(name="arbitrum"),
        bsc=MagicMock(name="bsc"),
        sailfish=MagicMock(name="sailfish"),
        bridge=MagicMock(name="bridge"),
        prices=MagicMock(name="prices"),
    )


@pytest.fixture
def registry(clients):
    return ToolRegistry(clients=clients)


@pytest.fixture
def profiles(registry):
    return AgentProfileManager(registry=registry, profiles_dir=BASE_DIR / "profiles", default_profile="utility")


@pytest.fixture
def resolver():
    return ArgumentResolver()


@pytest.fixture
def executor(registry, resolver):
    return ToolExecutor(registry, resolver=resolver, timeout_s=1, default_chain_id=41923)


@pytest.fixture
def make_agent(registry, profiles, executor):
    def _make(responses: List[Any], **kwargs) -> Agent:
        provider = ScriptedLLMProvider(responses)
        return Agent(
            llm_provider=provider,
            registry=registry,
            profiles=profiles,
            executor=executor,
            **{"max_iterations": 5, "oracle_timeout_s": 5, **kwargs},
        )

    return _make
