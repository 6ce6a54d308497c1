"""
Core Agent System

This module contains the Agent class that runs one chat request through the
tool orchestration loop: pick the agent profile, seed the conversation, let
the LLM call tools until it answers in text (or the iteration cap is hit),
and assemble the chat response.
"""

import asyncio
import logging
from typing import List, Optional

from ...config import settings
from ...providers.llm.base import (
    LLMMessage,
    LLMProvider,
    LLMProviderTimeoutError,
    LLMResponse,
    ToolDefinition,
)
from ...types.requests import ChatMessage, ChatRequest
from ...types.responses import ChatResponse
from .assembler import ResponseAssembler
from .graph import AgentLoopState, LoopPhase, build_tool_loop_graph, recursion_limit_for
from .profiles import AgentProfile, AgentProfileManager
from .tools import ToolExecutor, ToolRegistry


class Agent:
    """
    Orchestrates LLM interactions with the tool registry for a single agent
    service. Holds only read-only collaborators; every request owns its own
    conversation state.
    """

    def __init__(
        self,
        llm_provider: LLMProvider,
        registry: ToolRegistry,
        profiles: Optional[AgentProfileManager] = None,
        executor: Optional[ToolExecutor] = None,
        assembler: Optional[ResponseAssembler] = None,
        max_iterations: Optional[int] = None,
        oracle_timeout_s: Optional[float] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.llm_provider = llm_provider
        self.registry = registry
        self.logger = logger or logging.getLogger(__name__)
        self.profiles = profiles or AgentProfileManager(registry=registry)
        self.executor = executor or ToolExecutor(registry)
        self.assembler = assembler or ResponseAssembler()
        self.max_iterations = max_iterations or settings.max_tool_iterations
        self.oracle_timeout_s = oracle_timeout_s or settings.oracle_timeout_seconds
        self.max_tokens = max_tokens or settings.max_tokens
        self.temperature = settings.temperature if temperature is None else temperature

        # LangGraph loop orchestrating oracle calls and tool execution
        self._loop_graph = build_tool_loop_graph(self)

    async def process_message(self, request: ChatRequest) -> ChatResponse:
        """
        Process a chat message through the tool loop.

        Oracle failures (transport, auth, timeout) propagate as
        ``LLMProviderError``; tool failures never do.
        """
        profile = self.profiles.get_profile(request.agent_id)
        self.logger.info(
            f"Processing chat request for agent {profile.name} "
            f"(wallet={'yes' if request.address else 'no'}, history={len(request.history)})"
        )

        state: AgentLoopState = {
            'profile': profile,
            'caller_address': request.address or None,
            'tools': self.registry.get_definitions(profile.tools),
            'messages': self._build_messages(request, profile),
            'phase': LoopPhase.AWAITING_ORACLE,
            'iterations': 0,
            'tool_call_sequence': [],
            'hit_cap': False,
        }
        result_state = await self._loop_graph.ainvoke(
            state,
            config={'recursion_limit': recursion_limit_for(self.max_iterations)},
        )
        response = result_state.get('response')
        if response is None:
            raise RuntimeError('Tool loop finished without a response')

        self.logger.info(
            f"Chat request for agent {profile.name} finished after {result_state.get('iterations', 0)} "
            f"oracle call(s); tools={response.tool_call_sequence or []}"
        )
        return response

    def _build_messages(self, request: ChatRequest, profile: AgentProfile) -> List[LLMMessage]:
        messages = [LLMMessage(role="system", content=profile.prompt)]
        messages.extend(self._history_messages(request.history))
        messages.append(LLMMessage(role="user", content=self._seed_message(request)))
        return messages

    @staticmethod
    def _history_messages(history: List[ChatMessage]) -> List[LLMMessage]:
        """Earlier user/assistant turns; the conversation must open with the user."""
        messages: List[LLMMessage] = []
        for turn in history:
            role = (turn.role or "").lower()
            content = (turn.content or "").strip()
            if role not in ("user", "assistant") or not content:
                continue
            if not messages and role == "assistant":
                continue
            messages.append(LLMMessage(role=role, content=content))
        return messages

    @staticmethod
    def _seed_message(request: ChatRequest) -> str:
        if request.address:
            text = (
                f"User's wallet address is {request.address}. "
                f"Help them with their request: {request.user_message}"
            )
        else:
            text = (
                "The user has not connected a wallet. "
                f"Help them with their request: {request.user_message}"
            )
        if request.force_action:
            text += f"\n\nThe user asked to run the {request.force_action} action next."
        return text

    async def _call_oracle(
        self,
        messages: List[LLMMessage],
        tools: List[ToolDefinition],
        iteration: int = 1,
    ) -> LLMResponse:
        """One oracle round-trip, bounded by the oracle timeout."""
        self.logger.info(f"Oracle call {iteration}/{self.max_iterations} with {len(messages)} messages")
        try:
            response = await asyncio.wait_for(
                self.llm_provider.generate_response(
                    messages=messages,
                    max_tokens=self.max_tokens,
                    temperature=self.temperature,
                    tools=tools or None,
                ),
                timeout=self.oracle_timeout_s,
            )
        except asyncio.TimeoutError as e:
            raise LLMProviderTimeoutError(
                f"LLM did not respond within {self.oracle_timeout_s:g} seconds"
            ) from e

        requested = [call.name for call in response.tool_calls or []]
        self.logger.info(
            f"Oracle call {iteration} finished ({response.finish_reason or 'unknown'}); "
            f"tool calls: {requested or 'none'}"
        )
        return response
