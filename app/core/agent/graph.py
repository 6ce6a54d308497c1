"""LangGraph-powered tool orchestration loop.

The loop alternates between asking the oracle for its next move and running
the tool calls it requested:

    call_oracle ──(tool calls)──> handle_tool_calls ──(under cap)──> call_oracle
         │                              │
         └──(text only)──> assemble_response <──(cap reached)──┘
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, TypedDict

from langgraph.graph import END, StateGraph

from ...providers.llm.base import LLMMessage

if TYPE_CHECKING:  # pragma: no cover
    from .base import Agent
    from .profiles import AgentProfile
    from .tools import ToolExecution
    from ...providers.llm.base import LLMResponse, ToolDefinition
    from ...types.responses import ChatResponse
    from ...types.transactions import TransactionDescriptor
else:  # pragma: no cover - runtime fallbacks for type hints
    Agent = Any  # type: ignore
    AgentProfile = Any  # type: ignore
    ToolExecution = Any  # type: ignore
    LLMResponse = Any  # type: ignore
    ToolDefinition = Any  # type: ignore
    ChatResponse = Any  # type: ignore
    TransactionDescriptor = Any  # type: ignore


class LoopPhase(str, Enum):
    AWAITING_ORACLE = "awaiting_oracle"
    HANDLING_TOOL_CALL = "handling_tool_call"
    DONE = "done"


class AgentLoopState(TypedDict, total=False):
    """State passed between LangGraph nodes; owned by a single request."""

    profile: "AgentProfile"
    caller_address: Optional[str]
    tools: List["ToolDefinition"]
    messages: List[LLMMessage]
    phase: LoopPhase
    iterations: int
    llm_response: Optional["LLMResponse"]
    final_text: Optional[str]
    tool_call_sequence: List[str]
    last_execution: Optional["ToolExecution"]
    pending_transaction: Optional["TransactionDescriptor"]
    target_chain_id: Optional[int]
    hit_cap: bool
    response: Optional["ChatResponse"]


def build_tool_loop_graph(agent: "Agent"):
    """Compile the LangGraph loop that powers ``Agent.process_message``."""

    graph: StateGraph[AgentLoopState] = StateGraph(AgentLoopState)

    async def call_oracle(state: AgentLoopState) -> AgentLoopState:
        iterations = state.get('iterations', 0) + 1
        response = await agent._call_oracle(  # pylint: disable=protected-access
            state['messages'],
            state.get('tools', []),
            iteration=iterations,
        )
        if response.tool_calls:
            return {
                'llm_response': response,
                'iterations': iterations,
                'phase': LoopPhase.HANDLING_TOOL_CALL,
            }
        return {
            'llm_response': response,
            'iterations': iterations,
            'final_text': response.content,
            'phase': LoopPhase.DONE,
        }

    async def handle_tool_calls(state: AgentLoopState) -> AgentLoopState:
        response = state['llm_response']
        messages = list(state['messages'])
        messages.append(
            LLMMessage(role="assistant", content=response.content, tool_calls=response.tool_calls)
        )

        sequence = list(state.get('tool_call_sequence', []))
        last_execution = state.get('last_execution')
        pending_transaction = state.get('pending_transaction')
        target_chain_id = state.get('target_chain_id')

        for tool_call in response.tool_calls or []:
            sequence.append(tool_call.name)
            execution = await agent.executor.execute(
                tool_call,
                state['profile'],
                state.get('caller_address'),
            )
            messages.append(LLMMessage(role="tool_result", tool_result=execution.result))

            last_execution = execution
            # Only a successful action tool leaves a transaction behind
            pending_transaction = execution.transaction
            # Refused calls carry no chain of their own; fall back to the profile's
            target_chain_id = (
                execution.target_chain_id
                or state['profile'].default_chain_id
                or agent.executor.default_chain_id
            )

        update: AgentLoopState = {
            'messages': messages,
            'tool_call_sequence': sequence,
            'last_execution': last_execution,
            'pending_transaction': pending_transaction,
            'target_chain_id': target_chain_id,
            'phase': LoopPhase.AWAITING_ORACLE,
        }
        if state.get('iterations', 0) >= agent.max_iterations:
            agent.logger.warning(
                f"Tool loop hit the iteration cap ({agent.max_iterations}) for agent {state['profile'].name}"
            )
            update['phase'] = LoopPhase.DONE
            update['hit_cap'] = True
        return update

    async def assemble_response(state: AgentLoopState) -> AgentLoopState:
        response = agent.assembler.assemble(
            final_text=state.get('final_text'),
            last_execution=state.get('last_execution'),
            transaction=state.get('pending_transaction'),
            target_chain_id=state.get('target_chain_id'),
            tool_call_sequence=state.get('tool_call_sequence', []),
            hit_cap=state.get('hit_cap', False),
            iterations=state.get('iterations', 0),
        )
        return {'response': response, 'phase': LoopPhase.DONE}

    graph.add_node('call_oracle', call_oracle)
    graph.add_node('handle_tool_calls', handle_tool_calls)
    graph.add_node('assemble_response', assemble_response)

    graph.set_entry_point('call_oracle')

    def _after_oracle(state: AgentLoopState) -> str:
        return 'tools' if state.get('phase') == LoopPhase.HANDLING_TOOL_CALL else 'done'

    def _after_tools(state: AgentLoopState) -> str:
        return 'done' if state.get('phase') == LoopPhase.DONE else 'oracle'

    graph.add_conditional_edges(
        'call_oracle',
        _after_oracle,
        {
            'tools': 'handle_tool_calls',
            'done': 'assemble_response',
        },
    )
    graph.add_conditional_edges(
        'handle_tool_calls',
        _after_tools,
        {
            'oracle': 'call_oracle',
            'done': 'assemble_response',
        },
    )
    graph.add_edge('assemble_response', END)

    return graph.compile()


def recursion_limit_for(max_iterations: int) -> int:
    """LangGraph step budget: two nodes per round-trip plus assembly."""
    return max_iterations * 2 + 4
