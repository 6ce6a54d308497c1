"""
Tests for the tool orchestration loop

Drives Agent.process_message with a scripted LLM and stubbed tool handlers.
"""

import asyncio

import pytest

from app.providers.llm.base import LLMProviderAPIError, LLMProviderTimeoutError, LLMResponse, ToolCall
from app.services.chains import SAILFISH_SWAP_ROUTER, WEDU_ADDRESS
from app.types import ChatRequest
from app.types.requests import ChatMessage

from tests.conftest import CALLER, RECIPIENT, USDC, stub_handler, text, tool_call

SWAP_TX = {
    "to": SAILFISH_SWAP_ROUTER,
    "data": "0x04e45aaf" + "00" * 32,
    "value": 10**17,
    "chainId": 41923,
    "description": "Swap 0.1 EDU for USDC",
}


def chat(message, agent_id="utility", address=CALLER, **kwargs):
    return ChatRequest(agentId=agent_id, userMessage=message, address=address, **kwargs)


def tool_results(messages):
    return [m.tool_result for m in messages if m.role == "tool_result"]


class TestTermination:

    @pytest.mark.asyncio
    async def test_text_only_answer_finishes_in_one_call(self, make_agent):
        agent = make_agent([text("You have 3 EDU.")])

        response = await agent.process_message(chat("how much EDU do I have?"))

        assert len(agent.llm_provider.calls) == 1
        assert response.to_wire() == {"content": "You have 3 EDU."}

    @pytest.mark.asyncio
    async def test_swap_scenario_end_to_end(self, make_agent, registry):
        quote = stub_handler(registry, "get_swap_quote", return_value={"amountOut": "2.41", "amountOutRaw": 2410000})
        swap = stub_handler(registry, "swap_edu_for_tokens", return_value=SWAP_TX)
        agent = make_agent([
            tool_call("get_swap_quote", tokenIn="EDU", tokenOut="USDC", amountIn="0.1"),
            tool_call("swap_edu_for_tokens", tokenOut="USDC", amountIn="0.1"),
            text("Your swap of 0.1 EDU for about 2.41 USDC is ready to sign."),
        ])

        response = await agent.process_message(chat("swap 0.1 EDU for USDC", agent_id="dex"))

        assert len(agent.llm_provider.calls) == 3
        assert response.action == "swap_edu_for_tokens"
        assert response.tool_call_sequence == ["get_swap_quote", "swap_edu_for_tokens"]
        assert response.transaction_data is not None
        assert response.transaction_data.to == SAILFISH_SWAP_ROUTER
        assert response.target_chain_id == 41923
        assert response.tool_input == {"tokenOut": USDC, "amountIn": "0.1", "recipient": CALLER}
        assert response.content.startswith("Your swap")

        assert quote.call_args.args[0].token_in == WEDU_ADDRESS
        assert swap.call_args.args[0].recipient == CALLER

        wire = response.to_wire()
        assert wire["transactionData"]["value"] == "100000000000000000"
        assert wire["targetChainId"] == 41923
        assert wire["toolCallSequence"] == ["get_swap_quote", "swap_edu_for_tokens"]

    @pytest.mark.asyncio
    async def test_iteration_cap_produces_fallback_content(self, make_agent, registry):
        stub_handler(registry, "get_edu_balance", return_value={"balance": "3"})
        agent = make_agent([tool_call("get_edu_balance")], max_iterations=5)

        response = await agent.process_message(chat("balance please"))

        assert len(agent.llm_provider.calls) == 5
        assert response.content
        assert "limit of 5 steps" in response.content
        assert '"balance": "3"' in response.content
        assert response.tool_call_sequence == ["get_edu_balance"] * 5
        assert response.transaction_data is None

    @pytest.mark.asyncio
    async def test_empty_final_text_falls_back_to_tool_summary(self, make_agent, registry):
        stub_handler(registry, "send_edu", return_value={"to": RECIPIENT, "data": "0x", "description": "Send 1 EDU"})
        agent = make_agent([tool_call("send_edu", recipient=RECIPIENT, amount="1"), text("   ")])

        response = await agent.process_message(chat("send 1 EDU", agent_id="transaction"))

        assert "Send 1 EDU" in response.content
        assert response.transaction_data is not None


class TestPendingTransaction:

    @pytest.mark.asyncio
    async def test_later_info_tool_clears_earlier_transaction(self, make_agent, registry):
        stub_handler(registry, "send_edu", return_value={"to": RECIPIENT, "data": "0x", "value": "1"})
        stub_handler(registry, "get_edu_balance", return_value={"balance": "2"})
        agent = make_agent([
            tool_call("send_edu", recipient=RECIPIENT, amount="1"),
            tool_call("get_edu_balance"),
            text("Done."),
        ])

        response = await agent.process_message(chat("send 1 EDU then check", agent_id="transaction"))

        assert len(agent.llm_provider.calls) == 3
        assert response.action == "get_edu_balance"
        assert response.transaction_data is None
        assert "transactionData" not in response.to_wire()

    @pytest.mark.asyncio
    async def test_failed_action_leaves_no_transaction(self, make_agent, registry):
        stub_handler(registry, "send_edu", side_effect=RuntimeError("rpc down"))
        agent = make_agent([tool_call("send_edu", recipient=RECIPIENT, amount="1"), text("That failed.")])

        response = await agent.process_message(chat("send 1 EDU", agent_id="transaction"))

        assert response.action == "send_edu"
        assert response.transaction_data is None

    @pytest.mark.asyncio
    async def test_multiple_calls_in_one_turn_run_in_order(self, make_agent, registry):
        stub_handler(registry, "get_edu_balance", return_value={"balance": "2"})
        stub_handler(registry, "send_edu", return_value={"to": RECIPIENT, "data": "0x"})
        both = LLMResponse(
            content="Checking, then sending.",
            tool_calls=[
                ToolCall(id="a", name="get_edu_balance", arguments={}),
                ToolCall(id="b", name="send_edu", arguments={"recipient": RECIPIENT, "amount": "1"}),
            ],
        )
        agent = make_agent([both, text("Ready.")])

        response = await agent.process_message(chat("send 1 EDU", agent_id="transaction"))

        assert response.tool_call_sequence == ["get_edu_balance", "send_edu"]
        assert response.transaction_data is not None

        second_call = agent.llm_provider.calls[1]["messages"]
        assistant = [m for m in second_call if m.role == "assistant"][-1]
        assert assistant.content == "Checking, then sending."
        assert [r.tool_call_id for r in tool_results(second_call)] == ["a", "b"]


class TestErrorContainment:

    @pytest.mark.asyncio
    async def test_tool_error_is_fed_back_to_the_oracle(self, make_agent, registry):
        stub_handler(registry, "get_token_balance", return_value={})
        agent = make_agent([tool_call("get_token_balance"), text("Which token?")])

        response = await agent.process_message(chat("what's my balance of it?"))

        assert len(agent.llm_provider.calls) == 2
        results = tool_results(agent.llm_provider.calls[1]["messages"])
        assert len(results) == 1
        assert results[0].is_error
        assert "tokenAddress" in results[0].error
        assert response.content == "Which token?"

    @pytest.mark.asyncio
    async def test_oracle_failure_propagates(self, make_agent):
        agent = make_agent([LLMProviderAPIError("connection reset")])

        with pytest.raises(LLMProviderAPIError):
            await agent.process_message(chat("hi"))

    @pytest.mark.asyncio
    async def test_oracle_failure_after_tool_call_propagates(self, make_agent, registry):
        stub_handler(registry, "get_edu_balance", return_value={"balance": "1"})
        agent = make_agent([tool_call("get_edu_balance"), LLMProviderAPIError("overloaded")])

        with pytest.raises(LLMProviderAPIError):
            await agent.process_message(chat("hi"))

    @pytest.mark.asyncio
    async def test_slow_oracle_times_out(self, make_agent):
        agent = make_agent([text("late")], oracle_timeout_s=0.05)

        async def slow(*args, **kwargs):
            await asyncio.sleep(5)

        agent.llm_provider.generate_response = slow

        with pytest.raises(LLMProviderTimeoutError):
            await agent.process_message(chat("hi"))


class TestConversationSetup:

    @pytest.mark.asyncio
    async def test_unknown_agent_falls_back_to_default_profile(self, make_agent, profiles):
        agent = make_agent([text("hello")])

        await agent.process_message(chat("hi", agent_id="astrologer"))

        sent = agent.llm_provider.calls[0]
        utility = profiles.get_profile("utility")
        assert sent["messages"][0].role == "system"
        assert sent["messages"][0].content == utility.prompt
        assert [tool.name for tool in sent["tools"]] == utility.tools

    @pytest.mark.asyncio
    async def test_seed_turn_carries_wallet_and_message(self, make_agent):
        agent = make_agent([text("ok")])

        await agent.process_message(chat("check my balance"))

        seed = agent.llm_provider.calls[0]["messages"][-1]
        assert seed.role == "user"
        assert seed.content == f"User's wallet address is {CALLER}. Help them with their request: check my balance"

    @pytest.mark.asyncio
    async def test_force_action_hint_is_appended(self, make_agent):
        agent = make_agent([text("ok")])

        await agent.process_message(chat("bridge 5 EDU", agent_id="bridging", forceAction="bridge_deposit"))

        seed = agent.llm_provider.calls[0]["messages"][-1]
        assert "bridge_deposit" in seed.content

    @pytest.mark.asyncio
    async def test_history_keeps_user_and_assistant_turns(self, make_agent):
        agent = make_agent([text("ok")])
        history = [
            ChatMessage(role="assistant", content="Welcome!"),
            ChatMessage(role="user", content="hi"),
            ChatMessage(role="assistant", content="Hello, how can I help?"),
            ChatMessage(role="system", content="ignored"),
            ChatMessage(role="user", content=""),
        ]

        await agent.process_message(chat("what's my balance?", history=history))

        roles = [m.role for m in agent.llm_provider.calls[0]["messages"]]
        assert roles == ["system", "user", "assistant", "user"]

    @pytest.mark.asyncio
    async def test_requests_do_not_share_state(self, make_agent, registry):
        stub_handler(registry, "send_edu", return_value={"to": RECIPIENT, "data": "0x"})
        agent = make_agent([
            tool_call("send_edu", recipient=RECIPIENT, amount="1"),
            text("Ready."),
            text("Hi again."),
        ])

        first = await agent.process_message(chat("send 1 EDU", agent_id="transaction"))
        second = await agent.process_message(chat("hello", agent_id="transaction"))

        assert first.transaction_data is not None
        assert second.to_wire() == {"content": "Hi again."}


class TestTargetChain:

    @pytest.mark.asyncio
    async def test_refused_call_resets_chain_to_profile_default(self, make_agent, registry):
        stub_handler(registry, "check_bsc_edu_balance", return_value={"sufficient": True, "chainId": 56})
        agent = make_agent([
            tool_call("check_bsc_edu_balance", amount="5"),
            tool_call("swap_tokens", tokenIn="USDC", tokenOut="EDU", amountIn="1"),
            text("I can't swap from here."),
        ])

        response = await agent.process_message(chat("check then swap", agent_id="bridging"))

        assert response.tool_call_sequence == ["check_bsc_edu_balance", "swap_tokens"]
        assert response.target_chain_id == 42161

    @pytest.mark.asyncio
    async def test_pinned_tool_sets_chain(self, make_agent, registry):
        stub_handler(registry, "check_bsc_edu_balance", return_value={"sufficient": True, "chainId": 56})
        agent = make_agent([tool_call("check_bsc_edu_balance", amount="5"), text("You have enough EDU on BSC.")])

        response = await agent.process_message(chat("do I have 5 EDU on BSC?", agent_id="bridging"))

        assert response.target_chain_id == 56
