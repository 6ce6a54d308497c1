from types import SimpleNamespace

import pytest
from unittest.mock import AsyncMock, MagicMock

from app.providers.llm.anthropic import AnthropicProvider
from app.providers.llm.base import (
    LLMMessage,
    LLMProviderAuthError,
    ParameterRole,
    ToolCall,
    ToolDefinition,
    ToolParameter,
    ToolParameterType,
    ToolResult,
)


@pytest.fixture
def provider():
    provider = AnthropicProvider(api_key="test-key", model="claude-test")
    provider.client = MagicMock()
    provider.client.messages.create = AsyncMock()
    return provider


def test_missing_key_is_rejected():
    with pytest.raises(LLMProviderAuthError):
        AnthropicProvider(api_key="", model="claude-test")


def test_consecutive_tool_results_share_one_user_turn(provider):
    messages = [
        LLMMessage(role="system", content="You are helpful."),
        LLMMessage(role="user", content="balances?"),
        LLMMessage(
            role="assistant",
            tool_calls=[
                ToolCall(id="a", name="get_edu_balance", arguments={}),
                ToolCall(id="b", name="get_token_balance", arguments={"tokenAddress": "USDC"}),
            ],
        ),
        LLMMessage(role="tool_result", tool_result=ToolResult(tool_call_id="a", result={"balance": "1"})),
        LLMMessage(role="tool_result", tool_result=ToolResult(tool_call_id="b", error="Unknown token")),
    ]

    converted = provider._convert_messages(messages)

    assert [item["role"] for item in converted] == ["user", "assistant", "user"]
    results = converted[2]["content"]
    assert [block["tool_use_id"] for block in results] == ["a", "b"]
    assert results[0]["content"] == '{"balance": "1"}'
    assert results[1]["is_error"] is True


def test_tool_schema_hides_parameter_roles():
    definition = ToolDefinition(
        name="get_token_balance",
        description="ERC-20 balance",
        parameters=[
            ToolParameter(
                name="walletAddress",
                type=ToolParameterType.STRING,
                description="Wallet",
                role=ParameterRole.WALLET,
            ),
            ToolParameter(
                name="tokens",
                type=ToolParameterType.ARRAY,
                description="Tokens",
                required=False,
            ),
        ],
    )

    schema = definition.to_anthropic_format()

    assert schema["input_schema"]["required"] == ["walletAddress"]
    assert schema["input_schema"]["properties"]["tokens"]["items"] == {"type": "string"}
    assert "role" not in schema["input_schema"]["properties"]["walletAddress"]


@pytest.mark.asyncio
async def test_generate_response_collects_text_and_tool_calls(provider):
    provider.client.messages.create.return_value = SimpleNamespace(
        content=[
            SimpleNamespace(type="text", text="Checking."),
            SimpleNamespace(type="tool_use", id="t1", name="get_edu_balance", input={"walletAddress": "0x1"}),
        ],
        usage=SimpleNamespace(output_tokens=12),
        stop_reason="tool_use",
    )

    response = await provider.generate_response(
        [LLMMessage(role="system", content="sys"), LLMMessage(role="user", content="hi")],
        temperature=0.2,
    )

    assert response.content == "Checking."
    assert response.tool_calls == [ToolCall(id="t1", name="get_edu_balance", arguments={"walletAddress": "0x1"})]
    assert response.finish_reason == "tool_use"
    kwargs = provider.client.messages.create.await_args.kwargs
    assert kwargs["system"] == "sys"
    assert kwargs["messages"] == [{"role": "user", "content": "hi"}]
    assert "tools" not in kwargs
