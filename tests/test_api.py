"""HTTP surface tests with the agent and bridge backend swapped out."""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, MagicMock

from app.api.bridge import get_bridge_provider
from app.api.chat import get_chat_agent
from app.main import app
from app.providers.bridge_api import BridgeBackendResult
from app.providers.llm.base import LLMProviderAPIError
from app.types import ChatResponse, TransactionDescriptor

CALLER = "0x1111111111111111111111111111111111111111"
ROUTER = "0x1a1e967e523435CeF20642e3D7811F7d0da9a704"


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def chat_agent():
    agent = MagicMock()
    agent.process_message = AsyncMock()
    app.dependency_overrides[get_chat_agent] = lambda: agent
    return agent


@pytest.fixture
def bridge_provider():
    provider = MagicMock()
    provider.run = AsyncMock()
    app.dependency_overrides[get_bridge_provider] = lambda: provider
    return provider


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["name"] == "Lilikoi Agent API"


def test_request_id_is_echoed(client):
    response = client.get("/", headers={"X-Request-ID": "req-123"})
    assert response.headers["x-request-id"] == "req-123"

    generated = client.get("/").headers["x-request-id"]
    assert len(generated) == 32


class TestChatEndpoint:

    def test_success_uses_camel_case_wire_format(self, client, chat_agent):
        chat_agent.process_message.return_value = ChatResponse(
            content="I've prepared a transaction.",
            transaction_data=TransactionDescriptor(to=ROUTER, data="0xd0e30db0", value=10**17, chain_id=41923),
            action="wrap_edu",
            target_chain_id=41923,
            tool_input={"amount": "0.1"},
            tool_call_sequence=["wrap_edu"],
        )

        response = client.post(
            "/api/chat",
            json={"agentId": "dex", "userMessage": "wrap 0.1 EDU", "address": CALLER},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["transactionData"] == {
            "to": ROUTER,
            "data": "0xd0e30db0",
            "value": "100000000000000000",
            "chainId": 41923,
        }
        assert body["targetChainId"] == 41923
        assert body["toolCallSequence"] == ["wrap_edu"]
        assert body["toolInput"] == {"amount": "0.1"}

        request = chat_agent.process_message.await_args.args[0]
        assert request.agent_id == "dex"
        assert request.address == CALLER

    def test_text_only_reply_omits_optional_fields(self, client, chat_agent):
        chat_agent.process_message.return_value = ChatResponse(content="Hello!")

        response = client.post("/api/chat", json={"agentId": "utility", "userMessage": "hi"})

        assert response.json() == {"content": "Hello!"}

    def test_llm_failure_is_500(self, client, chat_agent):
        chat_agent.process_message.side_effect = LLMProviderAPIError("overloaded")

        response = client.post("/api/chat", json={"agentId": "utility", "userMessage": "hi"})

        assert response.status_code == 500
        body = response.json()
        assert body["content"].startswith("Sorry")
        assert "overloaded" in body["error"]

    def test_unexpected_failure_is_500(self, client, chat_agent):
        chat_agent.process_message.side_effect = RuntimeError("boom")

        response = client.post("/api/chat", json={"agentId": "utility", "userMessage": "hi"})

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to process request"

    @pytest.mark.parametrize("payload", [{"agentId": "utility", "userMessage": "   "}, {"agentId": "utility"}])
    def test_invalid_request_is_422(self, client, chat_agent, payload):
        response = client.post("/api/chat", json=payload)

        assert response.status_code == 422
        body = response.json()
        assert set(body) == {"content", "error"}
        assert "userMessage" in body["error"]
        chat_agent.process_message.assert_not_awaited()


class TestBridgeEndpoint:

    def test_success_returns_data(self, client, bridge_provider):
        bridge_provider.run.return_value = BridgeBackendResult(data={"to": ROUTER, "data": "0x"})

        response = client.post("/api/bridge", json={"action": "Deposit", "address": CALLER, "amount": "5"})

        assert response.status_code == 200
        assert response.json() == {"data": {"to": ROUTER, "data": "0x"}}
        bridge_provider.run.assert_awaited_once_with("deposit", CALLER, "5")

    def test_invalid_action(self, client, bridge_provider):
        response = client.post("/api/bridge", json={"action": "stake", "address": CALLER, "amount": "5"})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid action"}
        bridge_provider.run.assert_not_awaited()

    def test_invalid_address(self, client, bridge_provider):
        response = client.post("/api/bridge", json={"action": "approve", "address": "0x123", "amount": "5"})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid address"}

    def test_invalid_amount(self, client, bridge_provider):
        response = client.post("/api/bridge", json={"action": "approve", "address": CALLER, "amount": "-2"})

        assert response.status_code == 400
        bridge_provider.run.assert_not_awaited()

    def test_backend_failure_is_502(self, client, bridge_provider):
        bridge_provider.run.return_value = BridgeBackendResult(error="Failed to withdraw tokens")

        response = client.post("/api/bridge", json={"action": "withdraw", "address": CALLER, "amount": "1"})

        assert response.status_code == 502
        assert response.json() == {"error": "Failed to withdraw tokens"}
