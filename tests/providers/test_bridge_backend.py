import json

import httpx
import pytest

from app.providers.bridge_api import YuzuBridgeProvider

BASE_URL = "https://bridge.test/bridge/arbMainnet/eduMainnet"
CALLER = "0x1111111111111111111111111111111111111111"


@pytest.fixture
def backend(monkeypatch):
    """Route the provider's httpx client through a MockTransport."""
    requests = []
    replies = {}
    real_client = httpx.AsyncClient

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        reply = replies.get("next")
        if isinstance(reply, Exception):
            raise reply
        return reply

    def client_factory(**kwargs):
        return real_client(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", client_factory)
    return requests, replies


@pytest.mark.asyncio
async def test_deposit_returns_backend_payload(backend):
    requests, replies = backend
    replies["next"] = httpx.Response(200, json={"to": CALLER, "data": "0x"})

    result = await YuzuBridgeProvider(base_url=BASE_URL).deposit(CALLER, "5")

    assert result.error is None
    assert result.data == {"to": CALLER, "data": "0x"}
    assert requests[0].url.path == f"/bridge/arbMainnet/eduMainnet/{CALLER}/deposit/edu/5"


@pytest.mark.asyncio
async def test_json_string_payload_is_passed_through(backend):
    _, replies = backend
    replies["next"] = httpx.Response(200, json=json.dumps({"to": CALLER, "data": "0x", "chainId": "0xa4b1"}))

    result = await YuzuBridgeProvider(base_url=BASE_URL).approve(CALLER, "1")

    assert isinstance(result.data, str)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "reply",
    [
        httpx.Response(500, text="internal error"),
        httpx.Response(200, text="not json"),
        httpx.ConnectError("connection refused"),
    ],
)
async def test_failures_are_reported_in_error_field(backend, reply):
    _, replies = backend
    replies["next"] = reply

    result = await YuzuBridgeProvider(base_url=BASE_URL).withdraw(CALLER, "1")

    assert result.data is None
    assert result.error == "Failed to withdraw tokens"


@pytest.mark.asyncio
async def test_unknown_action_never_calls_backend(backend):
    requests, _ = backend

    result = await YuzuBridgeProvider(base_url=BASE_URL).run("stake", CALLER, "1")

    assert result.error == "Unsupported bridge action: stake"
    assert requests == []
