from decimal import Decimal

import httpx
import pytest

from app.providers.base import ProviderError
from app.providers.cryptocompare import CryptoCompareProvider

PRICE_URL = "https://prices.test/data/pricemultifull"


@pytest.fixture
def replies(monkeypatch):
    """Serve queued responses through a MockTransport and record the requests."""
    state = {"requests": [], "next": None}
    real_client = httpx.AsyncClient

    def handler(request: httpx.Request) -> httpx.Response:
        state["requests"].append(request)
        return state["next"]

    def client_factory(**kwargs):
        return real_client(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", client_factory)
    return state


@pytest.mark.asyncio
async def test_bnb_price(replies):
    replies["next"] = httpx.Response(200, json={"RAW": {"BNB": {"USD": {"PRICE": 612.37}}}})

    price = await CryptoCompareProvider(PRICE_URL).get_price_usd("bnb")

    assert price == Decimal("612.37")
    request = replies["requests"][0]
    assert request.url.params["fsyms"] == "BNB"
    assert request.url.params["tsyms"] == "USD"


@pytest.mark.asyncio
async def test_missing_price_is_a_provider_error(replies):
    replies["next"] = httpx.Response(200, json={"Response": "Error", "Message": "rate limit"})

    with pytest.raises(ProviderError, match="BNB"):
        await CryptoCompareProvider(PRICE_URL).get_price_usd("BNB")


@pytest.mark.asyncio
async def test_health_reports_http_failures(replies):
    replies["next"] = httpx.Response(503)

    status = await CryptoCompareProvider(PRICE_URL).health_check()

    assert status["status"] == "error"


@pytest.mark.asyncio
async def test_unconfigured_is_unavailable():
    status = await CryptoCompareProvider("").health_check()

    assert status["status"] == "unavailable"
