"""Tests for the Twelve Data HTTP client using httpx.MockTransport."""

import httpx
import pytest

from app.adapters.market_data.twelve_data import TwelveDataClient
from app.core.errors import UpstreamAppError


def _client(handler) -> TwelveDataClient:
    return TwelveDataClient(
        api_key="secret-key",
        base_url="https://api.twelvedata.test",
        transport=httpx.MockTransport(handler),
    )


def test_fetch_quotes_sends_symbols_and_api_key() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"SPY": {"symbol": "SPY"}, "DIA": {"symbol": "DIA"}})

    payload = _client(handler).fetch_quotes(["SPY", "DIA"])

    assert payload == {"SPY": {"symbol": "SPY"}, "DIA": {"symbol": "DIA"}}
    assert seen[0].url.path == "/quote"
    assert seen[0].url.params["symbol"] == "SPY,DIA"
    assert seen[0].url.params["apikey"] == "secret-key"


def test_single_symbol_quote_is_keyed_by_symbol() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"symbol": "SPY", "close": "512.3"})

    payload = _client(handler).fetch_quotes(["SPY"])

    assert payload == {"SPY": {"symbol": "SPY", "close": "512.3"}}


def test_fetch_time_series_params() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"meta": {"symbol": "QQQ"}, "values": [], "status": "ok"})

    payload = _client(handler).fetch_time_series("QQQ", interval="1day", outputsize=30)

    assert payload["meta"]["symbol"] == "QQQ"
    params = seen[0].url.params
    assert seen[0].url.path == "/time_series"
    assert params["symbol"] == "QQQ"
    assert params["interval"] == "1day"
    assert params["outputsize"] == "30"


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"message": "oops"}),
        httpx.Response(429, json={"message": "too many"}),
        httpx.Response(200, json={"status": "error", "code": 401, "message": "bad key"}),
        httpx.Response(200, content=b"<html>not json</html>"),
        httpx.Response(200, json=[1, 2, 3]),
    ],
)
def test_failures_raise_upstream_error(response: httpx.Response) -> None:
    client = _client(lambda request: response)

    with pytest.raises(UpstreamAppError) as exc_info:
        client.fetch_quotes(["SPY", "DIA"])

    assert exc_info.value.code == "upstream_failure"


def test_error_payload_message_is_kept() -> None:
    client = _client(
        lambda request: httpx.Response(200, json={"status": "error", "code": 400, "message": "symbol not found"})
    )

    with pytest.raises(UpstreamAppError) as exc_info:
        client.fetch_time_series("NOPE")

    assert exc_info.value.message == "symbol not found"


def test_transport_error_raises_upstream_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(UpstreamAppError) as exc_info:
        _client(handler).fetch_quotes(["SPY", "DIA"])

    assert exc_info.value.details["cause"] == "ConnectTimeout"


@pytest.mark.parametrize(
    "body",
    [
        {"SPY": {"symbol": "SPY"}, "DIA": {"code": 404, "status": "error", "message": "not found"}},
        {"SPY": {"symbol": "SPY"}},
        {"SPY": {"symbol": "SPY"}, "DIA": None},
    ],
)
def test_batch_with_failed_symbol_raises(body: dict) -> None:
    client = _client(lambda request: httpx.Response(200, json=body))

    with pytest.raises(UpstreamAppError) as exc_info:
        client.fetch_quotes(["SPY", "DIA"])

    assert "DIA" in exc_info.value.message
    assert exc_info.value.details["cause"] == "partial_response"
