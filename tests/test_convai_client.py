from __future__ import annotations

import httpx
import pytest

from infra.convai_client import ConvaiClient, ConvaiError


def _client(handler) -> ConvaiClient:
    return ConvaiClient(
        "https://convai.test/v1/convai/", "secret-key", transport=httpx.MockTransport(handler)
    )


@pytest.mark.asyncio
async def test_requests_carry_api_key_and_hit_expected_paths():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"conversations": []})

    client = _client(handler)
    await client.list_conversations()
    await client.get_conversation("conv-42")

    assert [r.url.path for r in seen] == [
        "/v1/convai/conversations",
        "/v1/convai/conversations/conv-42",
    ]
    assert all(r.headers["xi-api-key"] == "secret-key" for r in seen)
    await client.aclose()


@pytest.mark.asyncio
async def test_error_response_keeps_status_and_body():
    client = _client(lambda request: httpx.Response(429, text="rate limited"))

    with pytest.raises(ConvaiError) as exc_info:
        await client.list_conversations()

    assert exc_info.value.status_code == 429
    assert exc_info.value.message == "rate limited"


@pytest.mark.asyncio
async def test_invalid_json_is_an_error():
    client = _client(lambda request: httpx.Response(200, text="<html>oops</html>"))

    with pytest.raises(ConvaiError):
        await client.list_conversations()


@pytest.mark.asyncio
async def test_non_object_payload_is_an_error():
    client = _client(lambda request: httpx.Response(200, json=["not", "an", "object"]))

    with pytest.raises(ConvaiError):
        await client.get_conversation("conv-42")


@pytest.mark.asyncio
async def test_transport_failure_has_no_status():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ConvaiError) as exc_info:
        await _client(handler).list_conversations()
    assert exc_info.value.status_code is None
