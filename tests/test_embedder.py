import json

import httpx
import pytest

from black_ink_assistant.core.errors import ConfigurationError
from black_ink_assistant.embeddings.embedder import Embedder


def _embedder(transport, api_key="test-key"):
    return Embedder(
        api_key=api_key,
        model="text-embedding-3-small",
        dimension=4,
        base_url="https://api.openai.test/v1",
        transport=transport.transport,
    )


@pytest.mark.asyncio
async def test_blank_text_returns_zero_vector_without_calling_provider(recording_transport):
    transport = recording_transport(lambda request: httpx.Response(200, json={}))
    embedder = _embedder(transport)

    assert await embedder.embed("   ") == [0.0] * 4
    assert await embedder.embed("") == [0.0] * 4
    assert transport.requests == []


@pytest.mark.asyncio
async def test_embed_returns_provider_vector(recording_transport):
    transport = recording_transport(
        lambda request: httpx.Response(200, json={"data": [{"embedding": [0.1, 0.2, 0.3, 1]}]})
    )
    embedder = _embedder(transport)

    vector = await embedder.embed("¿Cuánto cuesta un tatuaje?")

    assert vector == [0.1, 0.2, 0.3, 1.0]
    request = transport.requests[0]
    assert request.url == "https://api.openai.test/v1/embeddings"
    assert request.headers["Authorization"] == "Bearer test-key"
    assert json.loads(request.content) == {
        "model": "text-embedding-3-small",
        "input": "¿Cuánto cuesta un tatuaje?",
    }


@pytest.mark.asyncio
async def test_provider_error_degrades_to_zero_vector(recording_transport):
    transport = recording_transport(lambda request: httpx.Response(500, json={"error": "boom"}))
    embedder = _embedder(transport)

    assert await embedder.embed("hola") == [0.0] * 4
    assert len(transport.requests) == 1


@pytest.mark.asyncio
async def test_network_error_degrades_to_zero_vector(recording_transport):
    def fail(request):
        raise httpx.ConnectError("connection refused", request=request)

    embedder = _embedder(recording_transport(fail))

    assert await embedder.embed("hola") == [0.0] * 4


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"data": "nope"},
        {"data": []},
        {"data": [{"embedding": ["a", "b"]}]},
        {"unexpected": True},
    ],
)
async def test_malformed_response_degrades_to_zero_vector(recording_transport, body):
    embedder = _embedder(recording_transport(lambda request: httpx.Response(200, json=body)))

    assert await embedder.embed("hola") == [0.0] * 4


@pytest.mark.asyncio
async def test_missing_api_key_is_fatal(recording_transport):
    transport = recording_transport(lambda request: httpx.Response(200, json={}))
    embedder = _embedder(transport, api_key="")

    with pytest.raises(ConfigurationError) as excinfo:
        await embedder.embed("hola")

    assert excinfo.value.stage == "embed"
    assert transport.requests == []
