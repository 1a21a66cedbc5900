import json

import httpx
import pytest

from black_ink_assistant.llm.client import LLMClient, LLMError


def _client(transport, api_key="sk-test"):
    return LLMClient(api_key=api_key, base_url="https://api.openai.test/v1", transport=transport.transport)


def _sse(*events):
    return "".join(f"data: {e}\n\n" for e in events)


@pytest.mark.asyncio
async def test_complete_returns_message_content(recording_transport):
    transport = recording_transport(
        lambda request: httpx.Response(200, json={"choices": [{"message": {"content": "booking"}}]})
    )

    text = await _client(transport).complete(
        [{"role": "user", "content": "Quiero una cita"}], model="gpt-4o-mini", temperature=0.3
    )

    assert text == "booking"
    body = json.loads(transport.requests[0].content)
    assert body["stream"] is False
    assert body["temperature"] == 0.3
    assert "max_tokens" not in body


@pytest.mark.asyncio
async def test_complete_failure_raises_llm_error(recording_transport):
    transport = recording_transport(lambda request: httpx.Response(429, json={"error": "rate"}))

    with pytest.raises(LLMError):
        await _client(transport).complete([{"role": "user", "content": "hola"}])


@pytest.mark.asyncio
async def test_missing_key_raises_llm_error(recording_transport):
    transport = recording_transport(lambda request: httpx.Response(200, json={}))

    with pytest.raises(LLMError):
        await _client(transport, api_key="").complete([{"role": "user", "content": "hola"}])
    assert transport.requests == []


@pytest.mark.asyncio
async def test_stream_yields_content_deltas(recording_transport):
    body = _sse(
        json.dumps({"choices": [{"delta": {"role": "assistant"}}]}),
        json.dumps({"choices": [{"delta": {"content": "Hola"}}]}),
        json.dumps({"choices": []}),
        json.dumps({"choices": [{"delta": {"content": " mundo"}}]}),
        "[DONE]",
        json.dumps({"choices": [{"delta": {"content": "ignored"}}]}),
    )
    transport = recording_transport(
        lambda request: httpx.Response(200, text=body, headers={"Content-Type": "text/event-stream"})
    )

    pieces = [
        p async for p in _client(transport).stream(
            [{"role": "user", "content": "hola"}], max_tokens=100
        )
    ]

    assert pieces == ["Hola", " mundo"]
    sent = json.loads(transport.requests[0].content)
    assert sent["stream"] is True
    assert sent["max_tokens"] == 100


@pytest.mark.asyncio
async def test_stream_failure_raises_llm_error(recording_transport):
    transport = recording_transport(lambda request: httpx.Response(500, text="boom"))

    with pytest.raises(LLMError):
        async for _ in _client(transport).stream([{"role": "user", "content": "hola"}]):
            pass
