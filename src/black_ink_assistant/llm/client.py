import json
import logging
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx

from ..config import settings

logger = logging.getLogger("blackink.llm")


class LLMError(RuntimeError):
    """Raised when a generation call fails."""


class LLMClient:
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if api_key is None:
            api_key = settings.openai_api_key.get_secret_value()
        self.api_key = api_key
        self.url = f"{(base_url or settings.openai_base_url).rstrip('/')}/chat/completions"
        self.timeout = timeout or settings.http_timeout_seconds
        self._transport = transport

    def _payload(
        self,
        messages: List[Dict[str, str]],
        model: str,
        temperature: float,
        max_tokens: Optional[int],
        stream: bool,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "stream": stream,
        }
        if max_tokens:
            payload["max_tokens"] = max_tokens
        return payload

    def _client(self) -> httpx.AsyncClient:
        if not self.api_key:
            raise LLMError("OpenAI API key is not configured.")
        return httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
            headers={"Authorization": f"Bearer {self.api_key}"},
        )

    async def complete(
        self,
        messages: List[Dict[str, str]],
        model: str = "gpt-4o-mini",
        temperature: float = 0.2,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Returns the assistant text of a single, non-streamed completion.
        """
        payload = self._payload(messages, model, temperature, max_tokens, stream=False)

        try:
            async with self._client() as client:
                resp = await client.post(self.url, json=payload)
                resp.raise_for_status()
                data = resp.json()
            return data["choices"][0]["message"].get("content") or ""
        except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as exc:
            logger.error("Completion failed (%s): model=%s", type(exc).__name__, model)
            raise LLMError(f"Completion failed: {type(exc).__name__}") from exc

    async def stream(
        self,
        messages: List[Dict[str, str]],
        model: str = "gpt-4o-mini",
        temperature: float = 0.2,
        max_tokens: Optional[int] = None,
    ) -> AsyncIterator[str]:
        """
        Yields content deltas of a streamed completion.

        The provider sends server-sent events, one JSON chunk per
        ``data:`` line, terminated by ``data: [DONE]``.
        """
        payload = self._payload(messages, model, temperature, max_tokens, stream=True)

        try:
            async with self._client() as client:
                async with client.stream("POST", self.url, json=payload) as resp:
                    resp.raise_for_status()
                    async for line in resp.aiter_lines():
                        if not line.startswith("data:"):
                            continue
                        data = line[len("data:"):].strip()
                        if data == "[DONE]":
                            break

                        choices = json.loads(data).get("choices") or []
                        if not choices:
                            continue
                        content = (choices[0].get("delta") or {}).get("content")
                        if content:
                            yield content
        except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as exc:
            logger.error("Streaming failed (%s): model=%s", type(exc).__name__, model)
            raise LLMError(f"Streaming failed: {type(exc).__name__}") from exc
