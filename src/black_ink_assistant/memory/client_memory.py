"""
Client Memory

Long-term, per-client notes backed by the Mem0 platform API.

The memory service is a best-effort collaborator: when it is not configured
saves are skipped and reads return an empty memory, and service failures are
logged without interrupting the chat that triggered them.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Literal, Optional

import httpx
from pydantic import BaseModel, Field

from ..config import settings
from ..llm.client import LLMClient, LLMError
from ..prompts import INSIGHT_EXTRACTION_PROMPT

logger = logging.getLogger("blackink.memory")

MemoryCategory = Literal["preferences", "history", "notes", "medical"]

MEMORY_QUERY = "client preferences tattoo history medical notes"
MEMORY_SEARCH_LIMIT = 10

CODE_FENCE = re.compile(r"```json\n?|```")


class MemoryServiceError(RuntimeError):
    """Raised when the memory service rejects or fails a request."""


class ClientMemory(BaseModel):
    preferences: List[str] = Field(default_factory=list)
    history: List[str] = Field(default_factory=list)
    notes: List[str] = Field(default_factory=list)
    medical: List[str] = Field(default_factory=list)


def categorize_memory(text: str) -> MemoryCategory:
    """
    Assign a stored snippet to a memory section by keyword sniffing.

    First match wins, in the order preferences, history, medical, notes.
    """
    lowered = text.lower()
    if "style" in lowered or "like" in lowered or "prefer" in lowered:
        return "preferences"
    if "tattoo" in lowered and "ago" in lowered:
        return "history"
    if "allergic" in lowered or "skin" in lowered:
        return "medical"
    return "notes"


def parse_insights(text: str) -> Dict[str, List[str]]:
    """
    Parse the extraction model's answer into category -> insights.

    Markdown code fences are stripped first. Raises ValueError when the
    payload is not a JSON object.
    """
    cleaned = CODE_FENCE.sub("", text or "").strip()
    extracted = json.loads(cleaned or "{}")
    if not isinstance(extracted, dict):
        raise ValueError("Insight payload must be a JSON object.")

    return {
        category: [item for item in items if isinstance(item, str) and item.strip()]
        for category, items in extracted.items()
        if isinstance(items, list)
    }


class MemoryClient:
    """
    Async client for the Mem0 memories API.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if api_key is None:
            api_key = settings.mem0_api_key.get_secret_value()
        self.api_key = api_key
        self.base_url = (base_url or settings.mem0_base_url).rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def add(self, text: str, client_id: str) -> None:
        await self._post(
            "/v1/memories/",
            {
                "messages": [{"role": "user", "content": text}],
                "user_id": client_id,
            },
        )

    async def search(self, query: str, client_id: str, limit: int) -> List[str]:
        data = await self._post(
            "/v1/memories/search/",
            {"query": query, "user_id": client_id, "limit": limit},
        )

        # v1 returns a bare list; newer deployments wrap it in "results"
        records = data.get("results", []) if isinstance(data, dict) else data
        if not isinstance(records, list):
            raise MemoryServiceError("Unexpected memory search response.")

        return [
            str(record["memory"])
            for record in records
            if isinstance(record, dict) and record.get("memory")
        ]

    async def _post(self, path: str, payload: Dict[str, Any]) -> Any:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={"Authorization": f"Token {self.api_key}"},
            ) as client:
                resp = await client.post(path, json=payload)
                resp.raise_for_status()
                return resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise MemoryServiceError(
                f"Memory request to {path} failed: {type(exc).__name__}"
            ) from exc


class ClientMemoryService:
    """
    Save, retrieve and auto-extract long-term client insights.
    """

    def __init__(
        self,
        memory_client: MemoryClient,
        llm: LLMClient,
        extraction_model: Optional[str] = None,
    ) -> None:
        self.memory_client = memory_client
        self.llm = llm
        self.extraction_model = extraction_model or settings.classifier_model

    async def save_client_memory(
        self,
        client_id: str,
        insight: str,
        category: MemoryCategory,
    ) -> None:
        if not self.memory_client.enabled:
            logger.warning("Memory service not configured, skipping save")
            return

        try:
            await self.memory_client.add(insight, client_id)
        except MemoryServiceError as exc:
            logger.error("Error saving %s insight: %s", category, exc)

    async def retrieve_client_memory(self, client_id: str) -> ClientMemory:
        memory = ClientMemory()
        if not self.memory_client.enabled:
            return memory

        try:
            snippets = await self.memory_client.search(
                MEMORY_QUERY, client_id, MEMORY_SEARCH_LIMIT
            )
        except MemoryServiceError as exc:
            logger.error("Error retrieving client memory: %s", exc)
            return memory

        for snippet in snippets:
            getattr(memory, categorize_memory(snippet)).append(snippet)
        return memory

    async def extract_and_save_insights(
        self,
        client_id: str,
        last_user_message: str,
    ) -> int:
        """
        Extract insights from a client message and store each one.

        Returns
        -------
        int
            Number of insights handed to the memory service. Malformed model
            output saves nothing.
        """
        if not last_user_message or not last_user_message.strip():
            return 0

        prompt = INSIGHT_EXTRACTION_PROMPT.format(message=last_user_message)
        try:
            text = await self.llm.complete(
                [{"role": "user", "content": prompt}],
                model=self.extraction_model,
            )
        except LLMError as exc:
            logger.error("Insight extraction call failed: %s", exc)
            return 0

        try:
            extracted = parse_insights(text)
        except ValueError as exc:
            logger.error("Error parsing insights JSON (%s)", type(exc).__name__)
            return 0

        saved = 0
        for category, items in extracted.items():
            for item in items:
                await self.save_client_memory(client_id, item, category)
                saved += 1
        return saved
