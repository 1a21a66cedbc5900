"""
Agent Router

Classifies the intent of an incoming chat message, selects the matching
agent configuration and runs that agent: hybrid retrieval with the agent's
filters, system prompt assembly, and streamed generation.

Responsibilities
----------------
- Intent classification (unknown labels fall back to the product agent)
- System prompt construction from agent prompt, client context and sources
- Streaming generation with a completion callback fired once the full
  answer has been produced
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Sequence

from .config import AGENT_CONFIGS, DEFAULT_ROLE, AgentConfig, AgentRole
from ..config import settings
from ..embeddings.models import RetrievalResult
from ..llm.client import LLMClient, LLMError
from ..prompts import AGENT_SYSTEM_PROMPT, INTENT_CLASSIFICATION_PROMPT, NEW_CLIENT_CONTEXT
from ..rag.pipeline import RetrievalPipeline

logger = logging.getLogger("blackink.agents")

CompletionCallback = Callable[[str], Awaitable[None]]


# ---------------------------------------------------------------------
# Message helpers
# ---------------------------------------------------------------------

def _text_parts(parts: Sequence[Any]) -> str:
    return " ".join(
        str(p.get("text", ""))
        for p in parts
        if isinstance(p, dict) and p.get("type") == "text"
    )


def extract_text(message: Dict[str, Any]) -> str:
    """
    Plain text of a chat message.

    Accepts string content, a ``parts`` list, or a list of typed content
    parts; only ``text`` parts are kept.
    """
    content = message.get("content")
    if isinstance(content, str):
        return content
    if isinstance(message.get("parts"), list):
        return _text_parts(message["parts"])
    if isinstance(content, list):
        return _text_parts(content)
    return ""


# ---------------------------------------------------------------------
# Prompt construction
# ---------------------------------------------------------------------

def format_knowledge(results: Sequence[RetrievalResult]) -> str:
    return "\n\n".join(f"### [Fuente: {r.source}]\n{r.content}" for r in results)


def build_system_prompt(
    config: AgentConfig,
    retrieved: Sequence[RetrievalResult],
    client_context: Optional[Dict[str, Any]] = None,
) -> str:
    context = (
        json.dumps(client_context, indent=2, ensure_ascii=False, default=str)
        if client_context
        else NEW_CLIENT_CONTEXT
    )
    return AGENT_SYSTEM_PROMPT.format(
        agent_prompt=config.system_prompt,
        client_context=context,
        knowledge=format_knowledge(retrieved),
    )


# ---------------------------------------------------------------------
# Router
# ---------------------------------------------------------------------

@dataclass
class AgentRun:
    """A started agent execution: its role, sources and answer stream."""
    role: AgentRole
    sources: List[RetrievalResult]
    stream: AsyncIterator[str]


class AgentRouter:
    def __init__(
        self,
        llm: LLMClient,
        pipeline: RetrievalPipeline,
        classifier_model: Optional[str] = None,
    ) -> None:
        self.llm = llm
        self.pipeline = pipeline
        self.classifier_model = classifier_model or settings.classifier_model

    async def detect_intent(self, user_message: str) -> AgentRole:
        """
        Classify a message into an agent role.

        "general", unknown labels and classifier failures all map to the
        product agent.
        """
        prompt = INTENT_CLASSIFICATION_PROMPT.format(message=user_message)
        try:
            text = await self.llm.complete(
                [{"role": "user", "content": prompt}],
                model=self.classifier_model,
                temperature=0.3,
            )
        except LLMError as exc:
            logger.warning("Intent classification failed, using default agent: %s", exc)
            return DEFAULT_ROLE

        category = (text or "general").lower().strip()
        try:
            return AgentRole(category)
        except ValueError:
            return DEFAULT_ROLE

    async def execute_agent(
        self,
        role: AgentRole,
        messages: List[Dict[str, Any]],
        user_id: str,
        client_context: Optional[Dict[str, Any]] = None,
        on_complete: Optional[CompletionCallback] = None,
    ) -> AgentRun:
        """
        Retrieve context for the last message and start the answer stream.

        Retrieval happens before this coroutine returns, so retrieval
        failures surface to the caller instead of inside the stream.
        """
        config = AGENT_CONFIGS[role]
        logger.info("Executing agent '%s' for user '%s'", role.value, user_id)

        last_message = extract_text(messages[-1]) if messages else ""
        retrieved = await self.pipeline.search(
            last_message,
            config.retriever_settings.top_k,
            config.retriever_settings.filters,
        )

        llm_messages = [
            {"role": "system", "content": build_system_prompt(config, retrieved, client_context)}
        ] + [
            {"role": m.get("role", "user"), "content": extract_text(m)}
            for m in messages
        ]

        return AgentRun(
            role=role,
            sources=retrieved,
            stream=self._generate(config, llm_messages, on_complete),
        )

    async def _generate(
        self,
        config: AgentConfig,
        llm_messages: List[Dict[str, str]],
        on_complete: Optional[CompletionCallback],
    ) -> AsyncIterator[str]:
        pieces: List[str] = []
        async for delta in self.llm.stream(
            llm_messages,
            model=config.model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
        ):
            pieces.append(delta)
            yield delta

        text = "".join(pieces)
        logger.info("Agent '%s' generated response (%d chars)", config.role.value, len(text))

        if on_complete is not None:
            await on_complete(text)
