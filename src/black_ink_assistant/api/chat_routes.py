"""
Chat Routes: Multi-Agent Conversational Interface

This module implements the conversational endpoint used by the studio's chat
widget.

Major Responsibilities
----------------------
1. Accept ChatRequest containing the conversation and an optional user id.
2. Classify the intent of the last message and select an agent.
3. Retrieve the client's long-term memory.
4. Run the agent: hybrid retrieval + streamed generation.
5. Stream the answer as plain text with the chosen agent in X-Agent-Role.
6. Extract and save client insights once the answer is complete.

Time Budget
-----------
Steps 2-4 run under settings.chat_timeout_seconds (timeouts become a 504).
The stream itself is cut off once the same budget is exhausted.
"""

import asyncio
import logging
from typing import Annotated, Any, AsyncIterator, Dict, List

from fastapi import APIRouter, Depends, status
from fastapi.responses import StreamingResponse

from .models import ChatRequest
from .dependencies import get_agent_router, get_memory_service
from ..agents.router import AgentRouter, AgentRun, extract_text
from ..config import settings
from ..llm.client import LLMError
from ..memory.client_memory import ClientMemoryService

logger = logging.getLogger("blackink.chat")

router = APIRouter(prefix="/chat", tags=["chat"])

ANONYMOUS_VISITOR = "anonymous_visitor"

_END = object()


# ---------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------

async def _start_agent(
    messages: List[Dict[str, Any]],
    visitor_id: str,
    agents: AgentRouter,
    memory: ClientMemoryService,
) -> AgentRun:
    last_text = extract_text(messages[-1])

    intent = await agents.detect_intent(last_text)
    logger.info("Detected intent: %s", intent.value)

    client_memory = await memory.retrieve_client_memory(visitor_id)
    client_context = {
        "userId": visitor_id,
        "appointments": [],
        "preferences": client_memory.model_dump(),
    }

    async def _save_insights(_answer: str) -> None:
        await memory.extract_and_save_insights(visitor_id, last_text)

    return await agents.execute_agent(
        intent,
        messages,
        visitor_id,
        client_context,
        on_complete=_save_insights,
    )


async def _stream_until(stream: AsyncIterator[str], deadline: float) -> AsyncIterator[str]:
    """
    Relay ``stream`` until it ends or the loop clock passes ``deadline``.

    Failures after the response has started cannot change the status code;
    they end the stream and are logged.
    """
    loop = asyncio.get_running_loop()
    iterator = stream.__aiter__()

    async def _next() -> Any:
        try:
            return await iterator.__anext__()
        except StopAsyncIteration:
            return _END

    try:
        while True:
            remaining = deadline - loop.time()
            if remaining <= 0:
                raise asyncio.TimeoutError()
            delta = await asyncio.wait_for(_next(), timeout=remaining)
            if delta is _END:
                break
            yield delta
    except asyncio.TimeoutError:
        logger.warning("Chat stream exceeded its time budget, closing")
    except LLMError as exc:
        logger.error("Chat stream failed: %s", exc)
    finally:
        aclose = getattr(iterator, "aclose", None)
        if aclose is not None:
            await aclose()


# ---------------------------------------------------------------------
# Chat Route
# ---------------------------------------------------------------------

@router.post(
    "",
    summary="Chat with the studio assistant",
    status_code=status.HTTP_200_OK,
    response_class=StreamingResponse,
)
async def chat(
    req: ChatRequest,
    agents: Annotated[AgentRouter, Depends(get_agent_router)],
    memory: Annotated[ClientMemoryService, Depends(get_memory_service)],
) -> StreamingResponse:
    """
    Route the conversation to an agent and stream its answer.

    Parameters
    ----------
    req : ChatRequest
        Contains:
        - messages: The conversation so far, last message from the user
        - userId: Optional visitor identifier for long-term memory

    Returns
    -------
    StreamingResponse
        Plain-text answer stream.
    """
    messages = [m.model_dump() for m in req.messages]
    visitor_id = req.user_id or ANONYMOUS_VISITOR

    loop = asyncio.get_running_loop()
    deadline = loop.time() + settings.chat_timeout_seconds

    # Timeout / pipeline / LLM failures are mapped by the global handlers
    run = await asyncio.wait_for(
        _start_agent(messages, visitor_id, agents, memory),
        timeout=settings.chat_timeout_seconds,
    )

    return StreamingResponse(
        _stream_until(run.stream, deadline),
        media_type="text/plain; charset=utf-8",
        headers={"X-Agent-Role": run.role.value},
    )
