"""
API Models for the Assistant

This module defines all Pydantic models used for request/response validation
across the chat, search and ingest endpoints.

Design Goals
------------
- Strong typing
- Safe defaults (no shared mutable state)
- Tolerant chat input (front-end message objects carry extra fields)
- Strict ingest and search input
"""

from __future__ import annotations

from typing import List, Optional, Dict, Any, Literal, Union
from pydantic import BaseModel, Field, ConfigDict, AliasChoices

from ..embeddings.models import Document


# ---------------------------------------------------------------------
# Chat Models
# ---------------------------------------------------------------------

class ChatMessage(BaseModel):
    """
    Single message in a chat conversation.

    ``content`` is either plain text or a list of typed parts; some clients
    send the parts separately in ``parts``.
    """
    role: Literal["system", "user", "assistant"]
    content: Union[str, List[Dict[str, Any]], None] = None
    parts: Optional[List[Dict[str, Any]]] = None

    model_config = ConfigDict(extra="ignore")


class ChatRequest(BaseModel):
    """
    Chat request payload.
    """
    messages: List[ChatMessage] = Field(..., min_length=1)
    user_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("userId", "user_id"),
    )

    model_config = ConfigDict(extra="ignore")


# ---------------------------------------------------------------------
# Search Models
# ---------------------------------------------------------------------

class SearchRequest(BaseModel):
    """
    Hybrid search request.
    """
    query: str
    top_k: int = Field(default=5, ge=1, le=50)
    filters: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(extra="forbid")


# ---------------------------------------------------------------------
# Ingest Models
# ---------------------------------------------------------------------

class IngestRequest(BaseModel):
    """
    Ingest request. Without ``documents`` the built-in sources are ingested.
    """
    secret: Optional[str] = None
    documents: Optional[List[Document]] = None

    model_config = ConfigDict(extra="forbid")


class IngestStats(BaseModel):
    docs: int = Field(..., ge=0)
    chunks: int = Field(..., ge=0)
    stored: int = Field(..., ge=0)


class IngestResponse(BaseModel):
    """
    Successful ingest report.
    """
    success: bool = True
    stats: IngestStats
