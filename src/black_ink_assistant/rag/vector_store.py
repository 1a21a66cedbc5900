"""
Vector Store

Pinecone-backed vector storage and similarity search, spoken over the
index's data-plane REST API.

Key Properties
--------------
- Upserts are split into sequential batches of at most 100 records
- Records overwrite by id (last write wins)
- Queries widen the candidate pool to ceil(top_k * 1.5) for re-ranking
- Every failure is raised as VectorStoreError; an empty match list always
  means "no matches", never "search failed"
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ..config import settings
from ..core.errors import ConfigurationError
from ..embeddings.models import VectorMatch, VectorRecord

logger = logging.getLogger("blackink.vector_store")

MAX_BATCH_SIZE = 100
CANDIDATE_POOL_FACTOR = 1.5
API_VERSION = "2024-07"


class VectorStoreError(RuntimeError):
    """Raised when an upsert batch or a query fails."""


class VectorStore:
    """
    Thin async adapter over a single Pinecone index.

    The adapter holds no connection state and is safe to share between
    concurrent requests.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        index_host: Optional[str] = None,
        namespace: Optional[str] = None,
        batch_size: Optional[int] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Parameters
        ----------
        api_key : Optional[str]
            Pinecone API key. Defaults to settings.pinecone_api_key.

        index_host : Optional[str]
            Data-plane host of the index. Defaults to settings.pinecone_index_host.

        namespace : Optional[str]
            Index namespace. Defaults to settings.pinecone_namespace.

        batch_size : Optional[int]
            Records per upsert call, capped at 100.

        timeout : Optional[float]
            HTTP timeout for each request.

        transport : Optional[httpx.AsyncBaseTransport]
            Custom transport (tests use httpx.MockTransport).
        """
        if api_key is None:
            api_key = settings.pinecone_api_key.get_secret_value()
        self.api_key = api_key

        host = index_host if index_host is not None else settings.pinecone_index_host
        if host and not host.startswith(("http://", "https://")):
            host = f"https://{host}"
        self.index_host = host.rstrip("/")

        self.namespace = namespace if namespace is not None else settings.pinecone_namespace
        self.batch_size = min(batch_size or settings.upsert_batch_size, MAX_BATCH_SIZE)
        self.timeout = timeout or settings.http_timeout_seconds
        self._transport = transport

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def upsert(self, records: Sequence[VectorRecord]) -> int:
        """
        Write records in sequential batches.

        Parameters
        ----------
        records : Sequence[VectorRecord]
            Records to write. Ids must be unique within the store.

        Returns
        -------
        int
            Number of records written.

        Raises
        ------
        VectorStoreError
            If any batch fails. Batches already written stay written.
        """
        if not records:
            return 0

        stored = 0
        async with self._client() as client:
            for start in range(0, len(records), self.batch_size):
                batch = records[start : start + self.batch_size]
                payload: Dict[str, Any] = {
                    "vectors": [record.model_dump() for record in batch],
                }
                if self.namespace:
                    payload["namespace"] = self.namespace

                data = await self._post(client, "/vectors/upsert", payload)
                stored += int(data.get("upsertedCount", len(batch)))

                logger.info(
                    "Upserted batch %d (%d records)",
                    start // self.batch_size + 1,
                    len(batch),
                )

        return stored

    async def query(
        self,
        vector: List[float],
        top_k: int,
        filter: Optional[Dict[str, Any]] = None,
    ) -> List[VectorMatch]:
        """
        Similarity search returning a widened, unranked candidate pool.

        Parameters
        ----------
        vector : List[float]
            Query embedding.

        top_k : int
            Number of results the caller will keep after re-ranking.

        filter : Optional[Dict[str, Any]]
            Pinecone metadata filter, e.g. {"category": {"$in": ["pricing"]}}.

        Returns
        -------
        List[VectorMatch]
            Candidates in the store's own order (descending similarity).

        Raises
        ------
        VectorStoreError
            If the query fails or the response is malformed.
        """
        payload: Dict[str, Any] = {
            "vector": vector,
            "topK": self.candidate_pool_size(top_k),
            "includeMetadata": True,
            "includeValues": False,
        }
        if filter:
            payload["filter"] = filter
        if self.namespace:
            payload["namespace"] = self.namespace

        async with self._client() as client:
            data = await self._post(client, "/query", payload)

        matches = data.get("matches", [])
        if not isinstance(matches, list):
            raise VectorStoreError("Query response 'matches' must be a list.")

        try:
            return [VectorMatch.model_validate(m) for m in matches]
        except ValueError as exc:
            raise VectorStoreError("Malformed match in query response.") from exc

    @staticmethod
    def candidate_pool_size(top_k: int) -> int:
        return math.ceil(top_k * CANDIDATE_POOL_FACTOR)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _client(self) -> httpx.AsyncClient:
        if not self.api_key or not self.index_host:
            raise ConfigurationError(
                "vector_store", "Pinecone API key and index host must be configured."
            )

        return httpx.AsyncClient(
            base_url=self.index_host,
            timeout=self.timeout,
            transport=self._transport,
            headers={
                "Api-Key": self.api_key,
                "X-Pinecone-API-Version": API_VERSION,
            },
        )

    async def _post(
        self,
        client: httpx.AsyncClient,
        path: str,
        payload: Dict[str, Any],
    ) -> Dict[str, Any]:
        try:
            response = await client.post(path, json=payload)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error(
                "Vector store request failed (%s): path=%s",
                type(exc).__name__,
                path,
            )
            raise VectorStoreError(
                f"Vector store request to {path} failed: {type(exc).__name__}"
            ) from exc

        if not isinstance(data, dict):
            raise VectorStoreError(f"Unexpected response body from {path}.")
        return data
