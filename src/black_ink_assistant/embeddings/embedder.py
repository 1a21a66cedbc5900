"""
Embedding Client

This module implements the embedding adapter used by the retrieval pipeline.
It wraps the OpenAI embeddings API (or any compatible provider) and is
responsible for:

- Skipping the provider entirely for empty input
- Strict response validation
- Fail-soft degradation: a provider failure yields a zero vector instead of
  aborting the ingest or query that requested it

Missing credentials are a configuration problem, not a transient one, and
are always raised.

The class is stateless and safe to reuse across requests.
"""

from __future__ import annotations

from typing import List, Optional
import logging
import httpx

from ..config import settings
from ..core.errors import ConfigurationError

logger = logging.getLogger("blackink.embedder")


class EmbeddingError(RuntimeError):
    """Raised when the provider returns an unusable embedding payload."""


class Embedder:
    """
    Asynchronous single-text embedding generator.

    This class performs no caching and assumes the caller handles
    higher-level caching or persistent index management.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        dimension: Optional[int] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize an Embedder.

        Parameters
        ----------
        api_key : Optional[str]
            Optional override for OpenAI API key. Defaults to settings.openai_api_key.

        model : Optional[str]
            Optional override for embedding model. Defaults to settings.embedding_model.

        dimension : Optional[int]
            Vector size of the model, used for zero vectors.
            Defaults to settings.embedding_dimension.

        base_url : Optional[str]
            Provider base URL. Defaults to settings.openai_base_url.

        timeout : Optional[float]
            HTTP timeout for each request.

        transport : Optional[httpx.AsyncBaseTransport]
            Custom transport (tests use httpx.MockTransport).
        """
        if api_key is None:
            api_key = settings.openai_api_key.get_secret_value()
        self.api_key = api_key
        self.model = model or settings.embedding_model
        self.dimension = dimension or settings.embedding_dimension
        self.url = f"{(base_url or settings.openai_base_url).rstrip('/')}/embeddings"
        self.timeout = timeout or settings.http_timeout_seconds
        self._transport = transport

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def zero_vector(self) -> List[float]:
        return [0.0] * self.dimension

    async def embed(self, text: str) -> List[float]:
        """
        Generate the embedding for a single text.

        Parameters
        ----------
        text : str
            Input text.

        Returns
        -------
        List[float]
            The embedding, or a zero vector when ``text`` is blank or the
            provider call fails.

        Raises
        ------
        ConfigurationError
            If no API key is configured.
        """
        if not text or not text.strip():
            return self.zero_vector()

        if not self.api_key:
            raise ConfigurationError("embed", "OpenAI API key is not configured.")

        try:
            return await self._request_embedding(text)
        except (httpx.HTTPError, EmbeddingError, ValueError) as exc:
            logger.error(
                "Embedding request failed (%s), using zero vector: text length=%d",
                type(exc).__name__,
                len(text),
            )
            return self.zero_vector()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _request_embedding(self, text: str) -> List[float]:
        headers = {"Authorization": f"Bearer {self.api_key}"}
        payload = {
            "model": self.model,
            "input": text,
        }

        async with httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            response = await client.post(self.url, json=payload, headers=headers)
            response.raise_for_status()
            data = response.json()

        embeddings = self._extract_embeddings(data)
        if not embeddings:
            raise EmbeddingError("Embedding response contained no records.")
        return embeddings[0]

    @staticmethod
    def _extract_embeddings(data: dict) -> List[List[float]]:
        """
        Parse and validate embedding output format.

        OpenAI returns:
            { "data": [ {"embedding": [...]}, ... ] }

        Raises
        ------
        EmbeddingError
            If the API returns unexpected structure.
        """
        if not isinstance(data, dict) or "data" not in data:
            raise EmbeddingError("Embedding response missing 'data' field.")

        records = data["data"]
        if not isinstance(records, list):
            raise EmbeddingError("'data' field must be a list.")

        embeddings: List[List[float]] = []

        for index, record in enumerate(records):
            if not isinstance(record, dict) or "embedding" not in record:
                raise EmbeddingError(
                    f"Malformed embedding record at index {index}."
                )

            emb = record["embedding"]
            if not isinstance(emb, list) or not all(
                isinstance(x, (float, int)) for x in emb
            ):
                raise EmbeddingError(
                    f"Invalid embedding vector at index {index}: must be float list."
                )

            embeddings.append([float(x) for x in emb])

        return embeddings
