"""Retrieval client interface and networked implementations.

The orchestrator depends on the RetrievalClient protocol and receives an
instance at construction. The host picks the implementation; there is no
module-level client.
"""

import time
from typing import Any, Protocol

import httpx
from loguru import logger

from retire_strong.core.errors import RetrievalError
from retire_strong.rag.logging import log_retrieval, log_retrieval_failure
from retire_strong.rag.types import RetrievalQuery, RetrievedPassage, rank_passages


class RetrievalClient(Protocol):
    """Search reference content.

    Implementations return passages ranked by descending score, all at or
    above query.min_similarity, at most query.limit of them. Failures raise
    RetrievalError.
    """

    async def search(self, query: RetrievalQuery) -> list[RetrievedPassage]: ...


class NullRetrievalClient:
    """Client for deployments without a content index. Always returns no passages."""

    async def search(self, query: RetrievalQuery) -> list[RetrievedPassage]:
        logger.debug("Retrieval disabled, returning no passages", query_preview=query.query[:80])
        return []


class HttpRetrievalClient:
    """Client for a remote search service.

    POSTs the query to ``{base_url}/search`` and expects
    ``{"results": [{"content", "source", "collection", "score"}, ...]}``.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.endpoint = f"{base_url.rstrip('/')}/search"
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client and not self._client.is_closed:
            await self._client.aclose()

    async def search(self, query: RetrievalQuery) -> list[RetrievedPassage]:
        """Run a search against the remote service.

        Args:
            query: Retrieval query

        Returns:
            Ranked passages

        Raises:
            RetrievalError: On transport errors, non-2xx responses or malformed payloads
        """
        payload: dict[str, Any] = {
            "query": query.query,
            "limit": query.limit,
            "minSimilarity": query.min_similarity,
        }
        if query.collection:
            payload["collection"] = query.collection
        if query.topics:
            payload["topics"] = list(query.topics)
        if query.movement_ids:
            payload["movementIds"] = list(query.movement_ids)

        start = time.perf_counter()
        try:
            response = await self._get_client().post(self.endpoint, json=payload, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            log_retrieval_failure("http", query, e)
            raise RetrievalError(f"Retrieval request to {self.endpoint} failed: {e}") from e

        passages = rank_passages(self._parse_results(data), query)
        log_retrieval("http", query, passages=passages, duration_ms=(time.perf_counter() - start) * 1000)
        return passages

    def _parse_results(self, data: Any) -> list[RetrievedPassage]:
        if not isinstance(data, dict) or not isinstance(data.get("results"), list):
            raise RetrievalError("Retrieval response is missing a 'results' list")
        passages: list[RetrievedPassage] = []
        for item in data["results"]:
            try:
                passages.append(
                    RetrievedPassage(
                        content=str(item["content"]),
                        source_title=str(item.get("source") or item.get("sourceTitle") or "Untitled"),
                        collection=str(item.get("collection", "")),
                        score=float(item["score"]),
                    )
                )
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                raise RetrievalError(f"Malformed retrieval result: {item!r}") from e
        return passages
