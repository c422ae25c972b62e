"""In-process retrieval over a small reference corpus.

Exact cosine similarity with numpy. No ANN index is used; exact search is
fine for a corpus of coaching passages.
"""

import asyncio
import time
from pathlib import Path
from typing import Protocol

import numpy as np
import yaml
from loguru import logger
from openai import AsyncOpenAI, OpenAIError

from retire_strong.core.errors import RetrievalError
from retire_strong.rag.logging import log_retrieval, log_retrieval_failure
from retire_strong.rag.types import COLLECTIONS, RagDocument, RetrievalQuery, RetrievedPassage, rank_passages

EMBEDDING_MODEL = "text-embedding-3-small"
EMBEDDING_BATCH_SIZE = 64


class Embedder(Protocol):
    async def embed(self, texts: list[str]) -> list[list[float]]: ...


class OpenAIEmbedder:
    """Embeds text with the OpenAI embeddings API."""

    def __init__(self, api_key: str, model: str = EMBEDDING_MODEL, client: AsyncOpenAI | None = None):
        self.model = model
        self._client = client or AsyncOpenAI(api_key=api_key)

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Embed texts in batches, preserving order.

        Raises:
            RetrievalError: If the embeddings API call fails
        """
        vectors: list[list[float]] = []
        for i in range(0, len(texts), EMBEDDING_BATCH_SIZE):
            batch = texts[i : i + EMBEDDING_BATCH_SIZE]
            try:
                response = await self._client.embeddings.create(model=self.model, input=batch)
            except OpenAIError as e:
                raise RetrievalError(f"Failed to generate embeddings for batch {i}: {e}") from e
            vectors.extend(item.embedding for item in response.data)
        return vectors


def load_corpus(path: Path | str) -> list[RagDocument]:
    """Load reference passages from a YAML file.

    Expected shape: ``documents: [{id, collection, source_title, content, topics?, movement_ids?}]``.

    Raises:
        RetrievalError: If the file is missing or malformed
    """
    corpus_path = Path(path)
    if not corpus_path.exists():
        raise RetrievalError(f"Retrieval corpus not found: {corpus_path}")
    with corpus_path.open(encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    documents: list[RagDocument] = []
    for entry in raw.get("documents", []):
        collection = entry.get("collection")
        if collection not in COLLECTIONS:
            raise RetrievalError(f"Unknown collection {collection!r} in {corpus_path}")
        documents.append(
            RagDocument(
                doc_id=str(entry["id"]),
                collection=collection,
                content=str(entry["content"]),
                source_title=str(entry.get("source_title", "Untitled")),
                topics=tuple(entry.get("topics", ())),
                movement_ids=tuple(entry.get("movement_ids", ())),
            )
        )
    logger.info("Retrieval corpus loaded", path=str(corpus_path), documents=len(documents))
    return documents


def _normalize(vectors: np.ndarray) -> np.ndarray:
    norms = np.linalg.norm(vectors, axis=-1, keepdims=True)
    norms = np.where(norms == 0, 1, norms)
    return vectors / norms


class InMemoryRetrievalClient:
    """Cosine-similarity search over documents held in memory.

    Documents are embedded on the first search. The index is immutable after
    that; concurrent first searches share one build.
    """

    def __init__(self, documents: list[RagDocument], embedder: Embedder):
        self.documents = list(documents)
        self.embedder = embedder
        self._vectors: np.ndarray | None = None
        self._build_lock = asyncio.Lock()

    async def _ensure_index(self) -> np.ndarray:
        if self._vectors is not None:
            return self._vectors
        async with self._build_lock:
            if self._vectors is None:
                embedded = await self.embedder.embed([d.content for d in self.documents]) if self.documents else []
                vectors = np.array(embedded, dtype=np.float32).reshape(len(self.documents), -1)
                self._vectors = _normalize(vectors)
                logger.info("Retrieval index built", documents=len(self.documents))
        return self._vectors

    def _candidates(self, query: RetrievalQuery) -> list[int]:
        indices: list[int] = []
        for index, doc in enumerate(self.documents):
            if query.collection and doc.collection != query.collection:
                continue
            if query.topics and not set(query.topics) & set(doc.topics):
                continue
            if query.movement_ids and not set(query.movement_ids) & set(doc.movement_ids):
                continue
            indices.append(index)
        return indices

    async def search(self, query: RetrievalQuery) -> list[RetrievedPassage]:
        """Search by cosine similarity after collection, topic and movement filters.

        Raises:
            RetrievalError: If embedding fails
        """
        start = time.perf_counter()
        try:
            vectors = await self._ensure_index()
            candidates = self._candidates(query)
            if not candidates:
                log_retrieval("memory", query, passages=[], duration_ms=(time.perf_counter() - start) * 1000)
                return []
            (query_vector,) = await self.embedder.embed([query.query])
        except RetrievalError as e:
            log_retrieval_failure("memory", query, e)
            raise

        normalized_query = _normalize(np.array(query_vector, dtype=np.float32))
        similarities = vectors[candidates] @ normalized_query

        passages = [
            RetrievedPassage(
                content=self.documents[doc_index].content,
                source_title=self.documents[doc_index].source_title,
                collection=self.documents[doc_index].collection,
                score=float(score),
                metadata={"doc_id": self.documents[doc_index].doc_id},
            )
            for doc_index, score in zip(candidates, similarities, strict=True)
        ]
        passages = rank_passages(passages, query)
        log_retrieval("memory", query, passages=passages, duration_ms=(time.perf_counter() - start) * 1000)
        return passages
