"""Observability logging for retrieval."""

from loguru import logger

from retire_strong.rag.types import RetrievalQuery, RetrievedPassage

_QUERY_PREVIEW_CHARS = 80


def log_retrieval(
    backend: str,
    query: RetrievalQuery,
    *,
    passages: list[RetrievedPassage],
    duration_ms: float,
) -> None:
    """Log a completed retrieval.

    Args:
        backend: Backend name (http, memory, none)
        query: The query that was run
        passages: Passages returned
        duration_ms: Wall-clock duration of the call
    """
    log_data = {
        "backend": backend,
        "query_preview": query.query[:_QUERY_PREVIEW_CHARS],
        "collection": query.collection,
        "topics": list(query.topics),
        "limit": query.limit,
        "min_similarity": query.min_similarity,
        "passages_returned": len(passages),
        "sources": [p.source_title for p in passages],
        "top_score": passages[0].score if passages else None,
        "duration_ms": round(duration_ms, 1),
    }
    logger.info("rag_retrieval", **log_data)


def log_retrieval_failure(backend: str, query: RetrievalQuery, error: Exception) -> None:
    logger.warning(
        "rag_retrieval_failed",
        backend=backend,
        query_preview=query.query[:_QUERY_PREVIEW_CHARS],
        error_type=type(error).__name__,
        error=str(error),
    )
