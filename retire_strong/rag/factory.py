"""Retrieval client selection for the host application."""

from loguru import logger

from retire_strong.config.settings import Settings
from retire_strong.rag.client import HttpRetrievalClient, NullRetrievalClient, RetrievalClient
from retire_strong.rag.memory import InMemoryRetrievalClient, OpenAIEmbedder, load_corpus


def build_retrieval_client(settings: Settings) -> RetrievalClient:
    """Build the retrieval client named by RETRIEVAL_BACKEND.

    Misconfigured backends fall back to NullRetrievalClient with a warning, so
    coaching still works without grounding.
    """
    backend = settings.retrieval_backend
    if backend == "http":
        if not settings.retrieval_url:
            logger.warning("RETRIEVAL_BACKEND=http but RETRIEVAL_URL is empty. Retrieval disabled.")
            return NullRetrievalClient()
        logger.info("Using HTTP retrieval client", url=settings.retrieval_url)
        return HttpRetrievalClient(settings.retrieval_url, timeout=settings.retrieval_timeout_seconds)

    if backend == "memory":
        if settings.rag_corpus_path is None:
            logger.warning("RETRIEVAL_BACKEND=memory but RAG_CORPUS_PATH is not set. Retrieval disabled.")
            return NullRetrievalClient()
        documents = load_corpus(settings.rag_corpus_path)
        logger.info("Using in-memory retrieval client", documents=len(documents))
        return InMemoryRetrievalClient(documents, OpenAIEmbedder(api_key=settings.openai_api_key))

    logger.info("Retrieval disabled (RETRIEVAL_BACKEND=none)")
    return NullRetrievalClient()
