"""Composition root for host applications.

Usage:
    service = create_coach_service()
    reply = await service.chat("Why do sit-to-stands matter?", context)
    ...
    await service.audit.drain()
"""

from loguru import logger

from retire_strong.audit.logger import AuditLogger
from retire_strong.audit.writer import SqlAuditWriter
from retire_strong.catalog.loader import load_catalog
from retire_strong.coach.llm_client import ChatOpenAILanguageModel
from retire_strong.coach.orchestrator import ChatOrchestrator
from retire_strong.coach.service import CoachService
from retire_strong.config.settings import Settings
from retire_strong.core.logger import setup_logger
from retire_strong.rag.factory import build_retrieval_client


def create_coach_service(settings: Settings | None = None) -> CoachService:
    """Wire logging, catalog, retrieval, model and audit into a CoachService.

    Raises:
        CatalogError: If the catalog file is missing or invalid
        ValueError: If OPENAI_API_KEY is not configured
    """
    if settings is None:
        from retire_strong.config.settings import settings as default_settings

        settings = default_settings

    setup_logger(level=settings.log_level, log_file=settings.log_file, serialize=settings.log_json)
    catalog = load_catalog(settings.catalog_path)

    orchestrator = ChatOrchestrator(
        llm=ChatOpenAILanguageModel(api_key=settings.openai_api_key, model=settings.coach_model),
        retrieval=build_retrieval_client(settings),
        top_k=settings.rag_top_k,
        min_similarity=settings.rag_min_similarity,
    )
    audit = AuditLogger(SqlAuditWriter(settings.audit_database_url))

    logger.info(
        "Coach service ready",
        catalog_version=catalog.version,
        movements=len(catalog),
        model=settings.coach_model,
        retrieval=settings.retrieval_backend,
    )
    return CoachService(orchestrator=orchestrator, audit=audit, catalog=catalog)
