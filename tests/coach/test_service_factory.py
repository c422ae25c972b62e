"""Tests for wiring the coach service from settings."""

import pytest

from retire_strong.audit.writer import SqlAuditWriter
from retire_strong.coach.llm_client import ChatOpenAILanguageModel
from retire_strong.coach.service import CoachService
from retire_strong.config.settings import Settings
from retire_strong.core.errors import CatalogError
from retire_strong.rag.client import NullRetrievalClient
from retire_strong.runtime import create_coach_service


def test_create_coach_service():
    settings = Settings(OPENAI_API_KEY="sk-test", AUDIT_DATABASE_URL="sqlite://", RAG_TOP_K=5)

    service = create_coach_service(settings)

    assert isinstance(service, CoachService)
    assert len(service.catalog) == 16
    assert isinstance(service.orchestrator.llm, ChatOpenAILanguageModel)
    assert isinstance(service.orchestrator.retrieval, NullRetrievalClient)
    assert service.orchestrator.top_k == 5
    assert isinstance(service.audit.writer, SqlAuditWriter)


def test_missing_catalog_fails_fast(tmp_path):
    settings = Settings(OPENAI_API_KEY="sk-test", AUDIT_DATABASE_URL="sqlite://", CATALOG_PATH=str(tmp_path / "none.yaml"))
    with pytest.raises(CatalogError):
        create_coach_service(settings)
