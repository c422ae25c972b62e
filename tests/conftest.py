"""Root conftest for all tests.

Shared fixtures: the packaged movement catalog, representative user
profiles, a scripted language model and an in-memory audit trail.
"""

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from retire_strong.audit.logger import AuditLogger
from retire_strong.audit.writer import InMemoryAuditWriter
from retire_strong.catalog.loader import get_default_catalog
from retire_strong.catalog.models import MovementCatalog
from retire_strong.coach.llm_client import LlmReply
from retire_strong.coach.schemas import CoachContext
from retire_strong.planning.models import UserProfile
from retire_strong.rag.client import NullRetrievalClient

START_DATE = date(2024, 11, 4)


@pytest.fixture
def catalog() -> MovementCatalog:
    return get_default_catalog()


@pytest.fixture
def start_date() -> date:
    return START_DATE


@pytest.fixture
def healthy_profile() -> UserProfile:
    """68-year-old, lightly active, no conditions."""
    return UserProfile(user_id="user-healthy", age=68, activity_level="light")


@pytest.fixture
def knee_profile() -> UserProfile:
    """72-year-old with knee pain and a hip replacement."""
    return UserProfile(
        user_id="user-knee",
        age=72,
        activity_level="sedentary",
        health_conditions=("hip replacement",),
        mobility_limitations=("knee pain",),
    )


@pytest.fixture
def vertigo_profile() -> UserProfile:
    return UserProfile(user_id="user-vertigo", age=70, health_conditions=("Vertigo",))


def scripted_llm(text: str, model: str = "gpt-4o-mini", input_tokens: int = 120, output_tokens: int = 80):
    """Language model double that returns the same reply for every call."""
    llm = MagicMock()
    llm.model = model
    llm.converse = AsyncMock(
        return_value=LlmReply(text=text, model=model, input_tokens=input_tokens, output_tokens=output_tokens)
    )
    return llm


@pytest.fixture
def make_llm():
    return scripted_llm


@pytest.fixture
def null_retrieval() -> NullRetrievalClient:
    return NullRetrievalClient()


@pytest.fixture
def audit_writer() -> InMemoryAuditWriter:
    return InMemoryAuditWriter()


@pytest.fixture
def audit_logger(audit_writer: InMemoryAuditWriter) -> AuditLogger:
    return AuditLogger(audit_writer)


@pytest.fixture
def coach_context() -> CoachContext:
    return CoachContext(
        user_id="user-healthy",
        user_name="Pat Lee",
        user_age=68,
        limitations=[],
        motivation_profile="independence",
    )
