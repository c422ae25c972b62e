"""Audit record models.

Four append-only record types share one storage table. Each record is keyed
by ``LOG#<type>#<id>`` and ordered by its ISO timestamp.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, Field

EngineOperation = Literal[
    "build_starter_plan",
    "select_movements",
    "update_plan",
    "apply_regression",
    "apply_progression",
]
LlmInteractionType = Literal["chat", "explain_plan", "clarify_limitations", "generate_engine_input"]
RecommendationType = Literal["explanation", "motivation", "clarification", "plan_intro", "other"]
InterventionSource = Literal["coach-engine", "movement-engine", "api-handler"]
InterventionType = Literal["block", "modify", "escalate", "warn"]
SeverityLevel = Literal["low", "medium", "high", "critical"]


def _new_id() -> str:
    return str(uuid.uuid4())


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class AuditRecord(BaseModel):
    """Common fields of every audit record."""

    record_type: ClassVar[str] = "record"

    id: str = Field(default_factory=_new_id)
    timestamp: str = Field(default_factory=_now_iso)
    user_id: str | None = None
    metadata: dict[str, Any] | None = None

    @property
    def partition_key(self) -> str:
        return f"LOG#{self.record_type}#{self.id}"

    @property
    def sort_key(self) -> str:
        return self.timestamp


class RecommendationLog(AuditRecord):
    """What the coach showed a user, after safety review."""

    record_type: ClassVar[str] = "recommendation"

    user_id: str
    type: RecommendationType
    content: str
    original_content: str | None = None
    safety_modified: bool
    movement_ids: list[str] | None = None
    plan_id: str | None = None
    session_id: str | None = None


class EngineCallLog(AuditRecord):
    """One planning-engine invocation."""

    record_type: ClassVar[str] = "engine-call"

    user_id: str
    operation: EngineOperation
    input: dict[str, Any]
    output: dict[str, Any]
    rules_applied: list[str] = Field(default_factory=list)
    safety_intervention: bool = False
    duration_ms: float


class TokenUsage(BaseModel):
    input: int
    output: int
    total: int


class LlmInteractionLog(AuditRecord):
    """One language-model call with the pre- and post-safety text."""

    record_type: ClassVar[str] = "llm-interaction"

    user_id: str
    type: LlmInteractionType
    user_input: str
    llm_response: str
    final_output: str
    safety_filtered: bool
    tools_called: list[str] | None = None
    tokens: TokenUsage | None = None
    model: str
    duration_ms: float


class SafetyInterventionLog(AuditRecord):
    """A safety verdict that blocked, rewrote, escalated or warned."""

    record_type: ClassVar[str] = "safety-intervention"

    source: InterventionSource
    intervention_type: InterventionType
    triggered_rules: list[str] = Field(default_factory=list)
    severity: SeverityLevel
    original_content: str
    modified_content: str | None = None
    reason: str
    red_flags: list[str] = Field(default_factory=list)
    escalated: bool = False


RECORD_TYPES: dict[str, type[AuditRecord]] = {
    model.record_type: model
    for model in (RecommendationLog, EngineCallLog, LlmInteractionLog, SafetyInterventionLog)
}
