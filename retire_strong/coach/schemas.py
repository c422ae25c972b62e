"""Conversation schemas for the coaching orchestrator."""

from typing import Literal

from pydantic import BaseModel, Field

MessageRole = Literal["user", "assistant", "system"]


class CoachMessage(BaseModel):
    role: MessageRole
    content: str
    timestamp: str | None = None


class CoachPersona(BaseModel):
    name: str
    description: str | None = None
    tone: str | None = None


class CoachContext(BaseModel):
    """Per-request context for a coaching turn.

    Supplied by the request handler from the user's profile and stored
    conversation; the core never persists it.
    """

    user_id: str
    user_name: str | None = None
    user_age: int | None = Field(default=None, ge=0, le=130)
    limitations: list[str] = Field(default_factory=list)
    motivation_profile: str | None = Field(default=None, description="Primary motivator, e.g. 'independence'")
    current_plan_id: str | None = None
    conversation_history: list[CoachMessage] = Field(default_factory=list)
    coach_persona: CoachPersona | None = None


class RagSource(BaseModel):
    collection: str
    title: str
    excerpt: str


class CoachDraft(BaseModel):
    """Unreviewed model reply.

    safety_filtered is always False here: the draft must go through the
    safety engine before anyone sees it.
    """

    message: str
    sources: list[RagSource] = Field(default_factory=list)
    safety_filtered: bool = False
    model: str
    duration_ms: float
    input_tokens: int | None = None
    output_tokens: int | None = None
    system_prompt: str = Field(default="", description="Prompt sent to the model, kept for the audit trail")


class CoachReply(BaseModel):
    """Reply returned to the caller after safety review."""

    message: str
    safety_filtered: bool
    original_message: str | None = None
    sources: list[RagSource] = Field(default_factory=list)
    safety_reason: str | None = None
    action: str = "allow"
    escalated: bool = False
