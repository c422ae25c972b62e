"""Coaching service.

Request-level composition of the pipeline:
    message -> orchestrator (retrieval + model) -> safety verdict -> audit -> caller

Nothing reaches the caller without passing validate_text_output. Audit
writes are submitted as tracked background tasks; the reply never waits on
them and never fails because of them.
"""

import time
from datetime import date

from loguru import logger

from retire_strong.audit.logger import AuditLogger
from retire_strong.audit.models import TokenUsage
from retire_strong.catalog.models import MovementCatalog
from retire_strong.coach.orchestrator import ChatOrchestrator
from retire_strong.coach.schemas import CoachContext, CoachDraft, CoachReply
from retire_strong.planning.adherence import AdherenceSummary
from retire_strong.planning.models import MotivationHint, MovementPlan, SessionFeedback, UserProfile
from retire_strong.planning.planner import build_starter_plan, update_plan_on_completion
from retire_strong.safety.engine import validate_plan_output, validate_text_output
from retire_strong.safety.types import SafetyAction, SafetyContext, SafetyVerdict


def safety_context_for(context: CoachContext) -> SafetyContext:
    return SafetyContext(user_age=context.user_age, limitations=tuple(context.limitations))


def safety_context_for_profile(profile: UserProfile, adherence: AdherenceSummary | None = None) -> SafetyContext:
    return SafetyContext.from_adherence(
        adherence,
        user_age=profile.age,
        limitations=profile.limitation_flags,
        activity_level=profile.activity_level,
    )


def _intervention_type(verdict: SafetyVerdict) -> str | None:
    """Audit intervention type for a verdict, or None when nothing is worth recording."""
    if verdict.should_escalate:
        return "escalate"
    if verdict.action == SafetyAction.BLOCK:
        return "block"
    if verdict.action == SafetyAction.MODIFY:
        return "modify"
    if verdict.red_flags:
        return "warn"
    return None


def _plan_summary(plan: MovementPlan) -> dict:
    return {
        "plan_id": plan.plan_id,
        "sessions": [
            {"session_id": s.session_id, "status": s.status, "movement_ids": s.movement_ids}
            for s in plan.sessions
        ],
        "cautions": list(plan.cautions),
    }


def _substitutions(before: MovementPlan, after: MovementPlan) -> list[str]:
    changes: list[str] = []
    for old, new in zip(before.sessions, after.sessions, strict=True):
        for old_id, new_id in zip(old.movement_ids, new.movement_ids, strict=True):
            if old_id != new_id:
                changes.append(f"{new.session_id}:{old_id}->{new_id}")
    return changes


class CoachService:
    """Entry point for request handlers: chat, plan explanation, plan build and session completion."""

    def __init__(self, orchestrator: ChatOrchestrator, audit: AuditLogger, catalog: MovementCatalog):
        self.orchestrator = orchestrator
        self.audit = audit
        self.catalog = catalog

    def _record_intervention(self, verdict: SafetyVerdict, user_id: str | None, source: str) -> None:
        intervention = _intervention_type(verdict)
        if intervention is None:
            return
        self.audit.submit(
            self.audit.log_safety_intervention(
                user_id=user_id,
                source=source,
                intervention_type=intervention,
                triggered_rules=list(verdict.triggered_rules),
                severity=verdict.severity.value,
                original_content=verdict.original_content,
                modified_content=verdict.safe_content if verdict.action != SafetyAction.ALLOW else None,
                reason=verdict.reason or "Safety rules triggered",
                red_flags=[flag.value for flag in verdict.red_flags],
                escalated=verdict.should_escalate,
            )
        )
        if verdict.should_escalate:
            logger.warning(
                "Safety intervention escalated for human review",
                user_id=user_id,
                source=source,
                severity=verdict.severity.value,
            )

    def _finish_turn(
        self,
        *,
        interaction: str,
        recommendation: str,
        user_input: str,
        draft: CoachDraft,
        context: CoachContext,
        safety_context: SafetyContext | None,
    ) -> CoachReply:
        verdict = validate_text_output(draft.message, safety_context)
        filtered = verdict.action != SafetyAction.ALLOW

        tokens = None
        if draft.input_tokens is not None and draft.output_tokens is not None:
            tokens = TokenUsage(
                input=draft.input_tokens,
                output=draft.output_tokens,
                total=draft.input_tokens + draft.output_tokens,
            )
        self.audit.submit(
            self.audit.log_llm_interaction(
                user_id=context.user_id,
                type=interaction,
                user_input=user_input,
                llm_response=draft.message,
                final_output=verdict.safe_content,
                safety_filtered=filtered,
                tokens=tokens,
                model=draft.model,
                duration_ms=draft.duration_ms,
            )
        )
        self._record_intervention(verdict, context.user_id, "coach-engine")
        self.audit.submit(
            self.audit.log_recommendation(
                user_id=context.user_id,
                type=recommendation,
                content=verdict.safe_content,
                original_content=verdict.original_content if filtered else None,
                safety_modified=filtered,
                plan_id=context.current_plan_id,
            )
        )

        return CoachReply(
            message=verdict.safe_content,
            safety_filtered=filtered,
            original_message=verdict.original_content if filtered else None,
            sources=draft.sources,
            safety_reason=verdict.reason,
            action=verdict.action.value,
            escalated=verdict.should_escalate,
        )

    async def chat(
        self,
        user_message: str,
        context: CoachContext,
        safety_context: SafetyContext | None = None,
    ) -> CoachReply:
        """Answer one user message.

        Args:
            user_message: The user's message
            context: Per-request coaching context
            safety_context: Age-aware safety context; derived from context when omitted

        Returns:
            CoachReply carrying only safety-approved text

        Raises:
            LanguageModelError: If the model call fails
        """
        draft = await self.orchestrator.chat(user_message, context)
        return self._finish_turn(
            interaction="chat",
            recommendation="other",
            user_input=user_message,
            draft=draft,
            context=context,
            safety_context=safety_context or safety_context_for(context),
        )

    async def explain_plan(
        self,
        plan: MovementPlan,
        context: CoachContext,
        safety_context: SafetyContext | None = None,
    ) -> CoachReply:
        """Explain a plan in natural language, after safety review."""
        if context.current_plan_id is None:
            context = context.model_copy(update={"current_plan_id": plan.plan_id})
        draft = await self.orchestrator.explain_plan(plan, context)
        return self._finish_turn(
            interaction="explain_plan",
            recommendation="explanation",
            user_input=f"explain_plan:{plan.plan_id}",
            draft=draft,
            context=context,
            safety_context=safety_context or safety_context_for(context),
        )

    async def build_starter_plan(
        self,
        profile: UserProfile,
        motivation: MotivationHint | None = None,
        today: date | None = None,
    ) -> MovementPlan:
        """Build a starter plan and record the engine call.

        Raises:
            ValidationFailure: If profile is None
        """
        start = time.perf_counter()
        plan = build_starter_plan(profile, motivation=motivation, catalog=self.catalog, today=today)
        verdict = validate_plan_output(plan, safety_context_for_profile(profile))
        duration_ms = (time.perf_counter() - start) * 1000

        self._record_intervention(verdict, profile.user_id, "movement-engine")
        self.audit.submit(
            self.audit.log_engine_call(
                user_id=profile.user_id,
                operation="build_starter_plan",
                input={
                    "age": profile.age,
                    "activity_level": profile.activity_level,
                    "limitations": list(profile.limitation_flags),
                    "motivation": motivation.primary_motivator if motivation else None,
                },
                output=_plan_summary(plan),
                rules_applied=list(plan.cautions),
                safety_intervention=verdict.intervened,
                duration_ms=duration_ms,
            )
        )
        return plan

    async def complete_session(
        self,
        plan: MovementPlan,
        session_id: str,
        feedback: SessionFeedback,
        profile: UserProfile | None,
        adherence: AdherenceSummary | None = None,
    ) -> MovementPlan:
        """Complete a session, adapt the rest of the plan and record the engine call.

        Raises:
            SessionNotFoundError: If session_id is not part of the plan
            SessionAlreadyCompletedError: If the session was already completed
        """
        start = time.perf_counter()
        updated = update_plan_on_completion(
            plan,
            session_id,
            feedback,
            catalog=self.catalog,
            profile=profile,
            adherence=adherence,
        )
        duration_ms = (time.perf_counter() - start) * 1000

        changes = _substitutions(plan, updated)
        rules_applied = []
        if changes:
            rules_applied.append("apply_regression" if feedback.difficulty == "too_hard" else "apply_progression")

        self.audit.submit(
            self.audit.log_engine_call(
                user_id=plan.user_id,
                operation="update_plan",
                input={
                    "plan_id": plan.plan_id,
                    "session_id": session_id,
                    "difficulty": feedback.difficulty,
                    "pain": feedback.pain,
                },
                output={"plan_id": updated.plan_id, "substitutions": changes},
                rules_applied=rules_applied,
                duration_ms=duration_ms,
            )
        )
        return updated
