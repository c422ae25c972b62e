"""Movement planning engine.

The planner is the only component allowed to choose which catalog movements
appear in a plan. Every movement it places passes check_movement_safety for
the profile at the time it is placed.

No I/O happens here. Plans come in and go out as values; persistence belongs
to the caller.
"""

from dataclasses import replace
from datetime import date, datetime, timedelta, timezone

from loguru import logger

from retire_strong.catalog.loader import get_default_catalog
from retire_strong.catalog.models import MovementCatalog, MovementDefinition
from retire_strong.core.errors import SessionAlreadyCompletedError, SessionNotFoundError, ValidationFailure
from retire_strong.planning.adherence import AdherenceSummary
from retire_strong.planning.models import (
    MotivationHint,
    MovementInstance,
    MovementPlan,
    MovementSession,
    SessionFeedback,
    SessionTemplate,
    UserProfile,
)
from retire_strong.planning.safety import check_movement_safety, filter_safe_movements
from retire_strong.planning.templates import DAY_TEMPLATES, MAX_MOVEMENTS_PER_SESSION, SAFE_FALLBACK_IDS

# Average pain (0-3 scale) at or above which progression is held back
PROGRESSION_PAIN_CEILING = 2.0


def _dedupe(values: list[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(values))


def select_movements_for_session(
    template: SessionTemplate,
    profile: UserProfile,
    catalog: MovementCatalog,
    plan_id: str,
    day_index: int,
    scheduled_date: date,
) -> MovementSession:
    """Build one pending session from a day template.

    Required ids come first, then optional ids, each filtered through the
    contraindication check. The session is capped at MAX_MOVEMENTS_PER_SESSION.
    If filtering leaves nothing, the safe fallback list (also filtered) is used.

    Args:
        template: Day template to realise
        profile: User profile
        catalog: Movement catalog
        plan_id: Owning plan id
        day_index: 1-based day number
        scheduled_date: Date the session is planned for

    Returns:
        Pending MovementSession
    """
    results = filter_safe_movements(template.movement_ids, catalog, profile)
    results.extend(filter_safe_movements(template.optional_ids, catalog, profile))
    results = results[:MAX_MOVEMENTS_PER_SESSION]

    if not results:
        logger.warning(
            "Template filtered to nothing, using safe fallbacks",
            user_id=profile.user_id,
            template_id=template.id,
        )
        results = filter_safe_movements(SAFE_FALLBACK_IDS, catalog, profile)[:MAX_MOVEMENTS_PER_SESSION]

    movements = tuple(MovementInstance.from_definition(r.movement, cautions=r.cautions) for r in results)
    return MovementSession(
        session_id=f"{plan_id}-d{day_index}",
        plan_id=plan_id,
        user_id=profile.user_id,
        day_index=day_index,
        focus=template.focus,
        status="pending",
        scheduled_date=scheduled_date,
        movements=movements,
        cautions=_dedupe([c for m in movements for c in m.cautions]),
    )


def build_starter_plan(
    profile: UserProfile | None,
    motivation: MotivationHint | None = None,
    catalog: MovementCatalog | None = None,
    today: date | None = None,
) -> MovementPlan:
    """Build the three-session starter plan for a user.

    Args:
        profile: User profile (required)
        motivation: Optional motivation hint, recorded on the plan
        catalog: Movement catalog (defaults to the packaged catalog)
        today: Date of the first session (defaults to today)

    Returns:
        MovementPlan with one pending session per day template

    Raises:
        ValidationFailure: If no profile is supplied
    """
    if profile is None:
        raise ValidationFailure("A user profile is required to build a starter plan")

    catalog = catalog if catalog is not None else get_default_catalog()
    start = today or date.today()
    plan_id = f"starter-{profile.user_id}-{start.isoformat()}"

    sessions = tuple(
        select_movements_for_session(
            template,
            profile,
            catalog,
            plan_id=plan_id,
            day_index=index,
            scheduled_date=start + timedelta(days=index - 1),
        )
        for index, template in enumerate(DAY_TEMPLATES, start=1)
    )

    plan = MovementPlan(
        plan_id=plan_id,
        user_id=profile.user_id,
        created_at=datetime.now(timezone.utc),
        start_date=start,
        sessions=sessions,
        cautions=_dedupe([c for s in sessions for c in s.cautions]),
        motivation=motivation,
    )
    logger.info(
        "Starter plan built",
        user_id=profile.user_id,
        plan_id=plan_id,
        sessions=len(sessions),
        movements=sum(len(s.movements) for s in sessions),
        cautions=len(plan.cautions),
    )
    return plan


def _progression_withheld(feedback: SessionFeedback, adherence: AdherenceSummary | None) -> bool:
    if feedback.pain:
        return True
    if adherence is None:
        return False
    return adherence.pain_increasing or adherence.average_pain_level >= PROGRESSION_PAIN_CEILING


def _first_safe_alternative(
    candidate_ids: tuple[str, ...],
    catalog: MovementCatalog,
    profile: UserProfile,
) -> MovementDefinition | None:
    for candidate_id in candidate_ids:
        candidate = catalog.get(candidate_id)
        if candidate is None:
            continue
        if check_movement_safety(candidate, profile).safe:
            return candidate
    return None


def _adapt_session(
    session: MovementSession,
    difficulty: str,
    catalog: MovementCatalog,
    profile: UserProfile,
) -> MovementSession:
    movements: list[MovementInstance] = []
    changed = False
    for instance in session.movements:
        movement = catalog.get(instance.movement_id)
        if movement is None:
            movements.append(instance)
            continue
        candidates = movement.regressions if difficulty == "too_hard" else movement.progressions
        alternative = _first_safe_alternative(candidates, catalog, profile)
        if alternative is None:
            movements.append(instance)
            continue
        # Cautions stay with the instance; only the movement identity and dose change
        movements.append(instance.substituted_with(alternative))
        changed = True
    if not changed:
        return session
    return replace(session, movements=tuple(movements))


def update_plan_on_completion(
    plan: MovementPlan,
    session_id: str,
    feedback: SessionFeedback,
    catalog: MovementCatalog | None = None,
    profile: UserProfile | None = None,
    adherence: AdherenceSummary | None = None,
    completed_at: datetime | None = None,
) -> MovementPlan:
    """Mark a session completed and adapt the remaining pending sessions.

    When feedback is too_hard, each pending movement is swapped for its first
    regression that passes the safety check. When feedback is too_easy, each
    pending movement is swapped for its first progression that passes the
    safety check, unless pain was reported on this session or the adherence
    summary shows pain rising or averaging moderate. Completed sessions are
    never touched.

    Args:
        plan: Current plan
        session_id: Session being completed
        feedback: Feedback for the completed session
        catalog: Movement catalog (defaults to the packaged catalog)
        profile: User profile; without one the session is still completed but no
            substitution is attempted
        adherence: Optional adherence summary for the user
        completed_at: Completion timestamp (defaults to now, UTC)

    Returns:
        New MovementPlan value

    Raises:
        SessionNotFoundError: If session_id is not part of the plan
        SessionAlreadyCompletedError: If the session was already completed
    """
    target = plan.get_session(session_id)
    if target is None:
        raise SessionNotFoundError(session_id, plan.plan_id)
    if target.is_completed:
        raise SessionAlreadyCompletedError(session_id)

    catalog = catalog if catalog is not None else get_default_catalog()
    completed = replace(
        target,
        status="completed",
        completed_at=completed_at or datetime.now(timezone.utc),
        feedback=feedback,
    )

    difficulty = feedback.difficulty
    adapt = difficulty in ("too_hard", "too_easy")
    if adapt and profile is None:
        logger.warning("No profile supplied, skipping plan adaptation", plan_id=plan.plan_id, session_id=session_id)
        adapt = False
    if adapt and difficulty == "too_easy" and _progression_withheld(feedback, adherence):
        logger.info("Progression withheld due to pain signals", plan_id=plan.plan_id, session_id=session_id)
        adapt = False

    sessions: list[MovementSession] = []
    for session in plan.sessions:
        if session.session_id == session_id:
            sessions.append(completed)
        elif adapt and not session.is_completed:
            sessions.append(_adapt_session(session, difficulty, catalog, profile))
        else:
            sessions.append(session)

    logger.info(
        "Session completed",
        plan_id=plan.plan_id,
        session_id=session_id,
        difficulty=difficulty,
        pain=feedback.pain,
        adapted=adapt,
    )
    return replace(plan, sessions=tuple(sessions))
