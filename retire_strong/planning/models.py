"""Immutable data models for movement planning.

This module defines the structures the planning engine reads and returns:
- User profile (subset owned by the account system, passed in per call)
- Day templates (required and optional catalog ids per session)
- Plans, sessions and movement instances
- Session feedback

All models are frozen. Adapting a plan returns a new plan value; callers
persist the result.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Literal

from retire_strong.catalog.models import MovementDefinition, MovementPrescription

ActivityLevel = Literal["sedentary", "light", "moderate", "active"]
FeedbackDifficulty = Literal["too_easy", "just_right", "too_hard"]
SessionStatus = Literal["pending", "completed"]


@dataclass(frozen=True)
class UserProfile:
    """Profile fields the planner needs.

    Attributes:
        user_id: Owning user identifier
        age: Age in years
        activity_level: Self-reported activity level
        goals: Free-text goal list
        health_conditions: Free-text health conditions (matched against contraindications)
        mobility_limitations: Free-text mobility limitations (matched against contraindications)
        equipment_available: Equipment the user has at home
    """

    user_id: str
    age: int
    activity_level: ActivityLevel = "sedentary"
    goals: tuple[str, ...] = ()
    health_conditions: tuple[str, ...] = ()
    mobility_limitations: tuple[str, ...] = ()
    equipment_available: tuple[str, ...] = ()

    @property
    def limitation_flags(self) -> tuple[str, ...]:
        return (*self.health_conditions, *self.mobility_limitations)


@dataclass(frozen=True)
class MotivationHint:
    primary_motivator: str
    secondary_motivators: tuple[str, ...] = ()


@dataclass(frozen=True)
class SessionTemplate:
    """Fixed day template.

    Attributes:
        id: Template identifier (e.g. "day1")
        focus: Human-readable focus label
        movement_ids: Required catalog ids, in order
        optional_ids: Optional catalog ids appended after required ones
    """

    id: str
    focus: str
    movement_ids: tuple[str, ...]
    optional_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class MovementInstance:
    """A catalog movement placed into a session.

    Only movement_id, name, description and prescription change when the
    planner substitutes a regression or progression.
    """

    movement_id: str
    name: str
    description: str
    prescription: MovementPrescription
    cautions: tuple[str, ...] = ()
    emphasis: str | None = None

    @classmethod
    def from_definition(
        cls, movement: MovementDefinition, cautions: tuple[str, ...] = (), emphasis: str | None = None
    ) -> "MovementInstance":
        return cls(
            movement_id=movement.id,
            name=movement.name,
            description=movement.description,
            prescription=movement.prescription,
            cautions=cautions,
            emphasis=emphasis,
        )

    def substituted_with(self, movement: MovementDefinition) -> "MovementInstance":
        return replace(
            self,
            movement_id=movement.id,
            name=movement.name,
            description=movement.description,
            prescription=movement.prescription,
        )


@dataclass(frozen=True)
class SessionFeedback:
    difficulty: FeedbackDifficulty | None = None
    pain: bool = False
    notes: str | None = None


@dataclass(frozen=True)
class MovementSession:
    """A dated session inside a plan.

    Attributes:
        session_id: "<plan_id>-d<day_index>"
        plan_id: Owning plan identifier
        user_id: Owning user identifier
        day_index: 1-based day number
        focus: Focus label from the template
        status: pending or completed
        scheduled_date: Date the session is planned for
        movements: Movement instances, safe for the profile at creation time
        cautions: Union of the movement instances' cautions
        completed_at: Completion timestamp (completed sessions only)
        feedback: Feedback recorded on completion
    """

    session_id: str
    plan_id: str
    user_id: str
    day_index: int
    focus: str
    status: SessionStatus
    scheduled_date: date
    movements: tuple[MovementInstance, ...]
    cautions: tuple[str, ...] = ()
    completed_at: datetime | None = None
    feedback: SessionFeedback | None = None

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"

    @property
    def movement_ids(self) -> list[str]:
        return [m.movement_id for m in self.movements]


@dataclass(frozen=True)
class MovementPlan:
    """A user's plan: ordered sessions plus the aggregate caution list."""

    plan_id: str
    user_id: str
    created_at: datetime
    start_date: date
    sessions: tuple[MovementSession, ...]
    cautions: tuple[str, ...] = ()
    schedule: str = "3 sessions per week"
    motivation: MotivationHint | None = None

    def get_session(self, session_id: str) -> MovementSession | None:
        for session in self.sessions:
            if session.session_id == session_id:
                return session
        return None

    @property
    def pending_sessions(self) -> list[MovementSession]:
        return [s for s in self.sessions if not s.is_completed]


@dataclass(frozen=True)
class SafetyCheckResult:
    """Outcome of checking one movement against one profile.

    Attributes:
        safe: False when an avoid-severity contraindication matched
        cautions: Caution strings to surface with the movement
        movement: The movement that was checked
    """

    safe: bool
    movement: MovementDefinition
    cautions: tuple[str, ...] = field(default_factory=tuple)
