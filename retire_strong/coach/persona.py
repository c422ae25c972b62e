"""Motivation profiling and coach persona selection.

Quiz answers are summed per motivator category. The highest total is the
primary motivator and picks the coach persona; the next two are kept as
secondary motivators for the planner. Everything here is a pure function of
the answers, so a user always gets the same persona for the same quiz.
"""

from typing import Literal

from loguru import logger
from pydantic import BaseModel, Field

from retire_strong.coach.schemas import CoachContext, CoachPersona
from retire_strong.planning.models import MotivationHint

MotivatorType = Literal[
    "achievement",
    "autonomy",
    "social",
    "health_fear",
    "independence",
    "mastery",
    "purpose",
]

# Table order breaks score ties
MOTIVATORS: tuple[str, ...] = (
    "achievement",
    "autonomy",
    "social",
    "health_fear",
    "independence",
    "mastery",
    "purpose",
)

DEFAULT_MOTIVATOR = "achievement"

QUESTION_CATEGORIES: dict[str, str] = {
    "q1": "purpose",
    "q2": "autonomy",
    "q3": "health_fear",
    "q4": "autonomy",
    "q5": "achievement",
    "q6": "mastery",
    "q7": "social",
    "q8": "independence",
    "q9": "achievement",
    "q10": "social",
    "q11": "achievement",
    "q12": "purpose",
}


class QuizAnswer(BaseModel):
    question_id: str
    value: int = Field(ge=1, le=5)


class ToneConfig(BaseModel):
    formality: Literal["casual", "professional", "warm"]
    encouragement: Literal["gentle", "moderate", "energetic"]
    directness: Literal["subtle", "balanced", "direct"]
    humor: Literal["none", "light", "moderate"]

    def describe(self) -> str:
        """One-line tone for the system prompt."""
        return (
            f"formality: {self.formality}; encouragement: {self.encouragement}; "
            f"directness: {self.directness}; humor: {self.humor}"
        )


class MotivationProfile(BaseModel):
    primary_motivator: MotivatorType
    secondary_motivators: list[MotivatorType] = Field(default_factory=list)
    scores: dict[str, int] = Field(default_factory=dict)

    def to_hint(self) -> MotivationHint:
        """Planner input carrying the same motivators."""
        return MotivationHint(
            primary_motivator=self.primary_motivator,
            secondary_motivators=tuple(self.secondary_motivators),
        )


def _persona(name: str, description: str, tone: ToneConfig) -> CoachPersona:
    return CoachPersona(name=name, description=description, tone=tone.describe())


PERSONAS: dict[str, CoachPersona] = {
    "achievement": _persona(
        "Coach Alex",
        "Goal-oriented and data-driven, Alex helps you track progress and celebrate milestones. "
        "Perfect for those who thrive on measurable results.",
        ToneConfig(formality="professional", encouragement="energetic", directness="direct", humor="light"),
    ),
    "autonomy": _persona(
        "Coach Sam",
        "Flexible and empowering, Sam gives you choices and adapts to your preferences. "
        "Ideal for independent spirits who value freedom.",
        ToneConfig(formality="casual", encouragement="moderate", directness="balanced", humor="moderate"),
    ),
    "social": _persona(
        "Coach Jordan",
        "Warm and supportive, Jordan creates a sense of connection and community. "
        "Great for those who appreciate encouragement and understanding.",
        ToneConfig(formality="warm", encouragement="gentle", directness="subtle", humor="light"),
    ),
    "health_fear": _persona(
        "Coach Morgan",
        "Caring and safety-focused, Morgan helps you build confidence while being mindful of your concerns. "
        "Perfect for those prioritizing prevention and safety.",
        ToneConfig(formality="professional", encouragement="gentle", directness="balanced", humor="none"),
    ),
    "independence": _persona(
        "Coach Taylor",
        "Empowering and practical, Taylor focuses on building skills that support your independence. "
        "Ideal for those who want to maintain their autonomy.",
        ToneConfig(formality="warm", encouragement="moderate", directness="balanced", humor="light"),
    ),
    "mastery": _persona(
        "Coach Casey",
        "Knowledgeable and patient, Casey helps you learn and master new movements. "
        "Perfect for those who enjoy the process of improvement.",
        ToneConfig(formality="professional", encouragement="moderate", directness="direct", humor="none"),
    ),
    "purpose": _persona(
        "Coach Riley",
        "Inspiring and purpose-driven, Riley connects your actions to your deeper goals. "
        "Great for those motivated by meaning and long-term vision.",
        ToneConfig(formality="warm", encouragement="energetic", directness="balanced", humor="moderate"),
    ),
}


def calculate_motivation_profile(answers: list[QuizAnswer]) -> MotivationProfile:
    """Score quiz answers into a motivation profile.

    Args:
        answers: Quiz answers; unknown question ids are ignored

    Returns:
        MotivationProfile with the top motivator, the next two, and every score
    """
    scores = dict.fromkeys(MOTIVATORS, 0)
    ignored = 0
    for answer in answers:
        category = QUESTION_CATEGORIES.get(answer.question_id)
        if category is None:
            ignored += 1
            continue
        scores[category] += answer.value

    if ignored:
        logger.warning("Ignoring unknown quiz questions", ignored=ignored, answered=len(answers))

    ranked = sorted(MOTIVATORS, key=lambda motivator: scores[motivator], reverse=True)
    profile = MotivationProfile(primary_motivator=ranked[0], secondary_motivators=ranked[1:3], scores=scores)
    logger.info(
        "Motivation profile calculated",
        primary=profile.primary_motivator,
        secondary=profile.secondary_motivators,
    )
    return profile


def pick_persona(profile: MotivationProfile | str | None) -> CoachPersona:
    """Coach persona for a profile or a stored primary motivator.

    Unknown or missing motivators get the achievement persona.
    """
    motivator = profile.primary_motivator if isinstance(profile, MotivationProfile) else profile
    persona = PERSONAS.get((motivator or "").strip().lower())
    if persona is None:
        logger.debug("No persona for motivator, using default", motivator=motivator)
        return PERSONAS[DEFAULT_MOTIVATOR]
    return persona


def with_motivation(context: CoachContext, profile: MotivationProfile) -> CoachContext:
    """Copy of a coaching context carrying the profile's motivator and persona.

    A persona already on the context is kept.
    """
    return context.model_copy(
        update={
            "motivation_profile": profile.primary_motivator,
            "coach_persona": context.coach_persona or pick_persona(profile),
        }
    )
