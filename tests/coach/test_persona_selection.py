"""Tests for motivation profiling and persona selection."""

import pytest
from pydantic import ValidationError

from retire_strong.coach.persona import (
    PERSONAS,
    MotivationProfile,
    QuizAnswer,
    calculate_motivation_profile,
    pick_persona,
    with_motivation,
)
from retire_strong.coach.prompt_builder import build_system_prompt
from retire_strong.coach.schemas import CoachPersona
from retire_strong.planning.models import MotivationHint


def _answers(**values: int) -> list[QuizAnswer]:
    return [QuizAnswer(question_id=question_id, value=value) for question_id, value in values.items()]


class TestCalculateMotivationProfile:
    def test_scores_are_summed_per_category(self):
        profile = calculate_motivation_profile(_answers(q5=5, q9=5, q11=4, q7=3, q10=4, q8=5, q1=2))

        assert profile.primary_motivator == "achievement"
        assert profile.secondary_motivators == ["social", "independence"]
        assert profile.scores["achievement"] == 14
        assert profile.scores["social"] == 7
        assert profile.scores["purpose"] == 2
        assert profile.scores["mastery"] == 0

    def test_ties_follow_table_order(self):
        profile = calculate_motivation_profile(_answers(q7=5, q8=5))
        assert profile.primary_motivator == "social"
        assert profile.secondary_motivators == ["independence", "achievement"]

    def test_no_answers(self):
        profile = calculate_motivation_profile([])
        assert profile.primary_motivator == "achievement"
        assert profile.secondary_motivators == ["autonomy", "social"]

    def test_unknown_questions_are_ignored(self):
        profile = calculate_motivation_profile(_answers(q99=5, q6=3))
        assert profile.primary_motivator == "mastery"
        assert sum(profile.scores.values()) == 3

    def test_answer_values_are_bounded(self):
        with pytest.raises(ValidationError):
            QuizAnswer(question_id="q1", value=6)

    def test_same_answers_same_profile(self):
        answers = _answers(q3=4, q2=2, q12=5)
        assert calculate_motivation_profile(answers) == calculate_motivation_profile(answers)

    def test_planner_hint(self):
        profile = MotivationProfile(primary_motivator="purpose", secondary_motivators=["social", "mastery"])
        assert profile.to_hint() == MotivationHint(primary_motivator="purpose", secondary_motivators=("social", "mastery"))


class TestPickPersona:
    def test_every_motivator_has_a_persona(self):
        assert len({persona.name for persona in PERSONAS.values()}) == 7

    def test_from_profile(self):
        persona = pick_persona(MotivationProfile(primary_motivator="health_fear"))
        assert persona.name == "Coach Morgan"
        assert persona.tone == "formality: professional; encouragement: gentle; directness: balanced; humor: none"

    def test_from_stored_motivator(self):
        assert pick_persona("Independence").name == "Coach Taylor"

    @pytest.mark.parametrize("motivator", [None, "", "curiosity"])
    def test_unknown_motivator_falls_back(self, motivator):
        assert pick_persona(motivator).name == "Coach Alex"


class TestWithMotivation:
    def test_context_gets_motivator_and_persona(self, coach_context):
        profile = calculate_motivation_profile(_answers(q7=5, q10=5))
        context = with_motivation(coach_context, profile)

        assert context.motivation_profile == "social"
        assert context.coach_persona.name == "Coach Jordan"
        assert coach_context.coach_persona is None

        prompt = build_system_prompt(context)
        assert "Your name is Coach Jordan." in prompt
        assert "Tone: formality: warm; encouragement: gentle" in prompt
        assert "Motivation profile: social" in prompt

    def test_existing_persona_is_kept(self, coach_context):
        chosen = CoachPersona(name="Coach Maya", tone="calm")
        context = with_motivation(
            coach_context.model_copy(update={"coach_persona": chosen}),
            MotivationProfile(primary_motivator="mastery"),
        )
        assert context.coach_persona == chosen
        assert context.motivation_profile == "mastery"
