"""Tests for the safety validation engine.

Covers the decision table: block on critical/high findings, modify on
medium-only findings, allow otherwise, plus escalation.
"""

import pytest

from retire_strong.core.errors import ValidationFailure
from retire_strong.planning.planner import build_starter_plan
from retire_strong.safety.engine import quick_safety_check, validate_plan_output, validate_text_output
from retire_strong.safety.fallbacks import MODIFY_DISCLAIMER, SAFE_FALLBACK_MESSAGES
from retire_strong.safety.types import RedFlagCategory, SafetyAction, SafetyContext, Severity


class TestAllow:
    def test_clean_text_passes_verbatim(self):
        text = "Great job today! Remember to sit tall during your seated marches."
        verdict = validate_text_output(text)
        assert verdict.action == SafetyAction.ALLOW
        assert verdict.safe_content == text
        assert verdict.severity == Severity.LOW
        assert verdict.reason is None
        assert verdict.should_escalate is False
        assert verdict.intervened is False

    def test_low_flags_are_allowed_but_recorded(self):
        verdict = validate_text_output("If something hurts, talk to your doctor.")
        assert verdict.action == SafetyAction.ALLOW
        assert verdict.red_flags == (RedFlagCategory.MEDICAL_DIAGNOSIS,)
        assert verdict.triggered_rules == ("Recommending doctor consultation (acceptable)",)

    def test_safety_oriented_medical_phrasing_is_allowed(self):
        verdict = validate_text_output("If you experience pain, stop and talk to your doctor before your next session.")
        assert verdict.action == SafetyAction.ALLOW
        assert verdict.medical_advice_detected is False
        assert verdict.should_escalate is False

    def test_ordinary_run_through_phrase_is_not_high_impact(self):
        context = SafetyContext(user_age=70, limitations=("knee pain",))
        text = "Let's run through your plan for this week: gentle seated marches and wall push-ups."
        verdict = validate_text_output(text, context)
        assert verdict.action == SafetyAction.ALLOW
        assert verdict.safe_content == text


class TestModify:
    """Medium-only findings are rewritten."""

    def test_over_promising_is_rewritten(self):
        text = "This will definitely cure your arthritis, guaranteed"
        verdict = validate_text_output(text)

        assert verdict.action == SafetyAction.MODIFY
        assert verdict.severity == Severity.MEDIUM
        assert verdict.safe_content.endswith(MODIFY_DISCLAIMER)
        assert "guaranteed" not in verdict.safe_content
        assert "definitely" not in verdict.safe_content
        assert verdict.original_content == text
        assert verdict.reason == (
            "Modified to remove medium-severity issues: Making unrealistic promises about results"
        )
        assert verdict.should_escalate is False

    @pytest.mark.parametrize(
        ("text", "phrase"),
        [
            ("You must keep going.", "You must"),
            ("At your age, slow is fine.", "At your age"),
            ("This routine is anti-aging magic.", "anti-aging"),
            ("You'll see instant gains.", "instant"),
            ("Do these every day.", "every day"),
        ],
    )
    def test_flagged_phrase_never_survives(self, text, phrase):
        verdict = validate_text_output(text)
        assert verdict.action == SafetyAction.MODIFY
        assert phrase.lower() not in verdict.safe_content.lower()

    def test_medium_age_aware_rule_modifies(self):
        context = SafetyContext(user_age=66, frequent_pain_locations=("shoulder",))
        verdict = validate_text_output("Nice work today.", context)
        assert verdict.action == SafetyAction.MODIFY
        assert verdict.safe_content == "Nice work today." + MODIFY_DISCLAIMER
        assert verdict.triggered_rules == ("frequent-pain-location-check",)


class TestBlock:
    """Critical/high findings replace the text with a fallback."""

    def test_diagnosis_and_medication(self):
        verdict = validate_text_output("You have osteoarthritis and should take 200mg of the medication daily")
        assert verdict.action == SafetyAction.BLOCK
        assert verdict.severity == Severity.CRITICAL
        assert verdict.safe_content == SAFE_FALLBACK_MESSAGES["medical_advice"]
        assert verdict.should_escalate is True
        assert verdict.safe is False

    def test_critical_blocks_regardless_of_context(self):
        text = "Take tylenol then exercise and you'll be fine."
        for context in (None, SafetyContext(), SafetyContext(user_age=55, activity_level="active")):
            verdict = validate_text_output(text, context)
            assert verdict.action == SafetyAction.BLOCK
            assert verdict.severity == Severity.CRITICAL

    def test_ignoring_pain(self):
        verdict = validate_text_output("No pain no gain, keep pushing!")
        assert verdict.action == SafetyAction.BLOCK
        assert verdict.severity == Severity.HIGH
        assert verdict.safe_content == SAFE_FALLBACK_MESSAGES["unsafe_exercise"]
        assert verdict.should_escalate is False

    def test_sexualized_language(self):
        verdict = validate_text_output("Let's get you that bikini body!")
        assert verdict.safe_content == SAFE_FALLBACK_MESSAGES["inappropriate"]

    def test_excessive_intensity(self):
        verdict = validate_text_output("Go all out on every set.")
        assert verdict.action == SafetyAction.BLOCK
        assert verdict.safe_content == SAFE_FALLBACK_MESSAGES["intensity_warning"]

    def test_non_acceptable_medical_advice_blocks_and_escalates(self):
        verdict = validate_text_output("This sounds like arthritis.")
        assert verdict.action == SafetyAction.BLOCK
        assert verdict.severity == Severity.HIGH
        assert verdict.medical_advice_detected is True
        assert verdict.should_escalate is True
        assert verdict.reason == "Blocked medical advice: Attempting to diagnose a condition"
        assert verdict.safe_content == SAFE_FALLBACK_MESSAGES["medical_advice"]

    def test_diagnosis_guess_is_not_excused_by_doctor_referral(self):
        verdict = validate_text_output("This could be ordinary stiffness. Talk to your doctor if it persists.")
        assert verdict.action == SafetyAction.BLOCK
        assert verdict.severity == Severity.HIGH
        assert verdict.should_escalate is True
        assert verdict.safe_content == SAFE_FALLBACK_MESSAGES["medical_advice"]

    def test_dosage_with_listen_to_your_body_is_blocked(self):
        text = "Take 400 mg of ibuprofen twice a day before your walk. Listen to your body."
        verdict = validate_text_output(text)
        assert verdict.action == SafetyAction.BLOCK
        assert verdict.reason == "Blocked medical advice: Discussing medication dosages"
        assert verdict.safe_content == SAFE_FALLBACK_MESSAGES["medical_advice"]
        assert "400 mg" not in verdict.safe_content
        assert verdict.should_escalate is True

    def test_high_age_aware_rule_blocks(self):
        context = SafetyContext(user_age=72, activity_level="sedentary")
        verdict = validate_text_output("Try some high-intensity intervals today.", context)
        assert verdict.action == SafetyAction.BLOCK
        assert verdict.reason.startswith("Blocked by age-aware safety rules:")
        assert verdict.safe_content == SAFE_FALLBACK_MESSAGES["intensity_warning"]
        assert verdict.should_escalate is False

    def test_same_text_without_context_is_allowed(self):
        verdict = validate_text_output("Try some high-intensity intervals today.")
        assert verdict.action == SafetyAction.ALLOW

    def test_block_wins_over_modify(self):
        verdict = validate_text_output("Guaranteed results if you ignore the pain.")
        assert verdict.action == SafetyAction.BLOCK
        assert "Making unrealistic promises about results" in verdict.triggered_rules


class TestEngineContract:
    def test_pure_function(self):
        context = SafetyContext(user_age=70, limitations=("knee pain",), pain_increasing=True)
        text = "You're ready to progress, guaranteed!"
        assert validate_text_output(text, context) == validate_text_output(text, context)

    def test_empty_text(self):
        verdict = validate_text_output("")
        assert verdict.action == SafetyAction.ALLOW
        assert verdict.safe_content == ""

    def test_rejects_non_text(self):
        with pytest.raises(ValidationFailure):
            validate_text_output(None)  # type: ignore[arg-type]

    def test_quick_safety_check(self):
        assert quick_safety_check("Lovely work this morning.") is True
        assert quick_safety_check("You have a disorder.") is False
        assert quick_safety_check("Guaranteed to help.") is False


class TestValidatePlanOutput:
    def test_starter_plan_text_is_allowed(self, healthy_profile, catalog, start_date):
        plan = build_starter_plan(healthy_profile, catalog=catalog, today=start_date)
        context = SafetyContext(
            user_age=healthy_profile.age,
            limitations=healthy_profile.limitation_flags,
            activity_level=healthy_profile.activity_level,
        )
        verdict = validate_plan_output(plan, context)
        assert verdict.action == SafetyAction.ALLOW
