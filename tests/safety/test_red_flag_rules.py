"""Tests for red-flag detection and phrase rewriting."""

from retire_strong.safety.fallbacks import MODIFY_DISCLAIMER, SAFE_FALLBACK_MESSAGES, get_fallback_message
from retire_strong.safety.rules.red_flags import RED_FLAG_RULES, detect_red_flags
from retire_strong.safety.sanitizer import sanitize_text
from retire_strong.safety.types import RedFlagCategory, Severity


def _ids(text: str) -> list[str]:
    return [rule.id for rule in detect_red_flags(text)]


class TestDetectRedFlags:
    """Pattern matching over the rule table."""

    def test_rule_ids_are_unique(self):
        ids = [rule.id for rule in RED_FLAG_RULES]
        assert len(ids) == len(set(ids))

    def test_clean_text(self):
        assert detect_red_flags("Nice work finishing your session. See you Thursday!") == []

    def test_matching_is_case_insensitive(self):
        assert _ids("NO PAIN NO GAIN") == ["ignore-pain"]

    def test_results_follow_table_order(self):
        assert _ids("Guaranteed results, you must keep going every day") == [
            "overtraining",
            "unrealistic-promise",
            "adherence-pressure",
        ]

    def test_critical_diagnosis(self):
        (rule,) = detect_red_flags("It sounds like a disease of the joints.")
        assert rule.severity == Severity.CRITICAL
        assert rule.category == RedFlagCategory.MEDICAL_DIAGNOSIS

    def test_pain_masking_medication(self):
        assert "pain-masking-medication" in _ids("Just take ibuprofen and exercise anyway.")

    def test_doctor_referral_is_low(self):
        (rule,) = detect_red_flags("Please talk to your doctor about this.")
        assert rule.id == "doctor-referral"
        assert rule.severity == Severity.LOW

    def test_word_boundaries(self):
        """'cure' inside 'secure' is not a promise."""
        assert _ids("Make sure the chair is secure.") == []


class TestSanitizeText:
    """Medium-severity phrase rewriting."""

    def test_rewrites_every_flagged_phrase(self):
        text = "This will definitely cure your arthritis, guaranteed"
        sanitized = sanitize_text(text, detect_red_flags(text))
        assert sanitized == "This will likely ease your arthritis, may help" + MODIFY_DISCLAIMER

    def test_preserves_leading_capital(self):
        text = "You must never skip a session."
        sanitized = sanitize_text(text, detect_red_flags(text))
        assert sanitized.startswith("You might try not to skip a session.")

    def test_urgency_is_rewritten_whole(self):
        text = "Start now, before it's too late."
        sanitized = sanitize_text(text, detect_red_flags(text))
        assert sanitized.startswith("Start now, when you're ready.")
        assert "too late" not in sanitized

    def test_default_replacement(self):
        text = "You can skip warm-up today."
        sanitized = sanitize_text(text, detect_red_flags(text))
        assert sanitized.startswith("You can start with a gentle warm-up today.")

    def test_non_medium_flags_are_left_alone(self):
        text = "Talk to your doctor first."
        assert sanitize_text(text, detect_red_flags(text)) == text + MODIFY_DISCLAIMER


class TestFallbackMessages:
    def test_keyword_mapping(self):
        assert get_fallback_message("Blocked medical advice: x") == SAFE_FALLBACK_MESSAGES["medical_advice"]
        assert get_fallback_message("Encouraging users to ignore pain") == SAFE_FALLBACK_MESSAGES["unsafe_exercise"]
        assert get_fallback_message("Making unrealistic promising claims") == SAFE_FALLBACK_MESSAGES["over_promising"]
        assert get_fallback_message("Inappropriate or sexualized language") == SAFE_FALLBACK_MESSAGES["inappropriate"]
        assert get_fallback_message("Users 70+ should avoid high intensity") == SAFE_FALLBACK_MESSAGES["intensity_warning"]

    def test_default(self):
        assert get_fallback_message(None) == SAFE_FALLBACK_MESSAGES["default"]
        assert get_fallback_message("something else") == SAFE_FALLBACK_MESSAGES["default"]

    def test_medical_wins_over_pain(self):
        assert get_fallback_message("medical pain") == SAFE_FALLBACK_MESSAGES["medical_advice"]
