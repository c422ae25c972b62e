"""Tests for medical-advice detection."""

import pytest

from retire_strong.safety.rules.medical_advice import detect_medical_advice


class TestDetectMedicalAdvice:
    @pytest.mark.parametrize(
        ("text", "rule_id"),
        [
            ("You probably have tendinitis.", "diagnosis-guess"),
            ("Those are signs of heart disease.", "condition-identification"),
            ("I recommend taking allergy medication before walks.", "medication-recommendation"),
            ("Start with 500 milligrams twice a day.", "dosage"),
            ("Your pain is caused by weak hips.", "symptom-cause"),
            ("This exercise will fix your injury.", "medical-outcome-promise"),
            ("You don't need to see a doctor for that.", "discourages-doctor"),
        ],
    )
    def test_disallowed_patterns(self, text, rule_id):
        result = detect_medical_advice(text)
        assert result.detected is True
        assert rule_id in [rule.id for rule in result.rules]
        assert result.non_acceptable is True

    def test_allow_list_does_not_excuse_separate_advice(self):
        result = detect_medical_advice("This could be ordinary stiffness. Talk to your doctor if it persists.")
        assert result.detected is True
        assert result.acceptable is False
        assert result.non_acceptable is True

    def test_dosage_next_to_safety_phrase_is_non_acceptable(self):
        result = detect_medical_advice("Take 400 mg of ibuprofen twice a day before your walk. Listen to your body.")
        assert [rule.id for rule in result.rules] == ["dosage"]
        assert result.non_acceptable is True

    def test_safety_phrase_alone_is_acceptable(self):
        result = detect_medical_advice("If you experience pain, stop and talk to your doctor.")
        assert result.detected is False
        assert result.acceptable is True

    def test_supportive_exercise_language(self):
        result = detect_medical_advice("Here are gentle exercises that reduce stiffness in the morning.")
        assert result.detected is False
        assert result.acceptable is True

    def test_plain_coaching_text(self):
        result = detect_medical_advice("Great job finishing all three sessions this week!")
        assert result.detected is False
        assert result.rules == ()
