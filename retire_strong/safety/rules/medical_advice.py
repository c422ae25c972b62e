"""Medical-advice detection.

A disallowed pattern marks diagnostic or prescriptive phrasing. The
allow-list holds safety-oriented phrasing ("consult your doctor", "exercises
that may help reduce discomfort"). An allow-list match only covers the
disallowed phrasing it overlaps, so "listen to your body" at the end of a
reply does not excuse a dosage earlier in it. Text is non-acceptable medical
advice when any disallowed match is left uncovered.
"""

import re
from dataclasses import dataclass
from typing import Literal

MedicalAdviceKind = Literal["diagnosis", "treatment", "prescription", "symptom-analysis"]


@dataclass(frozen=True)
class MedicalAdviceRule:
    id: str
    pattern: re.Pattern[str]
    kind: MedicalAdviceKind
    description: str


@dataclass(frozen=True)
class MedicalAdviceResult:
    """Outcome of medical-advice detection.

    Attributes:
        detected: At least one disallowed pattern matched
        rules: Disallowed rules that matched, in table order
        acceptable: Every disallowed match is covered by an overlapping
            allow-list match; with no disallowed match, any allow-list match
    """

    detected: bool
    rules: tuple[MedicalAdviceRule, ...]
    acceptable: bool

    @property
    def non_acceptable(self) -> bool:
        return self.detected and not self.acceptable


def _rule(rule_id: str, pattern: str, kind: MedicalAdviceKind, description: str) -> MedicalAdviceRule:
    return MedicalAdviceRule(id=rule_id, pattern=re.compile(pattern, re.IGNORECASE), kind=kind, description=description)


MEDICAL_ADVICE_RULES: tuple[MedicalAdviceRule, ...] = (
    _rule(
        "diagnosis-guess",
        r"\b(you (probably|likely|might) have|this (sounds like|could be)|I (think|believe) you have)\b",
        "diagnosis",
        "Attempting to diagnose a condition",
    ),
    _rule(
        "condition-identification",
        r"\b(symptoms of|signs of|indicates|suggests) \w+ (disease|disorder|condition|syndrome)\b",
        "diagnosis",
        "Identifying specific medical conditions",
    ),
    _rule(
        "medication-recommendation",
        r"\b(you should (take|use|try)|I recommend (taking|using)) \w+ (medication|drug|medicine)\b",
        "prescription",
        "Recommending specific medications",
    ),
    _rule(
        "dosage",
        r"\b(dosage|dose|how much to take|milligrams|mg|prescription)\b",
        "prescription",
        "Discussing medication dosages",
    ),
    _rule(
        "symptom-cause",
        r"\b(this pain means|your pain is (from|caused by)|indicates (a|an) \w+ problem)\b",
        "symptom-analysis",
        "Diagnosing cause of symptoms",
    ),
    _rule(
        "medical-outcome-promise",
        r"\b(this exercise will (cure|fix|treat|heal) (your )?(pain|injury|condition))\b",
        "treatment",
        "Promising medical outcomes from exercise",
    ),
    _rule(
        "discourages-doctor",
        r"\b(you (don't|do not) need to see a doctor|no need for (a )?doctor)\b",
        "treatment",
        "Advising against medical consultation",
    ),
)

ACCEPTABLE_MEDICAL_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"\b(if you experience pain|stop if (you feel )?pain|listen to your body)\b",
        r"\b(consult (with )?(your )?doctor|talk to (your )?doctor|see (your )?doctor)\b",
        r"\b(before starting|check with (your )?doctor first)\b",
        r"\b(general (wellness|fitness|exercise) guidance)\b",
        r"\b(exercises? (to|that|can|may) (help|reduce|improve|manage|alleviate|relieve|soothe) "
        r"(pain|discomfort|stiffness|soreness))\b",
        r"\b(movements? (to|that|can|may) (help|reduce|improve|manage|alleviate|relieve|soothe) "
        r"(pain|discomfort|stiffness|soreness))\b",
        r"\b(stretches? (to|that|can|may) (help|reduce|improve|manage|alleviate|relieve|soothe) "
        r"(pain|discomfort|stiffness|soreness))\b",
        r"\b(what exercises? can (help|support|improve) (my|the) knee)\b",
    )
)


def detect_medical_advice(text: str) -> MedicalAdviceResult:
    """Match text against the disallowed set and the allow-list."""
    matched = tuple(rule for rule in MEDICAL_ADVICE_RULES if rule.pattern.search(text))
    allowed = [m.span() for pattern in ACCEPTABLE_MEDICAL_PATTERNS for m in pattern.finditer(text)]
    if matched:
        acceptable = all(_covered(rule, text, allowed) for rule in matched)
    else:
        acceptable = bool(allowed)
    return MedicalAdviceResult(detected=bool(matched), rules=matched, acceptable=acceptable)


def _covered(rule: MedicalAdviceRule, text: str, allowed: list[tuple[int, int]]) -> bool:
    """True when every match of the rule overlaps an allow-list match."""
    return all(
        any(start < allowed_end and allowed_start < end for allowed_start, allowed_end in allowed)
        for start, end in (m.span() for m in rule.pattern.finditer(text))
    )
