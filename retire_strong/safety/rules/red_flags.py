"""Red-flag phrase rules for coaching text.

Rules are data: each entry names a pattern, a category and a severity, and
is evaluated in table order. Adding a rule is a table change, not a code
change.

Medium-severity rules also carry phrase replacements. The sanitizer uses
them to rewrite every matched phrase, so the flagged wording never reaches
the user verbatim.
"""

import re
from dataclasses import dataclass, field

from retire_strong.safety.types import RedFlagCategory, Severity

_FLAGS = re.IGNORECASE


@dataclass(frozen=True)
class RedFlagRule:
    """One red-flag pattern.

    Attributes:
        id: Stable rule identifier (recorded in audit entries)
        pattern: Compiled case-insensitive pattern
        category: Red-flag category
        severity: Severity contributed when the pattern matches
        description: Human-readable description, used in block reasons
        replacements: (phrase pattern, replacement) pairs tried against each match
        default_replacement: Used when no phrase pattern fits a match
    """

    id: str
    pattern: re.Pattern[str]
    category: RedFlagCategory
    severity: Severity
    description: str
    replacements: tuple[tuple[re.Pattern[str], str], ...] = field(default_factory=tuple)
    default_replacement: str = ""

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


def _rule(
    rule_id: str,
    pattern: str,
    category: RedFlagCategory,
    severity: Severity,
    description: str,
    replacements: tuple[tuple[str, str], ...] = (),
    default_replacement: str = "",
) -> RedFlagRule:
    return RedFlagRule(
        id=rule_id,
        pattern=re.compile(pattern, _FLAGS),
        category=category,
        severity=severity,
        description=description,
        replacements=tuple((re.compile(phrase, _FLAGS), text) for phrase, text in replacements),
        default_replacement=default_replacement,
    )


RED_FLAG_RULES: tuple[RedFlagRule, ...] = (
    # Medical diagnosis and treatment
    _rule(
        "medical-diagnosis",
        r"\b(you have|diagnosed with|I diagnose|medical condition|disease|illness|disorder)\b",
        RedFlagCategory.MEDICAL_DIAGNOSIS,
        Severity.CRITICAL,
        "Attempting to provide medical diagnosis",
    ),
    _rule(
        "medical-prescription",
        r"\b(prescribe|prescription|medication|drug|medicine|treatment plan)\b",
        RedFlagCategory.MEDICAL_DIAGNOSIS,
        Severity.CRITICAL,
        "Attempting to prescribe treatment or medication",
    ),
    _rule(
        "doctor-referral",
        r"\b(consult (your )?doctor|see (your )?doctor|talk to (your )?doctor)\b",
        RedFlagCategory.MEDICAL_DIAGNOSIS,
        Severity.LOW,
        "Recommending doctor consultation (acceptable)",
    ),
    _rule(
        "pain-masking-medication",
        r"\b(take (ibuprofen|advil|tylenol|aspirin) (and|then) exercise)\b",
        RedFlagCategory.MEDICAL_DIAGNOSIS,
        Severity.CRITICAL,
        "Recommending medication to mask pain",
    ),
    # Unsafe exercise instructions
    _rule(
        "ignore-pain",
        r"\b(ignore (the )?pain|push through (the )?pain|no pain no gain)\b",
        RedFlagCategory.UNSAFE_EXERCISE,
        Severity.HIGH,
        "Encouraging users to ignore pain",
    ),
    _rule(
        "excessive-intensity",
        r"\b(maximum effort|go all out|push to (the )?limit|exhaust yourself)\b",
        RedFlagCategory.UNSAFE_EXERCISE,
        Severity.HIGH,
        "Encouraging excessive intensity for older adults",
    ),
    _rule(
        "pain-normalizing",
        r"\b(pain is (normal|fine|good)|pain means (progress|it's working))\b",
        RedFlagCategory.UNSAFE_EXERCISE,
        Severity.HIGH,
        "Normalizing or encouraging pain during exercise",
    ),
    _rule(
        "skip-warm-up",
        r"\b(skip warm[- ]?up|no need to warm up)\b",
        RedFlagCategory.UNSAFE_EXERCISE,
        Severity.MEDIUM,
        "Suggesting to skip warm-up",
        default_replacement="start with a gentle warm-up",
    ),
    _rule(
        "overtraining",
        r"\b(every day|daily without (rest|break)|never skip|always do)\b",
        RedFlagCategory.UNSAFE_EXERCISE,
        Severity.MEDIUM,
        "Encouraging overtraining or insufficient rest",
        replacements=(
            (r"every day", "on most days"),
            (r"daily without (rest|break)", "with rest days"),
            (r"never skip", "try not to skip"),
            (r"always do", "aim to do"),
        ),
    ),
    # Over-promising results
    _rule(
        "unrealistic-promise",
        r"\b(guaranteed|promise|definitely will|definitely|100% effective|miracle|cure)\b",
        RedFlagCategory.OVER_PROMISING,
        Severity.MEDIUM,
        "Making unrealistic promises about results",
        replacements=(
            (r"guaranteed", "may help"),
            (r"promise", "hope"),
            (r"definitely will", "may"),
            (r"definitely", "likely"),
            (r"100% effective", "effective for many people"),
            (r"miracle", "helpful"),
            (r"cure", "ease"),
        ),
    ),
    _rule(
        "anti-aging-claim",
        r"\b(reverse aging|anti[- ]?aging|look (10|20) years younger)\b",
        RedFlagCategory.OVER_PROMISING,
        Severity.MEDIUM,
        "Making anti-aging claims",
        replacements=(
            (r"reverse aging", "support healthy aging"),
            (r"anti[- ]?aging", "healthy aging"),
            (r"look (10|20) years younger", "feel more energetic"),
        ),
    ),
    _rule(
        "unrealistic-timeline",
        r"\b(in (just )?\d+ days|within a week|overnight results|instant)\b",
        RedFlagCategory.OVER_PROMISING,
        Severity.MEDIUM,
        "Promising unrealistic timelines for results",
        replacements=(
            (r"in (just )?\d+ days", "over time"),
            (r"within a week", "gradually"),
            (r"overnight results", "steady results"),
            (r"instant", "gradual"),
        ),
    ),
    # Fear-based messaging
    _rule(
        "fear-of-harm",
        r"\b(you will fall|you will get hurt|you will die|risk of death)\b",
        RedFlagCategory.FEAR_BASED,
        Severity.MEDIUM,
        "Using fear-based messaging",
        replacements=(
            (r"you will fall", "to help prevent falls"),
            (r"you will get hurt", "you could strain something"),
            (r"you will die", "your health matters"),
            (r"risk of death", "health risks"),
        ),
    ),
    # Urgency runs before the ageist rule so "before it's too late" is rewritten whole
    _rule(
        "urgency-pressure",
        r"\b(before it's too late|while you still can|running out of time)\b",
        RedFlagCategory.FEAR_BASED,
        Severity.MEDIUM,
        "Using urgency-based fear tactics",
        replacements=(
            (r"before it's too late", "when you're ready"),
            (r"while you still can", "at your own pace"),
            (r"running out of time", "taking your time"),
        ),
    ),
    _rule(
        "discouraging-language",
        r"\b(too old|too late|you can't|you won't be able to)\b",
        RedFlagCategory.FEAR_BASED,
        Severity.MEDIUM,
        "Discouraging or ageist language",
        replacements=(
            (r"too old", "starting gradually is important"),
            (r"too late", "a good time to start"),
            (r"you can't", "you may not yet"),
            (r"you won't be able to", "you may find it harder to"),
        ),
    ),
    _rule(
        "adherence-pressure",
        r"\b(you must|you have to|you need to|no excuses)\b",
        RedFlagCategory.FEAR_BASED,
        Severity.MEDIUM,
        "Applying excessive pressure that may harm motivation",
        replacements=(
            (r"you must", "you might"),
            (r"you have to", "you could"),
            (r"you need to", "it may help to"),
            (r"no excuses", "be kind to yourself"),
        ),
    ),
    # Inappropriate content
    _rule(
        "sexualized-language",
        r"\b(sexy|sexual|hot body|bikini body)\b",
        RedFlagCategory.INAPPROPRIATE,
        Severity.HIGH,
        "Inappropriate or sexualized language",
    ),
    _rule(
        "patronizing-age-language",
        r"\b(for someone your age|at your age|elderly|senior citizen|old people)\b",
        RedFlagCategory.INAPPROPRIATE,
        Severity.MEDIUM,
        "Potentially ageist or patronizing language",
        replacements=(
            (r"for someone your age", "for you"),
            (r"at your age", "right now"),
            (r"elderly", "older adults"),
            (r"senior citizen", "older adult"),
            (r"old people", "older adults"),
        ),
    ),
    _rule(
        "comparison",
        r"\b(keep up with|as good as|better than|compete with)\b",
        RedFlagCategory.INAPPROPRIATE,
        Severity.LOW,
        "Encouraging unhealthy comparison or competition",
    ),
)


def detect_red_flags(text: str, rules: tuple[RedFlagRule, ...] = RED_FLAG_RULES) -> list[RedFlagRule]:
    """Return every rule whose pattern matches, in table order."""
    return [rule for rule in rules if rule.matches(text)]
