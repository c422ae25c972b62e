"""Age-aware contextual rules.

These rules only run when the caller supplies a SafetyContext. Each rule is
a predicate over the context and the signals found in the text; a predicate
returning False is a failed rule.

Exercise signals missing from the context are read from the text with
keyword patterns, so a reply that recommends jumping is judged as
high-impact even when the caller did not say so.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass

from retire_strong.planning.safety import normalize_condition
from retire_strong.safety.types import SafetyContext, Severity

_HIGH_INTENSITY = re.compile(
    r"\b(high[- ]intensity|vigorous(ly)?|hiit|sprint(s|ing)?|intense|all[- ]out|as fast as you can|"
    r"as hard as you can|max(imum)? effort)\b",
    re.IGNORECASE,
)
_MODERATE_INTENSITY = re.compile(r"\b(moderate[- ]intensity|brisk(ly)?|pick up the pace)\b", re.IGNORECASE)
_HIGH_IMPACT = re.compile(
    r"\b(jumping|jump(ing)? jacks|(box|tuck|squat) jumps?|jump (squats?|rope)|hopping|"
    r"running(?! (through|over|late|low|out))|jogging|go for a (run|jog)|plyometrics?|high[- ]impact|burpees?|"
    r"skipping rope)\b",
    re.IGNORECASE,
)
_BALANCE_WORK = re.compile(
    r"\b(balance|single[- ]leg|one leg|one foot|heel[- ]to[- ]toe|tandem (stance|walk))\b",
    re.IGNORECASE,
)
_SUPPORT = re.compile(r"\b(counter|chair|wall|railing|support(ed)?|hold on|holding on|sturdy)\b", re.IGNORECASE)
_PROGRESSION = re.compile(
    r"\b(progress(ion)?|harder|increase|add (more )?(weight|reps|sets)|level up|next level|challenge yourself)\b",
    re.IGNORECASE,
)

_JOINT_TERMS = ("knee", "hip", "joint")


@dataclass(frozen=True)
class TextSignals:
    """Exercise signals read from text.

    Attributes:
        intensity: "high", "moderate" or None
        impact_level: "high" or None
        balance_required: Text describes balance work with no support mentioned
        suggests_progression: Text asks the user to make things harder
    """

    intensity: str | None = None
    impact_level: str | None = None
    balance_required: bool = False
    suggests_progression: bool = False


def infer_text_signals(text: str) -> TextSignals:
    intensity = None
    if _HIGH_INTENSITY.search(text):
        intensity = "high"
    elif _MODERATE_INTENSITY.search(text):
        intensity = "moderate"
    return TextSignals(
        intensity=intensity,
        impact_level="high" if _HIGH_IMPACT.search(text) else None,
        balance_required=bool(_BALANCE_WORK.search(text)) and not _SUPPORT.search(text),
        suggests_progression=bool(_PROGRESSION.search(text)),
    )


@dataclass(frozen=True)
class ResolvedSignals:
    """Context values merged with text signals. Explicit context wins."""

    age: int
    limitations: tuple[str, ...]
    is_new_user: bool
    intensity: str
    impact_level: str
    balance_required: bool
    suggests_progression: bool
    recent_pain_level: float
    recent_skip_streak: int
    adherence_rate: float | None
    pain_increasing: bool
    frequent_pain_locations: tuple[str, ...]
    avg_difficulty: float

    def has_limitation(self, term: str) -> bool:
        return any(term in limitation for limitation in self.limitations)


def resolve_signals(context: SafetyContext, text: str) -> ResolvedSignals:
    inferred = infer_text_signals(text)
    is_new_user = context.is_new_user
    if is_new_user is None:
        is_new_user = context.activity_level == "sedentary"
    return ResolvedSignals(
        age=context.user_age or 0,
        limitations=tuple(normalize_condition(lim) for lim in context.limitations if lim.strip()),
        is_new_user=is_new_user,
        intensity=context.exercise_intensity or inferred.intensity or "low",
        impact_level=context.impact_level or inferred.impact_level or "low",
        balance_required=(
            context.balance_required if context.balance_required is not None else inferred.balance_required
        ),
        suggests_progression=inferred.suggests_progression,
        recent_pain_level=context.recent_pain_level or 0.0,
        recent_skip_streak=context.recent_skip_streak or 0,
        adherence_rate=context.adherence_rate,
        pain_increasing=bool(context.pain_increasing),
        frequent_pain_locations=tuple(normalize_condition(loc) for loc in context.frequent_pain_locations),
        avg_difficulty=context.avg_difficulty if context.avg_difficulty is not None else 3.0,
    )


@dataclass(frozen=True)
class AgeAwareRule:
    name: str
    description: str
    severity: Severity
    check: Callable[[ResolvedSignals], bool]


def _beginner_intensity(s: ResolvedSignals) -> bool:
    return not (s.age >= 60 and s.is_new_user and s.intensity == "high")


def _balance_progression(s: ResolvedSignals) -> bool:
    return not (s.age >= 65 and s.balance_required and s.has_limitation("balance"))


def _impact_level(s: ResolvedSignals) -> bool:
    has_joint_issue = any(s.has_limitation(term) for term in _JOINT_TERMS)
    return not (has_joint_issue and s.impact_level == "high")


def _escalating_pain(s: ResolvedSignals) -> bool:
    pain_flagged = s.pain_increasing or s.recent_pain_level >= 2
    pushes_harder = s.suggests_progression or s.intensity in ("moderate", "high")
    return not (pain_flagged and pushes_harder)


def _frequent_pain_location(s: ResolvedSignals) -> bool:
    for location in s.frequent_pain_locations:
        if not any(location in lim or lim in location for lim in s.limitations):
            return False
    return True


def _low_adherence(s: ResolvedSignals) -> bool:
    if s.adherence_rate is None or s.adherence_rate >= 0.5:
        return True
    return not (s.intensity == "high" or s.avg_difficulty > 3.5)


def _skip_streak(s: ResolvedSignals) -> bool:
    return not (s.recent_skip_streak >= 3 and s.intensity == "high")


def _age_70_intensity(s: ResolvedSignals) -> bool:
    return not (s.age >= 70 and s.intensity == "high")


def _age_75_balance_support(s: ResolvedSignals) -> bool:
    return not (s.age >= 75 and s.balance_required and not s.has_limitation("requires_support"))


def _adequate_rest(s: ResolvedSignals) -> bool:
    return not (s.age >= 65 and s.intensity == "high" and s.avg_difficulty > 4)


AGE_AWARE_RULES: tuple[AgeAwareRule, ...] = (
    AgeAwareRule(
        "max-intensity-for-beginners",
        "Users over 60 with no exercise history should start at low intensity",
        Severity.HIGH,
        _beginner_intensity,
    ),
    AgeAwareRule(
        "balance-progression",
        "Unsupported balance work is unsafe for users 65+ with balance limitations",
        Severity.HIGH,
        _balance_progression,
    ),
    AgeAwareRule(
        "impact-level-check",
        "High-impact exercises are unsafe for users with joint issues",
        Severity.HIGH,
        _impact_level,
    ),
    AgeAwareRule(
        "escalating-pain-check",
        "Halt progression if pain levels are increasing",
        Severity.HIGH,
        _escalating_pain,
    ),
    AgeAwareRule(
        "frequent-pain-location-check",
        "Avoid exercises targeting areas with frequent pain",
        Severity.MEDIUM,
        _frequent_pain_location,
    ),
    AgeAwareRule(
        "low-adherence-regression",
        "Reduce intensity if user is struggling with adherence",
        Severity.MEDIUM,
        _low_adherence,
    ),
    AgeAwareRule(
        "skip-streak-safety-pause",
        "After 3+ skipped sessions, restart with easier variation",
        Severity.MEDIUM,
        _skip_streak,
    ),
    AgeAwareRule(
        "age-70-plus-intensity-cap",
        "Users 70+ should avoid high intensity",
        Severity.HIGH,
        _age_70_intensity,
    ),
    AgeAwareRule(
        "age-75-plus-balance-support",
        "Balance work is unsafe for users 75+ without a support option",
        Severity.HIGH,
        _age_75_balance_support,
    ),
    AgeAwareRule(
        "adequate-rest-for-older-adults",
        "Users 65+ need adequate rest between high-intensity sessions",
        Severity.MEDIUM,
        _adequate_rest,
    ),
)


def evaluate_age_aware_rules(context: SafetyContext, text: str) -> list[AgeAwareRule]:
    """Return the rules that fail for this context and text, in table order."""
    signals = resolve_signals(context, text)
    return [rule for rule in AGE_AWARE_RULES if not rule.check(signals)]
