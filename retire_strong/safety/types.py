"""Safety engine types.

SafetyContext carries the user signals the age-aware rules read.
SafetyVerdict is the engine's decision about one piece of text. Verdicts are
produced and consumed within a single request; they persist only as audit
records.
"""

from dataclasses import dataclass, field
from enum import StrEnum

from retire_strong.planning.adherence import AdherenceSummary


class Severity(StrEnum):
    """Ordered severity: low < medium < high < critical."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @classmethod
    def highest(cls, severities: list["Severity"]) -> "Severity":
        return max(severities, key=lambda s: s.rank, default=cls.LOW)


_SEVERITY_RANK = {Severity.LOW: 0, Severity.MEDIUM: 1, Severity.HIGH: 2, Severity.CRITICAL: 3}


class SafetyAction(StrEnum):
    ALLOW = "allow"
    MODIFY = "modify"
    BLOCK = "block"
    # Reserved for callers that route escalations separately. The engine itself
    # signals escalation through SafetyVerdict.should_escalate.
    ESCALATE = "escalate"


class RedFlagCategory(StrEnum):
    MEDICAL_DIAGNOSIS = "medical-diagnosis"
    UNSAFE_EXERCISE = "unsafe-exercise"
    OVER_PROMISING = "over-promising"
    FEAR_BASED = "fear-based"
    INAPPROPRIATE = "inappropriate"


@dataclass(frozen=True)
class SafetyContext:
    """User signals for the age-aware rules.

    Exercise signals (intensity, balance, impact) describe the text being
    validated. Left as None they are inferred from the text itself.

    Attributes:
        user_age: Age in years
        limitations: Health conditions and mobility limitations
        activity_level: Profile activity level; "sedentary" marks a new exerciser
        is_new_user: Fewer than two weeks of activity
        exercise_intensity: low, moderate or high
        balance_required: Text describes unsupported balance work
        impact_level: low, moderate or high
        recent_pain_level: Average reported pain, 0-3
        recent_skip_streak: Consecutive skipped sessions
        adherence_rate: Completion rate, 0-1
        pain_increasing: Pain trending up across the window
        frequent_pain_locations: Locations reported at least twice
        avg_difficulty: Average reported difficulty, 1-5
    """

    user_age: int | None = None
    limitations: tuple[str, ...] = ()
    activity_level: str | None = None
    is_new_user: bool | None = None
    exercise_intensity: str | None = None
    balance_required: bool | None = None
    impact_level: str | None = None
    recent_pain_level: float | None = None
    recent_skip_streak: int | None = None
    adherence_rate: float | None = None
    pain_increasing: bool | None = None
    frequent_pain_locations: tuple[str, ...] = ()
    avg_difficulty: float | None = None

    @classmethod
    def from_adherence(
        cls,
        summary: AdherenceSummary | None,
        *,
        user_age: int | None = None,
        limitations: tuple[str, ...] = (),
        activity_level: str | None = None,
        is_new_user: bool | None = None,
    ) -> "SafetyContext":
        """Build a context from profile fields plus an adherence summary."""
        if summary is None or summary.sessions_planned == 0:
            return cls(
                user_age=user_age,
                limitations=limitations,
                activity_level=activity_level,
                is_new_user=is_new_user,
            )
        return cls(
            user_age=user_age,
            limitations=limitations,
            activity_level=activity_level,
            is_new_user=is_new_user,
            recent_pain_level=summary.average_pain_level,
            recent_skip_streak=summary.recent_skip_streak,
            adherence_rate=summary.adherence_rate,
            pain_increasing=summary.pain_increasing,
            frequent_pain_locations=summary.frequent_pain_locations,
            avg_difficulty=summary.average_difficulty,
        )


@dataclass(frozen=True)
class SafetyVerdict:
    """Decision for one piece of user-visible text.

    Attributes:
        action: allow, modify or block
        original_content: Text as submitted
        safe_content: Text the user may see (verbatim, rewritten or a fallback)
        triggered_rules: Descriptions of red flags and medical patterns, names of failed age-aware rules
        red_flags: Categories of the red flags that matched
        severity: Maximum severity across everything that triggered
        reason: Why the text was blocked or modified
        should_escalate: Queue for human review; does not change what the user sees
        medical_advice_detected: A disallowed medical-advice pattern matched
    """

    action: SafetyAction
    original_content: str
    safe_content: str
    severity: Severity = Severity.LOW
    triggered_rules: tuple[str, ...] = field(default_factory=tuple)
    red_flags: tuple[RedFlagCategory, ...] = field(default_factory=tuple)
    reason: str | None = None
    should_escalate: bool = False
    medical_advice_detected: bool = False

    @property
    def safe(self) -> bool:
        return self.action in (SafetyAction.ALLOW, SafetyAction.MODIFY)

    @property
    def intervened(self) -> bool:
        return self.action != SafetyAction.ALLOW or self.should_escalate or bool(self.red_flags)
