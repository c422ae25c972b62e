"""Adherence summaries derived from session check-ins.

Summaries are computed on demand from check-in history and never cached.
The planner reads them to decide whether progression is appropriate; the
safety engine reads them through SafetyContext.from_adherence.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Literal

AdherenceStatus = Literal[
    "completed-full",
    "completed-modified",
    "completed-partial",
    "skipped-planned",
    "skipped-unplanned",
]
CheckinDifficulty = Literal["too_easy", "just_right", "too_hard", "varied"]
PainLevel = Literal["none", "mild", "moderate", "severe"]
EnergyLevel = Literal["very_low", "low", "moderate", "high", "very_high"]
MotivationTrend = Literal["increasing", "stable", "decreasing"]
RiskLevel = Literal["low", "medium", "high"]

COMPLETED_STATUSES = frozenset({"completed-full", "completed-modified", "completed-partial"})

DIFFICULTY_SCORES: dict[str, int] = {"too_easy": 2, "just_right": 3, "too_hard": 4, "varied": 3}
PAIN_SCORES: dict[str, int] = {"none": 0, "mild": 1, "moderate": 2, "severe": 3}
ENERGY_SCORES: dict[str, int] = {"very_low": 1, "low": 2, "moderate": 3, "high": 4, "very_high": 5}

FREQUENT_THRESHOLD = 2


@dataclass(frozen=True)
class MovementModification:
    movement_id: str
    modification_type: str


@dataclass(frozen=True)
class SessionCheckin:
    """Post-session check-in submitted by the user."""

    session_id: str
    date: date
    adherence: AdherenceStatus
    difficulty: CheckinDifficulty = "just_right"
    pain_level: PainLevel = "none"
    pain_locations: tuple[str, ...] = ()
    energy_before: EnergyLevel | None = None
    energy_after: EnergyLevel | None = None
    modifications: tuple[MovementModification, ...] = ()


@dataclass(frozen=True)
class FrequentModification:
    movement_id: str
    modification_type: str
    count: int


@dataclass(frozen=True)
class AdherenceSummary:
    """Rolling aggregate over check-ins in a window.

    Attributes:
        adherence_rate: Completed check-ins / all check-ins in the window
        average_difficulty: 1-5 scale, 3 is neutral
        trending_easier: Second half of the window felt easier than the first
        average_pain_level: 0 (none) to 3 (severe)
        pain_increasing: Second half of the window reported more pain
        recent_skip_streak: Consecutive skipped check-ins counting back from the latest
        risk_score: Drop-off risk in [0, 1]
    """

    user_id: str
    period_start: date
    period_end: date
    sessions_completed: int = 0
    sessions_planned: int = 0
    adherence_rate: float = 0.0
    average_difficulty: float = 3.0
    trending_easier: bool = False
    average_pain_level: float = 0.0
    pain_increasing: bool = False
    frequent_pain_locations: tuple[str, ...] = ()
    average_energy_before: float = 3.0
    average_energy_after: float = 3.0
    frequent_modifications: tuple[FrequentModification, ...] = ()
    recent_skip_streak: int = 0
    motivation_trend: MotivationTrend = "stable"
    risk_score: float = 0.0


@dataclass(frozen=True)
class DropoffRisk:
    risk_level: RiskLevel
    risk_score: float
    factors: tuple[str, ...]
    recommendations: tuple[str, ...]


def _mean(values: list[int]) -> float:
    return sum(values) / len(values)


def _halves(values: list[int]) -> tuple[list[int], list[int]]:
    half = len(values) // 2
    return values[:half], values[half:]


def compute_adherence_summary(
    user_id: str,
    checkins: list[SessionCheckin],
    period_start: date,
    period_end: date,
) -> AdherenceSummary:
    """Aggregate check-ins dated within [period_start, period_end].

    Trends compare the mean of the first half of the window against the
    second half, in date order. An empty window yields a neutral summary.

    Args:
        user_id: Owning user identifier
        checkins: Check-in history (any order, any dates)
        period_start: First day of the window, inclusive
        period_end: Last day of the window, inclusive

    Returns:
        AdherenceSummary for the window
    """
    window = sorted(
        (c for c in checkins if period_start <= c.date <= period_end),
        key=lambda c: c.date,
    )
    if not window:
        return AdherenceSummary(user_id=user_id, period_start=period_start, period_end=period_end)

    completed = sum(1 for c in window if c.adherence in COMPLETED_STATUSES)
    adherence_rate = completed / len(window)

    difficulty_scores = [DIFFICULTY_SCORES[c.difficulty] for c in window]
    first, second = _halves(difficulty_scores)
    trending_easier = bool(first and second) and _mean(second) < _mean(first)

    pain_scores = [PAIN_SCORES[c.pain_level] for c in window]
    first, second = _halves(pain_scores)
    pain_increasing = bool(first and second) and _mean(second) > _mean(first)

    location_counts = Counter(loc for c in window for loc in c.pain_locations)
    frequent_locations = tuple(loc for loc, count in location_counts.items() if count >= FREQUENT_THRESHOLD)

    energy_before = [ENERGY_SCORES[c.energy_before] for c in window if c.energy_before]
    energy_after = [ENERGY_SCORES[c.energy_after] for c in window if c.energy_after]
    average_energy_before = _mean(energy_before) if energy_before else 3.0
    average_energy_after = _mean(energy_after) if energy_after else 3.0

    modification_counts = Counter((m.movement_id, m.modification_type) for c in window for m in c.modifications)
    frequent_modifications = tuple(
        FrequentModification(movement_id=movement_id, modification_type=kind, count=count)
        for (movement_id, kind), count in modification_counts.most_common()
        if count >= FREQUENT_THRESHOLD
    )

    skip_streak = 0
    for checkin in reversed(window):
        if not checkin.adherence.startswith("skipped"):
            break
        skip_streak += 1

    average_difficulty = _mean(difficulty_scores)
    average_pain = _mean(pain_scores)

    risk_score = 0.0
    if adherence_rate < 0.5:
        risk_score += 0.3
    if skip_streak >= 2:
        risk_score += 0.2
    if average_pain > 1.5:
        risk_score += 0.2
    if average_difficulty > 3.5:
        risk_score += 0.15
    if average_energy_before < 2.5:
        risk_score += 0.15
    risk_score = min(risk_score, 1.0)

    motivation_trend: MotivationTrend = "stable"
    if adherence_rate > 0.8 and not trending_easier:
        motivation_trend = "increasing"
    if adherence_rate < 0.5 or skip_streak >= 3:
        motivation_trend = "decreasing"

    return AdherenceSummary(
        user_id=user_id,
        period_start=period_start,
        period_end=period_end,
        sessions_completed=completed,
        sessions_planned=len(window),
        adherence_rate=adherence_rate,
        average_difficulty=average_difficulty,
        trending_easier=trending_easier,
        average_pain_level=average_pain,
        pain_increasing=pain_increasing,
        frequent_pain_locations=frequent_locations,
        average_energy_before=average_energy_before,
        average_energy_after=average_energy_after,
        frequent_modifications=frequent_modifications,
        recent_skip_streak=skip_streak,
        motivation_trend=motivation_trend,
        risk_score=risk_score,
    )


def recent_adherence_summary(
    user_id: str,
    checkins: list[SessionCheckin],
    days: int = 30,
    today: date | None = None,
) -> AdherenceSummary:
    """Summary over the last `days` days ending today."""
    end = today or date.today()
    return compute_adherence_summary(user_id, checkins, end - timedelta(days=days), end)


def assess_dropoff_risk(summary: AdherenceSummary) -> DropoffRisk:
    """Turn a summary into a risk level with human-readable factors.

    Levels: high at risk_score >= 0.6, medium at >= 0.3, low otherwise.
    """
    factors: list[str] = []
    recommendations: list[str] = []

    if summary.adherence_rate < 0.5:
        factors.append("Low adherence rate")
        recommendations.append("Consider reducing session frequency or duration")
    if summary.recent_skip_streak >= 2:
        factors.append("Recent skip streak")
        recommendations.append("Check in with user about barriers")
    if summary.average_pain_level > 1.5:
        factors.append("Elevated pain levels")
        recommendations.append("Review exercises for pain-causing movements")
    if summary.average_difficulty > 3.5:
        factors.append("Sessions too challenging")
        recommendations.append("Consider regressions or easier variations")
    if summary.average_energy_before < 2.5:
        factors.append("Low energy levels")
        recommendations.append("Suggest shorter sessions or different time of day")

    risk_level: RiskLevel = "low"
    if summary.risk_score >= 0.6:
        risk_level = "high"
    elif summary.risk_score >= 0.3:
        risk_level = "medium"

    return DropoffRisk(
        risk_level=risk_level,
        risk_score=summary.risk_score,
        factors=tuple(factors),
        recommendations=tuple(recommendations),
    )
