"""Safety validation engine.

Final authority over every user-visible text. Validation is a pure,
deterministic function of (text, context): no I/O, no clock, no randomness,
so identical inputs always give identical verdicts.

Decision order:
1. Red-flag rules, in table order
2. Medical-advice detection (disallowed patterns vs. the allow-list)
3. Age-aware rules, only when a context is supplied
4. Block on any critical/high red flag, non-acceptable medical advice or failed
   high-severity age-aware rule; modify on medium-only findings; else allow.
   Escalation is flagged on critical severity, or high severity together with
   detected medical advice.
"""

from loguru import logger

from retire_strong.core.errors import ValidationFailure
from retire_strong.planning.models import MovementPlan
from retire_strong.planning.render import describe_plan
from retire_strong.safety.fallbacks import get_fallback_message
from retire_strong.safety.rules.age_aware import evaluate_age_aware_rules
from retire_strong.safety.rules.medical_advice import detect_medical_advice
from retire_strong.safety.rules.red_flags import detect_red_flags
from retire_strong.safety.sanitizer import sanitize_text
from retire_strong.safety.types import SafetyAction, SafetyContext, SafetyVerdict, Severity

_BLOCKING = (Severity.CRITICAL, Severity.HIGH)


def validate_text_output(text: str, context: SafetyContext | None = None) -> SafetyVerdict:
    """Validate one piece of text before a user sees it.

    Args:
        text: Draft text (model reply, plan rendering, engine message)
        context: Optional user context; None skips only the age-aware stage

    Returns:
        SafetyVerdict with the action and the content safe to display

    Raises:
        ValidationFailure: If text is not a string
    """
    if not isinstance(text, str):
        raise ValidationFailure(f"Safety validation expects text, got {type(text).__name__}")

    red_flags = detect_red_flags(text)
    medical = detect_medical_advice(text)
    failed_rules = evaluate_age_aware_rules(context, text) if context is not None else []

    severities = [flag.severity for flag in red_flags]
    severities.extend(rule.severity for rule in failed_rules)
    if medical.non_acceptable:
        severities.append(Severity.HIGH)
    severity = Severity.highest(severities)

    triggered = [flag.description for flag in red_flags]
    if medical.non_acceptable:
        triggered.extend(rule.description for rule in medical.rules)
    triggered.extend(rule.name for rule in failed_rules)

    block_reasons: list[str] = []
    blocking_flags = [flag for flag in red_flags if flag.severity in _BLOCKING]
    if blocking_flags:
        block_reasons.append(f"Blocked due to {', '.join(f.description for f in blocking_flags)}")
    if medical.non_acceptable:
        block_reasons.append(f"Blocked medical advice: {', '.join(r.description for r in medical.rules)}")
    blocking_rules = [rule for rule in failed_rules if rule.severity == Severity.HIGH]
    if blocking_rules:
        block_reasons.append(
            f"Blocked by age-aware safety rules: {', '.join(r.description for r in blocking_rules)}"
        )

    medium_flags = [flag for flag in red_flags if flag.severity == Severity.MEDIUM]
    medium_rules = [rule for rule in failed_rules if rule.severity == Severity.MEDIUM]

    if block_reasons:
        action = SafetyAction.BLOCK
        reason: str | None = "; ".join(block_reasons)
        safe_content = get_fallback_message(reason)
    elif medium_flags or medium_rules:
        action = SafetyAction.MODIFY
        details = [f.description for f in medium_flags] + [r.description for r in medium_rules]
        reason = f"Modified to remove medium-severity issues: {', '.join(details)}"
        safe_content = sanitize_text(text, medium_flags)
    else:
        action = SafetyAction.ALLOW
        reason = None
        safe_content = text

    should_escalate = severity == Severity.CRITICAL or (severity == Severity.HIGH and medical.detected)

    verdict = SafetyVerdict(
        action=action,
        original_content=text,
        safe_content=safe_content,
        severity=severity,
        triggered_rules=tuple(triggered),
        red_flags=tuple(dict.fromkeys(flag.category for flag in red_flags)),
        reason=reason,
        should_escalate=should_escalate,
        medical_advice_detected=medical.detected,
    )
    if verdict.intervened:
        logger.info(
            "Safety verdict",
            action=action.value,
            severity=severity.value,
            escalate=should_escalate,
            triggered=len(triggered),
        )
    return verdict


def validate_plan_output(plan: MovementPlan, context: SafetyContext | None = None) -> SafetyVerdict:
    """Validate the descriptive text of a plan.

    Movement selection is already screened by the planner; this catches
    anything in names, descriptions or cautions that should not be shown.
    """
    return validate_text_output(describe_plan(plan), context)


def quick_safety_check(text: str) -> bool:
    """True when text would be shown verbatim with no context."""
    return validate_text_output(text).action == SafetyAction.ALLOW
