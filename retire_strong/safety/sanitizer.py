"""Phrase rewriting for medium-severity red flags."""

from retire_strong.safety.fallbacks import MODIFY_DISCLAIMER
from retire_strong.safety.rules.red_flags import RedFlagRule
from retire_strong.safety.types import Severity


def _match_case(original: str, replacement: str) -> str:
    if replacement and original[:1].isupper():
        return replacement[0].upper() + replacement[1:]
    return replacement


def _replacement_for(rule: RedFlagRule, phrase: str) -> str:
    for pattern, replacement in rule.replacements:
        if pattern.fullmatch(phrase):
            return _match_case(phrase, replacement)
    return _match_case(phrase, rule.default_replacement)


def _rewrite(text: str, rule: RedFlagRule) -> str:
    return rule.pattern.sub(lambda m: _replacement_for(rule, m.group(0)), text)


def sanitize_text(text: str, flags: list[RedFlagRule]) -> str:
    """Rewrite every phrase matched by a medium-severity flag and append the disclaimer.

    Rules are applied in table order, one substitution pass each. Every match
    of a rule's pattern is replaced, so none of its phrases survive verbatim.
    """
    sanitized = text
    for rule in flags:
        if rule.severity == Severity.MEDIUM:
            sanitized = _rewrite(sanitized, rule)
    return sanitized + MODIFY_DISCLAIMER
