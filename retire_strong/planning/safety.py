"""Contraindication screening for catalog movements.

Every movement that enters a plan goes through check_movement_safety. The
check is deterministic: the result depends only on the movement, the
profile's conditions and limitations, and the profile age.
"""

import re

from retire_strong.catalog.models import MovementCatalog, MovementDefinition
from retire_strong.planning.models import SafetyCheckResult, UserProfile

ADVANCED_AGE = 80
ADVANCED_AGE_CAUTION = "Caution: advanced difficulty for age 80+"

_SEPARATORS = re.compile(r"[\s-]+")


def normalize_condition(value: str) -> str:
    """Lowercase and collapse whitespace and hyphens to underscores.

    "Knee Pain", "knee-pain" and "knee  pain" all normalize to "knee_pain".
    """
    return _SEPARATORS.sub("_", value.strip().lower())


def _matches(flag: str, condition: str) -> bool:
    return condition in flag or flag in condition


def check_movement_safety(movement: MovementDefinition, profile: UserProfile) -> SafetyCheckResult:
    """Check one movement against a profile's conditions and limitations.

    Containment is tested in both directions, so a "knee" contraindication
    matches a "knee pain" limitation and a "knee" limitation matches a
    "knee replacement" contraindication.

    Args:
        movement: Catalog movement to check
        profile: User profile

    Returns:
        SafetyCheckResult. An avoid match returns immediately with only that
        caution; caution matches accumulate in contraindication order.
    """
    flags = [normalize_condition(flag) for flag in profile.limitation_flags]
    flags = [flag for flag in flags if flag]

    cautions: list[str] = []
    for contraindication in movement.contraindications:
        condition = normalize_condition(contraindication.condition)
        if not any(_matches(flag, condition) for flag in flags):
            continue
        if contraindication.severity == "avoid":
            return SafetyCheckResult(
                safe=False,
                movement=movement,
                cautions=(f"Avoid: {contraindication.condition} - {contraindication.note}",),
            )
        cautions.append(f"Caution: {contraindication.condition} - {contraindication.note}")

    if profile.age >= ADVANCED_AGE and movement.difficulty == "moderate":
        cautions.append(ADVANCED_AGE_CAUTION)

    return SafetyCheckResult(safe=True, movement=movement, cautions=tuple(cautions))


def filter_safe_movements(
    movement_ids: list[str] | tuple[str, ...],
    catalog: MovementCatalog,
    profile: UserProfile,
) -> list[SafetyCheckResult]:
    """Return safety results for the ids that pass, preserving order.

    Ids missing from the catalog are skipped.
    """
    results: list[SafetyCheckResult] = []
    for movement_id in movement_ids:
        movement = catalog.get(movement_id)
        if movement is None:
            continue
        result = check_movement_safety(movement, profile)
        if result.safe:
            results.append(result)
    return results
