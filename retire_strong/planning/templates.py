"""Fixed day templates for the starter plan."""

from retire_strong.planning.models import SessionTemplate

MAX_MOVEMENTS_PER_SESSION = 5

DAY_TEMPLATES: tuple[SessionTemplate, ...] = (
    SessionTemplate(
        id="day1",
        focus="Strength + Balance",
        movement_ids=(
            "seated_march",
            "chair_sit_to_stand",
            "wall_pushup",
            "standing_hip_abduction",
            "heel_toe_balance",
        ),
        optional_ids=("cat_cow_mobility",),
    ),
    SessionTemplate(
        id="day2",
        focus="Mobility + Core",
        movement_ids=(
            "seated_march",
            "cat_cow_mobility",
            "standing_hip_abduction",
            "heel_toe_balance",
        ),
        optional_ids=("wall_pushup",),
    ),
    SessionTemplate(
        id="day3",
        focus="Cardio + Balance",
        movement_ids=(
            "standing_march",
            "heel_toe_balance",
            "wall_pushup",
        ),
        optional_ids=("chair_sit_to_stand", "cat_cow_mobility"),
    ),
)

# Used when contraindication filtering leaves a session empty
SAFE_FALLBACK_IDS: tuple[str, ...] = (
    "seated_march",
    "wide_stance_balance",
    "assisted_sit_to_stand",
)
