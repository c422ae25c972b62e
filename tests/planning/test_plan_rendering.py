"""Tests for plan text rendering."""

from retire_strong.planning.planner import build_starter_plan
from retire_strong.planning.render import describe_plan


def test_describe_plan_lists_sessions_and_doses(healthy_profile, catalog, start_date):
    text = describe_plan(build_starter_plan(healthy_profile, catalog=catalog, today=start_date))
    lines = text.splitlines()

    assert lines[0] == "Day 1: Strength + Balance (2024-11-04, pending)"
    assert lines[1].startswith("- Seated March (2 sets of 45 seconds): Sit tall")
    assert "- Chair Sit-to-Stand (2 sets of 8-10 reps): Stand up from a chair" in text
    assert "- Heel-to-Toe Balance (3 sets of 15 seconds)" in text
    assert "Day 3: Cardio + Balance (2024-11-06, pending)" in text


def test_describe_plan_includes_cautions(knee_profile, catalog, start_date):
    text = describe_plan(build_starter_plan(knee_profile, catalog=catalog, today=start_date))
    assert "  Caution: knee - Limit depth and use armrests if the knee complains" in text
