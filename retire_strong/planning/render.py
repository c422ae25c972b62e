"""Plain-text rendering of plans for prompts and safety review."""

from retire_strong.planning.models import MovementPlan


def describe_plan(plan: MovementPlan) -> str:
    """Render the user-visible text of a plan, one line per session and movement."""
    lines: list[str] = []
    for session in plan.sessions:
        lines.append(f"Day {session.day_index}: {session.focus} ({session.scheduled_date.isoformat()}, {session.status})")
        for movement in session.movements:
            prescription = movement.prescription
            if prescription.type == "reps":
                dose = f"{prescription.sets} sets of {prescription.reps} reps"
            else:
                seconds = prescription.seconds or prescription.hold_seconds
                dose = f"{prescription.sets} sets of {seconds} seconds"
            lines.append(f"- {movement.name} ({dose}): {movement.description}")
            if prescription.notes:
                lines.append(f"  {prescription.notes}")
            lines.extend(f"  {caution}" for caution in movement.cautions)
    return "\n".join(lines)
