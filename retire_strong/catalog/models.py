"""Movement catalog schema.

Movement definitions are immutable once loaded. Everything else in the core
refers to them by id; plan state never embeds a mutable copy of a definition.
"""

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

MovementCategory = Literal["strength", "balance", "mobility", "cardio", "core", "warmup"]
MovementDifficulty = Literal["very_easy", "easy", "moderate"]
PrescriptionType = Literal["reps", "time"]
ContraindicationSeverity = Literal["avoid", "caution"]


class MovementPrescription(BaseModel):
    """Dose for a movement: reps-based or time-based."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: PrescriptionType
    sets: int = Field(ge=1)
    reps: str | None = None  # e.g. "8-10"
    seconds: int | None = Field(default=None, ge=5)
    hold_seconds: int | None = Field(default=None, ge=5)  # static balance holds
    rest_seconds: int | None = Field(default=None, ge=0)
    notes: str | None = None

    @model_validator(mode="after")
    def validate_dose(self) -> "MovementPrescription":
        if self.type == "reps" and not self.reps:
            raise ValueError("reps prescription requires 'reps'")
        if self.type == "time" and self.seconds is None and self.hold_seconds is None:
            raise ValueError("time prescription requires 'seconds' or 'hold_seconds'")
        return self


class Contraindication(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    condition: str = Field(min_length=1)
    severity: ContraindicationSeverity
    note: str


class MovementDefinition(BaseModel):
    """A single catalog exercise with its safety metadata."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: str
    categories: tuple[MovementCategory, ...] = Field(min_length=1)
    difficulty: MovementDifficulty
    joints: tuple[str, ...] = ()
    muscles: tuple[str, ...] = ()
    contraindications: tuple[Contraindication, ...] = ()
    regressions: tuple[str, ...] = ()
    progressions: tuple[str, ...] = ()
    prescription: MovementPrescription
    equipment: tuple[str, ...] = ()
    cues: tuple[str, ...] = ()
    safety_tips: tuple[str, ...] = ()


class MovementCatalog:
    """Read-only, id-indexed view over validated movement definitions."""

    def __init__(self, movements: tuple[MovementDefinition, ...], version: str = "unversioned"):
        self.version = version
        self.movements = movements
        self.by_id: Mapping[str, MovementDefinition] = MappingProxyType({m.id: m for m in movements})

    def get(self, movement_id: str) -> MovementDefinition | None:
        return self.by_id.get(movement_id)

    def list_movements(self) -> list[MovementDefinition]:
        return list(self.movements)

    def ids(self) -> list[str]:
        return [m.id for m in self.movements]

    def __contains__(self, movement_id: object) -> bool:
        return movement_id in self.by_id

    def __iter__(self) -> Iterator[MovementDefinition]:
        return iter(self.movements)

    def __len__(self) -> int:
        return len(self.movements)

    def __repr__(self) -> str:
        return f"MovementCatalog(version={self.version!r}, movements={len(self.movements)})"
