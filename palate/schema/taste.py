"""Six-axis taste vector and its scale conversions.

Invariants:
- Every stored or compared taste vector is on the canonical [0, 1] scale.
- Producers on another scale convert through ``TasteVector.from_scale``.
"""

from __future__ import annotations

import enum
from typing import Mapping

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, model_validator

TASTE_AXES: tuple[str, ...] = ("sweet", "salty", "sour", "bitter", "umami", "spicy")

FIVE_POINT_MIN = 1.0
FIVE_POINT_MAX = 5.0


class TasteScale(str, enum.Enum):
    """Scales taste values may arrive on."""
    UNIT = "unit"
    FIVE_POINT = "five_point"


class TasteVector(BaseModel):
    """Flavor preference on the canonical [0, 1] scale."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    sweet: float = Field(ge=0.0, le=1.0)
    salty: float = Field(ge=0.0, le=1.0)
    sour: float = Field(ge=0.0, le=1.0)
    bitter: float = Field(ge=0.0, le=1.0)
    umami: float = Field(ge=0.0, le=1.0)
    spicy: float = Field(ge=0.0, le=1.0)

    @classmethod
    def from_scale(cls, values: Mapping[str, float], scale: TasteScale = TasteScale.UNIT) -> "TasteVector":
        """Build a canonical vector from values on ``scale``.

        Raises ValueError when an axis is missing or outside the scale's range.
        """
        missing = [axis for axis in TASTE_AXES if axis not in values]
        if missing:
            raise ValueError(f"Missing taste axes: {', '.join(missing)}")
        converted: dict[str, float] = {}
        for axis in TASTE_AXES:
            raw = float(values[axis])
            if scale == TasteScale.FIVE_POINT:
                if not FIVE_POINT_MIN <= raw <= FIVE_POINT_MAX:
                    raise ValueError(f"{axis}={raw} is outside the 1-5 scale")
                converted[axis] = (raw - FIVE_POINT_MIN) / (FIVE_POINT_MAX - FIVE_POINT_MIN)
            else:
                if not 0.0 <= raw <= 1.0:
                    raise ValueError(f"{axis}={raw} is outside the 0-1 scale")
                converted[axis] = raw
        return cls(**converted)

    @classmethod
    def from_stored(cls, payload: Mapping[str, float] | None) -> "TasteVector | None":
        """Rehydrate a vector persisted in a JSON column."""
        if not payload:
            return None
        return cls.from_scale(payload, TasteScale.UNIT)

    def as_array(self) -> np.ndarray:
        return np.array([getattr(self, axis) for axis in TASTE_AXES], dtype=float)

    def display(self) -> dict[str, int]:
        """Return 0-10 pips per axis for compact rendering."""
        return {axis: int(round(getattr(self, axis) * 10)) for axis in TASTE_AXES}


class TasteProfileInput(BaseModel):
    """Taste values as submitted by a client, tagged with their scale."""
    scale: TasteScale = TasteScale.UNIT
    sweet: float
    salty: float
    sour: float
    bitter: float
    umami: float
    spicy: float

    @model_validator(mode="after")
    def _check_range(self) -> "TasteProfileInput":
        self.to_vector()
        return self

    def to_vector(self) -> TasteVector:
        values = {axis: getattr(self, axis) for axis in TASTE_AXES}
        return TasteVector.from_scale(values, self.scale)
