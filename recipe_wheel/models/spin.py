# recipe_wheel/models/spin.py
from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from recipe_wheel.models.recipe import Recipe, RecipeFilters


class SpinState(str, Enum):
    idle = "idle"
    requesting = "requesting"
    animating = "animating"
    revealed = "revealed"


class FailureKind(str, Enum):
    empty = "empty"
    transport = "transport"
    remote = "remote"


class SpinFailure(BaseModel):
    kind: FailureKind
    message: str

    @property
    def retryable(self) -> bool:
        # an empty result won't change until the filters do
        return self.kind != FailureKind.empty


class SpinResponse(BaseModel):
    recipe: Recipe


class WheelSegment(BaseModel):
    recipe_id: int
    label: str
    start_angle: float
    mid_angle: float
    color: str


class SpinStatus(BaseModel):
    state: SpinState
    filters: RecipeFilters
    rotation: float
    duration_ms: int
    recipe: Optional[Recipe] = None
    error: Optional[SpinFailure] = None
    segments: List[WheelSegment] = []
