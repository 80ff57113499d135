# recipe_wheel/services/wheel.py
from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional, Sequence

from recipe_wheel.core import config
from recipe_wheel.models.recipe import Recipe
from recipe_wheel.models.spin import WheelSegment

log = logging.getLogger("recipe_wheel.wheel")

SEGMENT_COLORS = [
    "#FF6B6B", "#4ECDC4", "#45B7D1", "#FFA07A",
    "#98D8C8", "#F7DC6F", "#BB8FCE", "#85C1E2",
]


class WheelBusyError(RuntimeError):
    pass


def segment_angle(n: int) -> float:
    if n < 1:
        raise ValueError("a wheel needs at least one segment")
    return 360 / n


def compute_rotation(previous_rotation: float, n: int, index: int, full_turns: int = config.SPIN_FULL_TURNS) -> float:
    """
    Rotation that brings the middle of segment `index` under the pointer.

    Segments are laid out clockwise from 0 degrees and the pointer sits at the top,
    so the wheel turns forward by (360 - segment start) plus half a segment, on top
    of `full_turns` whole turns. The offset is applied to the last whole turn of
    `previous_rotation`, so where the wheel stopped before has no effect on where
    it lands. The result is always greater than `previous_rotation`.
    """
    if not 0 <= index < n:
        raise ValueError(f"index {index} outside wheel of {n} segments")
    seg = segment_angle(n)
    base = previous_rotation - previous_rotation % 360
    rotation = base + 360 * full_turns + (360 - index * seg) + seg / 2
    if rotation <= previous_rotation:
        # only reachable with full_turns=0
        rotation += 360
    return rotation


def landing_angle(rotation: float) -> float:
    return rotation % 360


def index_of(items: Sequence[Recipe], selected: Recipe) -> Optional[int]:
    for i, item in enumerate(items):
        if item.id == selected.id:
            return i
    return None


def segments(items: Sequence[Recipe]) -> List[WheelSegment]:
    if not items:
        return []
    seg = segment_angle(len(items))
    return [
        WheelSegment(
            recipe_id=item.id,
            label=item.title,
            start_angle=i * seg,
            mid_angle=i * seg + seg / 2,
            color=SEGMENT_COLORS[i % len(SEGMENT_COLORS)],
        )
        for i, item in enumerate(items)
    ]


class WheelView:
    """
    Owns the accumulated rotation of one wheel.

    A spin runs for `duration_ms`; the timer is the authoritative completion
    signal, though the renderer may report completion earlier via
    `notify_finished`. Either way the completion callback fires once.
    """

    def __init__(self, duration_ms: int = config.SPIN_DURATION_MS, full_turns: int = config.SPIN_FULL_TURNS):
        self.duration_ms = duration_ms
        self.full_turns = full_turns
        self.rotation: float = 0.0
        self.animating = False
        self._timer: Optional[asyncio.TimerHandle] = None
        self._on_complete: Optional[Callable[[], None]] = None
        self._closed = False

    def start(
        self,
        items: Sequence[Recipe],
        selected: Recipe,
        on_complete: Optional[Callable[[], None]] = None,
    ) -> bool:
        if self._closed:
            return False
        if self.animating:
            raise WheelBusyError("wheel is still spinning")

        index = index_of(items, selected)
        if index is None:
            log.warning("selected recipe not on the wheel", extra={"recipe_id": selected.id})
            return False

        self.rotation = compute_rotation(self.rotation, len(items), index, self.full_turns)
        self.animating = True
        self._on_complete = on_complete

        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.duration_ms / 1000, self._finish)
        return True

    def notify_finished(self) -> None:
        self._finish()

    def _finish(self) -> None:
        if not self.animating:
            return
        self.animating = False
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

        callback, self._on_complete = self._on_complete, None
        if callback is not None:
            callback()

    def close(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._on_complete = None
        self.animating = False
        self._closed = True
