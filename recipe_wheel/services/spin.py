# recipe_wheel/services/spin.py
from __future__ import annotations

import logging
import time
from collections import OrderedDict
from typing import Callable, List, Optional, Tuple

from recipe_wheel.core import config
from recipe_wheel.core.errors import EmptyResultError, RecipeApiError, TransportError
from recipe_wheel.models.recipe import Recipe, RecipeFilters
from recipe_wheel.models.spin import FailureKind, SpinFailure, SpinState, SpinStatus
from recipe_wheel.services.catalog import CatalogService
from recipe_wheel.services.wheel import WheelView, segments

log = logging.getLogger("recipe_wheel.spin")

EMPTY_MESSAGE = "No recipes match your filters. Try adjusting your filter criteria."
TRANSPORT_MESSAGE = "Could not reach the recipe service. Please try again."
REMOTE_MESSAGE = "Failed to spin! Please try again."


class SpinOrchestrator:
    """
    One spin-the-wheel page: filters, the wheel's item set, and the
    idle -> requesting -> animating -> revealed -> idle cycle.
    """

    def __init__(
        self,
        catalog: CatalogService,
        wheel: Optional[WheelView] = None,
        wheel_size: int = config.WHEEL_SIZE,
    ):
        self.catalog = catalog
        self.wheel = wheel if wheel is not None else WheelView()
        self.wheel_size = wheel_size

        self.state = SpinState.idle
        self.filters = RecipeFilters()
        self.items: List[Recipe] = []
        self.selected: Optional[Recipe] = None
        self.error: Optional[SpinFailure] = None

        self._closed = False
        # bumped per spin; a completion carrying an older value is stale
        self._generation = 0

    @property
    def busy(self) -> bool:
        return self.state in (SpinState.requesting, SpinState.animating)

    @property
    def closed(self) -> bool:
        return self._closed

    def set_filters(self, filters: RecipeFilters) -> bool:
        if self._closed or self.busy:
            return False
        self.filters = filters
        return True

    async def load_wheel(self) -> List[Recipe]:
        if self.busy:
            # the wheel on screen must keep the set it is spinning
            return self.items
        page = await self.catalog.list_recipes(self.filters, page=1, per_page=self.wheel_size)
        if not self.busy and not self._closed:
            self.items = list(page.data)
        return self.items

    async def spin(self) -> bool:
        if self._closed or self.busy:
            return False

        snapshot = self.filters.model_copy()
        self.state = SpinState.requesting
        self.selected = None
        self.error = None
        self._generation += 1
        generation = self._generation

        try:
            recipe = await self.catalog.spin(snapshot)
        except EmptyResultError as e:
            self._fail(generation, FailureKind.empty, EMPTY_MESSAGE, e)
            return False
        except TransportError as e:
            self._fail(generation, FailureKind.transport, TRANSPORT_MESSAGE, e)
            return False
        except RecipeApiError as e:
            self._fail(generation, FailureKind.remote, REMOTE_MESSAGE, e)
            return False
        except BaseException:
            # cancelled, or an error the client did not map
            if generation == self._generation and self.state == SpinState.requesting:
                self.state = SpinState.idle
            raise

        if self._closed or generation != self._generation:
            log.info("discarding stale spin result", extra={"recipe_id": recipe.id})
            return False

        self.selected = recipe
        self.state = SpinState.animating
        log.info("spin selected recipe", extra={"recipe_id": recipe.id, "filters": snapshot.to_params()})

        if not self.wheel.start(self.items, recipe, self._on_wheel_done):
            # not on the loaded wheel: nothing to animate, go straight to the result
            self._on_wheel_done()
        return True

    def _fail(self, generation: int, kind: FailureKind, message: str, exc: RecipeApiError) -> None:
        if self._closed or generation != self._generation:
            return
        log.warning("spin failed", extra={"kind": kind.value, "error": exc.message, "status_code": exc.status_code})
        self.state = SpinState.idle
        self.selected = None
        self.error = SpinFailure(kind=kind, message=message)

    def _on_wheel_done(self) -> None:
        if self._closed or self.state != SpinState.animating:
            return
        self.state = SpinState.revealed

    def notify_finished(self) -> None:
        if self.state == SpinState.animating:
            self.wheel.notify_finished()

    def dismiss(self) -> bool:
        if self.state != SpinState.revealed:
            return False
        self.state = SpinState.idle
        self.selected = None
        return True

    def close(self) -> None:
        self._closed = True
        self.wheel.close()

    def status(self) -> SpinStatus:
        return SpinStatus(
            state=self.state,
            filters=self.filters,
            rotation=self.wheel.rotation,
            duration_ms=self.wheel.duration_ms,
            recipe=self.selected,
            error=self.error,
            segments=segments(self.items),
        )


class SpinSessions:
    """
    Spin orchestrators keyed by browser session.

    A session idle for longer than `idle_ttl_s` is closed and forgotten, and
    beyond `max_sessions` the least recently used one is closed first.
    """

    def __init__(
        self,
        factory: Callable[[], SpinOrchestrator],
        max_sessions: int = config.SPIN_MAX_SESSIONS,
        idle_ttl_s: float = config.SPIN_SESSION_TTL_S,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.factory = factory
        self.max_sessions = max_sessions
        self.idle_ttl_s = idle_ttl_s
        self.clock = clock
        # least recently used first
        self._sessions: OrderedDict[str, Tuple[SpinOrchestrator, float]] = OrderedDict()

    def _touch(self, session_id: str, orchestrator: SpinOrchestrator) -> None:
        self._sessions[session_id] = (orchestrator, self.clock())
        self._sessions.move_to_end(session_id)

    def prune(self) -> int:
        cutoff = self.clock() - self.idle_ttl_s
        expired = [sid for sid, (_, seen) in self._sessions.items() if seen <= cutoff]
        for session_id in expired:
            self.drop(session_id)
        if expired:
            log.info("spin sessions expired", extra={"count": len(expired)})
        return len(expired)

    def get(self, session_id: str) -> Optional[SpinOrchestrator]:
        self.prune()
        entry = self._sessions.get(session_id)
        if entry is None:
            return None
        self._touch(session_id, entry[0])
        return entry[0]

    def get_or_create(self, session_id: str) -> SpinOrchestrator:
        orchestrator = self.get(session_id)
        if orchestrator is None or orchestrator.closed:
            orchestrator = self.factory()
        self._touch(session_id, orchestrator)

        while len(self._sessions) > self.max_sessions:
            oldest, (evicted, _) = self._sessions.popitem(last=False)
            evicted.close()
            log.info("spin session evicted", extra={"session": oldest})
        return orchestrator

    def drop(self, session_id: str) -> None:
        entry = self._sessions.pop(session_id, None)
        if entry is not None:
            entry[0].close()

    def close_all(self) -> None:
        for session_id in list(self._sessions):
            self.drop(session_id)

    def __len__(self) -> int:
        return len(self._sessions)
