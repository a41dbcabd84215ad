"""Debounced, last-wins nearby search over a places supplier."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from ..providers.base import Coordinate, PlaceResult, PlacesSupplier, Viewport
from .cancellation import CancellationToken
from .errors import SearchNotFound
from .geo import MAX_POI_COUNT, rank_places
from .logging import logger

TOURIST_CATEGORIES: Tuple[str, ...] = (
    "amusement_park", "aquarium", "beach", "campground",
    "castle", "fairground", "fortress", "national_monument",
    "national_park", "planetarium", "spa", "zoo",
    "museum", "library", "movie_theater",
    "park", "stadium", "theater",
)


class SearchState(str, Enum):
    IDLE = "idle"
    DEBOUNCING = "debouncing"
    SEARCHING = "searching"
    ERROR = "error"


@dataclass(frozen=True)
class SearchSnapshot:
    state: SearchState
    viewport: Optional[Viewport]
    generation: int
    results: Tuple[PlaceResult, ...]
    error: Optional[BaseException]
    selected_place_id: Optional[str] = None


@dataclass
class SearchSession:
    viewport: Viewport
    token: CancellationToken
    # Assigned when the debounce window elapses.
    generation: int = 0
    task: Optional[asyncio.Task] = None


Listener = Callable[[SearchSnapshot], None]


class SearchCoordinator:
    """
    Owns the viewport, the live SearchSession and the published results.

    Viewport changes restart a debounce timer; only the last settled viewport
    reaches the supplier. Results of superseded sessions are dropped by
    comparing generations, so a slow old search can never overwrite a newer
    one. All state lives on the running event loop; observers either poll
    `snapshot` or subscribe to change events.
    """

    def __init__(
        self,
        supplier: PlacesSupplier,
        *,
        debounce_s: float = 0.3,
        max_results: int = MAX_POI_COUNT,
        category_filter: Sequence[str] = TOURIST_CATEGORIES,
        viewport_tolerance: float = 0.0001,
        default_span_m: float = 1000.0,
    ) -> None:
        self._supplier = supplier
        self._debounce_s = debounce_s
        self._max_results = max_results
        self._category_filter = tuple(category_filter)
        self._viewport_tolerance = viewport_tolerance
        self._default_span_m = default_span_m

        self._state = SearchState.IDLE
        self._viewport: Optional[Viewport] = None
        self._generation = 0
        self._results: Tuple[PlaceResult, ...] = ()
        self._error: Optional[BaseException] = None
        self._selected_place_id: Optional[str] = None

        self._session: Optional[SearchSession] = None
        self._listeners: List[Listener] = []
        self._closed = False

    @property
    def snapshot(self) -> SearchSnapshot:
        return SearchSnapshot(
            state=self._state,
            viewport=self._viewport,
            generation=self._generation,
            results=self._results,
            error=self._error,
            selected_place_id=self._selected_place_id,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self) -> None:
        snap = self.snapshot
        for listener in list(self._listeners):
            listener(snap)

    def request_search(self, viewport: Viewport) -> None:
        """Schedule a search for `viewport` after the debounce window. Must run on the event loop."""
        if self._closed:
            return
        if self._state is not SearchState.ERROR and viewport.is_close(self._viewport, self._viewport_tolerance):
            return

        self._cancel_session()
        self._viewport = viewport
        session = SearchSession(viewport=viewport, token=CancellationToken())
        session.task = asyncio.get_running_loop().create_task(self._run(session))
        self._session = session
        self._state = SearchState.DEBOUNCING
        self._publish()

    def on_viewport_changed(self, viewport: Viewport) -> None:
        self.request_search(viewport)

    def on_annotation_selected(self, place_id: Optional[str]) -> Optional[PlaceResult]:
        match = next((r for r in self._results if r.place_id == place_id), None)
        new_selected = match.place_id if match else None
        if new_selected != self._selected_place_id:
            self._selected_place_id = new_selected
            self._publish()
        return match

    def center_on(self, coordinate: Coordinate) -> None:
        self.request_search(Viewport.from_meters(coordinate, self._default_span_m, self._default_span_m))

    async def wait_settled(self) -> None:
        """Wait until no session is pending, following replacements made meanwhile."""
        while self._session is not None and self._session.task is not None and not self._session.task.done():
            await asyncio.wait({self._session.task})

    def close(self) -> None:
        self._closed = True
        self._cancel_session()
        self._state = SearchState.IDLE
        self._listeners.clear()

    def _cancel_session(self) -> None:
        session = self._session
        if session is None:
            return
        session.token.cancel()
        if session.task is not None and not session.task.done():
            session.task.cancel()

    def _is_current(self, session: SearchSession) -> bool:
        return (
            not self._closed
            and not session.token.cancelled
            and session is self._session
            and session.generation == self._generation
        )

    async def _run(self, session: SearchSession) -> None:
        await asyncio.sleep(self._debounce_s)
        if session.token.cancelled or self._closed:
            return

        self._generation += 1
        session.generation = self._generation
        self._state = SearchState.SEARCHING
        self._publish()

        try:
            places = await self._supplier.search(session.viewport, self._category_filter)
        except SearchNotFound:
            if not self._is_current(session):
                return
            logger.info("search_not_found", generation=session.generation)
            self._complete(())
            return
        except Exception as e:
            if not self._is_current(session):
                return
            logger.warning("search_failed", generation=session.generation, error=str(e))
            self._state = SearchState.ERROR
            self._results = ()
            self._selected_place_id = None
            self._error = e
            self._publish()
            return

        if not self._is_current(session):
            logger.debug("search_result_discarded", generation=session.generation)
            return
        ranked = rank_places(places, session.viewport.center, self._max_results)
        logger.info("search_completed", generation=session.generation, count=len(ranked), raw_count=len(places))
        self._complete(tuple(ranked))

    def _complete(self, results: Tuple[PlaceResult, ...]) -> None:
        self._state = SearchState.IDLE
        self._results = results
        self._error = None
        if self._selected_place_id not in {r.place_id for r in results}:
            self._selected_place_id = None
        self._publish()
