from __future__ import annotations

import logging
import threading
from types import MappingProxyType
from typing import Mapping, Optional, Sequence, Union

from sentiment_map.aggregator import aggregate, global_totals, tally
from sentiment_map.color_policy import fills_for
from sentiment_map.country_codes import code_for
from sentiment_map.errors import RenderError, ZoomError
from sentiment_map.map_adapter import GeoPoint, MapAdapter
from sentiment_map.models import (
    CountryAggregate,
    DashboardView,
    InteractionState,
    SentimentRecord,
    VisualizationMode,
)
from sentiment_map.scheduler import Cancellable, Scheduler, ThreadingScheduler

logger = logging.getLogger(__name__)

MAP_ERROR_MESSAGE = "Failed to initialize map visualization."


class InteractionController:
    """
    Owns the transient UI state (selection, hover, mode) over one loaded dataset.

    - select(): toggles selection, then asks the map to zoom (best-effort)
    - hover(): debounced; only one pending commit exists at a time
    - hover_out(): immediate, cancels any pending commit
    - set_mode(): replaces the mode and recolors every country
    - reset(): clears selection and asks the map to fit the data

    Derived views (global totals, selected regions, ...) are recomputed on every call.
    The map adapter is exclusively owned: attach_map() replaces and disposes the old one.
    """

    def __init__(
            self,
            records: Sequence[SentimentRecord],
            aggregates: Optional[Mapping[str, CountryAggregate]] = None,
            map_adapter: Optional[MapAdapter] = None,
            scheduler: Optional[Scheduler] = None,
            hover_delay_sec: float = 0.1,
            select_zoom_level: float = 2.0,
            mode: Union[VisualizationMode, str] = VisualizationMode.OVERALL,
    ):
        self._records = tuple(records)
        self._aggregates = dict(aggregates) if aggregates is not None else aggregate(self._records)
        self._state = InteractionState()
        self._mode = VisualizationMode(mode)

        self._scheduler = scheduler or ThreadingScheduler()
        self._hover_delay = hover_delay_sec
        self._select_zoom_level = select_zoom_level
        self._pending_hover: Optional[Cancellable] = None
        # bumped on every hover event; a timer that fires late with an old token is ignored
        self._hover_token = 0

        self._lock = threading.RLock()
        self._map: Optional[MapAdapter] = None
        self.map_error: Optional[str] = None

        if map_adapter is not None:
            self.attach_map(map_adapter)

    # -------------------------
    # Read access
    # -------------------------

    @property
    def mode(self) -> VisualizationMode:
        return self._mode

    @property
    def state(self) -> InteractionState:
        with self._lock:
            return InteractionState(
                selected_country=self._state.selected_country,
                hovered_country=self._state.hovered_country,
            )

    @property
    def records(self) -> tuple[SentimentRecord, ...]:
        return self._records

    @property
    def aggregates(self) -> Mapping[str, CountryAggregate]:
        return MappingProxyType(self._aggregates)

    @property
    def map(self) -> Optional[MapAdapter]:
        return self._map

    @property
    def country_count(self) -> int:
        return len(self._aggregates)

    @property
    def region_count(self) -> int:
        return len(self._records)

    # -------------------------
    # Map ownership
    # -------------------------

    def attach_map(self, adapter: MapAdapter) -> None:
        """Take ownership of a map adapter, wire its events, and draw the current fills."""
        with self._lock:
            if self._map is not None and self._map is not adapter:
                self._map.dispose()
            self._map = adapter
            self.map_error = None
            adapter.on("click", self._on_click)
            adapter.on("pointerover", self._on_pointerover)
            adapter.on("pointerout", self._on_pointerout)
            self.render()

    def dispose(self) -> None:
        with self._lock:
            self._cancel_pending_hover()
            if self._map is not None:
                self._map.dispose()
                self._map = None

    # -------------------------
    # State transitions
    # -------------------------

    def select(self, country: Optional[str]) -> None:
        if not country or country not in self._aggregates:
            logger.debug("Ignoring selection of country without data: %s", country)
            return

        with self._lock:
            if self._state.selected_country == country:
                self._state.selected_country = None
                logger.info("Selection cleared: country=%s", country)
                return
            self._state.selected_country = country
            logger.info("Country selected: country=%s", country)
            self._zoom_to_country(country)

    def clear_selection(self) -> None:
        with self._lock:
            self._state.selected_country = None

    def hover(self, country: Optional[str]) -> None:
        if country is None:
            self.hover_out()
            return

        with self._lock:
            self._cancel_pending_hover()
            token = self._hover_token
            self._pending_hover = self._scheduler.call_later(
                self._hover_delay, lambda: self._commit_hover(country, token)
            )

    def hover_out(self) -> None:
        with self._lock:
            self._cancel_pending_hover()
            self._state.hovered_country = None

    def set_mode(self, mode: Union[VisualizationMode, str]) -> None:
        with self._lock:
            self._mode = VisualizationMode(mode)
            logger.info("Visualization mode: %s", self._mode.value)
            self.render()

    def reset(self) -> None:
        with self._lock:
            self._state.selected_country = None
            if self._map is None:
                return
            try:
                self._map.reset_view()
            except Exception as e:
                err = ZoomError(f"Reset view failed: {e}")
                logger.warning("%s", err)

    def render(self) -> dict[str, str]:
        """
        Push fills for the current aggregates and mode to the map.

        A RenderError disables the map only: the adapter is disposed and
        map_error is set; the rest of the dashboard keeps working.
        """
        with self._lock:
            fills = fills_for(self._aggregates, self._mode)
            if self._map is None:
                return fills
            try:
                self._map.render(fills)
            except RenderError as e:
                logger.error("Map render failed: %s", e)
                self.map_error = MAP_ERROR_MESSAGE
                self._map.dispose()
                self._map = None
            return fills

    # -------------------------
    # Derived views
    # -------------------------

    def global_totals(self) -> CountryAggregate:
        return global_totals(self._aggregates)

    def selected_regions(self) -> list[SentimentRecord]:
        selected = self.state.selected_country
        if selected is None:
            return []
        return [r for r in self._records if r.country == selected]

    def selected_aggregate(self) -> Optional[CountryAggregate]:
        regions = self.selected_regions()
        return tally(regions) if regions else None

    def hovered_aggregate(self) -> Optional[CountryAggregate]:
        hovered = self.state.hovered_country
        return self._aggregates.get(hovered) if hovered else None

    def snapshot(self) -> DashboardView:
        with self._lock:
            state = self.state
            return DashboardView(
                mode=self._mode,
                country_count=self.country_count,
                region_count=self.region_count,
                global_totals=self.global_totals(),
                selected_country=state.selected_country,
                selected_aggregate=self.selected_aggregate(),
                selected_regions=tuple(self.selected_regions()),
                hovered_country=state.hovered_country,
                hovered_aggregate=self.hovered_aggregate(),
            )

    # -------------------------
    # Helpers
    # -------------------------

    def _on_click(self, country: Optional[str]) -> None:
        self.select(country)

    def _on_pointerover(self, country: Optional[str]) -> None:
        self.hover(country)

    def _on_pointerout(self, _country: Optional[str]) -> None:
        self.hover_out()

    def _commit_hover(self, country: str, token: int) -> None:
        with self._lock:
            if token != self._hover_token:
                return
            self._pending_hover = None
            if country not in self._aggregates:
                return
            self._state.hovered_country = country
            logger.debug("Hover committed: country=%s", country)

    def _cancel_pending_hover(self) -> None:
        self._hover_token += 1
        if self._pending_hover is not None:
            self._pending_hover.cancel()
            self._pending_hover = None

    def _zoom_to_country(self, country: str) -> None:
        code = code_for(country)
        if self._map is None or code is None:
            return
        try:
            self._map.zoom_to(GeoPoint(lat=code.lat, lon=code.lon), self._select_zoom_level, animate=True)
        except Exception as e:
            err = ZoomError(f"Zoom operation failed: country={country} err={e}")
            logger.warning("%s", err)
