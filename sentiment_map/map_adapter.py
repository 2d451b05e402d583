from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Protocol

import plotly.graph_objects as go

from sentiment_map.color_policy import NO_DATA_COLOR
from sentiment_map.country_codes import country_for_location, iso3_for_iso2
from sentiment_map.errors import RenderError

logger = logging.getLogger(__name__)

MAP_EVENTS = ("click", "pointerover", "pointerout")

EventHandler = Callable[[Optional[str]], None]


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lon: float


HOME_POINT = GeoPoint(lat=20.0, lon=0.0)


class MapAdapter(Protocol):
    """What the controller needs from a map library."""

    def render(self, fills: Mapping[str, str]) -> None: ...

    def on(self, event: str, handler: EventHandler) -> None: ...

    def dispatch(self, event: str, location: Optional[str]) -> None: ...

    def zoom_to(self, point: GeoPoint, level: float, animate: bool = True) -> None: ...

    def reset_view(self) -> None: ...

    def dispose(self) -> None: ...


class PlotlyMapAdapter:
    """
    Plotly choropleth behind the MapAdapter protocol.

    - One trace per distinct fill color (constant colorscale), keyed by ISO-3
    - Countries without data are not traced; the land color shows them as NO_DATA_COLOR
    - Events arrive from the presentation layer via dispatch() with a Plotly location
    - After dispose() every call raises RenderError
    """

    def __init__(
            self,
            max_zoom_level: float = 8.0,
            home: GeoPoint = HOME_POINT,
            no_data_color: str = NO_DATA_COLOR,
    ):
        self.max_zoom_level = max_zoom_level
        self.home = home
        self.no_data_color = no_data_color
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)
        self._disposed = False
        try:
            self._fig = go.Figure(layout=self._build_layout())
        except ValueError as e:
            raise RenderError(f"Failed to initialize map visualization: {e}") from e
        logger.info("Plotly map ready: max_zoom=%s", max_zoom_level)

    @property
    def figure(self) -> go.Figure:
        self._assert_alive()
        return self._fig

    @property
    def disposed(self) -> bool:
        return self._disposed

    def render(self, fills: Mapping[str, str]) -> None:
        """
        Redraw country fills.

        Raises:
            RenderError: if Plotly rejects the traces or the adapter is disposed
        """
        self._assert_alive()

        by_color: dict[str, list[str]] = defaultdict(list)
        for iso2, color in fills.items():
            if color == self.no_data_color:
                continue
            if iso3_for_iso2(iso2) is None:
                logger.debug("No polygon for region id=%s", iso2)
                continue
            by_color[color].append(iso2)

        try:
            traces = [self._trace(color, sorted(ids)) for color, ids in sorted(by_color.items())]
            self._fig = go.Figure(data=traces, layout=self._fig.layout)
        except ValueError as e:
            raise RenderError(f"Map render failed: {e}") from e

    def on(self, event: str, handler: EventHandler) -> None:
        self._assert_alive()
        if event not in MAP_EVENTS:
            raise ValueError(f"Unsupported map event: {event}")
        self._handlers[event].append(handler)

    def dispatch(self, event: str, location: Optional[str]) -> None:
        """Forward a Plotly event. Locations with no known country are ignored."""
        self._assert_alive()
        country = country_for_location(location)
        if event != "pointerout" and country is None:
            logger.debug("Ignoring %s on unmapped location=%s", event, location)
            return
        for handler in list(self._handlers.get(event, ())):
            handler(country)

    def zoom_to(self, point: GeoPoint, level: float, animate: bool = True) -> None:
        self._assert_alive()
        # Plotly geo projections do not animate; animate is accepted and ignored
        scale = min(max(float(level), 1.0), self.max_zoom_level)
        self._fig.update_geos(
            fitbounds=False,
            center=dict(lat=point.lat, lon=point.lon),
            projection_scale=scale,
        )

    def reset_view(self) -> None:
        """Fit the view to every traced (i.e. data-bearing) country."""
        self._assert_alive()
        if self._fig.data:
            self._fig.update_geos(fitbounds="locations", projection_scale=1)
        else:
            self._fig.update_geos(
                fitbounds=False,
                center=dict(lat=self.home.lat, lon=self.home.lon),
                projection_scale=1,
            )

    def dispose(self) -> None:
        if self._disposed:
            return
        self._handlers.clear()
        self._fig = None
        self._disposed = True
        logger.info("Plotly map disposed")

    # -------------------------
    # Helpers
    # -------------------------

    def _trace(self, color: str, iso2_ids: list[str]) -> go.Choropleth:
        names = [country_for_location(i) for i in iso2_ids]
        return go.Choropleth(
            locations=[iso3_for_iso2(i) for i in iso2_ids],
            locationmode="ISO-3",
            z=[1] * len(iso2_ids),
            colorscale=[[0, color], [1, color]],
            showscale=False,
            customdata=names,
            hovertemplate="%{customdata}<extra></extra>",
            marker_line_color="#ffffff",
            marker_line_width=0.5,
            name=color,
        )

    def _build_layout(self) -> go.Layout:
        return go.Layout(
            margin=dict(l=0, r=0, t=0, b=0),
            paper_bgcolor="#f8fafc",
            dragmode="pan",
            showlegend=False,
            geo=dict(
                projection_type="mercator",
                center=dict(lat=self.home.lat, lon=self.home.lon),
                projection_scale=1,
                showframe=False,
                showcoastlines=False,
                showcountries=True,
                countrycolor="#ffffff",
                showland=True,
                landcolor=self.no_data_color,
                bgcolor="#f8fafc",
            ),
        )

    def _assert_alive(self) -> None:
        if self._disposed:
            raise RenderError("Map adapter used after dispose()")
