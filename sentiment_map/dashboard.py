from __future__ import annotations

import logging
from typing import Any, Optional

import plotly.graph_objects as go
from dash import Dash, Input, Output, callback_context, dcc, html

from sentiment_map.color_policy import BELOW_THRESHOLD_COLOR, NO_DATA_COLOR
from sentiment_map.controller import InteractionController
from sentiment_map.http_client import HttpClient, HttpConfig
from sentiment_map.loader import DatasetLoader
from sentiment_map.map_adapter import PlotlyMapAdapter
from sentiment_map.models import CountryAggregate, DashboardView, VisualizationMode
from sentiment_map.sentiment_types import SENTIMENT_CONFIG, Sentiment
from sentiment_map.session import DashboardSession, LoadStatus
from sentiment_map.settings import DashboardSettings, load_settings

logger = logging.getLogger(__name__)

THEME = {
    "background": "#F6F7FB",
    "panel": "#FFFFFF",
    "text": "#111827",
    "muted_text": "#6B7280",
    "border": "rgba(17,24,39,0.10)",
    "accent": "#2563eb",
    "error": "#dc2626",
}

PANEL_STYLE = {
    "background": THEME["panel"],
    "border": f"1px solid {THEME['border']}",
    "borderRadius": "10px",
    "padding": "16px",
    "marginBottom": "16px",
}

HIDDEN = {"display": "none"}


# -----------------------------------------------------------------------------
# Wiring
# -----------------------------------------------------------------------------
def build_session(settings: DashboardSettings) -> DashboardSession:
    http = HttpClient(
        HttpConfig(
            timeout_sec=settings.request_timeout_sec,
            user_agent=settings.user_agent,
        )
    )
    return DashboardSession(
        loader=DatasetLoader(http),
        settings=settings,
        map_factory=lambda: PlotlyMapAdapter(max_zoom_level=settings.max_zoom_level),
    )


def create_app(
        settings: Optional[DashboardSettings] = None,
        session: Optional[DashboardSession] = None,
        load: bool = True,
) -> Dash:
    """
    Build the Dash app around one DashboardSession.

    The session (and through it the controller and map) is owned by the app
    instance; callbacks reach it through this closure, never via module globals.
    """
    settings = settings or load_settings()
    session = session or build_session(settings)
    if load and session.controller is None:
        session.reload()

    app = Dash(__name__, title="Global Sentiment Analysis", suppress_callback_exceptions=True)
    app.layout = lambda: html.Div(
        style={"background": THEME["background"], "minHeight": "100vh", "padding": "24px"},
        children=[
            dcc.Loading(
                type="circle",
                children=html.Div(id="page", children=render_page(session)),
            )
        ],
    )
    register_callbacks(app, session)
    return app


def register_callbacks(app: Dash, session: DashboardSession) -> None:
    @app.callback(
        Output("page", "children"),
        Input("retry-button", "n_clicks"),
        prevent_initial_call=True,
    )
    def retry_loading(_n_clicks):
        logger.info("Manual reload requested")
        session.reload()
        return render_page(session)

    @app.callback(
        Output("world-map", "figure"),
        Output("mode-badge", "children"),
        Output("selected-card", "style"),
        Output("selected-title", "children"),
        Output("selected-body", "children"),
        Input("world-map", "clickData"),
        Input("mode", "value"),
        Input("reset-view", "n_clicks"),
        Input("close-selection", "n_clicks"),
        prevent_initial_call=True,
    )
    def update_map(click_data, mode, _reset_clicks, _close_clicks):
        controller = session.controller
        if controller is None:
            return go.Figure(), "", HIDDEN, "", []

        trig = callback_context.triggered[0]["prop_id"] if callback_context.triggered else ""
        handle_map_trigger(controller, trig, click_data=click_data, mode=mode)

        view = controller.snapshot()
        title, body = render_selected(view)
        return (
            map_figure(controller),
            view.mode.label,
            PANEL_STYLE if view.selected_country else HIDDEN,
            title,
            body,
        )

    @app.callback(
        Output("hover-panel", "children"),
        Output("hover-panel", "style"),
        Input("world-map", "hoverData"),
        Input("hover-refresh", "n_intervals"),
        prevent_initial_call=True,
    )
    def update_hover(hover_data, _n_intervals):
        controller = session.controller
        if controller is None:
            return [], HIDDEN

        trig = callback_context.triggered[0]["prop_id"] if callback_context.triggered else ""
        if trig.startswith("world-map.hoverData"):
            handle_hover_trigger(controller, hover_data)

        children = render_hover(controller.snapshot())
        return children, (PANEL_STYLE if children else HIDDEN)


# -----------------------------------------------------------------------------
# Event translation (Dash payloads -> controller via the map adapter)
# -----------------------------------------------------------------------------
def event_location(event_data: Optional[dict[str, Any]]) -> Optional[str]:
    if not event_data:
        return None
    points = event_data.get("points") or []
    if not points:
        return None
    return points[0].get("location")


def handle_map_trigger(
        controller: InteractionController,
        trig: str,
        click_data: Optional[dict[str, Any]] = None,
        mode: Optional[str] = None,
) -> None:
    if trig.startswith("world-map.clickData"):
        adapter = controller.map
        if adapter is not None:
            adapter.dispatch("click", event_location(click_data))
    elif trig.startswith("mode.value") and mode:
        controller.set_mode(mode)
    elif trig.startswith("reset-view.n_clicks"):
        controller.reset()
    elif trig.startswith("close-selection.n_clicks"):
        controller.clear_selection()


def handle_hover_trigger(controller: InteractionController, hover_data: Optional[dict[str, Any]]) -> None:
    adapter = controller.map
    if adapter is None:
        return
    location = event_location(hover_data)
    if location is None:
        adapter.dispatch("pointerout", None)
    else:
        adapter.dispatch("pointerover", location)


def map_figure(controller: InteractionController) -> go.Figure:
    adapter = controller.map
    if isinstance(adapter, PlotlyMapAdapter) and not adapter.disposed:
        return adapter.figure
    return go.Figure()


# -----------------------------------------------------------------------------
# Views
# -----------------------------------------------------------------------------
def render_page(session: DashboardSession) -> list:
    if session.status == LoadStatus.LOADING:
        return [render_loading()]
    if session.status == LoadStatus.ERROR or session.controller is None:
        return [render_error(session.error or "Unknown error occurred")]
    return render_ready(session.controller, session.settings)


def render_loading() -> html.Div:
    return html.Div(
        style={**PANEL_STYLE, "textAlign": "center", "maxWidth": "480px", "margin": "80px auto"},
        children=[
            html.H2("Loading Sentiment Data"),
            html.P("Preparing your global sentiment dashboard...", style={"color": THEME["muted_text"]}),
        ],
    )


def render_error(message: str) -> html.Div:
    return html.Div(
        style={**PANEL_STYLE, "maxWidth": "640px", "margin": "80px auto"},
        children=[
            html.H2("Error Loading Dashboard", style={"color": THEME["error"]}),
            html.Div(message, id="error-message", style={"color": THEME["error"]}),
            html.Button("Retry Loading", id="retry-button", n_clicks=0, style={"marginTop": "16px", "width": "100%"}),
        ],
    )


def render_ready(controller: InteractionController, settings: DashboardSettings) -> list:
    view = controller.snapshot()
    selected_title, selected_body = render_selected(view)

    if controller.map_error:
        map_children = [
            html.Div(controller.map_error, id="map-error", style={"color": THEME["error"]}),
            dcc.Graph(id="world-map", figure=go.Figure(), style=HIDDEN),
        ]
    else:
        map_children = [
            dcc.Graph(
                id="world-map",
                figure=map_figure(controller),
                clear_on_unhover=True,
                config={"displayModeBar": False, "responsive": True, "scrollZoom": True},
                style={"height": "500px"},
            )
        ]

    return [
        html.Div(
            style={"textAlign": "center", "padding": "16px 0"},
            children=[
                html.H1("Global Sentiment Analysis"),
                html.P(
                    f"Interactive visualization of regional sentiment data across "
                    f"{view.country_count} countries and {view.region_count} regions worldwide",
                    style={"color": THEME["muted_text"]},
                ),
            ],
        ),
        html.Div(
            style=PANEL_STYLE,
            children=[
                html.H3("Visualization Controls"),
                html.Div(
                    style={"display": "flex", "gap": "12px", "alignItems": "center"},
                    children=[
                        html.Button("Reset View", id="reset-view", n_clicks=0),
                        dcc.Dropdown(
                            id="mode",
                            options=mode_options(),
                            value=view.mode.value,
                            clearable=False,
                            style={"width": "240px"},
                        ),
                    ],
                ),
                render_legend(),
            ],
        ),
        html.Div(
            style={"display": "grid", "gridTemplateColumns": "2fr 1fr", "gap": "16px"},
            children=[
                html.Div(
                    style=PANEL_STYLE,
                    children=[
                        html.H3("Interactive World Map"),
                        html.P(
                            "Click countries for details • Hover for quick stats • Zoom and pan to explore",
                            style={"color": THEME["muted_text"]},
                        ),
                        html.Span(view.mode.label, id="mode-badge", style={"color": THEME["accent"]}),
                        *map_children,
                    ],
                ),
                html.Div(
                    children=[
                        html.Div(
                            style=PANEL_STYLE,
                            children=[html.H3("Global Overview"), *render_global(view)],
                        ),
                        html.Div(id="hover-panel", style=HIDDEN, children=render_hover(view)),
                        html.Div(
                            id="selected-card",
                            style=PANEL_STYLE if view.selected_country else HIDDEN,
                            children=[
                                html.Div(
                                    style={"display": "flex", "justifyContent": "space-between"},
                                    children=[
                                        html.H3(selected_title, id="selected-title"),
                                        html.Button("✕", id="close-selection", n_clicks=0),
                                    ],
                                ),
                                html.Div(id="selected-body", children=selected_body),
                            ],
                        ),
                    ]
                ),
            ],
        ),
        dcc.Interval(id="hover-refresh", interval=settings.hover_refresh_ms),
    ]


def render_legend() -> html.Div:
    items = [(style.label, style.color) for _, style in sorted(SENTIMENT_CONFIG.items())]
    items += [("Below threshold", BELOW_THRESHOLD_COLOR), ("No data", NO_DATA_COLOR)]
    return html.Div(
        style={"display": "flex", "gap": "16px", "marginTop": "12px"},
        children=[
            html.Div(
                style={"display": "flex", "alignItems": "center", "gap": "6px"},
                children=[
                    html.Span(style={"width": "14px", "height": "14px", "background": color, "display": "inline-block"}),
                    html.Span(label),
                ],
            )
            for label, color in items
        ],
    )


def stat_block(label: str, value: int, color: str) -> html.Div:
    return html.Div(
        style={"textAlign": "center"},
        children=[
            html.Div(str(value), style={"fontSize": "22px", "fontWeight": "bold", "color": color}),
            html.Div(label, style={"color": THEME["muted_text"], "fontSize": "12px"}),
        ],
    )


def sentiment_stats(agg: CountryAggregate) -> html.Div:
    return html.Div(
        style={"display": "grid", "gridTemplateColumns": "repeat(3, 1fr)", "gap": "8px"},
        children=[
            stat_block("Positive", agg.positive, SENTIMENT_CONFIG[Sentiment.POSITIVE].color),
            stat_block("Neutral", agg.neutral, SENTIMENT_CONFIG[Sentiment.NEUTRAL].color),
            stat_block("Negative", agg.negative, SENTIMENT_CONFIG[Sentiment.NEGATIVE].color),
        ],
    )


def render_global(view: DashboardView) -> list:
    return [
        html.Div(
            style={"display": "grid", "gridTemplateColumns": "1fr 1fr", "gap": "8px", "marginBottom": "8px"},
            children=[
                stat_block("Countries", view.country_count, THEME["accent"]),
                stat_block("Regions", view.region_count, THEME["accent"]),
            ],
        ),
        sentiment_stats(view.global_totals),
    ]


def render_hover(view: DashboardView) -> list:
    if view.hovered_country is None or view.hovered_aggregate is None:
        return []
    agg = view.hovered_aggregate
    return [
        html.H4(view.hovered_country),
        html.Div(f"{agg.total} regions", style={"color": THEME["muted_text"]}),
        sentiment_stats(agg),
    ]


def render_selected(view: DashboardView) -> tuple[str, list]:
    if view.selected_country is None or view.selected_aggregate is None:
        return "", []

    rows = [
        html.Li(
            style={"display": "flex", "justifyContent": "space-between", "padding": "4px 0"},
            children=[
                html.Span(rec.region),
                html.Span(
                    rec.label,
                    style={
                        "background": rec.display_color,
                        "color": "white",
                        "borderRadius": "6px",
                        "padding": "0 8px",
                    },
                ),
            ],
        )
        for rec in view.selected_regions
    ]
    body = [
        sentiment_stats(view.selected_aggregate),
        html.H4(f"Regional Breakdown ({len(view.selected_regions)} regions)"),
        html.Ul(rows, style={"listStyle": "none", "padding": 0, "maxHeight": "260px", "overflowY": "auto"}),
    ]
    return view.selected_country, body


def mode_options() -> list[dict[str, str]]:
    return [{"label": m.label, "value": m.value} for m in VisualizationMode]
