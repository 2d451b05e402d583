from __future__ import annotations

from dash import Dash

from sentiment_map.dashboard import (
    create_app,
    event_location,
    handle_hover_trigger,
    handle_map_trigger,
    mode_options,
    render_error,
    render_hover,
    render_page,
    render_selected,
)
from sentiment_map.errors import FetchError
from sentiment_map.http_client import HttpClient, HttpConfig
from sentiment_map.loader import DatasetLoader
from sentiment_map.map_adapter import PlotlyMapAdapter
from sentiment_map.models import VisualizationMode
from sentiment_map.scheduler import ManualScheduler
from sentiment_map.session import DashboardSession
from sentiment_map.settings import DashboardSettings

CSV = "Country,Region,RandomValue\nUnited States,California,2\nUnited States,Texas,1\nJapan,Tokyo,2\n"


class _StaticHttp(HttpClient):
    def __init__(self, body):
        super().__init__(HttpConfig(timeout_sec=1.0, user_agent="test"))
        self.body = body

    def get_text(self, locator: str) -> str:
        if isinstance(self.body, Exception):
            raise self.body
        return self.body


def _session(body=CSV, scheduler=None) -> DashboardSession:
    return DashboardSession(
        loader=DatasetLoader(_StaticHttp(body)),
        settings=DashboardSettings(SENTIMENT_MAP_DATA="/geo_sentiments.csv"),
        map_factory=PlotlyMapAdapter,
        scheduler=scheduler or ManualScheduler(),
    )


def _ids(component) -> set[str]:
    """Collect every component id in a Dash tree."""
    found: set[str] = set()
    stack = [component]
    while stack:
        node = stack.pop()
        if isinstance(node, (list, tuple)):
            stack.extend(node)
            continue
        if node is None or isinstance(node, (str, int, float)):
            continue
        cid = getattr(node, "id", None)
        if cid:
            found.add(cid)
        stack.append(getattr(node, "children", None))
    return found


def test_create_app_loads_session_and_builds_layout():
    session = _session()
    app = create_app(settings=session.settings, session=session)
    assert isinstance(app, Dash)
    assert session.controller is not None
    assert {"world-map", "mode", "reset-view", "hover-panel", "selected-card"} <= _ids(render_page(session))


def test_error_page_offers_retry():
    session = _session(FetchError("Failed to fetch CSV file: 500"))
    session.reload()
    ids = _ids(render_page(session))
    assert "retry-button" in ids
    assert "world-map" not in ids


def test_error_view_shows_message():
    div = render_error("Failed to load data: boom")
    assert "Failed to load data: boom" in str(div)


def test_event_location_reads_first_point():
    assert event_location({"points": [{"location": "JPN"}]}) == "JPN"
    assert event_location({"points": []}) is None
    assert event_location(None) is None


def test_click_and_mode_triggers_reach_controller():
    session = _session()
    session.reload()
    c = session.controller

    handle_map_trigger(c, "world-map.clickData", click_data={"points": [{"location": "JPN"}]})
    assert c.state.selected_country == "Japan"

    title, body = render_selected(c.snapshot())
    assert title == "Japan"
    assert "Regional Breakdown (1 regions)" in str(body)

    handle_map_trigger(c, "mode.value", mode="positive")
    assert c.mode is VisualizationMode.POSITIVE

    handle_map_trigger(c, "close-selection.n_clicks")
    assert c.state.selected_country is None

    handle_map_trigger(c, "world-map.clickData", click_data={"points": [{"location": "USA"}]})
    handle_map_trigger(c, "reset-view.n_clicks")
    assert c.state.selected_country is None


def test_hover_trigger_is_debounced_until_scheduler_fires():
    scheduler = ManualScheduler()
    session = _session(scheduler=scheduler)
    session.reload()
    c = session.controller

    handle_hover_trigger(c, {"points": [{"location": "USA"}]})
    assert render_hover(c.snapshot()) == []

    scheduler.advance(0.1)
    assert "United States" in str(render_hover(c.snapshot()))

    handle_hover_trigger(c, None)
    assert render_hover(c.snapshot()) == []


def test_mode_options_list_all_modes_by_label():
    assert [o["label"] for o in mode_options()] == [
        "Overall Sentiment",
        "Positive Focus",
        "Negative Focus",
        "Neutral Focus",
    ]
