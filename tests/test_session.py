from __future__ import annotations

from sentiment_map.controller import MAP_ERROR_MESSAGE
from sentiment_map.errors import FetchError, ParseError, RenderError
from sentiment_map.http_client import HttpClient, HttpConfig
from sentiment_map.loader import DatasetLoader
from sentiment_map.map_adapter import PlotlyMapAdapter
from sentiment_map.models import CountryAggregate
from sentiment_map.scheduler import ManualScheduler
from sentiment_map.session import DashboardSession, LoadStatus
from sentiment_map.settings import DashboardSettings

CSV = "Country,Region,RandomValue\nUS,CA,2\nUS,TX,1\nUS,NY,0\nJapan,Tokyo,2\n"


class _ScriptedHttp(HttpClient):
    """Replays a list of outcomes: a string body or an exception to raise."""

    def __init__(self, outcomes: list):
        super().__init__(HttpConfig(timeout_sec=1.0, user_agent="test"))
        self.outcomes = list(outcomes)

    def get_text(self, locator: str) -> str:
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _settings() -> DashboardSettings:
    return DashboardSettings(SENTIMENT_MAP_DATA="/geo_sentiments.csv")


def _session(outcomes: list, map_factory=None) -> DashboardSession:
    return DashboardSession(
        loader=DatasetLoader(_ScriptedHttp(outcomes)),
        settings=_settings(),
        map_factory=map_factory,
        scheduler=ManualScheduler(),
    )


def test_session_starts_loading_then_ready():
    s = _session([CSV])
    assert s.status is LoadStatus.LOADING

    assert s.reload() is LoadStatus.READY
    assert s.error is None
    assert s.controller.aggregates["US"] == CountryAggregate(positive=1, neutral=1, negative=1)


def test_fetch_failure_is_terminal_until_reload():
    s = _session([FetchError("Failed to fetch CSV file: 404"), CSV])

    assert s.reload() is LoadStatus.ERROR
    assert s.error == "Failed to load data: Failed to fetch CSV file: 404"
    assert s.controller is None

    assert s.reload() is LoadStatus.READY
    assert s.error is None
    assert s.controller.country_count == 2


def test_reload_can_reenter_error_state():
    s = _session([CSV, ParseError("Critical errors parsing CSV data")])
    s.reload()
    first = s.controller

    assert s.reload() is LoadStatus.ERROR
    assert s.controller is None
    assert first.map is None
    assert "Critical errors" in s.error


def test_reload_replaces_dataset_and_disposes_previous_map():
    built: list[PlotlyMapAdapter] = []

    def factory():
        adapter = PlotlyMapAdapter()
        built.append(adapter)
        return adapter

    s = _session([CSV, "Country,Region,RandomValue\nJapan,Osaka,0\n"], map_factory=factory)
    s.reload()
    s.controller.select("US")
    s.reload()

    assert len(built) == 2
    assert built[0].disposed is True
    assert built[1].disposed is False
    assert s.controller.state.selected_country is None
    assert set(s.controller.aggregates) == {"Japan"}


def test_map_init_failure_keeps_dashboard_usable():
    def factory():
        raise RenderError("no canvas")

    s = _session([CSV], map_factory=factory)
    assert s.reload() is LoadStatus.READY
    assert s.controller.map is None
    assert s.controller.map_error == MAP_ERROR_MESSAGE

    s.controller.select("Japan")
    assert s.controller.selected_aggregate() == CountryAggregate(positive=1)


def test_dispose_releases_controller():
    s = _session([CSV], map_factory=PlotlyMapAdapter)
    s.reload()
    adapter = s.controller.map
    s.dispose()
    assert s.controller is None
    assert adapter.disposed is True
