from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class DashboardSettings(BaseSettings):
    """
    Environment-driven settings for the sentiment map dashboard.

    Every field has a default; the dashboard runs without any env vars.
    """

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")

    # ---- Dataset ----
    # http(s) URL, file:// URL, or a local path
    data_locator: str = Field(default="data/geo_sentiments.csv", alias="SENTIMENT_MAP_DATA")

    request_timeout_sec: float = Field(default=15.0, alias="SENTIMENT_MAP_REQUEST_TIMEOUT_SEC")
    user_agent: str = Field(
        default="sentiment-map-dashboard/0.1",
        alias="SENTIMENT_MAP_USER_AGENT",
    )

    # ---- Interaction ----
    hover_delay_sec: float = Field(default=0.1, alias="SENTIMENT_MAP_HOVER_DELAY_SEC")
    select_zoom_level: float = Field(default=2.0, alias="SENTIMENT_MAP_SELECT_ZOOM_LEVEL")
    max_zoom_level: float = Field(default=8.0, alias="SENTIMENT_MAP_MAX_ZOOM_LEVEL")

    # Dash polls the controller at this interval so debounced hover commits show up
    hover_refresh_ms: int = Field(default=250, alias="SENTIMENT_MAP_HOVER_REFRESH_MS")

    # ---- Server ----
    host: str = Field(default="127.0.0.1", alias="SENTIMENT_MAP_HOST")
    port: int = Field(default=8050, alias="SENTIMENT_MAP_PORT")
    debug: bool = Field(default=False, alias="SENTIMENT_MAP_DEBUG")


def load_settings() -> DashboardSettings:
    return DashboardSettings()
