from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


@dataclass(frozen=True)
class SentimentRecord:
    """One accepted CSV row. Built once at load time and never mutated."""

    country: str
    region: str
    sentiment: Union[int, float]
    label: str
    display_color: str


@dataclass(frozen=True)
class CountryAggregate:
    """
    Per-country sentiment tally.

    `total` is derived from the three buckets, so
    total == positive + neutral + negative always holds.
    """

    positive: int = 0
    neutral: int = 0
    negative: int = 0
    total: int = field(init=False)

    def __post_init__(self) -> None:
        if min(self.positive, self.neutral, self.negative) < 0:
            raise ValueError("Sentiment counts must be >= 0")
        object.__setattr__(self, "total", self.positive + self.neutral + self.negative)

    def __add__(self, other: CountryAggregate) -> CountryAggregate:
        if not isinstance(other, CountryAggregate):
            return NotImplemented
        return CountryAggregate(
            positive=self.positive + other.positive,
            neutral=self.neutral + other.neutral,
            negative=self.negative + other.negative,
        )


class VisualizationMode(str, Enum):
    OVERALL = "overall"
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"

    @property
    def label(self) -> str:
        return VISUALIZATION_LABELS[self]


VISUALIZATION_LABELS: dict[VisualizationMode, str] = {
    VisualizationMode.OVERALL: "Overall Sentiment",
    VisualizationMode.POSITIVE: "Positive Focus",
    VisualizationMode.NEGATIVE: "Negative Focus",
    VisualizationMode.NEUTRAL: "Neutral Focus",
}


@dataclass
class InteractionState:
    """Transient UI state. Both fields are independent and cleared on reload."""

    selected_country: Optional[str] = None
    hovered_country: Optional[str] = None


@dataclass(frozen=True)
class DashboardView:
    """Read-only snapshot of everything the presentation layer renders."""

    mode: VisualizationMode
    country_count: int
    region_count: int
    global_totals: CountryAggregate
    selected_country: Optional[str]
    selected_aggregate: Optional[CountryAggregate]
    selected_regions: tuple[SentimentRecord, ...]
    hovered_country: Optional[str]
    hovered_aggregate: Optional[CountryAggregate]
