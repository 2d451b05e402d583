from __future__ import annotations

from typing import Mapping, Optional, Union

from sentiment_map.country_codes import COUNTRY_ISO_MAPPING
from sentiment_map.models import CountryAggregate, VisualizationMode
from sentiment_map.sentiment_types import SENTIMENT_CONFIG, Sentiment

POSITIVE_COLOR = SENTIMENT_CONFIG[Sentiment.POSITIVE].color
NEUTRAL_COLOR = SENTIMENT_CONFIG[Sentiment.NEUTRAL].color
NEGATIVE_COLOR = SENTIMENT_CONFIG[Sentiment.NEGATIVE].color

WEAK_POSITIVE_COLOR = "#84cc16"
WEAK_NEGATIVE_COLOR = "#f87171"
WEAK_NEUTRAL_COLOR = "#fbbf24"

# Country has data but the focused share is below the weak threshold
BELOW_THRESHOLD_COLOR = "#e5e5e5"
# Country has no dataset entry at all
NO_DATA_COLOR = "#f1f5f9"

STRONG_RATIO = 0.7
WEAK_RATIO = 0.4

OVERALL_POSITIVE_SCORE = 1.5
OVERALL_NEUTRAL_SCORE = 0.5

# mode -> (aggregate field, strong color, weak color)
_FOCUS = {
    VisualizationMode.POSITIVE: ("positive", POSITIVE_COLOR, WEAK_POSITIVE_COLOR),
    VisualizationMode.NEGATIVE: ("negative", NEGATIVE_COLOR, WEAK_NEGATIVE_COLOR),
    VisualizationMode.NEUTRAL: ("neutral", NEUTRAL_COLOR, WEAK_NEUTRAL_COLOR),
}

PALETTE = frozenset(
    {
        POSITIVE_COLOR,
        NEUTRAL_COLOR,
        NEGATIVE_COLOR,
        WEAK_POSITIVE_COLOR,
        WEAK_NEGATIVE_COLOR,
        WEAK_NEUTRAL_COLOR,
        BELOW_THRESHOLD_COLOR,
        NO_DATA_COLOR,
    }
)


def color_for(
        aggregate: Optional[CountryAggregate],
        mode: Union[VisualizationMode, str],
) -> str:
    """
    Map a country's tally and the selected mode to one color of PALETTE.

    Rules:
    - no aggregate (or an empty one) -> NO_DATA_COLOR
    - overall: score = (2*pos + neu) / total; >=1.5 positive, >=0.5 neutral, else negative
    - focus modes: share of the focused bucket; >=0.7 strong, >=0.4 weak, else BELOW_THRESHOLD_COLOR

    Pure and total: never raises for a valid aggregate/mode pair.
    """
    if aggregate is None or aggregate.total <= 0:
        return NO_DATA_COLOR

    mode = VisualizationMode(mode)
    total = aggregate.total

    focus = _FOCUS.get(mode)
    if focus is None:
        score = (aggregate.positive * 2 + aggregate.neutral * 1 + aggregate.negative * 0) / total
        if score >= OVERALL_POSITIVE_SCORE:
            return POSITIVE_COLOR
        if score >= OVERALL_NEUTRAL_SCORE:
            return NEUTRAL_COLOR
        return NEGATIVE_COLOR

    field_name, strong, weak = focus
    ratio = getattr(aggregate, field_name) / total
    if ratio >= STRONG_RATIO:
        return strong
    if ratio >= WEAK_RATIO:
        return weak
    return BELOW_THRESHOLD_COLOR


def fills_for(
        aggregates: Mapping[str, CountryAggregate],
        mode: Union[VisualizationMode, str],
) -> dict[str, str]:
    """Resolve the fill of every mappable country, keyed by ISO-2 code."""
    return {
        code.iso2: color_for(aggregates.get(name), mode)
        for name, code in COUNTRY_ISO_MAPPING.items()
    }
