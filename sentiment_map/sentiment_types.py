from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Mapping


class Sentiment(IntEnum):
    NEGATIVE = 0
    NEUTRAL = 1
    POSITIVE = 2


@dataclass(frozen=True)
class SentimentStyle:
    """
    Display attributes for one sentiment code.

    - label: human readable name shown in badges and the legend
    - color: hex fill used for the code itself (and the strong band of each focus mode)
    """

    label: str
    color: str


SENTIMENT_CONFIG: Mapping[int, SentimentStyle] = {
    Sentiment.NEGATIVE: SentimentStyle(label="Negative", color="#dc2626"),
    Sentiment.NEUTRAL: SentimentStyle(label="Neutral", color="#ca8a04"),
    Sentiment.POSITIVE: SentimentStyle(label="Positive", color="#16a34a"),
}

UNKNOWN_STYLE = SentimentStyle(label="Unknown", color="#6b7280")


def style_for(code: float) -> SentimentStyle:
    """Look up label/color for a raw code. Anything outside 0..2 is Unknown."""
    if isinstance(code, float):
        if not code.is_integer():
            return UNKNOWN_STYLE
        code = int(code)
    return SENTIMENT_CONFIG.get(code, UNKNOWN_STYLE)
