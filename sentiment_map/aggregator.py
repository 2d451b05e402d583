from __future__ import annotations

import logging
from typing import Iterable, Mapping

from sentiment_map.models import CountryAggregate, SentimentRecord
from sentiment_map.sentiment_types import Sentiment

logger = logging.getLogger(__name__)

_BUCKETS = {
    Sentiment.POSITIVE: "positive",
    Sentiment.NEUTRAL: "neutral",
    Sentiment.NEGATIVE: "negative",
}


def aggregate(records: Iterable[SentimentRecord]) -> dict[str, CountryAggregate]:
    """
    Reduce records into a per-country tally in one pass.

    - Groups by exact country string (records are already trimmed at load)
    - Every observed country gets an aggregate, zeroed before accumulating
    - Records with an Unknown code are not counted, so total stays the bucket sum
    - Counts are commutative: input order never changes the result
    """
    counts: dict[str, dict[str, int]] = {}
    skipped = 0

    for rec in records:
        tally_ = counts.setdefault(rec.country, {"positive": 0, "neutral": 0, "negative": 0})
        bucket = _bucket_for(rec.sentiment)
        if bucket is None:
            skipped += 1
            continue
        tally_[bucket] += 1

    if skipped:
        logger.debug("Records with unknown sentiment left out of aggregates: count=%s", skipped)

    return {country: CountryAggregate(**c) for country, c in counts.items()}


def tally(records: Iterable[SentimentRecord]) -> CountryAggregate:
    """Count a flat record sequence (e.g. one country's regions) with the same rules as aggregate()."""
    c = {"positive": 0, "neutral": 0, "negative": 0}
    for rec in records:
        bucket = _bucket_for(rec.sentiment)
        if bucket is not None:
            c[bucket] += 1
    return CountryAggregate(**c)


def global_totals(aggregates: Mapping[str, CountryAggregate]) -> CountryAggregate:
    return sum(aggregates.values(), CountryAggregate())


def _bucket_for(code) -> str | None:
    if isinstance(code, float):
        if not code.is_integer():
            return None
        code = int(code)
    try:
        return _BUCKETS.get(Sentiment(code))
    except ValueError:
        return None
