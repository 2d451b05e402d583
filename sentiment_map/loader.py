from __future__ import annotations

import io
import logging

import pandas as pd

from sentiment_map.errors import ParseError
from sentiment_map.http_client import HttpClient
from sentiment_map.models import SentimentRecord
from sentiment_map.sentiment_types import style_for

logger = logging.getLogger(__name__)

COUNTRY_COL = "Country"
REGION_COL = "Region"
SENTIMENT_COL = "RandomValue"
REQUIRED_COLUMNS = (COUNTRY_COL, REGION_COL, SENTIMENT_COL)

DELIMITER_CANDIDATES = (",", "\t", "|", ";")


class DatasetLoader:
    """
    Fetch a `Country,Region,RandomValue` CSV and turn it into SentimentRecords.

    Failure model:
    - FetchError: resource unreachable / bad status (raised by HttpClient)
    - ParseError: structural malformation (quoting, extra fields, missing columns)
    - Row-level defects are dropped, never raised
    """

    def __init__(self, http: HttpClient):
        self.http = http

    def load(self, locator: str) -> list[SentimentRecord]:
        """
        Load and parse a dataset.

        Raises:
            FetchError: if the resource cannot be read
            ParseError: if the CSV is structurally malformed
        """
        logger.info("Loading dataset: locator=%s", locator)
        text = self.http.get_text(locator)
        records = parse_records(text)
        logger.info("Dataset loaded: locator=%s records=%s", locator, len(records))
        return records


def parse_records(text: str) -> list[SentimentRecord]:
    """
    Parse CSV text into records.

    Rules:
    - header-based column mapping; header names are whitespace-trimmed
    - country/region trimmed; blank after trim -> row dropped
    - sentiment null or non-numeric -> row dropped
    - numeric but outside 0..2 -> kept with the "Unknown" label and gray color

    Raises:
        ParseError: unterminated quotes, a row wider than the header, or missing columns
    """
    if not text or not text.strip():
        return []

    df = _read_frame(text)
    if df.empty:
        return []

    country = df[COUNTRY_COL].str.strip()
    region = df[REGION_COL].str.strip()
    sentiment = pd.to_numeric(df[SENTIMENT_COL].str.strip(), errors="coerce")

    keep = (
        country.notna()
        & (country != "")
        & region.notna()
        & (region != "")
        & sentiment.notna()
    )
    dropped = int((~keep).sum())
    if dropped:
        logger.debug("Dropped malformed rows: count=%s", dropped)

    out: list[SentimentRecord] = []
    for c, r, s in zip(country[keep], region[keep], sentiment[keep]):
        code = _normalize_code(float(s))
        style = style_for(code)
        out.append(
            SentimentRecord(
                country=c,
                region=r,
                sentiment=code,
                label=style.label,
                display_color=style.color,
            )
        )
    return out


def guess_delimiter(text: str) -> str:
    """Pick the candidate delimiter that occurs most often in the header line."""
    header = next((ln for ln in text.splitlines() if ln.strip()), "")
    counts = {d: header.count(d) for d in DELIMITER_CANDIDATES}
    best = max(DELIMITER_CANDIDATES, key=lambda d: counts[d])
    return best if counts[best] > 0 else ","


def _read_frame(text: str) -> pd.DataFrame:
    # header=None makes the first line fix the field count, so wider rows
    # raise instead of being folded into an inferred index.
    try:
        raw = pd.read_csv(
            io.StringIO(text),
            sep=guess_delimiter(text),
            header=None,
            dtype=str,
            keep_default_na=False,
            na_values=[""],
            skip_blank_lines=True,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise ParseError(f"Critical errors parsing CSV data: {e}") from e

    header = [str(h).strip() if pd.notna(h) else "" for h in raw.iloc[0]]
    missing = [c for c in REQUIRED_COLUMNS if c not in header]
    if missing:
        raise ParseError(f"CSV is missing required columns: {missing}. Found: {header}")
    duplicated = [c for c in REQUIRED_COLUMNS if header.count(c) > 1]
    if duplicated:
        raise ParseError(f"CSV has duplicated columns: {duplicated}")

    df = raw.iloc[1:].copy()
    df.columns = header
    return df.reset_index(drop=True)


def _normalize_code(value: float):
    return int(value) if value.is_integer() else value
