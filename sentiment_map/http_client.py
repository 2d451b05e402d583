from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

import requests

from sentiment_map.errors import FetchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HttpConfig:
    timeout_sec: float
    user_agent: str


class HttpClient:
    """
    Thin resource reader for the dataset:
    - http(s) URLs go through a requests.Session with a timeout
    - file:// URLs and plain paths are read from disk
    - Single attempt. A failed fetch is terminal until the user reloads.
    """

    def __init__(self, config: HttpConfig, session: Optional[requests.Session] = None):
        self._cfg = config
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "User-Agent": self._cfg.user_agent,
                "Accept": "text/csv, text/plain;q=0.9, */*;q=0.5",
            }
        )

    def get_text(self, locator: str) -> str:
        """
        Read a resource and return its body as text.

        Raises:
            FetchError: network error, non-2xx status, or unreadable file
        """
        parsed = urlparse(locator)
        if parsed.scheme in ("http", "https"):
            return self._get_url(locator)
        if parsed.scheme == "file":
            return self._read_file(Path(unquote(parsed.path)))
        return self._read_file(Path(locator))

    def _get_url(self, url: str) -> str:
        try:
            resp = self._session.get(url, timeout=self._cfg.timeout_sec)
            resp.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            logger.error("HTTP GET failed: url=%s status=%s", url, status)
            raise FetchError(f"Failed to fetch CSV file: {status}") from e
        except requests.RequestException as e:
            logger.error("HTTP GET failed: url=%s err=%s", url, e)
            raise FetchError(f"Failed to fetch CSV file: {e}") from e

        # CSV is served as UTF-8 (optionally BOM-prefixed) whatever the charset header says
        resp.encoding = "utf-8-sig"
        return resp.text

    def _read_file(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Read failed: path=%s err=%s", path, e)
            raise FetchError(f"Failed to read CSV file: {path}") from e
