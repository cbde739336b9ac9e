from __future__ import annotations

import logging
from typing import Dict, Optional

import requests

from ..config import DEFAULT_USER_AGENT
from ..errors import FetchError

logger = logging.getLogger(__name__)

_DEFAULT_HEADERS = {
    "User-Agent": DEFAULT_USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}


class PageFetcher:
    """
    GET a page and return its HTML body.

    Any network error, timeout or non-2xx response (after redirects, when
    follow_redirects is on) raises FetchError. No retries: a failed fetch is
    terminal for the caller's item.
    """

    def __init__(
        self,
        timeout_s: float = 10.0,
        follow_redirects: bool = True,
        user_agent: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout_s = timeout_s
        self.follow_redirects = follow_redirects
        self._owns_session = session is None
        self._session = session or requests.Session()
        headers: Dict[str, str] = dict(_DEFAULT_HEADERS)
        if user_agent:
            headers["User-Agent"] = user_agent
        self._session.headers.update(headers)

    def fetch(self, url: str) -> str:
        try:
            resp = self._session.get(url, timeout=self.timeout_s, allow_redirects=self.follow_redirects)
        except requests.Timeout as exc:
            raise FetchError(url, f"timeout after {self.timeout_s}s") from exc
        except requests.RequestException as exc:
            raise FetchError(url, f"{type(exc).__name__}: {exc}") from exc

        if not (200 <= resp.status_code < 300):
            raise FetchError(url, f"HTTP {resp.status_code}", status=resp.status_code)

        if resp.url and resp.url != url:
            logger.debug("redirected %s -> %s", url, resp.url)
        return resp.text or ""

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "PageFetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
