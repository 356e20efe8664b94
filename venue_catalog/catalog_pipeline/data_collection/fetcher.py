"""
Resilient Sheet Fetcher

Downloads the raw CSV export of the published sheet. The primary URL is tried
first, then each configured proxy rewrite in order; attempts are strictly
sequential and the first successful body wins. Local preview environments
often block cross-origin fetches, which is what the public read-through
proxies work around.
"""

from __future__ import annotations

import logging
import re
import urllib.parse
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Protocol, Sequence

import requests

from ...core.errors import FetchError

logger = logging.getLogger(__name__)

EndpointRewrite = Callable[[str], str]

_SCHEME_RE = re.compile(r"^https?://")


def jina_reader_rewrite(url: str) -> str:
    return f"https://r.jina.ai/http/{_SCHEME_RE.sub('', url)}"


def allorigins_rewrite(url: str) -> str:
    return f"https://api.allorigins.win/raw?url={urllib.parse.quote(url, safe='')}"


ENDPOINT_REWRITES: Dict[str, EndpointRewrite] = {
    "jina": jina_reader_rewrite,
    "allorigins": allorigins_rewrite,
}


class HttpSession(Protocol):
    """The subset of ``requests.Session`` the fetcher relies on."""

    def get(self, url: str, **kwargs) -> requests.Response:
        ...


@dataclass(frozen=True)
class FetchResult:
    url: str
    text: str


class ResilientFetcher:
    """Try the primary endpoint, then each rewrite, until one returns 2xx."""

    def __init__(
        self,
        rewrites: Sequence[EndpointRewrite] = (),
        *,
        timeout_s: float = 20.0,
        session: Optional[HttpSession] = None,
    ) -> None:
        self._rewrites = tuple(rewrites)
        self._timeout_s = timeout_s
        self._session = session

    @property
    def session(self) -> HttpSession:
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def candidate_urls(self, endpoint: str) -> List[str]:
        return [endpoint, *(rewrite(endpoint) for rewrite in self._rewrites)]

    def _get_text(self, url: str) -> str:
        resp = self.session.get(
            url,
            timeout=self._timeout_s,
            headers={"Cache-Control": "no-store", "Accept": "text/csv,text/plain,*/*"},
        )
        if not 200 <= resp.status_code < 300:
            raise requests.HTTPError(f"HTTP {resp.status_code}", response=resp)
        # Sheet exports are UTF-8 even when the response omits a charset.
        return resp.content.decode("utf-8", errors="replace")

    def fetch(self, endpoint: str) -> FetchResult:
        """Return the body of the first endpoint that answers successfully.

        Raises:
            FetchError: every candidate failed; carries the last failure only.
        """
        tried: List[str] = []
        last_error: Optional[Exception] = None
        for url in self.candidate_urls(endpoint):
            tried.append(url)
            try:
                text = self._get_text(url)
            except requests.RequestException as exc:
                logger.warning("Fetch attempt %d failed for %s: %s", len(tried), url, exc)
                last_error = exc
                continue
            logger.info("Fetched %d chars from %s", len(text), url)
            return FetchResult(url=url, text=text)

        message = str(last_error) if last_error is not None else "no endpoints configured"
        raise FetchError(message, attempts=tried, last_error=last_error) from last_error


__all__ = [
    "ENDPOINT_REWRITES",
    "EndpointRewrite",
    "FetchResult",
    "HttpSession",
    "ResilientFetcher",
    "allorigins_rewrite",
    "jina_reader_rewrite",
]
