"""
HTTP Fetcher - Bounded Static Page Fetch
========================================
Static GET/HEAD with:
- Browser-like headers
- Per-call timeout (also enforced while streaming the body)
- Hard body cap (excess is discarded, never buffered)
- Manual redirect following with a hop ceiling and an SSRF check per hop

One fetcher is shared by all requests: its config is immutable and it
keeps no per-request state.
"""

import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple
from urllib.parse import urljoin

import requests

from config import HttpConf
from core.errors import FetchFailed, InvalidURL, PricingScoutError, TooManyRedirects
from scrapers.page_parser import extract_visible_text
from scrapers.url_guard import validate_url
from utils_logging import log_debug


CHUNK_SIZE = 64 * 1024


@dataclass
class FetchedPage:
    """Raw markup plus derived visible text."""
    url: str
    final_url: str
    status: int
    raw_html: str
    visible_text: str
    truncated: bool = False


class HttpFetcher:
    """Static page fetcher bound to one immutable HttpConf."""

    def __init__(
        self,
        conf: Optional[HttpConf] = None,
        session: Optional[requests.Session] = None,
        resolver: Optional[Callable[[str], List[str]]] = None,
    ):
        self.conf = conf or HttpConf()
        self.session = session or requests.Session()
        self.resolver = resolver

    # ------------------------------------------------------------------
    # internals
    # ------------------------------------------------------------------

    def _page_headers(self) -> dict:
        return {
            "User-Agent": self.conf.user_agent,
            "Accept": self.conf.accept,
            "Accept-Language": self.conf.accept_language,
        }

    def _request(self, method: str, url: str, headers: dict, stream: bool) -> Tuple[requests.Response, str]:
        """
        Sends the request, following redirects manually.

        Returns:
            (final response, final URL)

        Raises:
            InvalidURL: initial URL fails the guard
            FetchFailed: network error or redirect to a blocked URL
            TooManyRedirects: more than max_redirects hops
        """
        current = url
        for hop in range(self.conf.max_redirects + 1):
            try:
                validate_url(current, self.resolver)
            except InvalidURL as e:
                if hop == 0:
                    raise
                raise FetchFailed(f"redirect to disallowed URL {current}: {e}")

            try:
                resp = self.session.request(
                    method,
                    current,
                    headers=headers,
                    timeout=self.conf.timeout_sec,
                    allow_redirects=False,
                    stream=stream,
                )
            except requests.RequestException as e:
                raise FetchFailed(f"{type(e).__name__}: {e}")

            if not resp.is_redirect:
                return resp, current

            location = resp.headers.get("location", "")
            resp.close()
            log_debug(f"redirect {resp.status_code}: {current} -> {location}")
            current = urljoin(current, location)

        raise TooManyRedirects(self.conf.max_redirects)

    def _read_body(self, resp: requests.Response, started: float) -> Tuple[bytes, bool]:
        """Reads at most max_body_bytes; returns (body, truncated)."""
        chunks = []
        total = 0
        truncated = False
        try:
            for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                if not chunk:
                    continue
                if time.monotonic() - started > self.conf.timeout_sec:
                    raise FetchFailed(f"timed out after {self.conf.timeout_sec}s reading body")
                remaining = self.conf.max_body_bytes - total
                if len(chunk) >= remaining:
                    chunks.append(chunk[:remaining])
                    truncated = len(chunk) > remaining
                    total += remaining
                    break
                chunks.append(chunk)
                total += len(chunk)
        except requests.RequestException as e:
            raise FetchFailed(f"{type(e).__name__}: {e}")
        finally:
            resp.close()
        return b"".join(chunks), truncated

    @staticmethod
    def _decode(resp: requests.Response, body: bytes) -> str:
        content_type = resp.headers.get("content-type", "").lower()
        encoding = resp.encoding if ("charset" in content_type and resp.encoding) else "utf-8"
        try:
            return body.decode(encoding, errors="replace")
        except LookupError:
            return body.decode("utf-8", errors="replace")

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------

    def fetch(self, url: str) -> FetchedPage:
        """
        GETs a page and derives its visible text.

        Raises:
            InvalidURL, FetchFailed (with status for non-2xx), TooManyRedirects
        """
        started = time.monotonic()
        resp, final_url = self._request("GET", url, self._page_headers(), stream=True)

        if not (200 <= resp.status_code < 300):
            resp.close()
            raise FetchFailed(f"HTTP {resp.status_code}", status=resp.status_code)

        body, truncated = self._read_body(resp, started)
        raw_html = self._decode(resp, body)
        if truncated:
            log_debug(f"body truncated at {self.conf.max_body_bytes} bytes: {url}")

        return FetchedPage(
            url=url,
            final_url=final_url,
            status=resp.status_code,
            raw_html=raw_html,
            visible_text=extract_visible_text(raw_html),
            truncated=truncated,
        )

    def exists(self, url: str) -> bool:
        """Cheap existence probe: HEAD returns 200."""
        headers = {"User-Agent": self.conf.probe_user_agent}
        try:
            resp, _ = self._request("HEAD", url, headers, stream=False)
        except PricingScoutError as e:
            log_debug(f"probe failed for {url}: {e}")
            return False
        status = resp.status_code
        resp.close()
        return status == 200
