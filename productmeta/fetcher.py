from __future__ import annotations

import logging
import threading
import time
from typing import Dict, Optional

import httpx
from bs4 import BeautifulSoup

from .config import FetchSettings
from .errors import DocumentParseError, DomainBlockedError, FetchError
from .urls import host_of

logger = logging.getLogger(__name__)

BROWSER_HEADERS: Dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,image/apng,*/*;q=0.8",
    "Accept-Encoding": "gzip, deflate, br",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
    "Sec-Ch-Ua": '"Not A(Brand";v="99", "Google Chrome";v="121", "Chromium";v="121"',
    "Sec-Ch-Ua-Mobile": "?0",
    "Sec-Ch-Ua-Platform": '"Windows"',
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Sec-Fetch-User": "?1",
    "Upgrade-Insecure-Requests": "1",
}


def build_headers(settings: FetchSettings) -> Dict[str, str]:
    headers = dict(BROWSER_HEADERS)
    headers["User-Agent"] = settings.user_agent
    headers["Accept-Language"] = settings.accept_language
    return headers


class Fetcher:
    """
    Downloads a product page and parses it into a BeautifulSoup tree.

    One httpx.Client is shared by every call; its configuration (timeout,
    redirect cap, headers) never changes after construction, so a Fetcher can
    be used from several threads at once. The per-call deadline lives in
    thread-local state.

    settings.timeout bounds the whole call: every redirect hop and the body
    read are checked against one wall-clock deadline, on top of httpx's own
    per-phase timeout.
    """

    def __init__(self, settings: Optional[FetchSettings] = None,
                 transport: Optional[httpx.BaseTransport] = None):
        self.settings = settings or FetchSettings()
        self._local = threading.local()
        self.client = httpx.Client(
            headers=build_headers(self.settings),
            timeout=self.settings.timeout,
            follow_redirects=True,
            max_redirects=self.settings.max_redirects,
            transport=transport,
            event_hooks={"response": [self._check_deadline]},
        )

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _timed_out(self, url: str, stage: str) -> FetchError:
        return FetchError(f"timed out after {self.settings.timeout}s {stage} {url}", url=url)

    def _check_deadline(self, response: httpx.Response) -> None:
        # Runs after the headers of every hop, redirects included
        deadline = getattr(self._local, "deadline", None)
        if deadline is not None and time.monotonic() > deadline:
            raise self._timed_out(self._local.url, "waiting for")

    def _read_body(self, url: str, deadline: float) -> tuple[bytes, Optional[str]]:
        with self.client.stream("GET", url) as r:
            if r.status_code != 200:
                raise FetchError(f"unexpected status code: {r.status_code}", url=url, status_code=r.status_code)
            chunks = []
            for chunk in r.iter_bytes():
                chunks.append(chunk)
                if time.monotonic() > deadline:
                    raise self._timed_out(url, "reading")
            if time.monotonic() > deadline:
                raise self._timed_out(url, "reading")
            return b"".join(chunks), r.charset_encoding

    def fetch(self, url: str) -> BeautifulSoup:
        host = host_of(url)
        if not self.settings.is_domain_allowed(host):
            raise DomainBlockedError(f"domain not allowed: {host}", url=url)

        logger.info(f"Fetching {url}")
        deadline = time.monotonic() + self.settings.timeout
        self._local.deadline = deadline
        self._local.url = url
        try:
            body, encoding = self._read_body(url, deadline)
        except FetchError:
            raise
        except httpx.TooManyRedirects as e:
            raise FetchError("too many redirects", url=url) from e
        except httpx.TimeoutException as e:
            raise FetchError(f"timed out after {self.settings.timeout}s: {e}", url=url) from e
        except httpx.DecodingError as e:
            raise FetchError(f"failed to decode response body: {e}", url=url) from e
        except httpx.HTTPError as e:
            raise FetchError(f"failed to fetch URL: {e}", url=url) from e
        except httpx.InvalidURL as e:
            raise FetchError(f"invalid URL: {e}", url=url) from e
        finally:
            self._local.deadline = None

        logger.debug(f"Fetched {len(body)} bytes from {url}")
        try:
            return BeautifulSoup(body, "lxml", from_encoding=encoding)
        except (ValueError, LookupError) as e:
            raise DocumentParseError(f"failed to parse HTML: {e}") from e
