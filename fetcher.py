"""Single-request HTTP fetcher producing parsed result pages."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import urlparse

import requests
from urllib3.exceptions import ReadTimeoutError

from config import DEFAULT_USER_AGENT
from models import Document, FetchError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8 * 1024
DEFAULT_MAX_REDIRECTS = 5


@dataclass
class _Download:
    status: int
    final_url: str
    encoding: Optional[str]
    body: bytes


def _is_read_timeout(exc: requests.RequestException) -> bool:
    # requests re-raises body read timeouts as ConnectionError wrapping the urllib3 error
    return any(isinstance(arg, ReadTimeoutError) for arg in exc.args)


def _translate(exc: requests.RequestException, url: str) -> FetchError:
    if isinstance(exc, requests.exceptions.Timeout) or _is_read_timeout(exc):
        return FetchError.timeout(url, f"Timed out fetching {url} ({exc})")
    if isinstance(exc, requests.exceptions.TooManyRedirects):
        return FetchError.other(url, f"Too many redirects for {url}")
    if isinstance(exc, requests.exceptions.ConnectionError):
        return FetchError.connection_failed(url, f"Connection failed for {url} ({exc})")
    return FetchError.other(url, f"Request failed for {url} ({exc})")


def _check_url(url: str) -> None:
    try:
        parsed = urlparse(url)
    except ValueError as exc:
        raise FetchError.other(url, f"Malformed URL {url!r} ({exc})") from exc
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise FetchError.other(url, f"Not an absolute http(s) URL: {url!r}")


class Fetcher:
    """Issues one GET per call and parses the body with a tolerant HTML5 parser.

    A fresh session is opened for every fetch, so one instance can be shared
    between threads. Nothing is retried. The request runs in a worker thread
    and is abandoned, with its response closed, once the budget runs out.
    """

    def __init__(
        self,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        user_agent: str = DEFAULT_USER_AGENT,
        proxy: Optional[str] = None,
        verify_ssl: bool = True,
    ) -> None:
        self.max_redirects = max_redirects
        self.user_agent = user_agent
        self.proxy = proxy
        self.verify_ssl = verify_ssl

    def _make_session(self) -> requests.Session:
        sess = requests.Session()
        sess.max_redirects = self.max_redirects
        sess.headers.update({"User-Agent": self.user_agent, "Accept": "text/html,application/xhtml+xml"})
        if self.proxy:
            sess.proxies.update({"http": self.proxy, "https": self.proxy})
        sess.verify = self.verify_ssl
        return sess

    def fetch(self, url: str, timeout_ms: int) -> Document:
        """GET ``url`` within ``timeout_ms`` and return the parsed page.

        Raises FetchError on timeout, connection failure, a non-2xx final
        status or any other request failure.
        """
        if timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be positive, got {timeout_ms}")
        try:
            return self._fetch(url, timeout_ms)
        except FetchError as exc:
            logger.warning("Fetch failed for %s: %s (%s)", url, exc.kind.name, exc.message)
            raise

    def _fetch(self, url: str, timeout_ms: int) -> Document:
        _check_url(url)

        budget = timeout_ms / 1000.0
        deadline = time.monotonic() + budget
        logger.debug("GET %s (timeout %.3fs, max %d redirects)", url, budget, self.max_redirects)

        session = self._make_session()
        in_flight: List[requests.Response] = []
        pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="fetch")
        try:
            fut = pool.submit(self._download, session, url, budget, deadline, in_flight)
            download = fut.result(timeout=max(deadline - time.monotonic(), 0.0))
        except FutureTimeout:
            for resp in in_flight:
                resp.close()
            raise FetchError.timeout(url, f"Timed out fetching {url} after {timeout_ms} ms") from None
        except requests.RequestException as exc:
            raise _translate(exc, url) from exc
        finally:
            session.close()
            pool.shutdown(wait=False)

        logger.info("Fetched %s: HTTP %d, %d bytes", download.final_url, download.status, len(download.body))
        return Document.from_markup(download.body, download.final_url, encoding=download.encoding)

    def _download(
        self,
        session: requests.Session,
        url: str,
        budget: float,
        deadline: float,
        in_flight: List[requests.Response],
    ) -> _Download:
        with session.get(url, timeout=(budget, budget), stream=True) as resp:
            in_flight.append(resp)
            if not 200 <= resp.status_code < 300:
                raise FetchError.http_status(url, resp.status_code)
            body = self._read_body(resp, deadline, url)
            content_type = resp.headers.get("Content-Type", "")
            return _Download(
                status=resp.status_code,
                final_url=resp.url or url,
                encoding=resp.encoding if "charset" in content_type.lower() else None,
                body=body,
            )

    @staticmethod
    def _read_body(resp: requests.Response, deadline: float, url: str) -> bytes:
        chunks: List[bytes] = []
        if time.monotonic() > deadline:
            raise FetchError.timeout(url)
        for chunk in resp.iter_content(CHUNK_SIZE):
            if time.monotonic() > deadline:
                raise FetchError.timeout(url)
            chunks.append(chunk)
        return b"".join(chunks)
