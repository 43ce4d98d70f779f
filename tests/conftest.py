# tests/conftest.py
import io
import os
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest
import requests
from requests.structures import CaseInsensitiveDict


# ---------------------------------------------------------------------
# Live tests are opt-in: use --live or RUN_LIVE_TESTS=1
# ---------------------------------------------------------------------
def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--live",
        action="store_true",
        default=False,
        help="Run tests marked as 'live' (network calls to hh.ru).",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "live: marks tests that perform live network calls (skipped by default).")


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--live") or os.getenv("RUN_LIVE_TESTS") == "1":
        return
    skip_live = pytest.mark.skip(reason="live tests disabled (use --live or RUN_LIVE_TESTS=1)")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


# ---------------------------------------------------------------------
# Environment isolation: a developer's .env must not leak into tests
# ---------------------------------------------------------------------
@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "SEARCH_URL",
        "TIMEOUT_MS",
        "MAX_REDIRECTS",
        "MAX_VACANCIES",
        "HTTP_PROXY",
        "HTTPS_PROXY",
        "VERIFY_SSL",
        "USER_AGENT",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


# ---------------------------------------------------------------------
# Markup helpers
# ---------------------------------------------------------------------
SEARCH_URL = "https://hh.ru/search/vacancy?text=Java+developer"


def vacancy_card(title=None, href=None, company=None, location=None, salary=None):
    """Render one hh.ru-style vacancy card; None leaves the element out."""
    parts = ['<div class="vacancy-card" data-qa="vacancy-serp__vacancy vacancy-serp-item_clickme">']
    if title is not None:
        href_attr = f' href="{href}"' if href is not None else ""
        parts.append(
            f'<h2><a data-qa="serp-item__title"{href_attr}>'
            f'<span data-qa="serp-item__title-text">{title}</span></a></h2>'
        )
    if salary is not None:
        parts.append(f'<span data-qa="vacancy-serp__vacancy-compensation">{salary}</span>')
    if company is not None:
        parts.append(f'<span data-qa="vacancy-serp__vacancy-employer-text">{company}</span>')
    if location is not None:
        parts.append(f'<span data-qa="vacancy-serp__vacancy-address">{location}</span>')
    parts.append("</div>")
    return "".join(parts)


def serp_page(*cards, head=""):
    return (
        f"<html><head><title>Vacancies</title>{head}</head>"
        f'<body><main id="a11y-main-content">{"".join(cards)}</main></body></html>'
    )


def make_response(status=200, body=b"", url=SEARCH_URL, headers=None):
    """Build a real requests.Response whose body streams from memory."""
    resp = requests.Response()
    resp.status_code = status
    resp.url = url
    resp.raw = io.BytesIO(body)
    resp.headers = CaseInsensitiveDict(headers or {"Content-Type": "text/html; charset=utf-8"})
    resp.encoding = requests.utils.get_encoding_from_headers(resp.headers)
    return resp


@pytest.fixture
def three_card_page():
    return serp_page(
        vacancy_card("Java Developer", "/vacancy/1", "Acme", "Москва", "от 200 000 ₽"),
        vacancy_card(None, company="No Title Inc"),
        vacancy_card("Senior Java Engineer", "https://hh.ru/vacancy/3", "Globex", "Казань"),
    )


# ---------------------------------------------------------------------
# Local HTTP server for real-socket fetches
# ---------------------------------------------------------------------
class _LocalHandler(BaseHTTPRequestHandler):
    def do_GET(self):
        if self.path == "/trickle":
            # 20-byte body sent one byte every 250 ms
            self._send_headers(200, 20)
            try:
                for _ in range(20):
                    self.wfile.write(b"x")
                    self.wfile.flush()
                    time.sleep(0.25)
            except (BrokenPipeError, ConnectionResetError):
                pass
            return
        if self.path == "/page":
            body = serp_page(vacancy_card("Java Developer", "/vacancy/1")).encode("utf-8")
            self._send_headers(200, len(body))
            self.wfile.write(body)
            return
        self._send_headers(404, 0)

    def _send_headers(self, status, length):
        self.send_response(status)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(length))
        self.end_headers()

    def log_message(self, format, *args):
        pass


@pytest.fixture
def local_server(monkeypatch):
    for name in ("http_proxy", "https_proxy", "all_proxy", "ALL_PROXY"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("NO_PROXY", "127.0.0.1,localhost")
    server = ThreadingHTTPServer(("127.0.0.1", 0), _LocalHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}"
    server.shutdown()
    server.server_close()
