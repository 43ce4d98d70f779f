"""Environment-based settings for hh_grabber."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

DEFAULT_SEARCH_URL = (
    "https://hh.ru/search/vacancy?area=113&search_field=name&search_field=company_name"
    "&work_format=REMOTE&text=Java+developer"
)
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/123.0 Safari/537.36"
)


def _parse_int(env_name: str, default: int) -> int:
    raw = os.getenv(env_name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{env_name} must be an integer, got {raw!r}") from None


def _parse_log_level(env_name: str, default: str) -> str:
    raw = (os.getenv(env_name) or default).strip().upper()
    if not isinstance(logging.getLevelName(raw), int):
        raise ValueError(f"{env_name} must be a logging level name, got {raw!r}")
    return raw


@dataclass
class Settings:
    search_url: str
    timeout_ms: int
    max_redirects: int
    max_vacancies: int
    proxy: str | None
    verify_ssl: bool
    user_agent: str
    log_level: str

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            search_url=os.getenv("SEARCH_URL") or DEFAULT_SEARCH_URL,
            timeout_ms=_parse_int("TIMEOUT_MS", 10000),
            max_redirects=_parse_int("MAX_REDIRECTS", 5),
            max_vacancies=_parse_int("MAX_VACANCIES", 0),
            proxy=os.getenv("HTTP_PROXY") or os.getenv("HTTPS_PROXY") or None,
            verify_ssl=os.getenv("VERIFY_SSL", "true").lower() not in {"0", "false", "no"},
            user_agent=os.getenv("USER_AGENT") or DEFAULT_USER_AGENT,
            log_level=_parse_log_level("LOG_LEVEL", "INFO"),
        )
