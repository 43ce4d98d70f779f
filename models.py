"""Data models for grabbed vacancies and fetch failures."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup

PARSER = "html5lib"


@dataclass(frozen=True)
class ListingRecord:
    title: str
    company: str = ""
    location: str = ""
    salary: str = ""
    url: str = ""


@dataclass(frozen=True)
class Document:
    """A parsed results page together with the URL it came from."""

    url: str
    soup: BeautifulSoup

    @classmethod
    def from_markup(cls, markup: str | bytes, url: str, encoding: Optional[str] = None) -> "Document":
        return cls(url=url, soup=BeautifulSoup(markup, PARSER, from_encoding=encoding))

    @property
    def base_url(self) -> str:
        base_tag = self.soup.find("base", href=True)
        if base_tag and base_tag["href"].strip():
            try:
                return urljoin(self.url, base_tag["href"].strip())
            except ValueError:
                return self.url
        return self.url


class FetchErrorKind(enum.Enum):
    TIMEOUT = "timeout"
    CONNECTION_FAILED = "connection_failed"
    HTTP_STATUS = "http_status"
    OTHER = "other"


class FetchError(Exception):
    """Raised when a results page could not be fetched; no document is produced."""

    def __init__(self, kind: FetchErrorKind, url: str, message: str = "", status_code: Optional[int] = None) -> None:
        self.kind = kind
        self.url = url
        self.status_code = status_code
        self.message = message or self._default_message()
        super().__init__(self.message)

    def _default_message(self) -> str:
        if self.kind is FetchErrorKind.HTTP_STATUS:
            return f"HTTP {self.status_code} for {self.url}"
        if self.kind is FetchErrorKind.TIMEOUT:
            return f"Timed out fetching {self.url}"
        if self.kind is FetchErrorKind.CONNECTION_FAILED:
            return f"Connection failed for {self.url}"
        return f"Failed to fetch {self.url}"

    @classmethod
    def timeout(cls, url: str, message: str = "") -> "FetchError":
        return cls(FetchErrorKind.TIMEOUT, url, message)

    @classmethod
    def connection_failed(cls, url: str, message: str = "") -> "FetchError":
        return cls(FetchErrorKind.CONNECTION_FAILED, url, message)

    @classmethod
    def http_status(cls, url: str, status_code: int) -> "FetchError":
        return cls(FetchErrorKind.HTTP_STATUS, url, status_code=status_code)

    @classmethod
    def other(cls, url: str, message: str) -> "FetchError":
        return cls(FetchErrorKind.OTHER, url, message)

    def __repr__(self) -> str:
        return f"FetchError(kind={self.kind.name}, url={self.url!r}, status_code={self.status_code!r})"
