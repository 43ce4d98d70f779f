"""Base classes for listing extractors."""

from __future__ import annotations

import copy
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence, Set
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Tag

from models import Document, ListingRecord

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"[ \t\n\r\f]+")


@dataclass(frozen=True)
class ListingSelectors:
    """CSS selector fallback chains for one site's results page.

    ``card`` is applied to the whole document; every other chain is applied
    inside a single card. Within a chain the first selector that matches wins.
    """

    card: Sequence[str]
    title: Sequence[str]
    link: Sequence[str] = ()
    company: Sequence[str] = ()
    location: Sequence[str] = ()
    salary: Sequence[str] = ()


def clean_text(node: Optional[Tag]) -> str:
    if node is None:
        return ""
    return _WHITESPACE.sub(" ", node.get_text()).strip()


def resolve_url(base_url: str, href: Optional[str]) -> str:
    href = (href or "").strip()
    if not href:
        return ""
    try:
        url = urljoin(base_url, href)
        scheme = urlparse(url).scheme
    except ValueError:
        logger.debug("Unresolvable href %r on %s", href, base_url)
        return ""
    if scheme not in {"http", "https"}:
        return ""
    return url


def isolate_card(card: Tag, card_ids: Set[int]) -> Tag:
    """Return ``card`` without any other listing cards nested inside it.

    Repaired markup can put one card inside another; the inner card is
    detached from a copy so its fields are not read for the outer one.
    """
    positions = [i for i, tag in enumerate(card.find_all(True)) if id(tag) in card_ids]
    if not positions:
        return card
    isolated = copy.copy(card)
    descendants = isolated.find_all(True)
    for i in positions:
        descendants[i].extract()
    return isolated


class BaseExtractor(ABC):
    def __init__(self, source_name: str) -> None:
        self.source_name = source_name

    @property
    @abstractmethod
    def selectors(self) -> ListingSelectors:
        raise NotImplementedError

    def find_cards(self, soup: BeautifulSoup) -> List[Tag]:
        for selector in self.selectors.card:
            cards = soup.select(selector)
            if cards:
                return cards
        return []

    def extract(self, doc: Document, limit: Optional[int] = None) -> List[ListingRecord]:
        """Map every listing card in ``doc`` to a record, in document order.

        Cards without a title are skipped, missing fields become empty
        strings. ``limit`` caps the number of records; None or 0 means all.
        """
        base_url = doc.base_url
        records: List[ListingRecord] = []
        cards = self.find_cards(doc.soup)
        card_ids = {id(card) for card in cards}
        skipped = 0
        for card in cards:
            record = self.parse_card(isolate_card(card, card_ids), base_url)
            if record is None:
                skipped += 1
                continue
            records.append(record)
            if limit and limit > 0 and len(records) >= limit:
                break

        logger.info(
            "%s extracted %d listings from %d cards (%d without title)",
            self.source_name,
            len(records),
            len(cards),
            skipped,
        )
        return records

    def parse_card(self, card: Tag, base_url: str) -> Optional[ListingRecord]:
        title = self._first_text(card, self.selectors.title)
        if not title:
            logger.debug("%s card skipped: no title", self.source_name)
            return None

        link_tag = self._first(card, self.selectors.link)
        return ListingRecord(
            title=title,
            company=self._first_text(card, self.selectors.company),
            location=self._first_text(card, self.selectors.location),
            salary=self._first_text(card, self.selectors.salary),
            url=resolve_url(base_url, link_tag.get("href")) if link_tag else "",
        )

    @staticmethod
    def _first(card: Tag, selectors: Sequence[str]) -> Optional[Tag]:
        for selector in selectors:
            node = card.select_one(selector)
            if node is not None:
                return node
        return None

    @staticmethod
    def _first_text(card: Tag, selectors: Sequence[str]) -> str:
        for selector in selectors:
            text = clean_text(card.select_one(selector))
            if text:
                return text
        return ""
