"""Fetch a results page and extract its vacancies."""

from __future__ import annotations

import logging
from typing import List, Optional

from extractors.base import BaseExtractor
from extractors.hh import HhExtractor
from fetcher import Fetcher
from models import ListingRecord

logger = logging.getLogger(__name__)


class Grabber:
    def __init__(self, fetcher: Optional[Fetcher] = None, extractor: Optional[BaseExtractor] = None) -> None:
        self.fetcher = fetcher or Fetcher()
        self.extractor = extractor or HhExtractor()

    def grab_vacancies(self, url: str, timeout_ms: int, limit: Optional[int] = None) -> List[ListingRecord]:
        """Fetch ``url`` and return its listings in page order.

        A FetchError from the fetch propagates as-is; extraction only runs on
        a fully downloaded page.
        """
        doc = self.fetcher.fetch(url, timeout_ms)
        vacancies = self.extractor.extract(doc, limit=limit)
        logger.info("Grabbed %d vacancies from %s", len(vacancies), url)
        return vacancies
