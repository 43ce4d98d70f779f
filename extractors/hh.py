"""Extractor for hh.ru vacancy search results."""

from __future__ import annotations

from extractors.base import BaseExtractor, ListingSelectors

HH_SELECTORS = ListingSelectors(
    card=(
        "div[data-qa~='vacancy-serp__vacancy']",
        "[data-qa~='vacancy-serp__vacancy']",
    ),
    title=(
        "[data-qa='serp-item__title-text']",
        "a[data-qa='serp-item__title']",
    ),
    link=("a[data-qa='serp-item__title']",),
    company=(
        "[data-qa='vacancy-serp__vacancy-employer-text']",
        "[data-qa='vacancy-serp__vacancy-employer']",
    ),
    location=(
        "[data-qa='vacancy-serp__vacancy-address']",
        "[data-qa='vacancy-serp__vacancy-address_narrow']",
    ),
    salary=(
        "[data-qa='vacancy-serp__vacancy-compensation']",
        "[data-qa='vacancy-serp__compensation']",
    ),
)


class HhExtractor(BaseExtractor):
    def __init__(self, source_name: str = "hh.ru") -> None:
        super().__init__(source_name)

    @property
    def selectors(self) -> ListingSelectors:
        return HH_SELECTORS
