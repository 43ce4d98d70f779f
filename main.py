"""CLI entry for grabbing vacancies from an hh.ru search page."""

from __future__ import annotations

import argparse
import datetime as dt
import logging
import sys
from typing import List, Optional

from config import Settings
from fetcher import Fetcher
from grabber import Grabber
from models import FetchError

logger = logging.getLogger(__name__)

TIME_FORMAT = "%d.%m.%Y %H:%M:%S"


def parse_args(argv: Optional[List[str]], settings: Settings) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Grab active vacancies from an hh.ru search results page.")
    p.add_argument("--url", type=str, default=settings.search_url, help="Search results page URL.")
    p.add_argument("--timeout-ms", type=int, default=settings.timeout_ms, help="Request timeout in milliseconds.")
    p.add_argument("--limit", type=int, default=settings.max_vacancies, help="Max vacancies to keep (0 = all).")
    p.add_argument("--show", action="store_true", help="Print every vacancy as a tab-separated line.")
    return p.parse_args(argv)


def current_time(now: Optional[dt.datetime] = None) -> str:
    return (now or dt.datetime.now()).strftime(TIME_FORMAT)


def main(argv: Optional[List[str]] = None) -> int:
    try:
        settings = Settings.from_env()
    except ValueError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2
    args = parse_args(argv, settings)
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    print("=== HH Grabber Started ===")
    print(f"Time: {current_time()}")

    grabber = Grabber(
        fetcher=Fetcher(
            max_redirects=settings.max_redirects,
            user_agent=settings.user_agent,
            proxy=settings.proxy,
            verify_ssl=settings.verify_ssl,
        )
    )
    try:
        vacancies = grabber.grab_vacancies(args.url, args.timeout_ms, limit=args.limit or None)
    except FetchError as exc:
        logger.error("Grab failed (%s): %s", exc.kind.name, exc.message)
        print(f"Error occurred during parsing: {exc.message}", file=sys.stderr)
        return 1

    print(f"{len(vacancies)} active vacancies grabbed from HH")
    if args.show:
        for vacancy in vacancies:
            print("\t".join([vacancy.title, vacancy.company, vacancy.location, vacancy.salary, vacancy.url]))

    print("=== HH Grabber Completed ===")
    return 0


if __name__ == "__main__":
    sys.exit(main())
