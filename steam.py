# steam.py
import json
import logging
from typing import List, Optional

import requests

from models import Game, Review

logger = logging.getLogger(__name__)

STEAM_SEARCH = "https://store.steampowered.com/api/storesearch/"
STEAM_REVIEWS = "https://store.steampowered.com/appreviews/{}"

PAGE_SIZE = 100
MAX_REVIEWS = 1000
MAX_PAGES = 50
DEFAULT_LANGUAGE = "english"
LANGUAGES = ("english", "spanish", "schinese", "portuguese", "russian", "all")


def _session() -> requests.Session:
    # No retry adapter: a failed page simply ends pagination.
    s = requests.Session()
    s.headers.update({"User-Agent": "steam-review-digest/1.0"})
    return s

_SESSION = _session()


def normalize_language(lang: Optional[str]) -> str:
    lang = (lang or DEFAULT_LANGUAGE).strip().lower()
    return lang if lang in LANGUAGES else DEFAULT_LANGUAGE


def clamp_count(count: int) -> int:
    return max(1, min(int(count), MAX_REVIEWS))


def search_games(term: str, timeout: float = 10) -> List[Game]:
    """Search the storefront by name. HTTP errors propagate to the caller."""
    term = (term or "").strip()
    if not term:
        return []
    r = _SESSION.get(
        STEAM_SEARCH,
        params={"term": term, "l": "english", "cc": "US"},
        timeout=timeout,
    )
    r.raise_for_status()
    data = r.json() or {}
    games = [Game.from_search_item(it) for it in data.get("items") or []]
    logger.info("Search %r returned %d result(s)", term, len(games))
    return games


def _fetch_page(app_id, cursor: str, lang: str, timeout: float) -> dict:
    params = {
        "json": 1,
        "filter": "recent",
        "language": lang,
        "day_range": 365,
        "review_type": "all",
        "purchase_type": "all",
        "num_per_page": PAGE_SIZE,
        "cursor": cursor,
    }
    r = _SESSION.get(STEAM_REVIEWS.format(app_id), params=params, timeout=timeout)
    r.raise_for_status()
    return r.json()


def fetch_reviews(
    app_id,
    max_count: int = 200,
    lang: str = DEFAULT_LANGUAGE,
    timeout: float = 10,
    max_pages: int = MAX_PAGES,
) -> List[Review]:
    """
    Page through the reviews endpoint until `max_count` reviews are collected.

    Stops early when Steam reports failure, returns a short page, repeats the
    cursor it was given, or `max_pages` pages have been read. The language
    parameter sent upstream is not trusted: when `lang` is not "all", every
    review is re-checked against its own language tag. Transport errors end
    the loop and whatever was gathered so far is returned.
    """
    max_count = clamp_count(max_count)
    lang = normalize_language(lang)

    cursor = "*"
    collected: List[Review] = []

    for page in range(1, max_pages + 1):
        try:
            data = _fetch_page(app_id, cursor, lang, timeout)
        except (requests.RequestException, ValueError) as e:
            logger.warning(
                "Review page %d for app %s failed (%s); keeping %d review(s)",
                page, app_id, e, len(collected),
            )
            break

        if not data or data.get("success") != 1:
            logger.info("Steam reported no more data for app %s at page %d", app_id, page)
            break

        raw_chunk = data.get("reviews") or []
        chunk = [Review.from_api(rv) for rv in raw_chunk]
        if lang != "all":
            chunk = [rv for rv in chunk if rv.language == lang]
        collected.extend(chunk)

        logger.debug(
            "Page %d: %d raw, %d kept (total %d)", page, len(raw_chunk), len(chunk), len(collected)
        )

        if len(collected) >= max_count:
            break
        if len(raw_chunk) < PAGE_SIZE:
            break

        next_cursor = data.get("cursor") or cursor
        if next_cursor == cursor:
            logger.info("Cursor stalled for app %s at page %d", app_id, page)
            break
        cursor = next_cursor

    return collected[:max_count]


if __name__ == "__main__":
    import sys
    if len(sys.argv) < 2:
        sys.exit("Usage: python steam.py <appid> [count] [lang]")
    app_id = sys.argv[1]
    count = int(sys.argv[2]) if len(sys.argv) > 2 and sys.argv[2].isdigit() else 20
    lang = sys.argv[3] if len(sys.argv) > 3 else DEFAULT_LANGUAGE
    reviews = fetch_reviews(app_id, max_count=count, lang=lang)
    print(json.dumps([rv.to_sample() for rv in reviews], indent=2, ensure_ascii=False))
