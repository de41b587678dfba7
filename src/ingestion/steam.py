"""
Ingest indie titles from Steam store search listings
"""
from datetime import datetime
from typing import Callable, Iterator, List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from core.classifiers import is_recent_release, is_upcoming_release, score_sentiment, strip_query
from core.entities import ReleasedGame, UpcomingGame
from ingestion.base import SourceExtractor
from ingestion.bs4_utils import get_attr_str, select_text

RELEASES_URL = "https://store.steampowered.com/search/?sort_by=Released_DESC&tags=492&category1=998&ndl=1"
UPCOMING_URL = "https://store.steampowered.com/search/?filter=popularwishlist&tags=492&category1=998"

DEFAULT_REVIEW_SUMMARY = "New"
DEFAULT_RELEASE_TEXT = "TBA"


def iter_search_rows(html: str, max_rows: int) -> Iterator[Tuple[Tag, str, str, str]]:
    """
    Yield (row, title, release_text, url) for the first `max_rows` result rows.
    """
    soup = BeautifulSoup(html, "html.parser")
    for row in soup.select("a.search_result_row")[:max_rows]:
        title = select_text(row, ".title")
        release_text = select_text(row, ".search_released")
        url = strip_query(get_attr_str(row, "href"))
        yield row, title, release_text, url


def extract_review_summary(row: Tag) -> str:
    """
    First line of the review tooltip, e.g. "Very Positive".
    """
    review_el = row.select_one(".search_review_summary")
    if review_el is None:
        return DEFAULT_REVIEW_SUMMARY
    tooltip = get_attr_str(review_el, "data-tooltip-html")
    return tooltip.split("<br>")[0].strip() or DEFAULT_REVIEW_SUMMARY


class SteamReleasesExtractor(SourceExtractor[ReleasedGame]):
    name = "steam_releases"

    def __init__(
        self,
        url: str = RELEASES_URL,
        *,
        max_rows: int = 60,
        now: Optional[Callable[[], datetime]] = None,
        **kwargs,
    ):
        super().__init__(url, max_rows=max_rows, **kwargs)
        self.now = now

    def parse(self, body: str) -> List[ReleasedGame]:
        now = self.now() if self.now else None
        games: List[ReleasedGame] = []

        for row, title, release_text, url in iter_search_rows(body, self.max_rows):
            if not is_recent_release(release_text, now=now):
                continue

            reviews = extract_review_summary(row)
            games.append(
                ReleasedGame(
                    title=title,
                    release_text=release_text,
                    review_summary=reviews,
                    url=url,
                    score=score_sentiment(reviews),
                )
            )

        # sorted() is stable, so equal scores keep the upstream recency order
        return sorted(games, key=lambda g: g.score, reverse=True)


class SteamUpcomingExtractor(SourceExtractor[UpcomingGame]):
    name = "steam_upcoming"

    def __init__(
        self,
        url: str = UPCOMING_URL,
        *,
        max_rows: int = 20,
        limit: Optional[int] = 12,
        now: Optional[Callable[[], datetime]] = None,
        **kwargs,
    ):
        super().__init__(url, max_rows=max_rows, **kwargs)
        self.limit = limit
        self.now = now

    def parse(self, body: str) -> List[UpcomingGame]:
        now = self.now() if self.now else None
        games: List[UpcomingGame] = []

        for _, title, release_text, url in iter_search_rows(body, self.max_rows):
            release_text = release_text or DEFAULT_RELEASE_TEXT
            if not is_upcoming_release(release_text, now=now):
                continue
            games.append(UpcomingGame(title=title, release_text=release_text, url=url))

        if self.limit is not None:
            return games[:self.limit]
        return games
