"""
Ingest the itch.io new & popular listing
"""
from typing import List

from bs4 import BeautifulSoup, Tag

from core.entities import IndieListing
from ingestion.base import SourceExtractor
from ingestion.bs4_utils import get_attr_str, select_text

ITCH_URL = "https://itch.io/games/new-and-popular"

DEFAULT_AUTHOR = "Unknown"


def resolve_game_link(cell: Tag) -> str:
    """
    First link pointing at an itch.io game page rather than the /games listing.
    """
    for anchor in cell.find_all("a"):
        href = get_attr_str(anchor, "href")
        if "itch.io" in href and "/games" not in href:
            return href
    return ""


class ItchTrendingExtractor(SourceExtractor[IndieListing]):
    name = "itch"

    def __init__(self, url: str = ITCH_URL, *, max_rows: int = 10, **kwargs):
        super().__init__(url, max_rows=max_rows, **kwargs)

    def parse(self, body: str) -> List[IndieListing]:
        soup = BeautifulSoup(body, "html.parser")
        games: List[IndieListing] = []

        for cell in soup.select(".game_cell")[:self.max_rows]:
            title = select_text(cell, ".title")
            if not title:
                continue

            games.append(
                IndieListing(
                    title=title,
                    author_name=select_text(cell, ".game_author", DEFAULT_AUTHOR),
                    url=resolve_game_link(cell),
                )
            )

        return games
