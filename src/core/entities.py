from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List


@dataclass(frozen=True)
class ReleasedGame:
    """
    A recently released game from the storefront search listing.
    """
    title: str
    release_text: str
    review_summary: str
    url: str
    score: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "release": self.release_text,
            "reviews": self.review_summary,
            "url": self.url,
            "score": self.score,
        }


@dataclass(frozen=True)
class UpcomingGame:
    """
    An unreleased title, ordered by upstream wishlist rank.
    """
    title: str
    release_text: str
    url: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "release": self.release_text,
            "url": self.url,
        }


@dataclass(frozen=True)
class NewsItem:
    title: str
    source_name: str
    url: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "source": self.source_name,
            "url": self.url,
        }


@dataclass(frozen=True)
class IndieListing:
    """
    A game cell from the itch.io trending page.
    """
    title: str
    author_name: str
    url: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "author": self.author_name,
            "url": self.url,
        }


@dataclass(frozen=True)
class AggregateReport:
    """
    Joined, timestamped output of one aggregation run.
    """
    generated_at: datetime
    releases: List[ReleasedGame] = field(default_factory=list)
    upcoming: List[UpcomingGame] = field(default_factory=list)
    news: List[NewsItem] = field(default_factory=list)
    indie_listings: List[IndieListing] = field(default_factory=list)
    served_from_cache: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generated": self.generated_at.isoformat(),
            "freshReleases": [game.to_dict() for game in self.releases],
            "upcoming": [game.to_dict() for game in self.upcoming],
            "news": [item.to_dict() for item in self.news],
            "itch": [listing.to_dict() for listing in self.indie_listings],
            "cached": self.served_from_cache,
        }


@dataclass(frozen=True)
class CacheEntry:
    payload: AggregateReport
    captured_at: float


@dataclass
class RateWindow:
    """
    Request counter for one client within the current window.
    """
    request_count: int
    window_reset_at: float
