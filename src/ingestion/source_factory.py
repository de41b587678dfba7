"""
Source Factory - Creates extractors from configuration.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

import httpx

from ingestion.base import DisabledExtractor, SourceExtractor
from ingestion.itch import ItchTrendingExtractor
from ingestion.rss import NewsFeedExtractor
from ingestion.steam import SteamReleasesExtractor, SteamUpcomingExtractor
from services.config import Config, SourceConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractorSet:
    """The four extractors feeding one report, in report order."""
    releases: SourceExtractor
    upcoming: SourceExtractor
    news: SourceExtractor
    itch: SourceExtractor


def create_extractors(
    config: Config,
    *,
    client: Optional[httpx.AsyncClient] = None,
    now: Optional[Callable[[], datetime]] = None,
) -> ExtractorSet:
    """
    Create all extractors from configuration.

    Args:
        config: Application configuration
        client: Optional shared HTTP client (tests inject a mocked one)
        now: Optional clock for the date classifiers

    Returns:
        ExtractorSet with a DisabledExtractor in place of any disabled source
    """
    sources = config.sources
    common = dict(
        headers=config.http.headers(),
        timeout=config.http.timeout,
        client=client,
    )

    def build(name: str, source: SourceConfig, factory: Callable[..., SourceExtractor]) -> SourceExtractor:
        if not source.enabled:
            logger.info(f"Source {name} disabled in config")
            return DisabledExtractor(name)
        extractor = factory(source)
        logger.info(f"Created {name} extractor: {source.url}")
        return extractor

    return ExtractorSet(
        releases=build(
            "steam_releases",
            sources.releases,
            lambda s: SteamReleasesExtractor(s.url, max_rows=s.max_rows, now=now, **common),
        ),
        upcoming=build(
            "steam_upcoming",
            sources.upcoming,
            lambda s: SteamUpcomingExtractor(s.url, max_rows=s.max_rows, limit=s.limit, now=now, **common),
        ),
        news=build(
            "news",
            sources.news,
            lambda s: NewsFeedExtractor(
                s.url, max_rows=s.max_rows, title_max_length=s.title_max_length, **common
            ),
        ),
        itch=build(
            "itch",
            sources.itch,
            lambda s: ItchTrendingExtractor(s.url, max_rows=s.max_rows, **common),
        ),
    )
