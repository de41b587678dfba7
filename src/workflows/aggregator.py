import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Callable, List, Optional

from core.entities import AggregateReport
from ingestion.base import SourceExtractor
from ingestion.source_factory import ExtractorSet
from workflows.base import ReportPipeline

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TrendAggregator(ReportPipeline):
    """
    Fans out to every extractor concurrently and joins the results.
    Latency is that of the slowest source, not the sum.
    """

    name = "indie_trends"

    def __init__(
        self,
        releases: SourceExtractor,
        upcoming: SourceExtractor,
        news: SourceExtractor,
        itch: SourceExtractor,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.releases = releases
        self.upcoming = upcoming
        self.news = news
        self.itch = itch
        self.clock = clock or _utc_now

    @classmethod
    def from_extractors(
        cls,
        extractors: ExtractorSet,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> "TrendAggregator":
        return cls(
            releases=extractors.releases,
            upcoming=extractors.upcoming,
            news=extractors.news,
            itch=extractors.itch,
            clock=clock,
        )

    async def run(self) -> AggregateReport:
        start_time = time.perf_counter()
        sources = [self.releases, self.upcoming, self.news, self.itch]

        results = await asyncio.gather(
            *(source.fetch() for source in sources),
            return_exceptions=True,
        )

        lists: List[list] = []
        for source, result in zip(sources, results):
            if isinstance(result, BaseException):
                # fetch() is meant to absorb its own failures; this catches the ones that slip through
                logger.error(f"Extractor {source.name} raised: {result!r}")
                lists.append([])
            else:
                lists.append(result)

        releases, upcoming, news, itch = lists
        report = AggregateReport(
            generated_at=self.clock(),
            releases=releases,
            upcoming=upcoming,
            news=news,
            indie_listings=itch,
        )

        logger.info(
            f"Aggregated {len(releases)} releases, {len(upcoming)} upcoming, "
            f"{len(news)} news, {len(itch)} itch in {time.perf_counter() - start_time:.2f}s"
        )
        return report
