"""
Ingestion from the news RSS search feed
"""
from typing import List, Optional

import feedparser

from core.entities import NewsItem
from ingestion.base import SourceExtractor

NEWS_URL = (
    "https://news.google.com/rss/search?q=indie+game+viral+OR+trending+OR+%22new+indie%22"
    "&hl=en-US&gl=US&ceid=US:en"
)

DEFAULT_SOURCE_NAME = "News"


class NewsFeedExtractor(SourceExtractor[NewsItem]):
    name = "news"

    def __init__(
        self,
        url: str = NEWS_URL,
        *,
        max_rows: int = 10,
        title_max_length: Optional[int] = 80,
        **kwargs,
    ):
        super().__init__(url, max_rows=max_rows, **kwargs)
        self.title_max_length = title_max_length

    def parse(self, body: str) -> List[NewsItem]:
        feed = feedparser.parse(body)
        if feed.bozo and not feed.entries:
            raise ValueError(f"Unparseable feed: {feed.get('bozo_exception')!r}")

        articles: List[NewsItem] = []
        for entry in feed.entries[:self.max_rows]:
            title = entry.get("title", "").strip()
            if self.title_max_length:
                title = title[:self.title_max_length]

            source = entry.get("source") or {}
            source_name = source.get("title") or DEFAULT_SOURCE_NAME

            articles.append(
                NewsItem(
                    title=title,
                    source_name=source_name,
                    url=entry.get("link", "").strip(),
                )
            )

        return articles
