"""
Base classes for source extractors
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict, Generic, List, Optional, TypeVar

import httpx

from services.config import DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_HEADERS: Dict[str, str] = {
    "User-Agent": DEFAULT_USER_AGENT,
    "Accept-Language": "en-US,en;q=0.9",
}

DEFAULT_TIMEOUT = 10.0


async def fetch_text(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = DEFAULT_TIMEOUT,
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    """
    Issue one GET and return the body.

    Raises:
        httpx.HTTPError: On network failure or a non-success status
    """
    headers = headers or DEFAULT_HEADERS

    if client is not None:
        resp = await client.get(url, headers=headers, timeout=timeout)
        resp.raise_for_status()
        return resp.text

    async with httpx.AsyncClient(timeout=timeout, headers=headers, follow_redirects=True) as owned:
        resp = await owned.get(url)
        resp.raise_for_status()
        return resp.text


class SourceExtractor(ABC, Generic[T]):
    """
    Base interface for all upstream sources.
    """

    name: str

    def __init__(
        self,
        url: str,
        *,
        max_rows: int,
        headers: Optional[Dict[str, str]] = None,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url
        self.max_rows = max_rows
        self.headers = headers or DEFAULT_HEADERS
        self.timeout = timeout
        self.client = client

    @abstractmethod
    def parse(self, body: str) -> List[T]:
        """
        Extract typed items from a response body.
        May raise on malformed markup; fetch() absorbs it.
        """
        raise NotImplementedError

    async def fetch(self) -> List[T]:
        """
        Fetch the upstream page and parse it.
        Must NEVER raise uncaught exceptions.
        """
        try:
            body = await fetch_text(
                self.url,
                headers=self.headers,
                timeout=self.timeout,
                client=self.client,
            )
            items = self.parse(body)
        except Exception as e:
            logger.error(f"Error fetching {self.name}: {e!r}")
            return []

        logger.info(f"Fetched {len(items)} items from {self.name}")
        return items


class DisabledExtractor(SourceExtractor[T]):
    """
    Stand-in for a source switched off in config; always yields nothing.
    """

    def __init__(self, name: str):
        super().__init__("", max_rows=0)
        self.name = name

    def parse(self, body: str) -> List[T]:
        return []

    async def fetch(self) -> List[T]:
        logger.debug(f"Source {self.name} disabled, skipping")
        return []
