"""
Tests for the four source extractors: markup parsing and failure handling.
"""
import httpx
import pytest
import respx

from conftest import itch_cell, itch_page, rss_feed, rss_item, steam_page, steam_row
from core.entities import IndieListing, NewsItem, ReleasedGame, UpcomingGame
from ingestion.base import DEFAULT_HEADERS, fetch_text
from ingestion.itch import ItchTrendingExtractor
from ingestion.rss import NewsFeedExtractor
from ingestion.steam import SteamReleasesExtractor, SteamUpcomingExtractor

RELEASES_URL = "https://store.test/search/releases"
UPCOMING_URL = "https://store.test/search/wishlist"
NEWS_URL = "https://news.test/rss"
ITCH_URL = "https://itch.test/games/new-and-popular"


# ==================== Steam releases ====================

def _releases_page():
    return steam_page(
        steam_row("Alpha", "Jan 15, 2026", "Mostly Positive<br>75% of the 40 user reviews are positive."),
        steam_row("Beta", "10 Jan, 2026"),
        steam_row("Gamma", "Coming soon", "Very Positive<br>90%"),
        steam_row("Delta", "Jan 18, 2026", "Very Positive<br>88% of the 210 user reviews"),
        steam_row("Epsilon", "Nov 1, 2025", "Overwhelmingly Positive<br>97%"),
        steam_row("Zeta", "Jan 19, 2026", "Overwhelmingly Positive<br>96% of the 1,204 user reviews"),
        steam_row("Eta", "Jan 12, 2026", "Positive<br>80% of the 12 user reviews"),
    )


def test_releases_filters_non_recent_rows_and_sorts_by_score(jan_20):
    extractor = SteamReleasesExtractor(RELEASES_URL, now=lambda: jan_20)

    games = extractor.parse(_releases_page())

    # 7 rows, 2 fail the recency filter
    assert len(games) == 5
    assert [g.title for g in games] == ["Delta", "Zeta", "Alpha", "Eta", "Beta"]
    assert [g.score for g in games] == [2, 2, 1, 1, 0]


def test_releases_row_fields(jan_20):
    extractor = SteamReleasesExtractor(RELEASES_URL, now=lambda: jan_20)

    games = {g.title: g for g in extractor.parse(_releases_page())}

    assert games["Alpha"] == ReleasedGame(
        title="Alpha",
        release_text="Jan 15, 2026",
        review_summary="Mostly Positive",
        url="https://store.steampowered.com/app/1/Alpha/",
        score=1,
    )
    assert games["Beta"].review_summary == "New"
    assert games["Beta"].score == 0


def test_releases_empty_tooltip_defaults_to_new(jan_20):
    page = steam_page(steam_row("Quiet", "Jan 19, 2026", ""))
    extractor = SteamReleasesExtractor(RELEASES_URL, now=lambda: jan_20)

    assert extractor.parse(page)[0].review_summary == "New"


def test_releases_respects_row_cap(jan_20):
    rows = [steam_row(f"Game {i}", "Jan 19, 2026") for i in range(10)]
    extractor = SteamReleasesExtractor(RELEASES_URL, max_rows=3, now=lambda: jan_20)

    games = extractor.parse(steam_page(*rows))

    assert [g.title for g in games] == ["Game 0", "Game 1", "Game 2"]


def test_releases_page_without_rows_is_empty(jan_20):
    extractor = SteamReleasesExtractor(RELEASES_URL, now=lambda: jan_20)
    assert extractor.parse("<html><body>We changed our layout</body></html>") == []


# ==================== Steam upcoming ====================

def test_upcoming_keeps_placeholder_and_future_rows_in_rank_order(jan_20):
    page = steam_page(
        steam_row("Hollow Sequel", "To be announced"),
        steam_row("Released Already", "Jan 2, 2026"),
        steam_row("No Date"),
        steam_row("Next Year", "Q2 2027"),
        steam_row("Old One", "Mar 3, 2024"),
        steam_row("Soonish", "Coming soon"),
    )
    extractor = SteamUpcomingExtractor(UPCOMING_URL, now=lambda: jan_20)

    games = extractor.parse(page)

    # "Jan 2, 2026" carries the current-year token
    assert [g.title for g in games] == ["Hollow Sequel", "Released Already", "No Date", "Next Year", "Soonish"]
    assert games[2] == UpcomingGame(
        title="No Date",
        release_text="TBA",
        url="https://store.steampowered.com/app/1/No_Date/",
    )


def test_upcoming_is_truncated_after_filtering(jan_20):
    rows = [steam_row(f"Game {i}", "Coming soon") for i in range(20)]
    extractor = SteamUpcomingExtractor(UPCOMING_URL, max_rows=20, limit=12, now=lambda: jan_20)

    games = extractor.parse(steam_page(*rows))

    assert len(games) == 12
    assert games[0].title == "Game 0"
    assert games[-1].title == "Game 11"


# ==================== News feed ====================

def test_news_parses_items_with_defaults():
    long_title = "An indie roguelike about bees " * 5
    feed = rss_feed(
        rss_item("Tiny studio hits #1 on Steam", "https://news.test/a", source="PC Gamer"),
        rss_item(long_title, "https://news.test/b"),
    )
    extractor = NewsFeedExtractor(NEWS_URL)

    items = extractor.parse(feed)

    assert items[0] == NewsItem(
        title="Tiny studio hits #1 on Steam",
        source_name="PC Gamer",
        url="https://news.test/a",
    )
    assert items[1].source_name == "News"
    assert len(items[1].title) == 80
    assert items[1].title == long_title.strip()[:80]


def test_news_takes_leading_items_only():
    feed = rss_feed(*[rss_item(f"Story {i}", f"https://news.test/{i}") for i in range(15)])
    extractor = NewsFeedExtractor(NEWS_URL, max_rows=10)

    items = extractor.parse(feed)

    assert [i.title for i in items] == [f"Story {i}" for i in range(10)]


def test_news_garbage_body_raises_for_fetch_to_absorb():
    with pytest.raises(ValueError):
        NewsFeedExtractor(NEWS_URL).parse("<<<not a feed")


# ==================== itch.io ====================

def test_itch_extracts_title_author_and_game_link():
    page = itch_page(
        itch_cell(
            "Moth Lantern",
            "glowworks",
            links=["https://itch.io/games/free", "https://glowworks.itch.io/moth-lantern"],
        ),
        itch_cell("Nameless", None, links=["https://itch.io/games/new"]),
        itch_cell(None, "ghost", links=["https://ghost.itch.io/void"]),
    )
    extractor = ItchTrendingExtractor(ITCH_URL)

    games = extractor.parse(page)

    assert games == [
        IndieListing(
            title="Moth Lantern",
            author_name="glowworks",
            url="https://glowworks.itch.io/moth-lantern",
        ),
        IndieListing(title="Nameless", author_name="Unknown", url=""),
    ]


def test_itch_respects_cell_cap():
    cells = [itch_cell(f"Game {i}", "dev", links=[f"https://dev.itch.io/g{i}"]) for i in range(15)]
    extractor = ItchTrendingExtractor(ITCH_URL, max_rows=10)

    assert len(extractor.parse(itch_page(*cells))) == 10


# ==================== fetch() over HTTP ====================

@respx.mock
async def test_fetch_sends_identity_headers_and_parses(jan_20):
    route = respx.get(RELEASES_URL).mock(
        return_value=httpx.Response(200, text=steam_page(steam_row("Alpha", "Jan 15, 2026", "Very Positive")))
    )
    extractor = SteamReleasesExtractor(RELEASES_URL, now=lambda: jan_20)

    games = await extractor.fetch()

    assert [g.title for g in games] == ["Alpha"]
    sent = route.calls.last.request
    assert sent.headers["User-Agent"] == DEFAULT_HEADERS["User-Agent"]
    assert sent.headers["Accept-Language"] == "en-US,en;q=0.9"


@respx.mock
async def test_fetch_returns_empty_on_server_error():
    respx.get(ITCH_URL).mock(return_value=httpx.Response(503, text="down"))

    assert await ItchTrendingExtractor(ITCH_URL).fetch() == []


@respx.mock
async def test_fetch_returns_empty_on_network_error():
    respx.get(NEWS_URL).mock(side_effect=httpx.ConnectError("connection refused"))

    assert await NewsFeedExtractor(NEWS_URL).fetch() == []


@respx.mock
async def test_fetch_returns_empty_on_parse_error():
    respx.get(NEWS_URL).mock(return_value=httpx.Response(200, text="<<<not a feed"))

    assert await NewsFeedExtractor(NEWS_URL).fetch() == []


@respx.mock
async def test_fetch_text_uses_injected_client():
    respx.get(ITCH_URL).mock(return_value=httpx.Response(200, text="ok"))

    async with httpx.AsyncClient() as client:
        body = await fetch_text(ITCH_URL, client=client)

    assert body == "ok"


@respx.mock
async def test_fetch_text_raises_on_non_success():
    respx.get(ITCH_URL).mock(return_value=httpx.Response(404))

    with pytest.raises(httpx.HTTPStatusError):
        await fetch_text(ITCH_URL)
