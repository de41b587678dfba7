"""
Shared fixtures: fake clocks and upstream page builders.
"""
from datetime import datetime, timezone
from html import escape

import pytest


class FakeClock:
    """Monotonic-style clock the tests advance by hand."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def jan_20() -> datetime:
    return datetime(2026, 1, 20, 12, 0, tzinfo=timezone.utc)


def steam_row(title, released=None, tooltip=None, href=None):
    """One search result row as the storefront renders it."""
    href = href or f"https://store.steampowered.com/app/1/{title.replace(' ', '_')}/?snr=1_7_7_230_150_1"
    released_html = f'<div class="search_released">{released}</div>' if released is not None else ""
    review_html = ""
    if tooltip is not None:
        review_html = (
            '<div class="search_reviewscore">'
            f'<span class="search_review_summary positive" data-tooltip-html="{escape(tooltip)}"></span>'
            "</div>"
        )
    return (
        f'<a class="search_result_row ds_collapse_flag" href="{href}">'
        f'<div class="search_name"><span class="title">{title}</span></div>'
        f"{released_html}{review_html}"
        "</a>"
    )


def steam_page(*rows):
    return (
        "<html><body><div id=\"search_resultsRows\">"
        + "".join(rows)
        + "</div></body></html>"
    )


def itch_cell(title=None, author=None, links=()):
    title_html = f'<a class="title game_link" href="https://itch.io/games/tag-x">{title}</a>' if title else ""
    author_html = f'<div class="game_author"><a href="https://someone.itch.io">{author}</a></div>' if author else ""
    links_html = "".join(f'<a href="{href}">link</a>' for href in links)
    return f'<div class="game_cell">{links_html}<div class="game_cell_data">{title_html}{author_html}</div></div>'


def itch_page(*cells):
    return "<html><body><div class=\"game_grid_widget\">" + "".join(cells) + "</div></body></html>"


def rss_item(title, link, source=None):
    source_xml = f'<source url="https://example.com">{source}</source>' if source else ""
    return f"<item><title>{escape(title)}</title><link>{link}</link>{source_xml}</item>"


def rss_feed(*items):
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0"><channel><title>Search</title><link>https://news.example.com</link>'
        + "".join(items)
        + "</channel></rss>"
    )
