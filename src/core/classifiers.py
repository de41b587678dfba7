"""
Heuristics used to filter and rank scraped listings
"""
import re
from datetime import date, datetime, timezone
from typing import Iterable, Optional

PLACEHOLDER_KEYWORDS = (
    "coming",
    "tba",
    "to be",
    "announced",
    "soon",
    "q1",
    "q2",
    "q3",
    "q4",
)

RECENT_WINDOW_DAYS = 30

# "Jan 15, 2026" and "15 Jan, 2026"
_DATE_LAYOUTS = (
    re.compile(r"^(?P<month>[A-Za-z]{3}) (?P<day>\d{1,2}), (?P<year>\d{4})$"),
    re.compile(r"^(?P<day>\d{1,2}) (?P<month>[A-Za-z]{3}), (?P<year>\d{4})$"),
)

# English abbreviations regardless of LC_TIME
_MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}


def _utc_today(now: Optional[datetime]) -> date:
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.date()


def keyword_match(text: str, keywords: Iterable[str]) -> bool:
    text = text.lower()
    return any(k.lower() in text for k in keywords)


def parse_release_date(release_text: str) -> Optional[date]:
    """
    Parse one of the two storefront date layouts.
    Returns None for anything else, including impossible dates.
    """
    text = release_text.strip()
    for pattern in _DATE_LAYOUTS:
        match = pattern.match(text)
        if match is None:
            continue
        month = _MONTHS.get(match.group("month").lower())
        if month is None:
            return None
        try:
            return date(int(match.group("year")), month, int(match.group("day")))
        except ValueError:
            return None
    return None


def is_recent_release(release_text: str, now: Optional[datetime] = None) -> bool:
    """
    True when the release text is a concrete date at most 30 days in the past.

    "Today" is the UTC calendar date of `now`; naive datetimes are read as UTC.
    """
    if not release_text:
        return False

    if keyword_match(release_text, PLACEHOLDER_KEYWORDS):
        return False

    released = parse_release_date(release_text)
    if released is None:
        return False

    elapsed_days = (_utc_today(now) - released).days
    return 0 <= elapsed_days <= RECENT_WINDOW_DAYS


def is_upcoming_release(release_text: str, now: Optional[datetime] = None) -> bool:
    """
    True when the release text looks like a placeholder or names
    the current or next year.
    """
    if not release_text:
        return False

    year = _utc_today(now).year
    tokens = PLACEHOLDER_KEYWORDS + (str(year), str(year + 1))
    return keyword_match(release_text, tokens)


def score_sentiment(review_summary: str) -> int:
    """
    Map a storefront review label to 0, 1 or 2.
    Matching is case-sensitive on the storefront's canonical labels.
    """
    if "Very Positive" in review_summary or "Overwhelmingly" in review_summary:
        return 2
    if "Positive" in review_summary:
        return 1
    return 0


def strip_query(url: str) -> str:
    return url.split("?", 1)[0]
