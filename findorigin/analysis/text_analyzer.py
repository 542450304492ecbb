"""Heuristic extraction of claims, dates, numbers, names and links from a message.

Nothing here is linguistic: every extractor is a handful of regular
expressions, and each one returns an empty list rather than failing.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, List

from findorigin.models import ExtractedData

logger = logging.getLogger(__name__)

MAX_KEY_CLAIMS = 3
MIN_CLAIM_LENGTH = 20
MAX_NAMES = 10
MAX_QUERIES = 5
MAIN_QUERY_CHARS = 100
MIN_MAIN_QUERY_LENGTH = 20

SENTENCE_SPLIT = re.compile(r"[.!?]\s+")
SHOUTING = re.compile(r"[А-ЯA-Z\s!]+")

_GENITIVE_MONTHS = "января|февраля|марта|апреля|мая|июня|июля|августа|сентября|октября|ноября|декабря"
_NOMINATIVE_MONTHS = "январь|февраль|март|апрель|май|июнь|июль|август|сентябрь|октябрь|ноябрь|декабрь"

DATE_PATTERNS = (
    # 12.03.2024, 12/03/24
    re.compile(r"\b\d{1,2}[./]\d{1,2}[./]\d{2,4}\b"),
    # 2024-03-12
    re.compile(r"\b\d{4}-\d{1,2}-\d{1,2}\b"),
    # 12 марта 2024
    re.compile(rf"\b\d{{1,2}}\s+(?:{_GENITIVE_MONTHS})\s+\d{{4}}\b", re.IGNORECASE),
    # март 2024
    re.compile(rf"\b(?:{_NOMINATIVE_MONTHS})\s+\d{{4}}\b", re.IGNORECASE),
)

NUMBER_PATTERNS = (
    # percentages
    re.compile(r"\b\d+(?:[.,]\d+)?%"),
    # thousands groups: 1 000 000
    re.compile(r"\b\d{1,3}(?:\s+\d{3})*(?:[.,]\d+)?\b"),
    # plain numbers
    re.compile(r"\b\d+(?:[.,]\d+)?\b"),
)

NAME_STRIP = re.compile(r"[.,!?;:()\[\]{}\"]")
NAME_START = re.compile(r"[А-ЯЁA-Z]")
NAME_STOP_WORDS = frozenset({"Это", "Также", "Однако", "Поэтому", "Который", "Которые"})

LINK_PATTERN = re.compile(r"https?://\S+")


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def _unique(items: Iterable[str]) -> List[str]:
    """Deduplicate keeping first-seen order."""
    return list(dict.fromkeys(items))


def extract_key_claims(text: str) -> List[str]:
    """Return up to three declarative sentences, in document order."""
    text = _as_text(text)
    sentences = [s.strip() for s in SENTENCE_SPLIT.split(text)]
    claims = [
        s
        for s in sentences
        if len(s) > MIN_CLAIM_LENGTH and "?" not in s and not SHOUTING.fullmatch(s)
    ]
    return claims[:MAX_KEY_CLAIMS]


def extract_dates(text: str) -> List[str]:
    text = _as_text(text)
    found: List[str] = []
    for pattern in DATE_PATTERNS:
        found.extend(pattern.findall(text))
    return _unique(found)


def extract_numbers(text: str) -> List[str]:
    """Percentages, grouped and plain numbers; single digits are dropped."""
    text = _as_text(text)
    found: List[str] = []
    for pattern in NUMBER_PATTERNS:
        found.extend(pattern.findall(text))
    return _unique(n for n in found if len(n) >= 2 or "%" in n)


def extract_names(text: str) -> List[str]:
    """Capitalised words that do not open the text, minus common function words."""
    words = _as_text(text).split()
    names: List[str] = []
    for raw in words[1:]:
        word = NAME_STRIP.sub("", raw)
        if len(word) >= 3 and NAME_START.match(word) and word not in NAME_STOP_WORDS:
            names.append(word)
    return _unique(names)[:MAX_NAMES]


def extract_links(text: str) -> List[str]:
    return _unique(LINK_PATTERN.findall(_as_text(text)))


def generate_search_queries(
    original_text: str,
    key_claims: List[str],
    names: List[str],
    dates: List[str],
    numbers: List[str],
) -> List[str]:
    """
    Build search queries, most useful first.

    Order: the opening of the text, the first two claims, then
    name + date and name + number combinations.
    """
    queries: List[str] = []

    main_text = _as_text(original_text)[:MAIN_QUERY_CHARS].strip()
    if len(main_text) > MIN_MAIN_QUERY_LENGTH:
        queries.append(main_text)

    queries.extend(key_claims[:2])

    if names and dates:
        queries.append(f"{names[0]} {dates[0]}")

    if names and numbers:
        queries.append(f"{names[0]} {numbers[0]}")

    return _unique(q for q in queries if q.strip())[:MAX_QUERIES]


def analyze_text(text: str) -> ExtractedData:
    """Run every extractor over ``text`` and derive search queries."""
    text = _as_text(text)

    key_claims = extract_key_claims(text)
    dates = extract_dates(text)
    numbers = extract_numbers(text)
    names = extract_names(text)
    links = extract_links(text)

    queries = generate_search_queries(text, key_claims, names, dates, numbers)
    logger.debug(
        f"Analyzed text ({len(text)} chars): {len(key_claims)} claims, {len(dates)} dates, "
        f"{len(numbers)} numbers, {len(names)} names, {len(queries)} queries"
    )

    return ExtractedData(
        key_claims=key_claims,
        dates=dates,
        numbers=numbers,
        names=names,
        links=links,
        search_queries=queries,
    )
