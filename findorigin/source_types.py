"""Source type classification by URL host."""

import logging
from enum import Enum
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


class SourceType(str, Enum):
    """Coarse category of a candidate source."""

    OFFICIAL = "official"
    NEWS = "news"
    BLOG = "blog"
    RESEARCH = "research"
    OTHER = "other"


OFFICIAL_SUFFIXES = (".gov", ".gov.ru", ".edu", ".edu.ru")
OFFICIAL_MARKERS = ("official", "gov")

NEWS_DOMAINS = (
    "bbc.com",
    "cnn.com",
    "reuters.com",
    "ap.org",
    "rbc.ru",
    "ria.ru",
    "tass.ru",
    "interfax.ru",
    "lenta.ru",
    "gazeta.ru",
    "kommersant.ru",
    "vedomosti.ru",
    "rt.com",
    "sputniknews.com",
)

RESEARCH_MARKERS = ("pubmed", "arxiv", "researchgate", "scholar", "university")
RESEARCH_SUFFIXES = (".edu",)

BLOG_MARKERS = ("medium.com", "habr.com", "blog", "wordpress")


def _hostname(url: str) -> str:
    try:
        return (urlparse(url).hostname or "").lower()
    except (ValueError, AttributeError) as e:
        logger.debug(f"Error parsing host from {url!r}: {e}")
        return ""


def classify_source(url: str) -> SourceType:
    """
    Classify a URL by its host.

    Rules are checked in order and the first match wins:
    official -> news -> research -> blog -> other.
    """
    domain = _hostname(url)
    if not domain:
        return SourceType.OTHER

    if domain.endswith(OFFICIAL_SUFFIXES) or any(marker in domain for marker in OFFICIAL_MARKERS):
        return SourceType.OFFICIAL

    if any(news_domain in domain for news_domain in NEWS_DOMAINS):
        return SourceType.NEWS

    if any(marker in domain for marker in RESEARCH_MARKERS) or domain.endswith(RESEARCH_SUFFIXES):
        return SourceType.RESEARCH

    if any(marker in domain for marker in BLOG_MARKERS):
        return SourceType.BLOG

    return SourceType.OTHER
