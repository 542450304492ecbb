"""Web search providers."""

from .base import SearchProvider
from .bing import BingSearchProvider
from .google import GoogleSearchProvider
from .serpapi import SerpApiSearchProvider
from .yandex import YandexSearchProvider

__all__ = [
    "SearchProvider",
    "GoogleSearchProvider",
    "YandexSearchProvider",
    "BingSearchProvider",
    "SerpApiSearchProvider",
]
