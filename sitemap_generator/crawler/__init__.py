"""
Crawler core components.
"""

from .url_validator import UrlValidator, parse_robots, is_path_allowed
from .link_extractor import LinkExtractor
from .url_frontier import URLFrontier, URLTask
from .fetcher import WebFetcher, FetchResult
from .engine import (
    CrawlEngine, CrawlResult, CrawlState, CrawlStats,
    calculate_priority, generate_sitemap
)

__all__ = [
    'UrlValidator', 'parse_robots', 'is_path_allowed',
    'LinkExtractor',
    'URLFrontier', 'URLTask',
    'WebFetcher', 'FetchResult',
    'CrawlEngine', 'CrawlResult', 'CrawlState', 'CrawlStats',
    'calculate_priority', 'generate_sitemap'
]
