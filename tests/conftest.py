"""Shared fixtures for sitemap generator tests.

Network access is replaced by FakeSession, which mimics the parts of
aiohttp.ClientSession the fetcher and validator use.
"""

import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import pytest

# Add project root to path so tests can import main.py
sys.path.insert(0, str(Path(__file__).parent.parent))

from sitemap_generator.crawler import CrawlEngine, UrlValidator, WebFetcher
from sitemap_generator.utils.config import CrawlerConfig
from sitemap_generator.utils.monitoring import CrawlMonitor


class FakeStream:
    """Stand-in for aiohttp's StreamReader."""

    def __init__(self, body: bytes):
        self._body = body

    async def iter_chunked(self, size: int):
        for start in range(0, len(self._body), size):
            yield self._body[start:start + size]


class FakeResponse:
    """Stand-in for aiohttp.ClientResponse."""

    def __init__(self, body: Union[str, bytes] = "", status: int = 200,
                 content_type: str = "text/html; charset=utf-8",
                 charset: Optional[str] = "utf-8", url: str = ""):
        self.body = body.encode("utf-8") if isinstance(body, str) else body
        self.status = status
        self.headers = {"content-type": content_type} if content_type else {}
        self.charset = charset
        self.url = url
        self.content = FakeStream(self.body)

    async def text(self) -> str:
        return self.body.decode(self.charset or "utf-8")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False


class _RequestContext:
    def __init__(self, outcome):
        self._outcome = outcome

    async def __aenter__(self):
        if isinstance(self._outcome, BaseException):
            raise self._outcome
        return self._outcome

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False


class FakeSession:
    """
    Serves canned responses by URL.

    Values may be markup strings (served as 200 text/html), FakeResponse
    objects, or exceptions to raise. Unknown URLs get a 404.
    """

    def __init__(self, pages: Optional[Dict[str, object]] = None):
        self.pages = pages or {}
        self.requests: List[Tuple[str, str]] = []
        self.request_kwargs: List[dict] = []
        self.closed = False

    def _respond(self, method: str, url: str, kwargs: dict) -> _RequestContext:
        self.requests.append((method, url))
        self.request_kwargs.append(kwargs)
        outcome = self.pages.get(url)
        if outcome is None:
            outcome = FakeResponse("not found", status=404, url=url)
        elif isinstance(outcome, str):
            outcome = FakeResponse(outcome, url=url)
        return _RequestContext(outcome)

    def get(self, url: str, **kwargs) -> _RequestContext:
        return self._respond("GET", url, kwargs)

    def head(self, url: str, **kwargs) -> _RequestContext:
        return self._respond("HEAD", url, kwargs)

    async def close(self):
        self.closed = True

    @property
    def fetched_urls(self) -> List[str]:
        return [url for method, url in self.requests if method == "GET"]


@pytest.fixture
def make_session():
    """Factory for FakeSession instances."""
    return FakeSession


@pytest.fixture
def make_response():
    """Factory for FakeResponse instances."""
    return FakeResponse


@pytest.fixture
def make_engine():
    """Build a CrawlEngine whose fetcher is backed by a FakeSession."""

    def _make(pages: Dict[str, object], **config_overrides) -> Tuple[CrawlEngine, FakeSession]:
        session = FakeSession(pages)
        config = CrawlerConfig(**config_overrides)
        fetcher = WebFetcher(user_agent=config.user_agent,
                             request_timeout=config.request_timeout,
                             max_redirects=config.max_redirects)
        fetcher.session = session
        engine = CrawlEngine(config, fetcher=fetcher, monitor=CrawlMonitor())
        return engine, session

    return _make


@pytest.fixture
def validator_with_session():
    """Build a UrlValidator whose session is a FakeSession."""

    def _make(pages: Dict[str, object]) -> Tuple[UrlValidator, FakeSession]:
        session = FakeSession(pages)
        validator = UrlValidator()
        validator.session = session
        return validator, session

    return _make
