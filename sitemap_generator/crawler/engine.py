"""
Crawl engine that walks a site from its base URL and builds sitemap entries.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set
from urllib.parse import urlparse

from .fetcher import WebFetcher
from .link_extractor import LinkExtractor
from .url_frontier import URLFrontier, URLTask
from .url_validator import UrlValidator
from ..exceptions import InvalidUrlError, InvalidParameterError
from ..sitemap.models import ChangeFrequency, SitemapEntry, strip_fragment
from ..sitemap.serializer import SitemapSerializer
from ..utils.config import CrawlerConfig
from ..utils.logger import CrawlerLogAdapter, get_crawler_logger
from ..utils.monitoring import CrawlMonitor


ROOT_PRIORITY = 1.0
MIN_PRIORITY = 0.1
PRIORITY_STEP = 0.1


def calculate_priority(depth: int, base_priority: float) -> float:
    """Priority for links found on a page at the given depth."""
    return max(MIN_PRIORITY, base_priority - (depth - 1) * PRIORITY_STEP)


@dataclass
class CrawlStats:
    """Statistics for one crawl."""
    start_time: float
    pages_fetched: int = 0
    fetch_failures: int = 0
    links_found: int = 0
    links_rejected: int = 0
    entries_added: int = 0
    stopped_early: bool = False

    @property
    def elapsed_time(self) -> float:
        return time.time() - self.start_time

    def to_dict(self) -> Dict:
        return {
            'pages_fetched': self.pages_fetched,
            'fetch_failures': self.fetch_failures,
            'links_found': self.links_found,
            'links_rejected': self.links_rejected,
            'entries_added': self.entries_added,
            'stopped_early': self.stopped_early,
            'elapsed_time': self.elapsed_time
        }


@dataclass
class CrawlState:
    """
    Mutable state of a single crawl.

    Created per call and never shared. visited and entries are both keyed by
    the fragment-stripped URL.
    """
    base_url: str
    base_host: str
    max_depth: int
    change_freq: ChangeFrequency
    base_priority: float
    log: CrawlerLogAdapter
    visited: Set[str] = field(default_factory=set)
    entries: Dict[str, SitemapEntry] = field(default_factory=dict)
    stats: CrawlStats = field(default_factory=lambda: CrawlStats(start_time=time.time()))

    def calculate_priority(self, depth: int) -> float:
        return calculate_priority(depth, self.base_priority)

    def add_entry(self, url: str, priority: float) -> bool:
        """Add a URL unless an entry for it already exists. Returns True if added."""
        key = strip_fragment(url)
        if key in self.entries:
            return False

        self.entries[key] = SitemapEntry.create(key, priority, self.change_freq)
        self.stats.entries_added += 1
        return True


@dataclass
class CrawlResult:
    """Outcome of a crawl: ordered entries plus statistics."""
    base_url: str
    entries: List[SitemapEntry]
    stats: CrawlStats

    @property
    def url_count(self) -> int:
        return len(self.entries)

    @property
    def urls(self) -> List[str]:
        return [entry.url for entry in self.entries]


class CrawlEngine:
    """
    Depth-bounded crawler that produces sitemap entries.

    Pages are fetched one at a time. An engine may be reused and even shared
    between concurrent calls: every call gets its own CrawlState, and its own
    fetcher session unless a fetcher was injected.
    """

    def __init__(self, config: Optional[CrawlerConfig] = None,
                 fetcher: Optional[WebFetcher] = None,
                 validator: Optional[UrlValidator] = None,
                 link_extractor: Optional[LinkExtractor] = None,
                 serializer: Optional[SitemapSerializer] = None,
                 monitor: Optional[CrawlMonitor] = None):
        self.config = config or CrawlerConfig()
        self.fetcher = fetcher
        self.validator = validator or UrlValidator(
            user_agent=self.config.user_agent,
            timeout=self.config.probe_timeout,
            max_redirects=self.config.max_redirects
        )
        self.link_extractor = link_extractor or LinkExtractor()
        self.serializer = serializer or SitemapSerializer()
        self.monitor = monitor or CrawlMonitor()
        self.excluded_extensions = tuple(ext.lower() for ext in self.config.excluded_extensions)
        self.logger = logging.getLogger(__name__)

    async def generate(self, base_url: str, max_depth: int = 3,
                       change_freq: str = 'weekly', priority: float = 0.5) -> str:
        """
        Crawl a site and return its sitemap XML.

        Raises:
            InvalidUrlError: If base_url is not a valid http(s) URL
            InvalidParameterError: If another parameter is out of range
        """
        result = await self.crawl(base_url, max_depth, change_freq, priority)
        return self.serializer.serialize(result.entries)

    async def crawl(self, base_url: str, max_depth: int = 3,
                    change_freq: str = 'weekly', priority: float = 0.5) -> CrawlResult:
        """
        Crawl a site and return the discovered sitemap entries.

        Args:
            base_url: Root of the crawl
            max_depth: Number of link levels to follow, at least 1
            change_freq: Change frequency written for every entry
            priority: Priority of links found on the root page, 0.1 to 1.0

        Returns:
            CrawlResult with entries in discovery order
        """
        frequency = self.validate_parameters(base_url, max_depth, change_freq, priority)

        base_url = base_url.rstrip('/')
        state = CrawlState(
            base_url=base_url,
            base_host=urlparse(base_url).hostname,
            max_depth=max_depth,
            change_freq=frequency,
            base_priority=float(priority),
            log=get_crawler_logger(__name__, base_url=base_url)
        )

        state.log.info(f"Starting crawl of {base_url} (max_depth={max_depth}, "
                       f"changefreq={frequency.value}, priority={priority})")

        # The root always gets the maximum priority
        if state.add_entry(base_url, ROOT_PRIORITY):
            self.monitor.record_entry_added()

        if self.fetcher is not None:
            await self._run(state, self.fetcher)
        else:
            async with WebFetcher(
                user_agent=self.config.user_agent,
                request_timeout=self.config.request_timeout,
                max_redirects=self.config.max_redirects
            ) as fetcher:
                await self._run(state, fetcher)

        self._log_final_stats(state)

        return CrawlResult(
            base_url=base_url,
            entries=list(state.entries.values()),
            stats=state.stats
        )

    def validate_parameters(self, base_url: str, max_depth: int,
                            change_freq: str, priority: float) -> ChangeFrequency:
        """Check crawl inputs before anything is fetched."""
        if not isinstance(base_url, str) or not self.validator.is_valid_url(base_url):
            raise InvalidUrlError(str(base_url))

        if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth < 1:
            raise InvalidParameterError(f"max_depth must be a positive integer, got {max_depth!r}")

        try:
            frequency = ChangeFrequency(change_freq)
        except ValueError:
            raise InvalidParameterError(
                f"change_freq must be one of {', '.join(ChangeFrequency.values())}, got {change_freq!r}"
            ) from None

        try:
            priority_value = float(priority)
        except (TypeError, ValueError):
            raise InvalidParameterError(f"priority must be a number, got {priority!r}") from None

        if not MIN_PRIORITY <= priority_value <= ROOT_PRIORITY:
            raise InvalidParameterError(f"priority must be between 0.1 and 1.0, got {priority!r}")

        return frequency

    async def _run(self, state: CrawlState, fetcher: WebFetcher):
        """Drain the frontier starting from the base URL."""
        frontier = URLFrontier(self.config.traversal_order)
        frontier.add_url(URLTask(url=state.base_url, depth=1))

        while not frontier.is_empty():
            task = frontier.get_next_url()
            key = strip_fragment(task.url)

            if task.depth > state.max_depth or key in state.visited:
                continue

            if self._limit_reached(state):
                state.stats.stopped_early = True
                break

            state.visited.add(key)
            await self._process_url(state, task, fetcher, frontier)

    def _limit_reached(self, state: CrawlState) -> bool:
        """Check the optional page and duration ceilings."""
        max_pages = self.config.max_pages
        if max_pages and len(state.visited) >= max_pages:
            state.log.warning(f"Reached max pages limit: {max_pages}")
            return True

        max_duration = self.config.max_duration
        if max_duration and state.stats.elapsed_time >= max_duration:
            state.log.warning(f"Reached max duration: {max_duration} seconds")
            return True

        return False

    async def _process_url(self, state: CrawlState, task: URLTask,
                           fetcher: WebFetcher, frontier: URLFrontier):
        """Fetch one page, record its internal links and queue them."""
        fetch_result = await fetcher.fetch(task.url)
        self.monitor.record_fetch(fetch_result.fetch_time, fetch_result.error_type or "")

        if not fetch_result.ok or not fetch_result.content:
            state.stats.fetch_failures += 1
            state.log.log_url_event(logging.DEBUG, task.url,
                                    f"No links from {task.url}: {fetch_result.error}")
            return

        state.stats.pages_fetched += 1
        links = self.link_extractor.extract_links(fetch_result.content, task.url)
        state.stats.links_found += len(links)

        priority = state.calculate_priority(task.depth)
        new_tasks = []

        for link in links:
            rejection = self._rejection_reason(state, link)
            if rejection:
                state.stats.links_rejected += 1
                self.monitor.record_rejected_link(rejection)
                continue

            if state.add_entry(link, priority):
                self.monitor.record_entry_added()

            # Known URLs are queued too; the visited check stops repeats
            new_tasks.append(URLTask(url=strip_fragment(link), depth=task.depth + 1,
                                     parent_url=task.url))

        self._queue_new_urls(frontier, new_tasks, task.depth + 1, state.max_depth)

        state.log.log_url_event(logging.DEBUG, task.url,
                                f"Processed {task.url} at depth {task.depth}: "
                                f"{len(links)} links, {len(new_tasks)} internal")

    def _rejection_reason(self, state: CrawlState, link: str) -> Optional[str]:
        """Return why a link is not an internal page URL, or None if it is."""
        try:
            parsed = urlparse(link)
            host = parsed.hostname
        except ValueError:
            return 'malformed'

        # Only the host is compared; http and https links to it are both internal
        if host != state.base_host:
            return 'external'

        if parsed.path.lower().endswith(self.excluded_extensions):
            return 'excluded_extension'

        return None

    def _queue_new_urls(self, frontier: URLFrontier, tasks: List[URLTask],
                        depth: int, max_depth: int):
        """Queue tasks unless they already lie beyond the depth bound."""
        if depth > max_depth or not tasks:
            return

        frontier.add_urls(tasks)

    def _log_final_stats(self, state: CrawlState):
        """Log crawl summary."""
        stats = state.stats
        state.log.info(
            f"Crawl completed: entries={len(state.entries)}, "
            f"fetched={stats.pages_fetched}, failures={stats.fetch_failures}, "
            f"rejected_links={stats.links_rejected}, "
            f"time={stats.elapsed_time:.2f}s"
            + (" (stopped early)" if stats.stopped_early else "")
        )


def generate_sitemap(base_url: str, max_depth: int = 3, change_freq: str = 'weekly',
                     priority: float = 0.5, config: Optional[CrawlerConfig] = None) -> str:
    """Blocking wrapper around CrawlEngine.generate()."""
    engine = CrawlEngine(config)
    return asyncio.run(engine.generate(base_url, max_depth, change_freq, priority))
