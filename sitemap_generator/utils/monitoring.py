"""
Metrics collection for crawl runs.
"""

import time
import logging
from pathlib import Path
from typing import Dict, Any, Optional, Union

from prometheus_client import Counter, Histogram, CollectorRegistry, generate_latest


class CrawlMonitor:
    """
    Prometheus metrics for one or more crawls.

    Each monitor owns its registry, so separate monitors never share counters.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self.start_time = time.time()
        self.registry = CollectorRegistry()

        self.pages_fetched = Counter(
            'sitemap_pages_fetched',
            'Pages fetched successfully',
            registry=self.registry
        )
        self.fetch_failures = Counter(
            'sitemap_fetch_failures',
            'Page fetches that produced no content',
            ['error_type'],
            registry=self.registry
        )
        self.links_rejected = Counter(
            'sitemap_links_rejected',
            'Extracted links dropped by the internal URL filter',
            ['reason'],
            registry=self.registry
        )
        self.entries_added = Counter(
            'sitemap_entries_added',
            'URLs added to the sitemap',
            registry=self.registry
        )
        self.fetch_time = Histogram(
            'sitemap_fetch_time_seconds',
            'Time spent fetching a page',
            registry=self.registry
        )

    def record_fetch(self, fetch_time: float, error_type: str = ""):
        """Record a page fetch, successful when error_type is empty."""
        self.fetch_time.observe(fetch_time)
        if error_type:
            self.fetch_failures.labels(error_type=error_type).inc()
        else:
            self.pages_fetched.inc()

    def record_rejected_link(self, reason: str):
        """Record a link excluded from the sitemap."""
        self.links_rejected.labels(reason=reason).inc()

    def record_entry_added(self):
        """Record a new sitemap entry."""
        self.entries_added.inc()

    def value(self, name: str, labels: Optional[Dict[str, str]] = None) -> float:
        """Current value of a sample in this monitor's registry."""
        return self.registry.get_sample_value(name, labels or {}) or 0.0

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary of all metrics."""
        runtime = time.time() - self.start_time
        pages = self.value('sitemap_pages_fetched_total')

        return {
            'runtime_seconds': runtime,
            'pages_fetched': pages,
            'entries_added': self.value('sitemap_entries_added_total'),
            'pages_per_minute': pages / (runtime / 60) if runtime > 0 else 0,
        }

    def export_text(self) -> str:
        """Render metrics in the Prometheus text exposition format."""
        return generate_latest(self.registry).decode('utf-8')

    def export_to_file(self, file_path: Union[str, Path]):
        """Write the exposition text to a file."""
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.export_text(), encoding='utf-8')
        self.logger.info(f"Metrics exported to {path}")
