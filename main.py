#!/usr/bin/env python3
"""
Command-line entry point for the sitemap generator.
"""

import asyncio
import argparse
import logging
import sys
from typing import Optional

from sitemap_generator import __version__
from sitemap_generator.crawler import CrawlEngine, UrlValidator
from sitemap_generator.exceptions import SitemapGeneratorError
from sitemap_generator.sitemap import ChangeFrequency
from sitemap_generator.utils.config import Config, ConfigManager, TRAVERSAL_ORDERS
from sitemap_generator.utils.logger import setup_logging
from sitemap_generator.utils.monitoring import CrawlMonitor


class SitemapApp:
    """Main application class: validates input, runs the crawl, writes output."""

    def __init__(self, config: Config):
        self.config = config
        self.logger = logging.getLogger(__name__)
        self.validator = UrlValidator(
            user_agent=config.crawler.user_agent,
            timeout=config.crawler.probe_timeout,
            max_redirects=config.crawler.max_redirects
        )

    def prepare_url(self, raw_url: str) -> str:
        """Normalize user input and reject anything that is not a valid URL."""
        url = self.validator.normalize_url(raw_url)
        if not self.validator.is_valid_url(url):
            raise SitemapGeneratorError("Invalid URL format!")
        return url

    async def run(self, base_url: str, output: Optional[str], to_stdout: bool = False,
                  respect_robots: bool = False, metrics_file: Optional[str] = None) -> int:
        """Generate the sitemap for a validated base URL."""
        sitemap = self.config.sitemap

        if respect_robots:
            async with self.validator:
                allowed = await self.validator.is_allowed_by_robots(
                    base_url, self.config.crawler.user_agent
                )
            if not allowed:
                self.logger.error(f"robots.txt disallows crawling {base_url}")
                return 1

        monitor = CrawlMonitor() if self.config.monitoring.metrics_enabled else None
        engine = CrawlEngine(self.config.crawler, validator=self.validator, monitor=monitor)

        result = await engine.crawl(
            base_url,
            max_depth=sitemap.max_depth,
            change_freq=sitemap.change_freq,
            priority=sitemap.priority
        )

        if to_stdout:
            sys.stdout.write(engine.serializer.serialize(result.entries) + "\n")
        else:
            path = engine.serializer.write(result.entries, output or sitemap.output_file)
            self.logger.info(f"{result.url_count} URLs written to {path}")

        if metrics_file and monitor is not None:
            monitor.export_to_file(metrics_file)

        return 0

    async def dry_run(self, base_url: str) -> int:
        """Check that the base URL is reachable and crawlable without crawling."""
        async with self.validator:
            self.logger.info(f"Probing {base_url}...")
            if await self.validator.is_url_accessible(base_url, self.config.crawler.probe_timeout):
                self.logger.info("✓ Base URL is accessible")
            else:
                self.logger.error("✗ Base URL is not accessible")

            if await self.validator.is_allowed_by_robots(base_url, self.config.crawler.user_agent):
                self.logger.info("✓ robots.txt allows crawling")
            else:
                self.logger.warning("✗ robots.txt disallows crawling")

        self.logger.info("Dry run completed")
        return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Crawl a website and generate an XML sitemap",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py example.com                         # Writes sitemap.xml
  python main.py https://example.com --max-depth 2   # Follow two link levels
  python main.py example.com --stdout                # Print the sitemap
  python main.py example.com --config config.yaml    # Use a configuration file
  python main.py example.com --dry-run               # Probe only, no crawl
        """
    )

    parser.add_argument('url', help='Base URL of the site to crawl')
    parser.add_argument('--config', help='Path to a YAML configuration file')
    parser.add_argument('--max-depth', type=int, help='Link levels to follow (default: 3)')
    parser.add_argument('--change-freq', choices=ChangeFrequency.values(),
                        help='Change frequency for every entry (default: weekly)')
    parser.add_argument('--priority', type=float,
                        help='Priority of pages linked from the root, 0.1-1.0 (default: 0.5)')

    output = parser.add_mutually_exclusive_group()
    output.add_argument('--output', '-o', help='Output file (default: sitemap.xml)')
    output.add_argument('--stdout', action='store_true', help='Print the sitemap to stdout')

    parser.add_argument('--max-pages', type=int, help='Stop after fetching this many pages')
    parser.add_argument('--max-duration', type=float, help='Stop crawling after this many seconds')
    parser.add_argument('--traversal', choices=TRAVERSAL_ORDERS, help='Frontier traversal order')
    parser.add_argument('--respect-robots', action='store_true',
                        help='Abort if robots.txt disallows the base URL')
    parser.add_argument('--dry-run', action='store_true',
                        help='Validate and probe the URL without crawling')
    parser.add_argument('--metrics-file', help='Write Prometheus metrics to this file')
    parser.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    parser.add_argument('--version', action='version',
                        version=f'Sitemap Generator {__version__}')

    return parser


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Apply command-line flags on top of file configuration."""
    if args.max_depth is not None:
        config.sitemap.max_depth = args.max_depth
    if args.change_freq is not None:
        config.sitemap.change_freq = args.change_freq
    if args.priority is not None:
        config.sitemap.priority = args.priority
    if args.max_pages is not None:
        config.crawler.max_pages = args.max_pages
    if args.max_duration is not None:
        config.crawler.max_duration = args.max_duration
    if args.traversal is not None:
        config.crawler.traversal_order = args.traversal
    if args.log_level is not None:
        config.logging.level = args.log_level
    return config


def main(argv=None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        manager = ConfigManager(args.config)
        config = apply_overrides(manager.load_config(), args)
        manager.validate()
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    setup_logging(config.logging)
    app = SitemapApp(config)

    try:
        base_url = app.prepare_url(args.url)
        if args.dry_run:
            return asyncio.run(app.dry_run(base_url))
        return asyncio.run(app.run(
            base_url,
            output=args.output,
            to_stdout=args.stdout,
            respect_robots=args.respect_robots,
            metrics_file=args.metrics_file
        ))
    except SitemapGeneratorError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
