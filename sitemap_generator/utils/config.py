"""
Configuration management for the sitemap generator.
"""

import yaml
import logging
from pathlib import Path
from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field

from ..sitemap.models import ChangeFrequency


DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; SitemapGenerator/1.0)"

DEFAULT_EXCLUDED_EXTENSIONS = [
    '.jpg', '.jpeg', '.png', '.gif', '.css', '.js', '.pdf', '.zip', '.rar'
]

TRAVERSAL_ORDERS = ('breadth_first', 'depth_first')


@dataclass
class CrawlerConfig:
    """Configuration for crawler behavior."""
    user_agent: str = DEFAULT_USER_AGENT
    request_timeout: float = 10
    probe_timeout: float = 10
    max_redirects: int = 3
    traversal_order: str = 'breadth_first'
    max_pages: Optional[int] = None
    max_duration: Optional[float] = None
    excluded_extensions: List[str] = field(
        default_factory=lambda: list(DEFAULT_EXCLUDED_EXTENSIONS)
    )


@dataclass
class SitemapConfig:
    """Default generation parameters and output location."""
    max_depth: int = 3
    change_freq: str = ChangeFrequency.WEEKLY.value
    priority: float = 0.5
    output_file: str = 'sitemap.xml'


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = 'INFO'
    file: Optional[str] = None
    format: str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    json: bool = False


@dataclass
class MonitoringConfig:
    """Configuration for monitoring."""
    metrics_enabled: bool = True


@dataclass
class Config:
    """Main configuration class."""
    crawler: CrawlerConfig = field(default_factory=CrawlerConfig)
    sitemap: SitemapConfig = field(default_factory=SitemapConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)


class ConfigManager:
    """Manages configuration loading and validation."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = Path(config_path) if config_path else None
        self._config: Optional[Config] = None

    def load_config(self) -> Config:
        """Load configuration from YAML file, or defaults when no path is set."""
        config_data: Dict[str, Any] = {}

        if self.config_path is not None:
            if not self.config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

            with open(self.config_path, 'r') as file:
                config_data = yaml.safe_load(file) or {}

            if not isinstance(config_data, dict):
                raise ValueError(f"Configuration file must contain a mapping: {self.config_path}")

        # Parse configuration sections
        try:
            self._config = Config(
                crawler=CrawlerConfig(**(config_data.get('crawler') or {})),
                sitemap=SitemapConfig(**(config_data.get('sitemap') or {})),
                logging=LoggingConfig(**(config_data.get('logging') or {})),
                monitoring=MonitoringConfig(**(config_data.get('monitoring') or {}))
            )
        except TypeError as e:
            raise ValueError(f"Unknown configuration key: {e}") from e

        self._validate_config()
        return self._config

    def validate(self):
        """Re-validate after the loaded configuration was modified in place."""
        self._validate_config()

    def _validate_config(self):
        """Validate configuration values."""
        if not self._config:
            raise ValueError("Configuration not loaded")

        crawler = self._config.crawler
        sitemap = self._config.sitemap

        # Validate numeric values
        if crawler.request_timeout <= 0 or crawler.probe_timeout <= 0:
            raise ValueError("request_timeout and probe_timeout must be positive")

        if crawler.max_redirects < 0:
            raise ValueError("max_redirects must be non-negative")

        if crawler.max_pages is not None and crawler.max_pages < 1:
            raise ValueError("max_pages must be at least 1")

        if crawler.max_duration is not None and crawler.max_duration <= 0:
            raise ValueError("max_duration must be positive")

        if crawler.traversal_order not in TRAVERSAL_ORDERS:
            raise ValueError(f"traversal_order must be one of {', '.join(TRAVERSAL_ORDERS)}")

        crawler.excluded_extensions = [ext.lower() for ext in crawler.excluded_extensions]

        # Validate sitemap defaults
        if sitemap.max_depth < 1:
            raise ValueError("max_depth must be at least 1")

        if not 0.1 <= sitemap.priority <= 1.0:
            raise ValueError("priority must be between 0.1 and 1.0")

        if sitemap.change_freq not in ChangeFrequency.values():
            raise ValueError(f"change_freq must be one of {', '.join(ChangeFrequency.values())}")

        logging.getLogger(__name__).debug("Configuration validation passed")

    @property
    def config(self) -> Config:
        """Get the loaded configuration."""
        if not self._config:
            raise ValueError("Configuration not loaded. Call load_config() first.")
        return self._config


def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration from file, falling back to defaults when no path is given."""
    return ConfigManager(config_path).load_config()
