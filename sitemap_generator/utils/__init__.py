"""
Utility modules for the sitemap generator.
"""

from .config import Config, ConfigManager, load_config
from .logger import setup_logging, get_crawler_logger
from .monitoring import CrawlMonitor

__all__ = [
    'Config', 'ConfigManager', 'load_config',
    'setup_logging', 'get_crawler_logger', 'CrawlMonitor'
]
