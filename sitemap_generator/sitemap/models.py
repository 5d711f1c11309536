"""
Data model for sitemap entries.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum


class ChangeFrequency(str, Enum):
    """Sitemap change frequency hints."""
    ALWAYS = "always"
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    NEVER = "never"

    @classmethod
    def values(cls) -> list:
        return [member.value for member in cls]


def format_priority(value: float) -> str:
    """Format a priority to one decimal place, rounding half up."""
    return str(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def strip_fragment(url: str) -> str:
    """Remove the fragment part of a URL, leaving everything else untouched."""
    return url.split('#', 1)[0]


@dataclass
class SitemapEntry:
    """A single <url> record of the sitemap."""
    url: str
    priority: str
    change_frequency: ChangeFrequency = ChangeFrequency.WEEKLY
    last_modified: date = field(default_factory=date.today)

    @classmethod
    def create(cls, url: str, priority: float,
               change_frequency: ChangeFrequency) -> 'SitemapEntry':
        """Build an entry from a raw URL and a numeric priority."""
        return cls(
            url=strip_fragment(url),
            priority=format_priority(priority),
            change_frequency=ChangeFrequency(change_frequency)
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for reporting."""
        return {
            'url': self.url,
            'lastmod': self.last_modified.isoformat(),
            'changefreq': self.change_frequency.value,
            'priority': self.priority
        }
