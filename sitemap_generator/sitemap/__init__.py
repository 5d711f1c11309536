"""
Sitemap data model and XML output.
"""

from .models import ChangeFrequency, SitemapEntry, format_priority, strip_fragment
from .serializer import SitemapSerializer, SITEMAP_NAMESPACE

__all__ = [
    'ChangeFrequency', 'SitemapEntry', 'format_priority', 'strip_fragment',
    'SitemapSerializer', 'SITEMAP_NAMESPACE'
]
