"""
Sitemap Generator

Crawls a website from a base URL and builds a sitemap.org 0.9 XML document.
"""

__version__ = "1.0.0"
__description__ = "A depth-bounded website crawler that produces XML sitemaps"
