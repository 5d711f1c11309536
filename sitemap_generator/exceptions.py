"""
Exceptions raised by the sitemap generator.
"""


class SitemapGeneratorError(Exception):
    """Base exception for sitemap generation failures."""
    pass


class InvalidUrlError(SitemapGeneratorError, ValueError):
    """Raised when a base URL fails validation or cannot be normalized."""

    def __init__(self, url: str, reason: str = "Invalid URL format"):
        self.url = url
        self.reason = reason
        super().__init__(f"{reason}: {url!r}")


class InvalidParameterError(SitemapGeneratorError, ValueError):
    """Raised when a crawl parameter is out of its allowed range."""
    pass
