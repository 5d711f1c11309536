"""
Link extraction from raw page markup.

Links are found with a pattern scan over href attributes rather than a markup
parser. This keeps extraction working on broken markup, at the price of
picking up href-looking text in comments or scripts.
"""

import re
import logging
from typing import List, Optional
from urllib.parse import urlparse


HREF_PATTERN = re.compile(r'href=["\']([^"\'>]+)["\']')
ABSOLUTE_URL_PATTERN = re.compile(r'^https?://')

SKIPPED_PREFIXES = ('#', 'javascript:', 'mailto:')


class LinkExtractor:
    """Pulls href targets out of markup and makes them absolute."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def extract_links(self, page_html: str, page_url: str) -> List[str]:
        """
        Extract absolute link targets from a page.

        Args:
            page_html: Raw page markup
            page_url: URL the page was fetched from, used as the resolution base

        Returns:
            Absolute URLs in first-seen order, without duplicates
        """
        links = {}

        for raw_link in HREF_PATTERN.findall(page_html or ''):
            absolute_url = self.resolve_absolute(raw_link, page_url)
            if absolute_url:
                links[absolute_url] = None

        self.logger.debug(f"Extracted {len(links)} links from {page_url}")
        return list(links)

    def resolve_absolute(self, raw_link: str, page_url: str) -> Optional[str]:
        """
        Resolve a raw href value against the page it was found on.

        Returns None for in-page anchors, javascript: and mailto: links.
        Relative paths are joined to the directory of the page path without
        resolving dot segments.
        """
        link = raw_link.strip()
        if not link:
            return None

        if ABSOLUTE_URL_PATTERN.match(link):
            return link

        if link.lower().startswith(SKIPPED_PREFIXES):
            return None

        parsed_page = urlparse(page_url)
        scheme = parsed_page.scheme or 'https'
        host = parsed_page.netloc

        if link.startswith('//'):
            return f"{scheme}:{link}"

        if link.startswith('/'):
            return f"{scheme}://{host}{link}"

        # Directory of the page path: drop the last segment
        directory = parsed_page.path.rsplit('/', 1)[0] if '/' in parsed_page.path else ''
        directory = directory.rstrip('/')

        return f"{scheme}://{host}{directory}/{link}"
