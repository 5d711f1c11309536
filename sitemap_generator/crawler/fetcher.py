"""
Web page fetcher for the crawl.
"""

import asyncio
import aiohttp
import logging
import time
from typing import Optional, Dict
from dataclasses import dataclass
from aiohttp import ClientSession, ClientTimeout, ClientError

from ..utils.config import DEFAULT_USER_AGENT


@dataclass
class FetchResult:
    """Result of a fetch operation."""
    url: str
    status_code: int
    content: Optional[str] = None
    headers: Optional[Dict[str, str]] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    fetch_time: float = 0.0
    content_type: Optional[str] = None
    encoding: Optional[str] = None

    @property
    def ok(self) -> bool:
        """True when the page was retrieved with a 2xx status."""
        return self.error is None and 200 <= self.status_code < 300


class WebFetcher:
    """
    Fetches pages one at a time.

    Failures never raise: they come back as a FetchResult carrying an error.
    """

    def __init__(self, user_agent: str = DEFAULT_USER_AGENT, request_timeout: float = 10,
                 max_redirects: int = 3, max_content_size: int = 10 * 1024 * 1024):
        self.user_agent = user_agent
        self.request_timeout = request_timeout
        self.max_redirects = max_redirects
        self.max_content_size = max_content_size

        self.logger = logging.getLogger(__name__)

        self.session: Optional[ClientSession] = None

        # Statistics
        self.stats = {
            'total_requests': 0,
            'successful_requests': 0,
            'failed_requests': 0,
            'total_bytes_downloaded': 0
        }

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def start(self):
        """Initialize the fetcher session."""
        if self.session is None:
            timeout = ClientTimeout(total=self.request_timeout)
            headers = {
                'User-Agent': self.user_agent,
                'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8'
            }

            self.session = aiohttp.ClientSession(timeout=timeout, headers=headers)
            self.logger.debug("WebFetcher session started")

    async def close(self):
        """Close the fetcher session."""
        if self.session:
            await self.session.close()
            self.session = None
            self.logger.debug("WebFetcher session closed")

    async def fetch(self, url: str) -> FetchResult:
        """
        Fetch a single URL.

        Args:
            url: The URL to fetch

        Returns:
            FetchResult object containing the response data or error information
        """
        if self.session is None:
            raise RuntimeError("WebFetcher must be started before fetching")

        start_time = time.time()
        self.stats['total_requests'] += 1

        try:
            async with self.session.get(url, allow_redirects=True,
                                        max_redirects=self.max_redirects) as response:
                fetch_time = time.time() - start_time
                headers = dict(response.headers)
                content_type = response.headers.get('content-type', '').lower()

                if not 200 <= response.status < 300:
                    self.stats['failed_requests'] += 1
                    self.logger.warning(f"HTTP {response.status} fetching {url}")
                    return FetchResult(
                        url=url,
                        status_code=response.status,
                        headers=headers,
                        content_type=content_type,
                        error=f"HTTP status {response.status}",
                        error_type='http_status',
                        fetch_time=fetch_time
                    )

                if content_type and not self._is_text_content(content_type):
                    self.stats['failed_requests'] += 1
                    self.logger.debug(f"Skipping non-text content: {url} ({content_type})")
                    return FetchResult(
                        url=url,
                        status_code=response.status,
                        headers=headers,
                        content_type=content_type,
                        error="Non-text content type",
                        error_type='content_type',
                        fetch_time=fetch_time
                    )

                content = await self._read_content_safely(response)
                if content is None:
                    self.stats['failed_requests'] += 1
                    return FetchResult(
                        url=url,
                        status_code=response.status,
                        headers=headers,
                        content_type=content_type,
                        error="Content unreadable or too large",
                        error_type='content',
                        fetch_time=time.time() - start_time
                    )

                self.stats['total_bytes_downloaded'] += len(content)
                self.stats['successful_requests'] += 1

                self.logger.debug(f"Fetched {url}: {response.status} ({len(content)} bytes)")
                return FetchResult(
                    url=url,
                    status_code=response.status,
                    content=content,
                    headers=headers,
                    content_type=content_type,
                    encoding=response.charset,
                    fetch_time=time.time() - start_time
                )

        except asyncio.TimeoutError:
            error_msg = "Request timeout"
            error_type = 'timeout'
            self.logger.warning(f"Timeout fetching {url}")

        except ClientError as e:
            error_msg = f"Client error: {str(e)}"
            error_type = 'client_error'
            self.logger.warning(f"Client error fetching {url}: {e}")

        except Exception as e:
            error_msg = f"Unexpected error: {str(e)}"
            error_type = 'unexpected'
            self.logger.error(f"Unexpected error fetching {url}: {e}", exc_info=True)

        self.stats['failed_requests'] += 1
        return FetchResult(
            url=url,
            status_code=0,
            error=error_msg,
            error_type=error_type,
            fetch_time=time.time() - start_time
        )

    def _is_text_content(self, content_type: str) -> bool:
        """Check if content type is a markup or text document."""
        text_types = [
            'text/html',
            'text/plain',
            'text/xml',
            'application/xml',
            'application/xhtml+xml'
        ]

        return any(text_type in content_type for text_type in text_types)

    async def _read_content_safely(self, response) -> Optional[str]:
        """
        Read response content with a size limit.

        Returns:
            Content string or None if too large
        """
        content_length = response.headers.get('content-length')
        if content_length and content_length.isdigit() and int(content_length) > self.max_content_size:
            self.logger.warning(f"Content too large ({content_length} bytes): {response.url}")
            return None

        # Read content in chunks to respect size limit
        content_bytes = b''
        async for chunk in response.content.iter_chunked(8192):
            content_bytes += chunk
            if len(content_bytes) > self.max_content_size:
                self.logger.warning(f"Content exceeded size limit during reading: {response.url}")
                return None

        encoding = response.charset or 'utf-8'
        try:
            return content_bytes.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            # Markup is scanned for hrefs only, so lossy decoding is acceptable
            return content_bytes.decode('utf-8', errors='replace')

    def get_stats(self) -> Dict[str, int]:
        """Get fetcher statistics."""
        return self.stats.copy()
