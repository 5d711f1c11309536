"""
URL validation, normalization and reachability checks.
"""

import asyncio
import ipaddress
import logging
import re
import time
from typing import Dict, List, Optional, Tuple
from urllib.parse import urlparse

import aiohttp
from aiohttp import ClientSession, ClientTimeout, ClientError

from ..exceptions import InvalidUrlError
from ..utils.config import DEFAULT_USER_AGENT


_SCHEME_PATTERN = re.compile(r'^[a-zA-Z][a-zA-Z0-9+.-]*://')
_DOMAIN_CHARS_PATTERN = re.compile(r'^[a-zA-Z0-9.-]+$')

ALLOWED_SCHEMES = ('http', 'https')
MAX_DOMAIN_LENGTH = 253
MAX_LABEL_LENGTH = 63


def parse_robots(content: str, user_agent: str = '*') -> List[str]:
    """
    Collect Disallow prefixes that apply to a user agent.

    Minimal line-oriented parse: the last seen User-agent value decides whether
    following Disallow lines apply (wildcard or exact agent match). Allow lines
    and wildcards inside paths are not interpreted.

    Args:
        content: Raw robots.txt text
        user_agent: Agent name to evaluate rules for

    Returns:
        Disallowed path prefixes, in file order
    """
    current_agent = None
    disallowed = []

    for raw_line in content.splitlines():
        line = raw_line.strip()

        if line.startswith('User-agent:'):
            current_agent = line[len('User-agent:'):].strip()
        elif line.startswith('Disallow:') and current_agent in ('*', user_agent):
            path = line[len('Disallow:'):].strip()
            if path:
                disallowed.append(path)

    return disallowed


def is_path_allowed(path: str, disallowed: List[str]) -> bool:
    """Check a URL path against disallowed prefixes."""
    path = path or '/'
    return not any(path.startswith(prefix) for prefix in disallowed)


class UrlValidator:
    """
    Validates and normalizes URLs, and probes them over HTTP.

    is_valid_url() and normalize_url() are pure. is_url_accessible() and
    is_allowed_by_robots() need an open session: use the validator as an
    async context manager or call start()/close().
    """

    def __init__(self, user_agent: str = DEFAULT_USER_AGENT, timeout: float = 10,
                 max_redirects: int = 3):
        self.user_agent = user_agent
        self.timeout = timeout
        self.max_redirects = max_redirects
        self.logger = logging.getLogger(__name__)

        self.session: Optional[ClientSession] = None

        # robots.txt rules per robots URL and agent
        self.robots_cache: Dict[Tuple[str, str], List[str]] = {}
        self.robots_check_time: Dict[Tuple[str, str], float] = {}
        self.cache_ttl = 3600  # 1 hour cache TTL

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def start(self):
        """Open the HTTP session used for probes."""
        if self.session is None:
            self.session = aiohttp.ClientSession(
                timeout=ClientTimeout(total=self.timeout),
                headers={'User-Agent': self.user_agent}
            )

    async def close(self):
        """Close the HTTP session."""
        if self.session:
            await self.session.close()
            self.session = None

    def _require_session(self) -> ClientSession:
        if self.session is None:
            raise RuntimeError("UrlValidator must be started before network checks")
        return self.session

    def is_valid_url(self, url: str) -> bool:
        """
        Check that a URL is an absolute http(s) URL with a valid host.

        The host must be an IP literal or a domain name with at least two
        labels, each 1-63 characters of letters, digits or hyphens and not
        starting or ending with a hyphen.
        """
        if not url or not url.strip():
            return False

        # A well-formed URL carries no whitespace at all
        if any(char.isspace() for char in url):
            return False

        try:
            parsed = urlparse(url)
            # Accessing port validates it
            parsed.port
        except ValueError:
            return False

        if parsed.scheme.lower() not in ALLOWED_SCHEMES:
            return False

        host = parsed.hostname
        if not host:
            return False

        return self._is_valid_host(host)

    def _is_valid_host(self, host: str) -> bool:
        """Check if host is an IP address or a valid domain name."""
        try:
            ipaddress.ip_address(host)
            return True
        except ValueError:
            pass

        return self._is_valid_domain(host)

    def _is_valid_domain(self, domain: str) -> bool:
        """Check domain characters, total length and label rules."""
        if not _DOMAIN_CHARS_PATTERN.match(domain):
            return False

        if len(domain) > MAX_DOMAIN_LENGTH:
            return False

        labels = domain.split('.')
        for label in labels:
            if not 1 <= len(label) <= MAX_LABEL_LENGTH:
                return False
            if label.startswith('-') or label.endswith('-'):
                return False

        # A top-level domain is required
        return len(labels) >= 2

    def normalize_url(self, url: str) -> str:
        """
        Clean up a user-supplied URL.

        Adds https:// when no scheme is given, removes trailing slashes from
        non-root paths and drops the default ports 80 and 443. Query string
        and fragment are kept.

        Raises:
            InvalidUrlError: If the port cannot be parsed
        """
        url = url.strip()

        if not _SCHEME_PATTERN.match(url):
            url = 'https://' + url

        parsed = urlparse(url)
        try:
            port = parsed.port
        except ValueError as e:
            raise InvalidUrlError(url, f"Invalid port ({e})") from e

        path = parsed.path
        if path != '/' and path.endswith('/'):
            path = path.rstrip('/')

        host = parsed.hostname or ''
        if ':' in host:
            host = f'[{host}]'

        normalized = f"{parsed.scheme}://{host}"

        if port is not None and port not in (80, 443):
            normalized += f":{port}"

        normalized += path

        if parsed.query:
            normalized += f"?{parsed.query}"

        if parsed.fragment:
            normalized += f"#{parsed.fragment}"

        return normalized

    async def is_url_accessible(self, url: str, timeout: Optional[float] = None) -> bool:
        """
        Probe a URL with a HEAD request.

        Args:
            url: URL to probe
            timeout: Request timeout in seconds (defaults to the validator's)

        Returns:
            True if the final status code is 2xx or 3xx
        """
        if not self.is_valid_url(url):
            return False

        session = self._require_session()
        request_timeout = ClientTimeout(total=timeout if timeout is not None else self.timeout)

        try:
            async with session.head(url, allow_redirects=True,
                                    max_redirects=self.max_redirects,
                                    timeout=request_timeout) as response:
                self.logger.debug(f"HEAD {url}: {response.status}")
                return 200 <= response.status < 400

        except asyncio.TimeoutError:
            self.logger.warning(f"Timeout probing {url}")
        except ClientError as e:
            self.logger.warning(f"Client error probing {url}: {e}")

        return False

    async def is_allowed_by_robots(self, url: str, user_agent: str = '*') -> bool:
        """
        Check a URL against the host's robots.txt.

        Fails open: when robots.txt cannot be retrieved the URL is allowed.
        """
        parsed = urlparse(url)
        robots_url = f"{parsed.scheme}://{parsed.netloc}/robots.txt"
        cache_key = (robots_url, user_agent)
        current_time = time.time()

        if (cache_key in self.robots_cache and
                current_time - self.robots_check_time[cache_key] < self.cache_ttl):
            return is_path_allowed(parsed.path, self.robots_cache[cache_key])

        session = self._require_session()

        try:
            async with session.get(robots_url, max_redirects=self.max_redirects) as response:
                if not 200 <= response.status < 300:
                    self.logger.info(f"No robots.txt at {robots_url} ({response.status}), allowing")
                    return True
                content = await response.text()

        except asyncio.TimeoutError:
            self.logger.warning(f"Timeout fetching {robots_url}, allowing")
            return True
        except (ClientError, UnicodeDecodeError) as e:
            self.logger.warning(f"Could not fetch {robots_url}: {e}, allowing")
            return True

        disallowed = parse_robots(content, user_agent)
        self.robots_cache[cache_key] = disallowed
        self.robots_check_time[cache_key] = current_time

        allowed = is_path_allowed(parsed.path, disallowed)
        if not allowed:
            self.logger.info(f"robots.txt disallows {url} for agent {user_agent!r}")
        return allowed
