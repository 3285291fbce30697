"""
Segment fetching for VTTSync.

Caption tracks for this class of source are split into same-shaped VTT files
numbered before the file extension (``subs_1.vtt``, ``subs_2.vtt``, ...).
This module retrieves the numbered segments of one track in order and
concatenates them into a single document, retrying transient failures with
exponential backoff. A "not found" response is the normal end of the
sequence, not an error.
"""

import asyncio
import logging
import re
import time
from typing import Awaitable, Callable, Optional, Tuple

import requests

from .exceptions import SegmentFetchError, SegmentNotFoundError, SubtitleFetchError
from .models import FetchSession, SyncConfig
from .parser import validate_vtt_content

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY = 1.0
DEFAULT_USER_AGENT = "VTTSync/0.1.0"

# Integer right before the extension at the end of the URL path
_SEGMENT_NUMBER_PATTERN = re.compile(r'(\d+)(\.[A-Za-z0-9]+)$')


def _split_path(url: str) -> Tuple[str, str]:
    """Split a URL into its path part and its query/fragment suffix."""
    cut = len(url)
    for marker in ('?', '#'):
        position = url.find(marker)
        if position != -1:
            cut = min(cut, position)
    return url[:cut], url[cut:]


def has_segment_number(template_url: str) -> bool:
    """Check if a URL ends with a numbered file name such as ``subs_3.vtt``."""
    path, _ = _split_path(template_url)
    return bool(_SEGMENT_NUMBER_PATTERN.search(path))


def build_segment_url(template_url: str, index: int) -> str:
    """
    Build the URL of segment ``index`` from any segment URL of the track.

    Args:
        template_url: URL of one segment of the track
        index: Segment number to substitute

    Returns:
        URL with the trailing segment number replaced; unchanged if the URL
        has no segment number

    Example:
        >>> build_segment_url("https://cdn.example.com/en/subs_7.vtt?sig=abc", 2)
        'https://cdn.example.com/en/subs_2.vtt?sig=abc'
    """
    path, suffix = _split_path(template_url)
    match = _SEGMENT_NUMBER_PATTERN.search(path)
    if not match:
        return template_url
    return f"{path[:match.start(1)]}{index}{match.group(2)}{suffix}"


class HTTPSegmentSource:
    """
    Retrieves segments over HTTP(S) with requests.

    Requests are blocking, so ``fetch`` runs them in the event loop's
    default executor to keep the loop responsive.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        verify_ssl: bool = True,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        """
        Initialize the HTTP segment source.

        Args:
            timeout: Request timeout in seconds (default: 15)
            verify_ssl: Whether to verify SSL certificates
            user_agent: User-Agent header sent with every request
        """
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.headers = {
            'User-Agent': user_agent,
            'Cache-Control': 'no-cache',
            'Pragma': 'no-cache',
        }

    def get(self, url: str) -> str:
        """
        Download one segment.

        Raises:
            SegmentNotFoundError: HTTP 404/410 or an S3 style ``NoSuchKey`` error
            SegmentFetchError: Timeout, connection error or any other bad status
        """
        try:
            response = requests.get(url, timeout=self.timeout, verify=self.verify_ssl, headers=self.headers)
        except requests.Timeout as e:
            raise SegmentFetchError(url, f"Fetch timeout after {self.timeout}s") from e
        except requests.RequestException as e:
            raise SegmentFetchError(url, f"Request failed: {str(e)}") from e

        if response.status_code in (404, 410):
            raise SegmentNotFoundError(url, f"HTTP {response.status_code}: {response.reason}")

        if not response.ok:
            if 'NoSuchKey' in (response.text or ''):
                raise SegmentNotFoundError(url, f"HTTP {response.status_code}: NoSuchKey")
            raise SegmentFetchError(url, f"HTTP {response.status_code}: {response.reason}")

        return response.text

    async def fetch(self, url: str) -> str:
        """Download one segment without blocking the event loop."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.get, url)


class SegmentFetcher:
    """
    Assembles a complete track document from numbered segments.

    Starting at segment 1, segments are fetched one after another until a
    segment is missing, a segment fails validation, or one segment keeps
    failing for ``max_retries`` attempts. Whatever was collected up to that
    point is returned; only a track with no usable segment at all is an
    error.
    """

    def __init__(
        self,
        source=None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize the segment fetcher.

        Args:
            source: Object with an async ``fetch(url) -> str`` method
                (default: HTTPSegmentSource)
            max_retries: Attempts per segment before giving up on the sequence
            retry_delay: Delay in seconds after the first failure, doubled
                after each further failure of the same segment
            sleep: Coroutine used to wait between attempts
        """
        self.source = source if source is not None else HTTPSegmentSource()
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.sleep = sleep

    @classmethod
    def from_config(cls, config: SyncConfig, source=None) -> "SegmentFetcher":
        """Create a fetcher (and, unless given, an HTTP source) from a SyncConfig."""
        if source is None:
            source = HTTPSegmentSource(timeout=config.request_timeout, user_agent=config.user_agent)
        return cls(
            source=source,
            max_retries=config.max_retry_attempts,
            retry_delay=config.retry_delay,
        )

    def backoff_delay(self, attempt: int) -> float:
        """Delay before retrying after the ``attempt``-th consecutive failure."""
        return self.retry_delay * 2 ** (attempt - 1)

    async def fetch_all(
        self,
        template_url: str,
        should_continue: Optional[Callable[[], bool]] = None,
    ) -> str:
        """
        Fetch and concatenate every segment of a track.

        Args:
            template_url: URL of any segment of the track
            should_continue: Optional callable checked before every request;
                returning False ends the session with what was collected

        Returns:
            The valid segments joined by blank lines

        Raises:
            SubtitleFetchError: If no valid segment was retrieved
        """
        session = FetchSession(template_url=template_url)
        numbered = has_segment_number(template_url)
        started = time.monotonic()

        logger.info(f"Starting segment fetch from: {template_url}")

        while should_continue is None or should_continue():
            url = build_segment_url(template_url, session.index)

            try:
                logger.debug(f"Fetching segment {session.index}: {url}")
                text = await self.source.fetch(url)
            except SegmentNotFoundError:
                logger.info(f"Segment {session.index} not found - end of segments")
                break
            except Exception as e:
                session.retry_count += 1
                logger.warning(
                    f"Error fetching segment {session.index} "
                    f"(attempt {session.retry_count}/{self.max_retries}): {str(e)}"
                )

                if session.retry_count >= self.max_retries:
                    logger.warning(f"Max retries reached for segment {session.index}, stopping")
                    break

                delay = self.backoff_delay(session.retry_count)
                logger.info(f"Retrying segment {session.index} in {delay:.1f}s...")
                await self.sleep(delay)
                continue

            validation = validate_vtt_content(text)
            if not validation.is_valid:
                logger.warning(f"Invalid VTT content in segment {session.index}: {', '.join(validation.errors)}")
                break

            session.segments.append(text)
            session.retry_count = 0
            logger.debug(
                f"Fetched segment {session.index} "
                f"({len(text)} chars, {validation.timestamp_count} timestamps)"
            )

            if not numbered:
                break
            session.index += 1

        content = session.content
        if not content.strip():
            raise SubtitleFetchError(f"No valid VTT content found at {template_url}")

        elapsed = time.monotonic() - started
        logger.info(
            f"Segment fetch completed in {elapsed:.2f}s - "
            f"{len(session.segments)} segments, {len(content)} total chars"
        )
        return content
