"""
Shared utility functions for VTTSync.

Provides timestamp conversion, caption text normalization and the rate
limiter used to sample playback position.
"""

import asyncio
import re
import time
from typing import Any, Callable, Dict, Optional, Tuple

# Any number of hour digits, as long streams can run past 99 hours
_TIMESTAMP_PATTERN = re.compile(r'(\d+):(\d+):(\d+\.\d+)')


def timestamp_to_seconds(timestamp: str) -> float:
    """
    Convert HH:MM:SS.mmm format to seconds.

    Malformed input yields 0.0 instead of raising, so callers cannot tell a
    bad timestamp from a real zero.

    Args:
        timestamp: Timestamp string in HH:MM:SS.mmm format

    Returns:
        Time in seconds as float

    Example:
        >>> timestamp_to_seconds("00:01:30.500")
        90.5
        >>> timestamp_to_seconds("garbage")
        0.0
    """
    if not isinstance(timestamp, str):
        return 0.0
    match = _TIMESTAMP_PATTERN.search(timestamp)
    if not match:
        return 0.0
    hours, minutes, seconds = match.groups()
    return int(hours) * 3600 + int(minutes) * 60 + float(seconds)


def seconds_to_timestamp(seconds: float) -> str:
    """
    Convert seconds to HH:MM:SS.mmm format.

    Args:
        seconds: Time in seconds as float

    Returns:
        Timestamp string in HH:MM:SS.mmm format

    Example:
        >>> seconds_to_timestamp(90.5)
        '00:01:30.500'
    """
    total_ms = int(round(max(seconds, 0.0) * 1000))
    hours, remainder = divmod(total_ms, 3_600_000)
    minutes, remainder = divmod(remainder, 60_000)
    secs, milliseconds = divmod(remainder, 1000)

    return f"{hours:02d}:{minutes:02d}:{secs:02d}.{milliseconds:03d}"


def clean_subtitle_text(text: str) -> str:
    """Normalize line endings, collapse repeated newlines and trim."""
    text = text.replace('\r\n', '\n').replace('\r', '\n')
    return re.sub(r'\n+', '\n', text).strip()


class Throttle:
    """
    Rate limiter with a trailing call.

    The first call runs immediately. Calls arriving within ``interval``
    seconds of the last run are coalesced: only the latest one runs, once
    the interval has elapsed. The trailing call needs a running event loop;
    without one, calls inside the interval are dropped.
    """

    def __init__(self, func: Callable[..., Any], interval: float,
                 clock: Callable[[], float] = time.monotonic):
        self.func = func
        self.interval = interval
        self.clock = clock
        self._last_ran: Optional[float] = None
        self._pending: Optional[asyncio.TimerHandle] = None

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        now = self.clock()
        if self._last_ran is None or now - self._last_ran >= self.interval:
            self.cancel()
            self._last_ran = now
            return self.func(*args, **kwargs)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return None

        self.cancel()
        remaining = self.interval - (now - self._last_ran)
        self._pending = loop.call_later(remaining, self._run_trailing, args, kwargs)
        return None

    def _run_trailing(self, args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> None:
        self._pending = None
        self._last_ran = self.clock()
        self.func(*args, **kwargs)

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def cancel(self) -> None:
        """Drop the scheduled trailing call, if any."""
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def reset(self) -> None:
        """Forget the last call so the next one runs immediately."""
        self.cancel()
        self._last_ran = None
