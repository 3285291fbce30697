"""
Status reporting for VTTSync.

Two coarse values are published for a user-facing panel: the outcome of the
last subtitle fetch and the outcome of the last timestamp match. The string
values are shared with existing panels and must not change.
"""

import logging
from typing import List, Optional, Tuple

from .exceptions import ConfigurationError, SubtitleFetchError

logger = logging.getLogger(__name__)

SUCCESS = "Success"
FETCHING = "Fetching"
TIMESTAMP_NOT_MATCHED = "Timestamp not matched"
STOPPED = "Stopped"
FAILED = "Failed"

EMPTY_URL = "Subtitle URL cannot be empty"
FETCH_FROM_URL_FAILED = "Failed to fetch subtitle from URL"
FETCH_FAILED = "Failed to fetch subtitle"


def describe_start_error(error: Exception) -> str:
    """Map an error raised while starting to the message shown in the panel."""
    if isinstance(error, ConfigurationError):
        return EMPTY_URL
    if isinstance(error, SubtitleFetchError):
        return FETCH_FROM_URL_FAILED
    return FETCH_FAILED


class StatusChannel:
    """
    Receiver for status updates.

    The base implementation only logs; subclasses forward the values to
    wherever the panel reads them from.
    """

    def set_subtitle_status(self, value: str) -> None:
        logger.info(f"Subtitle status: {value}")

    def set_timestamp_status(self, value: str) -> None:
        logger.debug(f"Timestamp status: {value}")


class MemoryStatusChannel(StatusChannel):
    """Keeps the latest values and the full history of updates in memory."""

    def __init__(self):
        self.subtitle_status: Optional[str] = None
        self.timestamp_status: Optional[str] = None
        self.history: List[Tuple[str, str]] = []

    def set_subtitle_status(self, value: str) -> None:
        super().set_subtitle_status(value)
        self.subtitle_status = value
        self.history.append(("subtitle", value))

    def set_timestamp_status(self, value: str) -> None:
        super().set_timestamp_status(value)
        self.timestamp_status = value
        self.history.append(("timestamp", value))
