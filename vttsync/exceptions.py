"""
Exception types for VTTSync.

Segment retrieval failures are split into "not found" (the expected end of a
numbered segment sequence) and every other failure (retryable).
"""


class VTTSyncError(Exception):
    """Base class for all VTTSync errors."""


class ConfigurationError(VTTSyncError):
    """Raised when the synchronizer is started without any subtitle URL."""


class SegmentError(VTTSyncError):
    """Base class for failures retrieving a single segment."""

    def __init__(self, url: str, message: str):
        super().__init__(f"{message} ({url})")
        self.url = url


class SegmentNotFoundError(SegmentError):
    """The segment does not exist; marks the end of the sequence."""


class SegmentFetchError(SegmentError):
    """Network error, timeout or unexpected status; the segment may be retried."""


class SubtitleFetchError(VTTSyncError):
    """No usable segment could be retrieved for a track."""
