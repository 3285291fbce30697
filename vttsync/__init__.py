"""
VTTSync - Dual WebVTT Caption Synchronization

Loads two independently sourced WebVTT caption tracks and keeps them in step
with a playing media source.

Features:
- Fetch caption tracks split into numbered segments, with retry and backoff
- Parse WebVTT into immutable cues, tolerant of malformed input
- Resolve the active cue of each track for any playback position
- Emit caption changes only when the displayed text actually changes
- Command interface for start/stop/settings messages from a host

Example usage:
    >>> import asyncio
    >>> from vttsync import SubtitleSynchronizer, SimulatedPlayback, ConsoleRenderer
    >>>
    >>> playback = SimulatedPlayback()
    >>> sync = SubtitleSynchronizer(playback, ConsoleRenderer())
    >>>
    >>> async def main():
    ...     await sync.start(
    ...         "https://cdn.example.com/captions/en_1.vtt",
    ...         "https://cdn.example.com/captions/ja_1.vtt",
    ...     )
    ...     await playback.play(duration=30)
    ...     sync.stop()
    >>>
    >>> asyncio.run(main())
"""

import logging

__version__ = "0.1.0"
__author__ = "VTTSync Contributors"
__license__ = "MIT"

# Add NullHandler to prevent "No handler found" warnings
# Users should configure logging in their application if they want to see logs
logging.getLogger(__name__).addHandler(logging.NullHandler())

# Timestamp and text utilities
from .utils import (
    timestamp_to_seconds,
    seconds_to_timestamp,
    clean_subtitle_text,
    Throttle,
)

# Parsing and lookup
from .parser import parse_vtt, is_timestamp_line, validate_vtt_content, validate_cues
from .matcher import find_active_cue, merge_tracks, DEFAULT_TOLERANCE

# Segment fetching
from .fetcher import SegmentFetcher, HTTPSegmentSource, build_segment_url, has_segment_number

# Synchronization
from .store import TrackStore
from .sync import SubtitleSynchronizer, SyncState
from .playback import PlaybackSource, SimulatedPlayback
from .renderer import Renderer, ConsoleRenderer
from .status import StatusChannel, MemoryStatusChannel, describe_start_error
from .commands import Command, CommandMessage, CommandHandler, messages_from_storage_changes

# Data models
from .models import Cue, TrackSlot, FetchSession, VTTValidation, CueValidation, OverlaySettings, SyncConfig

# Exceptions
from .exceptions import (
    VTTSyncError,
    ConfigurationError,
    SegmentError,
    SegmentNotFoundError,
    SegmentFetchError,
    SubtitleFetchError,
)

__all__ = [
    # Version info
    "__version__",
    "__author__",
    "__license__",

    # Utilities
    "timestamp_to_seconds",
    "seconds_to_timestamp",
    "clean_subtitle_text",
    "Throttle",

    # Parsing and lookup
    "parse_vtt",
    "is_timestamp_line",
    "validate_vtt_content",
    "validate_cues",
    "find_active_cue",
    "merge_tracks",
    "DEFAULT_TOLERANCE",

    # Fetching
    "SegmentFetcher",
    "HTTPSegmentSource",
    "build_segment_url",
    "has_segment_number",

    # Synchronization
    "TrackStore",
    "SubtitleSynchronizer",
    "SyncState",
    "PlaybackSource",
    "SimulatedPlayback",
    "Renderer",
    "ConsoleRenderer",
    "StatusChannel",
    "MemoryStatusChannel",
    "describe_start_error",
    "Command",
    "CommandMessage",
    "CommandHandler",
    "messages_from_storage_changes",

    # Models
    "Cue",
    "TrackSlot",
    "FetchSession",
    "VTTValidation",
    "CueValidation",
    "OverlaySettings",
    "SyncConfig",

    # Exceptions
    "VTTSyncError",
    "ConfigurationError",
    "SegmentError",
    "SegmentNotFoundError",
    "SegmentFetchError",
    "SubtitleFetchError",
]
