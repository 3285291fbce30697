"""
Data models for VTTSync.

Defines the core data structures used throughout the package.
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import List, Dict, Any


@dataclass(frozen=True)
class Cue:
    """A single timed caption entry parsed from a VTT document."""
    start_time: float  # seconds
    end_time: float    # seconds
    text: str
    raw_start: str     # HH:MM:SS.mmm as written in the source
    raw_end: str
    settings: str = ""  # layout hints after the end timestamp, e.g. "line:90%"

    def is_valid(self) -> bool:
        return self.start_time >= 0 and self.end_time > self.start_time and bool(self.text.strip())


class TrackSlot(Enum):
    """The two caption lines shown on screen."""
    PRIMARY = "primary"
    SECONDARY = "secondary"


@dataclass
class FetchSession:
    """Progress of one numbered-segment fetch for a single track."""
    template_url: str
    index: int = 1
    retry_count: int = 0
    segments: List[str] = field(default_factory=list)

    @property
    def content(self) -> str:
        # Blank line between segments keeps the last cue of one segment
        # from running into the header of the next.
        return "\n\n".join(segment.rstrip("\r\n") for segment in self.segments) + "\n" if self.segments else ""


@dataclass
class VTTValidation:
    """Well-formedness report for a raw VTT document."""
    is_valid: bool = False
    has_header: bool = False
    has_timestamps: bool = False
    timestamp_count: int = 0
    text_count: int = 0
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


@dataclass
class CueValidation:
    """Validation report for an already parsed track."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    count: int = 0


@dataclass
class OverlaySettings:
    """Font size and vertical position deltas for each caption line (pixels)."""
    primary_size: int = 0
    secondary_size: int = 0
    primary_position: int = 0
    secondary_position: int = 0

    def merged(self, changes: Dict[str, Any]) -> "OverlaySettings":
        """Return a copy with the known keys in ``changes`` applied; falsy values reset to 0."""
        known = {f.name for f in fields(self)}
        values = {name: getattr(self, name) for name in known}
        for key, value in changes.items():
            if key in known:
                values[key] = int(value or 0)
        return OverlaySettings(**values)


@dataclass
class SyncConfig:
    """Configuration for the subtitle synchronizer and its segment fetcher."""
    tolerance: float = 0.1             # seconds added around every cue when matching
    time_update_interval: float = 0.1  # minimum seconds between handled position updates
    max_retry_attempts: int = 3
    retry_delay: float = 1.0           # seconds, doubled after every failed attempt
    request_timeout: float = 15.0
    cleanup_interval: float = 30.0     # seconds between cleanup passes, 0 disables
    user_agent: str = "VTTSync/0.1.0"
