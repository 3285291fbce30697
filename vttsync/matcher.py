"""
Cue lookup for VTTSync.

Resolves which cue of a track is on screen at a given playback time.
"""

from typing import List, Optional, Sequence

from .models import Cue

DEFAULT_TOLERANCE = 0.1  # seconds


def find_active_cue(cues: Sequence[Cue], current_time: float,
                    tolerance: float = DEFAULT_TOLERANCE) -> Optional[Cue]:
    """
    Find the cue showing at ``current_time``.

    Every cue's interval is widened by ``tolerance`` on both sides to absorb
    sampling jitter. When cues overlap, the first one in track order wins.

    Args:
        cues: Track to search, in any order
        current_time: Playback position in seconds
        tolerance: Seconds added before the start and after the end of each cue

    Returns:
        The first matching Cue, or None

    Example:
        >>> cue = Cue(1.0, 2.0, "Hello", "00:00:01.000", "00:00:02.000")
        >>> find_active_cue([cue], 1.5).text
        'Hello'
        >>> find_active_cue([cue], 3.0) is None
        True
    """
    if not cues:
        return None

    for cue in cues:
        if cue.start_time - tolerance <= current_time <= cue.end_time + tolerance:
            return cue
    return None


def merge_tracks(*tracks: Sequence[Cue]) -> List[Cue]:
    """
    Combine several tracks into one ordered by start time.

    The sort is stable, so cues starting together keep their relative order.
    """
    merged = [cue for track in tracks for cue in track]
    return sorted(merged, key=lambda cue: cue.start_time)
