"""
Track storage for VTTSync.

Holds the two loaded tracks, the text pair last sent to the renderer and
the last sampled playback time.
"""

from typing import Dict, List, Optional, Tuple

from .models import Cue, TrackSlot


class TrackStore:
    """Mutable state shared by one synchronizer's load, tick and stop paths."""

    def __init__(self):
        self.tracks: Dict[TrackSlot, List[Cue]] = {slot: [] for slot in TrackSlot}
        self.last_texts: Tuple[str, str] = ("", "")
        self.current_time: Optional[float] = None

    @property
    def primary(self) -> List[Cue]:
        return self.tracks[TrackSlot.PRIMARY]

    @property
    def secondary(self) -> List[Cue]:
        return self.tracks[TrackSlot.SECONDARY]

    def load(self, slot: TrackSlot, cues: List[Cue]) -> None:
        """Replace a track wholesale."""
        self.tracks[slot] = list(cues)

    def has_changed(self, primary_text: str, secondary_text: str) -> bool:
        return (primary_text, secondary_text) != self.last_texts

    def remember(self, primary_text: str, secondary_text: str) -> None:
        self.last_texts = (primary_text, secondary_text)

    def prune_invalid(self) -> int:
        """Drop cues breaking the timing/text invariants. Returns how many were removed."""
        removed = 0
        for slot, cues in self.tracks.items():
            valid = [cue for cue in cues if cue.is_valid()]
            removed += len(cues) - len(valid)
            self.tracks[slot] = valid
        return removed

    def clear(self) -> None:
        for slot in TrackSlot:
            self.tracks[slot] = []
        self.last_texts = ("", "")
        self.current_time = None

    def counts(self) -> Dict[str, int]:
        return {slot.value: len(cues) for slot, cues in self.tracks.items()}
