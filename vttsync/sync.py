"""
Subtitle synchronization for VTTSync.

The synchronizer loads two caption tracks, follows a playback source and
pushes the active caption text to a renderer. Position updates are
throttled, and the renderer is only called when the resolved text pair
actually changes, so renderer work follows caption transitions rather than
the player's update rate.

State machine:
    IDLE   --start()-->  ACTIVE
    ACTIVE --stop()-->   IDLE
    ACTIVE --pause()/resume()--> ACTIVE (sampler detached/reattached, tracks kept)
"""

import asyncio
import logging
import math
import time
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from .exceptions import ConfigurationError
from .fetcher import SegmentFetcher
from .matcher import find_active_cue
from .models import Cue, OverlaySettings, SyncConfig, TrackSlot
from .parser import parse_vtt, validate_cues
from .playback import PlaybackSource
from .renderer import Renderer
from .status import SUCCESS, TIMESTAMP_NOT_MATCHED, StatusChannel
from .store import TrackStore
from .utils import Throttle

logger = logging.getLogger(__name__)


class SyncState(Enum):
    IDLE = "idle"
    ACTIVE = "active"


class SubtitleSynchronizer:
    """
    Keeps two caption lines in step with a playback source.

    All state lives in one TrackStore owned by the instance. Methods are
    meant to be called from a single event loop; nothing here is locked.
    """

    def __init__(
        self,
        playback: PlaybackSource,
        renderer: Renderer,
        status: Optional[StatusChannel] = None,
        config: Optional[SyncConfig] = None,
        fetcher: Optional[SegmentFetcher] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the synchronizer.

        Args:
            playback: Source of the current playback position
            renderer: Receives caption text and overlay settings
            status: Receives fetch and match status values (default: log only)
            config: Tolerance, sampling rate, retry and cleanup settings
            fetcher: Segment fetcher (default: HTTP fetcher built from config)
            clock: Monotonic clock used to throttle position updates
        """
        self.config = config or SyncConfig()
        self.playback = playback
        self.renderer = renderer
        self.status = status or StatusChannel()
        self.fetcher = fetcher or SegmentFetcher.from_config(self.config)
        self.store = TrackStore()
        self.settings = OverlaySettings()
        self.state = SyncState.IDLE
        self.paused = False
        self._clock = clock
        self._generation = 0
        self._sampler: Optional[Throttle] = None
        self._cleanup_task: Optional[asyncio.Task] = None

    @property
    def is_active(self) -> bool:
        return self.state is SyncState.ACTIVE

    async def start(self, primary_url: Optional[str] = None,
                    secondary_url: Optional[str] = None) -> Dict[str, Any]:
        """
        Load both tracks and start following playback.

        Each track is fetched and parsed on its own; a track that cannot be
        fetched is loaded empty and reported in ``failed_tracks`` while the
        other track works normally. Starting an active synchronizer stops
        it first.

        Args:
            primary_url: URL of any segment of the first caption track
            secondary_url: URL of any segment of the second caption track

        Returns:
            Dictionary with primary_cues, secondary_cues, failed_tracks and
            cancelled (True if stop() or another start() ran while loading)

        Raises:
            ConfigurationError: If neither URL is given
        """
        if not primary_url and not secondary_url:
            raise ConfigurationError("No subtitle URLs provided")

        if self.is_active:
            logger.info("Synchronizer already active, restarting")
            self.stop()

        self._generation += 1
        generation = self._generation

        def still_current() -> bool:
            return generation == self._generation

        logger.info("Starting subtitle display")

        results = await asyncio.gather(
            self._load_track(TrackSlot.PRIMARY, primary_url, still_current),
            self._load_track(TrackSlot.SECONDARY, secondary_url, still_current),
        )

        if not still_current():
            logger.info("Synchronizer was stopped while loading, discarding fetched tracks")
            return {"primary_cues": 0, "secondary_cues": 0, "failed_tracks": [], "cancelled": True}

        failed_tracks = []
        for slot, cues in results:
            if cues is None:
                failed_tracks.append(slot.value)
                cues = []
            self.store.load(slot, cues)
            self._log_validation(slot, cues)

        self._attach()
        self.state = SyncState.ACTIVE
        self.paused = False
        self._start_cleanup()

        counts = self.store.counts()
        logger.info(
            f"Subtitle display started - primary: {counts['primary']} cues, "
            f"secondary: {counts['secondary']} cues"
        )
        return {
            "primary_cues": counts["primary"],
            "secondary_cues": counts["secondary"],
            "failed_tracks": failed_tracks,
            "cancelled": False,
        }

    async def _load_track(
        self,
        slot: TrackSlot,
        url: Optional[str],
        still_current: Callable[[], bool],
    ) -> Tuple[TrackSlot, Optional[List[Cue]]]:
        """Fetch and parse one track. Returns None as the cue list on failure."""
        if not url:
            return slot, []

        try:
            content = await self.fetcher.fetch_all(url, should_continue=still_current)
        except Exception as e:
            if still_current():
                logger.error(f"Failed to load {slot.value} track: {str(e)}")
            else:
                logger.debug(f"Abandoned {slot.value} track load: {str(e)}")
            return slot, None

        cues = parse_vtt(content)
        logger.info(f"Loaded {len(cues)} {slot.value} entries")
        return slot, cues

    def _log_validation(self, slot: TrackSlot, cues: List[Cue]) -> None:
        validation = validate_cues(cues)
        if not validation.is_valid:
            logger.warning(f"{slot.value} track validation errors: {', '.join(validation.errors)}")

    def stop(self) -> None:
        """
        Stop following playback and forget both tracks.

        Loads still in flight are discarded when they complete. Calling stop
        on an idle synchronizer does nothing.
        """
        self._generation += 1

        if not self.is_active:
            return

        logger.info("Stopping subtitle display")

        self._detach()
        self._sampler = None
        if self._cleanup_task is not None:
            self._cleanup_task.cancel()
            self._cleanup_task = None

        self.store.clear()
        self.state = SyncState.IDLE
        self.paused = False

        try:
            self.renderer.update_text("", "")
        except Exception as e:
            logger.error(f"Error hiding subtitles: {str(e)}")

        logger.info("Subtitle display stopped")

    def tick(self, current_time: Optional[float] = None) -> bool:
        """
        Resolve and, if changed, emit the caption text for one position.

        Args:
            current_time: Position in seconds (default: read from the playback source)

        Returns:
            True if the renderer was updated
        """
        if not self.is_active:
            return False

        try:
            if current_time is None:
                current_time = self.playback.current_time

            if current_time is None or math.isnan(current_time):
                logger.debug("Unreadable playback position, skipping update")
                return False

            self.store.current_time = current_time

            tolerance = self.config.tolerance
            primary_match = find_active_cue(self.store.primary, current_time, tolerance)
            secondary_match = find_active_cue(self.store.secondary, current_time, tolerance)

            primary_text = primary_match.text if primary_match else ""
            secondary_text = secondary_match.text if secondary_match else ""

            if not self.store.has_changed(primary_text, secondary_text):
                return False

            self.renderer.update_text(primary_text, secondary_text)
            self.store.remember(primary_text, secondary_text)
            self.status.set_timestamp_status(SUCCESS if primary_match or secondary_match else TIMESTAMP_NOT_MATCHED)
            return True

        except Exception as e:
            logger.error(f"Error handling playback time update: {str(e)}")
            return False

    def _on_time_update(self) -> None:
        self.tick()

    def _attach(self) -> None:
        if self._sampler is None:
            self._sampler = Throttle(self._on_time_update, self.config.time_update_interval, clock=self._clock)
        self.playback.subscribe(self._sampler)

    def _detach(self) -> None:
        if self._sampler is not None:
            self._sampler.cancel()
            self.playback.unsubscribe(self._sampler)

    def pause(self) -> None:
        """Stop reacting to playback updates (page hidden), keeping the tracks."""
        if self.is_active and not self.paused:
            self._detach()
            self.paused = True
            logger.info("Subtitle operations paused")

    def resume(self) -> None:
        """Reattach to playback updates after pause(); tracks are not re-fetched."""
        if self.is_active and self.paused:
            self._sampler.reset()
            self._attach()
            self.paused = False
            logger.info("Subtitle operations resumed")

    def adjust_settings(self, changes: Dict[str, Any]) -> OverlaySettings:
        """
        Apply overlay size/position changes and pass them to the renderer.

        Args:
            changes: Any of primary_size, secondary_size, primary_position,
                secondary_position; unknown keys are ignored

        Returns:
            The updated settings
        """
        self.settings = self.settings.merged(changes)
        self.renderer.update_settings(self.settings)
        return self.settings

    def perform_cleanup(self) -> None:
        """Drop invalid cues and reattach to the playback source if the subscription was lost."""
        removed = self.store.prune_invalid()
        if removed:
            logger.warning(f"Removed {removed} invalid cues during cleanup")

        if self.is_active and not self.paused and self._sampler is not None:
            if not self.playback.is_subscribed(self._sampler):
                logger.warning("Playback subscription lost, reconnecting")
                self._attach()

        logger.debug("Cleanup completed")

    def _start_cleanup(self) -> None:
        if self.config.cleanup_interval > 0:
            self._cleanup_task = asyncio.ensure_future(self._cleanup_loop())

    async def _cleanup_loop(self) -> None:
        while True:
            await asyncio.sleep(self.config.cleanup_interval)
            if self.is_active:
                self.perform_cleanup()

    def get_state(self) -> Dict[str, Any]:
        """Snapshot of the synchronizer for diagnostics."""
        primary_text, secondary_text = self.store.last_texts
        return {
            "is_active": self.is_active,
            "is_paused": self.paused,
            "subtitle_counts": self.store.counts(),
            "current_time": self.store.current_time,
            "last_texts": {
                "primary": primary_text,
                "secondary": secondary_text,
            },
        }
