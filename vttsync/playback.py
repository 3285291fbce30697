"""
Playback position sources for VTTSync.

A playback source reports the current media position and notifies
subscribers whenever the position advances, at whatever cadence the host
player uses. Listeners are called without arguments and read
``current_time`` themselves, like a media element's ``timeupdate`` event.
"""

import asyncio
import logging
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class PlaybackSource:
    """Base playback source interface."""

    @property
    def current_time(self) -> Optional[float]:
        """Current position in seconds, or None/NaN when it cannot be read."""
        raise NotImplementedError

    def subscribe(self, listener: Listener) -> None:
        raise NotImplementedError

    def unsubscribe(self, listener: Listener) -> None:
        raise NotImplementedError

    def is_subscribed(self, listener: Listener) -> bool:
        raise NotImplementedError


class SimulatedPlayback(PlaybackSource):
    """
    In-process playback clock.

    Position only moves through ``seek``/``advance`` or while ``play`` is
    running, which makes it usable both for demos and for deterministic
    tests.
    """

    def __init__(self, start_time: float = 0.0, rate: float = 1.0, update_interval: float = 0.25):
        """
        Initialize the simulated player.

        Args:
            start_time: Initial position in seconds
            rate: Playback speed multiplier
            update_interval: Seconds between position notifications while playing
        """
        self._position: Optional[float] = start_time
        self.rate = rate
        self.update_interval = update_interval
        self.playing = False
        self._listeners: List[Listener] = []

    @property
    def current_time(self) -> Optional[float]:
        return self._position

    def subscribe(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def is_subscribed(self, listener: Listener) -> bool:
        return listener in self._listeners

    def seek(self, position: Optional[float]) -> None:
        """Jump to ``position`` and notify listeners. None simulates an unreadable position."""
        self._position = position
        self._notify()

    def advance(self, seconds: float) -> None:
        """Move forward by ``seconds`` of wall time, scaled by the playback rate."""
        self._position = (self._position or 0.0) + seconds * self.rate
        self._notify()

    def _notify(self) -> None:
        # Copy, listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            listener()

    async def play(self, duration: Optional[float] = None) -> None:
        """
        Advance the clock in real time until ``stop`` is called or
        ``duration`` seconds of wall time have elapsed.
        """
        self.playing = True
        elapsed = 0.0
        logger.info(f"Playback started at {self._position or 0.0:.3f}s")
        try:
            while self.playing and (duration is None or elapsed < duration):
                await asyncio.sleep(self.update_interval)
                elapsed += self.update_interval
                self.advance(self.update_interval)
        finally:
            self.playing = False
            logger.info(f"Playback stopped at {self._position or 0.0:.3f}s")

    def stop(self) -> None:
        self.playing = False
