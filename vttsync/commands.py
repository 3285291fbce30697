"""
Inbound commands for VTTSync.

The host (a popup, a settings store, a remote control) talks to the
synchronizer through CommandMessage objects. Hosts that persist settings as
key/value pairs and broadcast change notifications can translate those
notifications with ``messages_from_storage_changes``.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from .status import (
    FAILED,
    FETCH_FROM_URL_FAILED,
    FETCHING,
    STOPPED,
    SUCCESS,
    StatusChannel,
    describe_start_error,
)
from .sync import SubtitleSynchronizer

logger = logging.getLogger(__name__)


class Command(Enum):
    START = "start"
    STOP = "stop"
    ADJUST_SETTINGS = "adjust_settings"
    PAUSE = "pause"
    RESUME = "resume"


@dataclass
class CommandMessage:
    """A command and its arguments."""
    command: Command
    payload: Dict[str, Any] = field(default_factory=dict)


# Storage keys used by existing hosts
STATUS_KEY = "status"
PRIMARY_URL_KEY = "subtitleSub1URL"
SECONDARY_URL_KEY = "subtitleSub2URL"
SETTINGS_KEYS = {
    "sizeSub1": "primary_size",
    "sizeSub2": "secondary_size",
    "posSub1": "primary_position",
    "posSub2": "secondary_position",
}


def _new_value(change: Any) -> Any:
    # Change notifications carry {"oldValue": ..., "newValue": ...}; plain values are accepted too
    if isinstance(change, Mapping):
        return change.get("newValue")
    return change


def messages_from_storage_changes(
    changes: Mapping[str, Any],
    stored: Optional[Mapping[str, Any]] = None,
) -> List[CommandMessage]:
    """
    Translate a storage change notification into commands.

    Args:
        changes: Changed keys mapped to their change record or new value
        stored: Current stored values, used to look up the subtitle URLs
            when a start is requested

    Returns:
        Commands in the order they should be handled

    Example:
        >>> messages = messages_from_storage_changes(
        ...     {"status": {"newValue": "start"}},
        ...     stored={"subtitleSub1URL": "https://cdn.example.com/en_1.vtt"},
        ... )
        >>> messages[0].command, messages[0].payload["primary_url"]
        (<Command.START: 'start'>, 'https://cdn.example.com/en_1.vtt')
    """
    stored = stored or {}
    messages = []

    if STATUS_KEY in changes:
        status = _new_value(changes[STATUS_KEY])
        if status == Command.START.value:
            def lookup(key: str) -> Optional[str]:
                return _new_value(changes[key]) if key in changes else stored.get(key)

            messages.append(CommandMessage(Command.START, {
                "primary_url": lookup(PRIMARY_URL_KEY),
                "secondary_url": lookup(SECONDARY_URL_KEY),
            }))
        elif status == Command.STOP.value:
            messages.append(CommandMessage(Command.STOP))
        else:
            logger.debug(f"Ignoring unknown status value: {status}")

    settings = {
        name: _new_value(changes[key]) or 0
        for key, name in SETTINGS_KEYS.items()
        if key in changes
    }
    if settings:
        messages.append(CommandMessage(Command.ADJUST_SETTINGS, settings))

    return messages


class CommandHandler:
    """
    Applies commands to a synchronizer and publishes the fetch status.

    After a start the subtitle status is ``Success`` (and the timestamp
    status ``Fetching`` until the first match) when at least one requested
    track loaded; otherwise both report a failure.
    """

    def __init__(self, synchronizer: SubtitleSynchronizer, status: Optional[StatusChannel] = None):
        self.synchronizer = synchronizer
        self.status = status or synchronizer.status

    async def handle(self, message: CommandMessage) -> bool:
        """
        Handle one command.

        Returns:
            False if a start command failed, True otherwise
        """
        logger.debug(f"Handling command: {message.command.value}")

        if message.command is Command.START:
            return await self.handle_start(message.payload)
        if message.command is Command.STOP:
            self.handle_stop()
        elif message.command is Command.ADJUST_SETTINGS:
            self.synchronizer.adjust_settings(message.payload)
        elif message.command is Command.PAUSE:
            self.synchronizer.pause()
        elif message.command is Command.RESUME:
            self.synchronizer.resume()
        return True

    async def handle_all(self, messages: List[CommandMessage]) -> List[bool]:
        return [await self.handle(message) for message in messages]

    async def handle_start(self, payload: Mapping[str, Any]) -> bool:
        primary_url = payload.get("primary_url")
        secondary_url = payload.get("secondary_url")

        try:
            result = await self.synchronizer.start(primary_url, secondary_url)
        except Exception as e:
            logger.error(f"Error starting subtitle display: {str(e)}")
            self.status.set_subtitle_status(describe_start_error(e))
            self.status.set_timestamp_status(FAILED)
            return False

        if result["cancelled"]:
            return False

        requested = len([url for url in (primary_url, secondary_url) if url])
        if len(result["failed_tracks"]) >= requested:
            self.status.set_subtitle_status(FETCH_FROM_URL_FAILED)
            self.status.set_timestamp_status(FAILED)
            return False

        self.status.set_subtitle_status(SUCCESS)
        self.status.set_timestamp_status(FETCHING)
        return True

    def handle_stop(self) -> None:
        self.synchronizer.stop()
        self.status.set_subtitle_status(STOPPED)
        self.status.set_timestamp_status(STOPPED)
