"""
Dual subtitle playback example.

Runs two caption tracks against a simulated player, driven through the same
commands a host application would send.
"""

import asyncio
import logging

from vttsync import (
    Command,
    CommandHandler,
    CommandMessage,
    ConsoleRenderer,
    MemoryStatusChannel,
    SimulatedPlayback,
    SubtitleSynchronizer,
)


async def main():
    playback = SimulatedPlayback(start_time=0.0, update_interval=0.25)
    status = MemoryStatusChannel()
    sync = SubtitleSynchronizer(playback, ConsoleRenderer(), status=status)
    handler = CommandHandler(sync)

    started = await handler.handle(CommandMessage(Command.START, {
        "primary_url": "https://cdn.example.com/captions/en_1.vtt",
        "secondary_url": "https://cdn.example.com/captions/ja_1.vtt",
    }))
    print(f"Subtitle status: {status.subtitle_status}")
    if not started:
        return

    # Bigger primary line, secondary line moved up
    await handler.handle(CommandMessage(Command.ADJUST_SETTINGS, {"primary_size": 4, "secondary_position": 20}))

    await playback.play(duration=20)

    await handler.handle(CommandMessage(Command.STOP))
    print(f"State: {sync.get_state()}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
