"""
Basic VTTSync usage example.

Demonstrates fetching a segmented caption track and looking up cues.
"""

import asyncio
import logging

from vttsync import SegmentFetcher, find_active_cue, parse_vtt, seconds_to_timestamp


async def main():
    fetcher = SegmentFetcher()

    # Fetch all segments of the track
    print("Fetching caption segments...")
    content = await fetcher.fetch_all("https://cdn.example.com/captions/en_1.vtt")

    # Parse into cues
    cues = parse_vtt(content)
    print(f"Parsed {len(cues)} cues")

    for position in (1.0, 10.0, 60.0):
        cue = find_active_cue(cues, position)
        text = cue.text if cue else "(nothing)"
        print(f"{seconds_to_timestamp(position)}: {text}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
