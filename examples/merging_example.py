"""
Track merging example.

Combines cues from two documents into a single track ordered by start time.
"""

from vttsync import merge_tracks, parse_vtt, validate_vtt_content

FIRST = """WEBVTT

00:00:04.000 --> 00:00:06.000
Second line of dialogue

00:00:01.000 --> 00:00:03.000
First line of dialogue
"""

SECOND = """WEBVTT

00:00:02.500 --> 00:00:04.500 line:10%
[door slams]
"""


def main():
    for name, document in (("first", FIRST), ("second", SECOND)):
        validation = validate_vtt_content(document)
        print(f"{name}: valid={validation.is_valid} cues={validation.timestamp_count}")

    merged = merge_tracks(parse_vtt(FIRST), parse_vtt(SECOND))
    for cue in merged:
        print(f"{cue.raw_start} --> {cue.raw_end}  {cue.text}")


if __name__ == "__main__":
    main()
