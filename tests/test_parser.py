from vttsync.models import Cue
from vttsync.parser import is_timestamp_line, parse_vtt, validate_cues, validate_vtt_content

SEGMENT_1 = """WEBVTT

1
00:00:01.000 --> 00:00:02.500 line:90%
Hello
world

2
00:00:03.000 --> 00:00:04.000
Second cue
"""

SEGMENT_2 = """WEBVTT

NOTE this comment is skipped

00:00:05.000 --> 00:00:06.000
Third cue
"""


def test_parse_example_document():
    cues = parse_vtt("WEBVTT\n\n00:00:01.000 --> 00:00:02.000\nHello\n")

    assert len(cues) == 1
    assert cues[0].start_time == 1.0
    assert cues[0].end_time == 2.0
    assert cues[0].text == "Hello"
    assert cues[0].raw_start == "00:00:01.000"
    assert cues[0].raw_end == "00:00:02.000"


def test_parse_multiline_text_and_settings():
    cues = parse_vtt(SEGMENT_1)

    assert [cue.text for cue in cues] == ["Hello\nworld", "Second cue"]
    assert cues[0].end_time == 2.5
    assert cues[0].raw_end == "00:00:02.500"
    assert cues[0].settings == "line:90%"
    assert cues[1].settings == ""


def test_parse_tolerates_crlf():
    cues = parse_vtt("WEBVTT\r\n\r\n00:00:01.000 --> 00:00:02.000\r\nHello\r\nthere\r\n\r\n")

    assert len(cues) == 1
    assert cues[0].text == "Hello\nthere"


def test_parse_drops_empty_and_inverted_cues():
    content = (
        "WEBVTT\n\n"
        "00:00:01.000 --> 00:00:02.000\n\n"
        "00:00:03.000 --> 00:00:03.000\nzero length\n\n"
        "00:00:05.000 --> 00:00:04.000\nbackwards\n\n"
        "00:00:06.000 --> 00:00:07.000\n   \n"
        "00:00:08.000 --> 00:00:09.000\nkept\n"
    )
    cues = parse_vtt(content)

    assert [cue.text for cue in cues] == ["kept"]


def test_parse_keeps_source_order():
    content = (
        "WEBVTT\n\n"
        "00:00:05.000 --> 00:00:06.000\nlater\n\n"
        "00:00:01.000 --> 00:00:02.000\nearlier\n"
    )
    assert [cue.text for cue in parse_vtt(content)] == ["later", "earlier"]


def test_parse_invariants_hold():
    for cue in parse_vtt(SEGMENT_1 + "\n" + SEGMENT_2):
        assert cue.end_time > cue.start_time
        assert cue.text.strip()


def test_parse_garbage_returns_empty():
    assert parse_vtt("") == []
    assert parse_vtt("not a caption file\nat all") == []


def test_parse_never_raises_on_wrong_type():
    assert parse_vtt(None) == []


def test_parse_concatenated_segments_matches_per_segment_parse():
    joined = SEGMENT_1.rstrip("\n") + "\n\n" + SEGMENT_2.rstrip("\n") + "\n"

    assert parse_vtt(joined) == parse_vtt(SEGMENT_1) + parse_vtt(SEGMENT_2)


def test_is_timestamp_line():
    assert is_timestamp_line("00:00:01.000 --> 00:00:02.000")
    assert is_timestamp_line("  100:00:01.000 --> 100:00:02.000 align:start")
    assert not is_timestamp_line("WEBVTT")
    assert not is_timestamp_line("00:01.000 --> 00:02.000")


def test_validate_valid_document():
    result = validate_vtt_content(SEGMENT_1)

    assert result.is_valid
    assert result.has_header
    assert result.timestamp_count == 2
    assert result.text_count >= 2
    assert result.errors == []
    assert result.warnings == []


def test_validate_missing_header_is_warning():
    result = validate_vtt_content("00:00:01.000 --> 00:00:02.000\nHello\n")

    assert result.is_valid
    assert not result.has_header
    assert "Missing WEBVTT header" in result.warnings


def test_validate_without_timestamps_is_invalid():
    result = validate_vtt_content("WEBVTT\n\nJust some text\n")

    assert not result.is_valid
    assert result.timestamp_count == 0
    assert "No timestamp lines found" in result.errors


def test_validate_without_any_text_is_invalid():
    result = validate_vtt_content("00:00:01.000 --> 00:00:02.000\n\n")

    assert not result.is_valid
    assert result.timestamp_count == 1
    assert result.text_count == 0
    assert "No subtitle text found" in result.errors


def test_validate_segment_with_only_empty_cues_is_valid():
    # Header and NOTE lines count as text, so a quiet stretch of a stream
    # does not end the segment sequence
    result = validate_vtt_content("WEBVTT\n\nNOTE silence\n\n00:00:10.000 --> 00:00:11.000\n\n")

    assert result.is_valid
    assert result.timestamp_count == 1
    assert any("doesn't match" in warning for warning in result.warnings)


def test_validate_empty_content():
    result = validate_vtt_content("   ")

    assert not result.is_valid
    assert result.errors == ["Content is empty"]


def test_validate_error_page_is_invalid():
    result = validate_vtt_content("<Error><Code>AccessDenied</Code></Error>")

    assert not result.is_valid


def test_validate_count_mismatch_warns():
    content = "WEBVTT\n\n00:00:01.000 --> 00:00:02.000\n\n00:00:03.000 --> 00:00:04.000\ntext\n"
    result = validate_vtt_content(content)

    assert result.is_valid
    assert any("doesn't match" in warning for warning in result.warnings)


def test_validate_cues():
    good = Cue(0.0, 1.0, "ok", "00:00:00.000", "00:00:01.000")
    bad = Cue(2.0, 1.0, " ", "00:00:02.000", "00:00:01.000")

    assert validate_cues([good]).is_valid
    result = validate_cues([good, bad])
    assert not result.is_valid
    assert result.count == 2
    assert result.errors == ["Cue 1: Start time must be before end time", "Cue 1: Empty text"]
