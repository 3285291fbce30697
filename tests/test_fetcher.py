import asyncio
from unittest import mock

import pytest
import requests

from vttsync.exceptions import SegmentFetchError, SegmentNotFoundError, SubtitleFetchError
from vttsync.fetcher import HTTPSegmentSource, SegmentFetcher, build_segment_url, has_segment_number
from vttsync.models import SyncConfig
from vttsync.parser import parse_vtt

TEMPLATE = "https://cdn.example.com/captions/en_7.vtt"


def segment(n):
    return f"WEBVTT\n\n00:00:{n:02d}.000 --> 00:00:{n:02d}.900\nSegment {n}\n"


class FakeSource:
    """Replays a scripted outcome per URL; each outcome is a string or an exception."""

    def __init__(self, script):
        self.script = {url: list(outcomes) for url, outcomes in script.items()}
        self.requested = []

    async def fetch(self, url):
        self.requested.append(url)
        outcomes = self.script.get(url)
        if not outcomes:
            raise SegmentNotFoundError(url, "HTTP 404: Not Found")
        outcome = outcomes.pop(0) if len(outcomes) > 1 else outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


def url(n):
    return f"https://cdn.example.com/captions/en_{n}.vtt"


def joined(*segments):
    return "\n\n".join(s.rstrip("\n") for s in segments) + "\n"


def test_build_segment_url():
    assert build_segment_url(TEMPLATE, 1) == url(1)
    assert build_segment_url(TEMPLATE, 12) == url(12)


def test_build_segment_url_keeps_query_string():
    template = "https://cdn.example.com/v2/captions/ja_3.vtt?Expires=1700000000&Signature=x1.5"
    assert build_segment_url(template, 4) == (
        "https://cdn.example.com/v2/captions/ja_4.vtt?Expires=1700000000&Signature=x1.5"
    )


def test_build_segment_url_without_number():
    assert build_segment_url("https://cdn.example.com/captions/en.vtt", 3) == "https://cdn.example.com/captions/en.vtt"
    assert not has_segment_number("https://cdn.example.com/captions/en.vtt")
    assert has_segment_number(TEMPLATE)


def test_fetch_all_stops_at_not_found_without_delay():
    source = FakeSource({url(1): [segment(1)], url(2): [segment(2)]})
    sleep = RecordingSleep()
    fetcher = SegmentFetcher(source=source, retry_delay=1.0, sleep=sleep)

    content = asyncio.run(fetcher.fetch_all(TEMPLATE))

    assert content == joined(segment(1), segment(2))
    assert source.requested == [url(1), url(2), url(3)]
    assert sleep.delays == []


def test_fetch_all_concatenation_parses_like_segments():
    source = FakeSource({url(1): [segment(1)], url(2): [segment(2)]})
    fetcher = SegmentFetcher(source=source, sleep=RecordingSleep())

    content = asyncio.run(fetcher.fetch_all(TEMPLATE))

    assert parse_vtt(content) == parse_vtt(segment(1)) + parse_vtt(segment(2))


def test_fetch_all_gives_up_after_max_retries():
    timeout = SegmentFetchError(url(2), "Fetch timeout after 15s")
    source = FakeSource({url(1): [segment(1)], url(2): [timeout]})
    sleep = RecordingSleep()
    fetcher = SegmentFetcher(source=source, max_retries=3, retry_delay=0.5, sleep=sleep)

    content = asyncio.run(fetcher.fetch_all(TEMPLATE))

    assert content == joined(segment(1))
    assert source.requested == [url(1), url(2), url(2), url(2)]
    assert sleep.delays == [0.5, 1.0]


def test_fetch_all_retry_counter_resets_after_success():
    flaky = SegmentFetchError("x", "HTTP 503: Service Unavailable")
    source = FakeSource({
        url(1): [flaky, flaky, segment(1)],
        url(2): [flaky, flaky, segment(2)],
    })
    sleep = RecordingSleep()
    fetcher = SegmentFetcher(source=source, max_retries=3, retry_delay=1.0, sleep=sleep)

    content = asyncio.run(fetcher.fetch_all(TEMPLATE))

    assert content == joined(segment(1), segment(2))
    assert sleep.delays == [1.0, 2.0, 1.0, 2.0]


def test_fetch_all_unexpected_errors_are_retried():
    source = FakeSource({url(1): [RuntimeError("boom"), segment(1)]})
    fetcher = SegmentFetcher(source=source, sleep=RecordingSleep())

    assert asyncio.run(fetcher.fetch_all(TEMPLATE)) == joined(segment(1))


def test_fetch_all_invalid_segment_ends_sequence():
    source = FakeSource({url(1): [segment(1)], url(2): ["<html>Access Denied</html>"], url(3): [segment(3)]})
    fetcher = SegmentFetcher(source=source, sleep=RecordingSleep())

    content = asyncio.run(fetcher.fetch_all(TEMPLATE))

    assert content == joined(segment(1))
    assert url(3) not in source.requested


def test_fetch_all_keeps_going_past_segment_with_empty_cues():
    quiet = "WEBVTT\n\n00:00:02.000 --> 00:00:02.900\n\n"
    source = FakeSource({url(1): [segment(1)], url(2): [quiet], url(3): [segment(3)]})
    fetcher = SegmentFetcher(source=source, sleep=RecordingSleep())

    content = asyncio.run(fetcher.fetch_all(TEMPLATE))

    assert url(4) in source.requested
    assert [cue.text for cue in parse_vtt(content)] == ["Segment 1", "Segment 3"]


def test_fetch_all_first_segment_missing_raises():
    fetcher = SegmentFetcher(source=FakeSource({}), sleep=RecordingSleep())

    with pytest.raises(SubtitleFetchError):
        asyncio.run(fetcher.fetch_all(TEMPLATE))


def test_fetch_all_first_segment_failing_raises_after_retries():
    error = SegmentFetchError(url(1), "connection reset")
    sleep = RecordingSleep()
    fetcher = SegmentFetcher(source=FakeSource({url(1): [error]}), retry_delay=1.0, sleep=sleep)

    with pytest.raises(SubtitleFetchError):
        asyncio.run(fetcher.fetch_all(TEMPLATE))
    assert sleep.delays == [1.0, 2.0]


def test_fetch_all_single_file_track():
    single = "https://cdn.example.com/captions/en.vtt"
    source = FakeSource({single: [segment(1)]})
    fetcher = SegmentFetcher(source=source, sleep=RecordingSleep())

    assert asyncio.run(fetcher.fetch_all(single)) == joined(segment(1))
    assert source.requested == [single]


def test_fetch_all_stops_when_cancelled():
    source = FakeSource({url(1): [segment(1)], url(2): [segment(2)]})
    fetcher = SegmentFetcher(source=source, sleep=RecordingSleep())
    checks = iter([True, False])

    content = asyncio.run(fetcher.fetch_all(TEMPLATE, should_continue=lambda: next(checks)))

    assert content == joined(segment(1))
    assert source.requested == [url(1)]


def test_from_config():
    config = SyncConfig(max_retry_attempts=5, retry_delay=0.25, request_timeout=7.0)
    fetcher = SegmentFetcher.from_config(config)

    assert fetcher.max_retries == 5
    assert fetcher.retry_delay == 0.25
    assert fetcher.source.timeout == 7.0
    assert fetcher.backoff_delay(3) == 1.0


def fake_response(status_code, text="", reason="OK"):
    response = mock.Mock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.text = text
    response.reason = reason
    return response


def test_http_source_returns_body():
    with mock.patch("vttsync.fetcher.requests.get", return_value=fake_response(200, segment(1))) as get:
        assert HTTPSegmentSource(timeout=15).get(url(1)) == segment(1)

    _, kwargs = get.call_args
    assert kwargs["timeout"] == 15
    assert kwargs["headers"]["Cache-Control"] == "no-cache"


def test_http_source_classifies_not_found():
    with mock.patch("vttsync.fetcher.requests.get", return_value=fake_response(404, reason="Not Found")):
        with pytest.raises(SegmentNotFoundError):
            HTTPSegmentSource().get(url(9))


def test_http_source_classifies_no_such_key():
    body = "<Error><Code>NoSuchKey</Code></Error>"
    with mock.patch("vttsync.fetcher.requests.get", return_value=fake_response(403, body, "Forbidden")):
        with pytest.raises(SegmentNotFoundError):
            HTTPSegmentSource().get(url(9))


def test_http_source_server_error_is_retryable():
    with mock.patch("vttsync.fetcher.requests.get", return_value=fake_response(503, reason="Service Unavailable")):
        with pytest.raises(SegmentFetchError):
            HTTPSegmentSource().get(url(1))


def test_http_source_timeout_is_retryable():
    with mock.patch("vttsync.fetcher.requests.get", side_effect=requests.Timeout("read timed out")):
        with pytest.raises(SegmentFetchError, match="timeout"):
            HTTPSegmentSource().get(url(1))


def test_http_source_fetch_runs_in_executor():
    with mock.patch("vttsync.fetcher.requests.get", return_value=fake_response(200, segment(2))):
        assert asyncio.run(HTTPSegmentSource().fetch(url(2))) == segment(2)
