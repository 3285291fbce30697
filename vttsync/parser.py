"""
VTT parsing and validation for VTTSync.

Turns a complete WebVTT document into an ordered list of cues and classifies
raw documents as usable or not before they are added to a track.
"""

import logging
import re
from typing import List

from .models import Cue, CueValidation, VTTValidation
from .utils import clean_subtitle_text, timestamp_to_seconds

logger = logging.getLogger(__name__)

# Pre-compiled pattern for cue timing lines; anything after the end
# timestamp is a cue setting (line:, position:, align:, ...)
_CUE_HEADER_PATTERN = re.compile(
    r'^(\d{2,}:\d{2}:\d{2}\.\d{3}) --> (\d{2,}:\d{2}:\d{2}\.\d{3})(?:[ \t]+(.*))?'
)


def is_timestamp_line(line: str) -> bool:
    """
    Check if a line is a cue timing line.

    Args:
        line: Line to check (leading/trailing whitespace is ignored)

    Returns:
        True if the line starts with "HH:MM:SS.mmm --> HH:MM:SS.mmm"

    Example:
        >>> is_timestamp_line("00:00:01.000 --> 00:00:02.000 line:90%")
        True
        >>> is_timestamp_line("WEBVTT")
        False
    """
    return bool(_CUE_HEADER_PATTERN.match(line.strip()))


def _split_lines(content: str) -> List[str]:
    return [line.rstrip('\r') for line in content.split('\n')]


def parse_vtt(vtt_content: str) -> List[Cue]:
    """
    Parse VTT content into cues, in source order.

    Lines that are neither cue timing lines nor part of a cue's text block
    (the WEBVTT header, cue identifiers, NOTE blocks) are skipped. Cues with
    empty text or a non-positive duration are dropped.

    Parsing never raises: an unexpected failure is logged and an empty
    list is returned so one broken track cannot take down the other.

    Args:
        vtt_content: VTT file content as string

    Returns:
        List of Cue objects

    Example:
        >>> cues = parse_vtt("WEBVTT\\n\\n00:00:01.000 --> 00:00:02.000\\nHello\\n")
        >>> cues[0].start_time, cues[0].end_time, cues[0].text
        (1.0, 2.0, 'Hello')
    """
    try:
        lines = _split_lines(vtt_content)
        cues = []
        i = 0

        while i < len(lines):
            match = _CUE_HEADER_PATTERN.match(lines[i].strip())
            i += 1
            if not match:
                continue

            raw_start, raw_end, settings = match.groups()

            # Text block runs until the first blank line
            text_lines = []
            while i < len(lines) and lines[i].strip():
                text_lines.append(lines[i])
                i += 1

            text = clean_subtitle_text('\n'.join(text_lines))
            if not text:
                continue

            start_time = timestamp_to_seconds(raw_start)
            end_time = timestamp_to_seconds(raw_end)
            if end_time <= start_time:
                logger.debug(f"Dropping cue with non-positive duration: {raw_start} --> {raw_end}")
                continue

            cues.append(Cue(
                start_time=start_time,
                end_time=end_time,
                text=text,
                raw_start=raw_start,
                raw_end=raw_end,
                settings=(settings or '').strip(),
            ))

        logger.debug(f"Parsed {len(cues)} cues from VTT")
        return cues

    except Exception as e:
        logger.error(f"Error parsing VTT: {str(e)}")
        return []


def validate_vtt_content(content: str) -> VTTValidation:
    """
    Classify a raw VTT document without parsing it into cues.

    A text block is any run of non-blank lines that are not cue timing
    lines, so the WEBVTT line and NOTE blocks count too; a segment whose
    cues are all empty is still valid. The document is valid when it has
    at least one timing line and at least one text block. The count
    mismatch warning only looks at text directly after a timing line.
    A missing WEBVTT header is only a warning, as some segment servers
    strip it.

    Args:
        content: VTT content to validate

    Returns:
        VTTValidation with counts, errors and warnings
    """
    result = VTTValidation()

    if not content or not content.strip():
        result.errors.append('Content is empty')
        return result

    if 'WEBVTT' in content:
        result.has_header = True
    else:
        result.warnings.append('Missing WEBVTT header')

    in_text_block = False
    after_header = False
    cue_text_count = 0

    for line in _split_lines(content):
        stripped = line.strip()

        if is_timestamp_line(stripped):
            result.timestamp_count += 1
            after_header = True
            in_text_block = False
        elif not stripped:
            after_header = False
            in_text_block = False
        elif not in_text_block:
            result.text_count += 1
            if after_header:
                cue_text_count += 1
            in_text_block = True

    result.has_timestamps = result.timestamp_count > 0
    result.is_valid = result.has_timestamps and result.text_count > 0

    if not result.has_timestamps:
        result.errors.append('No timestamp lines found')
    if result.text_count == 0:
        result.errors.append('No subtitle text found')

    if result.timestamp_count != cue_text_count:
        result.warnings.append(
            f"Timestamp count ({result.timestamp_count}) doesn't match "
            f"text block count ({cue_text_count})"
        )

    return result


def validate_cues(cues: List[Cue]) -> CueValidation:
    """
    Check a parsed track for cues breaking the timing or text invariants.

    Args:
        cues: Parsed cues

    Returns:
        CueValidation listing one error per problem found
    """
    errors = []

    for index, cue in enumerate(cues):
        if cue.start_time < 0:
            errors.append(f"Cue {index}: Invalid start time")
        if cue.end_time < 0:
            errors.append(f"Cue {index}: Invalid end time")
        if cue.start_time >= cue.end_time:
            errors.append(f"Cue {index}: Start time must be before end time")
        if not cue.text.strip():
            errors.append(f"Cue {index}: Empty text")

    return CueValidation(is_valid=not errors, errors=errors, count=len(cues))
