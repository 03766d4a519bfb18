"""Reinsertion of translated segments into their original markup."""

from __future__ import annotations

from typing import Sequence

from .structures import Segment


def reinsert_segments(
    markup: str,
    segments: Sequence[Segment],
    translations: Sequence[str],
) -> str:
    """Replace each segment span in ``markup`` with its translation.

    Segments must be in ascending document order. Every replacement shifts
    the positions of later segments by the difference in length, so the
    running offset is carried forward from one segment to the next.
    """

    if len(segments) != len(translations):
        raise ValueError(
            f"Received {len(translations)} translations for {len(segments)} segments."
        )

    result = markup
    offset = 0
    for segment, translated in zip(segments, translations):
        actual_start = segment.start + offset
        actual_end = segment.end + offset
        result = result[:actual_start] + translated + result[actual_end:]
        offset += len(translated) - len(segment.text)
    return result
