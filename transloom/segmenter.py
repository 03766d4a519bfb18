"""Markup segmentation and batching utilities."""

from __future__ import annotations

import re
from typing import List, Sequence

from .structures import Batch, Segment

TEXT_RUN_PATTERN = re.compile(r">([^<]+)<")

# Runs this short are punctuation or stray symbols, not worth a provider call.
MIN_SEGMENT_LENGTH = 3


def extract_segments(markup: str) -> List[Segment]:
    """Locate the translatable text runs sitting between two markup tags.

    Each run is trimmed of surrounding whitespace and kept only when the
    trimmed text is longer than ``MIN_SEGMENT_LENGTH`` characters. Offsets
    point at the trimmed text inside ``markup`` and are half-open.

    Text inside attributes (``alt``, ``title``) or runs that do not sit
    directly between a ``>`` and a ``<`` are not extracted.
    """

    if not markup:
        return []

    segments: List[Segment] = []
    for match in TEXT_RUN_PATTERN.finditer(markup):
        raw = match.group(1)
        stripped = raw.strip()
        if len(stripped) <= MIN_SEGMENT_LENGTH:
            continue
        start = match.start(1) + (len(raw) - len(raw.lstrip()))
        segments.append(
            Segment(text=stripped, start=start, end=start + len(stripped))
        )
    return segments


class BatchBuilder:
    """Aggregates text items into batches within count and character budgets."""

    def __init__(self, max_items: int, max_chars: int) -> None:
        self.max_items = max(1, max_items)
        self.max_chars = max(1, max_chars)

    def build(self, items: Sequence[str]) -> List[Batch]:
        batches: List[Batch] = []
        batch_items: List[str] = []
        running_total = 0
        batch_id = 1

        for item in items:
            size = len(item)
            if size > self.max_chars:
                if batch_items:
                    batches.append(Batch(batch_id=batch_id, items=batch_items))
                    batch_id += 1
                    batch_items = []
                    running_total = 0
                batches.append(Batch(batch_id=batch_id, items=[item]))
                batch_id += 1
                continue

            if batch_items and (
                len(batch_items) + 1 > self.max_items
                or running_total + size > self.max_chars
            ):
                batches.append(Batch(batch_id=batch_id, items=batch_items))
                batch_id += 1
                batch_items = []
                running_total = 0

            batch_items.append(item)
            running_total += size

        if batch_items:
            batches.append(Batch(batch_id=batch_id, items=batch_items))

        return batches


def plan_batches(items: Sequence[str], max_items: int, max_chars: int) -> List[Batch]:
    """Greedily pack ``items`` into order-preserving batches."""

    return BatchBuilder(max_items, max_chars).build(items)
