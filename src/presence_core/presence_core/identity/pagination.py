"""Lazy walks over the identity index.

The index is listed with a continuation cursor and the number of pages is
unbounded, so everything here is a generator: callers keep only what they
need from each page.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Iterator

from .index import IdentityIndex
from .model import IdentityBindingRecord, IndexPage

logger = logging.getLogger(__name__)

# Cursors remembered to detect a looping index; older ones are dropped.
CURSOR_WINDOW = 8


class IndexScan:
    """Restartable sequence of index pages: each iteration starts from the first page."""

    def __init__(self, index: IdentityIndex):
        self._index = index

    def pages(self) -> Iterator[IndexPage]:
        cursor = None
        recent = deque(maxlen=CURSOR_WINDOW)
        while True:
            page = self._index.list_page(cursor)
            yield page
            if page.is_last:
                return
            if page.next_cursor in recent:
                # A cursor that repeats would loop forever.
                logger.warning("Identity index returned a repeated cursor %r; stopping scan", page.next_cursor)
                return
            recent.append(page.next_cursor)
            cursor = page.next_cursor

    def __iter__(self) -> Iterator[IdentityBindingRecord]:
        for page in self.pages():
            yield from page.entries


def bindings_for(index: IdentityIndex, external_id: str) -> Iterator[IdentityBindingRecord]:
    for record in IndexScan(index):
        if record.external_id == external_id:
            yield record

