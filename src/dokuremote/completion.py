"""Page link completion.

Two modes read the page cache:

- selection: pick one page from the full list and insert an absolute link;
- in-buffer: complete a ``:namespace:page`` token being typed, then wrap the
  finished token in link syntax.

In-buffer completion never fetches; it only offers what is already cached.
"""

import re
from enum import Enum

from dokuremote.cache import PageCache
from dokuremote.paths import LINK_OPEN, page_link, wrap_link
from dokuremote.types import PageId

# Colon followed by letters or colons, ending at the cursor
_TOKEN_TAIL = re.compile(r":(?:[^\W\d_]|:)+\Z")


class CompletionStatus(Enum):
    """How an in-buffer completion ended."""

    FINISHED = "finished"
    SOLE = "sole"
    EXACT = "exact"


def _token_start(line: str, end: int) -> int:
    start = end
    while start > 0 and not line[start - 1].isspace():
        start -= 1
    return start


class CompletionProvider:
    """Completion candidates and link insertion backed by a PageCache."""

    def __init__(self, cache: PageCache) -> None:
        self.cache = cache

    def selection_candidates(self, force_refresh: bool = False) -> tuple[PageId, ...]:
        """Pages offered for interactive selection, in server order.

        Args:
            force_refresh: Refresh the cache before listing

        Returns:
            Cached page identifiers
        """
        return self.cache.list(force_refresh)

    def choose(self, page_id: str) -> str:
        """Link text for a selected page."""
        return page_link(page_id)

    def insert_choice(self, line: str, cursor: int, page_id: str) -> tuple[str, int]:
        """Insert the link for a selected page at the cursor.

        Returns:
            New line text and cursor position after the link
        """
        link = self.choose(page_id)
        return line[:cursor] + link + line[cursor:], cursor + len(link)

    def completion_bounds(self, line: str, cursor: int) -> tuple[int, int] | None:
        """Find the token to complete in a line.

        Completion applies only when the text left of the cursor ends in a
        colon followed by letters or colons. The token extends back from
        there to the nearest whitespace or the start of the line.

        Args:
            line: Text of the current line
            cursor: Cursor offset into the line

        Returns:
            (start, end) offsets of the token, or None if completion does
            not apply
        """
        match = _TOKEN_TAIL.search(line, 0, cursor)
        if match is None:
            return None
        return _token_start(line, match.start()), cursor

    def buffer_candidates(self) -> tuple[str, ...]:
        """Cached pages in absolute form, for matching a typed ``:`` token."""
        return tuple(f":{page_id}" for page_id in self.cache.snapshot)

    def finish_completion(
        self, line: str, cursor: int, status: CompletionStatus
    ) -> tuple[str, int]:
        """Wrap the completed token before the cursor in link syntax.

        Nothing changes unless the completion actually finished; cycling
        through candidates reports other statuses.

        Args:
            line: Text of the current line after the candidate was inserted
            cursor: Cursor offset, just after the inserted candidate
            status: How the completion ended

        Returns:
            New line text and cursor position
        """
        if status is not CompletionStatus.FINISHED:
            return line, cursor

        start = _token_start(line, cursor)
        token = line[start:cursor]
        if not token or token.startswith(LINK_OPEN):
            return line, cursor

        link = wrap_link(token)
        return line[:start] + link + line[cursor:], start + len(link)
