"""Per-page text and the three-page context window."""

import re
from collections.abc import Iterable

_WHITESPACE = re.compile(r"\s+")


def normalize_whitespace(text: str | None) -> str:
    """Collapse runs of whitespace to single spaces and trim the ends."""
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text).strip()


def page_label(page_number: int) -> str:
    """Label that prefixes a page's text inside a context string."""
    return f"[SLIDE {page_number}]"


def also_seen_block(page_number: int, text: str) -> str:
    """Context block appended when an image recurs on another page."""
    return f"\n\n--- Also seen on {page_label(page_number)} ---\n{text}"


class PageText:
    """Immutable, 1-indexed page text with empty sentries at 0 and N+1.

    All pages are read before any window is built, since a window looks one
    page ahead.
    """

    __slots__ = ("_texts",)

    def __init__(self, texts: Iterable[str]):
        body = tuple(normalize_whitespace(t) for t in texts)
        self._texts: tuple[str, ...] = ("", *body, "")

    @property
    def page_count(self) -> int:
        """Number of real pages."""
        return len(self._texts) - 2

    def __len__(self) -> int:
        return self.page_count

    def __getitem__(self, page_number: int) -> str:
        if not 0 <= page_number < len(self._texts):
            raise IndexError(f"Page {page_number} out of range 0..{self.page_count + 1}")
        return self._texts[page_number]

    def window(self, page_number: int) -> str:
        """Context string for ``page_number``: previous, current and next page.

        Neighbours outside the document contribute nothing, so the window of
        the first page starts with that page's own label.

        Args:
            page_number: 1-based page number

        Returns:
            Labelled text of pages ``p-1``, ``p`` and ``p+1``
        """
        lines = [
            f"{page_label(n)}: {self._texts[n]}"
            for n in (page_number - 1, page_number, page_number + 1)
            if 1 <= n <= self.page_count
        ]
        return "\n".join(lines)
