"""Cross-page candidate deduplication."""

from slidecards_core.extraction.windowing import also_seen_block, page_label
from slidecards_core.schemas.candidates import ExtractionCandidate


class CandidateDeduplicator:
    """Ordered candidate list with a key -> position index.

    The first occurrence of a key fixes the candidate's id, image and page;
    later occurrences on other pages only extend its context text. Keys that
    were looked at and rejected are remembered so they are not decoded again.
    """

    def __init__(self) -> None:
        self._candidates: list[ExtractionCandidate] = []
        self._index: dict[str, int] = {}
        self._rejected: set[str] = set()

    def __len__(self) -> int:
        return len(self._candidates)

    def __contains__(self, key: str) -> bool:
        return key in self._index

    def is_known(self, key: str) -> bool:
        """True when the key was already accepted or rejected."""
        return key in self._index or key in self._rejected

    def add(self, key: str, candidate: ExtractionCandidate) -> None:
        if key in self._index:
            raise KeyError(f"Duplicate candidate key: {key}")
        self._index[key] = len(self._candidates)
        self._candidates.append(candidate)

    def reject(self, key: str) -> None:
        self._rejected.add(key)

    def merge(self, key: str, page_number: int, page_text: str) -> bool:
        """Record a repeat sighting of ``key`` on ``page_number``.

        The page's text is appended once per page; a page whose label is
        already part of the context is left alone.

        Returns:
            True when the context was extended
        """
        position = self._index[key]
        candidate = self._candidates[position]
        if page_label(page_number) in candidate.context_text:
            return False
        self._candidates[position] = candidate.with_context(
            candidate.context_text + also_seen_block(page_number, page_text)
        )
        return True

    @property
    def candidates(self) -> list[ExtractionCandidate]:
        """Candidates in first-occurrence order."""
        return list(self._candidates)
