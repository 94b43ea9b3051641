"""Tests for cross-page candidate deduplication."""

import pytest

from slidecards_core.extraction.dedup import CandidateDeduplicator
from slidecards_core.schemas.candidates import ExtractionCandidate


def _candidate(context: str = "[SLIDE 1]: one\n[SLIDE 2]: two") -> ExtractionCandidate:
    return ExtractionCandidate(
        id="pptx-1-rId2-abc", image_data=b"img", page_index=1, context_text=context
    )


class TestCandidateDeduplicator:
    """Tests for the candidate arena."""

    def test_add_and_lookup(self) -> None:
        """Added keys are known and listed in order."""
        dedup = CandidateDeduplicator()
        dedup.add("a", _candidate())
        assert "a" in dedup
        assert dedup.is_known("a")
        assert len(dedup) == 1

    def test_duplicate_add_rejected(self) -> None:
        """A key can only be added once."""
        dedup = CandidateDeduplicator()
        dedup.add("a", _candidate())
        with pytest.raises(KeyError):
            dedup.add("a", _candidate())

    def test_merge_appends_block_once(self) -> None:
        """Repeated sightings on the same page append a single block."""
        dedup = CandidateDeduplicator()
        dedup.add("a", _candidate())

        assert dedup.merge("a", 5, "recap") is True
        assert dedup.merge("a", 5, "recap") is False

        (merged,) = dedup.candidates
        assert merged.context_text.count("[SLIDE 5]") == 1
        assert merged.context_text.endswith("--- Also seen on [SLIDE 5] ---\nrecap")
        assert merged.id == "pptx-1-rId2-abc"
        assert merged.page_index == 1

    def test_merge_skips_pages_already_in_window(self) -> None:
        """A page already present in the original window is not repeated."""
        dedup = CandidateDeduplicator()
        dedup.add("a", _candidate())
        assert dedup.merge("a", 2, "two") is False

    def test_rejected_keys_are_known(self) -> None:
        """Rejected keys are remembered but produce no candidate."""
        dedup = CandidateDeduplicator()
        dedup.reject("tiny")
        assert dedup.is_known("tiny")
        assert "tiny" not in dedup
        assert dedup.candidates == []
