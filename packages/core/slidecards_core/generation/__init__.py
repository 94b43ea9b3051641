"""Flashcard generation from approved candidates."""

from slidecards_core.generation.pipeline import (
    FAILED_CARD_NAME,
    GenerationPipeline,
    GenerationReport,
    candidate_from_card,
)

__all__ = ["FAILED_CARD_NAME", "GenerationPipeline", "GenerationReport", "candidate_from_card"]
