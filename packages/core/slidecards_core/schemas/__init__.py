"""Data schemas for extraction, generation and review.

This module exports the candidate, flashcard, deck and provider configuration
models shared by the extraction graph and the generation pipeline.
"""

from slidecards_core.schemas.ai import (
    AIConfig,
    GoogleAIConfig,
    OpenAICompatibleAIConfig,
    parse_ai_config,
)
from slidecards_core.schemas.candidates import (
    DocumentKind,
    ExtractionCandidate,
    ExtractionResult,
)
from slidecards_core.schemas.cards import (
    CardContent,
    CardStatus,
    FlashcardRecord,
    SrsState,
)
from slidecards_core.schemas.decks import Deck

__all__ = [
    # Extraction
    "DocumentKind",
    "ExtractionCandidate",
    "ExtractionResult",
    # Cards
    "CardContent",
    "CardStatus",
    "FlashcardRecord",
    "SrsState",
    # Decks
    "Deck",
    # Providers
    "AIConfig",
    "GoogleAIConfig",
    "OpenAICompatibleAIConfig",
    "parse_ai_config",
]
