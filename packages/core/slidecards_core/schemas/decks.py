"""Deck schema."""

from pydantic import BaseModel, ConfigDict, Field

from slidecards_core.schemas.candidates import ExtractionCandidate
from slidecards_core.schemas.cards import CardStatus, FlashcardRecord
from slidecards_core.utils.ids import now_ms


class Deck(BaseModel):
    """A named collection of flashcards plus the images left out of it.

    A given image id appears in at most one of ``cards`` and ``ignored_images``.
    """

    id: str
    title: str
    created_at: int = Field(default_factory=now_ms)
    cards: list[FlashcardRecord] = Field(default_factory=list)
    ignored_images: list[ExtractionCandidate] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def get_card(self, card_id: str) -> FlashcardRecord | None:
        """Find a card by id."""
        return next((c for c in self.cards if c.id == card_id), None)

    def cards_with_status(self, status: CardStatus) -> list[FlashcardRecord]:
        """All cards currently in ``status``."""
        return [c for c in self.cards if c.status == status]
