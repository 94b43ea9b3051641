"""Flashcard generation pipeline.

Pending cards of a deck are sent to a content provider in small batches (one
card at a time by default, to stay under provider rate limits). Each card
moves ``pending -> generating -> completed | error``, or leaves the card list
for the deck's ignored images when the provider rejects the image or names an
object the deck already has a card for.

All deck changes go through ``DeckLibrary.update_deck``, which replaces the
deck's lists as a whole, so updates from cards of the same batch compose.
"""

import asyncio
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from slidecards_core.graph.config import GenerationConfig
from slidecards_core.model_adapters.base import ContentProvider
from slidecards_core.schemas.candidates import ExtractionCandidate
from slidecards_core.schemas.cards import CardContent, CardStatus, FlashcardRecord
from slidecards_core.schemas.decks import Deck
from slidecards_core.utils.ids import page_index_from_id
from slidecards_core.utils.logging import get_logger

if TYPE_CHECKING:
    from slidecards_core.library import DeckLibrary

logger = get_logger(__name__)

FAILED_CARD_NAME = "Generation Failed"

ProgressCallback = Callable[[int, int], None]


@dataclass
class GenerationReport:
    """Outcome counts of one pipeline run."""

    processed: int = 0
    completed: int = 0
    failed: int = 0
    ignored: int = 0
    duplicates: int = 0
    skipped: bool = False


def candidate_from_card(card: FlashcardRecord) -> ExtractionCandidate:
    """Rebuild the candidate a card was generated from."""
    return ExtractionCandidate(
        id=card.image_id,
        image_data=card.image_data,
        mime_type=card.mime_type,
        page_index=page_index_from_id(card.image_id),
        context_text=card.context_text,
    )


def _archive_card(deck: Deck, card: FlashcardRecord) -> Deck:
    """Move a card out of ``cards`` and into ``ignored_images``."""
    if deck.get_card(card.id) is None:
        return deck
    ignored = deck.ignored_images
    if not any(image.id == card.image_id for image in ignored):
        ignored = [*ignored, candidate_from_card(card)]
    return deck.model_copy(
        update={
            "cards": [c for c in deck.cards if c.id != card.id],
            "ignored_images": ignored,
        }
    )


def _replace_card(deck: Deck, card_id: str, **changes: object) -> Deck:
    return deck.model_copy(
        update={
            "cards": [
                c.model_copy(update=changes) if c.id == card_id else c
                for c in deck.cards
            ]
        }
    )


class GenerationPipeline:
    """Drives the cards of a deck through a content provider.

    A pipeline runs one queue at a time: starting it while a run is in
    flight returns a skipped report instead of processing anything.
    """

    def __init__(
        self,
        library: "DeckLibrary",
        provider: ContentProvider,
        config: GenerationConfig | None = None,
    ):
        self.library = library
        self.provider = provider
        self.config = config or GenerationConfig()
        self._running = False

    @property
    def is_running(self) -> bool:
        """True while a run is in flight."""
        return self._running

    async def run(
        self,
        deck_id: str,
        on_progress: ProgressCallback | None = None,
    ) -> GenerationReport:
        """Generate content for every pending card of a deck.

        Args:
            deck_id: Deck whose pending cards are processed
            on_progress: Optional callback invoked with (processed, total) per card

        Returns:
            Counts of the run's outcomes
        """
        return await self._run(deck_id, (CardStatus.PENDING,), on_progress)

    async def retry_failed(
        self,
        deck_id: str,
        on_progress: ProgressCallback | None = None,
    ) -> GenerationReport:
        """Re-run generation on the cards of a deck that ended in error."""
        return await self._run(deck_id, (CardStatus.ERROR,), on_progress)

    async def _run(
        self,
        deck_id: str,
        statuses: Iterable[CardStatus],
        on_progress: ProgressCallback | None,
    ) -> GenerationReport:
        if self._running:
            logger.warning(f"Generation already in progress, ignoring start for deck {deck_id}")
            return GenerationReport(skipped=True)

        self._running = True
        try:
            wanted = set(statuses)
            deck = self.library.get_deck(deck_id)
            queue = [card.id for card in deck.cards if card.status in wanted]
            total = len(queue)
            batch_size = max(1, self.config.batch_size)
            report = GenerationReport()

            logger.info(f"Generating {total} cards for deck {deck_id} (batch_size={batch_size})")

            for start in range(0, total, batch_size):
                batch = queue[start : start + batch_size]
                outcomes = await asyncio.gather(
                    *(self._process_card(deck_id, card_id) for card_id in batch)
                )
                for outcome in outcomes:
                    if outcome is None:
                        continue
                    report.processed += 1
                    setattr(report, outcome, getattr(report, outcome) + 1)
                    if on_progress:
                        on_progress(report.processed, total)

            logger.info(
                f"Generation finished for deck {deck_id}: {report.completed} completed, "
                f"{report.failed} failed, {report.ignored} ignored, {report.duplicates} duplicates"
            )
            return report
        finally:
            self._running = False

    async def _process_card(self, deck_id: str, card_id: str) -> str | None:
        """Run one card through the provider and record the outcome.

        Returns:
            Name of the report counter to bump, or None if the card vanished
        """
        card = self.library.get_deck(deck_id).get_card(card_id)
        if card is None:
            return None

        self.library.update_deck(
            deck_id, lambda d: _replace_card(d, card_id, status=CardStatus.GENERATING)
        )

        try:
            content = await self.provider.generate(
                card.image_data,
                card.context_text,
                self.config.target_language,
                card.mime_type,
            )
        except Exception as e:
            # A failed card never stops its siblings
            logger.error(f"Generation failed for card {card_id}: {e}")
            content = CardContent.failure(str(e) or type(e).__name__)

        return self._record(deck_id, card, content)

    def _record(self, deck_id: str, card: FlashcardRecord, content: CardContent) -> str:
        if not content.is_valid:
            logger.info(f"Card {card.id} rejected by provider, moved to ignored images")
            self.library.update_deck(deck_id, lambda d: _archive_card(d, card))
            return "ignored"

        if content.is_failure:
            self.library.update_deck(
                deck_id,
                lambda d: _replace_card(
                    d,
                    card.id,
                    status=CardStatus.ERROR,
                    name=FAILED_CARD_NAME,
                    description=content.description,
                ),
            )
            return "failed"

        outcome = "completed"
        name = content.name.strip().lower()

        def complete(deck: Deck) -> Deck:
            nonlocal outcome
            duplicate = any(
                c.id != card.id and c.status == CardStatus.COMPLETED and c.normalized_name == name
                for c in deck.cards
            )
            if duplicate:
                outcome = "duplicates"
                return _archive_card(deck, card)
            return _replace_card(
                deck,
                card.id,
                status=CardStatus.COMPLETED,
                name=content.name,
                description=content.description,
            )

        self.library.update_deck(deck_id, complete)
        if outcome == "duplicates":
            logger.info(f"Card {card.id} duplicates an existing '{content.name}' card")
        return outcome
