"""In-memory deck library.

Decks are immutable models. Every change produces a new deck that replaces
the old one in the library's list, so a caller holding a ``Deck`` always
holds a consistent snapshot.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import PurePath

from slidecards_core.errors import DeckNotFoundError
from slidecards_core.graph.build_extraction_graph import extract_candidates
from slidecards_core.graph.config import ExtractionConfig
from slidecards_core.graph.nodes.recover_images import ProgressCallback
from slidecards_core.schemas.candidates import ExtractionCandidate, ExtractionResult
from slidecards_core.schemas.cards import CardStatus, FlashcardRecord
from slidecards_core.schemas.decks import Deck
from slidecards_core.srs import schedule
from slidecards_core.utils.ids import content_hash, manual_card_id, now_ms
from slidecards_core.utils.logging import get_logger

logger = get_logger(__name__)

RECOVERED_CARD_NAME = "Recovered Image"
RECOVERED_CARD_DESCRIPTION = "Edit this card to add details."


@dataclass(frozen=True)
class ImportOutcome:
    """Result of importing a document into a new deck.

    ``deck`` is None when no candidate survived extraction; the deck created
    for the import has then already been removed.
    """

    deck: Deck | None
    result: ExtractionResult


class DeckLibrary:
    """Ordered collection of a user's decks."""

    def __init__(self, decks: Iterable[Deck] = ()):
        self._decks: list[Deck] = list(decks)

    @property
    def decks(self) -> list[Deck]:
        """Snapshot of all decks."""
        return list(self._decks)

    def replace_all(self, decks: Iterable[Deck]) -> None:
        """Replace every deck (after loading or importing a backup)."""
        self._decks = list(decks)

    def get_deck(self, deck_id: str) -> Deck:
        """Find a deck by id.

        Raises:
            DeckNotFoundError: If no deck has this id
        """
        for deck in self._decks:
            if deck.id == deck_id:
                return deck
        raise DeckNotFoundError(f"Deck not found: {deck_id}")

    def update_deck(self, deck_id: str, update: Callable[[Deck], Deck]) -> Deck:
        """Replace a deck with ``update(deck)``.

        Args:
            deck_id: Deck to change
            update: Pure function from the current deck to the new one

        Returns:
            The new deck

        Raises:
            DeckNotFoundError: If no deck has this id
        """
        current = self.get_deck(deck_id)
        updated = update(current)
        self._decks = [updated if d.id == deck_id else d for d in self._decks]
        return updated

    def update_cards(
        self,
        deck_id: str,
        update: Callable[[list[FlashcardRecord]], list[FlashcardRecord]],
    ) -> Deck:
        """Replace a deck's card list with ``update(cards)``."""
        return self.update_deck(
            deck_id, lambda d: d.model_copy(update={"cards": update(list(d.cards))})
        )

    def create_deck(self, title: str) -> Deck:
        deck = Deck(
            id=f"deck-{now_ms()}-{content_hash(f'{title}:{len(self._decks)}', 6)}",
            title=title.strip() or "Untitled Deck",
        )
        self._decks = [*self._decks, deck]
        logger.info(f"Created deck {deck.id} ({deck.title})")
        return deck

    def rename_deck(self, deck_id: str, title: str) -> Deck:
        return self.update_deck(deck_id, lambda d: d.model_copy(update={"title": title}))

    def delete_deck(self, deck_id: str) -> None:
        self.get_deck(deck_id)
        self._decks = [d for d in self._decks if d.id != deck_id]
        logger.info(f"Deleted deck {deck_id}")

    async def import_document(
        self,
        data: bytes,
        filename: str | None = None,
        title: str | None = None,
        config: ExtractionConfig | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> ImportOutcome:
        """Create a deck for a document and extract its candidates.

        The deck is created before extraction starts and removed again if
        extraction fails or yields no candidate, so no partial deck remains.

        Args:
            data: Raw PDF or PPTX bytes
            filename: Original file name (deck title and kind detection)
            title: Explicit deck title
            config: Extraction options
            on_progress: Optional callback invoked with (current page, total pages)

        Returns:
            The new deck (None when nothing was found) and the extraction result

        Raises:
            ExtractionError: If the document cannot be read
        """
        deck_title = title or (PurePath(filename).stem if filename else "Untitled Deck")
        deck = self.create_deck(deck_title)
        try:
            result = await extract_candidates(
                data, filename=filename, config=config, on_progress=on_progress
            )
        except Exception:
            self.delete_deck(deck.id)
            raise

        if not result.has_candidates:
            logger.warning(f"No images found in {filename or 'document'}, discarding deck")
            self.delete_deck(deck.id)
            return ImportOutcome(deck=None, result=result)
        return ImportOutcome(deck=deck, result=result)

    def stage_candidates(
        self,
        deck_id: str,
        candidates: Iterable[ExtractionCandidate],
        selected_ids: Iterable[str],
    ) -> Deck:
        """Turn the reviewed candidates into pending cards and ignored images.

        Args:
            deck_id: Target deck
            candidates: All candidates shown for review
            selected_ids: Ids of the candidates the user approved

        Returns:
            The updated deck

        Raises:
            ValueError: If no candidate is selected
        """
        candidates = list(candidates)
        selected = set(selected_ids)
        if not any(c.id in selected for c in candidates):
            raise ValueError("Select at least one image to generate flashcards")

        def stage(deck: Deck) -> Deck:
            known = {c.image_id for c in deck.cards} | {i.id for i in deck.ignored_images}
            cards = list(deck.cards)
            ignored = list(deck.ignored_images)
            for candidate in candidates:
                if candidate.id in known:
                    continue
                known.add(candidate.id)
                if candidate.id in selected:
                    cards.append(
                        FlashcardRecord(
                            id=candidate.id,
                            image_id=candidate.id,
                            image_data=candidate.image_data,
                            mime_type=candidate.mime_type,
                            context_text=candidate.context_text,
                        )
                    )
                else:
                    ignored.append(candidate)
            return deck.model_copy(update={"cards": cards, "ignored_images": ignored})

        return self.update_deck(deck_id, stage)

    def add_manual_card(
        self,
        deck_id: str,
        name: str,
        description: str = "",
        image_data: bytes = b"",
        mime_type: str = "image/png",
    ) -> FlashcardRecord:
        """Add a hand-written card, completed immediately."""
        card_id = manual_card_id()
        card = FlashcardRecord(
            id=card_id,
            image_id=f"img-{card_id}",
            image_data=image_data,
            mime_type=mime_type,
            name=name,
            description=description,
            status=CardStatus.COMPLETED,
        )
        self.update_cards(deck_id, lambda cards: [*cards, card])
        return card

    def edit_card(
        self,
        deck_id: str,
        card_id: str,
        name: str | None = None,
        description: str | None = None,
        image_data: bytes | None = None,
        mime_type: str | None = None,
    ) -> FlashcardRecord:
        """Change the user-editable fields of a card.

        Raises:
            KeyError: If the deck has no such card
        """
        changes = {
            key: value
            for key, value in (
                ("name", name),
                ("description", description),
                ("image_data", image_data),
                ("mime_type", mime_type),
            )
            if value is not None
        }
        deck = self.update_cards(
            deck_id,
            lambda cards: [c.model_copy(update=changes) if c.id == card_id else c for c in cards],
        )
        card = deck.get_card(card_id)
        if card is None:
            raise KeyError(f"Card not found: {card_id}")
        return card

    def delete_card(self, deck_id: str, card_id: str) -> None:
        self.update_cards(deck_id, lambda cards: [c for c in cards if c.id != card_id])

    def recover_ignored_image(self, deck_id: str, image_id: str) -> FlashcardRecord:
        """Move an ignored image back into the deck as a completed card.

        Raises:
            KeyError: If the deck has no such ignored image
        """
        deck = self.get_deck(deck_id)
        image = next((i for i in deck.ignored_images if i.id == image_id), None)
        if image is None:
            raise KeyError(f"Ignored image not found: {image_id}")

        card = FlashcardRecord(
            id=image.id,
            image_id=image.id,
            image_data=image.image_data,
            mime_type=image.mime_type,
            name=RECOVERED_CARD_NAME,
            description=RECOVERED_CARD_DESCRIPTION,
            status=CardStatus.COMPLETED,
            context_text=image.context_text,
        )
        self.update_deck(
            deck_id,
            lambda d: d.model_copy(
                update={
                    "cards": [*(c for c in d.cards if c.id != card.id), card],
                    "ignored_images": [i for i in d.ignored_images if i.id != image_id],
                }
            ),
        )
        return card

    def study_queue(self, deck_id: str, now: int | None = None) -> list[FlashcardRecord]:
        """Cards to review: the due completed cards, or all completed cards if none is due."""
        now = now_ms() if now is None else now
        completed = self.get_deck(deck_id).cards_with_status(CardStatus.COMPLETED)
        due = [c for c in completed if c.srs.is_due(now)]
        return due or completed

    def rate_card(
        self, deck_id: str, card_id: str, quality: int, now: int | None = None
    ) -> FlashcardRecord:
        """Apply a review grade to a card.

        Raises:
            KeyError: If the deck has no such card
            ValueError: If the grade is not between 1 and 4
        """
        card = self.get_deck(deck_id).get_card(card_id)
        if card is None:
            raise KeyError(f"Card not found: {card_id}")
        rated = card.model_copy(update={"srs": schedule(card.srs, quality, now)})
        self.update_cards(deck_id, lambda cards: [rated if c.id == card_id else c for c in cards])
        return rated
