"""APKG export for Anki decks."""

import hashlib
import html
import mimetypes
import tempfile
from pathlib import Path

import genanki

from slidecards_core.schemas.cards import CardStatus, FlashcardRecord
from slidecards_core.schemas.decks import Deck
from slidecards_core.utils.logging import get_logger

logger = get_logger(__name__)

CARD_CSS = """
.card {
    font-family: arial;
    font-size: 20px;
    text-align: center;
    color: black;
    background-color: white;
}
.card img {
    max-width: 100%;
    max-height: 60vh;
}
.description {
    font-size: 16px;
    margin-top: 12px;
}
"""


def export_apkg(deck: Deck, output: str | Path) -> Path:
    """Export a deck's completed cards to an Anki package.

    The card image is the question; the name and description are the answer.

    Args:
        deck: Deck to export
        output: Output file path

    Returns:
        Path to the created APKG file
    """
    cards = [c for c in deck.cards if c.status == CardStatus.COMPLETED]
    logger.info(f"Exporting APKG: {deck.title} ({len(cards)} cards)")

    anki_deck = genanki.Deck(_generate_id(deck.id), deck.title)
    model = _create_model(_generate_id(f"{deck.id}_model"), deck.title)

    output_path = Path(output)
    with tempfile.TemporaryDirectory(prefix="anki_media_") as temp_dir:
        media_files: list[str] = []
        for card in cards:
            image_html = ""
            if card.image_data:
                media_path = _write_media(card, Path(temp_dir))
                media_files.append(str(media_path))
                image_html = f'<img src="{media_path.name}">'

            anki_deck.add_note(
                genanki.Note(
                    model=model,
                    fields=[image_html, html.escape(card.name), html.escape(card.description)],
                    guid=genanki.guid_for(deck.id, card.id),
                )
            )

        package = genanki.Package(anki_deck)
        package.media_files = media_files
        package.write_to_file(str(output_path))

    logger.info(f"Created APKG at {output_path} with {len(media_files)} media files")
    return output_path


def _create_model(model_id: int, deck_title: str) -> genanki.Model:
    """Create an Anki model with Image/Name/Description fields."""
    return genanki.Model(
        model_id,
        f"{deck_title} Model",
        fields=[
            {"name": "Image"},
            {"name": "Name"},
            {"name": "Description"},
        ],
        templates=[
            {
                "name": "Card 1",
                "qfmt": "{{#Image}}{{Image}}{{/Image}}{{^Image}}{{Name}}{{/Image}}",
                "afmt": '{{FrontSide}}<hr id="answer"><b>{{Name}}</b>'
                '<div class="description">{{Description}}</div>',
            },
        ],
        css=CARD_CSS,
    )


def _write_media(card: FlashcardRecord, directory: Path) -> Path:
    """Write a card's image to a uniquely named media file."""
    extension = mimetypes.guess_extension(card.mime_type) or ".png"
    image_hash = hashlib.md5(card.image_data).hexdigest()[:8]
    path = directory / f"slidecards_{image_hash}{extension}"
    path.write_bytes(card.image_data)
    return path


def _generate_id(name: str) -> int:
    """Generate a deterministic ID from a string."""
    hash_bytes = hashlib.md5(name.encode()).digest()
    return int.from_bytes(hash_bytes[:4], "big") & 0x7FFFFFFF
