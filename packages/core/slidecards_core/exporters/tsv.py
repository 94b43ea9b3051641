"""TSV export for Anki import."""

import csv
from io import StringIO
from pathlib import Path

from slidecards_core.schemas.cards import CardStatus
from slidecards_core.schemas.decks import Deck


def export_tsv(
    deck: Deck,
    output: str | Path | None = None,
    only_completed: bool = True,
) -> str:
    """Export a deck's cards to TSV (name, description) for Anki import.

    Args:
        deck: Deck to export
        output: Optional output path (if None, returns string)
        only_completed: Skip cards that are not completed

    Returns:
        TSV content as string
    """
    cards = deck.cards
    if only_completed:
        cards = [c for c in cards if c.status == CardStatus.COMPLETED]

    buffer = StringIO()
    writer = csv.writer(buffer, delimiter="\t", quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    for card in cards:
        writer.writerow([card.name, card.description])

    content = buffer.getvalue()

    if output:
        Path(output).write_text(content, encoding="utf-8")

    return content
