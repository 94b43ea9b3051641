"""Tests for export functionality."""

import tempfile
import zipfile
from pathlib import Path

import pytest

from conftest import make_png
from slidecards_core.exporters.apkg import _generate_id, export_apkg
from slidecards_core.exporters.tsv import export_tsv
from slidecards_core.schemas.cards import CardStatus, FlashcardRecord
from slidecards_core.schemas.decks import Deck


@pytest.fixture
def sample_deck() -> Deck:
    """Create a deck with cards in several states."""
    image = make_png(40, 30)
    return Deck(
        id="deck-1",
        title="Surgical Instruments",
        cards=[
            FlashcardRecord(
                id="pdf-1-40x30-aaaa",
                image_id="pdf-1-40x30-aaaa",
                image_data=image,
                name="Scalpel",
                description="A small, very sharp blade.",
                status=CardStatus.COMPLETED,
            ),
            FlashcardRecord(
                id="pdf-2-40x30-bbbb",
                image_id="pdf-2-40x30-bbbb",
                image_data=make_png(40, 30, (10, 10, 200)),
                name="Forceps",
                description="Grasps tissue;\tholds it\nfirmly.",
                status=CardStatus.COMPLETED,
            ),
            FlashcardRecord(
                id="pdf-3-40x30-cccc",
                image_id="pdf-3-40x30-cccc",
                image_data=image,
                status=CardStatus.PENDING,
            ),
            FlashcardRecord(
                id="manual-1",
                image_id="img-manual-1",
                name="Retractor",
                description="Holds an incision open.",
                status=CardStatus.COMPLETED,
            ),
        ],
    )


class TestTSVExport:
    """Tests for TSV export."""

    def test_completed_only(self, sample_deck: Deck) -> None:
        """Pending cards are left out by default."""
        result = export_tsv(sample_deck)

        assert result.startswith("Scalpel\tA small, very sharp blade.\n")
        assert "Retractor" in result
        assert result.count("\n") == 4  # the forceps row is quoted over two lines

    def test_all_cards(self, sample_deck: Deck) -> None:
        result = export_tsv(sample_deck, only_completed=False)
        assert result.count("\t") >= 4
        assert "\n\t\n" in result

    def test_special_characters_quoted(self, sample_deck: Deck) -> None:
        """Fields with tabs or newlines are quoted."""
        result = export_tsv(sample_deck)
        assert '"Grasps tissue;\tholds it\nfirmly."' in result

    def test_export_to_file(self, sample_deck: Deck) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            output_path = Path(temp_dir) / "deck.tsv"
            export_tsv(sample_deck, output=output_path)

            assert "Scalpel" in output_path.read_text(encoding="utf-8")


class TestAPKGExport:
    """Tests for APKG export."""

    def test_generate_id_deterministic(self) -> None:
        assert _generate_id("Test Deck") == _generate_id("Test Deck")

    def test_generate_id_unique(self) -> None:
        assert _generate_id("Deck A") != _generate_id("Deck B")

    def test_generate_id_positive(self) -> None:
        assert 0 < _generate_id("deck-1") <= 0x7FFFFFFF

    def test_export_with_images(self, sample_deck: Deck) -> None:
        """Completed cards with images ship their media."""
        with tempfile.TemporaryDirectory() as temp_dir:
            output_path = Path(temp_dir) / "deck.apkg"

            result_path = export_apkg(sample_deck, output_path)

            assert result_path == output_path
            assert zipfile.is_zipfile(output_path)
            with zipfile.ZipFile(output_path) as archive:
                names = set(archive.namelist())
            assert "collection.anki2" in names
            # media manifest plus one file per completed card with an image
            assert "media" in names
            assert {"0", "1"} <= names

    def test_export_empty_deck(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            output_path = Path(temp_dir) / "empty.apkg"
            export_apkg(Deck(id="deck-2", title="Empty"), output_path)
            assert output_path.stat().st_size > 0
