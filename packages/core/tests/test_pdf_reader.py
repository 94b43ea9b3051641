"""Tests for the PDF container reader."""

import pytest

from slidecards_core.errors import ContainerParseError
from slidecards_core.extraction.containers import RawImage
from slidecards_core.extraction.pdf_reader import PdfContainerReader

from conftest import PdfImage, PdfPage, build_pdf


class TestPdfContainerReader:
    """Tests for page text and painted images."""

    def test_page_count_and_text(self, sample_pdf: bytes) -> None:
        """Each page exposes its text."""
        with PdfContainerReader(sample_pdf) as reader:
            assert reader.page_count == 3
            assert "Scalpel overview" in reader.page_text(1)
            assert "Forceps detail" in reader.page_text(2)

    def test_raw_rgb_image(self) -> None:
        """Unfiltered RGB streams decode to w*h*3 bytes."""
        image = PdfImage(24, 20, (1, 2, 3))
        data = build_pdf([PdfPage("One", [image])])
        with PdfContainerReader(data) as reader:
            images = list(reader.page_images(1))
        assert len(images) == 1
        assert isinstance(images[0], RawImage)
        assert (images[0].width, images[0].height) == (24, 20)
        assert images[0].pixels() == image.pixels

    def test_flate_image(self) -> None:
        """Flate-compressed streams are decoded before use."""
        image = PdfImage(16, 16, (9, 8, 7), flate=True)
        data = build_pdf([PdfPage("One", [image])])
        with PdfContainerReader(data) as reader:
            (raw,) = list(reader.page_images(1))
        assert raw.pixels() == image.pixels

    def test_images_in_paint_order(self, sample_pdf: bytes) -> None:
        """All painted images of a page are reported."""
        with PdfContainerReader(sample_pdf) as reader:
            sizes = sorted((i.width, i.height) for i in reader.page_images(2))
        assert sizes == [(10, 10), (50, 50)]

    def test_page_without_images(self) -> None:
        """A text-only page yields nothing."""
        data = build_pdf([PdfPage("Only words")])
        with PdfContainerReader(data) as reader:
            assert list(reader.page_images(1)) == []

    def test_corrupt_pdf_raises(self) -> None:
        """Unparsable data raises ContainerParseError."""
        with pytest.raises(ContainerParseError):
            PdfContainerReader(b"%PDF-1.4\nthis is not a pdf\n%%EOF")
