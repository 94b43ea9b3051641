"""PowerPoint export of a PDF: one 16:9 slide per page.

Each slide puts the page's text in a boxed panel on the left and up to six of
the page's images in a two-column grid on the right. Images come from an
extraction run without deduplication, so an image repeated across pages shows
up on every one of them.
"""

import asyncio
from dataclasses import replace
from io import BytesIO
from pathlib import Path

from PIL import Image
from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.text import MSO_ANCHOR, PP_ALIGN
from pptx.util import Emu, Inches, Pt

from slidecards_core.graph.build_extraction_graph import build_extraction_graph
from slidecards_core.graph.config import ExtractionConfig
from slidecards_core.graph.nodes.recover_images import ProgressCallback
from slidecards_core.schemas.candidates import DocumentKind, ExtractionCandidate
from slidecards_core.utils.logging import get_logger, log_exceptions

logger = get_logger(__name__)

SLIDE_WIDTH = Inches(10)
SLIDE_HEIGHT = Inches(5.625)
BLANK_LAYOUT = 6

MAX_TEXT_CHARS = 1500
MAX_IMAGES_PER_SLIDE = 6
NO_TEXT = "(No text detected)"
NO_IMAGES = "(No images detected)"

# Image grid, in inches
GRID_LEFT = 5.2
GRID_TOP = 0.5
CELL_SIZE = 2.0
CELL_GAP = 0.2


def slide_text(text: str) -> str:
    """Text panel content: the first 1500 characters, or a placeholder."""
    return text[:MAX_TEXT_CHARS] or NO_TEXT


def grid_cells(count: int) -> list[tuple[float, float]]:
    """Top-left corners (inches) of the grid cells for ``count`` images.

    Cells fill two columns row by row; anything past the sixth image is
    dropped.
    """
    cells = []
    for idx in range(min(count, MAX_IMAGES_PER_SLIDE)):
        col, row = idx % 2, idx // 2
        cells.append(
            (GRID_LEFT + col * (CELL_SIZE + CELL_GAP), GRID_TOP + row * (CELL_SIZE + CELL_GAP))
        )
    return cells


def contain(width: int, height: int, box: int) -> tuple[int, int, int, int]:
    """Fit a ``width`` x ``height`` image inside a square box, centered.

    Returns:
        (left offset, top offset, width, height), in the units of ``box``
    """
    scale = box / max(width, height, 1)
    fitted_width = round(width * scale)
    fitted_height = round(height * scale)
    return (box - fitted_width) // 2, (box - fitted_height) // 2, fitted_width, fitted_height


def _add_label(slide, text: str, left: float, top: float, width: float, height: float,
               size: int, color: str, align: PP_ALIGN):
    box = slide.shapes.add_textbox(Inches(left), Inches(top), Inches(width), Inches(height))
    frame = box.text_frame
    frame.word_wrap = True
    paragraph = frame.paragraphs[0]
    paragraph.alignment = align
    run = paragraph.add_run()
    run.text = text
    run.font.size = Pt(size)
    run.font.color.rgb = RGBColor.from_string(color)
    return box


def _add_text_panel(slide, text: str) -> None:
    box = _add_label(slide, slide_text(text), 0.2, 0.5, 4.8, 4.8, 10, "363636", PP_ALIGN.LEFT)
    box.text_frame.vertical_anchor = MSO_ANCHOR.TOP
    box.fill.solid()
    box.fill.fore_color.rgb = RGBColor.from_string("F7F7F7")
    box.line.color.rgb = RGBColor.from_string("E0E0E0")
    box.line.width = Pt(1)


def _add_images(slide, images: list[ExtractionCandidate]) -> int:
    cell = Inches(CELL_SIZE)
    placed = 0
    for (left, top), image in zip(grid_cells(len(images)), images):
        with Image.open(BytesIO(image.image_data)) as decoded:
            width, height = decoded.size
        dx, dy, fitted_width, fitted_height = contain(width, height, cell)
        slide.shapes.add_picture(
            BytesIO(image.image_data),
            Emu(Inches(left) + dx),
            Emu(Inches(top) + dy),
            Emu(fitted_width),
            Emu(fitted_height),
        )
        placed += 1
    return placed


@log_exceptions(logger)
async def export_pdf_to_pptx(
    data: bytes,
    output: str | Path,
    config: ExtractionConfig | None = None,
    on_progress: ProgressCallback | None = None,
) -> Path:
    """Rebuild a PDF as a PowerPoint deck of text and image panels.

    Args:
        data: Raw PDF bytes
        output: Output file path
        config: Extraction thresholds; deduplication and page rendering are
            always turned off
        on_progress: Optional callback invoked with (current slide, total slides)

    Returns:
        Path to the created PPTX file

    Raises:
        UnsupportedDocumentError: If no data was given
        ContainerParseError: If the PDF is unreadable
    """
    extraction_config = replace(
        config or ExtractionConfig(), deduplicate=False, render_pages_when_empty=False
    )
    graph = build_extraction_graph(extraction_config)
    state = await graph.ainvoke(
        {"document_data": data, "filename": None, "kind": DocumentKind.PDF}
    )
    page_texts = state["page_texts"]
    candidates: list[ExtractionCandidate] = state.get("candidates", [])

    presentation = Presentation()
    presentation.slide_width = SLIDE_WIDTH
    presentation.slide_height = SLIDE_HEIGHT
    layout = presentation.slide_layouts[BLANK_LAYOUT]

    total = page_texts.page_count
    pictures = 0
    for page_number in range(1, total + 1):
        if on_progress:
            on_progress(page_number, total)

        slide = presentation.slides.add_slide(layout)
        _add_text_panel(slide, page_texts[page_number])

        images = [c for c in candidates if c.page_index == page_number]
        if images:
            pictures += _add_images(slide, images)
        else:
            _add_label(slide, NO_IMAGES, 5.2, 2.5, 4.0, 1.0, 12, "AAAAAA", PP_ALIGN.CENTER)

        _add_label(slide, f"Slide {page_number}", 9.0, 5.2, 0.8, 0.3, 8, "888888", PP_ALIGN.RIGHT)

    output_path = Path(output)
    await asyncio.to_thread(presentation.save, str(output_path))

    logger.info(f"Created PPTX at {output_path}: {total} slides, {pictures} pictures")
    return output_path
