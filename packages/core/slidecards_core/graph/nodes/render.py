"""Render node: rasterize PDF pages when no embedded image survived."""

import asyncio
from collections.abc import Callable
from io import BytesIO
from typing import Any

from slidecards_core.extraction.windowing import PageText
from slidecards_core.graph.config import ExtractionConfig
from slidecards_core.schemas.candidates import ExtractionCandidate
from slidecards_core.utils.ids import candidate_id
from slidecards_core.utils.logging import get_logger

logger = get_logger(__name__)


def _render_pdf_sync(pdf_data: bytes, dpi: int, max_dimension: int | None) -> list[bytes]:
    """Synchronous PDF rendering - runs in thread pool to avoid blocking.

    Args:
        pdf_data: Raw PDF bytes
        dpi: Rendering DPI
        max_dimension: Optional bound on the longer side of each page image

    Returns:
        PNG bytes of each page, in page order
    """
    from pdf2image import convert_from_bytes

    pages = []
    for image in convert_from_bytes(pdf_data, dpi=dpi, fmt="PNG"):
        if max_dimension:
            image.thumbnail((max_dimension, max_dimension))
        buffer = BytesIO()
        image.save(buffer, format="PNG")
        pages.append(buffer.getvalue())
    return pages


def create_render_node(config: ExtractionConfig) -> Callable[[dict[str, Any]], Any]:
    """Create a render node for the page fallback.

    Args:
        config: Extraction configuration (render_dpi, downscaling)

    Returns:
        Node function (async to avoid blocking the event loop)
    """

    async def render_node(state: dict[str, Any]) -> dict[str, Any]:
        """Turn each rendered page into a candidate.

        Args:
            state: Pipeline state with document_data and page_texts

        Returns:
            Updated state with one candidate per page
        """
        page_texts: PageText = state["page_texts"]
        max_dimension = config.max_image_dimension if config.downscale_images else None

        pages = await asyncio.to_thread(
            _render_pdf_sync, state["document_data"], config.render_dpi, max_dimension
        )

        candidates = [
            ExtractionCandidate(
                id=candidate_id("page", page_number, "render", image_data),
                image_data=image_data,
                mime_type="image/png",
                page_index=page_number,
                context_text=page_texts.window(page_number),
            )
            for page_number, image_data in enumerate(pages, start=1)
            if page_number <= page_texts.page_count
        ]
        logger.info(f"No embedded images found, rendered {len(candidates)} pages instead")

        return {
            **state,
            "candidates": candidates,
            "current_step": "render",
            "progress": 95,
        }

    return render_node
