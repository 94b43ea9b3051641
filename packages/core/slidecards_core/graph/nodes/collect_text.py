"""Collect text node: read the text of every page before any image."""

import asyncio
from typing import Any

from slidecards_core.extraction.containers import open_container
from slidecards_core.extraction.windowing import PageText
from slidecards_core.schemas.candidates import DocumentKind
from slidecards_core.utils.logging import get_logger

logger = get_logger(__name__)


def _read_page_texts(data: bytes, kind: DocumentKind) -> PageText:
    with open_container(data, kind) as reader:
        return PageText(reader.page_text(n) for n in range(1, reader.page_count + 1))


async def collect_text_node(state: dict[str, Any]) -> dict[str, Any]:
    """Read and normalize the text of all pages.

    Args:
        state: Pipeline state with document_data and kind

    Returns:
        Updated state with page_texts and page_count
    """
    page_texts = await asyncio.to_thread(
        _read_page_texts, state["document_data"], state["kind"]
    )
    with_text = sum(1 for n in range(1, page_texts.page_count + 1) if page_texts[n])
    logger.info(f"Collected text for {page_texts.page_count} pages ({with_text} non-empty)")

    return {
        **state,
        "page_texts": page_texts,
        "page_count": page_texts.page_count,
        "current_step": "collect_text",
        "progress": 30,
    }
