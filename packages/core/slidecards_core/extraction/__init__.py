"""Candidate extraction from PDF and PPTX slide decks."""

from slidecards_core.extraction.containers import (
    ContainerReader,
    ImageResource,
    RawImage,
    open_container,
)
from slidecards_core.extraction.dedup import CandidateDeduplicator
from slidecards_core.extraction.images import (
    RecoveredImage,
    encode_png,
    passes_pdf_filters,
    passes_pptx_filters,
    recover_media,
    recover_raw_image,
    to_rgba,
)
from slidecards_core.extraction.windowing import (
    PageText,
    also_seen_block,
    normalize_whitespace,
    page_label,
)

__all__ = [
    "CandidateDeduplicator",
    "ContainerReader",
    "ImageResource",
    "PageText",
    "RawImage",
    "RecoveredImage",
    "also_seen_block",
    "encode_png",
    "normalize_whitespace",
    "open_container",
    "page_label",
    "passes_pdf_filters",
    "passes_pptx_filters",
    "recover_media",
    "recover_raw_image",
    "to_rgba",
]
