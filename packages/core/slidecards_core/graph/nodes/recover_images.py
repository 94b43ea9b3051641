"""Recover images node: walk the pages and build deduplicated candidates."""

import asyncio
from collections.abc import Callable
from typing import Any

from slidecards_core.extraction.containers import (
    ContainerReader,
    ImageResource,
    RawImage,
    open_container,
)
from slidecards_core.extraction.dedup import CandidateDeduplicator
from slidecards_core.extraction.images import recover_media, recover_raw_image
from slidecards_core.extraction.windowing import PageText
from slidecards_core.graph.config import ExtractionConfig
from slidecards_core.schemas.candidates import DocumentKind, ExtractionCandidate
from slidecards_core.utils.ids import candidate_id, content_hash
from slidecards_core.utils.logging import get_logger

logger = get_logger(__name__)

ProgressCallback = Callable[[int, int], None]


class _PageScan:
    """Adds the images of one page to the shared deduplicator."""

    def __init__(
        self,
        reader: ContainerReader,
        page_texts: PageText,
        dedup: CandidateDeduplicator,
        config: ExtractionConfig,
    ):
        self.reader = reader
        self.page_texts = page_texts
        self.dedup = dedup
        self.config = config

    def _key(self, key: str, page_number: int) -> str:
        # Without cross-page dedup, repeats only collapse within a page
        return key if self.config.deduplicate else f"{key}@{page_number}"

    def _sighting(self, key: str, page_number: int) -> None:
        self.dedup.merge(key, page_number, self.page_texts[page_number])

    def add_raster(self, raw: RawImage, page_number: int) -> None:
        recovered = recover_raw_image(raw, self.config)
        if recovered is None:
            return
        key = self._key(content_hash(recovered.image_data), page_number)
        if key in self.dedup:
            self._sighting(key, page_number)
            return
        self.dedup.add(
            key,
            ExtractionCandidate(
                id=candidate_id(DocumentKind.PDF, page_number, f"{raw.width}x{raw.height}", key),
                image_data=recovered.image_data,
                mime_type=recovered.mime_type,
                page_index=page_number,
                context_text=self.page_texts.window(page_number),
            ),
        )

    def add_resource(self, resource: ImageResource, page_number: int) -> None:
        key = self._key(resource.resource_path, page_number)
        if self.dedup.is_known(key):
            if key in self.dedup:
                self._sighting(key, page_number)
            return

        data = self.reader.read_resource(resource.resource_path)
        recovered = recover_media(data, self.config) if data else None
        if recovered is None:
            self.dedup.reject(key)
            return
        self.dedup.add(
            key,
            ExtractionCandidate(
                id=candidate_id(DocumentKind.PPTX, page_number, resource.embed_id, key),
                image_data=recovered.image_data,
                mime_type=recovered.mime_type,
                page_index=page_number,
                context_text=self.page_texts.window(page_number),
            ),
        )

    def __call__(self, page_number: int) -> None:
        for image in self.reader.page_images(page_number):
            if isinstance(image, RawImage):
                self.add_raster(image, page_number)
            else:
                self.add_resource(image, page_number)


def create_recover_images_node(
    config: ExtractionConfig,
    on_progress: ProgressCallback | None = None,
) -> Callable[[dict[str, Any]], Any]:
    """Create the image recovery node.

    Args:
        config: Extraction thresholds
        on_progress: Optional callback invoked with (current page, total pages)

    Returns:
        Async node function
    """

    async def recover_images_node(state: dict[str, Any]) -> dict[str, Any]:
        """Scan every page for images in document order.

        Args:
            state: Pipeline state with document_data, kind and page_texts

        Returns:
            Updated state with candidates
        """
        page_texts: PageText = state["page_texts"]
        dedup = CandidateDeduplicator()

        reader = await asyncio.to_thread(open_container, state["document_data"], state["kind"])
        try:
            scan = _PageScan(reader, page_texts, dedup, config)
            total = reader.page_count
            for page_number in range(1, total + 1):
                if on_progress:
                    on_progress(page_number, total)
                await asyncio.to_thread(scan, page_number)
        finally:
            reader.close()

        candidates = dedup.candidates
        logger.info(f"Recovered {len(candidates)} candidate images from {total} pages")

        return {
            **state,
            "candidates": candidates,
            "current_step": "recover_images",
            "progress": 90,
        }

    return recover_images_node
