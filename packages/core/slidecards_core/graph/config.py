"""Configuration for the extraction graph and the generation pipeline.

Image filtering is intentionally permissive: it only drops bullets, rules and
hairlines, leaving the final accept/reject decision to human review and to the
provider's own validity judgment.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ExtractionConfig:
    """Thresholds and options for image recovery.

    The PDF defaults reject an image when any side is under 20 px, when its
    pixel area is under 200, or when its aspect ratio falls outside
    [0.02, 50]. Setting ``pdf_min_side=30``, ``pdf_min_area=0`` and widening
    the aspect bounds reproduces the plain 30 px floor.
    """

    # PDF image filters
    pdf_min_side: int = 20
    pdf_min_area: int = 200
    pdf_min_aspect: float = 0.02
    pdf_max_aspect: float = 50.0

    # PPTX image filters: keep only images with both sides >= pptx_min_side
    pptx_min_side: int = 16

    # Downscale large PPTX media (lossless PNG re-encode)
    downscale_images: bool = True
    max_image_dimension: int = 1024

    # Cross-page deduplication
    deduplicate: bool = True

    # Render every PDF page as a candidate when no embedded image survives
    render_pages_when_empty: bool = False
    render_dpi: int = 150


@dataclass(frozen=True)
class GenerationConfig:
    """Configuration for the flashcard generation pipeline.

    Cards are sent one at a time by default to stay under provider rate
    limits.
    """

    batch_size: int = 1
    target_language: str = "French"

    # Primary provider retry policy: 2s, 4s, 8s
    max_retries: int = 3
    retry_base_delay: float = 2.0

    # Request timeout for a single provider call (seconds)
    request_timeout: float = 120.0
