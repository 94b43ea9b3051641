"""Turning container images into candidate image bytes.

PDF rasters arrive as raw pixel buffers and are normalized to RGBA, filtered
by size and shape, then encoded as PNG. PPTX media are already encoded files:
they are size-filtered, optionally downscaled, and kept in their own format
otherwise.
"""

from dataclasses import dataclass
from io import BytesIO
from typing import TYPE_CHECKING

from PIL import Image, UnidentifiedImageError

from slidecards_core.extraction.containers import RawImage
from slidecards_core.utils.logging import get_logger

if TYPE_CHECKING:
    from slidecards_core.graph.config import ExtractionConfig

logger = get_logger(__name__)

PNG_MIME = "image/png"


@dataclass(frozen=True)
class RecoveredImage:
    """An encoded image ready to become a candidate."""

    image_data: bytes
    mime_type: str
    width: int
    height: int


def to_rgba(pixels: bytes, width: int, height: int) -> bytes | None:
    """Normalize a raw pixel buffer to 4 bytes per pixel.

    The layout is inferred from the buffer length alone: ``w*h*4`` is taken
    as RGBA, ``w*h*3`` as RGB, ``w*h`` as greyscale. Opacity is always 255
    for the expanded layouts.

    Returns:
        RGBA bytes, or None for any other length
    """
    count = width * height
    if count <= 0:
        return None
    size = len(pixels)
    if size == count * 4:
        return bytes(pixels)
    if size == count * 3:
        return Image.frombytes("RGB", (width, height), bytes(pixels)).convert("RGBA").tobytes()
    if size == count:
        return Image.frombytes("L", (width, height), bytes(pixels)).convert("RGBA").tobytes()
    return None


def encode_png(rgba: bytes, width: int, height: int) -> bytes:
    """Encode an RGBA buffer as PNG."""
    image = Image.frombytes("RGBA", (width, height), rgba)
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def passes_pdf_filters(width: int, height: int, config: "ExtractionConfig") -> bool:
    """Reject PDF rasters that are too small or too elongated to be content."""
    if width < config.pdf_min_side or height < config.pdf_min_side:
        return False
    if width * height < config.pdf_min_area:
        return False
    aspect = width / height
    return config.pdf_min_aspect <= aspect <= config.pdf_max_aspect


def passes_pptx_filters(width: int, height: int, config: "ExtractionConfig") -> bool:
    """Keep PPTX media whose sides are both at least the configured minimum."""
    return width >= config.pptx_min_side and height >= config.pptx_min_side


def recover_raw_image(raw: RawImage, config: "ExtractionConfig") -> RecoveredImage | None:
    """Filter, normalize and encode a PDF raster.

    Args:
        raw: Raster descriptor from the PDF reader
        config: Extraction thresholds

    Returns:
        The PNG-encoded image, or None when it is filtered out or undecodable
    """
    if not passes_pdf_filters(raw.width, raw.height, config):
        return None
    pixels = raw.pixels()
    if pixels is None:
        return None
    rgba = to_rgba(pixels, raw.width, raw.height)
    if rgba is None:
        logger.debug(
            f"Skipping {raw.width}x{raw.height} image with {len(pixels)} byte buffer"
        )
        return None
    return RecoveredImage(
        image_data=encode_png(rgba, raw.width, raw.height),
        mime_type=PNG_MIME,
        width=raw.width,
        height=raw.height,
    )


def recover_media(data: bytes, config: "ExtractionConfig") -> RecoveredImage | None:
    """Filter and optionally downscale an encoded PPTX media file.

    Formats Pillow cannot rasterize (EMF, WMF, SVG, ...) are dropped.

    Args:
        data: Encoded media bytes
        config: Extraction thresholds

    Returns:
        The image to keep, or None when it is undecodable or too small
    """
    try:
        with Image.open(BytesIO(data)) as image:
            image.load()
            width, height = image.size
            if not passes_pptx_filters(width, height, config):
                return None

            mime_type = Image.MIME.get(image.format or "", "")
            needs_downscale = (
                config.downscale_images
                and max(width, height) > config.max_image_dimension
            )
            if not needs_downscale and mime_type.startswith("image/"):
                return RecoveredImage(data, mime_type, width, height)

            copy = image.copy()
    except Image.DecompressionBombError as e:
        logger.warning(f"Skipping oversized media: {e}")
        return None
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.debug(f"Skipping undecodable media: {e}")
        return None

    if copy.mode not in ("RGB", "RGBA", "L", "LA", "P"):
        copy = copy.convert("RGBA")
    if needs_downscale:
        limit = config.max_image_dimension
        copy.thumbnail((limit, limit), Image.Resampling.LANCZOS)

    buffer = BytesIO()
    copy.save(buffer, format="PNG")
    return RecoveredImage(buffer.getvalue(), PNG_MIME, copy.width, copy.height)
