"""PDF container reader built on pdfplumber.

Each image painted on a page (XObject or inline) becomes a ``RawImage`` whose
pixels are decoded on demand into 1, 3 or 4 bytes per pixel. JPEG and JPEG
2000 streams are decoded through Pillow, everything else is taken from the
filter-decoded stream data.
"""

from collections.abc import Iterator
from io import BytesIO
from typing import Any

import pdfplumber
from pdfminer.pdftypes import resolve1
from PIL import Image

from slidecards_core.errors import ContainerParseError
from slidecards_core.extraction.containers import ContainerReader, RawImage
from slidecards_core.schemas.candidates import DocumentKind
from slidecards_core.utils.logging import get_logger

logger = get_logger(__name__)

_ENCODED_FILTERS = {"DCTDecode", "DCT", "JPXDecode"}
_UNSUPPORTED_FILTERS = {"JBIG2Decode"}
_INDEXED = {"Indexed", "I"}
_COMPONENTS = {"DeviceGray": 1, "G": 1, "DeviceRGB": 3, "RGB": 3, "DeviceCMYK": 4, "CMYK": 4}


def _literal_name(value: Any) -> str:
    """Name of a PDF literal (``/DeviceRGB`` -> ``DeviceRGB``)."""
    name = getattr(value, "name", value)
    if isinstance(name, bytes):
        name = name.decode("latin-1")
    return str(name)


def _filter_names(stream: Any) -> set[str]:
    return {_literal_name(f) for f, _params in stream.get_filters()}


def _colorspace(image_info: dict[str, Any]) -> list[Any]:
    """Flattened colour space array of an image, with references resolved."""
    cs = resolve1(image_info.get("colorspace"))
    if cs is None:
        return []
    if not isinstance(cs, list):
        cs = [cs]
    if len(cs) == 1:
        inner = resolve1(cs[0])
        if isinstance(inner, list):
            cs = inner
    return [resolve1(c) for c in cs]


def _components(colorspace: Any) -> int:
    """Number of colour components of a base colour space."""
    colorspace = resolve1(colorspace)
    if isinstance(colorspace, list) and colorspace:
        if _literal_name(resolve1(colorspace[0])) == "ICCBased" and len(colorspace) > 1:
            profile = resolve1(colorspace[1])
            return int(resolve1(profile.get("N", 3)))
        return 3
    return _COMPONENTS.get(_literal_name(colorspace), 3)


def _apply_palette(data: bytes, width: int, height: int, colorspace: list[Any]) -> bytes | None:
    """Expand 8-bit palette indices to RGB."""
    if len(colorspace) < 4 or len(data) < width * height:
        return None
    lookup = resolve1(colorspace[3])
    if hasattr(lookup, "get_data"):
        lookup = lookup.get_data()
    if isinstance(lookup, str):
        lookup = lookup.encode("latin-1")
    if not isinstance(lookup, bytes):
        return None

    components = _components(colorspace[1])
    if components == 1:
        palette = b"".join(bytes((v, v, v)) for v in lookup)
    elif components == 3:
        palette = lookup
    else:
        return None

    indices = Image.frombytes("P", (width, height), data[: width * height])
    indices.putpalette(palette[: 256 * 3])
    return indices.convert("RGB").tobytes()


def decode_image_pixels(image_info: dict[str, Any]) -> bytes | None:
    """Decode a pdfplumber image object into a raw pixel buffer.

    Args:
        image_info: One entry of ``page.images``

    Returns:
        Pixel bytes in greyscale, RGB or RGBA layout, or None when the image
        uses an encoding that cannot be decoded
    """
    stream = image_info.get("stream")
    if stream is None:
        return None
    width, height = image_info["srcsize"]
    filters = _filter_names(stream)

    if filters & _UNSUPPORTED_FILTERS:
        logger.debug(f"Skipping image with unsupported filter {sorted(filters)}")
        return None

    try:
        data = stream.get_data()
    except Exception as e:
        logger.debug(f"Could not decode image stream: {e}")
        return None

    if filters & _ENCODED_FILTERS:
        try:
            with Image.open(BytesIO(data)) as encoded:
                rgba = encoded.convert("RGBA")
        except Exception as e:
            logger.debug(f"Could not decode embedded JPEG: {e}")
            return None
        if rgba.size != (width, height):
            rgba = rgba.resize((width, height))
        return rgba.tobytes()

    colorspace = _colorspace(image_info)
    space_name = _literal_name(colorspace[0]) if colorspace else ""
    bits = image_info.get("bits") or 8

    if bits == 1 or "CCITTFaxDecode" in filters or "CCF" in filters:
        row_bytes = (width + 7) // 8
        if len(data) < row_bytes * height:
            return None
        return Image.frombytes("1", (width, height), data).convert("L").tobytes()

    if bits == 16:
        data = data[::2]

    if space_name in _INDEXED:
        return _apply_palette(data, width, height, colorspace)

    if _components(space_name) == 4 and len(data) >= width * height * 4:
        cmyk = Image.frombytes("CMYK", (width, height), data[: width * height * 4])
        return cmyk.convert("RGB").tobytes()

    return data


class PdfContainerReader(ContainerReader):
    """Reads page text and painted images of a PDF."""

    kind = DocumentKind.PDF

    def __init__(self, data: bytes):
        try:
            self._pdf = pdfplumber.open(BytesIO(data))
        except Exception as e:
            raise ContainerParseError(f"Failed to parse PDF file: {e}") from e
        try:
            self._pages = list(self._pdf.pages)
        except Exception as e:
            self._pdf.close()
            raise ContainerParseError(f"Failed to read PDF page tree: {e}") from e

    @property
    def page_count(self) -> int:
        return len(self._pages)

    def _page(self, page_number: int) -> Any:
        if not 1 <= page_number <= len(self._pages):
            raise IndexError(f"Page {page_number} out of range 1..{len(self._pages)}")
        return self._pages[page_number - 1]

    def page_text(self, page_number: int) -> str:
        page = self._page(page_number)
        try:
            return page.extract_text() or ""
        except Exception as e:
            raise ContainerParseError(f"Failed to read text of page {page_number}: {e}") from e

    def page_images(self, page_number: int) -> Iterator[RawImage]:
        page = self._page(page_number)
        try:
            images = page.images or []
        except Exception as e:
            raise ContainerParseError(f"Failed to read images of page {page_number}: {e}") from e

        for image_info in images:
            if image_info.get("imagemask"):
                # Stencil masks are painted with the fill colour, not as images
                continue
            srcsize = image_info.get("srcsize")
            if not srcsize or image_info.get("stream") is None:
                continue
            width, height = (int(v) for v in srcsize)
            yield RawImage(
                width=width,
                height=height,
                loader=lambda info=image_info: decode_image_pixels(info),
                name=str(image_info.get("name") or ""),
            )

    def close(self) -> None:
        self._pdf.close()
