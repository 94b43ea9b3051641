"""Shared fixtures: in-memory PDF and PPTX decks."""

import zipfile
import zlib
from dataclasses import dataclass, field
from io import BytesIO

import pytest
from PIL import Image

NS_DECL = (
    'xmlns:a="http://schemas.openxmlformats.org/drawingml/2006/main" '
    'xmlns:r="http://schemas.openxmlformats.org/officeDocument/2006/relationships" '
    'xmlns:p="http://schemas.openxmlformats.org/presentationml/2006/main" '
    'xmlns:v="urn:schemas-microsoft-com:vml" '
    'xmlns:o="urn:schemas-microsoft-com:office:office"'
)
IMAGE_REL_TYPE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/image"


def make_png(width: int, height: int, color: tuple[int, int, int] = (200, 30, 30)) -> bytes:
    """Encode a solid-colour PNG."""
    buffer = BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


# --- PPTX ---------------------------------------------------------------


@dataclass
class SlideSpec:
    """One slide of a generated PPTX.

    ``images`` lists (relationship id, target) pairs painted with ``a:blip``;
    ``vml_images`` uses legacy ``v:imagedata``. ``rels=False`` omits the
    relationships part entirely.
    """

    number: int
    text: str = ""
    images: list[tuple[str, str]] = field(default_factory=list)
    vml_images: list[tuple[str, str]] = field(default_factory=list)
    rels: bool = True
    raw_xml: bytes | None = None


def _slide_xml(slide: SlideSpec) -> bytes:
    if slide.raw_xml is not None:
        return slide.raw_xml
    shapes = []
    for run in slide.text.split("|"):
        if run:
            shapes.append(
                f"<p:sp><p:txBody><a:p><a:r><a:t>{run}</a:t></a:r></a:p></p:txBody></p:sp>"
            )
    for rel_id, _ in slide.images:
        shapes.append(f'<p:pic><p:blipFill><a:blip r:embed="{rel_id}"/></p:blipFill></p:pic>')
    for rel_id, _ in slide.vml_images:
        shapes.append(f'<v:shape><v:imagedata r:id="{rel_id}"/></v:shape>')
    body = "".join(shapes)
    return (
        f'<?xml version="1.0" encoding="UTF-8"?>'
        f"<p:sld {NS_DECL}><p:cSld><p:spTree>{body}</p:spTree></p:cSld></p:sld>"
    ).encode("utf-8")


def _rels_xml(slide: SlideSpec) -> bytes:
    rels = [
        f'<Relationship Id="{rel_id}" Type="{IMAGE_REL_TYPE}" Target="{target}"/>'
        for rel_id, target in [*slide.images, *slide.vml_images]
    ]
    rels.append(
        '<Relationship Id="rIdLayout" Type="http://schemas.openxmlformats.org/'
        'officeDocument/2006/relationships/slideLayout" Target="../slideLayouts/slideLayout1.xml"/>'
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">'
        + "".join(rels)
        + "</Relationships>"
    ).encode("utf-8")


def build_pptx(slides: list[SlideSpec], media: dict[str, bytes]) -> bytes:
    """Assemble a minimal PPTX package.

    Args:
        slides: Slide specifications (written in the given order)
        media: Part name -> bytes for media files (e.g. ``ppt/media/image1.png``)
    """
    buffer = BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        archive.writestr("[Content_Types].xml", "<Types/>")
        archive.writestr("ppt/presentation.xml", "<presentation/>")
        archive.writestr("ppt/slideLayouts/slideLayout1.xml", "<sldLayout/>")
        for slide in slides:
            archive.writestr(f"ppt/slides/slide{slide.number}.xml", _slide_xml(slide))
            if slide.rels:
                archive.writestr(f"ppt/slides/_rels/slide{slide.number}.xml.rels", _rels_xml(slide))
        for name, data in media.items():
            archive.writestr(name, data)
    return buffer.getvalue()


# --- PDF ----------------------------------------------------------------


@dataclass
class PdfImage:
    """An RGB image XObject painted on a generated PDF page."""

    width: int
    height: int
    color: tuple[int, int, int] = (30, 120, 200)
    flate: bool = False

    @property
    def pixels(self) -> bytes:
        return bytes(self.color) * (self.width * self.height)


@dataclass
class PdfPage:
    text: str = ""
    images: list[PdfImage] = field(default_factory=list)


def build_pdf(pages: list[PdfPage]) -> bytes:
    """Assemble a small but valid PDF with text and raw RGB images."""
    objects: list[bytes] = []

    def add(body: bytes) -> int:
        objects.append(body)
        return len(objects)

    def stream(header: str, data: bytes) -> bytes:
        return f"<< {header} /Length {len(data)} >>\nstream\n".encode("latin-1") + data + b"\nendstream"

    add(b"<< /Type /Catalog /Pages 2 0 R >>")
    add(b"")  # page tree, filled in below
    font_id = add(b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>")

    page_ids = []
    for page in pages:
        xobjects = []
        operators = []
        if page.text:
            operators.append(f"BT /F1 12 Tf 72 720 Td ({page.text}) Tj ET")
        for index, image in enumerate(page.images, start=1):
            data = image.pixels
            header = (
                f"/Type /XObject /Subtype /Image /Width {image.width} /Height {image.height} "
                f"/ColorSpace /DeviceRGB /BitsPerComponent 8"
            )
            if image.flate:
                data = zlib.compress(data)
                header += " /Filter /FlateDecode"
            image_id = add(stream(header, data))
            xobjects.append(f"/Im{index} {image_id} 0 R")
            y = 100 + 150 * (index - 1)
            operators.append(f"q {image.width} 0 0 {image.height} 72 {y} cm /Im{index} Do Q")

        content_id = add(stream("", "\n".join(operators).encode("latin-1")))
        resources = f"/Font << /F1 {font_id} 0 R >>"
        if xobjects:
            resources += f" /XObject << {' '.join(xobjects)} >>"
        page_ids.append(
            add(
                (
                    f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
                    f"/Resources << {resources} >> /Contents {content_id} 0 R >>"
                ).encode("latin-1")
            )
        )

    kids = " ".join(f"{pid} 0 R" for pid in page_ids)
    objects[1] = f"<< /Type /Pages /Kids [{kids}] /Count {len(page_ids)} >>".encode("latin-1")

    out = BytesIO()
    out.write(b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(out.tell())
        out.write(f"{number} 0 obj\n".encode("latin-1") + body + b"\nendobj\n")
    xref_offset = out.tell()
    out.write(f"xref\n0 {len(objects) + 1}\n".encode("latin-1"))
    out.write(b"0000000000 65535 f \n")
    for offset in offsets:
        out.write(f"{offset:010d} 00000 n \n".encode("latin-1"))
    out.write(
        f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\nstartxref\n{xref_offset}\n%%EOF\n".encode(
            "latin-1"
        )
    )
    return out.getvalue()


# --- Fixtures -----------------------------------------------------------


@pytest.fixture
def sample_pptx() -> bytes:
    """Three slides stored as slide1, slide2, slide10.

    ``image1`` appears on slide1 and slide10, ``tiny`` on slide2 is below the
    size floor, ``legacy`` on slide2 is referenced through VML.
    """
    return build_pptx(
        [
            SlideSpec(10, "Closing|Scalpel again", images=[("rId2", "../media/image1.png")]),
            SlideSpec(
                1,
                "Surgical   instruments|Scalpel",
                images=[("rId2", "../media/image1.png")],
            ),
            SlideSpec(
                2,
                "Retractor",
                images=[("rId3", "../media/tiny.png")],
                vml_images=[("rId4", "../media/legacy.png")],
            ),
        ],
        {
            "ppt/media/image1.png": make_png(64, 48),
            "ppt/media/tiny.png": make_png(8, 8),
            "ppt/media/legacy.png": make_png(32, 32, (10, 160, 40)),
        },
    )


@pytest.fixture
def sample_pdf() -> bytes:
    """Three pages; the same red image on pages 1 and 3, a blue one on page 2."""
    red = PdfImage(40, 30, (220, 20, 20))
    return build_pdf(
        [
            PdfPage("Scalpel overview", [red]),
            PdfPage("Forceps detail", [PdfImage(50, 50, (20, 20, 220), flate=True), PdfImage(10, 10)]),
            PdfPage("Scalpel recap", [red]),
        ]
    )
