"""PPTX container reader built on zipfile and ElementTree.

Slides are the ``ppt/slides/slideN.xml`` parts ordered by ``N``. Image
references come from three scans of each slide, in this order: DrawingML
``a:blip`` embeds, legacy VML ``v:imagedata`` references, then any element
carrying an ``r:embed`` attribute. The last scan repeats most of the first,
so callers must deduplicate by resolved path before decoding.
"""

import posixpath
import re
import xml.etree.ElementTree as ET
import zipfile
from collections.abc import Iterator
from io import BytesIO

from slidecards_core.errors import ContainerParseError
from slidecards_core.extraction.containers import ContainerReader, ImageResource
from slidecards_core.schemas.candidates import DocumentKind
from slidecards_core.utils.logging import get_logger

logger = get_logger(__name__)

SLIDE_PART = re.compile(r"^ppt/slides/slide(\d+)\.xml$")
SLIDES_DIR = "ppt/slides"

NS = {
    "a": "http://schemas.openxmlformats.org/drawingml/2006/main",
    "r": "http://schemas.openxmlformats.org/officeDocument/2006/relationships",
    "v": "urn:schemas-microsoft-com:vml",
    "o": "urn:schemas-microsoft-com:office:office",
    "rels": "http://schemas.openxmlformats.org/package/2006/relationships",
}

_R_EMBED = f"{{{NS['r']}}}embed"
_R_ID = f"{{{NS['r']}}}id"
_O_RELID = f"{{{NS['o']}}}relid"
_A_TEXT = f"{{{NS['a']}}}t"
_A_PARAGRAPH = f"{{{NS['a']}}}p"
_A_BREAK = f"{{{NS['a']}}}br"


def slide_parts(names: list[str]) -> list[str]:
    """Slide part names sorted by their numeric suffix."""
    numbered = []
    for name in names:
        match = SLIDE_PART.match(name)
        if match:
            numbered.append((int(match.group(1)), name))
    return [name for _, name in sorted(numbered)]


def rels_part(slide_part: str) -> str:
    """Relationships part of a slide (``slide3.xml`` -> ``_rels/slide3.xml.rels``)."""
    directory, filename = posixpath.split(slide_part)
    return f"{directory}/_rels/{filename}.rels"


class PptxContainerReader(ContainerReader):
    """Reads slide text and image references of a PowerPoint package."""

    kind = DocumentKind.PPTX

    def __init__(self, data: bytes):
        try:
            self._zip = zipfile.ZipFile(BytesIO(data))
            names = self._zip.namelist()
        except (zipfile.BadZipFile, OSError, ValueError) as e:
            raise ContainerParseError(f"Failed to parse PPTX file: {e}") from e
        self._names = set(names)
        self._slides = slide_parts(names)
        self._roots: dict[int, ET.Element] = {}

    @property
    def page_count(self) -> int:
        return len(self._slides)

    def _read(self, name: str) -> bytes:
        try:
            return self._zip.read(name)
        except (zipfile.BadZipFile, OSError, ValueError) as e:
            raise ContainerParseError(f"Failed to read {name}: {e}") from e

    def _slide_root(self, page_number: int) -> ET.Element:
        if not 1 <= page_number <= len(self._slides):
            raise IndexError(f"Slide {page_number} out of range 1..{len(self._slides)}")
        root = self._roots.get(page_number)
        if root is None:
            part = self._slides[page_number - 1]
            try:
                root = ET.fromstring(self._read(part))
            except ET.ParseError as e:
                raise ContainerParseError(f"Malformed slide XML in {part}: {e}") from e
            self._roots[page_number] = root
        return root

    def page_text(self, page_number: int) -> str:
        """Text of a slide, one space between paragraphs.

        Runs of a paragraph are concatenated as-is: a formatting change in the
        middle of a word splits it into two runs.
        """
        root = self._slide_root(page_number)
        paragraphs = []
        for paragraph in root.iter(_A_PARAGRAPH):
            parts = []
            for node in paragraph.iter():
                if node.tag == _A_TEXT and node.text:
                    parts.append(node.text)
                elif node.tag == _A_BREAK:
                    parts.append(" ")
            text = "".join(parts).strip()
            if text:
                paragraphs.append(text)
        return " ".join(paragraphs)

    def image_relationships(self, page_number: int) -> dict[str, str]:
        """Map of relationship id to target for the image relationships of a slide.

        A slide without a relationships part has no images.
        """
        part = rels_part(self._slides[page_number - 1])
        if part not in self._names:
            return {}
        try:
            root = ET.fromstring(self._read(part))
        except ET.ParseError as e:
            logger.warning(f"Ignoring malformed relationships part {part}: {e}")
            return {}

        relationships: dict[str, str] = {}
        for rel in root.iter(f"{{{NS['rels']}}}Relationship"):
            rel_id = rel.get("Id")
            target = rel.get("Target")
            if rel_id and target and "image" in (rel.get("Type") or ""):
                relationships[rel_id] = target
        return relationships

    def resolve_target(self, target: str) -> str | None:
        """Resolve a relationship target to a part name inside the package.

        Targets are relative to the slides directory; when the normalized path
        is missing, fall back to any ``media/`` entry with the same file name.
        """
        if target.startswith("/"):
            path = target.lstrip("/")
        else:
            path = posixpath.normpath(posixpath.join(SLIDES_DIR, target))
        if path in self._names:
            return path

        suffix = "media/" + posixpath.basename(target)
        for name in sorted(self._names):
            if name.endswith(suffix):
                return name
        return None

    def _embed_ids(self, root: ET.Element) -> Iterator[str]:
        for blip in root.iterfind(".//a:blip", NS):
            embed = blip.get(_R_EMBED)
            if embed:
                yield embed
        for imagedata in root.iterfind(".//v:imagedata", NS):
            ref = imagedata.get(_R_ID) or imagedata.get(_O_RELID)
            if ref:
                yield ref
        for element in root.iter():
            embed = element.get(_R_EMBED)
            if embed:
                yield embed

    def page_images(self, page_number: int) -> Iterator[ImageResource]:
        root = self._slide_root(page_number)
        relationships = self.image_relationships(page_number)
        if not relationships:
            return

        for embed_id in self._embed_ids(root):
            target = relationships.get(embed_id)
            if target is None:
                continue
            path = self.resolve_target(target)
            if path is None:
                logger.debug(f"Slide {page_number}: image target {target} not in package")
                continue
            yield ImageResource(embed_id=embed_id, resource_path=path)

    def read_resource(self, resource_path: str) -> bytes | None:
        if resource_path not in self._names:
            return None
        return self._read(resource_path)

    def close(self) -> None:
        self._zip.close()
