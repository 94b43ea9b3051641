"""Container reader interface shared by the PDF and PPTX readers."""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from types import TracebackType

from slidecards_core.schemas.candidates import DocumentKind


@dataclass(frozen=True)
class RawImage:
    """A raster painted on a PDF page.

    Pixels are decoded lazily so that size filters can run first.
    """

    width: int
    height: int
    loader: Callable[[], bytes | None] = field(repr=False, compare=False)
    name: str = ""

    @classmethod
    def from_pixels(cls, width: int, height: int, pixels: bytes, name: str = "") -> "RawImage":
        """Wrap an already-decoded pixel buffer."""
        return cls(width=width, height=height, loader=lambda: pixels, name=name)

    def pixels(self) -> bytes | None:
        """Decode and return the raw pixel buffer (None when undecodable)."""
        return self.loader()


@dataclass(frozen=True)
class ImageResource:
    """A shared media part referenced from a PPTX slide."""

    embed_id: str
    resource_path: str


class ContainerReader(ABC):
    """Ordered access to the pages of an opened document."""

    kind: DocumentKind

    @property
    @abstractmethod
    def page_count(self) -> int:
        """Number of pages/slides."""

    @abstractmethod
    def page_text(self, page_number: int) -> str:
        """Plain text of a 1-based page."""

    @abstractmethod
    def page_images(self, page_number: int) -> Iterator[RawImage | ImageResource]:
        """Image descriptors of a 1-based page, in paint/document order."""

    def read_resource(self, resource_path: str) -> bytes | None:
        """Bytes of a shared resource (PPTX only)."""
        raise NotImplementedError(f"{type(self).__name__} has no shared resources")

    def close(self) -> None:
        """Release the underlying container."""

    def __enter__(self) -> "ContainerReader":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def open_container(data: bytes, kind: DocumentKind) -> ContainerReader:
    """Open a document with the reader for its kind.

    Args:
        data: Raw document bytes
        kind: Detected document kind

    Returns:
        An open container reader (use as a context manager)

    Raises:
        ContainerParseError: If the container cannot be parsed
    """
    if kind == DocumentKind.PDF:
        from slidecards_core.extraction.pdf_reader import PdfContainerReader

        return PdfContainerReader(data)

    from slidecards_core.extraction.pptx_reader import PptxContainerReader

    return PptxContainerReader(data)
