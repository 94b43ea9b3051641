"""Document validation and kind detection."""

from pathlib import PurePath

from slidecards_core.errors import ContainerParseError, UnsupportedDocumentError
from slidecards_core.schemas.candidates import DocumentKind
from slidecards_core.utils.logging import get_logger

logger = get_logger(__name__)

# PDF magic bytes
PDF_MAGIC = b"%PDF"
# Local file header of a zip archive (PPTX container)
ZIP_MAGIC = b"PK\x03\x04"


class PDFValidationError(ContainerParseError):
    """Error when PDF validation fails."""


def validate_pdf(data: bytes) -> bool:
    """Validate that data is a valid PDF file.

    Args:
        data: Raw file bytes

    Returns:
        True if valid PDF

    Raises:
        PDFValidationError: If validation fails
    """
    if not data:
        raise PDFValidationError("Empty file data")

    if len(data) < 4:
        raise PDFValidationError("File too small to be a valid PDF")

    if not data[:4].startswith(PDF_MAGIC):
        raise PDFValidationError(
            f"Invalid PDF: file does not start with PDF magic bytes. Got: {data[:4]!r}"
        )

    # PDFs should end with %%EOF
    if b"%%EOF" not in data[-1024:]:
        logger.warning("PDF does not contain %%EOF marker near end of file")

    logger.debug(f"PDF validation passed ({len(data)} bytes)")
    return True


def validate_pptx(data: bytes) -> bool:
    """Validate that data looks like a zip container.

    Args:
        data: Raw file bytes

    Returns:
        True if the zip signature is present

    Raises:
        ContainerParseError: If validation fails
    """
    if not data:
        raise ContainerParseError("Empty file data")

    if not data.startswith(ZIP_MAGIC):
        raise ContainerParseError(
            f"Invalid PPTX: file is not a zip container. Got: {data[:4]!r}"
        )
    return True


def detect_document_kind(data: bytes, filename: str | None = None) -> DocumentKind:
    """Work out whether a document is a PDF or a PPTX.

    The file extension wins when present; otherwise the magic bytes decide.

    Args:
        data: Raw file bytes
        filename: Optional original file name

    Returns:
        Detected document kind

    Raises:
        UnsupportedDocumentError: If the document is neither format
    """
    if filename:
        suffix = PurePath(filename).suffix.lower().lstrip(".")
        if suffix == "pdf":
            return DocumentKind.PDF
        if suffix == "pptx":
            return DocumentKind.PPTX
        if suffix:
            raise UnsupportedDocumentError(
                f"Unsupported file type '.{suffix}': please upload a PDF or PPTX file"
            )

    if data.startswith(PDF_MAGIC):
        return DocumentKind.PDF
    if data.startswith(ZIP_MAGIC):
        return DocumentKind.PPTX

    raise UnsupportedDocumentError("Please upload a valid PDF or PPTX file")


def get_pdf_info(data: bytes) -> dict[str, str | int | None]:
    """Extract basic info from PDF data.

    Args:
        data: Raw PDF bytes

    Returns:
        Dict with PDF metadata
    """
    info: dict[str, str | int | None] = {
        "size_bytes": len(data),
        "version": None,
    }

    # Format: %PDF-1.7
    try:
        header = data[:20].decode("latin-1")
        if header.startswith("%PDF-"):
            version_end = header.find("\n")
            if version_end == -1:
                version_end = header.find("\r")
            if version_end == -1:
                version_end = 8
            info["version"] = header[5:version_end].strip()
    except (UnicodeDecodeError, IndexError):
        pass

    logger.debug(f"PDF info: {info}")
    return info
