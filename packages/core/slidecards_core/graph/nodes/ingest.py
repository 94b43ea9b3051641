"""Ingest node: detect the document kind and validate the container."""

from typing import Any

from slidecards_core.errors import UnsupportedDocumentError
from slidecards_core.schemas.candidates import DocumentKind
from slidecards_core.utils.logging import get_logger
from slidecards_core.utils.pdf import (
    detect_document_kind,
    get_pdf_info,
    validate_pdf,
    validate_pptx,
)

logger = get_logger(__name__)


def ingest_node(state: dict[str, Any]) -> dict[str, Any]:
    """Validate the uploaded bytes and settle the document kind.

    Args:
        state: Pipeline state with document_data and optional filename/kind

    Returns:
        Updated state with kind

    Raises:
        UnsupportedDocumentError: If no data was given or the format is unknown
        ContainerParseError: If the container fails validation
    """
    data = state.get("document_data")
    filename = state.get("filename")

    if not data:
        raise UnsupportedDocumentError("No document data provided")

    kind = state.get("kind") or detect_document_kind(data, filename)
    kind = DocumentKind(kind)

    logger.info(f"Ingesting {kind.value} document (filename={filename}, {len(data)} bytes)")

    if kind == DocumentKind.PDF:
        validate_pdf(data)
        pdf_info = get_pdf_info(data)
        logger.info(
            f"PDF validated: version={pdf_info.get('version')}, size={pdf_info.get('size_bytes')} bytes"
        )
    else:
        validate_pptx(data)

    return {
        **state,
        "kind": kind,
        "current_step": "ingest",
        "progress": 5,
    }
