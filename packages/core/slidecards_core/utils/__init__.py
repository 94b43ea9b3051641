"""Utility functions."""

from slidecards_core.utils.ids import (
    candidate_id,
    content_hash,
    manual_card_id,
    now_ms,
    page_index_from_id,
)
from slidecards_core.utils.logging import get_logger, log_exceptions, set_log_level
from slidecards_core.utils.pdf import (
    PDFValidationError,
    detect_document_kind,
    get_pdf_info,
    validate_pdf,
    validate_pptx,
)
from slidecards_core.utils.retry import with_retry

__all__ = [
    "candidate_id",
    "content_hash",
    "detect_document_kind",
    "get_logger",
    "get_pdf_info",
    "log_exceptions",
    "manual_card_id",
    "now_ms",
    "page_index_from_id",
    "PDFValidationError",
    "set_log_level",
    "validate_pdf",
    "validate_pptx",
    "with_retry",
]
