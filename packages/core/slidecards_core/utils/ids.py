"""Identifier helpers for candidates and cards."""

import hashlib
import re
import time
from enum import Enum
from typing import Union

# pdf-<page>-<w>x<h>-<hash> / pptx-<page>-<embed>-<hash>
_PAGE_FROM_ID = re.compile(r"^(?:pdf|pptx|page)-(\d+)-")


def content_hash(content: Union[str, bytes], length: int | None = None) -> str:
    """Generate a SHA-256 hash of content.

    Args:
        content: String or bytes to hash
        length: Optional number of hex characters to keep

    Returns:
        Hex-encoded hash string
    """
    if isinstance(content, str):
        content = content.encode("utf-8")
    digest = hashlib.sha256(content).hexdigest()
    return digest[:length] if length else digest


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def candidate_id(
    kind: Union[str, Enum],
    page_number: int,
    discriminator: str,
    key: Union[str, bytes],
) -> str:
    """Build the identifier of one image occurrence on one page.

    The page number is always the second dash-separated field so it can be
    recovered later with ``page_index_from_id``.

    Args:
        kind: Source document kind ("pdf", "pptx" or "page")
        page_number: 1-based page/slide number
        discriminator: Short per-format detail (pixel size or embed id)
        key: Value hashed into the suffix (image bytes or resource path)

    Returns:
        Candidate identifier
    """
    prefix = kind.value if isinstance(kind, Enum) else kind
    safe = re.sub(r"[^A-Za-z0-9]", "", discriminator) or "img"
    return f"{prefix}-{page_number}-{safe}-{content_hash(key, 10)}"


def page_index_from_id(identifier: str) -> int:
    """Recover the 1-based page number encoded in a candidate id.

    Args:
        identifier: Candidate or card id

    Returns:
        Page number, or 0 when the id does not follow the candidate convention
    """
    match = _PAGE_FROM_ID.match(identifier)
    return int(match.group(1)) if match else 0


def manual_card_id() -> str:
    """Identifier for a card authored by hand."""
    return f"manual-{now_ms()}-{content_hash(str(time.perf_counter_ns()), 6)}"
