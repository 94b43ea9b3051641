"""Extraction candidate schemas.

A candidate is an embedded image recovered from a slide deck, together with
the text of the slides around it. Candidates are reviewed by the user before
any of them is turned into a flashcard.
"""

import base64
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class DocumentKind(str, Enum):
    """Supported slide-deck container formats."""

    PDF = "pdf"
    PPTX = "pptx"


class ExtractionCandidate(BaseModel):
    """An extracted image not yet approved for flashcard generation."""

    id: str = Field(..., description="Unique per page occurrence before dedup")
    image_data: bytes = Field(..., description="Encoded image bytes")
    mime_type: str = Field("image/png", description="MIME type of image_data")
    page_index: int = Field(..., ge=0, description="1-based page/slide number")
    context_text: str = Field("", description="Text of the surrounding slides")

    model_config = ConfigDict(
        frozen=True,
        ser_json_bytes="base64",
        val_json_bytes="base64",
    )

    @property
    def data_url(self) -> str:
        """The image as a ``data:`` URL."""
        encoded = base64.b64encode(self.image_data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"

    def with_context(self, context_text: str) -> "ExtractionCandidate":
        """Return a copy carrying a different context string."""
        return self.model_copy(update={"context_text": context_text})


class ExtractionResult(BaseModel):
    """Outcome of one extraction run over a document.

    An empty ``candidates`` list is a normal outcome, not an error: the caller
    is expected to roll back whatever it created speculatively.
    """

    kind: DocumentKind
    page_count: int = 0
    candidates: list[ExtractionCandidate] = Field(default_factory=list)

    @property
    def has_candidates(self) -> bool:
        """True when at least one image survived filtering."""
        return bool(self.candidates)
