"""Flashcard schemas."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from slidecards_core.utils.ids import now_ms

DEFAULT_EASE = 2.5
ERROR_CARD_NAME = "Error"


class CardStatus(str, Enum):
    """Generation status of a flashcard."""

    PENDING = "pending"
    GENERATING = "generating"
    COMPLETED = "completed"
    ERROR = "error"


class SrsState(BaseModel):
    """Spaced-repetition scheduling state of a card."""

    interval: int = Field(0, ge=0, description="Current interval in days")
    ease: float = Field(DEFAULT_EASE, description="Ease factor")
    reps: int = Field(0, ge=0, description="Successful repetitions in a row")
    next_review_at: int = Field(
        default_factory=now_ms, description="Next due time (epoch milliseconds)"
    )

    model_config = ConfigDict(frozen=True)

    def is_due(self, now: int) -> bool:
        """Check whether the card should be reviewed at ``now``."""
        return self.next_review_at <= now


class FlashcardRecord(BaseModel):
    """A flashcard built from an approved candidate or written by hand."""

    id: str
    image_id: str
    image_data: bytes = b""
    mime_type: str = "image/png"
    name: str = ""
    description: str = ""
    status: CardStatus = CardStatus.PENDING
    context_text: str = ""
    srs: SrsState = Field(default_factory=SrsState)

    model_config = ConfigDict(
        frozen=True,
        ser_json_bytes="base64",
        val_json_bytes="base64",
    )

    @property
    def normalized_name(self) -> str:
        """Name used for duplicate detection."""
        return self.name.strip().lower()


class CardContent(BaseModel):
    """What a content provider says about one image."""

    name: str = ""
    description: str = ""
    is_valid: bool = Field(True, alias="isValid")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def failure(cls, description: str) -> "CardContent":
        """Sentinel result shown to the user as a failed, retryable card."""
        return cls(name=ERROR_CARD_NAME, description=description, is_valid=True)

    @property
    def is_failure(self) -> bool:
        """True for the retry-exhausted sentinel."""
        return self.name == ERROR_CARD_NAME
