"""Exception hierarchy for extraction, generation and persistence."""


class SlidecardsError(Exception):
    """Base class for all package errors."""


class ExtractionError(SlidecardsError):
    """Extraction of candidates from a document failed."""


class ContainerParseError(ExtractionError):
    """The PDF or PPTX container could not be read."""


class UnsupportedDocumentError(ExtractionError):
    """The document is neither a PDF nor a PPTX file."""


class ProviderError(SlidecardsError):
    """A content provider call failed."""


class ProviderTransientError(ProviderError):
    """Rate limit, quota or temporary unavailability reported by a provider."""

    def __init__(self, message: str = "Provider temporarily unavailable", retry_after: float | None = None):
        super().__init__(message)
        self.retry_after = retry_after


class ProviderAuthError(ProviderError):
    """The provider rejected the configured credentials."""


class ProviderMalformedResponseError(ProviderError):
    """The provider answered with text that holds no usable JSON object."""


class DeckNotFoundError(SlidecardsError):
    """No deck exists with the requested id."""


class BackupFormatError(SlidecardsError):
    """A backup blob is not a valid backup document."""
