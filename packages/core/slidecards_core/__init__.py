"""slidecards-core: turn slide decks into image flashcards.

The package extracts embedded images from PDF and PPTX decks together with the
text of the surrounding slides, asks a vision model to name and describe each
approved image, and schedules the resulting cards for spaced repetition.

    >>> from slidecards_core import DeckLibrary, GenerationPipeline, create_provider
    >>> library = DeckLibrary()
    >>> outcome = await library.import_document(data, filename="lecture.pptx")
    >>> library.stage_candidates(outcome.deck.id, outcome.result.candidates, selected_ids)
    >>> pipeline = GenerationPipeline(library, create_provider(ai_config))
    >>> report = await pipeline.run(outcome.deck.id)
"""

from slidecards_core.errors import (
    BackupFormatError,
    ContainerParseError,
    DeckNotFoundError,
    ExtractionError,
    ProviderAuthError,
    ProviderError,
    ProviderMalformedResponseError,
    ProviderTransientError,
    SlidecardsError,
    UnsupportedDocumentError,
)
from slidecards_core.generation import GenerationPipeline, GenerationReport
from slidecards_core.graph import (
    ExtractionConfig,
    GenerationConfig,
    build_extraction_graph,
    extract_candidates,
)
from slidecards_core.library import DeckLibrary, ImportOutcome
from slidecards_core.model_adapters import ContentProvider, create_provider
from slidecards_core.schemas import (
    CardContent,
    CardStatus,
    Deck,
    DocumentKind,
    ExtractionCandidate,
    ExtractionResult,
    FlashcardRecord,
    SrsState,
)
from slidecards_core.srs import ReviewQuality, schedule
from slidecards_core.storage import DeckStore, JsonFileDeckStore

__version__ = "0.1.0"

__all__ = [
    # Extraction
    "ExtractionConfig",
    "build_extraction_graph",
    "extract_candidates",
    # Generation
    "ContentProvider",
    "GenerationConfig",
    "GenerationPipeline",
    "GenerationReport",
    "create_provider",
    # Decks and review
    "DeckLibrary",
    "DeckStore",
    "ImportOutcome",
    "JsonFileDeckStore",
    "ReviewQuality",
    "schedule",
    # Schemas
    "CardContent",
    "CardStatus",
    "Deck",
    "DocumentKind",
    "ExtractionCandidate",
    "ExtractionResult",
    "FlashcardRecord",
    "SrsState",
    # Errors
    "BackupFormatError",
    "ContainerParseError",
    "DeckNotFoundError",
    "ExtractionError",
    "ProviderAuthError",
    "ProviderError",
    "ProviderMalformedResponseError",
    "ProviderTransientError",
    "SlidecardsError",
    "UnsupportedDocumentError",
]
