"""LangGraph pipeline components.

    - build_extraction_graph: document -> deduplicated image candidates
    - extract_candidates: one-call wrapper returning an ExtractionResult
"""

from slidecards_core.graph.build_extraction_graph import (
    ExtractionState,
    build_extraction_graph,
    extract_candidates,
)
from slidecards_core.graph.config import ExtractionConfig, GenerationConfig

__all__ = [
    # Configuration
    "ExtractionConfig",
    "GenerationConfig",
    # Extraction pipeline
    "ExtractionState",
    "build_extraction_graph",
    "extract_candidates",
]
