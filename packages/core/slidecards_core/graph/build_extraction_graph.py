"""Build the candidate extraction graph.

Pipeline Flow:
    ingest -> collect_text -> recover_images -> (output)
                                    |
                                    +-- no candidates, PDF, fallback on --> render -> (output)

Every page's text is collected before any image is looked at, since each
image's context window includes the following page. Failures are raised out
of the graph: an unreadable document aborts the whole extraction.
"""

from typing import Any, TypedDict

from langgraph.graph import END, StateGraph

from slidecards_core.extraction.windowing import PageText
from slidecards_core.graph.config import ExtractionConfig
from slidecards_core.graph.nodes import collect_text, ingest, recover_images, render
from slidecards_core.graph.nodes.recover_images import ProgressCallback
from slidecards_core.schemas.candidates import (
    DocumentKind,
    ExtractionCandidate,
    ExtractionResult,
)
from slidecards_core.utils.logging import get_logger, log_exceptions

logger = get_logger(__name__)


class ExtractionState(TypedDict, total=False):
    """State passed through the extraction pipeline."""

    # Input
    document_data: bytes
    filename: str | None
    kind: DocumentKind | None

    # Text pass
    page_texts: PageText
    page_count: int

    # Image pass
    candidates: list[ExtractionCandidate]

    # Metadata
    current_step: str
    progress: int


def _route_after_recovery(config: ExtractionConfig):
    def route(state: dict[str, Any]) -> str:
        if (
            config.render_pages_when_empty
            and not state.get("candidates")
            and state.get("kind") == DocumentKind.PDF
        ):
            return "render"
        return "done"

    return route


def build_extraction_graph(
    config: ExtractionConfig | None = None,
    on_progress: ProgressCallback | None = None,
):
    """Build the extraction pipeline.

    Args:
        config: Extraction thresholds and options
        on_progress: Optional callback invoked with (current page, total pages)

    Returns:
        Compiled StateGraph ready for invocation

    Example:
        >>> graph = build_extraction_graph()
        >>> state = await graph.ainvoke({"document_data": data, "filename": "deck.pptx"})
        >>> print(len(state["candidates"]))
    """
    resolved_config = config or ExtractionConfig()

    graph = StateGraph(ExtractionState)

    graph.add_node("ingest", ingest.ingest_node)
    graph.add_node("collect_text", collect_text.collect_text_node)
    graph.add_node(
        "recover_images",
        recover_images.create_recover_images_node(resolved_config, on_progress),
    )
    graph.add_node("render", render.create_render_node(resolved_config))

    graph.set_entry_point("ingest")
    graph.add_edge("ingest", "collect_text")
    graph.add_edge("collect_text", "recover_images")
    graph.add_conditional_edges(
        "recover_images",
        _route_after_recovery(resolved_config),
        {"render": "render", "done": END},
    )
    graph.add_edge("render", END)

    return graph.compile()


@log_exceptions(logger)
async def extract_candidates(
    data: bytes,
    filename: str | None = None,
    kind: DocumentKind | None = None,
    config: ExtractionConfig | None = None,
    on_progress: ProgressCallback | None = None,
) -> ExtractionResult:
    """Extract image candidates with their slide context from a document.

    Args:
        data: Raw PDF or PPTX bytes
        filename: Optional file name used for kind detection
        kind: Explicit document kind, skipping detection
        config: Extraction thresholds and options
        on_progress: Optional callback invoked with (current page, total pages)

    Returns:
        Extraction result; ``has_candidates`` is False when nothing survived

    Raises:
        UnsupportedDocumentError: If the document is neither PDF nor PPTX
        ContainerParseError: If the container is unreadable
    """
    graph = build_extraction_graph(config, on_progress)
    state = await graph.ainvoke(
        {"document_data": data, "filename": filename, "kind": kind}
    )
    result = ExtractionResult(
        kind=state["kind"],
        page_count=state.get("page_count", 0),
        candidates=state.get("candidates", []),
    )
    logger.info(
        f"Extraction finished: {len(result.candidates)} candidates from "
        f"{result.page_count} {result.kind.value} pages"
    )
    return result
