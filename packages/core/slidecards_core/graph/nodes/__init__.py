"""Extraction pipeline nodes.

Nodes:
    - ingest: document kind detection and container validation
    - collect_text: per-page text, read before any image
    - recover_images: image recovery, filtering and deduplication
    - render: optional page rasterization when no image survives
"""

from slidecards_core.graph.nodes import collect_text, ingest, recover_images, render

__all__ = [
    "collect_text",
    "ingest",
    "recover_images",
    "render",
]
