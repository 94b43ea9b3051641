"""Export formats for flashcards and source documents."""

from slidecards_core.exporters.apkg import export_apkg
from slidecards_core.exporters.pdf_to_pptx import export_pdf_to_pptx
from slidecards_core.exporters.tsv import export_tsv

__all__ = ["export_tsv", "export_apkg", "export_pdf_to_pptx"]
