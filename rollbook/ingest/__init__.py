"""Ingest helper utilities and public API surface."""

from .documents import UnsupportedDocumentError, read_docx_text
from .pdf_text import PdfTextExtraction, extract_pdf_text
from .pipeline import LoadConfig, LoadStage
from .sniff_mime import PageFeature, SniffResult, sniff_path
from .spreadsheets import EmptySourceError, read_rows
from .tables import RosterTable, extract_table_rows

__all__ = [
    "EmptySourceError",
    "LoadConfig",
    "LoadStage",
    "PageFeature",
    "PdfTextExtraction",
    "RosterTable",
    "SniffResult",
    "UnsupportedDocumentError",
    "extract_pdf_text",
    "extract_table_rows",
    "read_docx_text",
    "read_rows",
    "sniff_path",
]
