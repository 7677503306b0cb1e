"""Load stage turning uploaded files into ``SourceDocument`` objects."""
from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Callable, List, Optional

from rollbook.normalize.schema import SourceDocument

from .documents import UnsupportedDocumentError, read_docx_text
from .pdf_text import extract_pdf_text
from .sniff_mime import sniff_path
from .spreadsheets import EmptySourceError, read_rows
from .tables import extract_table_rows

LOGGER = logging.getLogger(__name__)


@dataclass
class LoadConfig:
    """Configuration for the load stage."""

    input_paths: List[Path]
    source_names: Optional[List[str]] = None
    """Display names to record instead of the on-disk file names (e.g. original upload names)."""

    prefer_pdf_tables: bool = True


class LoadStage:
    """Read each input path as tabular rows or as free text."""

    def __init__(
        self,
        config: LoadConfig,
        *,
        table_reader: Callable[..., list] = extract_table_rows,
    ) -> None:
        self._config = config
        self._table_reader = table_reader

    def run(self, batch: list[SourceDocument]) -> list[SourceDocument]:
        """Append one loaded document per configured path to ``batch``."""

        documents = list(batch)
        names = self._config.source_names or [path.name for path in self._config.input_paths]
        for path, source_name in zip(self._config.input_paths, names):
            documents.append(self.load(path, source_name))
        return documents

    def load(self, path: Path, source_name: str) -> SourceDocument:
        if not path.exists():
            raise FileNotFoundError(path)
        if path.stat().st_size == 0:
            raise EmptySourceError(f"The file {source_name} is empty")

        sniffed = sniff_path(path)
        document = SourceDocument(
            source_file=source_name,
            kind=sniffed.kind,
            metadata={"source_path": str(path), "mime_type": sniffed.mime_type},
        )

        if sniffed.kind == "spreadsheet":
            document.rows = read_rows(path)
        elif sniffed.kind == "document":
            document.text = read_docx_text(path)
        elif sniffed.kind == "text":
            document.text = path.read_text(encoding="utf-8", errors="replace")
        elif sniffed.kind == "pdf":
            self._load_pdf(path, document)
        else:
            raise UnsupportedDocumentError(
                f"{source_name} is not a supported upload; use a spreadsheet, .docx, PDF or text file"
            )

        if not document.rows and not document.text.strip():
            raise EmptySourceError(f"No readable content found in {source_name}")

        LOGGER.info(
            "Loaded %s as %s (%d rows, %d characters)",
            source_name,
            sniffed.kind,
            len(document.rows),
            len(document.text),
        )
        return document

    def _load_pdf(self, path: Path, document: SourceDocument) -> None:
        if self._config.prefer_pdf_tables:
            rosters = self._table_reader(path)
            rows = [row for roster in rosters for row in roster.rows]
            if rows:
                document.rows = rows
                document.metadata["pdf_tables"] = len(rosters)
                return
        extraction = extract_pdf_text(path)
        document.text = extraction.text
        document.metadata["likely_scanned"] = extraction.likely_scanned
