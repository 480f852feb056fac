"""REPL session state: the loaded document, output format, and variables"""

import logging
from pathlib import Path
from typing import Optional

from mdq.config import Settings, log_event
from mdq.core.errors import MdqError
from mdq.core.models import Document
from mdq.core.parse import parse_document


class ReplSession:
    """Holds the current document (and where it came from) between REPL commands."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.output_format = settings.output_format
        self.content: Optional[str] = None
        self.path: Optional[str] = None
        self.document: Optional[Document] = None
        self.variables: dict[str, str] = {}

    def load_text(self, content: str, path: Optional[str] = None) -> Document:
        """Parse content and make it the current document; state is unchanged on failure."""
        document = parse_document(content, self.settings.parser_config)
        self.content, self.path, self.document = content, path, document
        log_event(logging.INFO, "repl_document_loaded", path=path or "stdin", blocks=len(document.blocks))
        return document

    def load_file(self, path: str) -> Document:
        content = Path(path).read_text(encoding="utf-8")
        return self.load_text(content, path)

    def reload(self) -> Document:
        if self.path is None:
            raise MdqError("No file path available for reloading")
        return self.load_file(self.path)

    def clear(self) -> None:
        self.content = self.path = self.document = None

    def has_document(self) -> bool:
        return self.document is not None

    def info(self) -> str:
        if self.document is None:
            return "No document loaded"
        source = self.path or "stdin"
        return f"Document: {source} ({len(self.content)} bytes, {len(self.document.blocks)} blocks)"
