from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Protocol, Union

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from .errors import DocumentLoadError

logger = logging.getLogger(__name__)

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
_EXTRA_BLANK_LINES = re.compile(r"\n{3,}")


class TextSource(Protocol):
    def read_text(self) -> str:
        ...


def clean_text(text: str) -> str:
    """Drop control characters; keep tabs, line breaks and non-ASCII letters."""
    return _CONTROL_CHARS.sub("", text)


class StringTextSource:
    def __init__(self, text: str):
        self.text = text

    def read_text(self) -> str:
        return clean_text(self.text)


class PlainTextSource:
    def __init__(self, path: Union[str, Path], encoding: str = "utf-8"):
        self.path = Path(path)
        self.encoding = encoding

    def read_text(self) -> str:
        logger.info("Reading text file %s", self.path)
        try:
            text = self.path.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as exc:
            raise DocumentLoadError(f"cannot read {self.path}: {exc}") from exc
        logger.info("Read %s characters from %s", len(text), self.path)
        return clean_text(text)


class PdfTextSource:
    """
    Extracts the text layer with pypdf. Pages are joined by blank lines so the
    paragraph-preserving chunker treats page ends as paragraph breaks.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def read_text(self) -> str:
        if not self.path.exists():
            raise DocumentLoadError(f"PDF not found at {self.path}")
        try:
            reader = PdfReader(str(self.path))
            pages = [page.extract_text() or "" for page in reader.pages]
        except (OSError, PyPdfError, ValueError) as exc:
            raise DocumentLoadError(f"cannot parse PDF {self.path}: {exc}") from exc
        text = "\n\n".join(p.strip() for p in pages if p.strip())
        if not text:
            raise DocumentLoadError(f"PDF has no extractable text: {self.path}")
        logger.info("Extracted %s characters from %s pages of %s", len(text), len(pages), self.path)
        return clean_text(_EXTRA_BLANK_LINES.sub("\n\n", text))


def open_source(path: Union[str, Path]) -> TextSource:
    path = Path(path)
    if path.suffix.lower() == ".pdf":
        return PdfTextSource(path)
    return PlainTextSource(path)
