from __future__ import annotations

import logging
import re
from typing import List, Protocol, Tuple

from .models import Chunk

logger = logging.getLogger(__name__)

_WHITESPACE_RUN = re.compile(r"\s+")
_TRAILING_SPACES = re.compile(r"[ \t]+\n")
_EXTRA_BLANK_LINES = re.compile(r"\n{3,}")
_PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")
# A sentence runs from a non-space character to a terminator followed by
# whitespace (or the end of the paragraph).
_SENTENCE = re.compile(r"\S.*?(?:[.!?]+[\"')\]]*(?=\s|$)|$)", re.S)


def normalize_flat(text: str) -> str:
    return _WHITESPACE_RUN.sub(" ", text).strip()


def normalize_paragraphs(text: str) -> str:
    """
    Normalize line endings and tabs, drop trailing spaces and collapse runs of
    blank lines, keeping single line breaks and paragraph breaks intact.
    """
    normalized = text.replace("\r\n", "\n").replace("\r", "\n").replace("\t", "    ")
    normalized = _TRAILING_SPACES.sub("\n", normalized)
    normalized = _EXTRA_BLANK_LINES.sub("\n\n", normalized)
    return normalized.strip()


class Chunker(Protocol):
    def normalize(self, text: str) -> str:
        ...

    def chunk(self, text: str) -> List[Chunk]:
        ...


class CharacterChunker:
    """
    Character-budgeted chunker. Each chunk fits in `chunk_size` characters and
    the next chunk starts `overlap` characters before the previous break, so
    neighbouring chunks share a short tail/head.
    """

    def __init__(self, chunk_size: int = 2000, overlap: int = 200, preserve_paragraphs: bool = False):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if overlap < 0 or overlap >= chunk_size:
            raise ValueError("overlap must be in [0, chunk_size)")
        self.chunk_size = chunk_size
        self.overlap = overlap
        self.preserve_paragraphs = preserve_paragraphs

    def normalize(self, text: str) -> str:
        return normalize_paragraphs(text) if self.preserve_paragraphs else normalize_flat(text)

    def chunk(self, text: str) -> List[Chunk]:
        normalized = self.normalize(text)
        length = len(normalized)
        if not normalized:
            return []
        if length <= self.chunk_size:
            return [Chunk(index=0, text=normalized, start=0, end=length)]

        chunks: List[Chunk] = []
        start = 0
        while start < length:
            window_end = start + self.chunk_size
            if window_end >= length:
                self._emit(chunks, normalized, start, length)
                break

            break_point = self._find_break(normalized, start, window_end)
            self._emit(chunks, normalized, start, break_point)

            next_start = max(0, break_point - self.overlap)
            if next_start <= start:
                # The overlap would stall or rewind; drop it for this step.
                logger.debug("Overlap dropped at offset %s to keep the chunker moving", break_point)
                next_start = break_point
            start = next_start
        return chunks

    def _find_break(self, text: str, start: int, window_end: int) -> int:
        midpoint = start + self.chunk_size / 2

        paragraph = text.rfind("\n", start, window_end)
        if paragraph > midpoint:
            return paragraph + 1

        sentence = text.rfind(". ", start, window_end)
        if sentence > midpoint:
            return sentence + 2

        space = text.rfind(" ", start, window_end)
        if space > start:
            return space + 1

        return window_end

    @staticmethod
    def _emit(chunks: List[Chunk], text: str, start: int, end: int) -> None:
        piece = text[start:end].strip()
        if piece:
            chunks.append(Chunk(index=len(chunks), text=piece, start=start, end=end))


class SentenceChunker:
    """
    Word-budgeted chunker: packs whole sentences until the next one would push
    the chunk past `target_words`. Paragraph ends always close a chunk and a
    sentence is never split, so an overlong sentence becomes its own chunk.
    """

    def __init__(self, target_words: int = 30):
        if target_words <= 0:
            raise ValueError("target_words must be positive")
        self.target_words = target_words

    def normalize(self, text: str) -> str:
        return normalize_paragraphs(text)

    def chunk(self, text: str) -> List[Chunk]:
        normalized = self.normalize(text)
        chunks: List[Chunk] = []
        for para_start, para_end in self._paragraph_spans(normalized):
            pending: List[Tuple[int, int]] = []
            words = 0
            for match in _SENTENCE.finditer(normalized, para_start, para_end):
                sentence_words = len(match.group(0).split())
                if pending and words + sentence_words > self.target_words:
                    self._emit(chunks, normalized, pending)
                    pending, words = [], 0
                pending.append((match.start(), match.end()))
                words += sentence_words
            if pending:
                self._emit(chunks, normalized, pending)
        return chunks

    @staticmethod
    def _paragraph_spans(text: str) -> List[Tuple[int, int]]:
        spans = []
        cursor = 0
        for separator in _PARAGRAPH_SPLIT.finditer(text):
            spans.append((cursor, separator.start()))
            cursor = separator.end()
        spans.append((cursor, len(text)))
        return [(s, e) for s, e in spans if text[s:e].strip()]

    @staticmethod
    def _emit(chunks: List[Chunk], text: str, sentences: List[Tuple[int, int]]) -> None:
        start, end = sentences[0][0], sentences[-1][1]
        piece = text[start:end].strip()
        if piece:
            chunks.append(Chunk(index=len(chunks), text=piece, start=start, end=end))


def chunk_text(text: str, chunk_size: int = 2000, overlap: int = 200, preserve_paragraphs: bool = False) -> List[Chunk]:
    return CharacterChunker(chunk_size=chunk_size, overlap=overlap, preserve_paragraphs=preserve_paragraphs).chunk(text)
