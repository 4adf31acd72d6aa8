"""
Presentation subsystem exports.
"""

from .chunking import CharacterChunker, Chunker, SentenceChunker, chunk_text, normalize_flat, normalize_paragraphs
from .commands import DEFAULT_RULES, CommandRouter, CommandRule
from .config import ReaderConfig
from .controller import PresentationController, build_chunker
from .display import ConsoleDisplay, Display, LoggingDisplay, RecordingDisplay, RenderRecord, format_chunk
from .errors import DefinitionLookupError, DocumentLoadError, PacedReaderError
from .lookup import DefinitionProvider, GlossaryDefinitionProvider, LookupSession, OpenAIDefinitionProvider
from .models import (
    Chunk,
    Command,
    Intent,
    LookupRequest,
    LookupSnapshot,
    LookupStatus,
    ReaderMode,
    ReaderState,
    RenderOptions,
    Timing,
    TranscriptEvent,
)
from .scheduler import AsyncioTimers, ManualTimer, ManualTimers, Scheduler, TimerService
from .sources import PdfTextSource, PlainTextSource, StringTextSource, TextSource, clean_text, open_source

__all__ = [
    "AsyncioTimers",
    "CharacterChunker",
    "Chunk",
    "Chunker",
    "Command",
    "CommandRouter",
    "CommandRule",
    "ConsoleDisplay",
    "DEFAULT_RULES",
    "DefinitionLookupError",
    "DefinitionProvider",
    "Display",
    "DocumentLoadError",
    "GlossaryDefinitionProvider",
    "Intent",
    "LoggingDisplay",
    "LookupRequest",
    "LookupSession",
    "LookupSnapshot",
    "LookupStatus",
    "ManualTimer",
    "ManualTimers",
    "OpenAIDefinitionProvider",
    "PacedReaderError",
    "PdfTextSource",
    "PlainTextSource",
    "PresentationController",
    "ReaderConfig",
    "ReaderMode",
    "ReaderState",
    "RecordingDisplay",
    "RenderOptions",
    "RenderRecord",
    "Scheduler",
    "SentenceChunker",
    "StringTextSource",
    "TextSource",
    "TimerService",
    "Timing",
    "TranscriptEvent",
    "build_chunker",
    "chunk_text",
    "clean_text",
    "format_chunk",
    "normalize_flat",
    "normalize_paragraphs",
    "open_source",
]
