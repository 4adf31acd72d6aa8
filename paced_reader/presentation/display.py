from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional, Protocol, TextIO

from .models import Chunk, RenderOptions

logger = logging.getLogger(__name__)


class Display(Protocol):
    def render(self, content: str, options: RenderOptions) -> None:
        ...


def format_chunk(chunk: Chunk, total: int) -> str:
    return f"[{chunk.index + 1}/{total}]\n\n{chunk.text}"


@dataclass(frozen=True)
class RenderRecord:
    content: str
    options: RenderOptions


class RecordingDisplay:
    """
    Keeps the most recent renders in memory. Used by the HTTP surface (clients
    poll it) and by tests.
    """

    def __init__(self, history: int = 200):
        self.renders: Deque[RenderRecord] = deque(maxlen=history)

    def render(self, content: str, options: RenderOptions) -> None:
        self.renders.append(RenderRecord(content=content, options=options))

    @property
    def last(self) -> Optional[RenderRecord]:
        return self.renders[-1] if self.renders else None

    def contents(self) -> List[str]:
        return [r.content for r in self.renders]

    def recent(self, limit: int) -> List[RenderRecord]:
        if limit <= 0:
            return []
        return list(self.renders)[-limit:]


class LoggingDisplay:
    """Headless surface: every render becomes one INFO log line."""

    def render(self, content: str, options: RenderOptions) -> None:
        logger.info("render (%s ms): %s", options.duration_ms, content.replace("\n", " | "))


class ConsoleDisplay:
    """Prints every render to a stream, separated by a rule line."""

    def __init__(self, stream: TextIO, width: int = 60):
        self.stream = stream
        self.width = width

    def render(self, content: str, options: RenderOptions) -> None:
        text = content if options.preserve_line_breaks else " ".join(content.split())
        print("-" * self.width, file=self.stream)
        print(text, file=self.stream, flush=True)
