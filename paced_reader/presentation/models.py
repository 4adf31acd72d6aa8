from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ReaderMode(str, Enum):
    IDLE = "idle"
    PRESENTING = "presenting"
    COMMAND = "command"
    LOOKUP = "lookup"


class Intent(str, Enum):
    START_AUTO = "start_auto"
    SPEED_UP = "speed_up"
    SLOW_DOWN = "slow_down"
    NEXT = "next"
    PREVIOUS = "previous"
    STOP = "stop"
    RESTART = "restart"
    RESUME = "resume"
    ENTER_LOOKUP = "enter_lookup"
    LOOKUP_CANCEL = "lookup_cancel"
    NONE = "none"


class LookupStatus(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"


@dataclass(frozen=True)
class Chunk:
    index: int
    text: str
    start: int = 0  # offsets of the untrimmed window in the normalized text
    end: int = 0


@dataclass(frozen=True)
class Timing:
    speed_ms: int
    overlap_ms: int

    def __post_init__(self):
        if self.overlap_ms >= self.speed_ms:
            raise ValueError(f"overlap_ms ({self.overlap_ms}) must be below speed_ms ({self.speed_ms})")

    def adjusted(
        self,
        delta_ms: int,
        min_speed_ms: int = 500,
        max_speed_ms: int = 10000,
        overlap_floor_ms: int = 400,
        overlap_gap_ms: int = 200,
    ) -> "Timing":
        """
        Return a new Timing with the speed moved by `delta_ms`, saturating at
        the bounds. The overlap follows the speed, kept under it.
        """
        speed = max(min_speed_ms, min(max_speed_ms, self.speed_ms + delta_ms))
        overlap = max(overlap_floor_ms, speed - overlap_gap_ms)
        overlap = min(overlap, speed - 1)
        return Timing(speed_ms=speed, overlap_ms=overlap)


@dataclass(frozen=True)
class RenderOptions:
    duration_ms: Optional[int] = None
    preserve_line_breaks: bool = False
    preserve_whitespace: bool = False


@dataclass(frozen=True)
class TranscriptEvent:
    text: str
    is_final: bool = True


@dataclass(frozen=True)
class Command:
    raw_text: str
    intent: Intent
    is_final: bool = True


@dataclass(frozen=True)
class LookupSnapshot:
    prior_mode: ReaderMode
    index: int


@dataclass
class LookupRequest:
    query: str
    status: LookupStatus = LookupStatus.PENDING
    result: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class ReaderState:
    mode: ReaderMode
    index: int
    chunk_count: int
    auto_advancing: bool
    speed_ms: int
    overlap_ms: int
    lookup_query: Optional[str] = None
    lookup_status: Optional[LookupStatus] = None
