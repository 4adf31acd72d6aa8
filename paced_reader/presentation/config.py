from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Any, Dict


@dataclass
class ReaderConfig:
    chunk_size: int = 2000
    overlap: int = 200
    chunking: str = "characters"  # or "sentences"
    preserve_paragraphs: bool = True
    target_words: int = 30
    speed_ms: int = 5000
    overlap_ms: int = 1800
    speed_step_ms: int = 500
    min_speed_ms: int = 500
    max_speed_ms: int = 10000
    overlap_floor_ms: int = 400
    overlap_gap_ms: int = 200
    speed_notice_ms: int = 2000
    auto_start: bool = True
    lookup_model: str = "gpt-4o-mini"
    lookup_max_chars: int = 280

    def __post_init__(self):
        if self.chunking not in ("characters", "sentences"):
            raise ValueError(f"Unknown chunking strategy: {self.chunking}")
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if not 0 <= self.overlap < self.chunk_size:
            raise ValueError("overlap must be in [0, chunk_size)")
        if self.target_words <= 0:
            raise ValueError("target_words must be positive")
        if not 0 < self.min_speed_ms <= self.max_speed_ms:
            raise ValueError("speed bounds must satisfy 0 < min_speed_ms <= max_speed_ms")
        if not self.min_speed_ms <= self.speed_ms <= self.max_speed_ms:
            raise ValueError(f"speed_ms must be within [{self.min_speed_ms}, {self.max_speed_ms}]")
        if not self.overlap_floor_ms <= self.overlap_ms < self.speed_ms:
            raise ValueError(f"overlap_ms must be within [{self.overlap_floor_ms}, speed_ms)")
        if self.overlap_floor_ms >= self.min_speed_ms:
            raise ValueError("overlap_floor_ms must be below min_speed_ms")
        if self.speed_step_ms <= 0:
            raise ValueError("speed_step_ms must be positive")

    @classmethod
    def from_env(cls, prefix: str = "READER_") -> "ReaderConfig":
        """
        Build a config from environment variables, e.g. READER_CHUNK_SIZE=1500
        or READER_AUTO_START=false. Unset variables keep their defaults.
        """
        values: Dict[str, Any] = {}
        for f in fields(cls):
            raw = os.getenv(prefix + f.name.upper())
            if raw is None:
                continue
            default = f.default
            if isinstance(default, bool):
                values[f.name] = raw.strip().lower() in ("1", "true", "yes", "on")
            elif isinstance(default, int):
                values[f.name] = int(raw)
            else:
                values[f.name] = raw
        return cls(**values)
