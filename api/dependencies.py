from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path

from paced_reader.presentation import (
    AsyncioTimers,
    DefinitionProvider,
    GlossaryDefinitionProvider,
    OpenAIDefinitionProvider,
    PresentationController,
    ReaderConfig,
    RecordingDisplay,
)


@lru_cache(maxsize=1)
def get_config() -> ReaderConfig:
    return ReaderConfig.from_env()


@lru_cache(maxsize=1)
def get_display() -> RecordingDisplay:
    history = int(os.getenv("DISPLAY_HISTORY", "200"))
    return RecordingDisplay(history=history)


def build_provider(config: ReaderConfig) -> DefinitionProvider:
    glossary_path = os.getenv("GLOSSARY_PATH")
    if glossary_path:
        with Path(glossary_path).open("r", encoding="utf-8") as f:
            return GlossaryDefinitionProvider(json.load(f), max_chars=config.lookup_max_chars)
    return OpenAIDefinitionProvider(model=config.lookup_model, max_chars=config.lookup_max_chars)


@lru_cache(maxsize=1)
def get_controller() -> PresentationController:
    config = get_config()
    return PresentationController(
        config=config,
        display=get_display(),
        timers=AsyncioTimers(),
        provider=build_provider(config),
    )
