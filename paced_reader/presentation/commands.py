from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import FrozenSet, Optional, Sequence, Tuple

from .models import Command, Intent, ReaderMode

logger = logging.getLogger(__name__)

_READING_MODES = frozenset({ReaderMode.PRESENTING, ReaderMode.IDLE})


@dataclass(frozen=True)
class CommandRule:
    intent: Intent
    keywords: Tuple[str, ...]
    # None means the rule applies in every mode.
    modes: Optional[FrozenSet[ReaderMode]] = None

    def applies_to(self, mode: Optional[ReaderMode]) -> bool:
        return mode is None or self.modes is None or mode in self.modes

    def matches(self, text: str) -> bool:
        return any(keyword in text for keyword in self.keywords)


# Order is priority: keyword sets overlap ("continue" is both a lookup exit
# phrase and a "next" synonym), so the first applicable match wins.
DEFAULT_RULES: Tuple[CommandRule, ...] = (
    CommandRule(Intent.ENTER_LOOKUP, ("hey reader",)),
    CommandRule(
        Intent.LOOKUP_CANCEL,
        ("cancel", "exit lookup", "continue reading", "resume reading"),
        frozenset({ReaderMode.LOOKUP}),
    ),
    CommandRule(Intent.START_AUTO, ("auto", "play", "start reading"), _READING_MODES),
    CommandRule(Intent.SPEED_UP, ("faster", "speed up", "go faster"), _READING_MODES),
    CommandRule(Intent.SLOW_DOWN, ("slower", "slow down", "go slower"), _READING_MODES),
    CommandRule(Intent.NEXT, ("next", "continue"), _READING_MODES),
    CommandRule(Intent.PREVIOUS, ("previous", "back"), _READING_MODES),
    CommandRule(Intent.STOP, ("stop", "exit", "pause", "transcribe"), _READING_MODES),
    CommandRule(Intent.RESTART, ("restart",), _READING_MODES),
    CommandRule(
        Intent.RESUME,
        ("start text", "resume text", "continue text", "read text", "continue", "start"),
        frozenset({ReaderMode.COMMAND}),
    ),
)


class CommandRouter:
    """
    Keyword classifier over an ordered rule table. Matching is by substring on
    the lowercased transcript; there is no language understanding beyond that.
    """

    def __init__(self, rules: Sequence[CommandRule] = DEFAULT_RULES):
        self.rules = tuple(rules)

    def classify(self, text: str, mode: Optional[ReaderMode] = None) -> Intent:
        lowered = text.lower()
        for rule in self.rules:
            if rule.applies_to(mode) and rule.matches(lowered):
                return rule.intent
        return Intent.NONE

    def to_command(self, text: str, mode: Optional[ReaderMode] = None, is_final: bool = True) -> Command:
        intent = self.classify(text, mode) if is_final else Intent.NONE
        logger.debug("Classified %r in mode %s as %s", text, mode, intent)
        return Command(raw_text=text, intent=intent, is_final=is_final)
