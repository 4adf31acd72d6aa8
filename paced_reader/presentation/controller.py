from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

from .chunking import CharacterChunker, Chunker, SentenceChunker
from .commands import CommandRouter
from .config import ReaderConfig
from .display import Display, format_chunk
from .errors import DocumentLoadError
from .lookup import DefinitionProvider, LookupSession
from .models import (
    Chunk,
    Command,
    Intent,
    LookupSnapshot,
    ReaderMode,
    ReaderState,
    RenderOptions,
    Timing,
    TranscriptEvent,
)
from .scheduler import Scheduler, TimerService
from .sources import TextSource

logger = logging.getLogger(__name__)

NOTICE_MS = 5000
SHORT_NOTICE_MS = 3000


def build_chunker(config: ReaderConfig) -> Chunker:
    if config.chunking == "sentences":
        return SentenceChunker(target_words=config.target_words)
    return CharacterChunker(
        chunk_size=config.chunk_size,
        overlap=config.overlap,
        preserve_paragraphs=config.preserve_paragraphs,
    )


class PresentationController:
    """
    Reading session state machine.

    Holds the chunked document, the current index, the mode and the timing.
    Transcripts come in through `handle_transcript`; everything that changes
    state goes through `dispatch`. Timer callbacks and lookup completions are
    delivered on the same loop, so no locking is needed.
    """

    def __init__(
        self,
        config: ReaderConfig,
        display: Display,
        timers: TimerService,
        provider: DefinitionProvider,
        chunker: Optional[Chunker] = None,
        router: Optional[CommandRouter] = None,
    ):
        self.config = config
        self.display = display
        self.provider = provider
        self.chunker = chunker or build_chunker(config)
        self.router = router or CommandRouter()
        self.scheduler = Scheduler(self, timers)

        self.chunks: Tuple[Chunk, ...] = ()
        self.index = 0
        self.mode = ReaderMode.IDLE
        self._timing = Timing(speed_ms=config.speed_ms, overlap_ms=config.overlap_ms)
        self.lookup: Optional[LookupSession] = None

    # -- pacing target -------------------------------------------------

    @property
    def timing(self) -> Timing:
        return self._timing

    def has_next(self) -> bool:
        return self.index < len(self.chunks) - 1

    def advance(self) -> None:
        if self.has_next():
            self.index += 1

    def render_current(self) -> None:
        if not self.chunks:
            return
        content, options = self.renderable(self.index)
        logger.debug("Displaying chunk %s/%s", self.index + 1, len(self.chunks))
        self.display.render(content, options)

    def renderable(self, index: int) -> Tuple[str, RenderOptions]:
        chunk = self.chunks[index]
        options = RenderOptions(
            duration_ms=self._timing.speed_ms,
            preserve_line_breaks=True,
            preserve_whitespace=True,
        )
        return format_chunk(chunk, len(self.chunks)), options

    # -- document loading ----------------------------------------------

    def load_text(self, text: str) -> Sequence[Chunk]:
        self._reset()
        self.chunks = tuple(self.chunker.chunk(text))
        logger.info("Created %s chunks from %s characters", len(self.chunks), len(text))
        if not self.chunks:
            self._notice("The document is empty.")
            return self.chunks
        self.mode = ReaderMode.PRESENTING
        if self.config.auto_start:
            self._notice("Starting text presentation. Auto-advancing through chunks. Say 'stop' to pause.")
            self.scheduler.start()
        else:
            self.scheduler.start(auto_advance=False)
        return self.chunks

    def load_source(self, source: TextSource) -> Sequence[Chunk]:
        try:
            text = source.read_text()
        except DocumentLoadError as exc:
            logger.warning("Document load failed: %s", exc)
            self._reset()
            self._notice(f"Error loading text: {exc}")
            return self.chunks
        return self.load_text(text)

    def _reset(self) -> None:
        self.scheduler.stop()
        self._close_lookup()
        self.chunks = ()
        self.index = 0
        self.mode = ReaderMode.IDLE

    # -- transcripts ---------------------------------------------------

    def handle_event(self, event: TranscriptEvent) -> Command:
        return self.handle_transcript(event.text, is_final=event.is_final)

    def handle_transcript(self, text: str, is_final: bool = True) -> Command:
        command = self.router.to_command(text, mode=self.mode, is_final=is_final)
        if not is_final:
            if self.mode != ReaderMode.PRESENTING:
                self.display.render(text, RenderOptions())
            return command
        logger.info("Final transcription: %s", text)
        self.dispatch(command)
        return command

    def dispatch(self, command: Command) -> None:
        if not command.is_final:
            return
        intent = command.intent

        if intent == Intent.ENTER_LOOKUP:
            self._enter_lookup()
            return
        if self.mode == ReaderMode.LOOKUP:
            if intent == Intent.LOOKUP_CANCEL:
                self._exit_lookup()
            elif self.lookup is not None:
                self.lookup.handle_final(command.raw_text)
            return

        if self.mode == ReaderMode.COMMAND:
            if intent == Intent.RESUME:
                self.mode = ReaderMode.PRESENTING
                self._notice("Resuming text reading from where you left off. Auto-advancing enabled.", SHORT_NOTICE_MS)
                self.scheduler.start()
            elif intent == Intent.NONE:
                self.display.render(command.raw_text, RenderOptions(duration_ms=SHORT_NOTICE_MS))
            return

        if self.mode == ReaderMode.IDLE or not self.chunks:
            logger.debug("Ignoring %s: no document loaded", intent)
            return

        if intent == Intent.START_AUTO:
            self._notice("Auto-advancing through text. Say 'pause' to stop.", SHORT_NOTICE_MS)
            self.scheduler.start()
        elif intent == Intent.SPEED_UP:
            self._adjust_speed(-self.config.speed_step_ms)
        elif intent == Intent.SLOW_DOWN:
            self._adjust_speed(self.config.speed_step_ms)
        elif intent == Intent.NEXT:
            self._step(1)
        elif intent == Intent.PREVIOUS:
            self._step(-1)
        elif intent == Intent.STOP:
            self.scheduler.stop()
            self.mode = ReaderMode.COMMAND
            self._notice("Text reading paused. Now in transcription mode. Say 'resume text' to continue reading.")
        elif intent == Intent.RESTART:
            self.scheduler.stop()
            self.index = 0
            self.render_current()
        else:
            logger.debug("Ignoring unmatched transcript while presenting: %r", command.raw_text)

    # -- transitions ---------------------------------------------------

    def _step(self, delta: int) -> None:
        self.scheduler.stop()
        target = self.index + delta
        if target >= len(self.chunks):
            self.index = len(self.chunks) - 1
            self._notice("End of document reached.", SHORT_NOTICE_MS)
        elif target < 0:
            self.index = 0
            self._notice("Already at the beginning of document.", SHORT_NOTICE_MS)
        else:
            self.index = target
            self.render_current()

    def _adjust_speed(self, delta_ms: int) -> None:
        old = self._timing
        self._timing = old.adjusted(
            delta_ms,
            min_speed_ms=self.config.min_speed_ms,
            max_speed_ms=self.config.max_speed_ms,
            overlap_floor_ms=self.config.overlap_floor_ms,
            overlap_gap_ms=self.config.overlap_gap_ms,
        )
        direction = "increased" if delta_ms < 0 else "decreased"
        self._notice(
            f"Reading speed {direction}. Now showing each chunk for {self._timing.speed_ms / 1000:.1f} seconds.",
            self.config.speed_notice_ms,
        )
        logger.info("Reading speed adjusted from %sms to %sms", old.speed_ms, self._timing.speed_ms)
        if self.scheduler.active:
            self.scheduler.reschedule_after_speed_change(self.config.speed_notice_ms)

    def _enter_lookup(self) -> None:
        if self.mode == ReaderMode.LOOKUP and self.lookup is not None:
            # Retry: keep the original reading position, start a fresh query.
            snapshot = self.lookup.snapshot
            self.lookup.close()
        else:
            snapshot = LookupSnapshot(prior_mode=self.mode, index=self.index)
            self.scheduler.stop()
        self.mode = ReaderMode.LOOKUP
        self.lookup = LookupSession(self.provider, self.display, snapshot)
        logger.info("Entered lookup from %s at chunk %s", snapshot.prior_mode.value, snapshot.index + 1)
        self.lookup.open()

    def _exit_lookup(self) -> None:
        snapshot = self.lookup.snapshot if self.lookup else LookupSnapshot(ReaderMode.IDLE, 0)
        self._close_lookup()
        self.mode = snapshot.prior_mode
        self.index = snapshot.index
        logger.info("Left lookup, back to %s at chunk %s", self.mode.value, self.index + 1)
        if self.mode == ReaderMode.PRESENTING:
            self.scheduler.start()
        elif self.mode == ReaderMode.COMMAND:
            self._notice("Back in transcription mode. Say 'resume text' to continue reading.", SHORT_NOTICE_MS)

    def _close_lookup(self) -> None:
        if self.lookup is not None:
            self.lookup.close()
            self.lookup = None

    # -- misc ----------------------------------------------------------

    def _notice(self, message: str, duration_ms: int = NOTICE_MS) -> None:
        self.display.render(message, RenderOptions(duration_ms=duration_ms))

    @property
    def state(self) -> ReaderState:
        request = self.lookup.request if self.lookup else None
        return ReaderState(
            mode=self.mode,
            index=self.index,
            chunk_count=len(self.chunks),
            auto_advancing=self.scheduler.auto_advancing,
            speed_ms=self._timing.speed_ms,
            overlap_ms=self._timing.overlap_ms,
            lookup_query=request.query if request else None,
            lookup_status=request.status if request else None,
        )

    def close(self) -> None:
        self.scheduler.stop()
        self._close_lookup()
