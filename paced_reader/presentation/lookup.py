from __future__ import annotations

import asyncio
import logging
from typing import Mapping, Optional, Protocol

from openai import AsyncOpenAI, OpenAIError

from .display import Display
from .errors import DefinitionLookupError
from .models import LookupRequest, LookupSnapshot, LookupStatus, RenderOptions

logger = logging.getLogger(__name__)

DEFINITION_PROMPT = (
    "You are a reading companion. Define the word or phrase the reader asks about "
    "in one or two plain sentences. No preamble."
)

RESUME_HINT = 'Say "continue reading" to resume.'
NOTICE_MS = 5000


class DefinitionProvider(Protocol):
    async def define(self, query: str) -> str:
        ...


def _truncate(text: str, max_chars: int) -> str:
    text = " ".join(text.split())
    if len(text) <= max_chars:
        return text
    return text[: max_chars - 3].rstrip() + "..."


class OpenAIDefinitionProvider:
    """
    Chat-completion backed definitions. The client is created on first use so
    a missing API key surfaces as a lookup failure, not a startup crash.
    """

    def __init__(self, model: str = "gpt-4o-mini", max_chars: int = 280, client: Optional[AsyncOpenAI] = None):
        self.model = model
        self.max_chars = max_chars
        self._client = client

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            try:
                self._client = AsyncOpenAI()
            except OpenAIError as exc:
                raise DefinitionLookupError(f"definition service unavailable: {exc}") from exc
        return self._client

    async def define(self, query: str) -> str:
        client = self._get_client()
        try:
            resp = await client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": DEFINITION_PROMPT},
                    {"role": "user", "content": query},
                ],
            )
        except OpenAIError as exc:
            raise DefinitionLookupError(f"definition request failed: {exc}") from exc
        content = resp.choices[0].message.content or ""
        if not content.strip():
            raise DefinitionLookupError(f"no definition returned for {query!r}")
        return _truncate(content, self.max_chars)


class GlossaryDefinitionProvider:
    """Offline provider over a fixed word list (case-insensitive)."""

    def __init__(self, entries: Mapping[str, str], max_chars: int = 280):
        self.entries = {k.strip().lower(): v for k, v in entries.items()}
        self.max_chars = max_chars

    async def define(self, query: str) -> str:
        key = query.strip().lower().rstrip(".?!")
        if key not in self.entries:
            raise DefinitionLookupError(f"no glossary entry for {query!r}")
        return _truncate(self.entries[key], self.max_chars)


class LookupSession:
    """
    Nested vocabulary lookup. Captures one query, resolves it in the background
    and keeps the result on screen until the reader cancels. The snapshot of the
    interrupted reading position travels with the session.
    """

    def __init__(self, provider: DefinitionProvider, display: Display, snapshot: LookupSnapshot):
        self.provider = provider
        self.display = display
        self.snapshot = snapshot
        self.request: Optional[LookupRequest] = None
        self.closed = False
        self._task: Optional[asyncio.Task] = None

    @property
    def awaiting_query(self) -> bool:
        return self.request is None

    def open(self) -> None:
        self._show('Lookup mode. Say the word or phrase to define, or "cancel" to go back.')

    def handle_final(self, text: str) -> None:
        if self.closed:
            return
        if self.request is None:
            query = text.strip()
            if not query:
                return
            self.submit(query)
            return
        if self.request.status == LookupStatus.PENDING:
            self._show(f'Still looking up "{self.request.query}". {RESUME_HINT}')
        elif self.request.status == LookupStatus.FAILED:
            self._show(f'Say "hey reader" to try again, or "cancel" to go back. {RESUME_HINT}')
        else:
            self._show(RESUME_HINT)

    def submit(self, query: str) -> LookupRequest:
        request = LookupRequest(query=query)
        self.request = request
        logger.info("Looking up %r", query)
        self._show(f'Looking up "{query}"...')
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._resolve(request))
        return request

    async def wait(self) -> None:
        """
        Wait for the in-flight request, if any. Failures are already rendered.
        Cancelling the waiter leaves the request running.
        """
        task = self._task
        if task is not None and not task.done():
            try:
                await asyncio.shield(task)
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise

    def close(self) -> None:
        self.closed = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _resolve(self, request: LookupRequest) -> None:
        try:
            definition = await self.provider.define(request.query)
        except Exception as exc:  # noqa: BLE001
            if not self._is_current(request):
                return
            request.status = LookupStatus.FAILED
            request.error = str(exc)
            logger.warning("Lookup for %r failed: %s", request.query, exc)
            self._show(
                f'Could not look up "{request.query}": {exc}\n\n'
                'Say "hey reader" to try again, or "cancel" to go back.'
            )
            return
        if not self._is_current(request):
            logger.debug("Dropping lookup result for closed request %r", request.query)
            return
        request.status = LookupStatus.RESOLVED
        request.result = definition
        self._show(f"{request.query}\n\n{definition}\n\n{RESUME_HINT}", duration_ms=None)

    def _is_current(self, request: LookupRequest) -> bool:
        return not self.closed and request is self.request

    def _show(self, content: str, duration_ms: Optional[int] = NOTICE_MS) -> None:
        self.display.render(content, RenderOptions(duration_ms=duration_ms, preserve_line_breaks=True))
