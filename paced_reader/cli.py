"""
Console runner: present a text or PDF file and take commands from stdin.

Usage:
    paced-reader book.txt --speed-ms 4000
    paced-reader book.pdf --sentences --target-words 25 --glossary words.json
    paced-reader scan.pdf --docling --perform-ocr
    paced-reader book.txt --log-display --log-level INFO

Each line typed on stdin is handled as a final transcript ("next", "faster",
"hey reader", ...). End the session with Ctrl-D.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from paced_reader.presentation import (
    AsyncioTimers,
    ConsoleDisplay,
    DefinitionProvider,
    Display,
    GlossaryDefinitionProvider,
    LoggingDisplay,
    OpenAIDefinitionProvider,
    PresentationController,
    ReaderConfig,
    TextSource,
    open_source,
)


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Paced document reader")
    parser.add_argument("path", type=Path, help="Text or PDF file to present")
    parser.add_argument("--chunk-size", type=int, default=None, help="Characters per chunk")
    parser.add_argument("--overlap", type=int, default=None, help="Characters shared by neighbouring chunks")
    parser.add_argument("--sentences", action="store_true", help="Pack whole sentences by word count")
    parser.add_argument("--target-words", type=int, default=None, help="Word budget for --sentences")
    parser.add_argument("--speed-ms", type=int, default=None, help="Display time per chunk")
    parser.add_argument("--no-auto-start", action="store_true", help="Show the first chunk and wait")
    parser.add_argument("--docling", action="store_true", help="Extract PDF text with Docling's layout parser")
    parser.add_argument("--perform-ocr", action="store_true", help="Enable OCR (with --docling)")
    parser.add_argument("--log-display", action="store_true", help="Send renders to the log instead of stdout")
    parser.add_argument("--glossary", type=Path, default=None, help="JSON word list used instead of OpenAI")
    parser.add_argument("--log-level", default="WARNING", help="Logging level")
    return parser


def config_from_args(args: argparse.Namespace) -> ReaderConfig:
    config = ReaderConfig.from_env()
    overrides = {
        "chunk_size": args.chunk_size,
        "overlap": args.overlap,
        "target_words": args.target_words,
    }
    values = {**config.__dict__, **{k: v for k, v in overrides.items() if v is not None}}
    if args.sentences:
        values["chunking"] = "sentences"
    if args.speed_ms is not None:
        values["speed_ms"] = args.speed_ms
        values["overlap_ms"] = max(config.overlap_floor_ms, min(args.speed_ms - config.overlap_gap_ms, args.speed_ms - 1))
    if args.no_auto_start:
        values["auto_start"] = False
    return ReaderConfig(**values)


def build_provider(config: ReaderConfig, glossary: Optional[Path]) -> DefinitionProvider:
    if glossary is not None:
        with glossary.open("r", encoding="utf-8") as f:
            return GlossaryDefinitionProvider(json.load(f), max_chars=config.lookup_max_chars)
    return OpenAIDefinitionProvider(model=config.lookup_model, max_chars=config.lookup_max_chars)


def build_display(log_display: bool = False) -> Display:
    if log_display:
        return LoggingDisplay()
    return ConsoleDisplay(sys.stdout)


def build_source(path: Path, use_docling: bool = False, perform_ocr: bool = False) -> TextSource:
    if not use_docling:
        return open_source(path)
    try:
        from paced_reader.presentation.docling_source import DoclingTextSource
    except ImportError as exc:  # pragma: no cover - dependency guard
        raise RuntimeError("Docling is required for --docling. Please install 'paced-reader[docling]'.") from exc
    return DoclingTextSource(path, perform_ocr=perform_ocr)


async def run_session(controller: PresentationController, source: TextSource) -> None:
    loop = asyncio.get_running_loop()
    controller.load_source(source)
    try:
        while True:
            line = await loop.run_in_executor(None, sys.stdin.readline)
            if not line:
                break
            controller.handle_transcript(line.rstrip("\n"), is_final=True)
    finally:
        controller.close()


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    config = config_from_args(args)
    controller = PresentationController(
        config=config,
        display=build_display(args.log_display),
        timers=AsyncioTimers(),
        provider=build_provider(config, args.glossary),
    )
    source = build_source(args.path, use_docling=args.docling, perform_ocr=args.perform_ocr)
    asyncio.run(run_session(controller, source))


if __name__ == "__main__":
    main()
