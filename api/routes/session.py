from __future__ import annotations

import os
import tempfile
from pathlib import Path

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel

from paced_reader.presentation import (
    PresentationController,
    ReaderMode,
    RecordingDisplay,
    open_source,
)

from api.dependencies import get_controller, get_display

router = APIRouter(prefix="/session", tags=["session"])

SUPPORTED_SUFFIXES = (".txt", ".md", ".pdf")


class TextPayload(BaseModel):
    text: str


class TranscriptPayload(BaseModel):
    text: str
    is_final: bool = True


def _state_dict(controller: PresentationController) -> dict:
    state = controller.state
    return {
        "mode": state.mode,
        "index": state.index,
        "chunk_count": state.chunk_count,
        "auto_advancing": state.auto_advancing,
        "speed_ms": state.speed_ms,
        "overlap_ms": state.overlap_ms,
        "lookup": {"query": state.lookup_query, "status": state.lookup_status} if state.mode == ReaderMode.LOOKUP else None,
    }


@router.get("")
async def get_session(controller: PresentationController = Depends(get_controller)):
    return _state_dict(controller)


@router.post("/text")
async def load_text(payload: TextPayload, controller: PresentationController = Depends(get_controller)):
    if not payload.text.strip():
        raise HTTPException(status_code=400, detail="Text must not be empty")
    controller.load_text(payload.text)
    return _state_dict(controller)


@router.post("/document")
async def upload_document(
    file: UploadFile = File(...),
    controller: PresentationController = Depends(get_controller),
):
    suffix = Path(file.filename or "").suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise HTTPException(status_code=400, detail=f"Unsupported file type: {suffix or 'none'}")
    payload = await file.read()
    if not payload:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    tmp_fd, tmp_path_str = tempfile.mkstemp(suffix=suffix)
    tmp_path = Path(tmp_path_str)
    with os.fdopen(tmp_fd, "wb") as tmp_file:
        tmp_file.write(payload)
    try:
        chunks = controller.load_source(open_source(tmp_path))
    finally:
        tmp_path.unlink(missing_ok=True)

    if not chunks:
        raise HTTPException(status_code=422, detail=f"Could not load text from {file.filename}")
    return _state_dict(controller)


@router.post("/transcripts")
async def post_transcript(payload: TranscriptPayload, controller: PresentationController = Depends(get_controller)):
    command = controller.handle_transcript(payload.text, is_final=payload.is_final)
    return {"intent": command.intent, **_state_dict(controller)}


@router.get("/chunks/{index}")
async def get_chunk(index: int, controller: PresentationController = Depends(get_controller)):
    if not 0 <= index < len(controller.chunks):
        raise HTTPException(status_code=404, detail=f"Chunk not found: {index}")
    content, options = controller.renderable(index)
    return {"index": index, "content": content, "duration_ms": options.duration_ms}


@router.get("/display")
async def get_display_history(limit: int = 20, display: RecordingDisplay = Depends(get_display)):
    return [
        {"content": record.content, "duration_ms": record.options.duration_ms}
        for record in display.recent(limit)
    ]
