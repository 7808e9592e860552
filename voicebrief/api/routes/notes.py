"""Note endpoints: create, inspect, and process notes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from voicebrief.api.dependencies import get_coordinator
from voicebrief.api.errors import to_http_exception
from voicebrief.api.models import CreateNoteRequest, ExtractionResponse, NoteDetail, NoteResponse
from voicebrief.errors import IntelligenceError
from voicebrief.intelligence.coordinator import RefreshCoordinator
from voicebrief.intelligence.models import Note

router = APIRouter()

CoordinatorDep = Annotated[RefreshCoordinator, Depends(get_coordinator)]


@router.post("/api/notes", response_model=NoteResponse, status_code=201)
async def create_note(body: CreateNoteRequest, coordinator: CoordinatorDep) -> NoteResponse:
    """Store a new, unprocessed note."""
    if not body.transcript and not body.audio_path:
        raise HTTPException(status_code=400, detail="A note needs a transcript or an audio_path")

    now = coordinator.now()
    note = Note(
        created_at=now,
        updated_at=now,
        title=body.title,
        transcript=body.transcript,
        audio_path=body.audio_path,
    )
    coordinator.repository.save_note(note)
    return NoteResponse.model_validate(note)


@router.get("/api/notes/{note_id}", response_model=NoteDetail)
async def get_note(note_id: str, coordinator: CoordinatorDep) -> NoteDetail:
    """Return a note and its extraction results."""
    note = coordinator.repository.get_note(note_id)
    if note is None:
        raise HTTPException(status_code=404, detail="Note not found")

    results = coordinator.repository.list_extractions(note_id=note_id)
    return NoteDetail(
        note=NoteResponse.model_validate(note),
        extractions=[ExtractionResponse.from_result(r) for r in results],
    )


@router.post("/api/notes/{note_id}/process", response_model=ExtractionResponse)
async def process_note(note_id: str, coordinator: CoordinatorDep) -> ExtractionResponse:
    """Transcribe (if needed) and extract insights for a note.

    Failures leave the note marked ``transcription_failed`` or
    ``extraction_failed``; the client decides whether to retry.
    """
    note = coordinator.repository.get_note(note_id)
    if note is None:
        raise HTTPException(status_code=404, detail="Note not found")

    try:
        result = await coordinator.on_note_saved(note)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except IntelligenceError as exc:
        raise to_http_exception(exc) from exc

    return ExtractionResponse.from_result(result)
