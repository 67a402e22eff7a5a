from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from src.ambient_sim.api.dependencies import get_simulator
from src.ambient_sim.domain.models.clinical_note import NoteUpdate, StructuredNote
from src.ambient_sim.domain.models.integration import IntegrationResult
from src.ambient_sim.domain.models.review import ReviewSuggestion
from src.ambient_sim.services.notes.service import InvalidNoteTransitionError, NoteNotFoundError
from src.ambient_sim.services.simulator import AmbientSimulator

router = APIRouter(prefix="/notes", tags=["notes"])


class FinalizeNoteRequest(BaseModel):
    target_systems: List[str] = Field(min_length=1)


@router.get("/", response_model=List[StructuredNote])
async def list_notes(simulator: AmbientSimulator = Depends(get_simulator)) -> List[StructuredNote]:
    return await simulator.get_notes()


@router.get("/{note_id}", response_model=StructuredNote)
async def get_note(note_id: str, simulator: AmbientSimulator = Depends(get_simulator)) -> StructuredNote:
    note = await simulator.get_note(note_id)
    if note is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Note not found")
    return note


@router.patch("/{note_id}", response_model=StructuredNote)
async def update_note(
    note_id: str,
    payload: NoteUpdate,
    simulator: AmbientSimulator = Depends(get_simulator),
) -> StructuredNote:
    """Apply a partial update to a note's narrative and, optionally, its status."""

    try:
        return await simulator.update_note(note_id, payload)
    except NoteNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Note not found") from exc
    except InvalidNoteTransitionError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc


@router.post("/{note_id}/analyze", response_model=List[ReviewSuggestion])
async def analyze_note(note_id: str, simulator: AmbientSimulator = Depends(get_simulator)) -> List[ReviewSuggestion]:
    try:
        return await simulator.analyze_note(note_id)
    except NoteNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Note not found") from exc


@router.post("/{note_id}/approve", response_model=StructuredNote)
async def approve_note(note_id: str, simulator: AmbientSimulator = Depends(get_simulator)) -> StructuredNote:
    try:
        return await simulator.approve_note(note_id)
    except NoteNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Note not found") from exc


@router.post("/{note_id}/finalize", response_model=List[IntegrationResult])
async def finalize_note(
    note_id: str,
    payload: FinalizeNoteRequest,
    simulator: AmbientSimulator = Depends(get_simulator),
) -> List[IntegrationResult]:
    """Submit a note to downstream systems.

    Per-system failures are returned as rows with ``status="error"``; the
    request itself still succeeds.
    """

    return await simulator.finalize_note(note_id, payload.target_systems)
