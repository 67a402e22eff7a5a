from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from src.ambient_sim.domain.nlp.models import ClinicalEntity


class NoteStatus(str, Enum):
    DRAFT = "draft"
    UNDER_REVIEW = "under_review"
    FINALIZED = "finalized"


# Forward-only lifecycle: a note may only move to a status with a higher rank.
NOTE_STATUS_ORDER = {
    NoteStatus.DRAFT: 0,
    NoteStatus.UNDER_REVIEW: 1,
    NoteStatus.FINALIZED: 2,
}


class NoteNarrative(BaseModel):
    """Narrative sections of a structured note. All sections are optional."""

    chief_complaint: Optional[str] = None
    history_of_present_illness: Optional[str] = None
    review_of_systems: Optional[str] = None
    physical_exam: Optional[str] = None
    assessment: Optional[str] = None
    plan: Optional[str] = None


class StructuredNote(BaseModel):
    """Clinical documentation record synthesized at the end of a session."""

    id: str
    patient_id: str
    provider_id: str
    session_id: str
    timestamp: datetime
    raw_transcription: str = ""
    entities: List[ClinicalEntity] = Field(default_factory=list)
    narrative: NoteNarrative = Field(default_factory=NoteNarrative)
    status: NoteStatus = NoteStatus.DRAFT


class NoteUpdate(NoteNarrative):
    """Partial update for a note.

    Only fields explicitly supplied by the caller are applied; ``status`` is
    optional and subject to the forward-only lifecycle.
    """

    status: Optional[NoteStatus] = None
