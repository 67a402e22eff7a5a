from __future__ import annotations

from typing import List, Literal, Tuple, Type, Union

from pydantic import BaseModel

from src.ambient_sim.domain.models.clinical_note import StructuredNote
from src.ambient_sim.domain.models.integration import IntegrationResult
from src.ambient_sim.domain.models.review import ReviewSuggestion
from src.ambient_sim.domain.models.utterance import Utterance
from src.ambient_sim.domain.nlp.models import ClinicalEntity


class ListeningStarted(BaseModel):
    name: Literal["listening-started"] = "listening-started"
    session_id: str


class ListeningStopped(BaseModel):
    name: Literal["listening-stopped"] = "listening-stopped"
    session_id: str


class TranscriptionEvent(BaseModel):
    name: Literal["transcription"] = "transcription"
    utterance: Utterance


class ClinicalEntitiesEvent(BaseModel):
    """A non-empty batch of entities tagged in a single utterance."""

    name: Literal["clinical-entities"] = "clinical-entities"
    entities: List[ClinicalEntity]


class NoteGenerated(BaseModel):
    name: Literal["note-generated"] = "note-generated"
    note: StructuredNote


class ReviewSuggestionsEvent(BaseModel):
    name: Literal["review-suggestions"] = "review-suggestions"
    suggestions: List[ReviewSuggestion]


class IntegrationResultsEvent(BaseModel):
    name: Literal["integration-results"] = "integration-results"
    results: List[IntegrationResult]


SimulatorEvent = Union[
    ListeningStarted,
    ListeningStopped,
    TranscriptionEvent,
    ClinicalEntitiesEvent,
    NoteGenerated,
    ReviewSuggestionsEvent,
    IntegrationResultsEvent,
]

EVENT_TYPES: Tuple[Type[BaseModel], ...] = (
    ListeningStarted,
    ListeningStopped,
    TranscriptionEvent,
    ClinicalEntitiesEvent,
    NoteGenerated,
    ReviewSuggestionsEvent,
    IntegrationResultsEvent,
)


def serialize_event(event: SimulatorEvent) -> dict:
    """Render an event as the ``{"event": name, "data": payload}`` wire shape."""

    return {"event": event.name, "data": event.model_dump(mode="json", exclude={"name"})}
