from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import uuid4

from src.ambient_sim.config import Settings, settings as default_settings
from src.ambient_sim.domain.events import (
    ListeningStarted,
    ListeningStopped,
    NoteGenerated,
    ReviewSuggestionsEvent,
    TranscriptionEvent,
)
from src.ambient_sim.domain.models.clinical_note import (
    NOTE_STATUS_ORDER,
    NoteStatus,
    NoteUpdate,
    StructuredNote,
)
from src.ambient_sim.domain.models.review import ReviewSuggestion
from src.ambient_sim.infra.db.inmemory import InMemoryNoteRepository
from src.ambient_sim.infra.db.repositories import NoteRepository
from src.ambient_sim.services.audit.service import AuditService, audit_service as default_audit_service
from src.ambient_sim.services.events.bus import EventBus
from src.ambient_sim.services.latency import simulate_latency
from src.ambient_sim.services.notes.fixtures import (
    DEFAULT_PATIENT_ID,
    DEFAULT_PROVIDER_ID,
    generated_note_entities,
    generated_note_narrative,
    review_suggestions,
    seed_notes,
)
from src.ambient_sim.services.session.scheduler import Scheduler

logger = logging.getLogger("simulator")


class NoteNotFoundError(KeyError):
    def __init__(self, note_id: str) -> None:
        super().__init__(note_id)
        self.note_id = note_id

    def __str__(self) -> str:
        return f"Note {self.note_id} not found"


class InvalidNoteTransitionError(ValueError):
    def __init__(self, note_id: str, current: NoteStatus, requested: NoteStatus) -> None:
        super().__init__(f"Note {note_id} cannot move from {current.value} to {requested.value}")
        self.note_id = note_id
        self.current = current
        self.requested = requested


class InMemoryNoteService:
    """Structured note lifecycle over an in-memory note collection.

    Acts as the note finalizer for the session driver: when a session stops
    it synthesizes a draft note, stores it, publishes ``note-generated`` and
    later ``review-suggestions``. It also serves the request/response note
    operations, each behind a simulated latency.

    Lookup misses are uniform: ``get_note`` returns None and every operation
    acting on a note raises :class:`NoteNotFoundError`.
    Notes handed to callers are copies; the collection only changes through
    ``update_note``, ``approve_note`` and session finalization.
    """

    def __init__(
        self,
        *,
        bus: EventBus,
        scheduler: Optional[Scheduler] = None,
        repository: Optional[NoteRepository] = None,
        settings: Optional[Settings] = None,
        audit: Optional[AuditService] = None,
    ) -> None:
        self._bus = bus
        self._scheduler = scheduler or Scheduler()
        self._repository = repository if repository is not None else InMemoryNoteRepository(seed_notes())
        self._settings = settings or default_settings
        self._audit = audit or default_audit_service
        self._transcript_lines: List[str] = []
        self._session_transcripts: Dict[str, List[str]] = {}

        bus.subscribe(ListeningStarted, self._reset_transcript)
        bus.subscribe(ListeningStopped, self._capture_transcript)
        bus.subscribe(TranscriptionEvent, self._record_utterance)

    # Session finalization

    def finalize_session(self, session_id: str) -> None:
        """Schedule note synthesis for a session that just stopped.

        The note uses the transcript captured when that session stopped.
        """

        lines = self._session_transcripts.pop(session_id, None)
        if lines is None:
            lines = list(self._transcript_lines)
        self._scheduler.call_later(
            self._settings.note_synthesis_delay_seconds,
            self._publish_generated_note,
            session_id,
            lines,
        )

    def build_session_note(self, session_id: str, transcript_lines: Optional[List[str]] = None) -> StructuredNote:
        lines = self._transcript_lines if transcript_lines is None else transcript_lines
        raw = "\n".join(lines) or "Simulated transcription content..."
        return StructuredNote(
            id=f"note_{uuid4().hex}",
            patient_id=DEFAULT_PATIENT_ID,
            provider_id=DEFAULT_PROVIDER_ID,
            session_id=session_id,
            timestamp=datetime.now(timezone.utc),
            raw_transcription=raw,
            entities=generated_note_entities(),
            narrative=generated_note_narrative(),
            status=NoteStatus.DRAFT,
        )

    def _publish_generated_note(self, session_id: str, transcript_lines: List[str]) -> None:
        note = self.build_session_note(session_id, transcript_lines)
        self._repository.save(note)

        logger.info("Generated note %s for session %s", note.id, session_id)
        self._audit.log_event(
            action="generate_note",
            resource_type="structured_note",
            resource_id=note.id,
            extra={"session_id": session_id, "entity_count": len(note.entities)},
        )
        self._bus.publish(NoteGenerated(note=note.model_copy(deep=True)))

        self._scheduler.call_later(
            self._settings.review_suggestions_delay_seconds,
            self._publish_review_suggestions,
        )

    def _publish_review_suggestions(self) -> None:
        self._bus.publish(ReviewSuggestionsEvent(suggestions=review_suggestions()))

    def _reset_transcript(self, event: ListeningStarted) -> None:
        self._transcript_lines = []

    def _capture_transcript(self, event: ListeningStopped) -> None:
        self._session_transcripts[event.session_id] = list(self._transcript_lines)

    def _record_utterance(self, event: TranscriptionEvent) -> None:
        utterance = event.utterance
        self._transcript_lines.append(f"{utterance.speaker.name}: {utterance.text}")

    # Request/response operations

    async def get_notes(self) -> List[StructuredNote]:
        await simulate_latency(0.3, self._settings)
        return [note.model_copy(deep=True) for note in self._repository.list_by_filters()]

    async def get_note(self, note_id: str) -> Optional[StructuredNote]:
        await simulate_latency(0.3, self._settings)
        note = self._repository.get(note_id)
        return note.model_copy(deep=True) if note is not None else None

    async def analyze_note(self, note_id: str) -> List[ReviewSuggestion]:
        await simulate_latency(1.5, self._settings)
        self._require_note(note_id)

        suggestions = review_suggestions()
        self._audit.log_event(
            action="analyze_note",
            resource_type="structured_note",
            resource_id=note_id,
            extra={"suggestion_count": len(suggestions)},
        )
        return suggestions

    async def update_note(self, note_id: str, update: NoteUpdate) -> StructuredNote:
        """Merge the supplied narrative fields into a note.

        Fields not explicitly set on ``update`` are left untouched. A supplied
        status must not move the note backwards in its lifecycle.
        """

        await simulate_latency(0.5, self._settings)

        note = self._require_note(note_id)
        changes = update.model_dump(exclude_unset=True)
        status = changes.pop("status", None)
        if status is not None:
            self._check_transition(note, NoteStatus(status))

        note.narrative = note.narrative.model_copy(update=changes)
        if status is not None:
            note.status = NoteStatus(status)
        note.timestamp = datetime.now(timezone.utc)
        self._repository.save(note)

        self._audit.log_event(
            action="update_note",
            resource_type="structured_note",
            resource_id=note_id,
            extra={"fields": sorted(changes), "status": note.status.value},
        )
        return note.model_copy(deep=True)

    async def approve_note(self, note_id: str) -> StructuredNote:
        await simulate_latency(1.5, self._settings)

        note = self._require_note(note_id)
        note.status = NoteStatus.FINALIZED
        note.timestamp = datetime.now(timezone.utc)
        self._repository.save(note)

        self._audit.log_event(action="approve_note", resource_type="structured_note", resource_id=note_id)
        return note.model_copy(deep=True)

    def _require_note(self, note_id: str) -> StructuredNote:
        note = self._repository.get(note_id)
        if note is None:
            raise NoteNotFoundError(note_id)
        return note

    @staticmethod
    def _check_transition(note: StructuredNote, requested: NoteStatus) -> None:
        if NOTE_STATUS_ORDER[requested] < NOTE_STATUS_ORDER[note.status]:
            raise InvalidNoteTransitionError(note.id, note.status, requested)
