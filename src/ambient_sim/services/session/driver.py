from __future__ import annotations

import asyncio
import logging
import random
from datetime import datetime, timezone
from typing import Optional, Protocol
from uuid import uuid4

from src.ambient_sim.config import Settings, settings as default_settings
from src.ambient_sim.domain.events import (
    ClinicalEntitiesEvent,
    ListeningStarted,
    ListeningStopped,
    TranscriptionEvent,
)
from src.ambient_sim.domain.models.session import SessionState
from src.ambient_sim.domain.models.utterance import Speaker, Utterance
from src.ambient_sim.services.audit.service import AuditService, audit_service as default_audit_service
from src.ambient_sim.services.events.bus import EventBus
from src.ambient_sim.services.nlp.tagger import EntityTagger, KeywordEntityTagger
from src.ambient_sim.services.session.scheduler import Scheduler
from src.ambient_sim.services.session.script import DEFAULT_SCRIPT, ConversationScript

logger = logging.getLogger("simulator")


class SessionStateError(RuntimeError):
    """Raised when a listening session operation is invalid for the current state."""


class SessionAlreadyActiveError(SessionStateError):
    def __init__(self, session_id: str) -> None:
        super().__init__(f"Already listening (session {session_id})")
        self.session_id = session_id


class SessionNotActiveError(SessionStateError):
    def __init__(self) -> None:
        super().__init__("Not currently listening")


class NoteFinalizer(Protocol):
    def finalize_session(self, session_id: str) -> None:  # pragma: no cover - interface
        raise NotImplementedError


class SessionDriver:
    """Drives a scripted two-party conversation while a session is active.

    States are Idle and Active. While Active a recurring tick publishes one
    utterance per interval, alternating between patient and clinician lines
    through a single shared cursor. When the cursor runs past the current
    speaker's lines it wraps to zero and, with ``filler_probability``, the
    clinician asks one filler question instead.

    Each utterance is tagged for clinical entities after a short delay; the
    transcription event is always published before that tagging is
    scheduled. Stopping cancels the tick but lets already scheduled tagging
    complete, then hands the session to the note finalizer after a delay.
    """

    def __init__(
        self,
        *,
        bus: EventBus,
        scheduler: Optional[Scheduler] = None,
        tagger: Optional[EntityTagger] = None,
        note_finalizer: Optional[NoteFinalizer] = None,
        script: ConversationScript = DEFAULT_SCRIPT,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
        audit: Optional[AuditService] = None,
    ) -> None:
        self._bus = bus
        self._scheduler = scheduler or Scheduler()
        self._rng = rng or random.Random()
        self._tagger: EntityTagger = tagger or KeywordEntityTagger(rng=self._rng)
        self._note_finalizer = note_finalizer
        self._script = script
        self._settings = settings or default_settings
        self._audit = audit or default_audit_service

        self._session_id: Optional[str] = None
        self._tick_task: Optional[asyncio.Task] = None
        self._cursor = 0
        self._patient_turn = True

    @property
    def is_active(self) -> bool:
        return self._session_id is not None

    @property
    def state(self) -> SessionState:
        return SessionState(is_active=self.is_active, session_id=self._session_id)

    async def start(self, session_id: str) -> SessionState:
        if self._session_id is not None:
            raise SessionAlreadyActiveError(self._session_id)

        self._session_id = session_id
        self._cursor = 0
        self._patient_turn = True
        self._tick_task = self._scheduler.call_every(self._settings.tick_interval_seconds, self.tick)

        logger.info("Listening started for session %s", session_id)
        self._audit.log_event(action="start_listening", resource_type="session", resource_id=session_id)
        self._bus.publish(ListeningStarted(session_id=session_id))
        return self.state

    async def stop(self) -> SessionState:
        if self._session_id is None:
            raise SessionNotActiveError()

        session_id = self._session_id
        self._session_id = None
        if self._tick_task is not None:
            self._tick_task.cancel()
            self._tick_task = None

        logger.info("Listening stopped for session %s", session_id)
        self._audit.log_event(action="stop_listening", resource_type="session", resource_id=session_id)
        self._bus.publish(ListeningStopped(session_id=session_id))

        if self._note_finalizer is not None:
            self._scheduler.call_later(
                self._settings.note_generation_delay_seconds,
                self._note_finalizer.finalize_session,
                session_id,
            )
        return self.state

    def tick(self) -> Optional[Utterance]:
        """Advance the conversation by one turn.

        Normally invoked by the recurring schedule. Returns the published
        utterance, or None when nothing was said this turn.
        """

        if not self.is_active:
            return None

        script = self._script
        if self._patient_turn:
            speaker, sentences = script.patient_speaker, script.patient_sentences
        else:
            speaker, sentences = script.clinician_speaker, script.clinician_sentences

        if self._cursor < len(sentences):
            utterance = self._say(speaker, sentences[self._cursor])
            self._cursor += 1
            self._patient_turn = not self._patient_turn
            return utterance

        self._cursor = 0
        if script.filler_questions and self._rng.random() < self._settings.filler_probability:
            return self._say(script.clinician_speaker, self._rng.choice(script.filler_questions))
        return None

    def _say(self, speaker: Speaker, text: str) -> Utterance:
        utterance = Utterance(
            id=f"utt_{uuid4().hex}",
            text=text,
            confidence=0.9 + self._rng.random() * 0.1,
            timestamp=datetime.now(timezone.utc),
            speaker=speaker,
        )
        self._bus.publish(TranscriptionEvent(utterance=utterance))
        self._scheduler.call_later(self._settings.entity_extraction_delay_seconds, self._tag, utterance)
        return utterance

    def _tag(self, utterance: Utterance) -> None:
        entities = self._tagger.tag(utterance)
        if not entities:
            return
        self._bus.publish(ClinicalEntitiesEvent(entities=entities))
