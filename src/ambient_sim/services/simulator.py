from __future__ import annotations

import random
from typing import List, Optional, Sequence, Type

from src.ambient_sim.config import Settings, settings as default_settings
from src.ambient_sim.domain.models.clinical_note import NoteUpdate, StructuredNote
from src.ambient_sim.domain.models.integration import IntegrationResult, SystemStatus
from src.ambient_sim.domain.models.review import ReviewSuggestion
from src.ambient_sim.domain.models.session import SessionState
from src.ambient_sim.infra.db.repositories import NoteRepository
from src.ambient_sim.services.ehr.service import SimulatedIntegrationService
from src.ambient_sim.services.events.bus import E, EventBus, Handler
from src.ambient_sim.services.nlp.tagger import EntityTagger, KeywordEntityTagger
from src.ambient_sim.services.notes.service import InMemoryNoteService
from src.ambient_sim.services.session.driver import SessionDriver
from src.ambient_sim.services.session.scheduler import Scheduler
from src.ambient_sim.services.session.script import DEFAULT_SCRIPT, ConversationScript


class AmbientSimulator:
    """Composition of the simulated ambient-documentation backend.

    Owns one event bus, one scheduler and one pseudo-random generator shared
    by the session driver, entity tagger, note service and integration
    service. Construct one per application; nothing here is a process-wide
    singleton.
    """

    def __init__(
        self,
        *,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
        tagger: Optional[EntityTagger] = None,
        note_repository: Optional[NoteRepository] = None,
        script: ConversationScript = DEFAULT_SCRIPT,
    ) -> None:
        self.settings = settings or default_settings
        self.rng = rng or random.Random(self.settings.random_seed)
        self.bus = EventBus()
        self.scheduler = Scheduler()

        self.notes = InMemoryNoteService(
            bus=self.bus,
            scheduler=self.scheduler,
            repository=note_repository,
            settings=self.settings,
        )
        self.integrations = SimulatedIntegrationService(
            bus=self.bus,
            settings=self.settings,
            rng=self.rng,
        )
        self.driver = SessionDriver(
            bus=self.bus,
            scheduler=self.scheduler,
            tagger=tagger or KeywordEntityTagger(rng=self.rng),
            note_finalizer=self.notes,
            script=script,
            settings=self.settings,
            rng=self.rng,
        )

    # Event subscriptions

    def subscribe(self, event_type: Type[E], handler: Handler) -> None:
        self.bus.subscribe(event_type, handler)

    def unsubscribe(self, event_type: Type[E], handler: Handler) -> None:
        self.bus.unsubscribe(event_type, handler)

    # Listening lifecycle

    @property
    def session_state(self) -> SessionState:
        return self.driver.state

    async def start_listening(self, session_id: str) -> SessionState:
        return await self.driver.start(session_id)

    async def stop_listening(self) -> SessionState:
        return await self.driver.stop()

    # Notes

    async def get_notes(self) -> List[StructuredNote]:
        return await self.notes.get_notes()

    async def get_note(self, note_id: str) -> Optional[StructuredNote]:
        return await self.notes.get_note(note_id)

    async def analyze_note(self, note_id: str) -> List[ReviewSuggestion]:
        return await self.notes.analyze_note(note_id)

    async def update_note(self, note_id: str, update: NoteUpdate) -> StructuredNote:
        return await self.notes.update_note(note_id, update)

    async def approve_note(self, note_id: str) -> StructuredNote:
        return await self.notes.approve_note(note_id)

    # Integrations

    async def finalize_note(self, note_id: str, target_systems: Sequence[str]) -> List[IntegrationResult]:
        return await self.integrations.finalize_note(note_id, target_systems)

    async def get_system_status(self) -> List[SystemStatus]:
        return await self.integrations.get_system_status()

    async def test_connection(self, system_name: str) -> bool:
        return await self.integrations.test_connection(system_name)

    async def shutdown(self) -> None:
        """Stop listening if needed and cancel all pending scheduled work."""

        if self.driver.is_active:
            await self.driver.stop()
        self.scheduler.cancel_all()
