from datetime import datetime, timezone

import pytest

from src.ambient_sim.domain.events import ListeningStarted, ListeningStopped, TranscriptionEvent
from src.ambient_sim.domain.models.clinical_note import NoteStatus, NoteUpdate
from src.ambient_sim.domain.models.utterance import Utterance
from src.ambient_sim.services.notes.service import (
    InMemoryNoteService,
    InvalidNoteTransitionError,
    NoteNotFoundError,
)
from src.ambient_sim.services.session.script import CLINICIAN_SPEAKER, PATIENT_SPEAKER


@pytest.fixture
def note_service(bus, manual_settings):
    return InMemoryNoteService(bus=bus, settings=manual_settings)


async def test_collection_is_seeded_with_sample_notes(note_service):
    notes = await note_service.get_notes()

    assert [n.id for n in notes] == ["note_001", "note_002", "note_003", "note_004", "note_005"]
    assert {n.status for n in notes} == {NoteStatus.DRAFT, NoteStatus.UNDER_REVIEW, NoteStatus.FINALIZED}


async def test_get_note_returns_none_for_unknown_id(note_service):
    assert await note_service.get_note("missing") is None
    assert (await note_service.get_note("note_001")).patient_id == "patient_123"


async def test_update_round_trip_changes_only_supplied_fields(note_service):
    before = (await note_service.get_note("note_001")).narrative.model_copy()

    await note_service.update_note("note_001", NoteUpdate(assessment="X"))
    after = (await note_service.get_note("note_001")).narrative

    assert after.assessment == "X"
    assert after.model_dump(exclude={"assessment"}) == before.model_dump(exclude={"assessment"})


async def test_update_can_move_status_forward(note_service):
    note = await note_service.update_note("note_001", NoteUpdate(status=NoteStatus.UNDER_REVIEW))

    assert note.status == NoteStatus.UNDER_REVIEW
    assert note.narrative.chief_complaint == "Chest pain"


async def test_update_rejects_backwards_status(note_service):
    with pytest.raises(InvalidNoteTransitionError):
        await note_service.update_note("note_003", NoteUpdate(status=NoteStatus.DRAFT, plan="redo"))

    note = await note_service.get_note("note_003")
    assert note.status == NoteStatus.FINALIZED
    assert note.narrative.plan != "redo"


async def test_update_unknown_note_raises(note_service):
    with pytest.raises(NoteNotFoundError):
        await note_service.update_note("missing", NoteUpdate(plan="anything"))


async def test_approve_finalizes_and_refreshes_timestamp(note_service):
    before = (await note_service.get_note("note_002")).timestamp

    note = await note_service.approve_note("note_002")

    assert note.status == NoteStatus.FINALIZED
    assert note.timestamp > before
    assert (await note_service.get_note("note_002")).status == NoteStatus.FINALIZED


async def test_approve_unknown_note_raises_instead_of_fabricating(note_service):
    with pytest.raises(NoteNotFoundError):
        await note_service.approve_note("missing")

    assert await note_service.get_note("missing") is None


async def test_analyze_returns_review_suggestions(note_service):
    suggestions = await note_service.analyze_note("note_001")

    assert len(suggestions) == 4
    assert {s.location.section for s in suggestions} >= {"plan", "assessment"}

    with pytest.raises(NoteNotFoundError):
        await note_service.analyze_note("missing")


async def test_finalize_session_publishes_note_then_suggestions(bus, recorder, note_service, wait_until):
    bus.publish(ListeningStarted(session_id="s1"))
    bus.publish(
        TranscriptionEvent(
            utterance=Utterance(
                id="utt_1",
                text="I've been having chest pain for about 2 hours.",
                confidence=0.97,
                timestamp=datetime.now(timezone.utc),
                speaker=PATIENT_SPEAKER,
            )
        )
    )
    bus.publish(
        TranscriptionEvent(
            utterance=Utterance(
                id="utt_2",
                text="Can you describe the pain in more detail?",
                confidence=0.93,
                timestamp=datetime.now(timezone.utc),
                speaker=CLINICIAN_SPEAKER,
            )
        )
    )

    note_service.finalize_session("s1")
    await wait_until(lambda: recorder.of("review-suggestions"))

    names = recorder.names()
    assert names.index("note-generated") < names.index("review-suggestions")

    note = recorder.of("note-generated")[0].note
    assert note.session_id == "s1"
    assert note.status == NoteStatus.DRAFT
    assert note.narrative.chief_complaint == "Chest pain"
    assert len(note.entities) == 5
    assert note.raw_transcription.splitlines() == [
        "John Doe: I've been having chest pain for about 2 hours.",
        "Dr. Sarah Johnson: Can you describe the pain in more detail?",
    ]
    assert len(recorder.of("review-suggestions")[0].suggestions) == 4

    stored = await note_service.get_note(note.id)
    assert stored == note


def _transcription(text, speaker=PATIENT_SPEAKER):
    return TranscriptionEvent(
        utterance=Utterance(
            id=f"utt_{len(text)}",
            text=text,
            confidence=0.95,
            timestamp=datetime.now(timezone.utc),
            speaker=speaker,
        )
    )


async def test_note_keeps_transcript_of_its_own_session(bus, recorder, note_service, wait_until):
    bus.publish(ListeningStarted(session_id="s1"))
    bus.publish(_transcription("I've been having chest pain for about 2 hours."))
    bus.publish(ListeningStopped(session_id="s1"))

    # The next session starts before the first note is synthesized
    bus.publish(ListeningStarted(session_id="s2"))
    bus.publish(_transcription("It started this morning.", CLINICIAN_SPEAKER))
    note_service.finalize_session("s1")
    await wait_until(lambda: recorder.of("note-generated"))

    note = recorder.of("note-generated")[0].note
    assert note.session_id == "s1"
    assert note.raw_transcription == "John Doe: I've been having chest pain for about 2 hours."


async def test_returned_notes_are_copies(note_service):
    listed = await note_service.get_notes()
    listed[2].status = NoteStatus.DRAFT

    fetched = await note_service.get_note("note_003")
    assert fetched.status == NoteStatus.FINALIZED

    fetched.narrative.plan = "changed outside the service"
    updated = await note_service.update_note("note_003", NoteUpdate(assessment="Stable"))
    updated.status = NoteStatus.DRAFT

    stored = await note_service.get_note("note_003")
    assert stored.status == NoteStatus.FINALIZED
    assert stored.narrative.plan != "changed outside the service"
    assert stored.narrative.assessment == "Stable"
