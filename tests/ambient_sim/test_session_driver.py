import asyncio

import pytest

from src.ambient_sim.domain.models.utterance import SpeakerRole
from src.ambient_sim.services.session.driver import (
    SessionAlreadyActiveError,
    SessionDriver,
    SessionNotActiveError,
)
from src.ambient_sim.services.session.scheduler import Scheduler
from src.ambient_sim.services.session.script import (
    CLINICIAN_SENTENCES,
    FILLER_QUESTIONS,
    PATIENT_SENTENCES,
    ConversationScript,
)


class RecordingFinalizer:
    def __init__(self):
        self.sessions = []

    def finalize_session(self, session_id):
        self.sessions.append(session_id)


def make_driver(bus, settings, **kwargs):
    scheduler = kwargs.pop("scheduler", Scheduler())
    return SessionDriver(bus=bus, scheduler=scheduler, settings=settings, **kwargs)


async def test_start_publishes_listening_started_once(bus, recorder, manual_settings):
    driver = make_driver(bus, manual_settings)

    state = await driver.start("s1")

    assert state.is_active
    assert state.session_id == "s1"
    assert recorder.names() == ["listening-started"]
    assert recorder.events[0].session_id == "s1"
    await driver.stop()


async def test_start_while_active_fails_without_event(bus, recorder, manual_settings):
    driver = make_driver(bus, manual_settings)
    await driver.start("s1")

    with pytest.raises(SessionAlreadyActiveError):
        await driver.start("s2")

    assert recorder.names() == ["listening-started"]
    assert driver.state.session_id == "s1"
    await driver.stop()


async def test_stop_while_idle_fails_without_event(bus, recorder, manual_settings):
    driver = make_driver(bus, manual_settings)

    with pytest.raises(SessionNotActiveError):
        await driver.stop()

    assert recorder.events == []


async def test_stop_publishes_listening_stopped_and_returns_to_idle(bus, recorder, manual_settings):
    driver = make_driver(bus, manual_settings)
    await driver.start("s1")

    state = await driver.stop()

    assert not state.is_active
    assert state.session_id is None
    assert recorder.names() == ["listening-started", "listening-stopped"]
    assert recorder.events[-1].session_id == "s1"

    with pytest.raises(SessionNotActiveError):
        await driver.stop()


async def test_turns_alternate_through_a_shared_cursor(bus, recorder, manual_settings):
    driver = make_driver(bus, manual_settings)
    await driver.start("s1")

    first = driver.tick()
    second = driver.tick()
    third = driver.tick()

    assert first.speaker.role == SpeakerRole.PATIENT
    assert first.text == PATIENT_SENTENCES[0]
    assert second.speaker.role == SpeakerRole.CLINICIAN
    assert second.text == CLINICIAN_SENTENCES[1]
    assert third.text == PATIENT_SENTENCES[2]
    assert [e.utterance for e in recorder.of("transcription")] == [first, second, third]
    await driver.stop()


async def test_utterance_confidence_is_synthetic_and_high(bus, manual_settings, fixed_random):
    driver = make_driver(bus, manual_settings, rng=fixed_random(0.5))
    await driver.start("s1")

    utterance = driver.tick()

    assert utterance.confidence == pytest.approx(0.95)
    await driver.stop()


async def test_exhausted_script_wraps_and_may_add_filler_question(bus, recorder, manual_settings, fixed_random):
    driver = make_driver(bus, manual_settings, rng=fixed_random(0.1))
    await driver.start("s1")

    for _ in range(len(PATIENT_SENTENCES)):
        driver.tick()
    filler = driver.tick()
    restarted = driver.tick()

    assert filler is not None
    assert filler.text in FILLER_QUESTIONS
    assert filler.speaker.role == SpeakerRole.CLINICIAN
    assert restarted.text == PATIENT_SENTENCES[0]
    assert len(recorder.of("transcription")) == len(PATIENT_SENTENCES) + 2
    await driver.stop()


async def test_exhausted_script_wraps_silently_when_filler_not_drawn(bus, recorder, manual_settings, fixed_random):
    driver = make_driver(bus, manual_settings, rng=fixed_random(0.9))
    await driver.start("s1")

    for _ in range(len(PATIENT_SENTENCES)):
        driver.tick()

    assert driver.tick() is None
    assert len(recorder.of("transcription")) == len(PATIENT_SENTENCES)
    assert driver.tick().text == PATIENT_SENTENCES[0]
    await driver.stop()


async def test_tick_while_idle_is_a_noop(bus, recorder, manual_settings):
    driver = make_driver(bus, manual_settings)
    await driver.start("s1")
    await driver.stop()

    assert driver.tick() is None
    assert recorder.of("transcription") == []


async def test_utterance_entities_follow_their_transcription(bus, recorder, manual_settings, wait_until):
    driver = make_driver(bus, manual_settings)
    await driver.start("s1")

    utterance = driver.tick()
    await wait_until(lambda: recorder.of("clinical-entities"))

    names = recorder.names()
    assert names.index("transcription") < names.index("clinical-entities")
    entities = recorder.of("clinical-entities")[0].entities
    assert [e.value for e in entities] == ["chest pain"]
    assert entities[0].context == utterance.text
    await driver.stop()


async def test_utterance_without_keywords_publishes_no_entity_batch(bus, recorder, manual_settings):
    script = ConversationScript(patient_sentences=("Good morning, doctor.",))
    driver = make_driver(bus, manual_settings, script=script)
    await driver.start("s1")

    driver.tick()
    await asyncio.sleep(manual_settings.entity_extraction_delay_seconds * 5)

    assert recorder.of("clinical-entities") == []
    await driver.stop()


async def test_tagging_scheduled_before_stop_still_arrives(bus, recorder, manual_settings, wait_until):
    driver = make_driver(bus, manual_settings)
    await driver.start("s1")

    driver.tick()
    await driver.stop()
    await wait_until(lambda: recorder.of("clinical-entities"))

    names = recorder.names()
    assert names.index("listening-stopped") < names.index("clinical-entities")


async def test_recurring_tick_stops_on_stop(bus, recorder, fast_settings, wait_until):
    driver = make_driver(bus, fast_settings)
    await driver.start("s1")

    await wait_until(lambda: len(recorder.of("transcription")) >= 2)
    await driver.stop()
    emitted = len(recorder.of("transcription"))
    await asyncio.sleep(fast_settings.tick_interval_seconds * 4)

    assert len(recorder.of("transcription")) == emitted
    assert recorder.of("transcription")[0].utterance.text == PATIENT_SENTENCES[0]


async def test_stop_hands_session_to_note_finalizer_after_delay(bus, manual_settings, wait_until):
    finalizer = RecordingFinalizer()
    driver = make_driver(bus, manual_settings, note_finalizer=finalizer)
    await driver.start("s1")

    await driver.stop()
    assert finalizer.sessions == []

    await wait_until(lambda: finalizer.sessions)
    assert finalizer.sessions == ["s1"]


async def test_restart_begins_the_script_again(bus, manual_settings):
    driver = make_driver(bus, manual_settings)
    await driver.start("s1")
    driver.tick()
    driver.tick()
    await driver.stop()

    await driver.start("s2")
    assert driver.tick().text == PATIENT_SENTENCES[0]
    await driver.stop()
