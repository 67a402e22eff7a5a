from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from src.ambient_sim.domain.models.utterance import Speaker, SpeakerRole

PATIENT_SPEAKER = Speaker(id="patient_123", name="John Doe", role=SpeakerRole.PATIENT)
CLINICIAN_SPEAKER = Speaker(id="provider_456", name="Dr. Sarah Johnson", role=SpeakerRole.CLINICIAN)

PATIENT_SENTENCES: Sequence[str] = (
    "I've been having chest pain for about 2 hours.",
    "It's a sharp, stabbing pain that radiates to my left arm.",
    "On a scale of 1 to 10, I'd say it's about a 7.",
    "I also feel nauseous but no shortness of breath.",
    "I take lisinopril for my blood pressure.",
    "My last blood sugar reading was 135.",
)

CLINICIAN_SENTENCES: Sequence[str] = (
    "Can you describe the pain in more detail?",
    "Let me check your blood pressure.",
    "Your blood pressure is 145 over 92.",
    "I'm going to order an ECG and some blood work.",
    "We'll need to monitor your symptoms closely.",
    "I'll prescribe some medication for the pain.",
)

# Asked by the clinician, occasionally, each time the script wraps around.
FILLER_QUESTIONS: Sequence[str] = (
    "How long have you been experiencing this?",
    "Any other symptoms I should know about?",
)


@dataclass(frozen=True)
class ConversationScript:
    """Fixed lines the simulated conversation cycles through."""

    patient_speaker: Speaker = PATIENT_SPEAKER
    clinician_speaker: Speaker = CLINICIAN_SPEAKER
    patient_sentences: Sequence[str] = PATIENT_SENTENCES
    clinician_sentences: Sequence[str] = CLINICIAN_SENTENCES
    filler_questions: Sequence[str] = FILLER_QUESTIONS


DEFAULT_SCRIPT = ConversationScript()
