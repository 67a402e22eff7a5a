from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SpeakerRole(str, Enum):
    """Speaker role labels for simulated conversation turns."""

    PATIENT = "patient"
    CLINICIAN = "clinician"


class Speaker(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    role: SpeakerRole


class Utterance(BaseModel):
    """One simulated speech-to-text segment attributed to a speaker."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    confidence: float = Field(ge=0.0, le=1.0)
    timestamp: datetime
    speaker: Speaker
