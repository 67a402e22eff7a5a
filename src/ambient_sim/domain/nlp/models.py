from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class EntityType(str, Enum):
    """Coarse clinical entity categories."""

    SYMPTOM = "symptom"
    DIAGNOSIS = "diagnosis"
    MEDICATION = "medication"
    PROCEDURE = "procedure"
    VITAL = "vital"
    ALLERGY = "allergy"


class TextSpan(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: int
    end: int


class ClinicalEntity(BaseModel):
    """A structured clinical fact tagged in a piece of text.

    Entities are never mutated after creation. ``context`` holds the text the
    entity was found in.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    type: EntityType
    value: str
    confidence: float = Field(ge=0.0, le=1.0)
    context: Optional[str] = None
    icd10: Optional[str] = None
    snomed_ct: Optional[str] = None
    location: Optional[TextSpan] = None
