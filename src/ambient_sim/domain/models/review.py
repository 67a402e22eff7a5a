from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class SuggestionType(str, Enum):
    GRAMMAR = "grammar"
    MEDICAL = "medical"
    STRUCTURE = "structure"
    CODING = "coding"
    COMPLETENESS = "completeness"


class SuggestionSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class SuggestionLocation(BaseModel):
    section: str
    start_index: Optional[int] = None
    end_index: Optional[int] = None


class ReviewSuggestion(BaseModel):
    """A reviewer hint targeting one section of a structured note."""

    id: str
    type: SuggestionType
    severity: SuggestionSeverity
    message: str
    location: SuggestionLocation
    suggestion: str
    auto_fixable: bool = False
