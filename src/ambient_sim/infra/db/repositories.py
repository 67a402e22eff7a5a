from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from src.ambient_sim.domain.models.clinical_note import NoteStatus, StructuredNote


class NoteRepository(ABC):
    @abstractmethod
    def get(self, note_id: str) -> Optional[StructuredNote]:
        raise NotImplementedError

    @abstractmethod
    def list_by_filters(
        self,
        *,
        session_id: Optional[str] = None,
        status: Optional[NoteStatus] = None,
    ) -> Iterable[StructuredNote]:
        raise NotImplementedError

    @abstractmethod
    def save(self, note: StructuredNote) -> None:
        raise NotImplementedError
