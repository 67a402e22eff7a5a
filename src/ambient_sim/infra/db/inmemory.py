from __future__ import annotations

from typing import Dict, Iterable, Optional

from src.ambient_sim.domain.models.clinical_note import NoteStatus, StructuredNote
from src.ambient_sim.infra.db.repositories import NoteRepository


class InMemoryNoteRepository(NoteRepository):
    """Dict-backed note store preserving insertion order.

    Notes are stored and returned by reference; callers that mutate a note
    should ``save`` it back so a persistence-backed implementation behaves
    the same way.
    """

    def __init__(self, notes: Optional[Iterable[StructuredNote]] = None) -> None:
        self._notes: Dict[str, StructuredNote] = {}
        for note in notes or ():
            self.save(note)

    def get(self, note_id: str) -> Optional[StructuredNote]:
        return self._notes.get(note_id)

    def list_by_filters(
        self,
        *,
        session_id: Optional[str] = None,
        status: Optional[NoteStatus] = None,
    ) -> Iterable[StructuredNote]:
        for note in self._notes.values():
            if session_id is not None and note.session_id != session_id:
                continue
            if status is not None and note.status != status:
                continue
            yield note

    def save(self, note: StructuredNote) -> None:
        self._notes[note.id] = note

    def __len__(self) -> int:
        return len(self._notes)
