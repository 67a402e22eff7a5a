from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class SessionState(BaseModel):
    """Snapshot of the session driver's listening state."""

    is_active: bool = False
    session_id: Optional[str] = None
