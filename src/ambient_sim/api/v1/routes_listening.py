from __future__ import annotations

from typing import Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from src.ambient_sim.api.dependencies import get_simulator
from src.ambient_sim.domain.models.session import SessionState
from src.ambient_sim.services.session.driver import SessionStateError
from src.ambient_sim.services.simulator import AmbientSimulator

router = APIRouter(prefix="/listening", tags=["listening"])


class StartListeningRequest(BaseModel):
    session_id: Optional[str] = None


@router.get("", response_model=SessionState)
async def get_listening_state(simulator: AmbientSimulator = Depends(get_simulator)) -> SessionState:
    return simulator.session_state


@router.post("/start", response_model=SessionState)
async def start_listening(
    payload: Optional[StartListeningRequest] = None,
    simulator: AmbientSimulator = Depends(get_simulator),
) -> SessionState:
    """Start a simulated ambient listening session.

    A session id is generated when the client does not supply one. Starting
    while another session is active is rejected with 409.
    """

    session_id = (payload.session_id if payload else None) or f"session_{uuid4().hex}"
    try:
        return await simulator.start_listening(session_id)
    except SessionStateError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc


@router.post("/stop", response_model=SessionState)
async def stop_listening(simulator: AmbientSimulator = Depends(get_simulator)) -> SessionState:
    try:
        return await simulator.stop_listening()
    except SessionStateError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
