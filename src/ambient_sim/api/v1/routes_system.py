from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from src.ambient_sim.api.dependencies import get_simulator
from src.ambient_sim.domain.models.integration import SystemStatus
from src.ambient_sim.services.ehr.service import UnknownSystemError
from src.ambient_sim.services.simulator import AmbientSimulator

router = APIRouter(prefix="", tags=["system"])


class ConnectionTestResponse(BaseModel):
    system: str
    connected: bool


@router.get("/health")
async def health_check_v1() -> dict:
    """API v1 health endpoint."""
    return {"status": "ok", "version": "v1"}


@router.get("/system/status", response_model=List[SystemStatus])
async def get_system_status(simulator: AmbientSimulator = Depends(get_simulator)) -> List[SystemStatus]:
    return await simulator.get_system_status()


@router.post("/system/{system_name}/test", response_model=ConnectionTestResponse)
async def test_system_connection(
    system_name: str,
    simulator: AmbientSimulator = Depends(get_simulator),
) -> ConnectionTestResponse:
    try:
        connected = await simulator.test_connection(system_name)
    except UnknownSystemError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="System not found") from exc
    return ConnectionTestResponse(system=system_name, connected=connected)
