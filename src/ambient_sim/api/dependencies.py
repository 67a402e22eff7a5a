from __future__ import annotations

from fastapi import Request

from src.ambient_sim.services.simulator import AmbientSimulator


def get_simulator(request: Request) -> AmbientSimulator:
    """FastAPI dependency returning the simulator wired into the application."""

    return request.app.state.simulator
