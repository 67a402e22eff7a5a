from __future__ import annotations

import asyncio

from src.ambient_sim.config import Settings


async def simulate_latency(seconds: float, settings: Settings) -> None:
    """Sleep for a simulated network round trip, scaled by ``latency_scale``."""

    delay = seconds * settings.latency_scale
    if delay > 0:
        await asyncio.sleep(delay)
