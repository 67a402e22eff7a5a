from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    return int(value) if value else None


@dataclass
class Settings:
    """Centralized simulator settings.

    This keeps environment-variable handling in one place so other modules can
    depend on strongly-typed attributes instead of calling os.getenv
    directly. Components take a ``Settings`` instance explicitly so tests can
    construct one with tiny delays.
    """

    # Conversation pacing. One utterance is emitted per tick.
    tick_interval_seconds: float = float(os.getenv("SIM_TICK_INTERVAL_SECONDS", "3.0"))
    # Delay between an utterance being published and its entities.
    entity_extraction_delay_seconds: float = float(os.getenv("SIM_ENTITY_EXTRACTION_DELAY_SECONDS", "0.5"))

    # Note generation after listening stops: the finalizer is triggered after
    # note_generation_delay, takes note_synthesis_delay to produce the note and
    # publishes review suggestions review_suggestions_delay later.
    note_generation_delay_seconds: float = float(os.getenv("SIM_NOTE_GENERATION_DELAY_SECONDS", "1.0"))
    note_synthesis_delay_seconds: float = float(os.getenv("SIM_NOTE_SYNTHESIS_DELAY_SECONDS", "2.0"))
    review_suggestions_delay_seconds: float = float(os.getenv("SIM_REVIEW_SUGGESTIONS_DELAY_SECONDS", "1.0"))

    # Probability that an exhausted script is followed by a filler question.
    filler_probability: float = float(os.getenv("SIM_FILLER_PROBABILITY", "0.3"))

    # Simulated external systems.
    integration_success_rate: float = float(os.getenv("SIM_INTEGRATION_SUCCESS_RATE", "0.8"))
    connection_success_rate: float = float(os.getenv("SIM_CONNECTION_SUCCESS_RATE", "0.8"))
    status_flip_probability: float = float(os.getenv("SIM_STATUS_FLIP_PROBABILITY", "0.1"))

    # Multiplier applied to every simulated request latency. 0 disables them.
    latency_scale: float = float(os.getenv("SIM_LATENCY_SCALE", "1.0"))

    # Seed for the shared pseudo-random generator; unset means nondeterministic.
    random_seed: Optional[int] = _optional_int("SIM_RANDOM_SEED")

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Upper bound on events buffered per WebSocket client before dropping.
    max_ws_queue_size: int = int(os.getenv("MAX_WS_QUEUE_SIZE", "1000"))

    # CORS configuration: comma-separated origins (e.g. "https://app.example.com,https://admin.example.com").
    # Default is "*" (allow all) which is acceptable for local development but
    # should be tightened in production.
    cors_allow_origins: str = os.getenv("CORS_ALLOW_ORIGINS", "*")


settings = Settings()
