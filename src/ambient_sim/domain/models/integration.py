from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class IntegrationStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    PENDING = "pending"


class IntegrationResult(BaseModel):
    """Outcome of submitting a note to one external system.

    Failures are modeled as data: ``error`` is set on failed rows and
    ``result`` on successful ones.
    """

    system: str
    status: IntegrationStatus
    timestamp: datetime
    result: Optional[str] = None
    error: Optional[str] = None


class SystemHealth(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"
    DEGRADED = "degraded"


class SystemStatus(BaseModel):
    name: str
    status: SystemHealth
    last_check: datetime
    response_time_ms: Optional[float] = None
    error_count: int = 0
