from __future__ import annotations

import logging
import random
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence

from src.ambient_sim.config import Settings, settings as default_settings
from src.ambient_sim.domain.events import IntegrationResultsEvent
from src.ambient_sim.domain.models.integration import (
    IntegrationResult,
    IntegrationStatus,
    SystemHealth,
    SystemStatus,
)
from src.ambient_sim.services.audit.service import AuditService, audit_service as default_audit_service
from src.ambient_sim.services.events.bus import EventBus
from src.ambient_sim.services.latency import simulate_latency

logger = logging.getLogger("simulator")


class UnknownSystemError(KeyError):
    def __init__(self, system_name: str) -> None:
        super().__init__(system_name)
        self.system_name = system_name

    def __str__(self) -> str:
        return f"Unknown external system {self.system_name}"


def default_systems(now: Optional[datetime] = None) -> List[SystemStatus]:
    """External systems the simulator reports on, with their initial health."""

    now = now or datetime.now(timezone.utc)
    return [
        SystemStatus(name="Epic EHR", status=SystemHealth.ONLINE,
                     last_check=now - timedelta(seconds=30), response_time_ms=245, error_count=0),
        SystemStatus(name="Cerner EHR", status=SystemHealth.ONLINE,
                     last_check=now - timedelta(seconds=45), response_time_ms=312, error_count=0),
        SystemStatus(name="Redox API", status=SystemHealth.DEGRADED,
                     last_check=now - timedelta(seconds=60), response_time_ms=1200, error_count=2),
        SystemStatus(name="FHIR Server", status=SystemHealth.ONLINE,
                     last_check=now - timedelta(seconds=20), response_time_ms=156, error_count=0),
        SystemStatus(name="Speech Service", status=SystemHealth.ONLINE,
                     last_check=now - timedelta(seconds=10), response_time_ms=89, error_count=0),
        SystemStatus(name="Clinical AI", status=SystemHealth.OFFLINE,
                     last_check=now - timedelta(seconds=300), response_time_ms=0, error_count=5),
    ]


class SimulatedIntegrationService:
    """Stand-in for EHR and other downstream integrations.

    Nothing leaves the process: submissions succeed or fail on a weighted coin
    flip and health checks are randomized. Failures are reported as data in
    the returned results, never raised.
    """

    def __init__(
        self,
        *,
        bus: EventBus,
        systems: Optional[Sequence[SystemStatus]] = None,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
        audit: Optional[AuditService] = None,
    ) -> None:
        self._bus = bus
        self._systems: Dict[str, SystemStatus] = {
            system.name: system for system in (systems if systems is not None else default_systems())
        }
        self._settings = settings or default_settings
        self._rng = rng or random.Random()
        self._audit = audit or default_audit_service

    @property
    def system_names(self) -> List[str]:
        return list(self._systems)

    async def finalize_note(self, note_id: str, target_systems: Sequence[str]) -> List[IntegrationResult]:
        """Submit a note to each target system and publish the outcomes as one batch."""

        await simulate_latency(2.0, self._settings)

        results: List[IntegrationResult] = []
        for system in target_systems:
            now = datetime.now(timezone.utc)
            if self._rng.random() < self._settings.integration_success_rate:
                results.append(
                    IntegrationResult(
                        system=system,
                        status=IntegrationStatus.SUCCESS,
                        timestamp=now,
                        result=f"Successfully submitted to {system}",
                    )
                )
                continue

            logger.warning("Simulated submission of note %s to %s failed", note_id, system)
            known = self._systems.get(system)
            if known is not None:
                known.error_count += 1
            results.append(
                IntegrationResult(
                    system=system,
                    status=IntegrationStatus.ERROR,
                    timestamp=now,
                    error=f"Failed to connect to {system}",
                )
            )

        self._audit.log_event(
            action="finalize_note",
            resource_type="structured_note",
            resource_id=note_id,
            extra={
                "targets": list(target_systems),
                "failures": sum(1 for r in results if r.status == IntegrationStatus.ERROR),
            },
        )
        self._bus.publish(IntegrationResultsEvent(results=results))
        return results

    async def get_system_status(self) -> List[SystemStatus]:
        """Return a fresh snapshot with one entry per known system.

        Each call may flip a system to a random health value and refreshes its
        response time and last-check timestamp.
        """

        now = datetime.now(timezone.utc)
        health_values = list(SystemHealth)
        for system in self._systems.values():
            if self._rng.random() < self._settings.status_flip_probability:
                system.status = self._rng.choice(health_values)
            system.last_check = now - timedelta(seconds=self._rng.random() * 120)
            system.response_time_ms = self._rng.random() * 500 + 100
        return [system.model_copy() for system in self._systems.values()]

    async def test_connection(self, system_name: str) -> bool:
        if system_name not in self._systems:
            raise UnknownSystemError(system_name)

        await simulate_latency(1.0 + self._rng.random() * 2.0, self._settings)
        connected = self._rng.random() < self._settings.connection_success_rate

        self._audit.log_event(
            action="test_connection",
            resource_type="external_system",
            resource_id=system_name,
            extra={"connected": connected},
        )
        return connected
