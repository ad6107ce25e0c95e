"""
src/data/models.py
──────────────────
Pydantic v2 models for the outbound telemetry events.

Events are immutable snapshots tagged with ``kind`` and ``schemaVersion``;
field names are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from config.alerts import AlertSeverity

SCHEMA_VERSION = 1
MAX_SPEED_KMH = 80.0


class OperationalStatus(str, Enum):
    IN_SERVICE = "IN_SERVICE"
    STANDBY = "STANDBY"
    IN_DEPOT = "IN_DEPOT"
    MAINTENANCE = "MAINTENANCE"
    FAULT = "FAULT"


class MotionPhase(str, Enum):
    DWELL = "DWELL"
    ACCEL = "ACCEL"
    CRUISE = "CRUISE"
    BRAKE = "BRAKE"


class HealthState(str, Enum):
    NORMAL = "NORMAL"
    WARNING = "WARNING"
    FAULT = "FAULT"


class PointPosition(str, Enum):
    NORMAL = "NORMAL"
    REVERSE = "REVERSE"
    INTERMEDIATE = "INTERMEDIATE"


class EventModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class Alert(EventModel):
    code: str
    severity: AlertSeverity
    message: str


class ComponentReading(BaseModel):
    """Subsystem state plus its measurement fields, flattened beside ``state``."""
    model_config = ConfigDict(extra="allow", frozen=True)

    state: HealthState


class FleetEntry(EventModel):
    vehicle_id: str
    series: str
    manufacturer: str
    line: str


class VehicleTelemetry(EventModel):
    kind: Literal["vehicle.telemetry"] = "vehicle.telemetry"
    schema_version: Literal[1] = SCHEMA_VERSION
    vehicle_id: str
    series: str = ""
    manufacturer: str = ""
    depot_id: str = ""
    depot_name: str = ""
    line: str = ""
    timestamp: datetime
    operational_status: OperationalStatus
    speed: float = Field(ge=0.0, le=MAX_SPEED_KMH)
    motion_phase: MotionPhase
    current_stop: str
    next_stop: str | None = None
    odometer: int = Field(ge=0)
    health_score: int = Field(ge=0, le=100)
    components: dict[str, ComponentReading]
    alerts: list[Alert] = Field(default_factory=list)


class PointMachineTelemetry(EventModel):
    kind: Literal["pointmachine.telemetry"] = "pointmachine.telemetry"
    schema_version: Literal[1] = SCHEMA_VERSION
    device_id: str
    local_id: str
    depot_id: str
    state: HealthState
    motor_current: float = Field(ge=0.0)
    voltage: int = Field(ge=0)
    stroke_time: int = Field(ge=0)
    position: PointPosition
    operation_count: int = Field(ge=0)
    alert: Alert | None = None
    timestamp: datetime


class DepotAnnouncement(EventModel):
    kind: Literal["depot.status"] = "depot.status"
    schema_version: Literal[1] = SCHEMA_VERSION
    depot_id: str
    depot_name: str
    line: str
    vehicle_count: int = Field(ge=0)
    vehicle_roster: list[str]
    device_roster: list[str]
    fleet: list[FleetEntry] = Field(default_factory=list)
    agent_version: str
    connected_at: datetime
