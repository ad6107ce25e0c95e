"""
config/alerts.py
────────────────
Alert severity levels and alert codes emitted by the simulators.
"""

from enum import Enum


class AlertSeverity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class AlertCode(str, Enum):
    DOOR_FAULT = "DOOR_FAULT"
    BRAKE_FAULT = "BRAKE_FAULT"
    BRAKE_WARN = "BRAKE_WARN"
    HVAC_FAULT = "HVAC_FAULT"
    POWER_FAULT = "POWER_FAULT"
    TRACTION_OVERHEAT = "TRACTION_OVERHEAT"
    TRACTION_FAULT = "TRACTION_FAULT"
    BATTERY_LOW = "BATTERY_LOW"
    BATTERY_FAULT = "BATTERY_FAULT"
    CCTV_PARTIAL = "CCTV_PARTIAL"
    SCHEDULED_MAINTENANCE = "SCHEDULED_MAINTENANCE"
    POINT_FAULT = "POINT_FAULT"
    POINT_SLOW = "POINT_SLOW"


# Severity ordering for sorting (higher = more severe)
SEVERITY_ORDER: dict[str, int] = {
    AlertSeverity.CRITICAL: 4,
    AlertSeverity.HIGH: 3,
    AlertSeverity.MEDIUM: 2,
    AlertSeverity.LOW: 1,
}

# Distance since last service that makes a vehicle due for maintenance (km)
MAINTENANCE_INTERVAL_KM = 40_000
