"""
src/analytics/health_index.py
──────────────────────────────
Vehicle health score and maintenance-due alert.

Score ∈ [0, 100] where 100 = every subsystem NORMAL:
  score = max(0, 100 − 20 × FAULT subsystems − 5 × WARNING subsystems)

The score only counts states, so two vehicles with the same number of
faults and warnings score the same whichever subsystems are affected.
"""

from __future__ import annotations

from collections.abc import Iterable

from config.alerts import MAINTENANCE_INTERVAL_KM, SEVERITY_ORDER, AlertCode, AlertSeverity
from src.data.models import Alert, HealthState

PENALTIES: dict[HealthState, int] = {
    HealthState.FAULT: 20,
    HealthState.WARNING: 5,
    HealthState.NORMAL: 0,
}


def compute_health_score(states: Iterable[HealthState]) -> int:
    penalty = sum(PENALTIES[s] for s in states)
    return max(0, 100 - penalty)


def maintenance_alert(distance_since_service: float) -> Alert | None:
    """LOW alert once the service interval is exceeded, regardless of subsystem health."""
    if distance_since_service <= MAINTENANCE_INTERVAL_KM:
        return None
    return Alert(
        code=AlertCode.SCHEDULED_MAINTENANCE.value,
        severity=AlertSeverity.LOW,
        message=f"Scheduled maintenance due ({round(distance_since_service):,} km since last service)",
    )


def aggregate(
    states: Iterable[HealthState],
    component_alerts: Iterable[Alert | None],
    distance_since_service: float,
) -> tuple[int, list[Alert]]:
    """Reduce one tick of subsystem results into (health score, alert list)."""
    alerts = [a for a in component_alerts if a is not None]
    due = maintenance_alert(distance_since_service)
    if due is not None:
        alerts.append(due)
    return compute_health_score(states), alerts


def worst_severity(alerts: Iterable[Alert]) -> AlertSeverity | None:
    """Most severe level among ``alerts``; None when there are none."""
    return max((a.severity for a in alerts), key=SEVERITY_ORDER.__getitem__, default=None)
