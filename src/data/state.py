"""
src/data/state.py
─────────────────
Mutable per-entity simulation state.

These objects never leave the engines: every tick the engine copies what it
needs into an immutable event model (src/data/models.py).
"""
from __future__ import annotations

from dataclasses import dataclass, field

from src.data.components import ComponentState
from src.data.models import HealthState, MotionPhase, OperationalStatus, PointPosition


def next_stop_index(index: int, direction: int, stop_count: int) -> tuple[int, int]:
    """
    Index reached by moving one stop in ``direction``.

    Reflects at both termini: when the step would leave the route, the
    direction is inverted and the interior-most valid index is returned.
    """
    target = index + direction
    if 0 <= target < stop_count:
        return target, direction
    direction = -direction
    return min(max(index + direction, 0), stop_count - 1), direction


@dataclass
class VehicleState:
    route: tuple[str, ...]
    status: OperationalStatus
    phase: MotionPhase = MotionPhase.DWELL
    speed: float = 0.0
    segment_progress: float = 0.0   # [0, 1) of the current inter-stop segment
    stop_index: int = 0
    direction: int = 1              # +1 / -1 along the route
    odometer: float = 0.0           # km
    odometer_at_last_service: float = 0.0
    dwell_timer: int = 0
    components: dict[str, ComponentState] = field(default_factory=dict)

    @property
    def current_stop(self) -> str:
        return self.route[self.stop_index]

    @property
    def next_stop(self) -> str | None:
        """Stop the vehicle is heading to; None while dwelling."""
        if self.phase is MotionPhase.DWELL:
            return None
        index, _ = next_stop_index(self.stop_index, self.direction, len(self.route))
        return self.route[index]

    @property
    def distance_since_service(self) -> float:
        return self.odometer - self.odometer_at_last_service


@dataclass
class PointMachineState:
    depot_id: str
    local_id: str
    state: HealthState = HealthState.NORMAL
    motor_current: float = 2.4     # A
    voltage: int = 110             # V
    stroke_time: int = 3200        # ms
    position: PointPosition = PointPosition.NORMAL
    operation_count: int = 0
