"""
src/data/point_machines.py
──────────────────────────
Trackside point machine (switch) simulator.

Point machines are fixed equipment: no motion, just health. Each sweep
every device of a depot:
  - keeps or resamples its NORMAL / WARNING / FAULT state
  - counts 0–2 throws
  - walks motor current, supply voltage and stroke time inside the
    state's envelope (FAULT drives current and stroke time up, voltage down)
  - reports its blade position (INTERMEDIATE only while FAULT)

FAULT → POINT_FAULT (CRITICAL, stuck throw)
WARNING → POINT_SLOW (HIGH, slow operation)
"""
from __future__ import annotations

from collections.abc import Mapping

import numpy as np

from config.alerts import AlertCode, AlertSeverity
from config.equipment import (
    PM_INITIAL_CURRENT,
    PM_INITIAL_OPERATIONS,
    PM_INITIAL_STROKE,
    PM_INITIAL_VOLTAGE,
    PM_MOTOR_CURRENT,
    PM_OPERATIONS_PER_SWEEP,
    PM_STROKE_TIME,
    PM_VOLTAGE,
    POINT_MACHINE_STABILITY,
    POINT_MACHINE_STATE_WEIGHTS,
)
from src.data.components import evolve_health_state, walk
from src.data.fleet import point_machine_ids
from src.data.models import Alert, HealthState, PointMachineTelemetry, PointPosition
from src.data.sampling import chance, rand_int, uniform
from src.data.simulator import Clock, utcnow
from src.data.state import PointMachineState
from src.data.store import StateRegistry


def split_device_id(device_id: str) -> tuple[str, str]:
    """Split "MOC-PM-A1" into ("MOC", "A1"); ids without the depot prefix keep an empty depot."""
    depot_id, sep, local_id = device_id.partition("-PM-")
    if not sep:
        return "", device_id
    return depot_id, local_id


def derive_alert(pm: PointMachineState) -> Alert | None:
    if pm.state is HealthState.FAULT:
        return Alert(
            code=AlertCode.POINT_FAULT.value,
            severity=AlertSeverity.CRITICAL,
            message=f"PM {pm.local_id}: stuck throw ({pm.stroke_time} ms, {pm.motor_current} A)",
        )
    if pm.state is HealthState.WARNING:
        return Alert(
            code=AlertCode.POINT_SLOW.value,
            severity=AlertSeverity.HIGH,
            message=f"PM {pm.local_id}: slow operation ({pm.stroke_time} ms)",
        )
    return None


class PointMachineEngine:
    def __init__(
        self,
        rng: np.random.Generator | None = None,
        clock: Clock = utcnow,
        *,
        stability: float = POINT_MACHINE_STABILITY,
        weights: Mapping[str, float] = POINT_MACHINE_STATE_WEIGHTS,
    ) -> None:
        if not 0.0 <= stability <= 1.0:
            raise ValueError(f"stability must be within [0, 1], got {stability}")
        if not weights:
            raise ValueError("point machine state weights are empty")
        self.rng = rng if rng is not None else np.random.default_rng()
        self.clock = clock
        self.stability = stability
        self.weights = dict(weights)
        self.states: StateRegistry[PointMachineState] = StateRegistry()

    def initial_state(self, device_id: str) -> PointMachineState:
        rng = self.rng
        depot_id, local_id = split_device_id(device_id)
        return PointMachineState(
            depot_id=depot_id,
            local_id=local_id,
            state=HealthState.NORMAL,
            motor_current=round(uniform(rng, *PM_INITIAL_CURRENT), 1),
            voltage=rand_int(rng, *PM_INITIAL_VOLTAGE),
            stroke_time=rand_int(rng, *PM_INITIAL_STROKE),
            position=self._thrown_position(),
            operation_count=rand_int(rng, *PM_INITIAL_OPERATIONS),
        )

    def _thrown_position(self) -> PointPosition:
        return PointPosition.NORMAL if chance(self.rng, 0.5) else PointPosition.REVERSE

    def advance(self, device_id: str) -> PointMachineTelemetry:
        rng = self.rng
        pm = self.states.get_or_create(device_id, self.initial_state)

        pm.state = evolve_health_state(pm.state, rng, self.stability, self.weights)
        pm.operation_count += rand_int(rng, *PM_OPERATIONS_PER_SWEEP)
        pm.motor_current = walk(pm.motor_current, PM_MOTOR_CURRENT, pm.state, rng)
        pm.voltage = walk(pm.voltage, PM_VOLTAGE, pm.state, rng)
        pm.stroke_time = walk(pm.stroke_time, PM_STROKE_TIME, pm.state, rng)
        pm.position = PointPosition.INTERMEDIATE if pm.state is HealthState.FAULT else self._thrown_position()

        return PointMachineTelemetry(
            device_id=device_id,
            local_id=pm.local_id,
            depot_id=pm.depot_id,
            state=pm.state,
            motor_current=pm.motor_current,
            voltage=pm.voltage,
            stroke_time=pm.stroke_time,
            position=pm.position,
            operation_count=pm.operation_count,
            alert=derive_alert(pm),
            timestamp=self.clock(),
        )

    def sweep(self, depot_id: str) -> list[PointMachineTelemetry]:
        """Advance every statically enumerated device of a depot, in roster order."""
        return [self.advance(device_id) for device_id in point_machine_ids(depot_id)]
