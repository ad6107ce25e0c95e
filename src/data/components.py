"""
src/data/components.py
──────────────────────
Component health model shared by all on-board subsystems.

Each tick a subsystem:
  1. keeps its discrete state with high probability, otherwise resamples it
     from the NORMAL / WARNING / FAULT distribution
  2. walks its measurement(s) inside the band allowed by the new state
  3. derives at most one alert from an ordered rule list

Subsystems:
  doors      — faulty car index, sampled while FAULT
  brakes     — brake pipe pressure (%)
  hvac       — cabin temperature (°C)
  powerRail  — third rail feed, no measurement
  traction   — traction motor temperature (°C)
  battery    — auxiliary battery voltage (V)
  cctv       — cameras online out of 24
"""
from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from config.alerts import AlertCode, AlertSeverity
from config.equipment import (
    BATTERY_LOW_V,
    BATTERY_VOLTAGE,
    BRAKE_PRESSURE,
    CABIN_TEMP,
    CCTV_CAMERAS,
    CCTV_FAULT_ACTIVE,
    COMPONENT_STABILITY,
    COMPONENT_STATE_WEIGHTS,
    DOOR_CARS,
    INITIAL_READINGS,
    MOTOR_TEMP,
    TRACTION_OVERHEAT_C,
    WalkSpec,
)
from src.data.models import Alert, ComponentReading, HealthState
from src.data.sampling import chance, clamp, rand_int, round_reading, uniform, weighted_pick


@dataclass
class ComponentState:
    state: HealthState = HealthState.NORMAL
    readings: dict[str, Any] = field(default_factory=dict)

    def snapshot(self) -> ComponentReading:
        return ComponentReading(state=self.state, **_copy_readings(self.readings))


def _copy_readings(readings: dict[str, Any]) -> dict[str, Any]:
    return {k: list(v) if isinstance(v, list) else v for k, v in readings.items()}


# ── Shared evolution primitives ───────────────────────────────────────────────

def evolve_health_state(
    current: HealthState,
    rng: np.random.Generator,
    stability: float = COMPONENT_STABILITY,
    weights: Mapping[str, float] = COMPONENT_STATE_WEIGHTS,
) -> HealthState:
    """Keep ``current`` with probability ``stability``, else resample."""
    if chance(rng, stability):
        return current
    return HealthState(weighted_pick(weights, rng))


def walk(value: float, spec: WalkSpec, state: HealthState, rng: np.random.Generator) -> float | int:
    """One bounded random-walk step for a measurement in the given state."""
    step_low, step_high = spec.step[state.value]
    low, high = spec.bounds[state.value]
    return round_reading(clamp(value + uniform(rng, step_low, step_high), low, high), spec.decimals)


# ── Alert rules ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class AlertRule:
    code: AlertCode
    severity: AlertSeverity
    applies: Callable[[ComponentState], bool]
    message: Callable[[dict[str, Any]], str]

    def render(self, component: ComponentState) -> Alert:
        return Alert(code=self.code.value, severity=self.severity, message=self.message(component.readings))


def _in_state(state: HealthState) -> Callable[[ComponentState], bool]:
    return lambda c: c.state is state


class SubsystemModel:
    """Discrete state, measurements and alert rules of one vehicle subsystem."""

    def __init__(
        self,
        name: str,
        *,
        walks: tuple[WalkSpec, ...] = (),
        sample: Callable[[ComponentState, np.random.Generator], None] | None = None,
        initial: dict[str, Any] | None = None,
        rules: tuple[AlertRule, ...] = (),
    ) -> None:
        self.name = name
        self.walks = walks
        self.sample = sample
        self.initial = initial or {}
        self.rules = rules

    def __repr__(self) -> str:
        return f"SubsystemModel({self.name!r})"

    def initial_state(self) -> ComponentState:
        readings = {spec.field: INITIAL_READINGS[spec.field] for spec in self.walks}
        readings.update(_copy_readings(self.initial))
        return ComponentState(state=HealthState.NORMAL, readings=readings)

    def step(self, component: ComponentState, rng: np.random.Generator) -> Alert | None:
        component.state = evolve_health_state(component.state, rng)
        for spec in self.walks:
            component.readings[spec.field] = walk(component.readings[spec.field], spec, component.state, rng)
        if self.sample is not None:
            self.sample(component, rng)
        return self.alert_for(component)

    def alert_for(self, component: ComponentState) -> Alert | None:
        """First matching rule wins; no match means no alert."""
        for rule in self.rules:
            if rule.applies(component):
                return rule.render(component)
        return None


# ── Sampled (non-walk) measurements ───────────────────────────────────────────

def _sample_fault_cars(component: ComponentState, rng: np.random.Generator) -> None:
    if component.state is HealthState.FAULT:
        component.readings["faultCars"] = [rand_int(rng, *DOOR_CARS)]
    else:
        component.readings["faultCars"] = []


def _sample_active_cameras(component: ComponentState, rng: np.random.Generator) -> None:
    if component.state is HealthState.FAULT:
        component.readings["activeCams"] = rand_int(rng, *CCTV_FAULT_ACTIVE)
    else:
        component.readings["activeCams"] = CCTV_CAMERAS


# ── Subsystem registry ────────────────────────────────────────────────────────

DOORS = SubsystemModel(
    "doors",
    sample=_sample_fault_cars,
    initial={"faultCars": []},
    rules=(
        AlertRule(AlertCode.DOOR_FAULT, AlertSeverity.HIGH, _in_state(HealthState.FAULT),
                  lambda r: f"Door fault on Car {r['faultCars'][0]}"),
    ),
)

BRAKES = SubsystemModel(
    "brakes",
    walks=(BRAKE_PRESSURE,),
    rules=(
        AlertRule(AlertCode.BRAKE_FAULT, AlertSeverity.CRITICAL, _in_state(HealthState.FAULT),
                  lambda r: "Brake pressure below threshold"),
        AlertRule(AlertCode.BRAKE_WARN, AlertSeverity.MEDIUM, _in_state(HealthState.WARNING),
                  lambda r: f"Brake pressure at {r['pressure']}%"),
    ),
)

HVAC = SubsystemModel(
    "hvac",
    walks=(CABIN_TEMP,),
    rules=(
        AlertRule(AlertCode.HVAC_FAULT, AlertSeverity.MEDIUM, _in_state(HealthState.FAULT),
                  lambda r: f"Cabin temperature {r['cabinTemp']}°C"),
    ),
)

POWER_RAIL = SubsystemModel(
    "powerRail",
    rules=(
        AlertRule(AlertCode.POWER_FAULT, AlertSeverity.CRITICAL, _in_state(HealthState.FAULT),
                  lambda r: "Third rail power loss detected"),
    ),
)

TRACTION = SubsystemModel(
    "traction",
    walks=(MOTOR_TEMP,),
    rules=(
        # Overheat is judged on the reading alone, independent of the state
        AlertRule(AlertCode.TRACTION_OVERHEAT, AlertSeverity.HIGH,
                  lambda c: c.readings["motorTemp"] > TRACTION_OVERHEAT_C,
                  lambda r: f"Motor temp {r['motorTemp']}°C"),
        AlertRule(AlertCode.TRACTION_FAULT, AlertSeverity.HIGH, _in_state(HealthState.FAULT),
                  lambda r: f"Traction fault (motor temp {r['motorTemp']}°C)"),
    ),
)

BATTERY = SubsystemModel(
    "battery",
    walks=(BATTERY_VOLTAGE,),
    rules=(
        AlertRule(AlertCode.BATTERY_LOW, AlertSeverity.MEDIUM,
                  lambda c: c.readings["voltage"] < BATTERY_LOW_V,
                  lambda r: f"Battery {r['voltage']}V"),
        AlertRule(AlertCode.BATTERY_FAULT, AlertSeverity.MEDIUM, _in_state(HealthState.FAULT),
                  lambda r: f"Battery fault ({r['voltage']}V)"),
    ),
)

CCTV = SubsystemModel(
    "cctv",
    sample=_sample_active_cameras,
    initial={"activeCams": CCTV_CAMERAS},
    rules=(
        AlertRule(AlertCode.CCTV_PARTIAL, AlertSeverity.LOW, _in_state(HealthState.FAULT),
                  lambda r: f"{CCTV_CAMERAS - r['activeCams']} camera(s) offline"),
    ),
)

SUBSYSTEMS: dict[str, SubsystemModel] = {
    m.name: m for m in (DOORS, BRAKES, HVAC, POWER_RAIL, TRACTION, BATTERY, CCTV)
}
