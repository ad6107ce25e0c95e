"""
src/data/simulator.py
─────────────────────
Stateful telemetry generator for the rail fleet.

VehicleTelemetryEngine.advance(vehicle_id) performs one tick:
  1. lazily initialise the vehicle on first sight (random stop, status, phase)
  2. maybe resample the operational status
  3. run the motion profile (speed, phase, stop progression) and odometer
  4. evolve every subsystem of the profile and collect their alerts
  5. reduce to a health score + maintenance alert
  6. snapshot everything into an immutable VehicleTelemetry event

Design:
  - The random generator and the clock are injected, so a seeded generator
    plus a fixed clock replays an identical event stream
  - State lives in a StateRegistry owned by the engine instance
  - generate_history() drives a fresh engine offline for analysis
"""
from __future__ import annotations

import itertools
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import numpy as np
import pandas as pd

from src.analytics.health_index import aggregate
from src.data.components import SUBSYSTEMS
from src.data.fleet import build_fleet, depot_info, stations_for_line
from src.data.models import FleetEntry, MotionPhase, OperationalStatus, VehicleTelemetry
from src.data.motion import advance_motion, resample_status
from src.data.profiles import DEPOT_AGENT, SimulationProfile
from src.data.sampling import chance, rand_int, uniform, weighted_pick
from src.data.state import VehicleState
from src.data.store import StateRegistry

Clock = Callable[[], datetime]

# Initial speed draw per phase for vehicles picked up mid-segment (km/h)
INITIAL_SPEED: dict[MotionPhase, tuple[int, int]] = {
    MotionPhase.ACCEL: (10, 50),
    MotionPhase.CRUISE: (60, 80),
    MotionPhase.BRAKE: (5, 40),
}
PHASES = tuple(MotionPhase)


def utcnow() -> datetime:
    return datetime.now(tz=UTC)


class VehicleTelemetryEngine:
    """Owns every vehicle state of one simulation and advances them on demand."""

    def __init__(
        self,
        profile: SimulationProfile = DEPOT_AGENT,
        rng: np.random.Generator | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self.profile = profile
        self.rng = rng if rng is not None else np.random.default_rng()
        self.clock = clock
        self.states: StateRegistry[VehicleState] = StateRegistry()

    def initial_state(self, line: str = "Sukhumvit") -> VehicleState:
        """Random starting point: spread vehicles along the line and across phases."""
        rng = self.rng
        route = stations_for_line(line)
        if not route:
            raise ValueError(f"line {line!r} has no stations")
        status = weighted_pick(self.profile.status_weights, rng)
        phase = PHASES[rand_int(rng, 0, len(PHASES) - 1)] if status is OperationalStatus.IN_SERVICE else MotionPhase.DWELL

        state = VehicleState(
            route=route,
            status=status,
            phase=phase,
            stop_index=rand_int(rng, 0, len(route) - 1),
            direction=1 if chance(rng, 0.5) else -1,
            odometer=float(rand_int(rng, *self.profile.odometer_range)),
            odometer_at_last_service=float(rand_int(rng, *self.profile.last_service_range)),
            components={name: SUBSYSTEMS[name].initial_state() for name in self.profile.subsystems},
        )
        if phase is MotionPhase.DWELL:
            state.dwell_timer = rand_int(rng, *self.profile.dwell_ticks)
        else:
            state.speed = float(rand_int(rng, *INITIAL_SPEED[phase]))
            state.segment_progress = uniform(rng, 0.05, 0.95 if phase is MotionPhase.BRAKE else 0.6)
        return state

    def advance(
        self,
        vehicle_id: str,
        entry: FleetEntry | None = None,
        depot_id: str = "",
        depot_name: str = "",
    ) -> VehicleTelemetry:
        line = entry.line if entry is not None else "Sukhumvit"
        state = self.states.get_or_create(vehicle_id, lambda _: self.initial_state(line))
        profile = self.profile

        resample_status(state, self.rng, profile)
        advance_motion(state, self.rng, profile)
        if state.speed > 0:
            state.odometer += round(state.speed / profile.segment_constant, 2)

        component_alerts = [SUBSYSTEMS[name].step(state.components[name], self.rng) for name in state.components]
        score, alerts = aggregate(
            (c.state for c in state.components.values()),
            component_alerts,
            state.distance_since_service,
        )

        return VehicleTelemetry(
            vehicle_id=vehicle_id,
            series=entry.series if entry is not None else "",
            manufacturer=entry.manufacturer if entry is not None else "",
            depot_id=depot_id,
            depot_name=depot_name,
            line=line,
            timestamp=self.clock(),
            operational_status=state.status,
            speed=state.speed,
            motion_phase=state.phase,
            current_stop=state.current_stop,
            next_stop=state.next_stop,
            odometer=round(state.odometer),
            health_score=score,
            components={name: c.snapshot() for name, c in state.components.items()},
            alerts=alerts,
        )


# ── Offline generation ────────────────────────────────────────────────────────

def generate_history(
    depot_id: str = "MOC",
    ticks: int = 1_000,
    seed: int = 42,
    profile: SimulationProfile = DEPOT_AGENT,
    start: datetime | None = None,
    interval_s: float = 3.0,
) -> list[VehicleTelemetry]:
    """
    Run ``ticks`` round-robin vehicle ticks for one depot without transport.
    Timestamps advance by ``interval_s`` per tick from ``start``.
    """
    info = depot_info(depot_id)
    fleet = build_fleet(depot_id)
    origin = start or datetime(2024, 1, 1, tzinfo=UTC)
    tick = itertools.count()
    engine = VehicleTelemetryEngine(
        profile=profile,
        rng=np.random.default_rng(seed),
        clock=lambda: origin + timedelta(seconds=next(tick) * interval_s),
    )
    roster = itertools.cycle(fleet)
    return [
        engine.advance(entry.vehicle_id, entry, depot_id=depot_id, depot_name=info["name"])
        for entry in itertools.islice(roster, ticks)
    ]


def to_dataframe(events: list[VehicleTelemetry]) -> pd.DataFrame:
    """Flatten events into a DataFrame (nested component fields become dotted columns)."""
    df = pd.json_normalize([e.to_payload() for e in events])
    if not df.empty:
        df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)
        df["alertCount"] = df["alerts"].map(len)
    return df
