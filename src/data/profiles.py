"""
src/data/profiles.py
────────────────────
Simulation profiles: the knobs that distinguish one fleet simulator
variant from another.

  depot-agent  — one agent per depot, 3 s tick, ~1 km station spacing
  standalone   — all depots in one process, 2 s tick, busier timetable

Both run the phase-based (DWELL → ACCEL → CRUISE → BRAKE) motion model.
The older direct speed random walk is still selectable but deprecated.
"""
from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from enum import Enum

from src.data.components import SUBSYSTEMS
from src.data.models import OperationalStatus

_logger = logging.getLogger(__name__)


class MotionModel(str, Enum):
    PHASED = "phased"
    RANDOM_WALK = "random-walk"   # deprecated


@dataclass(frozen=True)
class SimulationProfile:
    name: str
    status_weights: dict[OperationalStatus, float]
    subsystems: tuple[str, ...] = tuple(SUBSYSTEMS)
    motion_model: MotionModel = MotionModel.PHASED
    status_change_probability: float = 0.03
    # Route units per (km/h · tick): tick_seconds / 3600 / segment_km, inverted
    segment_constant: float = 1200.0
    accel_rate: tuple[float, float] = (6.0, 9.0)     # km/h per tick
    brake_rate: tuple[float, float] = (9.0, 13.0)    # km/h per tick
    dwell_ticks: tuple[int, int] = (8, 20)
    reentry_dwell_ticks: tuple[int, int] = (8, 20)
    odometer_range: tuple[int, int] = (50_000, 500_000)
    last_service_range: tuple[int, int] = (0, 49_999)

    def __post_init__(self) -> None:
        if not self.status_weights:
            raise ValueError(f"profile {self.name!r}: empty status weight table")
        unknown = [s for s in self.subsystems if s not in SUBSYSTEMS]
        if unknown:
            raise ValueError(f"profile {self.name!r}: unknown subsystems {unknown}")
        if self.segment_constant <= 0:
            raise ValueError(f"profile {self.name!r}: segment_constant must be positive")
        if self.motion_model is MotionModel.RANDOM_WALK:
            warnings.warn(
                "the random-walk motion model is deprecated; use MotionModel.PHASED",
                DeprecationWarning,
                stacklevel=3,
            )
            _logger.warning("Profile %s uses the deprecated random-walk motion model", self.name)


DEPOT_AGENT = SimulationProfile(
    name="depot-agent",
    status_weights={
        OperationalStatus.IN_SERVICE: 0.55,
        OperationalStatus.STANDBY: 0.20,
        OperationalStatus.IN_DEPOT: 0.15,
        OperationalStatus.MAINTENANCE: 0.07,
        OperationalStatus.FAULT: 0.03,
    },
)

STANDALONE = SimulationProfile(
    name="standalone",
    status_weights={
        OperationalStatus.IN_SERVICE: 0.72,
        OperationalStatus.STANDBY: 0.10,
        OperationalStatus.IN_DEPOT: 0.10,
        OperationalStatus.MAINTENANCE: 0.05,
        OperationalStatus.FAULT: 0.03,
    },
    segment_constant=1800.0,
    accel_rate=(4.0, 6.0),
    brake_rate=(6.0, 9.0),
    reentry_dwell_ticks=(10, 20),
)

PROFILES: dict[str, SimulationProfile] = {p.name: p for p in (DEPOT_AGENT, STANDALONE)}


def get_profile(name: str) -> SimulationProfile:
    try:
        return PROFILES[name]
    except KeyError:
        raise ValueError(f"unknown simulation profile {name!r}; expected one of {sorted(PROFILES)}") from None
