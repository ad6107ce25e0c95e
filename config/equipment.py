"""
config/equipment.py
───────────────────
On-board subsystem and trackside point-machine operating envelopes.

Every physical measurement performs a bounded random walk:
  value ← clamp(value + U(step_low, step_high), band_low, band_high)
where both the step range and the clamp band depend on the discrete
health state (NORMAL / WARNING / FAULT).
"""
from dataclasses import dataclass

HEALTH_STATES = ("NORMAL", "WARNING", "FAULT")


@dataclass(frozen=True)
class WalkSpec:
    """Bounded random walk envelope for one measurement."""
    field: str                              # event key, e.g. "pressure"
    step: dict[str, tuple[float, float]]    # state → (low, high) delta per tick
    bounds: dict[str, tuple[float, float]]  # state → (min, max) clamp band
    decimals: int                           # 0 → reported as int


def _per_state(normal: tuple[float, float], fault: tuple[float, float]) -> dict[str, tuple[float, float]]:
    """WARNING shares the NORMAL envelope unless stated otherwise."""
    return {"NORMAL": normal, "WARNING": normal, "FAULT": fault}


# ── Discrete state evolution ──────────────────────────────────────────────────
COMPONENT_STABILITY = 0.95
COMPONENT_STATE_WEIGHTS: dict[str, float] = {"NORMAL": 0.88, "WARNING": 0.09, "FAULT": 0.03}

POINT_MACHINE_STABILITY = 0.95
POINT_MACHINE_STATE_WEIGHTS: dict[str, float] = {"NORMAL": 0.90, "WARNING": 0.07, "FAULT": 0.03}

# ── Vehicle subsystems ────────────────────────────────────────────────────────
BRAKE_PRESSURE = WalkSpec(
    field="pressure",
    step=_per_state((-2.0, 2.0), (-2.0, 2.0)),
    bounds=_per_state((80.0, 100.0), (55.0, 100.0)),
    decimals=1,
)
CABIN_TEMP = WalkSpec(
    field="cabinTemp",
    step=_per_state((-0.5, 0.5), (-0.5, 0.5)),
    bounds=_per_state((20.0, 27.0), (30.0, 38.0)),
    decimals=1,
)
MOTOR_TEMP = WalkSpec(
    field="motorTemp",
    step=_per_state((-2.0, 3.0), (-2.0, 3.0)),
    bounds=_per_state((40.0, 110.0), (40.0, 140.0)),
    decimals=0,
)
BATTERY_VOLTAGE = WalkSpec(
    field="voltage",
    step=_per_state((-0.2, 0.2), (-0.2, 0.2)),
    bounds=_per_state((72.0, 80.0), (65.0, 80.0)),
    decimals=1,
)

INITIAL_READINGS: dict[str, float] = {
    "pressure": 100.0,
    "cabinTemp": 24.0,
    "motorTemp": 50.0,
    "voltage": 77.5,
}

DOOR_CARS = (1, 6)             # cars per trainset
CCTV_CAMERAS = 24              # cameras per trainset
CCTV_FAULT_ACTIVE = (16, 22)   # cameras still online while FAULT

TRACTION_OVERHEAT_C = 120.0
BATTERY_LOW_V = 72.0

# ── Point machines ────────────────────────────────────────────────────────────
PM_MOTOR_CURRENT = WalkSpec(
    field="motorCurrent",
    step={"NORMAL": (-0.2, 0.2), "WARNING": (0.1, 0.5), "FAULT": (0.5, 2.0)},
    bounds={"NORMAL": (1.8, 3.0), "WARNING": (2.0, 6.0), "FAULT": (6.0, 12.0)},
    decimals=1,
)
PM_VOLTAGE = WalkSpec(
    field="voltage",
    step={"NORMAL": (-1.0, 1.0), "WARNING": (-3.0, 1.0), "FAULT": (-8.0, -2.0)},
    bounds={"NORMAL": (108.0, 115.0), "WARNING": (100.0, 115.0), "FAULT": (85.0, 110.0)},
    decimals=0,
)
PM_STROKE_TIME = WalkSpec(
    field="strokeTime",
    step={"NORMAL": (-100.0, 100.0), "WARNING": (200.0, 800.0), "FAULT": (500.0, 2000.0)},
    bounds={"NORMAL": (3000.0, 3500.0), "WARNING": (3000.0, 6500.0), "FAULT": (3000.0, 12000.0)},
    decimals=0,
)

# Initial draws for a freshly observed point machine
PM_INITIAL_CURRENT = (2.0, 2.8)
PM_INITIAL_VOLTAGE = (109, 113)
PM_INITIAL_STROKE = (3100, 3400)
PM_INITIAL_OPERATIONS = (0, 200)
PM_OPERATIONS_PER_SWEEP = (0, 2)
