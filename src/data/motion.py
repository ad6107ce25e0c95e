"""
src/data/motion.py
──────────────────
Vehicle motion profile: operational status and the trapezoidal speed
state machine along a fixed route.

Phases (only while IN_SERVICE):
  DWELL   stopped at a station, counting down 8–20 ticks
  ACCEL   speed += U(accel_rate) per tick
  CRUISE  speed jitters inside [88 %, 100 %] of max
  BRAKE   speed -= U(brake_rate) per tick, arrival when speed reaches 0

Segment progress grows by ``speed / K`` per tick (K = profile
segment_constant) and alone decides when braking starts (≥ 0.68).
"""
from __future__ import annotations

import numpy as np

from src.data.models import MAX_SPEED_KMH, MotionPhase, OperationalStatus
from src.data.profiles import MotionModel, SimulationProfile
from src.data.sampling import chance, clamp, rand_int, uniform, weighted_pick
from src.data.state import VehicleState, next_stop_index

BRAKE_AT_PROGRESS = 0.68
CRUISE_ENTRY = 0.92 * MAX_SPEED_KMH
CRUISE_FLOOR = 0.88 * MAX_SPEED_KMH
CRUISE_JITTER = (-2.0, 2.0)
PROGRESS_CEILING = 0.999

STANDBY_CEILING = 15.0
STANDBY_DECAY = (-3.0, 0.0)

RANDOM_WALK_STEP = (-8.0, 8.0)


# ── Status ────────────────────────────────────────────────────────────────────

def start_dwell(state: VehicleState, rng: np.random.Generator, dwell_ticks: tuple[int, int]) -> None:
    state.phase = MotionPhase.DWELL
    state.dwell_timer = rand_int(rng, *dwell_ticks)
    state.segment_progress = 0.0


def change_status(
    state: VehicleState,
    status: OperationalStatus,
    rng: np.random.Generator,
    profile: SimulationProfile,
) -> None:
    """Apply a status transition; entering service always restarts at a station."""
    previous = state.status
    state.status = status
    if status is OperationalStatus.IN_SERVICE:
        if previous is not OperationalStatus.IN_SERVICE:
            state.speed = 0.0
            start_dwell(state, rng, profile.reentry_dwell_ticks)
    elif status is OperationalStatus.STANDBY:
        state.speed = min(state.speed, STANDBY_CEILING)
        start_dwell(state, rng, profile.dwell_ticks)
    else:
        state.speed = 0.0
        start_dwell(state, rng, profile.dwell_ticks)


def resample_status(state: VehicleState, rng: np.random.Generator, profile: SimulationProfile) -> None:
    """Status is sticky; with a small probability it is redrawn from the profile weights."""
    if chance(rng, profile.status_change_probability):
        change_status(state, weighted_pick(profile.status_weights, rng), rng, profile)


# ── Motion ────────────────────────────────────────────────────────────────────

def advance_motion(state: VehicleState, rng: np.random.Generator, profile: SimulationProfile) -> None:
    if state.status is OperationalStatus.IN_SERVICE:
        if profile.motion_model is MotionModel.RANDOM_WALK:
            _random_walk_step(state, rng, profile)
        else:
            _phased_step(state, rng, profile)
    elif state.status is OperationalStatus.STANDBY:
        # Idle shunting: creep down to a stop, never above the yard ceiling
        state.speed = clamp(state.speed + uniform(rng, *STANDBY_DECAY), 0.0, STANDBY_CEILING)
        start_dwell(state, rng, profile.dwell_ticks)
    else:
        state.speed = 0.0
        start_dwell(state, rng, profile.dwell_ticks)

    state.speed = round(state.speed, 1)


def _advance_progress(state: VehicleState, profile: SimulationProfile) -> None:
    state.segment_progress = min(
        state.segment_progress + state.speed / profile.segment_constant,
        PROGRESS_CEILING,
    )


def _arrive(state: VehicleState, rng: np.random.Generator, profile: SimulationProfile) -> None:
    state.stop_index, state.direction = next_stop_index(state.stop_index, state.direction, len(state.route))
    state.speed = 0.0
    start_dwell(state, rng, profile.dwell_ticks)


def _phased_step(state: VehicleState, rng: np.random.Generator, profile: SimulationProfile) -> None:
    if state.phase is MotionPhase.DWELL:
        state.speed = 0.0
        state.dwell_timer -= 1
        if state.dwell_timer <= 0:
            state.dwell_timer = 0
            state.phase = MotionPhase.ACCEL
            state.segment_progress = 0.0

    elif state.phase is MotionPhase.ACCEL:
        state.speed = clamp(state.speed + uniform(rng, *profile.accel_rate), 0.0, MAX_SPEED_KMH)
        _advance_progress(state, profile)
        if state.speed >= CRUISE_ENTRY:
            state.phase = MotionPhase.CRUISE
        # Short segments: progress overrides the cruise switch on the same tick
        if state.segment_progress >= BRAKE_AT_PROGRESS:
            state.phase = MotionPhase.BRAKE

    elif state.phase is MotionPhase.CRUISE:
        state.speed = clamp(state.speed + uniform(rng, *CRUISE_JITTER), CRUISE_FLOOR, MAX_SPEED_KMH)
        _advance_progress(state, profile)
        if state.segment_progress >= BRAKE_AT_PROGRESS:
            state.phase = MotionPhase.BRAKE

    elif state.phase is MotionPhase.BRAKE:
        state.speed = clamp(state.speed - uniform(rng, *profile.brake_rate), 0.0, MAX_SPEED_KMH)
        _advance_progress(state, profile)
        if state.speed <= 0.0:
            _arrive(state, rng, profile)


def _random_walk_step(state: VehicleState, rng: np.random.Generator, profile: SimulationProfile) -> None:
    """Deprecated: speed wanders freely and arrival happens at full progress."""
    if state.phase is MotionPhase.DWELL:
        state.speed = 0.0
        state.dwell_timer -= 1
        if state.dwell_timer <= 0:
            state.dwell_timer = 0
            state.phase = MotionPhase.CRUISE
            state.segment_progress = 0.0
        return

    state.phase = MotionPhase.CRUISE
    state.speed = clamp(state.speed + uniform(rng, *RANDOM_WALK_STEP), 0.0, MAX_SPEED_KMH)
    progress = state.segment_progress + state.speed / profile.segment_constant
    if progress >= 1.0:
        _arrive(state, rng, profile)
    else:
        state.segment_progress = progress
