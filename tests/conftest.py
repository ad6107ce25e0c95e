"""
tests/conftest.py
─────────────────
Shared pytest fixtures for the RailStream simulator test suite.
"""
import dataclasses
import os
from datetime import datetime, timezone

import numpy as np
import pytest

os.environ.setdefault("SIMULATION_SEED", "42")


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)


@pytest.fixture
def now() -> datetime:
    return datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(now):
    return lambda: now


@pytest.fixture
def steady_profile():
    """Depot-agent profile with the operational status frozen."""
    from src.data.profiles import DEPOT_AGENT
    return dataclasses.replace(DEPOT_AGENT, status_change_probability=0.0)


@pytest.fixture
def engine(steady_profile, rng, clock):
    from src.data.simulator import VehicleTelemetryEngine
    return VehicleTelemetryEngine(profile=steady_profile, rng=rng, clock=clock)


@pytest.fixture
def in_service_state(engine):
    """A vehicle mid-route, IN_SERVICE, dwelling at the 10th station heading outbound."""
    from src.data.models import MotionPhase, OperationalStatus
    state = engine.initial_state()
    state.status = OperationalStatus.IN_SERVICE
    state.phase = MotionPhase.DWELL
    state.speed = 0.0
    state.segment_progress = 0.0
    state.stop_index = 10
    state.direction = 1
    state.dwell_timer = 5
    state.odometer = 100_000.0
    state.odometer_at_last_service = 90_000.0
    return state
