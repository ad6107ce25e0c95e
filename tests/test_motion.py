"""
tests/test_motion.py
────────────────────
Tests for the vehicle status transitions and trapezoidal motion profile.
"""
import dataclasses

import pytest

from src.data.models import MAX_SPEED_KMH, MotionPhase, OperationalStatus
from src.data.motion import (
    BRAKE_AT_PROGRESS,
    CRUISE_ENTRY,
    STANDBY_CEILING,
    advance_motion,
    change_status,
    resample_status,
)
from src.data.profiles import DEPOT_AGENT, STANDALONE, MotionModel, get_profile
from src.data.state import next_stop_index


class TestNextStopIndex:
    def test_interior_moves_by_direction(self):
        assert next_stop_index(5, 1, 10) == (6, 1)
        assert next_stop_index(5, -1, 10) == (4, -1)

    def test_reflects_at_far_end(self):
        assert next_stop_index(9, 1, 10) == (8, -1)

    def test_reflects_at_near_end(self):
        assert next_stop_index(0, -1, 10) == (1, 1)

    def test_single_stop_route_stays_put(self):
        assert next_stop_index(0, 1, 1) == (0, -1)


class TestDwell:
    def test_countdown(self, in_service_state, rng, steady_profile):
        advance_motion(in_service_state, rng, steady_profile)
        assert in_service_state.phase is MotionPhase.DWELL
        assert in_service_state.dwell_timer == 4
        assert in_service_state.speed == 0.0

    def test_departure_resets_progress(self, in_service_state, rng, steady_profile):
        in_service_state.dwell_timer = 1
        in_service_state.segment_progress = 0.4
        advance_motion(in_service_state, rng, steady_profile)
        assert in_service_state.phase is MotionPhase.ACCEL
        assert in_service_state.segment_progress == 0.0


class TestAccelCruiseBrake:
    def test_accel_rate_within_profile_range(self, in_service_state, rng, steady_profile):
        in_service_state.phase = MotionPhase.ACCEL
        in_service_state.speed = 20.0
        in_service_state.segment_progress = 0.1
        advance_motion(in_service_state, rng, steady_profile)
        assert 26.0 <= in_service_state.speed <= 29.0
        assert in_service_state.segment_progress == pytest.approx(0.1 + in_service_state.speed / 1200, abs=1e-3)

    def test_accel_switches_to_cruise_near_max(self, in_service_state, rng, steady_profile):
        in_service_state.phase = MotionPhase.ACCEL
        in_service_state.speed = 70.0
        in_service_state.segment_progress = 0.1
        advance_motion(in_service_state, rng, steady_profile)
        assert in_service_state.speed >= CRUISE_ENTRY
        assert in_service_state.phase is MotionPhase.CRUISE

    def test_progress_beats_speed_threshold_on_same_tick(self, in_service_state, rng, steady_profile):
        in_service_state.phase = MotionPhase.ACCEL
        in_service_state.speed = 70.0
        in_service_state.segment_progress = BRAKE_AT_PROGRESS - 0.01
        advance_motion(in_service_state, rng, steady_profile)
        assert in_service_state.phase is MotionPhase.BRAKE

    def test_cruise_stays_in_band(self, in_service_state, rng, steady_profile):
        in_service_state.phase = MotionPhase.CRUISE
        in_service_state.speed = 76.0
        in_service_state.segment_progress = 0.0
        for _ in range(5):
            advance_motion(in_service_state, rng, steady_profile)
            assert 0.88 * MAX_SPEED_KMH <= in_service_state.speed <= MAX_SPEED_KMH

    def test_cruise_brakes_at_progress_threshold(self, in_service_state, rng, steady_profile):
        in_service_state.phase = MotionPhase.CRUISE
        in_service_state.speed = 78.0
        in_service_state.segment_progress = 0.65
        advance_motion(in_service_state, rng, steady_profile)
        assert in_service_state.phase is MotionPhase.BRAKE

    def test_arrival_advances_one_stop(self, in_service_state, rng, steady_profile):
        in_service_state.phase = MotionPhase.BRAKE
        in_service_state.speed = 5.0
        in_service_state.segment_progress = 0.9
        advance_motion(in_service_state, rng, steady_profile)
        assert in_service_state.speed == 0.0
        assert in_service_state.phase is MotionPhase.DWELL
        assert in_service_state.stop_index == 11
        assert in_service_state.direction == 1
        assert in_service_state.segment_progress == 0.0
        assert 8 <= in_service_state.dwell_timer <= 20

    def test_arrival_past_terminus_reflects(self, in_service_state, rng, steady_profile):
        last = len(in_service_state.route) - 1
        in_service_state.phase = MotionPhase.BRAKE
        in_service_state.speed = 3.0
        in_service_state.stop_index = last
        in_service_state.direction = 1
        advance_motion(in_service_state, rng, steady_profile)
        assert in_service_state.stop_index == last - 1
        assert in_service_state.direction == -1

    def test_next_stop_only_while_moving(self, in_service_state):
        assert in_service_state.next_stop is None
        in_service_state.phase = MotionPhase.CRUISE
        assert in_service_state.next_stop == in_service_state.route[11]


class TestStatusHandling:
    def test_maintenance_mid_cruise_stops_immediately(self, in_service_state, rng, steady_profile):
        in_service_state.phase = MotionPhase.CRUISE
        in_service_state.speed = 75.0
        in_service_state.segment_progress = 0.5
        change_status(in_service_state, OperationalStatus.MAINTENANCE, rng, steady_profile)
        advance_motion(in_service_state, rng, steady_profile)
        assert in_service_state.speed == 0.0
        assert in_service_state.phase is MotionPhase.DWELL
        assert in_service_state.segment_progress == 0.0

    def test_non_service_status_set_directly_still_halts(self, in_service_state, rng, steady_profile):
        in_service_state.status = OperationalStatus.FAULT
        in_service_state.phase = MotionPhase.ACCEL
        in_service_state.speed = 40.0
        advance_motion(in_service_state, rng, steady_profile)
        assert (in_service_state.speed, in_service_state.phase) == (0.0, MotionPhase.DWELL)

    def test_standby_idles_below_ceiling(self, in_service_state, rng, steady_profile):
        in_service_state.phase = MotionPhase.CRUISE
        in_service_state.speed = 75.0
        change_status(in_service_state, OperationalStatus.STANDBY, rng, steady_profile)
        assert in_service_state.speed <= STANDBY_CEILING
        previous = in_service_state.speed
        for _ in range(20):
            advance_motion(in_service_state, rng, steady_profile)
            assert 0.0 <= in_service_state.speed <= previous
            assert in_service_state.phase is MotionPhase.DWELL
            previous = in_service_state.speed

    def test_reentering_service_restarts_at_station(self, in_service_state, rng, steady_profile):
        in_service_state.status = OperationalStatus.IN_DEPOT
        in_service_state.phase = MotionPhase.BRAKE
        in_service_state.segment_progress = 0.8
        in_service_state.speed = 12.0
        change_status(in_service_state, OperationalStatus.IN_SERVICE, rng, steady_profile)
        assert in_service_state.phase is MotionPhase.DWELL
        assert in_service_state.segment_progress == 0.0
        assert in_service_state.speed == 0.0
        assert in_service_state.dwell_timer >= 8

    def test_staying_in_service_keeps_motion(self, in_service_state, rng, steady_profile):
        in_service_state.phase = MotionPhase.CRUISE
        in_service_state.speed = 77.0
        in_service_state.segment_progress = 0.3
        change_status(in_service_state, OperationalStatus.IN_SERVICE, rng, steady_profile)
        assert in_service_state.phase is MotionPhase.CRUISE
        assert in_service_state.segment_progress == 0.3

    def test_status_is_sticky_without_resample(self, in_service_state, rng, steady_profile):
        for _ in range(100):
            resample_status(in_service_state, rng, steady_profile)
        assert in_service_state.status is OperationalStatus.IN_SERVICE

    def test_status_resample_rate(self, in_service_state, rng):
        profile = dataclasses.replace(DEPOT_AGENT, status_change_probability=1.0)
        seen = set()
        for _ in range(500):
            resample_status(in_service_state, rng, profile)
            seen.add(in_service_state.status)
        assert seen == set(OperationalStatus)


class TestInvariants:
    @pytest.mark.parametrize("profile", [DEPOT_AGENT, STANDALONE])
    def test_long_run_invariants(self, in_service_state, rng, profile):
        state = in_service_state
        stop_count = len(state.route)
        for _ in range(20_000):
            index_before, direction_before = state.stop_index, state.direction
            status_before = state.status
            resample_status(state, rng, profile)
            entered_service = status_before is not OperationalStatus.IN_SERVICE and state.status is OperationalStatus.IN_SERVICE
            advance_motion(state, rng, profile)

            assert 0.0 <= state.speed <= MAX_SPEED_KMH
            assert 0.0 <= state.segment_progress < 1.0
            assert 0 <= state.stop_index < stop_count
            if state.direction != direction_before:
                assert not 0 <= index_before + direction_before < stop_count
            if state.phase is MotionPhase.DWELL or entered_service:
                assert state.segment_progress == 0.0

    def test_vehicle_visits_many_stations(self, in_service_state, rng, steady_profile):
        visited = set()
        for _ in range(5_000):
            advance_motion(in_service_state, rng, steady_profile)
            visited.add(in_service_state.stop_index)
        assert len(visited) > 10


class TestProfiles:
    def test_lookup(self):
        assert get_profile("standalone") is STANDALONE
        with pytest.raises(ValueError):
            get_profile("nope")

    def test_rejects_unknown_subsystem(self):
        with pytest.raises(ValueError):
            dataclasses.replace(DEPOT_AGENT, subsystems=("doors", "wipers"))

    def test_rejects_empty_status_table(self):
        with pytest.raises(ValueError):
            dataclasses.replace(DEPOT_AGENT, status_weights={})

    def test_random_walk_model_is_deprecated(self):
        with pytest.warns(DeprecationWarning):
            dataclasses.replace(DEPOT_AGENT, motion_model=MotionModel.RANDOM_WALK)

    def test_random_walk_model_respects_bounds(self, in_service_state, rng):
        with pytest.warns(DeprecationWarning):
            profile = dataclasses.replace(
                DEPOT_AGENT, motion_model=MotionModel.RANDOM_WALK, status_change_probability=0.0
            )
        for _ in range(5_000):
            advance_motion(in_service_state, rng, profile)
            assert 0.0 <= in_service_state.speed <= MAX_SPEED_KMH
            assert 0.0 <= in_service_state.segment_progress < 1.0
            assert 0 <= in_service_state.stop_index < len(in_service_state.route)
