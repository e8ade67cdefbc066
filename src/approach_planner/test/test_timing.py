import pytest

from approach_planner.config import PlanningConfig
from approach_planner.timing import (EPS_TIME, apply_skip_planning_timing, is_zero_time,
                                     no_planning_reach_time, normalize_first_waypoint)
from approach_planner.traj import TrajPoint


def _cfg(vel=0.5, min_dur=0.0):
    return PlanningConfig(planning_groups=("arm",), skip_planning_approach_vel=vel,
                          skip_planning_approach_min_dur=min_dur)


def _points(*rows):
    return [TrajPoint(positions=list(p), time_from_start=t) for p, t in rows]


def test_reach_time_uses_max_displacement():
    assert no_planning_reach_time([0.0, 0.0], [1.0, -0.2], 0.5, 0.0) == pytest.approx(2.0)
    assert no_planning_reach_time([0.0, 0.0], [0.1, 0.0], 0.5, 1.0) == pytest.approx(1.0)
    assert no_planning_reach_time([], [], 0.5, 0.3) == pytest.approx(0.3)


def test_skip_planning_shifts_all_points():
    pts = _points(([1.0, 0.0], 0.0), ([1.0, 0.5], 1.0))
    apply_skip_planning_timing(pts, [0.0, 0.0], _cfg())
    assert [p.time_from_start for p in pts] == pytest.approx([2.0, 3.0])


def test_skip_planning_keeps_nonzero_first_time():
    pts = _points(([1.0, 0.0], 0.5), ([1.0, 0.5], 1.0))
    apply_skip_planning_timing(pts, [0.0, 0.0], _cfg())
    assert [p.time_from_start for p in pts] == [0.5, 1.0]


def test_normalize_shifts_when_reach_time_is_significant():
    pts = _points(([0.5, 0.0], 0.0), ([0.6, 0.0], 1.0))
    normalize_first_waypoint(pts, [0.0, 0.0], _cfg())
    assert [p.time_from_start for p in pts] == pytest.approx([1.0, 2.0])


def test_normalize_guard_for_waypoint_at_current_state():
    pts = _points(([0.0, 0.0], 0.0), ([0.6, 0.0], 1.0))
    normalize_first_waypoint(pts, [0.0, 0.0], _cfg())
    assert [p.time_from_start for p in pts] == [EPS_TIME, 1.0]


def test_normalize_guard_skips_trivial_shift():
    # reach time 2e-4 < EPS_TIME -> shift 대신 guard 적용
    pts = _points(([1e-4, 0.0], 0.0))
    normalize_first_waypoint(pts, [0.0, 0.0], _cfg())
    assert pts[0].time_from_start == EPS_TIME


def test_normalize_guard_keeps_times_non_decreasing():
    pts = _points(([0.0], 0.0), ([0.0], 0.0005), ([0.1], 1.0))
    normalize_first_waypoint(pts, [0.0], _cfg())
    assert [p.time_from_start for p in pts] == [EPS_TIME, EPS_TIME, 1.0]


def test_normalize_empty():
    assert normalize_first_waypoint([], [], _cfg()) == []


def test_zero_time_at_nanosecond_resolution():
    assert is_zero_time(0.0)
    assert is_zero_time(3e-10)
    assert not is_zero_time(1e-9)
    assert not is_zero_time(EPS_TIME)


def test_skip_planning_treats_sub_nanosecond_time_as_zero():
    pts = _points(([1.0, 0.0], 3e-10), ([1.0, 0.5], 1.0))
    apply_skip_planning_timing(pts, [0.0, 0.0], _cfg())
    assert [p.time_from_start for p in pts] == pytest.approx([2.0, 3.0])


def test_normalize_guard_for_sub_nanosecond_time():
    pts = _points(([0.0, 0.0], 3e-10), ([0.6, 0.0], 1.0))
    normalize_first_waypoint(pts, [0.0, 0.0], _cfg())
    assert [p.time_from_start for p in pts] == [EPS_TIME, 1.0]
