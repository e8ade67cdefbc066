import logging

import numpy as np
import pytest

from approach_planner import ApproachPlanner, PlanningConfig, PlanningGroup, PlanningGroupRegistry, TrajPoint
from approach_planner.errors import ConfigurationError, DimensionMismatch, ErrorKind
from approach_planner.timing import EPS_TIME

from fakes import ScriptedPlanner, make_traj

JOINTS = ["joint1", "joint2"]


def _planner(planners=(), **cfg):
    planners = list(planners)
    cfg.setdefault("planning_groups", tuple(p.name for p in planners) or ("none",))
    config = PlanningConfig(**cfg)
    registry = PlanningGroupRegistry(
        [PlanningGroup(p.name, p.get_active_joints(), p) for p in planners],
        config.planner_access_policy)
    return ApproachPlanner(config, registry)


def _times(points):
    return [p.time_from_start for p in points]


def test_construction_requires_groups_when_planning_enabled():
    with pytest.raises(ConfigurationError):
        _planner(planning_groups=("arm",))


def test_planning_disabled_construction_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="approach_planner"):
        _planner(disable_motion_planning=True)
    assert "Motion planning capability disabled" in caplog.text


def test_needs_approach_strict_tolerance():
    ap = _planner(disable_motion_planning=True, joint_tolerance=0.25)
    assert not ap.needs_approach([0.0, 0.0], [0.25, -0.25])
    assert ap.needs_approach([0.0, 0.0], [0.0, 0.2501])
    with pytest.raises(DimensionMismatch):
        ap.needs_approach([0.0], [0.0, 0.0])


def test_empty_input_is_returned_unchanged():
    res = _planner(disable_motion_planning=True).prepend_approach(JOINTS, [0.0], False, [])
    assert res.ok and res.trajectory == []


@pytest.mark.parametrize("names,current", [
    (["joint1"], [0.0, 0.0]),
    (JOINTS, [0.0]),
])
def test_dimension_mismatch(names, current):
    ap = _planner([ScriptedPlanner("arm", JOINTS)])
    res = ap.prepend_approach(names, current, False, [TrajPoint(positions=[0.5, 0.5])])

    assert not res.ok
    assert res.error_kind is ErrorKind.DIMENSION_MISMATCH
    assert res.trajectory == []


def test_dimension_mismatch_in_later_waypoint():
    ap = _planner([ScriptedPlanner("arm", JOINTS)])
    traj_in = [TrajPoint(positions=[0.5, 0.5]), TrajPoint(positions=[0.5], time_from_start=1.0)]
    res = ap.prepend_approach(JOINTS, [0.0, 0.0], True, traj_in)
    assert res.error_kind is ErrorKind.DIMENSION_MISMATCH


def test_planning_disabled_rejects_planning_requests():
    ap = _planner(disable_motion_planning=True)
    res = ap.prepend_approach(JOINTS, [0.0, 0.0], False, [TrajPoint(positions=[0.5, 0.5])])
    assert res.error_kind is ErrorKind.PLANNING_DISABLED

    res = ap.prepend_approach(JOINTS, [0.0, 0.0], True, [TrajPoint(positions=[0.5, 0.5])])
    assert res.ok


def test_full_group_scenario():
    plan = make_traj(JOINTS, [([0.2, 0.2], 1.0), ([0.5, 0.5], 2.0)])
    ap = _planner([ScriptedPlanner("arm", JOINTS, result=plan)], joint_tolerance=0.01)

    res = ap.prepend_approach(JOINTS, [0.0, 0.0], False, [TrajPoint(positions=[0.5, 0.5])])

    assert res.ok
    assert _times(res.trajectory) == [1.0, 2.0]
    assert [p.positions for p in res.trajectory] == [[0.2, 0.2], [0.5, 0.5]]


def test_partial_group_scenario():
    plan = make_traj(["joint1"], [([0.2], 1.0), ([0.5], 2.0)])
    ap = _planner([ScriptedPlanner("arm", ["joint1"], result=plan)], joint_tolerance=0.01,
                  exclude_from_planning_joints=("joint2",))

    res = ap.prepend_approach(JOINTS, [0.0, 0.0], False, [TrajPoint(positions=[0.5, 0.5])])

    assert res.ok
    assert _times(res.trajectory) == [1.0, 2.0]
    np.testing.assert_allclose([p.positions[1] for p in res.trajectory], [0.25, 0.5])


def test_skip_planning_scenario():
    ap = _planner(disable_motion_planning=True, skip_planning_approach_vel=0.5)
    traj_in = [TrajPoint(positions=[1.0, 0.0]), TrajPoint(positions=[1.0, 0.2], time_from_start=1.0)]

    res = ap.prepend_approach(JOINTS, [0.0, 0.0], True, traj_in)

    assert res.ok
    assert _times(res.trajectory) == pytest.approx([2.0, 3.0])
    assert _times(traj_in) == [0.0, 1.0]


def test_no_approach_needed_keeps_input():
    p = ScriptedPlanner("arm", JOINTS)
    ap = _planner([p], joint_tolerance=0.01)
    traj_in = [
        TrajPoint(positions=[0.005, 0.0], velocities=[0.0, 0.0]),
        TrajPoint(positions=[0.3, 0.1], velocities=[0.1, 0.0], time_from_start=1.0),
    ]

    res = ap.prepend_approach(JOINTS, [0.0, 0.0], False, traj_in)

    assert res.ok and p.calls == []
    assert [q.positions for q in res.trajectory] == [q.positions for q in traj_in]
    assert [q.velocities for q in res.trajectory] == [q.velocities for q in traj_in]
    # 0.005 / 0.5 = 0.01 > EPS_TIME 이므로 전체 이동
    assert _times(res.trajectory) == pytest.approx([0.01, 1.01])


def test_zero_time_guard_when_already_at_goal():
    ap = _planner([ScriptedPlanner("arm", JOINTS)])
    res = ap.prepend_approach(JOINTS, [0.3, 0.3], False, [TrajPoint(positions=[0.3, 0.3])])

    assert res.ok
    assert _times(res.trajectory) == [EPS_TIME]


def test_planning_failure_has_no_partial_trajectory():
    ap = _planner([ScriptedPlanner("arm", JOINTS, result=None)])
    res = ap.prepend_approach(JOINTS, [0.0, 0.0], False, [TrajPoint(positions=[0.5, 0.5])])

    assert not res.ok
    assert res.error_kind is ErrorKind.PLANNING_FAILURE
    assert res.trajectory == []
    assert res.error.details["tried"] == ["arm"]


def test_no_eligible_group_result():
    ap = _planner([ScriptedPlanner("left", ["joint1"])])
    res = ap.prepend_approach(JOINTS, [0.0, 0.0], False, [TrajPoint(positions=[0.5, 0.5])])
    assert res.error_kind is ErrorKind.NO_ELIGIBLE_GROUP


def test_malformed_plan_falls_back_to_next_group():
    bad = make_traj(JOINTS, [])
    bad.points.append(TrajPoint(positions=[0.5], time_from_start=1.0))
    good = make_traj(JOINTS, [([0.5, 0.5], 1.0)])
    ap = _planner([ScriptedPlanner("a", JOINTS, result=bad), ScriptedPlanner("b", JOINTS, result=good)])

    res = ap.prepend_approach(JOINTS, [0.0, 0.0], False, [TrajPoint(positions=[0.5, 0.5])])

    assert res.ok
    assert [p.positions for p in res.trajectory] == [[0.5, 0.5]]


def test_planner_exception_falls_back_to_next_group():
    good = make_traj(JOINTS, [([0.5, 0.5], 1.0)])
    crashing = ScriptedPlanner("a", JOINTS, error=RuntimeError("planner backend crashed"))
    ap = _planner([crashing, ScriptedPlanner("b", JOINTS, result=good)])

    res = ap.prepend_approach(JOINTS, [0.0, 0.0], False, [TrajPoint(positions=[0.5, 0.5])])

    assert res.ok
    assert _times(res.trajectory) == [1.0]


def test_planner_exceptions_in_every_group_are_a_planning_failure():
    ap = _planner([ScriptedPlanner(n, JOINTS, error=RuntimeError("boom")) for n in ("a", "b")])

    res = ap.prepend_approach(JOINTS, [0.0, 0.0], False, [TrajPoint(positions=[0.5, 0.5])])

    assert not res.ok
    assert res.error_kind is ErrorKind.PLANNING_FAILURE
    assert res.error.details["tried"] == ["a", "b"]


@pytest.mark.parametrize("skip_planning", [True, False])
@pytest.mark.parametrize("first_time", [0.0, 0.5])
def test_output_times_are_monotonic_and_positive(skip_planning, first_time):
    plan = make_traj(["joint1"], [([0.1], 0.5), ([0.4], 1.0), ([0.8], 1.5)], with_vel=True)
    ap = _planner([ScriptedPlanner("arm", ["joint1"], result=plan)],
                  exclude_from_planning_joints=("joint2",))
    traj_in = [
        TrajPoint(positions=[0.8, -0.4], time_from_start=first_time),
        TrajPoint(positions=[0.9, -0.3], time_from_start=first_time + 1.0),
        TrajPoint(positions=[1.0, -0.2], time_from_start=first_time + 2.0),
    ]

    res = ap.prepend_approach(JOINTS, [0.0, 0.0], skip_planning, traj_in)

    assert res.ok
    times = _times(res.trajectory)
    assert times[0] > 0.0
    assert all(b >= a for a, b in zip(times, times[1:]))
    for p in res.trajectory:
        assert len(p.positions) == len(JOINTS)
        assert p.velocities == [] or len(p.velocities) == len(JOINTS)
        assert p.accelerations == [] or len(p.accelerations) == len(JOINTS)
