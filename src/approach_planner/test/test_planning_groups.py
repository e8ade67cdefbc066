import threading

import pytest

from approach_planner.planning_groups import PlannerBusy, PlanningGroup, PlanningGroupRegistry

from fakes import ScriptedPlanner


def _registry(spec, policy="serialize"):
    groups = [PlanningGroup(name, joints, ScriptedPlanner(name, joints)) for name, joints in spec]
    return PlanningGroupRegistry(groups, access_policy=policy)


@pytest.fixture
def registry():
    return _registry([
        ("arm", ["arm_1", "arm_2"]),
        ("arm_torso", ["torso", "arm_2", "arm_1"]),
        ("head", ["head_1", "head_2"]),
        ("torso", ["torso"]),
    ])


def test_group_joint_names_are_sorted():
    g = PlanningGroup("g", ["c", "a", "b"], ScriptedPlanner("g", ["c", "a", "b"]))
    assert g.joint_names == ("a", "b", "c")


def test_select_between_min_and_max(registry):
    groups = registry.select(["arm_1"], ["arm_1", "arm_2", "torso"])
    assert [g.name for g in groups] == ["arm", "arm_torso"]


def test_select_is_order_and_duplicate_independent(registry):
    a = registry.select(["arm_2", "arm_1", "arm_1"], ["torso", "arm_2", "arm_1"])
    b = registry.select(["arm_1", "arm_2"], ["arm_1", "arm_2", "torso", "torso"])
    assert [g.name for g in a] == [g.name for g in b] == ["arm", "arm_torso"]


def test_select_respects_max_group(registry):
    # arm_torso는 max 밖의 torso를 포함하므로 제외
    assert [g.name for g in registry.select(["arm_1"], ["arm_1", "arm_2"])] == ["arm"]


def test_select_no_match(registry):
    assert registry.select(["head_1", "arm_1"], ["head_1", "arm_1"]) == []
    assert PlanningGroupRegistry().select(["a"], ["a"]) == []


def test_from_planners_uses_active_joints():
    reg = PlanningGroupRegistry.from_planners(
        ["left", "right"], lambda name: ScriptedPlanner(name, [f"{name}_2", f"{name}_1"]))

    assert reg.names() == ["left", "right"]
    assert len(reg) == 2
    assert list(reg)[0].joint_names == ("left_1", "left_2")


def test_unknown_policy():
    with pytest.raises(ValueError):
        PlanningGroupRegistry([], access_policy="pool")


def test_reject_if_busy():
    g = PlanningGroup("arm", ["a"], ScriptedPlanner("arm", ["a"]))
    with g.acquire("reject_if_busy"):
        with pytest.raises(PlannerBusy):
            with g.acquire("reject_if_busy"):
                pass
    with g.acquire("reject_if_busy") as planner:
        assert planner is g.planner


def test_serialize_blocks_until_release():
    g = PlanningGroup("arm", ["a"], ScriptedPlanner("arm", ["a"]))
    order = []
    entered = threading.Event()

    def worker():
        with g.acquire("serialize"):
            order.append("worker")

    with g.acquire("serialize"):
        t = threading.Thread(target=worker)
        t.start()
        entered.wait(0.05)
        order.append("main")
    t.join(timeout=2.0)

    assert order == ["main", "worker"]
