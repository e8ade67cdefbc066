"""
approach.py

[역할]
- 현재 관절각 -> 입력 trajectory 첫 waypoint 로 가는 approach trajectory를 계산한다.
- planning에 사용할 group을 고르고(planning_groups.select), 후보 group의 planner를
  차례로 호출해 처음 성공한 결과를 사용한다 (등록 순서 first-match).

[관절 집합]
- max group: 모션 관절 - planning 제외 관절. 후보 group은 이 밖의 관절을 가질 수 없다.
- min group: max group 중 |current - goal| > joint_tolerance 인 관절.
  비어 있으면 approach 불필요 -> 빈 Trajectory 반환.

[실패]
- 후보 group 없음 -> NoEligibleGroup
- 모든 후보 실패 -> PlanningFailure
- 개별 후보의 목표 거부(TargetRejected), 빈 plan, busy -> 다음 후보로 넘어간다.
- planner가 예외를 던지거나 차원이 맞지 않는 plan을 내면 그 후보의 PlanningFailure로 취급한다.
"""

import logging
from typing import List, Sequence

from .config import PlanningConfig
from .errors import ApproachError, NoEligibleGroup, PlanningFailure, TargetRejected
from .joint_set import enumerate_str, exclude_joints, is_planning_joint, is_subset
from .planning_groups import PlannerBusy, PlanningGroup, PlanningGroupRegistry
from .traj import Trajectory


class ApproachComputer:
    def __init__(self, config: PlanningConfig, registry: PlanningGroupRegistry, logger=None):
        self.config = config
        self.registry = registry
        self.logger = logger or logging.getLogger("approach_planner")

    def planning_sets(self, joint_names: Sequence[str], current_pos: Sequence[float],
                      goal_pos: Sequence[float]):
        max_group: List[str] = []
        max_values: List[float] = []
        min_group: List[str] = []
        tol = self.config.joint_tolerance
        for name, cur, goal in zip(joint_names, current_pos, goal_pos):
            if not is_planning_joint(name, self.config.exclude_from_planning_joints):
                continue
            max_group.append(name)
            max_values.append(goal)
            if abs(cur - goal) > tol:
                min_group.append(name)
        return min_group, max_group, max_values

    def compute_approach(self, joint_names: Sequence[str], current_pos: Sequence[float],
                         goal_pos: Sequence[float]) -> Trajectory:
        min_group, max_group, max_values = self.planning_sets(joint_names, current_pos, goal_pos)

        if not min_group:
            return Trajectory()

        candidates = self.registry.select(min_group, max_group)
        if not candidates:
            msg = ("Can't compute approach trajectory. There are no planning groups that span at least these joints:"
                   f"\n[{enumerate_str(min_group)}]\nand at most these joints:\n[{enumerate_str(max_group)}].")
            self.logger.error(msg)
            raise NoEligibleGroup(
                "No planning group spans the required joints",
                min_group=list(min_group), max_group=list(max_group),
                registered=self.registry.names())

        names = [g.name for g in candidates]
        self.logger.info(f"Approach motion can be computed by the following groups: {enumerate_str(names)}.")

        failures = {}
        for group in candidates:
            try:
                return self.plan_approach(max_group, max_values, group)
            except (TargetRejected, PlanningFailure, PlannerBusy) as e:
                failures[group.name] = str(e)

        self.logger.error(f"Failed to compute approach trajectory with planning groups: [{enumerate_str(names)}].")
        raise PlanningFailure("All candidate planning groups failed", tried=names, reasons=failures)

    def plan_approach(self, joint_names: Sequence[str], joint_values: Sequence[float],
                      group: PlanningGroup) -> Trajectory:
        with group.acquire(self.registry.access_policy) as planner:
            try:
                planner.set_start_state_to_current()
                for name, value in zip(joint_names, joint_values):
                    if not planner.set_joint_target(name, value):
                        self.logger.error(
                            f"Failed attempt to set planning goal for joint '{name}' on group '{group.name}'.")
                        raise TargetRejected("Joint target rejected", joint=name, value=value, group=group.name)
                traj = planner.plan()
            except (ApproachError, PlannerBusy):
                raise
            except Exception as e:
                self.logger.error(f"Planner of group '{group.name}' raised an exception: {e!r}")
                raise PlanningFailure("Planner raised an exception", group=group.name, cause=repr(e)) from e

        if traj is None:
            self.logger.debug(f"Could not compute approach trajectory with planning group '{group.name}'.")
            raise PlanningFailure("Planner returned no plan", group=group.name)
        if traj.empty():
            self.logger.error(
                f"Unexpected error: Approach trajectory computed by group '{group.name}' is empty.")
            raise PlanningFailure("Planner returned an empty trajectory", group=group.name)

        problem = self._check_plan(traj, group)
        if problem:
            self.logger.error(f"Invalid approach trajectory from group '{group.name}': {problem}")
            raise PlanningFailure("Planner returned an invalid trajectory", group=group.name, reason=problem)

        self.logger.info(f"Successfully computed approach with planning group '{group.name}'.")
        return traj

    @staticmethod
    def _check_plan(traj: Trajectory, group: PlanningGroup) -> str:
        names = list(traj.joint_names)
        if len(set(names)) != len(names):
            return f"duplicate joint names [{enumerate_str(names)}]"
        if not is_subset(names, group.joint_names):
            return f"joints [{enumerate_str(exclude_joints(names, group.joint_names))}] are not in the group"
        n = len(names)
        for i, p in enumerate(traj.points):
            if len(p.positions) != n:
                return f"waypoint {i} has {len(p.positions)} positions, expected {n}"
            if len(p.velocities) not in (0, n):
                return f"waypoint {i} has {len(p.velocities)} velocities, expected {n}"
            if len(p.accelerations) not in (0, n):
                return f"waypoint {i} has {len(p.accelerations)} accelerations, expected {n}"
        return ""
