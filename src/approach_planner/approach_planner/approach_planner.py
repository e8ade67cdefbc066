"""
approach_planner.py

[역할]
- 외부에서 사용하는 진입점(ApproachPlanner).
- prepend_approach: 현재 상태 -> 입력 trajectory 첫 점 approach를 계산하고 입력과 합친 뒤
  waypoint 시간을 정규화해 실행 가능한 trajectory 하나를 돌려준다.

[흐름]
  Idle -> Validating -> (SkipPlanning | Planning) -> Combining -> Normalizing -> Done | Failed

[반환]
- ApproachResult(ok, trajectory, error)
  실패 시 trajectory는 비어 있고 error에 ApproachError(kind, message, details)가 담긴다.
  이 함수는 ApproachError를 밖으로 던지지 않는다.

[연관 파일]
- approach.py: approach 계산 (group 선택 + planner 호출)
- combine.py: approach + 입력 trajectory 결합
- timing.py: 시간 정규화
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .approach import ApproachComputer
from .combine import combine_trajectories
from .config import PlanningConfig
from .errors import ApproachError, ConfigurationError, DimensionMismatch, PlanningDisabled
from .planning_groups import PlanningGroupRegistry
from .timing import apply_skip_planning_timing, normalize_first_waypoint
from .traj import TrajPoint, copy_points


@dataclass
class ApproachResult:
    ok: bool
    trajectory: List[TrajPoint] = field(default_factory=list)
    error: Optional[ApproachError] = None

    @property
    def error_kind(self):
        return None if self.error is None else self.error.kind


class ApproachPlanner:
    def __init__(self, config: PlanningConfig, registry: Optional[PlanningGroupRegistry] = None, logger=None):
        self.config = config
        self.logger = logger or logging.getLogger("approach_planner")
        self.registry = registry if registry is not None else PlanningGroupRegistry(
            access_policy=config.planner_access_policy)

        if config.disable_motion_planning:
            self.logger.warning(
                "Motion planning capability disabled. Goals requesting planning (the default) will be rejected.\n"
                "To disable planning in goal requests set 'skip_planning=true'")
        elif len(self.registry) == 0:
            raise ConfigurationError(
                "No planning groups registered for computing approach trajectories",
                planning_groups=list(config.planning_groups))
        else:
            self.logger.debug(f"Using joint tolerance of {config.joint_tolerance}")
            self.logger.debug(
                f"Using a max velocity of {config.skip_planning_approach_vel} "
                f"and a min duration of {config.skip_planning_approach_min_dur} for unplanned approaches.")

        self.computer = ApproachComputer(config, self.registry, self.logger)

    def needs_approach(self, current_pos: Sequence[float], goal_pos: Sequence[float]) -> bool:
        if len(current_pos) != len(goal_pos):
            raise DimensionMismatch("Size mismatch between current and goal positions",
                                    current=len(current_pos), goal=len(goal_pos))
        tol = self.config.joint_tolerance
        return any(abs(c - g) > tol for c, g in zip(current_pos, goal_pos))

    def prepend_approach(self, joint_names: Sequence[str], current_pos: Sequence[float],
                         skip_planning: bool, traj_in: Sequence[TrajPoint]) -> ApproachResult:
        if not traj_in:
            self.logger.debug("Approach motion not needed: Input trajectory is empty.")
            return ApproachResult(ok=True, trajectory=[])

        try:
            traj_out = self._prepend(joint_names, current_pos, skip_planning, traj_in)
        except ApproachError as e:
            self.logger.debug(f"State: Failed ({e.kind.value})")
            return ApproachResult(ok=False, error=e)

        self.logger.debug("State: Done")
        return ApproachResult(ok=True, trajectory=traj_out)

    def _prepend(self, joint_names, current_pos, skip_planning, traj_in):
        self.logger.debug("State: Validating")
        self._validate(joint_names, current_pos, skip_planning, traj_in)

        if skip_planning:
            self.logger.debug("State: SkipPlanning")
            traj_out = apply_skip_planning_timing(copy_points(traj_in), current_pos, self.config)
        else:
            self.logger.debug("State: Planning")
            approach = self.computer.compute_approach(joint_names, current_pos, traj_in[0].positions)
            if approach.empty():
                traj_out = copy_points(traj_in)
                self.logger.info("Approach motion not needed.")
            else:
                self.logger.debug("State: Combining")
                traj_out = combine_trajectories(joint_names, current_pos, traj_in, approach)

        self.logger.debug("State: Normalizing")
        return normalize_first_waypoint(traj_out, current_pos, self.config)

    def _validate(self, joint_names, current_pos, skip_planning, traj_in):
        joint_dim = len(traj_in[0].positions)
        if joint_dim != len(joint_names):
            self.logger.error(
                "Can't compute approach trajectory: Size mismatch between joint names and input trajectory.")
            raise DimensionMismatch("Size mismatch between joint names and input trajectory",
                                    joint_names=len(joint_names), trajectory=joint_dim)
        if joint_dim != len(current_pos):
            self.logger.error(
                "Can't compute approach trajectory: "
                "Size mismatch between current joint positions and input trajectory.")
            raise DimensionMismatch("Size mismatch between current joint positions and input trajectory",
                                    current_positions=len(current_pos), trajectory=joint_dim)
        for i, p in enumerate(traj_in):
            sizes = [len(p.positions)]
            sizes += [len(v) for v in (p.velocities, p.accelerations) if v]
            if any(s != joint_dim for s in sizes):
                self.logger.error(f"Can't compute approach trajectory: Waypoint {i} has inconsistent dimensions.")
                raise DimensionMismatch("Inconsistent waypoint dimensions", waypoint=i, sizes=sizes,
                                        trajectory=joint_dim)
        if not skip_planning and self.config.disable_motion_planning:
            self.logger.error(
                "Motion planning capability disabled. To disable planning in goal requests, set 'skip_planning=true'")
            raise PlanningDisabled("Motion planning capability disabled")
