"""
config.py

[역할]
- approach planner 설정값(PlanningConfig)을 한 번 만들어 각 컴포넌트에 넘겨준다.
- 노드는 ROS 파라미터를 dict로 모아 PlanningConfig.from_parameters()에 전달한다.

[파라미터]
- approach_planner.joint_tolerance              (기본 1e-3)
- approach_planner.planning_groups              (planning 활성 시 필수)
- approach_planner.exclude_from_planning_joints (기본 [])
- approach_planner.skip_planning_approach_vel   (기본 0.5)
- approach_planner.skip_planning_approach_min_dur (기본 0.0)
- approach_planner.planner_access_policy        (serialize | reject_if_busy, 기본 serialize)
- disable_motion_planning                       (기본 False)
"""

import ast
from dataclasses import dataclass, field
from typing import Mapping, Tuple

from .errors import ConfigurationError

JOINT_TOL_STR = "approach_planner.joint_tolerance"
PLANNING_GROUPS_STR = "approach_planner.planning_groups"
NO_PLANNING_JOINTS_STR = "approach_planner.exclude_from_planning_joints"
SKIP_PLANNING_VEL_STR = "approach_planner.skip_planning_approach_vel"
SKIP_PLANNING_MIN_DUR_STR = "approach_planner.skip_planning_approach_min_dur"
ACCESS_POLICY_STR = "approach_planner.planner_access_policy"
DISABLE_PLANNING_STR = "disable_motion_planning"

POLICY_SERIALIZE = "serialize"
POLICY_REJECT_IF_BUSY = "reject_if_busy"
ACCESS_POLICIES = (POLICY_SERIALIZE, POLICY_REJECT_IF_BUSY)


def parse_list_param(val, name: str):
    """Accept list/tuple or a string like '[arm, torso]'."""
    if val is None:
        return []
    if isinstance(val, (list, tuple)):
        return list(val)
    if isinstance(val, str):
        s = val.strip()
        if not s:
            return []
        try:
            parsed = ast.literal_eval(s)
        except (ValueError, SyntaxError):
            # 따옴표 없는 '[a, b]' 형태
            parsed = [x.strip() for x in s.strip("[]").split(",") if x.strip()]
        if isinstance(parsed, str):
            parsed = [parsed]
        if not isinstance(parsed, (list, tuple)):
            raise ConfigurationError(f"'{name}' must be a list, got: {type(parsed)} from {val}")
        return list(parsed)
    raise ConfigurationError(f"'{name}' must be list or string, got: {type(val)}")


@dataclass(frozen=True)
class PlanningConfig:
    joint_tolerance: float = 1e-3
    planning_groups: Tuple[str, ...] = field(default_factory=tuple)
    exclude_from_planning_joints: Tuple[str, ...] = field(default_factory=tuple)
    skip_planning_approach_vel: float = 0.5
    skip_planning_approach_min_dur: float = 0.0
    disable_motion_planning: bool = False
    planner_access_policy: str = POLICY_SERIALIZE

    def __post_init__(self):
        if self.joint_tolerance < 0.0:
            raise ConfigurationError(f"'{JOINT_TOL_STR}' must be non-negative, got {self.joint_tolerance}")
        if self.skip_planning_approach_vel <= 0.0:
            raise ConfigurationError(
                f"'{SKIP_PLANNING_VEL_STR}' must be positive, got {self.skip_planning_approach_vel}")
        if self.skip_planning_approach_min_dur < 0.0:
            raise ConfigurationError(
                f"'{SKIP_PLANNING_MIN_DUR_STR}' must be non-negative, got {self.skip_planning_approach_min_dur}")
        if self.planner_access_policy not in ACCESS_POLICIES:
            raise ConfigurationError(
                f"'{ACCESS_POLICY_STR}' must be one of {list(ACCESS_POLICIES)}, got '{self.planner_access_policy}'")
        if not self.disable_motion_planning and not self.planning_groups:
            raise ConfigurationError(
                "Unspecified planning groups for computing approach trajectories. "
                f"Please set the '{PLANNING_GROUPS_STR}' parameter")

    @classmethod
    def from_parameters(cls, params: Mapping) -> "PlanningConfig":
        """params: 파라미터 이름 -> 값. 값이 None이거나 키가 없으면 기본값을 쓴다."""
        def get(key, default):
            val = params.get(key)
            return default if val is None else val

        groups = parse_list_param(params.get(PLANNING_GROUPS_STR), PLANNING_GROUPS_STR)
        no_plan = parse_list_param(params.get(NO_PLANNING_JOINTS_STR), NO_PLANNING_JOINTS_STR)

        return cls(
            joint_tolerance=float(get(JOINT_TOL_STR, 1e-3)),
            planning_groups=tuple(str(g) for g in groups),
            exclude_from_planning_joints=tuple(str(j) for j in no_plan),
            skip_planning_approach_vel=float(get(SKIP_PLANNING_VEL_STR, 0.5)),
            skip_planning_approach_min_dur=float(get(SKIP_PLANNING_MIN_DUR_STR, 0.0)),
            disable_motion_planning=bool(get(DISABLE_PLANNING_STR, False)),
            planner_access_policy=str(get(ACCESS_POLICY_STR, POLICY_SERIALIZE)),
        )
