"""
planning_groups.py

[역할]
- 설정된 planning group 목록(PlanningGroupRegistry)을 보관하고,
  주어진 최소/최대 관절 집합 사이에 있는 group을 고른다 (select).

[선택 규칙]
- min_group ⊆ group.joint_names ⊆ max_group 인 group을 등록 순서대로 반환.
- 해당 group이 없으면 빈 리스트 (에러 여부는 호출자가 판단).

[동시성]
- registry 자체는 생성 후 읽기 전용.
- group의 planner는 재진입을 가정하지 않는다. acquire(policy)로 group당 한 번에 하나의 호출만 허용:
  - serialize: 앞선 호출이 끝날 때까지 대기
  - reject_if_busy: 사용 중이면 즉시 실패 (해당 후보의 planning 실패로 취급)
"""

import threading
from contextlib import contextmanager
from typing import Callable, Iterable, List, Sequence

from .config import POLICY_REJECT_IF_BUSY, POLICY_SERIALIZE, ACCESS_POLICIES
from .joint_set import is_subset, sorted_joints
from .planner import MotionPlanner


class PlannerBusy(RuntimeError):
    pass


class PlanningGroup:
    def __init__(self, name: str, joint_names: Iterable[str], planner: MotionPlanner):
        self._name = name
        self._joint_names = tuple(sorted_joints(joint_names))
        self._planner = planner
        self._lock = threading.Lock()

    @property
    def name(self):
        return self._name

    @property
    def joint_names(self):
        return self._joint_names

    @property
    def planner(self):
        return self._planner

    @contextmanager
    def acquire(self, policy: str = POLICY_SERIALIZE):
        if policy == POLICY_REJECT_IF_BUSY:
            if not self._lock.acquire(blocking=False):
                raise PlannerBusy(f"Planning group '{self._name}' is busy")
        else:
            self._lock.acquire()
        try:
            yield self._planner
        finally:
            self._lock.release()

    def __repr__(self):
        return f"PlanningGroup(name={self._name!r}, joint_names={list(self._joint_names)})"


class PlanningGroupRegistry:
    def __init__(self, groups: Sequence[PlanningGroup] = (), access_policy: str = POLICY_SERIALIZE):
        if access_policy not in ACCESS_POLICIES:
            raise ValueError(f"Unknown planner access policy '{access_policy}'")
        self._groups = tuple(groups)
        self.access_policy = access_policy

    @classmethod
    def from_planners(cls, group_names: Sequence[str],
                      planner_factory: Callable[[str], MotionPlanner],
                      access_policy: str = POLICY_SERIALIZE) -> "PlanningGroupRegistry":
        groups = []
        for name in group_names:
            planner = planner_factory(name)
            groups.append(PlanningGroup(name, planner.get_active_joints(), planner))
        return cls(groups, access_policy)

    def __len__(self):
        return len(self._groups)

    def __iter__(self):
        return iter(self._groups)

    def names(self) -> List[str]:
        return [g.name for g in self._groups]

    def select(self, min_group: Iterable[str], max_group: Iterable[str]) -> List[PlanningGroup]:
        min_s = sorted_joints(min_group)
        max_s = sorted_joints(max_group)
        return [g for g in self._groups
                if is_subset(min_s, g.joint_names) and is_subset(g.joint_names, max_s)]
