"""
planner.py

[역할]
- planning group 하나에 대응하는 외부 motion planning 기능의 인터페이스(MotionPlanner).
- approach.py는 이 인터페이스만 사용하므로, 실제 MoveIt 클라이언트(moveit_planner.py)와
  테스트/경량 구현(InterpolatingPlanner)을 바꿔 끼울 수 있다.

[인터페이스]
- get_active_joints(): group이 계획하는 관절 이름
- set_start_state_to_current(): 시작 상태를 현재 로봇 상태로
- set_joint_target(name, value) -> bool: 관절 목표 설정 (거부되면 False)
- plan() -> Trajectory | None: 실패 시 None. 결과는 group 관절만 포함한다.

[InterpolatingPlanner]
- 충돌 검사 없이 현재 상태 -> 목표를 quintic으로 보간한다 (traj.make_quintic_joint_traj).
- 이동 시간 = max(최대 관절 변위 / max_velocity, min_duration)
"""

from abc import ABC, abstractmethod
from typing import Callable, Dict, Mapping, Optional, Sequence, Tuple

import numpy as np

from .traj import TrajPoint, Trajectory, make_quintic_joint_traj


class MotionPlanner(ABC):
    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def get_active_joints(self) -> Sequence[str]:
        ...

    @abstractmethod
    def set_start_state_to_current(self) -> None:
        ...

    @abstractmethod
    def set_joint_target(self, joint_name: str, value: float) -> bool:
        ...

    @abstractmethod
    def plan(self) -> Optional[Trajectory]:
        ...


class InterpolatingPlanner(MotionPlanner):
    """
    group_joints: group이 움직이는 관절
    state_source: 현재 관절각 dict(name -> position)를 돌려주는 callable
    joint_limits: name -> (lower, upper). 범위 밖 목표는 거부
    known_joints: 목표로 받아줄 관절 (기본은 state_source에 있는 관절 전체)
    """

    def __init__(self, name: str, group_joints: Sequence[str],
                 state_source: Callable[[], Mapping[str, float]],
                 max_velocity: float = 0.5, min_duration: float = 0.0, dt: float = 0.1,
                 joint_limits: Optional[Dict[str, Tuple[float, float]]] = None,
                 known_joints: Optional[Sequence[str]] = None):
        super().__init__(name)
        if max_velocity <= 0.0:
            raise ValueError("max_velocity must be positive")
        if dt <= 0.0:
            raise ValueError("dt must be positive")
        self.group_joints = list(group_joints)
        self.state_source = state_source
        self.max_velocity = float(max_velocity)
        self.min_duration = float(min_duration)
        self.dt = float(dt)
        self.joint_limits = dict(joint_limits or {})
        self.known_joints = None if known_joints is None else set(known_joints)

        self._start = None
        self._targets = {}

    def get_active_joints(self):
        return list(self.group_joints)

    def set_start_state_to_current(self):
        self._start = dict(self.state_source())
        self._targets = {}

    def set_joint_target(self, joint_name, value):
        known = self.known_joints
        if known is None:
            known = set(self._start or self.state_source())
        if joint_name not in known:
            return False
        if joint_name in self.joint_limits:
            lo, hi = self.joint_limits[joint_name]
            if not (lo <= value <= hi):
                return False
        self._targets[joint_name] = float(value)
        return True

    def plan(self):
        start = self._start if self._start is not None else dict(self.state_source())
        try:
            q0 = np.array([start[n] for n in self.group_joints], dtype=float)
        except KeyError:
            return None
        # 목표가 없는 group 관절은 현재 위치 유지
        q1 = np.array([self._targets.get(n, start[n]) for n in self.group_joints], dtype=float)

        dmax = float(np.max(np.abs(q1 - q0))) if len(q0) else 0.0
        T = max(dmax / self.max_velocity, self.min_duration, self.dt)

        ts, qs, dqs, ddqs = make_quintic_joint_traj(q0, q1, T=T, dt=self.dt)

        traj = Trajectory(joint_names=list(self.group_joints))
        for t, q, dq, ddq in zip(ts, qs, dqs, ddqs):
            traj.points.append(TrajPoint(
                positions=q.tolist(),
                velocities=dq.tolist(),
                accelerations=ddq.tolist(),
                time_from_start=float(t),
            ))
        return traj
