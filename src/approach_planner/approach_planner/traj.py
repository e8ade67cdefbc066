"""
traj.py

[역할]
- approach_planner 전체에서 공유하는 trajectory 자료형과 시간 유틸리티.
- ROS 메시지(trajectory_msgs/JointTrajectory)에 의존하지 않는 순수 파이썬 표현을 제공한다.
  (메시지 변환은 conversions.py 담당)

[자료형]
- TrajPoint: positions / velocities / accelerations / time_from_start(초, float)
  velocities, accelerations가 비어 있으면 '지정되지 않음'을 의미한다.
- Trajectory: joint_names + points. 플래너가 돌려주는 group 범위 trajectory에 사용.

[보조 함수]
- make_quintic_joint_traj: q0 -> q1 quintic time-scaling 궤적 (InterpolatingPlanner가 사용)
- extract_joints: 전체 관절 trajectory에서 일부 관절만 뽑아낸다 (컨트롤러별 분할용)

[연관]
- approach.py, combine.py, timing.py, approach_planner.py
"""

import copy
from dataclasses import dataclass, field
from typing import List, Sequence

import numpy as np


def duration_to_sec(d):
    return float(d.sec) + float(d.nanosec) * 1e-9


def sec_to_duration_parts(t: float):
    """float 초 -> (sec, nanosec). 반올림 오차로 nanosec가 1e9가 되는 경우를 보정한다."""
    sec = int(np.floor(t))
    nanosec = int(round((t - sec) * 1e9))
    if nanosec >= 1_000_000_000:
        sec += 1
        nanosec -= 1_000_000_000
    return sec, nanosec


@dataclass
class TrajPoint:
    positions: List[float] = field(default_factory=list)
    velocities: List[float] = field(default_factory=list)
    accelerations: List[float] = field(default_factory=list)
    time_from_start: float = 0.0

    def copy(self) -> "TrajPoint":
        return copy.deepcopy(self)


@dataclass
class Trajectory:
    joint_names: List[str] = field(default_factory=list)
    points: List[TrajPoint] = field(default_factory=list)

    def empty(self) -> bool:
        return not self.points


def copy_points(points: Sequence[TrajPoint]) -> List[TrajPoint]:
    return [p.copy() for p in points]


def times_of(points: Sequence[TrajPoint]) -> List[float]:
    return [p.time_from_start for p in points]


def _quintic_scaling(t, T):
    s = t / T
    s2, s3, s4, s5 = s*s, s**3, s**4, s**5
    a = 10*s3 - 15*s4 + 6*s5
    adot = (30*s2 - 60*s3 + 30*s4) / T
    addot = (60*s - 180*s2 + 120*s3) / (T*T)
    return a, adot, addot


def make_quintic_joint_traj(q0, q1, T=3.0, dt=0.01):
    """q0 -> q1 quintic 궤적. 마지막 샘플은 항상 정확히 T에서 q1이 되도록 맞춘다."""
    q0 = np.asarray(q0, dtype=float)
    q1 = np.asarray(q1, dtype=float)
    ts = np.arange(dt, T, dt)
    ts = np.append(ts[ts < T - 1e-9], T)   # t=0(현재 상태)은 포함하지 않음
    qs = []
    dqs = []
    ddqs = []
    dq = (q1 - q0)
    for t in ts:
        a, adot, addot = _quintic_scaling(t, T)
        qs.append(q0 + a * dq)
        dqs.append(adot * dq)
        ddqs.append(addot * dq)
    return ts, np.array(qs), np.array(dqs), np.array(ddqs)


def extract_joints(joint_names: Sequence[str], points: Sequence[TrajPoint],
                   subset: Sequence[str]) -> List[TrajPoint]:
    """points(joint_names 순서)를 subset 관절 순서로 재배열한 새 리스트를 만든다."""
    name_to_idx = {n: i for i, n in enumerate(joint_names)}
    missing = [n for n in subset if n not in name_to_idx]
    if missing:
        raise KeyError(f"Joints not present in trajectory: {missing}")
    idx = [name_to_idx[n] for n in subset]

    out = []
    for p in points:
        q = TrajPoint(time_from_start=p.time_from_start)
        q.positions = [p.positions[i] for i in idx]
        if p.velocities:
            q.velocities = [p.velocities[i] for i in idx]
        if p.accelerations:
            q.accelerations = [p.accelerations[i] for i in idx]
        out.append(q)
    return out
