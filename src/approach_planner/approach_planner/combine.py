"""
combine.py

[역할]
- group 관절만 포함된 approach trajectory를 전체 관절 차원으로 확장하고,
  그 뒤에 입력 trajectory를 시간 offset을 더해 이어 붙인다.

[확장 규칙]
- approach에 있는 관절: position/velocity/acceleration 그대로 복사
- approach에 없는 관절(group 밖): current -> 입력 첫 waypoint 로 선형 보간
  (t=0 ~ t_max=approach 마지막 시간, velocity는 상수 기울기, acceleration은 0)
- t_max == 0 이면 목표 위치를 그대로 쓰고 velocity는 0

[이어 붙이기]
- 입력이 waypoint 1개면 approach가 결과 전체.
- 그 외에는 마지막 approach 점(입력 첫 점과 같은 위치)을 버리고 입력 전체를 offset만큼 밀어서 붙인다.
"""

from typing import List, Sequence

from .traj import TrajPoint, Trajectory


def _expand_point(point_appr: TrajPoint, joint_names: Sequence[str], approach_idx: dict,
                  current_pos: Sequence[float], goal_pos: Sequence[float], t_max: float) -> TrajPoint:
    has_velocities = bool(point_appr.velocities)
    has_accelerations = bool(point_appr.accelerations)
    joint_dim = len(joint_names)

    point = TrajPoint(time_from_start=point_appr.time_from_start)
    point.positions = [0.0] * joint_dim
    if has_velocities:
        point.velocities = [0.0] * joint_dim
    if has_accelerations:
        point.accelerations = [0.0] * joint_dim

    t = point_appr.time_from_start
    for i, name in enumerate(joint_names):
        j = approach_idx.get(name)
        if j is not None:
            point.positions[i] = point_appr.positions[j]
            if has_velocities:
                point.velocities[i] = point_appr.velocities[j]
            if has_accelerations:
                point.accelerations[i] = point_appr.accelerations[j]
            continue

        # planning group 밖의 관절: 선형 보간
        p_min = current_pos[i]
        p_max = goal_pos[i]
        if t_max > 0.0:
            vel = (p_max - p_min) / t_max
            point.positions[i] = p_min + vel * t
        else:
            vel = 0.0
            point.positions[i] = p_max
        if has_velocities:
            point.velocities[i] = vel
        # accelerations는 0으로 이미 채워져 있음

    return point


def combine_trajectories(joint_names: Sequence[str], current_pos: Sequence[float],
                         traj_in: Sequence[TrajPoint], approach: Trajectory) -> List[TrajPoint]:
    goal_pos = traj_in[0].positions
    approach_idx = {n: j for j, n in enumerate(approach.joint_names)}
    t_max = approach.points[-1].time_from_start

    traj_out = [_expand_point(p, joint_names, approach_idx, current_pos, goal_pos, t_max)
                for p in approach.points]

    if len(traj_in) == 1:
        return traj_out

    offset = traj_out[-1].time_from_start
    traj_out.pop()   # 입력 첫 점과 중복

    for p in traj_in:
        q = p.copy()
        q.time_from_start = p.time_from_start + offset
        traj_out.append(q)
    return traj_out
