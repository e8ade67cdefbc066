"""
timing.py

[역할]
- waypoint 시간(time_from_start) 정규화.
- reach time = max(최대 관절 변위 / skip_planning_approach_vel, skip_planning_approach_min_dur)

[사용처]
1) skip planning: 입력 첫 waypoint 시간이 0이면 reach time을 모든 waypoint에 더한다.
2) 결합 후: 첫 시간이 여전히 0이면 reach time을 다시 계산해 EPS_TIME보다 클 때만 더한다.
3) 마지막 보호: 그래도 0이면 첫 waypoint 시간을 EPS_TIME으로 둔다.
   (시간 0에 임의의 위치에 도달하는 것은 불가능하므로 컨트롤러로 보내면 안 됨)
"""

from typing import List, Sequence

import numpy as np

from .config import PlanningConfig
from .traj import TrajPoint, sec_to_duration_parts

EPS_TIME = 1e-3


def no_planning_reach_time(curr_pos: Sequence[float], goal_pos: Sequence[float],
                           vel: float, min_dur: float) -> float:
    if len(curr_pos) == 0:
        return float(min_dur)
    dmax = float(np.max(np.abs(np.asarray(goal_pos, dtype=float) - np.asarray(curr_pos, dtype=float))))
    return max(dmax / vel, min_dur)


def is_zero_time(t: float) -> bool:
    # 메시지(sec, nanosec)로 바꿨을 때 0이 되는지로 판단
    return sec_to_duration_parts(t) == (0, 0)


def shift_times(points: List[TrajPoint], offset: float) -> None:
    for p in points:
        p.time_from_start += offset


def _reach_time(points: Sequence[TrajPoint], current_pos: Sequence[float], config: PlanningConfig) -> float:
    return no_planning_reach_time(current_pos, points[0].positions,
                                  config.skip_planning_approach_vel,
                                  config.skip_planning_approach_min_dur)


def apply_skip_planning_timing(points: List[TrajPoint], current_pos: Sequence[float],
                               config: PlanningConfig) -> List[TrajPoint]:
    if points and is_zero_time(points[0].time_from_start):
        shift_times(points, _reach_time(points, current_pos, config))
    return points


def normalize_first_waypoint(points: List[TrajPoint], current_pos: Sequence[float],
                             config: PlanningConfig) -> List[TrajPoint]:
    if not points:
        return points

    if is_zero_time(points[0].time_from_start):
        reach_time = _reach_time(points, current_pos, config)
        if reach_time > EPS_TIME:
            shift_times(points, reach_time)

    if is_zero_time(points[0].time_from_start):
        # 뒤따르는 점이 EPS_TIME보다 앞서면 같이 올려서 단조 증가를 유지
        for p in points:
            if p.time_from_start >= EPS_TIME:
                break
            p.time_from_start = EPS_TIME
    return points
