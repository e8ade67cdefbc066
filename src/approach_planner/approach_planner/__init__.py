from .approach_planner import ApproachPlanner, ApproachResult
from .config import PlanningConfig
from .errors import ApproachError, ErrorKind
from .planner import InterpolatingPlanner, MotionPlanner
from .planning_groups import PlanningGroup, PlanningGroupRegistry
from .traj import TrajPoint, Trajectory

__all__ = [
    "ApproachPlanner",
    "ApproachResult",
    "PlanningConfig",
    "ApproachError",
    "ErrorKind",
    "InterpolatingPlanner",
    "MotionPlanner",
    "PlanningGroup",
    "PlanningGroupRegistry",
    "TrajPoint",
    "Trajectory",
]
