"""
conversions.py

[역할]
- trajectory_msgs/JointTrajectory(Point) <-> traj.TrajPoint / traj.Trajectory 변환.
- time_from_start: builtin_interfaces/Duration(sec, nanosec) <-> float 초
"""

from builtin_interfaces.msg import Duration
from trajectory_msgs.msg import JointTrajectory, JointTrajectoryPoint

from .traj import TrajPoint, Trajectory, duration_to_sec, sec_to_duration_parts


def sec_to_duration(t: float) -> Duration:
    sec, nanosec = sec_to_duration_parts(t)
    return Duration(sec=sec, nanosec=nanosec)


def point_from_msg(msg: JointTrajectoryPoint) -> TrajPoint:
    return TrajPoint(
        positions=list(msg.positions),
        velocities=list(msg.velocities),
        accelerations=list(msg.accelerations),
        time_from_start=duration_to_sec(msg.time_from_start),
    )


def point_to_msg(point: TrajPoint) -> JointTrajectoryPoint:
    p = JointTrajectoryPoint()
    p.positions = [float(x) for x in point.positions]
    p.velocities = [float(x) for x in point.velocities]
    p.accelerations = [float(x) for x in point.accelerations]
    p.time_from_start = sec_to_duration(point.time_from_start)
    return p


def trajectory_from_msg(msg: JointTrajectory) -> Trajectory:
    return Trajectory(joint_names=list(msg.joint_names),
                      points=[point_from_msg(p) for p in msg.points])


def trajectory_to_msg(joint_names, points) -> JointTrajectory:
    traj = JointTrajectory()
    traj.joint_names = list(joint_names)
    traj.points = [point_to_msg(p) for p in points]
    return traj
