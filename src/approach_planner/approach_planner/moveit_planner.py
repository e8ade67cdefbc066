"""
moveit_planner.py

[역할]
- MotionPlanner의 MoveIt 구현. move_group의 /plan_kinematic_path(GetMotionPlan) 서비스를 호출한다.
- group 관절은 /move_group 노드의 robot_description_semantic(SRDF)에서,
  관절 한계는 robot_description(URDF)에서 읽는다.

[주의]
- planner마다 전용 client 노드와 전용 SingleThreadedExecutor를 가진다.
  plan()은 approach_node의 콜백 안에서 호출되므로 전역 executor를 spin하면
  메인 노드 콜백이 다시 들어와 group lock에서 멈출 수 있다.
- 시작 상태는 is_diff=True (move_group이 보고 있는 현재 상태 사용)
- joint_limits가 주어지면 URDF에 없는 관절, 범위 밖 목표는 set_joint_target에서 거부
"""

import math

import rclpy
from rclpy.executors import SingleThreadedExecutor
from rclpy.parameter_client import AsyncParameterClient

from moveit_msgs.msg import Constraints, JointConstraint, MoveItErrorCodes, RobotState
from moveit_msgs.srv import GetMotionPlan

from .conversions import trajectory_from_msg
from .planner import MotionPlanner
from .srdf import groups_with_chains, parse_group_joints, parse_joint_limits


def read_string_param(node, param_name, target_node="/move_group", timeout_sec=5.0) -> str:
    client = AsyncParameterClient(node, target_node)
    if not client.wait_for_services(timeout_sec=timeout_sec):
        raise RuntimeError(f"Parameter services not available on {target_node}")

    fut = client.get_parameters([param_name])
    rclpy.spin_until_future_complete(node, fut, timeout_sec=timeout_sec)
    resp = fut.result()
    if resp is None or not resp.values:
        raise RuntimeError(f"Could not read '{param_name}' from {target_node}")
    return resp.values[0].string_value


def read_srdf(node, target_node="/move_group", timeout_sec=5.0) -> str:
    return read_string_param(node, "robot_description_semantic", target_node, timeout_sec)


def load_group_joints(node, logger, target_node="/move_group", timeout_sec=5.0):
    srdf_xml = read_srdf(node, target_node, timeout_sec)
    for name in groups_with_chains(srdf_xml):
        logger.warning(f"Planning group '{name}' is defined by a chain; only explicit joints are used.")
    return parse_group_joints(srdf_xml)


def load_joint_limits(node, target_node="/move_group", timeout_sec=5.0):
    return parse_joint_limits(read_string_param(node, "robot_description", target_node, timeout_sec))


class MoveItPlanner(MotionPlanner):
    def __init__(self, group_name, joint_names, service_name="/plan_kinematic_path",
                 allowed_planning_time=5.0, num_planning_attempts=1, goal_tolerance=1e-3,
                 vel_scale=1.0, acc_scale=1.0, timeout_sec=10.0, joint_limits=None):
        super().__init__(group_name)
        self.joint_names = list(joint_names)
        self.allowed_planning_time = float(allowed_planning_time)
        self.num_planning_attempts = int(num_planning_attempts)
        self.goal_tolerance = float(goal_tolerance)
        self.vel_scale = float(vel_scale)
        self.acc_scale = float(acc_scale)
        self.timeout_sec = float(timeout_sec)
        self.joint_limits = None if joint_limits is None else dict(joint_limits)

        self._node = rclpy.create_node(f"approach_planner_{group_name}_client")
        self._client = self._node.create_client(GetMotionPlan, service_name)
        self._executor = SingleThreadedExecutor(context=self._node.context)
        self._executor.add_node(self._node)
        self._targets = {}

    def get_active_joints(self):
        return list(self.joint_names)

    def wait_for_service(self, timeout_sec=5.0) -> bool:
        return self._client.wait_for_service(timeout_sec=timeout_sec)

    def set_start_state_to_current(self):
        self._targets = {}

    def set_joint_target(self, joint_name, value):
        if not math.isfinite(value):
            return False
        if self.joint_limits is not None:
            if joint_name not in self.joint_limits:
                self._node.get_logger().debug(f"Joint '{joint_name}' is not in the robot model.")
                return False
            lo, hi = self.joint_limits[joint_name]
            if not (lo <= value <= hi):
                self._node.get_logger().debug(
                    f"Target {value} for joint '{joint_name}' is outside [{lo}, {hi}].")
                return False
        self._targets[joint_name] = float(value)
        return True

    def _make_request(self):
        req = GetMotionPlan.Request()
        mpr = req.motion_plan_request
        mpr.group_name = self.name
        mpr.num_planning_attempts = self.num_planning_attempts
        mpr.allowed_planning_time = self.allowed_planning_time
        mpr.max_velocity_scaling_factor = self.vel_scale
        mpr.max_acceleration_scaling_factor = self.acc_scale
        mpr.start_state = RobotState()
        mpr.start_state.is_diff = True

        goal = Constraints()
        for jname in self.joint_names:
            if jname not in self._targets:
                continue
            jc = JointConstraint()
            jc.joint_name = jname
            jc.position = self._targets[jname]
            jc.tolerance_above = self.goal_tolerance
            jc.tolerance_below = self.goal_tolerance
            jc.weight = 1.0
            goal.joint_constraints.append(jc)
        mpr.goal_constraints = [goal]
        return req

    def plan(self):
        if not self._client.service_is_ready():
            self._node.get_logger().error(f"Service {self._client.srv_name} not available.")
            return None

        future = self._client.call_async(self._make_request())
        self._executor.spin_until_future_complete(future, timeout_sec=self.timeout_sec)
        if not future.done():
            future.cancel()
            self._node.get_logger().error(f"Planning request for group '{self.name}' timed out.")
            return None
        resp = future.result()
        if resp is None:
            return None

        mpres = resp.motion_plan_response
        if mpres.error_code.val != MoveItErrorCodes.SUCCESS:
            self._node.get_logger().debug(f"Planning failed with error code {mpres.error_code.val}")
            return None
        return trajectory_from_msg(mpres.trajectory.joint_trajectory)

    def destroy(self):
        self._executor.remove_node(self._node)
        self._executor.shutdown()
        self._node.destroy_node()
