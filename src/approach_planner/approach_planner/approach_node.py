"""
approach_node.py  (ROS2 node: approach_planner_node)

[역할]
- 입력 모션(JointTrajectory)을 받아 현재 자세에서 첫 waypoint까지의 approach를 앞에 붙이고,
  컨트롤러별로 나눠 FollowJointTrajectory goal로 보낸다.

[구독(Subscribe)]
- /joint_states (sensor_msgs/JointState)
  관절 이름별 현재 위치
- ~/motion (trajectory_msgs/JointTrajectory)
  실행할 모션. 첫 waypoint의 time_from_start가 0이면 도달 시간을 자동으로 정한다.

[파라미터]
- approach_planner.* / disable_motion_planning: config.py 참고
- skip_planning: True면 motion planning 없이 시간만 맞춰서 보낸다
- planner_backend: 'moveit' | 'interpolation'
- controllers: 모션을 나눠 보낼 컨트롤러 이름 목록
- interpolation_vel / interpolation_dt: interpolation backend 설정

[연관 파일]
- approach_planner.py: ApproachPlanner.prepend_approach
- moveit_planner.py / planner.py: planning group별 planner
- move_joint_group.py: 컨트롤러 goal 전송
"""

import rclpy
from rclpy.node import Node

from sensor_msgs.msg import JointState
from trajectory_msgs.msg import JointTrajectory

from .approach_planner import ApproachPlanner
from .config import (PlanningConfig, parse_list_param, JOINT_TOL_STR, PLANNING_GROUPS_STR,
                     NO_PLANNING_JOINTS_STR, SKIP_PLANNING_VEL_STR, SKIP_PLANNING_MIN_DUR_STR,
                     ACCESS_POLICY_STR, DISABLE_PLANNING_STR, POLICY_SERIALIZE)
from .conversions import point_from_msg
from .errors import ConfigurationError
from .joint_set import enumerate_str
from .move_joint_group import MoveJointGroup
from .planner import InterpolatingPlanner
from .planning_groups import PlanningGroupRegistry
from .traj import extract_joints


class ApproachPlannerNode(Node):
    def __init__(self):
        super().__init__("approach_planner_node")

        # ====== parameters ======
        self.declare_parameter(JOINT_TOL_STR, 1e-3)
        self.declare_parameter(PLANNING_GROUPS_STR, [""])
        self.declare_parameter(NO_PLANNING_JOINTS_STR, [""])
        self.declare_parameter(SKIP_PLANNING_VEL_STR, 0.5)
        self.declare_parameter(SKIP_PLANNING_MIN_DUR_STR, 0.0)
        self.declare_parameter(ACCESS_POLICY_STR, POLICY_SERIALIZE)
        self.declare_parameter(DISABLE_PLANNING_STR, False)

        self.declare_parameter("skip_planning", False)
        self.declare_parameter("planner_backend", "moveit")
        self.declare_parameter("controllers", [""])
        self.declare_parameter("interpolation_vel", 0.5)
        self.declare_parameter("interpolation_dt", 0.05)

        params = {name: self.get_parameter(name).value for name in (
            JOINT_TOL_STR, SKIP_PLANNING_VEL_STR, SKIP_PLANNING_MIN_DUR_STR,
            ACCESS_POLICY_STR, DISABLE_PLANNING_STR)}
        # [""]는 '설정 안 됨' 자리표시
        for name in (PLANNING_GROUPS_STR, NO_PLANNING_JOINTS_STR):
            params[name] = [x for x in parse_list_param(self.get_parameter(name).value, name) if x]
        self.config = PlanningConfig.from_parameters(params)

        self.joint_positions = {}
        self._moveit_planners = []

        registry = self._make_registry()
        self.approach_planner = ApproachPlanner(
            self.config, registry, logger=self.get_logger().get_child("approach_planner"))

        controllers = [c for c in parse_list_param(self.get_parameter("controllers").value, "controllers") if c]
        self.move_joint_groups = [MoveJointGroup(self, c) for c in controllers]

        self.sub_js = self.create_subscription(JointState, "/joint_states", self._on_joint_state, 10)
        self.sub_motion = self.create_subscription(JointTrajectory, "~/motion", self._on_motion, 10)

        self.get_logger().info(
            f"ApproachPlanner ready. groups=[{enumerate_str(self.config.planning_groups)}], "
            f"controllers=[{enumerate_str(controllers)}]")

    def _make_registry(self):
        policy = self.config.planner_access_policy
        if self.config.disable_motion_planning:
            return PlanningGroupRegistry(access_policy=policy)

        backend = self.get_parameter("planner_backend").value
        if backend == "interpolation":
            vel = float(self.get_parameter("interpolation_vel").value)
            dt = float(self.get_parameter("interpolation_dt").value)
            group_joints = self._interpolation_group_joints()

            def factory(name):
                return InterpolatingPlanner(name, group_joints[name], lambda: dict(self.joint_positions),
                                            max_velocity=vel, dt=dt)
            return PlanningGroupRegistry.from_planners(self.config.planning_groups, factory, policy)

        if backend == "moveit":
            # moveit_msgs는 moveit backend에서만 필요
            from .moveit_planner import MoveItPlanner, load_group_joints, load_joint_limits
            group_joints = load_group_joints(self, self.get_logger())
            joint_limits = load_joint_limits(self)

            def factory(name):
                if name not in group_joints:
                    raise ConfigurationError(f"Planning group '{name}' not found in SRDF")
                planner = MoveItPlanner(name, group_joints[name], joint_limits=joint_limits)
                if not planner.wait_for_service(timeout_sec=5.0):
                    self.get_logger().warn(f"Motion planning service not available yet for group '{name}'")
                self._moveit_planners.append(planner)
                return planner
            return PlanningGroupRegistry.from_planners(self.config.planning_groups, factory, policy)

        raise ConfigurationError(f"Unknown planner_backend '{backend}'. Use 'moveit' or 'interpolation'")

    def _interpolation_group_joints(self):
        # interpolation backend: 'group_joints.<group>' 파라미터로 관절 지정
        out = {}
        for name in self.config.planning_groups:
            key = f"group_joints.{name}"
            self.declare_parameter(key, [""])
            joints = [j for j in parse_list_param(self.get_parameter(key).value, key) if j]
            if not joints:
                raise ConfigurationError(f"Parameter '{key}' is required for the interpolation backend")
            out[name] = joints
        return out

    def _on_joint_state(self, msg: JointState):
        for n, q in zip(msg.name, msg.position):
            self.joint_positions[n] = float(q)

    def _on_motion(self, msg: JointTrajectory):
        joint_names = list(msg.joint_names)
        missing = [n for n in joint_names if n not in self.joint_positions]
        if missing:
            self.get_logger().warn(f"No joint_states yet for: [{enumerate_str(missing)}]")
            return

        groups = self._assign_controllers(joint_names)
        if groups is None:
            return

        current_pos = [self.joint_positions[n] for n in joint_names]
        traj_in = [point_from_msg(p) for p in msg.points]
        skip_planning = bool(self.get_parameter("skip_planning").value)

        result = self.approach_planner.prepend_approach(joint_names, current_pos, skip_planning, traj_in)
        if not result.ok:
            self.get_logger().error(f"Motion rejected: {result.error}")
            return
        if not result.trajectory:
            self.get_logger().info("Empty motion, nothing to execute.")
            return

        for mjg, controller_joints in groups:
            points = extract_joints(joint_names, result.trajectory, controller_joints)
            ok = mjg.send_goal(points, 0.0, self._make_done_cb(mjg.controller_name))
            if not ok:
                self.get_logger().error(f"Failed to send goal to controller '{mjg.controller_name}'")

    def _assign_controllers(self, joint_names):
        groups = []
        covered = set()
        for mjg in self.move_joint_groups:
            if not mjg.is_connected():
                continue
            used = [n for n in joint_names if mjg.is_controlling_joint(n)]
            if not used:
                continue
            if len(used) != len(mjg.joint_names):
                self.get_logger().error(
                    f"Motion must specify all joints of controller '{mjg.controller_name}'.")
                return None
            groups.append((mjg, list(mjg.joint_names)))
            covered.update(used)

        uncovered = [n for n in joint_names if n not in covered]
        if uncovered:
            self.get_logger().error(f"No connected controller for joints: [{enumerate_str(uncovered)}]")
            return None
        return groups

    def _make_done_cb(self, controller_name):
        def done(success, error_code):
            if success:
                self.get_logger().info(f"Controller '{controller_name}' finished motion.")
            else:
                self.get_logger().error(f"Controller '{controller_name}' failed with error code {error_code}.")
        return done

    def destroy_node(self):
        for planner in self._moveit_planners:
            planner.destroy()
        super().destroy_node()


def main():
    rclpy.init()
    node = ApproachPlannerNode()
    try:
        rclpy.spin(node)
    except KeyboardInterrupt:
        pass
    finally:
        node.destroy_node()
        rclpy.shutdown()


if __name__ == "__main__":
    main()
