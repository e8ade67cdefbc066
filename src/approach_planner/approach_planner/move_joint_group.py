"""
move_joint_group.py

[역할]
- 컨트롤러 하나(<controller>/follow_joint_trajectory)에 trajectory goal을 보내는 실행 클라이언트.
- 컨트롤러가 담당하는 관절 목록은 컨트롤러 노드의 'joints' 파라미터에서 읽는다.
  action server가 아직 없으면 1초 뒤 다시 configure 한다.

[send_goal]
- points: 컨트롤러 관절 순서(joint_names)에 맞춘 TrajPoint 리스트
- time_offset: 모든 time_from_start에 더할 시간(초)
- on_complete(success: bool, error_code: int): goal 하나당 정확히 한 번 호출
"""

from rclpy.action import ActionClient
from rclpy.parameter_client import AsyncParameterClient

from action_msgs.msg import GoalStatus
from control_msgs.action import FollowJointTrajectory

from .conversions import trajectory_to_msg
from .traj import TrajPoint


class MoveJointGroup:
    def __init__(self, node, controller_name: str):
        self.node = node
        self.controller_name = controller_name.strip("/")
        self.logger = node.get_logger().get_child(self.controller_name.replace("/", "_"))
        self.client = ActionClient(node, FollowJointTrajectory,
                                   f"/{self.controller_name}/follow_joint_trajectory")
        self.param_client = AsyncParameterClient(node, f"/{self.controller_name}")
        self.joint_names = []
        self._configure_timer = None
        self.configure()

    def configure(self):
        if not self.client.server_is_ready() or not self.param_client.services_are_ready():
            if self._configure_timer is None:
                self._configure_timer = self.node.create_timer(1.0, self.configure)
            return

        if self._configure_timer is not None:
            self.node.destroy_timer(self._configure_timer)
            self._configure_timer = None

        fut = self.param_client.get_parameters(["joints"])
        fut.add_done_callback(self._on_joints)

    def _on_joints(self, fut):
        resp = fut.result()
        if resp is None or not resp.values:
            self.logger.error(f"No joints given. (controller: {self.controller_name})")
            return
        names = list(resp.values[0].string_array_value)
        if not names:
            self.logger.error(f"Malformed joint specification. (controller: {self.controller_name})")
            return
        self.joint_names = names
        self.logger.info(f"controller '{self.controller_name}' configured")

    def is_connected(self) -> bool:
        return self.client.server_is_ready()

    def is_controlling_joint(self, joint_name: str) -> bool:
        if not self.is_connected():
            return False
        return joint_name in self.joint_names

    def send_goal(self, points, time_offset: float, on_complete) -> bool:
        self.logger.debug(f"sending trajectory goal to {self.controller_name}")

        if not self.joint_names:  # 아직 configure 안 됨 (컨트롤러가 없을 수도 있음)
            return False

        n = len(self.joint_names)
        goal_points = []
        for p in points:
            if len(p.positions) != n:
                self.logger.error(f"Pose size mismatch. Expected: {n}, got: {len(p.positions)}.")
                return False
            goal_points.append(TrajPoint(
                positions=list(p.positions),
                velocities=list(p.velocities) if len(p.velocities) == n else [0.0] * n,
                accelerations=list(p.accelerations) if len(p.accelerations) == n else [],
                time_from_start=p.time_from_start + time_offset,
            ))

        goal = FollowJointTrajectory.Goal()
        goal.trajectory = trajectory_to_msg(self.joint_names, goal_points)

        send_future = self.client.send_goal_async(goal)
        send_future.add_done_callback(lambda f: self._on_goal_response(f, on_complete))
        return True

    def _on_goal_response(self, future, on_complete):
        if future.exception() is not None:
            self.logger.error(f"Failed to send goal to {self.controller_name}: {future.exception()}")
            on_complete(False, FollowJointTrajectory.Result.INVALID_GOAL)
            return
        handle = future.result()
        if handle is None or not handle.accepted:
            self.logger.warning(f"controller {self.controller_name} rejected the goal")
            on_complete(False, FollowJointTrajectory.Result.INVALID_GOAL)
            return
        handle.get_result_async().add_done_callback(lambda f: self._on_result(f, on_complete))

    def _on_result(self, future, on_complete):
        if future.exception() is not None:
            self.logger.error(f"controller {self.controller_name} result error: {future.exception()}")
            on_complete(False, FollowJointTrajectory.Result.INVALID_GOAL)
            return
        res = future.result()
        success = res.status == GoalStatus.STATUS_SUCCEEDED
        error_code = res.result.error_code
        if not success:
            self.logger.warning(f"controller {self.controller_name} failed with err {error_code}")
        on_complete(success, error_code)
