from launch import LaunchDescription
from launch.actions import DeclareLaunchArgument
from launch.substitutions import LaunchConfiguration, PathJoinSubstitution
from launch_ros.actions import Node
from launch_ros.parameter_descriptions import ParameterValue
from launch_ros.substitutions import FindPackageShare


def generate_launch_description():
    pkg = FindPackageShare('approach_planner')

    # 기본 설정 파일 (필요하면 params_file:=... 로 교체)
    params_file = DeclareLaunchArgument(
        'params_file',
        default_value=PathJoinSubstitution([pkg, 'config', 'approach_planner.yaml']),
    )
    skip_planning = DeclareLaunchArgument('skip_planning', default_value='false')

    approach_node = Node(
        package='approach_planner',
        executable='approach_planner_node',
        name='approach_planner_node',
        output='screen',
        parameters=[
            LaunchConfiguration('params_file'),
            {'skip_planning': ParameterValue(LaunchConfiguration('skip_planning'), value_type=bool)},
        ],
    )

    return LaunchDescription([
        params_file,
        skip_planning,
        approach_node,
    ])
