import math

import pytest

from aeroplan.cell import Cell, GoalCell
from aeroplan.planner import PathPose
from aeroplan.planner_node import GlobalPlannerNode, NodeConfig


@pytest.fixture
def node():
    return GlobalPlannerNode(frame_id="/world", robot_radius=0.7)


def test_init_sets_goal_frame_and_radius(node):
    assert node.planner.goal_pos == Cell.from_position(0.5, 0.5, 3.5)
    assert node.planner.frame_id == "/world"
    assert node.planner.robot_radius == 0.7
    assert node.current_goal.position == (0.5, 0.5, 3.5)
    assert node.speed == node.planner.default_speed


def test_configure_copies_values(node):
    node.configure(NodeConfig(max_altitude=7, up_cost=5.0, clicked_goal_alt=2.5))
    assert node.planner.max_altitude == 7
    assert node.planner.up_cost == 5.0
    assert node.clicked_goal_alt == 2.5


def test_configure_level_two_sets_cell_scale(node):
    old = Cell.scale
    try:
        node.configure(NodeConfig(cell_scale=2.0, level=2))
        assert Cell.from_position(3.0, 3.0, 3.0) == Cell(1, 1, 1)
        assert Cell(1, 1, 1).position() == pytest.approx((3.0, 3.0, 3.0))
    finally:
        node.configure(NodeConfig(cell_scale=old, level=2))
    assert Cell(0, 0, 0).position() == pytest.approx((0.5 * old, 0.5 * old, 0.5 * old))


def test_configure_level_four_sets_node_type(node):
    node.configure(NodeConfig(default_node_type="Node", level=4))
    assert node.planner.default_node_type == "Node"
    node.configure(NodeConfig(default_node_type="Other", level=0))
    assert node.planner.default_node_type == "Node"


def test_configure_rejects_bad_scale(node):
    with pytest.raises(ValueError):
        node.configure(NodeConfig(cell_scale=0.0, level=2))


def test_set_new_goal_publishes(node):
    goal = GoalCell(3, 4, 2)
    node.set_new_goal(goal)
    assert node.planner.goal_pos == goal
    assert node.temp_goal == goal.position()
    assert node.global_goal == goal.position()

    temp = GoalCell(1, 1, 2, 1.0, True)
    node.set_new_goal(temp)
    assert node.temp_goal == temp.position()
    assert node.global_goal == goal.position()


def test_pop_next_goal_takes_first_waypoint(node):
    first, second = GoalCell(1, 2, 3), GoalCell(4, 5, 6)
    node.waypoints = [first, second]
    node.pop_next_goal()
    assert node.planner.goal_pos == first
    assert node.waypoints == [second]


def test_pop_next_goal_stops_when_blocked(node):
    node.planner.set_pose((5.2, 6.7, 2.1), 0.0)
    node.planner.goal_is_blocked = True
    node.pop_next_goal()
    here = Cell.from_position(5.2, 6.7, 2.1)
    assert node.planner.goal_pos == here
    assert node.planner.curr_path == [here]


def test_set_intermediate_goal(node):
    old_goal = GoalCell(20, 0, 3)
    node.set_new_goal(old_goal)
    path = [Cell(i, 0, 3) for i in range(12)]
    node.planner.curr_path = path
    node.set_intermediate_goal()
    assert node.waypoints[0] == old_goal
    goal = node.planner.goal_pos
    assert goal == path[6]
    assert goal.radius == 3
    assert goal.is_temporary
    assert node.global_goal == old_goal.position()


def test_set_intermediate_goal_short_path_does_nothing(node):
    node.planner.curr_path = [Cell(i, 0, 3) for i in range(5)]
    before = node.planner.goal_pos
    node.set_intermediate_goal()
    assert node.waypoints == []
    assert node.planner.goal_pos == before


def test_on_velocity(node):
    node.on_velocity([1.0, -2.0, 0.5])
    assert node.planner.curr_vel == (1.0, -2.0, 0.5)


def test_on_position_records_actual_path_every_tenth(node):
    for i in range(11):
        node.on_position((float(i), 0.0, 2.0), 0.0)
    assert node.actual_path == [(0.0, 0.0, 2.0), (10.0, 0.0, 2.0)]
    assert node.position_received
    assert node.planner.curr_pos == (10.0, 0.0, 2.0)


def test_on_position_advances_path(node):
    poses = [PathPose((float(i), 0.0, 3.0), 0.0) for i in range(4)]
    node.set_current_path(poses)
    node.on_position((1.1, 0.0, 3.0), 0.0)
    assert node.last_goal == poses[1]
    assert node.current_goal == poses[2]
    assert node.path == [poses[3]]


def test_on_position_opposite_yaw_keeps_goal(node):
    poses = [PathPose((float(i), 0.0, 3.0), 0.0) for i in range(4)]
    node.set_current_path(poses)
    node.on_position((1.1, 0.0, 3.0), math.pi)
    assert node.current_goal == poses[1]
    assert len(node.path) == 2


def test_set_current_path_short(node):
    before = node.current_goal
    node.path = [PathPose((0.0, 0.0, 0.0), 0.0)]
    node.set_current_path([PathPose((1.0, 1.0, 1.0), 0.0)])
    assert node.path == []
    assert node.current_goal == before


def test_on_move_base_goal(node):
    node.configure(NodeConfig(clicked_goal_alt=4.5, clicked_goal_radius=2.0))
    node.on_move_base_goal(7.3, -2.2)
    goal = node.planner.goal_pos
    assert goal == Cell.from_position(7.3, -2.2, 4.5)
    assert goal.radius == 2.0


def test_on_trajectory_goal(node):
    before = node.planner.goal_pos
    node.on_trajectory_goal(9.0, 9.0, 3.0, False)
    assert node.planner.goal_pos == before

    node.on_trajectory_goal(9.0, 9.0, 3.0, True)
    assert node.planner.goal_pos == Cell.from_position(9.0, 9.0, 3.0)

    node.planner.goal_is_blocked = True
    node.on_trajectory_goal(9.2, 9.2, 3.0, True)
    assert node.planner.goal_is_blocked


def test_on_obstacle_points_skips_nan(node):
    node.on_obstacle_points([(1.5, 2.5, 3.5), (math.nan, 0.0, 0.0)])
    assert node.planner.occupied == {Cell.from_position(1.5, 2.5, 3.5)}


def test_on_clicked_point_uses_current_altitude(node):
    node.on_position((0.0, 0.0, 6.0), 0.0)
    node.on_clicked_point(2.0, 3.0, 1.0)
    assert node.last_clicked_points == [(2.0, 3.0, 6.0)]


def test_setpoint_far_goal_moves_by_speed(node):
    node.planner.use_speedup_heuristics = False
    node.on_position((0.0, 0.0, 3.0), 0.0)
    node.current_goal = PathPose((10.0, 0.0, 3.0), 0.25, "/world")
    sp = node.setpoint()
    assert math.dist(sp.position, (0.0, 0.0, 3.0)) == pytest.approx(node.planner.default_speed)
    assert sp.yaw == 0.25
    assert sp.frame_id == "/world"


def test_setpoint_near_goal_reaches_goal(node):
    node.planner.use_speedup_heuristics = False
    node.on_position((0.0, 0.0, 3.0), 0.0)
    node.current_goal = PathPose((0.5, 0.0, 3.0), 0.0)
    sp = node.setpoint()
    assert sp.position == pytest.approx((0.5, 0.0, 3.0))


def test_setpoint_at_goal_stays(node):
    node.planner.use_speedup_heuristics = False
    node.on_position((2.0, 2.0, 3.0), 0.0)
    node.current_goal = PathPose((2.0, 2.0, 3.0), 0.0)
    assert node.setpoint().position == (2.0, 2.0, 3.0)


def test_setpoint_high_risk_uses_default_speed(node):
    node.planner.use_speedup_heuristics = True
    node.planner.default_speed = 1.5
    node.on_position((0.0, 0.0, 3.0), 0.0)
    node.current_goal = PathPose((10.0, 0.0, 3.0), 0.0)
    node.setpoint()
    assert node.speed == 1.5


def test_is_close_to_goal(node):
    node.current_goal = PathPose((1.0, 0.0, 0.0), 0.0)
    node.on_position((0.5, 0.0, 0.0), 0.0)
    assert node.is_close_to_goal()
    node.on_position((-5.0, 0.0, 0.0), 0.0)
    assert not node.is_close_to_goal()