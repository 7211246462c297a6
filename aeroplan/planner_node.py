"""Mission handling around the global planner: goals, waypoints and setpoints."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from aeroplan.cell import Cell, GoalCell
from aeroplan.planner import GlobalPlanner, PathPose, Position

_CELL_SCALE_LEVEL = 2
_NODE_LEVEL = 4


def _goal_at(
    x: float, y: float, z: float, radius: float = 1.0, is_temporary: bool = False
) -> GoalCell:
    cell = Cell.from_position(x, y, z)
    return GoalCell(cell.x, cell.y, cell.z, radius, is_temporary)


@dataclass
class NodeConfig:
    """Reconfigurable parameters of the planner and of the node.

    ``level`` selects extra groups: 2 also applies ``cell_scale``, 4 also
    applies ``speednode_radius`` and ``default_node_type``.
    """

    min_altitude: float = 1
    max_altitude: float = 10
    max_cell_risk: float = 0.5
    smooth_factor: float = 10.0
    vert_to_hor_cost: float = 1.0
    risk_factor: float = 500.0
    neighbor_risk_flow: float = 1.0
    explore_penalty: float = 0.005
    up_cost: float = 3.0
    down_cost: float = 1.0
    search_time: float = 0.5
    min_overestimate_factor: float = 1.03
    max_overestimate_factor: float = 2.0
    risk_threshold_risk_based_speedup: float = 0.5
    default_speed: float = 1.0
    max_speed: float = 3.0
    max_iterations: int = 2000
    goal_must_be_free: bool = True
    use_current_yaw: bool = True
    use_risk_heuristics: bool = True
    use_speedup_heuristics: bool = True
    use_risk_based_speedup: bool = True
    clicked_goal_alt: float = 3.5
    clicked_goal_radius: float = 1.0
    simplify_iterations: int = 1
    simplify_margin: float = 1.01
    cell_scale: float = 1.0
    speednode_radius: float = 5.0
    default_node_type: str = "SpeedNode"
    level: int = 0


_PLANNER_FIELDS = (
    "min_altitude",
    "max_altitude",
    "max_cell_risk",
    "smooth_factor",
    "vert_to_hor_cost",
    "risk_factor",
    "neighbor_risk_flow",
    "explore_penalty",
    "up_cost",
    "down_cost",
    "search_time",
    "min_overestimate_factor",
    "max_overestimate_factor",
    "risk_threshold_risk_based_speedup",
    "default_speed",
    "max_speed",
    "max_iterations",
    "goal_must_be_free",
    "use_current_yaw",
    "use_risk_heuristics",
    "use_speedup_heuristics",
    "use_risk_based_speedup",
)


class GlobalPlannerNode:
    """Feeds vehicle state into a GlobalPlanner and follows the planned path."""

    def __init__(
        self,
        planner: GlobalPlanner | None = None,
        start_pos: Position = (0.5, 0.5, 3.5),
        start_yaw: float = 0.0,
        frame_id: str = "/local_origin",
        robot_radius: float = 0.5,
    ) -> None:
        self.planner = planner if planner is not None else GlobalPlanner()
        self.frame_id = frame_id
        self.start_pos = tuple(start_pos)
        self.start_yaw = start_yaw

        self.planner.goal_pos = _goal_at(*self.start_pos)
        self.planner.frame_id = frame_id
        self.planner.robot_radius = robot_radius

        self.clicked_goal_alt = 3.5
        self.clicked_goal_radius = 1.0
        self.simplify_iterations = 1
        self.simplify_margin = 1.01
        self.speednode_radius = 5.0

        self.waypoints: list[GoalCell] = []
        self.path: list[PathPose] = []
        self.current_goal = PathPose(self.start_pos, start_yaw, frame_id)
        self.last_goal = self.current_goal
        self.last_pos: Position = (0.0, 0.0, 0.0)
        self.last_yaw = 0.0
        self.actual_path: list[Position] = []
        self.last_clicked_points: list[Position] = []
        self.temp_goal: Position | None = None
        self.global_goal: Position | None = None
        self.num_pos_msg = 0
        self.position_received = False
        self.speed = self.planner.default_speed

    def configure(self, config: NodeConfig) -> None:
        """Apply reconfigured parameters to the planner and the node."""
        for name in _PLANNER_FIELDS:
            setattr(self.planner, name, getattr(config, name))
        self.clicked_goal_alt = config.clicked_goal_alt
        self.clicked_goal_radius = config.clicked_goal_radius
        self.simplify_iterations = config.simplify_iterations
        self.simplify_margin = config.simplify_margin
        if config.level == _CELL_SCALE_LEVEL:
            if config.cell_scale <= 0:
                raise ValueError(f"cell_scale must be positive, got {config.cell_scale}")
            Cell.scale = config.cell_scale
        if config.level == _NODE_LEVEL:
            self.speednode_radius = config.speednode_radius
            self.planner.default_node_type = config.default_node_type

    def set_new_goal(self, goal: GoalCell) -> None:
        """Make goal the planner's goal and publish it."""
        self.planner.set_goal(goal)
        self.temp_goal = goal.position()
        if not goal.is_temporary:
            self.global_goal = goal.position()

    def pop_next_goal(self) -> None:
        """Take the next waypoint as goal, or stop if the goal is blocked."""
        if self.waypoints:
            self.set_new_goal(self.waypoints.pop(0))
        elif self.planner.goal_is_blocked:
            self.planner.stop()

    def set_intermediate_goal(self) -> None:
        """Set a temporary goal half way along a long current path."""
        path = self.planner.curr_path
        length = len(path)
        if length > 10:
            self.waypoints.insert(0, self.planner.goal_pos)
            middle = path[length // 2]
            self.set_new_goal(GoalCell(middle.x, middle.y, middle.z, length // 4, True))

    def on_velocity(self, velocity: Iterable[float]) -> None:
        """Record the current vehicle velocity."""
        vx, vy, vz = tuple(velocity)[:3]
        self.planner.curr_vel = (vx, vy, vz)

    def on_position(self, position: Iterable[float], yaw: float) -> None:
        """Record the pose and advance along the path when the goal is reached."""
        x, y, z = tuple(position)[:3]
        self.last_pos = (x, y, z)
        self.last_yaw = yaw
        self.planner.set_pose(self.last_pos, yaw)

        if self.num_pos_msg % 10 == 0:
            self.actual_path.append(self.last_pos)
        self.num_pos_msg += 1
        self.position_received = True

        if self.path and self.is_close_to_goal():
            yaw_diff = abs(yaw - self.current_goal.yaw)
            yaw_diff -= math.floor(yaw_diff / (2 * math.pi)) * (2 * math.pi)
            max_yaw_diff = math.pi
            if yaw_diff < max_yaw_diff or yaw_diff > 2 * math.pi - max_yaw_diff:
                self.last_goal = self.current_goal
                self.current_goal = self.path.pop(0)

    def on_clicked_point(self, x: float, y: float, z: float) -> None:
        """Remember a clicked point at the vehicle's current altitude."""
        self.last_clicked_points.append((x, y, self.planner.curr_pos[2]))

    def on_move_base_goal(self, x: float, y: float) -> None:
        """Set a goal at (x, y) on the clicked-goal altitude."""
        self.set_new_goal(_goal_at(x, y, self.clicked_goal_alt, self.clicked_goal_radius))

    def on_trajectory_goal(self, x: float, y: float, z: float, valid: bool) -> None:
        """Set a goal from the flight controller if it is valid and has moved."""
        new_goal = _goal_at(x, y, z, 1.0)
        goal = self.planner.goal_pos
        moved = (
            abs(goal.x_pos - new_goal.x_pos) > 0.001
            or abs(goal.y_pos - new_goal.y_pos) > 0.001
        )
        if valid and moved:
            self.set_new_goal(new_goal)

    def on_obstacle_points(self, points: Iterable[Sequence[float]]) -> None:
        """Mark the cells of world-frame obstacle points as occupied."""
        for p in points:
            if not math.isnan(p[0]):
                self.planner.occupied.add(Cell.from_position(p[0], p[1], p[2]))

    def set_current_path(self, poses: Sequence[PathPose]) -> None:
        """Follow poses: the second becomes the current goal, the rest are queued."""
        self.path = []
        if len(poses) < 2:
            return
        self.last_goal = poses[0]
        self.current_goal = poses[1]
        self.path = list(poses[2:])

    def setpoint(self) -> PathPose:
        """The next position setpoint towards the current goal."""
        planner = self.planner
        if planner.use_speedup_heuristics:
            cell = Cell.from_position(*self.last_pos)
            cur_risk = math.sqrt(planner.cell_risk(cell))
            if cur_risk >= planner.risk_threshold_risk_based_speedup:
                self.speed = planner.default_speed
            else:
                self.speed = planner.default_speed + (
                    planner.max_speed - planner.default_speed
                ) * (1 - cur_risk)
        else:
            self.speed = planner.default_speed

        vec = [g - p for g, p in zip(self.current_goal.position, self.last_pos)]
        length = math.hypot(*vec)
        if length == 0.0:
            offset = (0.0, 0.0, 0.0)
        else:
            new_len = length if length < 1.0 else self.speed
            offset = tuple(c / length * new_len for c in vec)
        position = tuple(p + o for p, o in zip(self.last_pos, offset))
        return PathPose(position, self.current_goal.yaw, self.current_goal.frame_id)

    def is_close_to_goal(self) -> bool:
        """True if the current goal is closer than the current speed."""
        return math.dist(self.current_goal.position, self.last_pos) < self.speed