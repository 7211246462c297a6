"""Risk-aware global path planning over a grid of cells."""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from itertools import accumulate, pairwise

from aeroplan.cell import Cell, GoalCell, angle_to_range
from aeroplan.node import Node

Position = tuple[float, float, float]

_DEFAULT_ALT_PRIOR = (
    1.0,
    0.2,
    0.1333335,
    0.1,
    0.0833333,
    0.05,
    0.0333333,
    0.025,
    0.0166667,
    0.0125,
    0.01,
    0.00833333,
    0.00625,
    0.005,
    0.00416667,
    0.003125,
    0.0025,
    0.00208333,
    0.0015625,
    0.00125,
    0.00104167,
)


def probability(log_odds: float) -> float:
    """Convert log-odds to a probability."""
    if log_odds >= 0:
        return 1.0 / (1.0 + math.exp(-log_odds))
    e = math.exp(log_odds)
    return e / (1.0 + e)


def posterior(prior: float, likelihood: float) -> float:
    """Combine a prior probability with an independent measurement probability."""
    agree = prior * likelihood
    disagree = (1.0 - prior) * (1.0 - likelihood)
    total = agree + disagree
    if total == 0.0:
        raise ValueError(f"contradictory certain probabilities: {prior} and {likelihood}")
    return agree / total


def next_yaw(u: Cell, v: Cell, last_yaw: float) -> float:
    """XY heading from u to v, or last_yaw when v is directly above or below u."""
    dx = v.x - u.x
    dy = v.y - u.y
    if dx == 0 and dy == 0:
        return last_yaw
    return math.atan2(dy, dx)


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


class OccupancyMap:
    """Occupancy measurements, as log-odds, for the cells that have been observed."""

    def __init__(self, resolution: float = 1.0) -> None:
        if resolution <= 0:
            raise ValueError(f"resolution must be positive, got {resolution}")
        self.resolution = resolution
        self._log_odds: dict[Cell, float] = {}

    def set_log_odds(self, cell: Cell, log_odds: float) -> None:
        """Record the occupancy log-odds of a cell."""
        self._log_odds[Cell(cell.x, cell.y, cell.z)] = log_odds

    def log_odds(self, cell: Cell) -> float | None:
        """The log-odds of a cell, or None if it has never been measured."""
        return self._log_odds.get(cell)

    def __len__(self) -> int:
        return len(self._log_odds)


@dataclass
class PathInfo:
    """Cost breakdown of a path."""

    cost: float = 0.0
    dist: float = 0.0
    risk: float = 0.0
    smoothness: float = 0.0
    is_blocked: bool = False


@dataclass(frozen=True)
class PathPose:
    """A pose on a published path."""

    position: Position
    yaw: float
    frame_id: str = ""


@dataclass
class GlobalPlanner:
    """Keeps the map, pose and goal, and scores cells, edges and paths."""

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
    bubble_radius: float = 0.0
    bubble_cost: float = 0.0
    robot_radius: float = 0.5
    frame_id: str = "/local_origin"
    default_node_type: str = "SpeedNode"
    alt_prior_values: Sequence[float] = _DEFAULT_ALT_PRIOR

    overestimate_factor: float = field(default=2.0, init=False)
    curr_pos: Position = field(default=(0.0, 0.0, 0.0), init=False)
    curr_yaw: float = field(default=0.0, init=False)
    curr_vel: Position = field(default=(0.0, 0.0, 0.0), init=False)
    goal_pos: GoalCell = field(default_factory=lambda: GoalCell(0, 0, 0), init=False)
    going_back: bool = field(default=True, init=False)
    goal_is_blocked: bool = field(default=False, init=False)
    current_cell_blocked: bool = field(default=False, init=False)
    occupancy: OccupancyMap | None = field(default=None, init=False)
    resolution: float = field(default=1.0, init=False)
    occupied: set[Cell] = field(default_factory=set, init=False)
    path_back: list[Cell] = field(default_factory=list, init=False)
    curr_path: list[Cell] = field(default_factory=list, init=False)
    curr_path_info: PathInfo = field(default_factory=PathInfo, init=False)
    path_cells: set[Cell] = field(default_factory=set, init=False)
    seen_count: Counter = field(default_factory=Counter, init=False)

    def __post_init__(self) -> None:
        if not self.alt_prior_values:
            raise ValueError("alt_prior_values must not be empty")
        self.alt_prior_values = tuple(self.alt_prior_values)
        self.accumulated_alt_prior = list(accumulate(self.alt_prior_values))
        self.risk_cache: dict[Cell, float] = {}
        self.heuristic_cache: dict[Node, float] = {}
        self.bubble_risk_cache: dict[Cell, float] = {}

    # State updates

    def set_pose(self, position: Iterable[float], yaw: float) -> None:
        """Update the current pose and remember the way back."""
        x, y, z = tuple(position)[:3]
        self.curr_pos = (x, y, z)
        self.curr_yaw = yaw
        curr_cell = Cell.from_position(x, y, z)
        if not self.going_back and (not self.path_back or curr_cell != self.path_back[-1]):
            self.path_back.append(curr_cell)

    def set_goal(self, goal: GoalCell) -> None:
        """Set a new mission goal."""
        self.goal_pos = goal
        self.going_back = False
        self.goal_is_blocked = False
        self.heuristic_cache.clear()
        self.bubble_risk_cache.clear()

    def set_path(self, path: Sequence[Cell]) -> None:
        """Make path the current path."""
        self.curr_path_info = self.path_info(path)
        self.curr_path = list(path)
        self.path_cells = set()
        for parent, cell in pairwise(path[1:]):
            self.path_cells.update(Node(cell, parent).cells())

    def update_map(self, occupancy_map: OccupancyMap) -> None:
        """Replace the occupancy map and drop cached risks."""
        self.risk_cache.clear()
        self.occupancy = occupancy_map
        self.resolution = occupancy_map.resolution

    # Geometry and risk

    def open_neighbors(self, cell: Cell, is_3d: bool) -> list[tuple[Cell, float]]:
        """The 8 horizontal and, in 3D, up to 2 vertical neighbours with their costs."""
        x, y, z = cell.x, cell.y, cell.z
        neighbors = [
            (Cell(x + 1, y, z), 1.0),
            (Cell(x + 1, y - 1, z), 1.41),
            (Cell(x + 1, y + 1, z), 1.41),
            (Cell(x - 1, y, z), 1.0),
            (Cell(x - 1, y - 1, z), 1.41),
            (Cell(x - 1, y + 1, z), 1.41),
            (Cell(x, y - 1, z), 1.0),
            (Cell(x, y + 1, z), 1.0),
        ]
        if is_3d and z < self.max_altitude:
            neighbors.append((Cell(x, y, z + 1), self.up_cost))
        if is_3d and z > self.min_altitude:
            neighbors.append((Cell(x, y, z - 1), self.down_cost))
        return neighbors

    def is_near_wall(self, cell: Cell) -> bool:
        """True if a diagonal neighbour of cell is occupied."""
        return any(self.is_occupied(n) for n in cell.diagonal_neighbors())

    def edge_dist(self, u: Cell, v: Cell) -> float:
        """Distance between adjacent cells, with vertical motion weighted."""
        z_diff = v.z_pos - u.z_pos
        return (
            u.distance_2d(v)
            + self.up_cost * max(z_diff, 0.0)
            + self.down_cost * max(-z_diff, 0.0)
        )

    def single_cell_risk(self, cell: Cell) -> float:
        """Risk of a cell without looking at its neighbours."""
        if cell.z < 1 or self.occupancy is None:
            return 1.0
        log_odds = self.occupancy.log_odds(cell)
        if log_odds is None:
            return self.explore_penalty * self.alt_prior(cell)
        post_prob = posterior(self.alt_prior(cell), probability(log_odds))
        if cell in self.occupied or log_odds > 0:
            return post_prob
        return self.explore_penalty * post_prob

    def alt_prior(self, cell: Cell) -> float:
        """Prior occupancy probability at the altitude of cell."""
        index = _round_half_away(cell.z_pos)
        if index > len(self.alt_prior_values) - 1:
            return self.alt_prior_values[-1]
        if index < 0:
            return self.alt_prior_values[0]
        return self.alt_prior_values[index]

    def _accumulated_prior(self, z: int) -> float:
        index = min(max(z, 0), len(self.accumulated_alt_prior) - 1)
        return self.accumulated_alt_prior[index]

    def is_occupied(self, cell: Cell) -> bool:
        return self.single_cell_risk(cell) > 0.5

    def is_legal(self, node: Node) -> bool:
        """True if the node is below the altitude limit and risky less than allowed."""
        return node.cell.z_pos < self.max_altitude and self.node_risk(node) < self.max_cell_risk

    def cell_risk(self, cell: Cell) -> float:
        """Risk of a cell including the risk flowing in from its neighbours."""
        cached = self.risk_cache.get(cell)
        if cached is not None:
            return cached
        risk = self.single_cell_risk(cell)
        radius = math.ceil(self.robot_radius / self.resolution)
        risk += sum(
            self.neighbor_risk_flow * self.single_cell_risk(n) for n in cell.flow_neighbors(radius)
        )
        self.risk_cache[cell] = risk
        return risk

    def node_risk(self, node: Node) -> float:
        """Average risk of the cells a node sweeps, times its length."""
        cells = node.cells()
        if not cells:
            return 0.0
        total = sum(self.cell_risk(c) for c in cells)
        return total / len(cells) * node.length()

    def turn_smoothness(self, u: Node, v: Node) -> float:
        """Squared amount of turning needed to go from u to v."""
        turn = u.rotation(v)
        return turn * turn

    def edge_cost(self, u: Node, v: Node) -> float:
        """Total cost of the edge from u to v."""
        dist_cost = self.edge_dist(u.cell, v.cell)
        risk_cost = self.risk_factor * self.node_risk(v)
        smooth_cost = self.smooth_factor * self.turn_smoothness(u, v)
        if u.cell.distance_3d(Cell.from_position(*self.curr_pos)) < 3 and math.hypot(
            *self.curr_vel
        ) > 1:
            smooth_cost *= 2
        return dist_cost + risk_cost + smooth_cost

    # Heuristics

    def _unexplored_risk(self) -> float:
        return (1.0 + 6.0 * self.neighbor_risk_flow) * self.explore_penalty * self.risk_factor

    def risk_heuristic(self, u: Cell, goal: Cell) -> float:
        """Cost of risk for a straight path through unknown space from u to goal."""
        if u == goal:
            return 0.0
        unexplored = self._unexplored_risk()
        xy_dist = u.diag_distance_2d(goal) - 1.0
        xy_risk = xy_dist * unexplored * self.alt_prior(u)
        z_risk = unexplored * abs(self._accumulated_prior(u.z) - self._accumulated_prior(goal.z))
        goal_risk = self.cell_risk(goal) * self.risk_factor
        return xy_risk + z_risk + goal_risk

    def risk_heuristic_reverse_cache(self, u: Cell, goal: Cell) -> float:
        """Risk heuristic to a bubble around the goal, using cached values if known."""
        cached = self.bubble_risk_cache.get(u)
        if cached is not None:
            return cached
        if u == goal:
            return 0.0
        dist_to_bubble = max(0.0, u.diag_distance_3d(goal) - self.bubble_radius)
        return self.bubble_cost + dist_to_bubble * self._unexplored_risk() * self.alt_prior(u)

    def smoothness_heuristic(self, u: Node, goal: Cell) -> float:
        """Lower bound on the turning cost from u to goal."""
        if u.cell.x == goal.x and u.cell.y == goal.y:
            return 0.0
        if u.cell.x == u.parent.x and u.cell.y == u.parent.y:
            return self.smooth_factor * self.vert_to_hor_cost
        u_ang = (u.cell - u.parent).angle()
        goal_ang = (goal - u.cell).angle()
        num_45_deg_turns = abs(angle_to_range(goal_ang - u_ang)) / (math.pi / 4)
        altitude_change = 0 if u.cell.z == goal.z else 1
        return self.smooth_factor * (num_45_deg_turns + altitude_change)

    def altitude_heuristic(self, u: Cell, goal: Cell) -> float:
        """Lower bound on the cost of reaching the altitude of goal."""
        diff = goal.z - u.z
        return (self.up_cost if diff > 0 else self.down_cost) * abs(diff)

    def heuristic(self, u: Node, goal: Cell) -> float:
        """Estimated cost of going from u to goal."""
        value = self.overestimate_factor * u.cell.diag_distance_2d(goal)
        value += self.altitude_heuristic(u.cell, goal)
        value += self.smoothness_heuristic(u, goal)
        if self.use_risk_heuristics:
            value += self.risk_heuristic(u.cell, goal)
        if self.use_speedup_heuristics:
            value += self.seen_count[u.cell]
        self.heuristic_cache[u] = value
        return value

    # Paths

    def _pose(self, cell: Cell, yaw: float) -> PathPose:
        return PathPose(cell.position(), yaw, self.frame_id)

    def path_poses(self, path: Sequence[Cell] | None = None) -> list[PathPose]:
        """Poses along path (the current path by default), each facing the next cell."""
        if path is None:
            path = self.curr_path
        if not path:
            return []
        poses = []
        last_yaw = self.curr_yaw
        for cell, following in pairwise(path):
            last_yaw = next_yaw(cell, following, last_yaw)
            poses.append(self._pose(cell, last_yaw))
        poses.append(self._pose(path[-1], last_yaw))
        return poses

    def path_with_risk(self) -> list[tuple[PathPose, float]]:
        """Poses of the current path paired with the risk of their cells."""
        return [
            (pose, self.cell_risk(Cell.from_position(*pose.position)))
            for pose in self.path_poses()
        ]

    def path_info(self, path: Sequence[Cell]) -> PathInfo:
        """Cost details of a path."""
        info = PathInfo()
        for a, b, c in zip(path, path[1:], path[2:]):
            curr_node = Node(c, b)
            last_node = Node(b, a)
            risk = self.node_risk(curr_node)
            info.dist += self.edge_dist(last_node.cell, curr_node.cell)
            info.risk += self.risk_factor * risk
            info.cost += self.edge_cost(last_node, curr_node)
            info.is_blocked |= risk > self.max_cell_risk
            info.smoothness += self.smooth_factor * self.turn_smoothness(last_node, curr_node)
        return info

    def go_back(self) -> None:
        """Follow the travelled path back until a low-risk cell is reached."""
        if not self.path_back:
            raise ValueError("no path back is known")
        self.going_back = True
        new_path = self.path_back[::-1]
        for i in range(1, len(new_path) - 1):
            if i > 5 and self.cell_risk(new_path[i]) < 0.5:
                new_path = new_path[: i + 1]
                self.path_back = self.path_back[: len(self.path_back) - i - 2]
                break
        self.curr_path = new_path
        last = new_path[-1]
        self.goal_pos = GoalCell(last.x, last.y, last.z, 1.0)

    def stop(self) -> None:
        """Make the current cell both goal and path."""
        here = GoalCell.from_position(*self.curr_pos)
        self.set_goal(here)
        self.set_path([Cell.from_position(*self.curr_pos)])