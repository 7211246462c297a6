# aeroplan

Building blocks for planning the flight of a multicopter through partly
explored space.

## Modules

- `aeroplan.cell`: `Cell` is a discrete 3D grid cell named by integer
  indices. Its size is set by the class attribute `Cell.scale`, and
  `Cell.from_position` gives the cell that holds a world position. A cell
  gives its centre (`position`, `x_pos`, `y_pos`, `z_pos`), its distances to
  other cells (`distance_2d`, `distance_3d`, `diag_distance_2d`,
  `diag_distance_3d`, `manhattan_dist`) and its neighbours (`neighbors`,
  `diagonal_neighbors`, `flow_neighbors`, `neighbor_from_yaw`). `GoalCell`
  adds an acceptance radius and a temporary flag, and
  `within_position_radius`. `angle_to_range` wraps an angle into (-pi, pi].
- `aeroplan.node`: `Node` is a cell together with the cell it was entered
  from. It gives the cells its edge sweeps (`cells`), its `length`, its
  `neighbors`, and how many 45-degree turns it takes to go on to another
  node (`rotation`, `xy_rotation`).
- `aeroplan.planner`: `GlobalPlanner` holds the pose, goal, current path and
  an `OccupancyMap` of log-odds values. It scores cells and nodes by risk
  (`single_cell_risk`, `cell_risk`, `node_risk`, with an altitude prior from
  `alt_prior`), gives edge costs (`edge_dist`, `edge_cost`,
  `turn_smoothness`), search heuristics (`heuristic`, `risk_heuristic`,
  `risk_heuristic_reverse_cache`, `smoothness_heuristic`,
  `altitude_heuristic`), path summaries (`path_info`, giving a `PathInfo`)
  and path poses (`path_poses`, `path_with_risk`, giving `PathPose` values).
  It also keeps the travelled path for `go_back`, and has `stop`.
  `probability`, `posterior` and `next_yaw` are module-level helpers.
- `aeroplan.planner_node`: `GlobalPlannerNode` feeds position, velocity,
  goal and obstacle-point updates (`on_position`, `on_velocity`,
  `on_move_base_goal`, `on_trajectory_goal`, `on_clicked_point`,
  `on_obstacle_points`) into a planner, manages a waypoint list
  (`set_new_goal`, `pop_next_goal`, `set_intermediate_goal`), follows a list
  of poses (`set_current_path`) and gives the next position `setpoint`.
  Its parameters are applied with `configure` from a `NodeConfig`.
- `aeroplan.local_planner`: `LocalPlanner` holds vehicle parameters
  (`Px4Params`), camera fields of view (`FOV`, `set_fov`) and goals. It gives
  a grey-value image of a distance histogram (`histogram_image`), the
  vehicle's projection on the line between goals (`closest_point_on_line`),
  an empty obstacle distance scan (`empty_obstacle_distance`, a `LaserScan`)
  and the cruise speed that the sensor range allows (`avoidance_output`, an
  `AvoidanceOutput`).
- `aeroplan.grid`: `Grid` is the numpy mean / variance / count / land grid
  used for landing-site detection, with `resize`, `reset`,
  `increase_counter`, `set_filter_limits`, `limits` and `combine`.
- `aeroplan.mock_data`: `MockData` is a small synthetic scene with a wall of
  obstacle points (`create_wall`), a goal point (`clicked_point`) and a
  vehicle pose (`vehicle_pose`). `format_path` renders path positions as
  text.

## Installing

```
pip install .
```

The only runtime dependency is numpy.

## A short example

```python
from aeroplan.cell import Cell, GoalCell
from aeroplan.planner import GlobalPlanner, OccupancyMap

planner = GlobalPlanner()
occupancy = OccupancyMap()
occupancy.set_log_odds(Cell.from_position(5.5, 0.5, 1.5), 3.0)
planner.update_map(occupancy)

planner.set_pose((0.5, 0.5, 1.5), 0.0)
planner.set_goal(GoalCell.from_position(8.5, 4.5, 1.5))

start = Cell.from_position(0.5, 0.5, 1.5)
print(planner.cell_risk(start), planner.is_occupied(Cell.from_position(5.5, 0.5, 1.5)))
```

## What it does not do

- There is no path search. The planner scores cells, edges and paths and
  gives heuristics, but it does not itself search for a path; paths are
  handed to it with `set_path`.
- There is no messaging, no timers and no command-line program. Updates
  reach `GlobalPlannerNode` only through its methods, and setpoints and
  goals are returned or stored on the object rather than sent anywhere.
- Occupancy maps are not read from files or sensors; they are filled with
  `OccupancyMap.set_log_odds`.
- `LocalPlanner` does not build histograms from point clouds or search for
  avoidance paths, and `Grid` does not decide by itself where to land.

## Running the tests

```
pip install .[test]
pytest
```