"""Grid cells, risk scoring and heuristics for path planning, local avoidance helpers and landing grids."""

__version__ = "0.1.0"

__all__ = ["cell", "node", "grid", "planner", "planner_node", "mock_data", "local_planner"]