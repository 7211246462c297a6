"""Synthetic obstacle, pose and goal data for exercising the planner."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

Point = tuple[float, float, float]

FRAME_ID = "/world"
POINT_COLOR = (40, 200, 120)

_DEFAULT_POINTS: tuple[Point, ...] = (
    (5.5, -0.5, 0.5),
    (5.5, 0.5, 0.5),
    (5.5, 1.5, 0.5),
    (5.5, -0.5, 1.5),
    (5.5, 0.5, 1.5),
    (5.5, 1.5, 1.5),
    (5.5, -0.5, 2.5),
    (5.5, 0.5, 2.5),
    (5.5, 1.5, 2.5),
)


def format_path(points: Iterable[Sequence[float]]) -> str:
    """Render path positions as "(x, y, z) -> " pieces with two decimals."""
    return "".join(f"({p[0]:2.2f}, {p[1]:2.2f}, {p[2]:2.2f}) -> " for p in points)


@dataclass
class MockData:
    """Obstacle points, a vehicle pose and a clicked goal for a fixed scene."""

    points: list[Point] = field(default_factory=lambda: list(_DEFAULT_POINTS))
    frame_id: str = FRAME_ID
    color: tuple[int, int, int] = POINT_COLOR

    def create_wall(self, dist: int, width: int, height: int) -> None:
        """Replace the points with a wall at x = dist spanning y in
        [-width, width] and z in [0, height], one point per cell centre."""
        self.points = [
            (dist + 0.5, i + 0.5, j + 0.5)
            for i in range(-width, width + 1)
            for j in range(height + 1)
        ]

    def clicked_point(self) -> Point:
        """The goal position that is clicked in the scene."""
        return (8.5, 4.5, 1.5)

    def vehicle_pose(self) -> tuple[Point, tuple[float, float, float, float]]:
        """The vehicle position and its orientation quaternion (x, y, z, w)."""
        return (0.5, 2.5, 1.5), (0.0, 0.0, 0.0, 1.0)