"""Integer cells of the planning grid and goal cells."""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from typing import ClassVar

_DIAG_COST = 1.41421356237

Position = tuple[float, float, float]


def angle_to_range(angle: float) -> float:
    """Wrap an angle in radians into the interval (-pi, pi]."""
    if not math.isfinite(angle):
        return math.nan
    wrapped = math.remainder(angle, 2.0 * math.pi)
    if wrapped <= -math.pi:
        wrapped += 2.0 * math.pi
    return wrapped


@dataclass(frozen=True, eq=False)
class Cell:
    """A cell of the world grid, identified by its integer indices.

    Equality, hashing and ordering depend only on the indices, so a
    GoalCell compares equal to the plain Cell at the same place.
    """

    x: int
    y: int
    z: int

    scale: ClassVar[float] = 1.0

    @classmethod
    def from_position(cls, x: float, y: float, z: float = 0.0) -> Cell:
        """Return the cell that contains the world position (x, y, z)."""
        s = Cell.scale
        return cls(math.floor(x / s), math.floor(y / s), math.floor(z / s))

    @property
    def _key(self) -> tuple[int, int, int]:
        return (self.x, self.y, self.z)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Cell):
            return NotImplemented
        return self._key == other._key

    def __hash__(self) -> int:
        return hash(self._key)

    def __lt__(self, other: Cell) -> bool:
        if not isinstance(other, Cell):
            return NotImplemented
        return self._key < other._key

    def __le__(self, other: Cell) -> bool:
        if not isinstance(other, Cell):
            return NotImplemented
        return self._key <= other._key

    def __gt__(self, other: Cell) -> bool:
        if not isinstance(other, Cell):
            return NotImplemented
        return self._key > other._key

    def __ge__(self, other: Cell) -> bool:
        if not isinstance(other, Cell):
            return NotImplemented
        return self._key >= other._key

    @property
    def x_pos(self) -> float:
        return Cell.scale * (self.x + 0.5)

    @property
    def y_pos(self) -> float:
        return Cell.scale * (self.y + 0.5)

    @property
    def z_pos(self) -> float:
        return Cell.scale * (self.z + 0.5)

    def position(self) -> Position:
        """World position of the centre of the cell."""
        return (self.x_pos, self.y_pos, self.z_pos)

    def manhattan_dist(self, x: float, y: float, z: float) -> float:
        """Manhattan distance from the centre of the cell to (x, y, z)."""
        return abs(self.x_pos - x) + abs(self.y_pos - y) + abs(self.z_pos - z)

    def distance_2d(self, other: Cell) -> float:
        """Straight-line distance between centres, ignoring z."""
        return math.hypot(self.x_pos - other.x_pos, self.y_pos - other.y_pos)

    def distance_3d(self, other: Cell) -> float:
        """Straight-line distance between centres."""
        return math.sqrt(
            (self.x_pos - other.x_pos) ** 2
            + (self.y_pos - other.y_pos) ** 2
            + (self.z_pos - other.z_pos) ** 2
        )

    def diag_distance_2d(self, other: Cell) -> float:
        """Shortest XY grid distance when diagonal moves are allowed."""
        dx = abs(self.x_pos - other.x_pos)
        dy = abs(self.y_pos - other.y_pos)
        return (dx + dy) + (_DIAG_COST - 2.0) * min(dx, dy)

    def diag_distance_3d(self, other: Cell) -> float:
        """Diagonal XY distance plus the vertical distance."""
        return self.diag_distance_2d(other) + abs(self.z_pos - other.z_pos)

    def angle(self) -> float:
        """Angle in the XY plane between the index vector and the X axis."""
        return math.atan2(self.y, self.x)

    def neighbor_from_yaw(self, yaw: float) -> Cell:
        """The neighbouring cell in the direction of yaw."""
        dx = int(2 * Cell.scale * math.cos(yaw))
        dy = int(2 * Cell.scale * math.sin(yaw))
        return Cell.from_position(self.x_pos + dx, self.y_pos + dy, self.z_pos)

    def flow_neighbors(self, radius: int) -> list[Cell]:
        """Cells within a ball of the given radius whose risk flows into this one."""

        def ceil_distance(x: int, y: int) -> int:
            remaining = radius * radius - x * x - y * y
            return math.ceil(math.sqrt(remaining)) if remaining > 0 else 0

        cells = []
        for x in range(-radius, radius + 1):
            y_radius = ceil_distance(x, 0)
            for y in range(-y_radius, y_radius + 1):
                z_radius = ceil_distance(x, y)
                cells.extend(
                    Cell(self.x + x, self.y + y, self.z + z)
                    for z in range(-z_radius, z_radius + 1)
                )
        return cells

    def _offsets(self, offsets: Iterable[tuple[int, int, int]]) -> list[Cell]:
        return [Cell(self.x + dx, self.y + dy, self.z + dz) for dx, dy, dz in offsets]

    def diagonal_neighbors(self) -> list[Cell]:
        """The four XY-diagonal neighbours."""
        return self._offsets(((1, 1, 0), (-1, 1, 0), (1, -1, 0), (-1, -1, 0)))

    def neighbors(self) -> list[Cell]:
        """The six face neighbours followed by the four XY-diagonal ones."""
        return self._offsets(
            (
                (1, 0, 0),
                (-1, 0, 0),
                (0, 1, 0),
                (0, -1, 0),
                (0, 0, 1),
                (0, 0, -1),
                (1, 1, 0),
                (-1, 1, 0),
                (1, -1, 0),
                (-1, -1, 0),
            )
        )

    def __sub__(self, other: Cell) -> Cell:
        if not isinstance(other, Cell):
            return NotImplemented
        return Cell(self.x - other.x, self.y - other.y, self.z - other.z)

    def __str__(self) -> str:
        return f"({self.x},{self.y},{self.z})"


@dataclass(frozen=True, eq=False)
class GoalCell(Cell):
    """A goal cell with an acceptance radius."""

    radius: float = 1.0
    is_temporary: bool = False

    def within_position_radius(self, position: Iterable[float]) -> bool:
        """True if the world position lies within the radius of the cell centre."""
        px, py, pz = tuple(position)[:3]
        return math.dist(self.position(), (px, py, pz)) < self.radius