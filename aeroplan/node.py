"""Search nodes: a cell reached from a parent cell."""

from __future__ import annotations

import math
from dataclasses import dataclass

from aeroplan.cell import Cell, angle_to_range

_CORNER_OFFSETS = ((0.1, 0.1), (0.1, -0.1), (-0.1, 0.1), (-0.1, -0.1))


@dataclass(frozen=True, order=True)
class Node:
    """A cell together with the cell it was entered from."""

    cell: Cell
    parent: Cell

    def next_node(self, next_cell: Cell) -> Node:
        """The node reached by moving from this cell to next_cell."""
        return Node(next_cell, self.cell)

    def neighbors(self) -> list[Node]:
        """Nodes for every neighbouring cell of this node's cell."""
        return [self.next_node(cell) for cell in self.cell.neighbors()]

    def cells(self) -> set[Cell]:
        """Cells swept while moving from the parent to the cell."""
        dx = self.cell.x - self.parent.x
        dy = self.cell.y - self.parent.y
        dz = self.cell.z - self.parent.z
        steps = 2 * max(abs(dx), abs(dy), abs(dz))
        if steps == 0:
            return set()

        px, py, pz = self.parent.position()
        cx, cy, cz = self.cell.position()
        x_step = (cx - px) / steps
        y_step = (cy - py) / steps
        z_step = (cz - pz) / steps

        cells: set[Cell] = set()
        for i in range(1, steps + 1):
            x, y, z = px + x_step * i, py + y_step * i, pz + z_step * i
            cells.update(Cell.from_position(x + ox, y + oy, z) for ox, oy in _CORNER_OFFSETS)
        return cells

    def length(self) -> float:
        """Distance between the centres of parent and cell."""
        return self.parent.distance_3d(self.cell)

    def rotation(self, other: Node) -> float:
        """Number of 45-degree turns to go on to other, plus half a turn for
        a switch between horizontal and vertical motion."""
        this_vertical = self.cell.z - self.parent.z == 0
        other_vertical = other.cell.z - other.parent.z == 0
        alt_diff = 0.5 if this_vertical != other_vertical else 0.0
        return alt_diff + self.xy_rotation(other)

    def xy_rotation(self, other: Node) -> float:
        """Number of 45-degree turns in the XY plane to go on to other."""
        this_diff = self.cell - self.parent
        other_diff = other.cell - other.parent
        if (this_diff.x == 0 and this_diff.y == 0) or (other_diff.x == 0 and this_diff.y == 0):
            return 0.0
        ang_diff = abs(angle_to_range(other_diff.angle() - this_diff.angle()))
        return ang_diff / (math.pi / 4)

    def __str__(self) -> str:
        return f"({self.cell} , {self.parent})"