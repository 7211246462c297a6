"""Local obstacle avoidance planner: goals, fields of view and speed limits."""

from __future__ import annotations

import math
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

import numpy as np

Vector3 = tuple[float, float, float]

ALPHA_RES = 6
GRID_LENGTH_Z = 360 // ALPHA_RES
GRID_LENGTH_E = 180 // ALPHA_RES


def _vec3(values: Iterable[float]) -> Vector3:
    x, y, z = tuple(values)[:3]
    return (float(x), float(y), float(z))


@dataclass
class Px4Params:
    """Flight controller parameters relevant to the planner."""

    mpc_auto_mode: int = 1
    mpc_jerk_min: float = 8.0
    mpc_jerk_max: float = 20.0
    mpc_acc_up_max: float = 10.0
    mpc_z_vel_max_up: float = 3.0
    mpc_acc_down_max: float = 10.0
    mpc_z_vel_max_dn: float = 1.0
    mpc_acc_hor: float = 5.0
    mpc_xy_cruise: float = 3.0
    mpc_tko_speed: float = 1.0
    mpc_land_speed: float = 0.7
    cp_dist: float = 4.0


@dataclass
class FOV:
    """Field of view of a camera, in degrees."""

    yaw_deg: float = 0.0
    pitch_deg: float = 0.0
    h_fov_deg: float = 0.0
    v_fov_deg: float = 0.0


@dataclass
class AvoidanceOutput:
    """What the local planner hands on to the waypoint generator."""

    cruise_velocity: float
    last_path_time: float
    path_node_positions: list[Vector3] = field(default_factory=list)


@dataclass
class LaserScan:
    """Obstacle distances around the vehicle, one range per azimuth bin."""

    angle_increment: float
    range_min: float
    range_max: float
    ranges: list[float] = field(default_factory=list)
    frame_id: str = "local_origin"
    stamp: float = 0.0


@dataclass
class LocalPlanner:
    """State and derived quantities of the local planner."""

    max_sensor_range: float = 15.0
    min_sensor_range: float = 0.2
    mission_item_speed: float = math.nan
    px4: Px4Params = field(default_factory=Px4Params)
    position: Vector3 = (0.0, 0.0, 0.0)
    velocity: Vector3 = (0.0, 0.0, 0.0)
    goal: Vector3 = (0.0, 0.0, 0.0)
    prev_goal: Vector3 = (0.0, 0.0, 0.0)
    fovs: list[FOV] = field(default_factory=list)
    path_node_positions: list[Vector3] = field(default_factory=list)
    last_path_time: float = 0.0
    closest_pt: Vector3 = (0.0, 0.0, 0.0)
    distance_data: LaserScan | None = None
    histogram_image_data: list[int] = field(default_factory=list)

    def set_goal(self, goal: Iterable[float]) -> None:
        """Set the current goal."""
        self.goal = _vec3(goal)

    def set_previous_goal(self, prev_goal: Iterable[float]) -> None:
        """Set the goal that preceded the current one."""
        self.prev_goal = _vec3(prev_goal)

    def set_fov(self, index: int, fov: FOV) -> None:
        """Replace the field of view at index, or append it if index is past the end."""
        if index < len(self.fovs):
            self.fovs[index] = fov
        else:
            self.fovs.append(fov)

    def histogram_image(self, distances: Sequence[Sequence[float]]) -> list[int]:
        """Grey values for a histogram of distances indexed (elevation, azimuth).

        Rows are emitted from the highest elevation down; near obstacles are
        bright and empty bins are black.
        """
        arr = np.asarray(distances, dtype=float)
        if arr.ndim != 2:
            raise ValueError(f"distances must be two-dimensional, got shape {arr.shape}")
        depth = np.where(arr > 0.01, 255.0 - 255.0 * arr / self.max_sensor_range, 0.0)
        values = np.clip(depth, 0.0, 255.0)[::-1].astype(int)
        self.histogram_image_data = values.ravel().tolist()
        return self.histogram_image_data

    def closest_point_on_line(self) -> Vector3:
        """Projection of the vehicle onto the line from the previous goal to the goal.

        The goal itself is returned when the vehicle is within cruise speed of
        the line or when both goals coincide in XY.
        """
        goal = np.array(self.goal)
        prev = np.array(self.prev_goal)
        pos = np.array(self.position)

        direction = (goal - prev)[:2]
        norm = float(np.linalg.norm(direction))
        unit = direction / norm if norm > 0 else direction
        xy = prev[:2] + unit * float(unit @ (pos - prev)[:2])
        closest = np.array([xy[0], xy[1], goal[2]])

        if (
            float(np.linalg.norm((pos - closest)[:2])) < self.px4.mpc_xy_cruise
            or norm < 0.001
        ):
            closest = goal
        self.closest_pt = _vec3(closest)
        return self.closest_pt

    def empty_obstacle_distance(self) -> LaserScan:
        """An obstacle distance message with no ranges."""
        self.distance_data = LaserScan(
            angle_increment=ALPHA_RES * math.pi / 180.0,
            range_min=self.min_sensor_range,
            range_max=self.max_sensor_range,
            stamp=time.time(),
        )
        return self.distance_data

    def avoidance_output(self) -> AvoidanceOutput:
        """Cruise speed limited by the distance the vehicle can stop within."""
        acc = self.px4.mpc_acc_hor
        accel_ramp_time = acc / self.px4.mpc_jerk_max
        a = 1.0
        b = 2.0 * acc * accel_ramp_time
        c = 2.0 * -acc * self.max_sensor_range
        limited_speed = (-b + math.sqrt(b * b - 4.0 * a * c)) / (2.0 * a)

        speed = (
            self.mission_item_speed
            if math.isfinite(self.mission_item_speed)
            else self.px4.mpc_xy_cruise
        )
        return AvoidanceOutput(
            cruise_velocity=min(speed, limited_speed),
            last_path_time=self.last_path_time,
            path_node_positions=list(self.path_node_positions),
        )