"""Core value types shared across the sensor fusion pipeline."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

import numpy as np


class SensorType(enum.Enum):
    """Kind of sensor that produced a measurement."""

    GPS = enum.auto()
    VISION = enum.auto()
    RF = enum.auto()
    RADAR = enum.auto()
    LIDAR = enum.auto()
    UNKNOWN = enum.auto()

    def __str__(self) -> str:
        return self.name


class EntityType(enum.Enum):
    """Kind of tracked entity."""

    VEHICLE = enum.auto()
    AIRCRAFT = enum.auto()
    PERSONNEL = enum.auto()
    UNKNOWN = enum.auto()

    def __str__(self) -> str:
        return self.name


@dataclass
class Position3D:
    """Cartesian position in metres."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


@dataclass
class Velocity3D:
    """Cartesian velocity in metres per second."""

    vx: float = 0.0
    vy: float = 0.0
    vz: float = 0.0


def sensor_type_to_string(sensor_type: SensorType) -> str:
    """Return the display name of a sensor type."""
    return sensor_type.name


def entity_type_to_string(entity_type: EntityType) -> str:
    """Return the display name of an entity type."""
    return entity_type.name


@dataclass
class SensorMeasurement:
    """A single observation of an entity by one sensor.

    ``timestamp`` is in seconds on the monotonic performance clock.
    """

    entity_id: int = 0
    sensor_type: SensorType = SensorType.UNKNOWN
    timestamp: float = 0.0
    position: Position3D = field(default_factory=Position3D)
    velocity: Velocity3D = field(default_factory=Velocity3D)
    confidence: float = 0.0
    has_velocity: bool = False
    position_covariance: np.ndarray = field(default_factory=lambda: np.eye(3))
    velocity_covariance: np.ndarray = field(default_factory=lambda: np.eye(3))

    def __str__(self) -> str:
        p = self.position
        return (
            f"Entity:{self.entity_id}"
            f" Sensor:{sensor_type_to_string(self.sensor_type)}"
            f" Pos:({p.x:.2f},{p.y:.2f},{p.z:.2f})"
            f" Conf:{self.confidence:.2f}"
        )