"""Per-entity state tracking built on a constant-velocity Kalman filter."""

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List

import numpy as np

from .kalman import KalmanFilter
from .types import (
    EntityType,
    Position3D,
    SensorMeasurement,
    SensorType,
    Velocity3D,
    entity_type_to_string,
)

_MAX_RECENT_SENSORS = 10
_INITIAL_CONFIDENCE = 0.5
_CONFIDENCE_ALPHA = 0.1
_MAX_CONFIDENCE = 0.99
_MAX_MEASUREMENT_BONUS = 0.2
_UNMEASURED_VELOCITY_VARIANCE = 10.0
_UNMEASURED_VELOCITY_NOISE = 100.0


@dataclass
class FusedEntityState:
    """Snapshot of the fused estimate for one entity.

    Times are seconds on the monotonic performance clock.
    """

    entity_id: int
    entity_type: EntityType
    position: Position3D = field(default_factory=Position3D)
    velocity: Velocity3D = field(default_factory=Velocity3D)
    covariance: np.ndarray = field(default_factory=lambda: np.zeros((6, 6)))
    confidence: float = 0.0
    timestamp: float = 0.0
    last_update_time: float = 0.0
    contributing_sensors: List[SensorType] = field(default_factory=list)
    measurement_count: int = 0

    def __str__(self) -> str:
        p, v = self.position, self.velocity
        return (
            f"Entity {self.entity_id} [{entity_type_to_string(self.entity_type)}] "
            f"Pos:({p.x:.2f},{p.y:.2f},{p.z:.2f}) "
            f"Vel:({v.vx:.2f},{v.vy:.2f},{v.vz:.2f}) "
            f"Conf:{self.confidence * 100:.2f}% "
            f"Measurements:{self.measurement_count}"
        )


class EntityTracker:
    """Fuses the measurements of a single entity into one state estimate."""

    def __init__(self, entity_id: int, entity_type: EntityType) -> None:
        self._entity_id = entity_id
        self._entity_type = entity_type
        self._filter = KalmanFilter()
        self._creation_time = time.perf_counter()
        self._last_update_time = self._creation_time
        self._recent_sensors: Deque[SensorType] = deque(maxlen=_MAX_RECENT_SENSORS)
        self._total_measurements = 0
        self._confidence = _INITIAL_CONFIDENCE

    @property
    def entity_id(self) -> int:
        return self._entity_id

    def process_measurement(self, measurement: SensorMeasurement) -> None:
        """Fold one measurement into the estimate."""
        current_time = measurement.timestamp
        pos, vel = measurement.position, measurement.velocity

        if self._total_measurements == 0:
            state = np.array([pos.x, pos.y, pos.z, 0.0, 0.0, 0.0])
            if measurement.has_velocity:
                state[3:] = [vel.vx, vel.vy, vel.vz]

            covariance = np.eye(6)
            covariance[:3, :3] = measurement.position_covariance
            if measurement.has_velocity:
                covariance[3:, 3:] = measurement.velocity_covariance
            else:
                covariance[3:, 3:] *= _UNMEASURED_VELOCITY_VARIANCE

            self._filter.initialize(state, covariance)
        else:
            dt = current_time - self._last_update_time
            if dt > 0.0:
                self._filter.predict(dt)

            z = np.array([pos.x, pos.y, pos.z, vel.vx, vel.vy, vel.vz])
            r = np.eye(6) * _UNMEASURED_VELOCITY_NOISE
            r[:3, :3] = measurement.position_covariance
            r[3:, 3:] = measurement.velocity_covariance

            self._filter.update(z, r, measurement.has_velocity)

        self._update_confidence(measurement.confidence)
        self._recent_sensors.append(measurement.sensor_type)
        self._last_update_time = current_time
        self._total_measurements += 1

    def fused_state(self) -> FusedEntityState:
        """Return the current estimate, stamped with the present time."""
        return FusedEntityState(
            entity_id=self._entity_id,
            entity_type=self._entity_type,
            position=self._filter.position,
            velocity=self._filter.velocity,
            covariance=self._filter.covariance,
            confidence=self._confidence,
            timestamp=time.perf_counter(),
            last_update_time=self._last_update_time,
            contributing_sensors=list(self._recent_sensors),
            measurement_count=self._total_measurements,
        )

    def is_stale(self, current_time: float, max_age: float) -> bool:
        """True when more than ``max_age`` seconds passed since the last update."""
        return (current_time - self._last_update_time) > max_age

    def _update_confidence(self, measurement_confidence: float) -> None:
        blended = (
            _CONFIDENCE_ALPHA * measurement_confidence
            + (1.0 - _CONFIDENCE_ALPHA) * self._confidence
        )
        bonus = min(self._total_measurements / 100.0, _MAX_MEASUREMENT_BONUS)
        self._confidence = min(blended + bonus, _MAX_CONFIDENCE)