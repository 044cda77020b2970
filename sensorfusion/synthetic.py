"""Sensor interface and a generator of noisy synthetic measurements."""

from __future__ import annotations

import abc
import math
import random
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import numpy as np

from .logger import get_logger
from .types import (
    EntityType,
    Position3D,
    SensorMeasurement,
    SensorType,
    Velocity3D,
    sensor_type_to_string,
)

SensorCallback = Callable[[SensorMeasurement], None]

_CONFIDENCE_BY_SENSOR = {
    SensorType.GPS: 0.95,
    SensorType.RADAR: 0.85,
    SensorType.VISION: 0.75,
    SensorType.LIDAR: 0.90,
}
_DEFAULT_CONFIDENCE = 0.70
_VELOCITY_SENSORS = frozenset({SensorType.RADAR, SensorType.LIDAR})
_VELOCITY_NOISE_SCALE = 0.1
_VELOCITY_VARIANCE_SCALE = 0.01
_POLL_INTERVAL = 0.001


class SensorInterface(abc.ABC):
    """A source of measurements delivered through a callback."""

    @abc.abstractmethod
    def start(self) -> None: ...

    @abc.abstractmethod
    def stop(self) -> None: ...

    @abc.abstractmethod
    def set_callback(self, callback: Optional[SensorCallback]) -> None: ...

    @property
    @abc.abstractmethod
    def sensor_type(self) -> SensorType: ...


@dataclass
class EntityTrajectory:
    """An entity moving at constant velocity from an initial position."""

    entity_id: int
    entity_type: EntityType = EntityType.UNKNOWN
    initial_position: Position3D = field(default_factory=Position3D)
    velocity: Velocity3D = field(default_factory=Velocity3D)
    heading: float = 0.0


class SyntheticSensorGenerator(SensorInterface):
    """Emits noisy measurements of scripted trajectories at a fixed rate."""

    def __init__(
        self,
        sensor_type: SensorType,
        update_rate_hz: float,
        noise_std_dev: float,
        seed: Optional[int] = None,
    ) -> None:
        if update_rate_hz <= 0:
            raise ValueError("update rate must be positive")
        self._sensor_type = sensor_type
        self._update_rate_hz = float(update_rate_hz)
        self._noise_std_dev = float(noise_std_dev)
        self._dropout_prob = 0.0
        self._min_delay_ms = 0
        self._max_delay_ms = 0
        self._entities: List[EntityTrajectory] = []
        self._callback: Optional[SensorCallback] = None
        self._running = False
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._rng = random.Random(seed)
        self._start_time = time.perf_counter()

    @property
    def sensor_type(self) -> SensorType:
        return self._sensor_type

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._start_time = time.perf_counter()
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            name=f"sensor-{sensor_type_to_string(self._sensor_type).lower()}",
            daemon=True,
        )
        self._thread.start()
        get_logger().info(f"Started {sensor_type_to_string(self._sensor_type)} generator")

    def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        get_logger().info(f"Stopped {sensor_type_to_string(self._sensor_type)} generator")

    def set_callback(self, callback: Optional[SensorCallback]) -> None:
        self._callback = callback

    def add_entity(self, trajectory: EntityTrajectory) -> None:
        self._entities.append(trajectory)

    def set_dropout_probability(self, prob: float) -> None:
        """Set the chance, clamped to [0, 1], that a measurement is dropped."""
        self._dropout_prob = min(max(prob, 0.0), 1.0)

    def set_delay_ms(self, min_ms: int, max_ms: int) -> None:
        """Delay each delivery by a random number of milliseconds in the range."""
        self._min_delay_ms = min_ms
        self._max_delay_ms = max_ms

    def generate_measurement(
        self, trajectory: EntityTrajectory, current_time: float
    ) -> SensorMeasurement:
        """Measure ``trajectory`` at ``current_time`` (performance-clock seconds)."""
        elapsed = math.trunc((current_time - self._start_time) * 1000.0) / 1000.0
        sigma = self._noise_std_dev
        noise = lambda: self._rng.gauss(0.0, sigma)  # noqa: E731

        start, vel = trajectory.initial_position, trajectory.velocity
        measurement = SensorMeasurement(
            entity_id=trajectory.entity_id,
            sensor_type=self._sensor_type,
            timestamp=current_time,
            position=Position3D(
                start.x + vel.vx * elapsed + noise(),
                start.y + vel.vy * elapsed + noise(),
                start.z + vel.vz * elapsed + noise(),
            ),
        )

        variance = sigma * sigma
        measurement.position_covariance = np.eye(3) * variance

        if self._sensor_type in _VELOCITY_SENSORS:
            measurement.has_velocity = True
            measurement.velocity = Velocity3D(
                vel.vx + noise() * _VELOCITY_NOISE_SCALE,
                vel.vy + noise() * _VELOCITY_NOISE_SCALE,
                vel.vz + noise() * _VELOCITY_NOISE_SCALE,
            )
            measurement.velocity_covariance = np.eye(3) * (
                variance * _VELOCITY_VARIANCE_SCALE
            )

        measurement.confidence = _CONFIDENCE_BY_SENSOR.get(
            self._sensor_type, _DEFAULT_CONFIDENCE
        )
        return measurement

    def _run(self) -> None:
        period = 1.0 / self._update_rate_hz
        next_update = time.perf_counter()
        while not self._stop_event.is_set():
            now = time.perf_counter()
            if now >= next_update:
                for entity in list(self._entities):
                    if self._rng.random() < self._dropout_prob:
                        continue
                    measurement = self.generate_measurement(entity, now)
                    callback = self._callback
                    if callback is not None:
                        if self._max_delay_ms > self._min_delay_ms:
                            delay = self._rng.randint(self._min_delay_ms, self._max_delay_ms)
                            time.sleep(delay / 1000.0)
                        callback(measurement)
                next_update += period
            self._stop_event.wait(_POLL_INTERVAL)