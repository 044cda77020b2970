"""Top-level wiring of sensors, the fusion engine and output sinks."""

from __future__ import annotations

from typing import List, Optional

from .engine import FusionEngine
from .logger import get_logger
from .outputs import OutputInterface
from .synthetic import SensorInterface
from .tracker import FusedEntityState
from .types import SensorMeasurement


class SensorFusionSystem:
    """Routes sensor measurements into a fusion engine and fused states to outputs."""

    def __init__(self) -> None:
        self._sensors: List[SensorInterface] = []
        self._outputs: List[OutputInterface] = []
        self._engine: Optional[FusionEngine] = None
        self._running = False

    def add_sensor(self, sensor: SensorInterface) -> None:
        self._sensors.append(sensor)

    def add_output_interface(self, output: OutputInterface) -> None:
        self._outputs.append(output)

    def set_fusion_engine(self, engine: Optional[FusionEngine]) -> None:
        self._engine = engine

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Start the engine, then the outputs, then the sensors."""
        if self._running:
            return
        logger = get_logger()
        logger.info("Starting Battle-Node System...")

        if self._engine is not None:
            self._engine.set_output_callback(self._on_fused_state)
            self._engine.start()

        for output in self._outputs:
            output.start()

        for sensor in self._sensors:
            sensor.set_callback(self._on_sensor_measurement)
            sensor.start()

        self._running = True
        logger.info("Battle-Node System started successfully")

    def stop(self) -> None:
        """Stop the sensors, then the engine, then the outputs."""
        if not self._running:
            return
        logger = get_logger()
        logger.info("Stopping Battle-Node System...")

        for sensor in self._sensors:
            sensor.stop()

        if self._engine is not None:
            self._engine.stop()

        for output in self._outputs:
            output.stop()

        self._running = False
        logger.info("Battle-Node System stopped")

    def __enter__(self) -> "SensorFusionSystem":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def _on_sensor_measurement(self, measurement: SensorMeasurement) -> None:
        engine = self._engine
        if engine is not None:
            engine.ingest_measurement(measurement)

    def _on_fused_state(self, state: FusedEntityState) -> None:
        for output in self._outputs:
            output.publish_state(state)