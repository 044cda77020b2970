"""Command entry points: the tracker node and a timed demonstration."""

from __future__ import annotations

import argparse
import time
from typing import Optional, Sequence

from .engine import FusionEngine
from .logger import LogLevel, get_logger
from .outputs import CLIVisualizer
from .synthetic import EntityTrajectory, SyntheticSensorGenerator
from .system import SensorFusionSystem
from .types import EntityType, Position3D, SensorType, Velocity3D
from .wsserver import WebSocketServer

WEBSOCKET_PORT = 8080
DEFAULT_LOG_FILE = "sensor_fusion.log"
DEFAULT_DEMO_DURATION = 30.0
DEFAULT_DEMO_STARTUP_DELAY = 3.0

_BANNER_RULE_TOP = "╔═══════════════════════════════════════════════════════════════╗"
_BANNER_RULE_BOTTOM = "╚═══════════════════════════════════════════════════════════════╝"


def build_main_system(log_file) -> SensorFusionSystem:
    """Configure logging and assemble the full three-sensor node."""
    logger = get_logger()
    logger.set_log_level(LogLevel.INFO)
    if log_file is not None:
        logger.set_log_file(log_file)
    logger.info("Initializing Battle-Node System")

    system = SensorFusionSystem()
    engine = FusionEngine()
    engine.set_output_rate_hz(5.0)
    engine.set_stale_entity_timeout(15.0)
    system.set_fusion_engine(engine)

    visualizer = CLIVisualizer(True)
    visualizer.set_verbose(True)
    system.add_output_interface(visualizer)
    system.add_output_interface(WebSocketServer(WEBSOCKET_PORT))

    gps = SyntheticSensorGenerator(SensorType.GPS, 1.0, 5.0)
    gps.set_dropout_probability(0.05)

    radar = SyntheticSensorGenerator(SensorType.RADAR, 5.0, 3.0)
    radar.set_dropout_probability(0.10)
    radar.set_delay_ms(10, 50)

    vision = SyntheticSensorGenerator(SensorType.VISION, 10.0, 8.0)
    vision.set_dropout_probability(0.15)

    vehicle_a = EntityTrajectory(
        entity_id=101,
        entity_type=EntityType.VEHICLE,
        initial_position=Position3D(0.0, 0.0, 0.0),
        velocity=Velocity3D(15.0, 10.0, 0.0),
    )
    aircraft = EntityTrajectory(
        entity_id=102,
        entity_type=EntityType.AIRCRAFT,
        initial_position=Position3D(100.0, 200.0, 50.0),
        velocity=Velocity3D(-20.0, 5.0, 2.0),
    )
    vehicle_b = EntityTrajectory(
        entity_id=103,
        entity_type=EntityType.VEHICLE,
        initial_position=Position3D(-50.0, 100.0, 0.0),
        velocity=Velocity3D(8.0, -12.0, 0.0),
    )

    for trajectory in (vehicle_a, aircraft, vehicle_b):
        gps.add_entity(trajectory)
        radar.add_entity(trajectory)
    vision.add_entity(vehicle_a)
    vision.add_entity(vehicle_b)

    for sensor in (gps, radar, vision):
        system.add_sensor(sensor)
    return system


def build_demo_system() -> SensorFusionSystem:
    """Assemble the two-sensor, two-entity demonstration setup."""
    system = SensorFusionSystem()
    engine = FusionEngine()
    engine.set_output_rate_hz(2.0)
    system.set_fusion_engine(engine)

    system.add_output_interface(CLIVisualizer(True))

    gps = SyntheticSensorGenerator(SensorType.GPS, 1.0, 4.0)
    gps.set_dropout_probability(0.08)

    radar = SyntheticSensorGenerator(SensorType.RADAR, 4.0, 2.5)
    radar.set_dropout_probability(0.12)

    tank = EntityTrajectory(
        entity_id=201,
        entity_type=EntityType.VEHICLE,
        initial_position=Position3D(0.0, 0.0, 0.0),
        velocity=Velocity3D(12.0, 8.0, 0.0),
    )
    helicopter = EntityTrajectory(
        entity_id=202,
        entity_type=EntityType.AIRCRAFT,
        initial_position=Position3D(150.0, 100.0, 80.0),
        velocity=Velocity3D(-18.0, -10.0, 1.5),
    )

    for sensor in (gps, radar):
        sensor.add_entity(tank)
        sensor.add_entity(helicopter)
        system.add_sensor(sensor)
    return system


def _non_negative(value: str) -> float:
    number = float(value)
    if number < 0:
        raise argparse.ArgumentTypeError("must not be negative")
    return number


def _wait(duration: Optional[float]) -> None:
    if duration is None:
        while True:
            time.sleep(1.0)
    else:
        time.sleep(duration)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the tracker node until interrupted or for ``--duration`` seconds."""
    parser = argparse.ArgumentParser(prog="sensorfusion", description="Run the sensor fusion node.")
    parser.add_argument("--log-file", default=DEFAULT_LOG_FILE, help="file to append log lines to")
    parser.add_argument(
        "--duration",
        type=_non_negative,
        default=None,
        help="seconds to run before stopping (default: until Ctrl+C)",
    )
    args = parser.parse_args(argv)

    system = build_main_system(args.log_file)
    system.start()
    print("\nBattle-Node System Running...")
    print("Press Ctrl+C to stop\n", flush=True)

    try:
        _wait(args.duration)
    except KeyboardInterrupt:
        pass
    finally:
        print("\nShutting down...", flush=True)
        system.stop()
        logger = get_logger()
        logger.info("System shutdown complete")
        logger.close()
    return 0


def demo(argv: Optional[Sequence[str]] = None) -> int:
    """Run the demonstration for a fixed time."""
    parser = argparse.ArgumentParser(prog="sensorfusion-demo", description="Run the tracking demo.")
    parser.add_argument("--duration", type=_non_negative, default=DEFAULT_DEMO_DURATION)
    parser.add_argument("--startup-delay", type=_non_negative, default=DEFAULT_DEMO_STARTUP_DELAY)
    args = parser.parse_args(argv)

    get_logger().set_log_level(LogLevel.INFO)

    print()
    print(_BANNER_RULE_TOP)
    print("║     BATTLEFIELD SENSOR FUSION - PORTFOLIO DEMONSTRATION      ║")
    print(_BANNER_RULE_BOTTOM)
    print()
    print("This demo showcases:")
    print("  • Multi-sensor data ingestion (GPS, Radar, Vision)")
    print("  • Real-time Kalman filter fusion")
    print("  • Multithreaded architecture")
    print("  • Simulated noisy sensor data with dropouts")
    print("  • Live entity tracking and state estimation")
    print()
    print(f"Starting demo in {args.startup_delay:g} seconds...", flush=True)
    time.sleep(args.startup_delay)

    system = build_demo_system()
    system.start()
    print(f"\nRunning demo for {args.duration:g} seconds...\n", flush=True)
    try:
        time.sleep(args.duration)
    except KeyboardInterrupt:
        pass
    finally:
        system.stop()

    print()
    print(_BANNER_RULE_TOP)
    print("║                    DEMO COMPLETED                             ║")
    print(_BANNER_RULE_BOTTOM)
    print(flush=True)
    return 0