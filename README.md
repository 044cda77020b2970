# sensorfusion

Real-time multi-sensor entity tracking. Measurements from synthetic GPS,
radar and vision sensors go into a fusion engine. The engine keeps one
Kalman-filtered tracker per entity and publishes fused position, velocity
and confidence estimates to output interfaces: a terminal view and a
WebSocket feed of JSON messages.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Commands

`sensorfusion` runs the full node. It starts three synthetic sensors (GPS at
1 Hz, radar at 5 Hz with 10–50 ms delivery delay, vision at 10 Hz) watching
three moving entities. It also starts the fusion engine with a 5 Hz output
rate and a 15 second stale-entity timeout, a verbose terminal view that prints
one line per fused state, and a WebSocket server on port 8080. Press Ctrl+C to
stop.

```
sensorfusion
sensorfusion --log-file run.log --duration 60
```

- `--log-file FILE`: file to append log lines to (default `sensor_fusion.log`)
- `--duration SECONDS`: stop after this many seconds instead of waiting for Ctrl+C

`sensorfusion-demo` prints a banner, waits, then runs a smaller setup: GPS
and radar sensors, two entities, a 2 Hz output rate and a non-verbose
terminal view. It stops on its own.

```
sensorfusion-demo
sensorfusion-demo --duration 10 --startup-delay 0
```

- `--duration SECONDS`: how long to run (default 30)
- `--startup-delay SECONDS`: pause before starting (default 3)

## Library use

```python
from sensorfusion.engine import FusionEngine
from sensorfusion.outputs import CLIVisualizer
from sensorfusion.synthetic import EntityTrajectory, SyntheticSensorGenerator
from sensorfusion.system import SensorFusionSystem
from sensorfusion.types import EntityType, Position3D, SensorType, Velocity3D

system = SensorFusionSystem()
engine = FusionEngine()
engine.set_output_rate_hz(2.0)
system.set_fusion_engine(engine)

view = CLIVisualizer()
view.set_verbose(True)
system.add_output_interface(view)

gps = SyntheticSensorGenerator(SensorType.GPS, 1.0, 4.0, seed=1)
gps.set_dropout_probability(0.08)
gps.add_entity(EntityTrajectory(
    entity_id=201,
    entity_type=EntityType.VEHICLE,
    initial_position=Position3D(0.0, 0.0, 0.0),
    velocity=Velocity3D(12.0, 8.0, 0.0),
))
system.add_sensor(gps)

with system:
    ...  # let it run
print(engine.all_entity_states())
```

`SensorFusionSystem` starts the engine, then the outputs, then the sensors.
It stops them in the order sensors, engine, outputs. It can also be used as a
context manager. Every fused state the engine emits is passed to each
output's `publish_state`.

Modules:

- `sensorfusion.types`: `SensorType`, `EntityType`, `Position3D`, `Velocity3D`, `SensorMeasurement`
- `sensorfusion.kalman`: `KalmanFilter`, a constant-velocity filter over `[x, y, z, vx, vy, vz]`
- `sensorfusion.tracker`: `EntityTracker` and the `FusedEntityState` snapshot it produces
- `sensorfusion.engine`: `FusionEngine`, which runs a fusion thread and an output thread and drops stale entities
- `sensorfusion.tsqueue`: `ThreadSafeQueue`, a blocking FIFO whose `pop` raises `QueueShutdown` once it is shut down and drained
- `sensorfusion.synthetic`: `SensorInterface`, `EntityTrajectory` and `SyntheticSensorGenerator`, which adds noise, dropouts and delays
- `sensorfusion.outputs`: `OutputInterface`, `CLIVisualizer`, and the `format_position`, `format_velocity` and `format_confidence` helpers
- `sensorfusion.wsserver`: `WebSocketServer`, plus `serialize_state` and `serialize_states` for the JSON format
- `sensorfusion.system`: `SensorFusionSystem`
- `sensorfusion.logger`: `Logger`, `LogLevel` and `get_logger()` for timestamped lines on standard output and an optional file
- `sensorfusion.cli`: `main`, `demo`, `build_main_system` and `build_demo_system`

## WebSocket feed

`WebSocketServer(port, host="0.0.0.0")` queues each published state as a JSON
object. Numbers have four decimals. An object looks like this:

```
{"entityId":101,"type":"VEHICLE","position":{"x":1.0000,"y":2.0000,"z":0.0000},"velocity":{"vx":15.0000,"vy":10.0000,"vz":0.0000},"confidence":0.5500,"measurements":3}
```

Every 100 ms the queued messages are sent to all connected clients. At most
100 messages wait for a broadcast and at most 50 wait per client. When a queue
is full, the oldest messages are dropped.

## Limitations

- Only synthetic sensors are included. Nothing reads measurements from real devices, files or the network.
- The engine creates every tracker with `EntityType.VEHICLE`. The type given in an `EntityTrajectory` does not reach the fused states.
- The WebSocket server only sends. Anything clients send is read and ignored.
- `CLIVisualizer` accepts `enable_colors` but writes plain text only. When it is not verbose, it records the latest states and prints nothing for them. The summary table is printed only through `publish_states`.
- Nothing is stored. Fused states exist only in memory and in what the outputs emit.