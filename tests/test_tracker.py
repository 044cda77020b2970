import time

import numpy as np
import pytest

from sensorfusion.tracker import EntityTracker, FusedEntityState
from sensorfusion.types import (
    EntityType,
    Position3D,
    SensorMeasurement,
    SensorType,
    Velocity3D,
)


def _measurement(t, x=0.0, y=0.0, z=0.0, velocity=None, sensor=SensorType.GPS, conf=0.95):
    m = SensorMeasurement(
        entity_id=5,
        sensor_type=sensor,
        timestamp=t,
        position=Position3D(x, y, z),
        confidence=conf,
    )
    if velocity is not None:
        m.has_velocity = True
        m.velocity = Velocity3D(*velocity)
        m.velocity_covariance = np.eye(3) * 0.01
    return m


def _diag_sum(matrix):
    return float(np.sum(np.diag(matrix)))


def test_entity_id_and_initial_state():
    tracker = EntityTracker(42, EntityType.AIRCRAFT)
    state = tracker.fused_state()
    assert tracker.entity_id == 42
    assert state.entity_type is EntityType.AIRCRAFT
    assert state.measurement_count == 0
    assert state.confidence == pytest.approx(0.5)
    assert state.contributing_sensors == []


def test_first_measurement_initializes_position():
    tracker = EntityTracker(5, EntityType.VEHICLE)
    tracker.process_measurement(_measurement(10.0, 1.5, -2.5, 3.0))
    state = tracker.fused_state()
    assert state.position == Position3D(1.5, -2.5, 3.0)
    assert state.velocity == Velocity3D(0.0, 0.0, 0.0)
    assert state.measurement_count == 1
    assert state.last_update_time == 10.0


def test_first_measurement_without_velocity_inflates_velocity_covariance():
    tracker = EntityTracker(5, EntityType.VEHICLE)
    tracker.process_measurement(_measurement(1.0))
    cov = tracker.fused_state().covariance
    np.testing.assert_allclose(cov[3:, 3:], np.eye(3) * 10.0)
    np.testing.assert_allclose(cov[:3, :3], np.eye(3))


def test_first_measurement_with_velocity_uses_it():
    tracker = EntityTracker(5, EntityType.VEHICLE)
    tracker.process_measurement(_measurement(1.0, velocity=(4.0, -3.0, 1.0)))
    state = tracker.fused_state()
    assert state.velocity == Velocity3D(4.0, -3.0, 1.0)
    np.testing.assert_allclose(state.covariance[3:, 3:], np.eye(3) * 0.01)


def test_position_update_moves_estimate_toward_measurement():
    tracker = EntityTracker(5, EntityType.VEHICLE)
    tracker.process_measurement(_measurement(1.0, 0.0, 0.0, 0.0))
    tracker.process_measurement(_measurement(1.0, 10.0, 0.0, 0.0))
    x = tracker.fused_state().position.x
    assert 0.0 < x < 10.0


def test_covariance_shrinks_with_repeated_measurements():
    tracker = EntityTracker(5, EntityType.VEHICLE)
    tracker.process_measurement(_measurement(1.0))
    first = _diag_sum(tracker.fused_state().covariance[:3, :3])
    for _ in range(5):
        tracker.process_measurement(_measurement(1.0))
    later = _diag_sum(tracker.fused_state().covariance[:3, :3])
    assert later < first


def test_confidence_rises_and_is_capped():
    tracker = EntityTracker(5, EntityType.VEHICLE)
    previous = tracker.fused_state().confidence
    tracker.process_measurement(_measurement(1.0, conf=0.95))
    assert tracker.fused_state().confidence > previous
    for i in range(200):
        tracker.process_measurement(_measurement(1.0 + i * 0.01, conf=0.95))
    assert tracker.fused_state().confidence == pytest.approx(0.99)


def test_contributing_sensors_keep_last_ten():
    tracker = EntityTracker(5, EntityType.VEHICLE)
    tracker.process_measurement(_measurement(1.0, sensor=SensorType.RADAR))
    for i in range(12):
        tracker.process_measurement(_measurement(1.0 + i, sensor=SensorType.GPS))
    sensors = tracker.fused_state().contributing_sensors
    assert len(sensors) == 10
    assert SensorType.RADAR not in sensors
    assert tracker.fused_state().measurement_count == 13


def test_is_stale():
    tracker = EntityTracker(5, EntityType.VEHICLE)
    tracker.process_measurement(_measurement(100.0))
    assert not tracker.is_stale(105.0, 10.0)
    assert tracker.is_stale(110.5, 10.0)


def test_new_tracker_is_not_stale_right_away():
    tracker = EntityTracker(5, EntityType.VEHICLE)
    assert not tracker.is_stale(time.perf_counter(), 5.0)


def test_fused_state_string_format():
    state = FusedEntityState(
        entity_id=7,
        entity_type=EntityType.VEHICLE,
        position=Position3D(1.0, 2.0, 3.0),
        velocity=Velocity3D(0.5, -0.5, 0.0),
        confidence=0.5,
        measurement_count=4,
    )
    assert str(state) == (
        "Entity 7 [VEHICLE] Pos:(1.00,2.00,3.00) Vel:(0.50,-0.50,0.00) "
        "Conf:50.00% Measurements:4"
    )