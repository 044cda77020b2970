import numpy as np
import pytest

from sensorfusion.kalman import KalmanFilter
from sensorfusion.types import Position3D, Velocity3D


def _diag_sum(matrix):
    return float(np.sum(np.diag(matrix)))


def test_default_state_and_covariance():
    kf = KalmanFilter()
    assert np.array_equal(kf.state, np.zeros(6))
    assert np.array_equal(kf.covariance, np.eye(6) * 100.0)
    assert kf.position == Position3D()
    assert kf.velocity == Velocity3D()


def test_initialize_sets_state_and_accessors():
    kf = KalmanFilter()
    kf.initialize([1.0, 2.0, 3.0, 4.0, 5.0, 6.0], np.eye(6))
    assert kf.position == Position3D(1.0, 2.0, 3.0)
    assert kf.velocity == Velocity3D(4.0, 5.0, 6.0)
    assert np.array_equal(kf.covariance, np.eye(6))


def test_initialize_rejects_bad_shapes():
    kf = KalmanFilter()
    with pytest.raises(ValueError):
        kf.initialize([1.0, 2.0, 3.0], np.eye(6))
    with pytest.raises(ValueError):
        kf.initialize(np.zeros(6), np.eye(3))


def test_state_accessor_returns_copy():
    kf = KalmanFilter()
    snapshot = kf.state
    snapshot[0] = 99.0
    assert kf.state[0] == 0.0


def test_predict_moves_position_by_velocity():
    kf = KalmanFilter()
    initial = np.array([1.0, -2.0, 0.5, 3.0, 1.5, -1.0])
    kf.initialize(initial, np.eye(6))
    dt = 2.0
    kf.predict(dt)
    state = kf.state
    assert np.allclose(state[:3], initial[:3] + initial[3:] * dt)
    assert np.allclose(state[3:], initial[3:])


def test_predict_grows_uncertainty_and_keeps_symmetry():
    kf = KalmanFilter()
    kf.initialize(np.zeros(6), np.eye(6))
    before = _diag_sum(kf.covariance)
    kf.predict(0.5)
    cov = kf.covariance
    assert _diag_sum(cov) > before
    assert np.allclose(cov, cov.T)
    assert np.all(np.linalg.eigvalsh(cov) > 0)


def test_zero_dt_predict_leaves_state_and_covariance():
    kf = KalmanFilter()
    kf.initialize([1.0, 2.0, 3.0, 4.0, 5.0, 6.0], np.eye(6) * 2.0)
    kf.predict(0.0)
    assert np.allclose(kf.state, [1.0, 2.0, 3.0, 4.0, 5.0, 6.0])
    assert np.allclose(kf.covariance, np.eye(6) * 2.0)


def test_precise_full_measurement_pins_state():
    kf = KalmanFilter()
    z = np.array([10.0, 20.0, 30.0, 1.0, 2.0, 3.0])
    kf.update(z, np.eye(6) * 1e-9, True)
    assert np.allclose(kf.state, z, atol=1e-6)


def test_position_only_update_with_equal_noise_goes_halfway():
    kf = KalmanFilter()
    z = np.array([10.0, 20.0, 30.0, 99.0, 99.0, 99.0])
    kf.update(z, np.eye(6) * 100.0, False)
    state = kf.state
    assert np.allclose(state[:3], z[:3] / 2)
    assert np.allclose(state[3:], np.zeros(3))


def test_position_only_update_accepts_three_element_measurement():
    full = KalmanFilter()
    short = KalmanFilter()
    full.update([4.0, 5.0, 6.0, 0.0, 0.0, 0.0], np.eye(6) * 7.0, False)
    short.update([4.0, 5.0, 6.0], np.eye(3) * 7.0, False)
    assert np.allclose(full.state, short.state)
    assert np.allclose(full.covariance, short.covariance)


def test_update_reduces_uncertainty():
    kf = KalmanFilter()
    before = kf.covariance
    kf.update(np.ones(6), np.eye(6) * 5.0, True)
    after = kf.covariance
    assert np.all(np.diag(after) < np.diag(before))
    assert np.allclose(after, after.T)


def test_repeated_updates_converge_to_constant_target():
    kf = KalmanFilter()
    target = np.array([50.0, -25.0, 10.0, 2.0, -1.0, 0.0])
    for _ in range(50):
        kf.predict(0.1)
        target[:3] += target[3:] * 0.1
        kf.update(target, np.eye(6), True)
    assert np.allclose(kf.state, target, atol=0.5)


def test_set_process_noise_does_not_change_state():
    kf = KalmanFilter()
    kf.initialize([1.0, 1.0, 1.0, 1.0, 1.0, 1.0], np.eye(6))
    kf.set_process_noise(2.0, 3.0)
    assert np.allclose(kf.state, np.ones(6))
    assert np.allclose(kf.covariance, np.eye(6))