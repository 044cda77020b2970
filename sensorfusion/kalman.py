"""Constant-velocity Kalman filter over a 6-element position/velocity state."""

from __future__ import annotations

import numpy as np

from .types import Position3D, Velocity3D

_DIM = 6
_Q_POS = 0.5
_Q_VEL = 0.5


class KalmanFilter:
    """Linear Kalman filter with state ``[x, y, z, vx, vy, vz]``."""

    def __init__(self) -> None:
        self._state = np.zeros(_DIM)
        self._covariance = np.eye(_DIM) * 100.0
        self._F = np.eye(_DIM)
        self._Q = np.eye(_DIM)
        self._H_pos = np.zeros((3, _DIM))
        self._H_pos[:, :3] = np.eye(3)
        self._H_full = np.eye(_DIM)
        self._initialized = False
        self.set_process_noise(0.5, 0.5)

    def initialize(self, initial_state, initial_covariance) -> None:
        state = np.array(initial_state, dtype=float).reshape(-1)
        covariance = np.array(initial_covariance, dtype=float)
        if state.shape != (_DIM,):
            raise ValueError(f"initial state must have {_DIM} elements")
        if covariance.shape != (_DIM, _DIM):
            raise ValueError(f"initial covariance must be {_DIM}x{_DIM}")
        self._state = state
        self._covariance = covariance
        self._initialized = True

    def predict(self, dt: float) -> None:
        """Propagate the state ``dt`` seconds forward."""
        self._build_transition_matrix(dt)
        self._build_process_noise(dt)
        F = self._F
        self._state = F @ self._state
        self._covariance = F @ self._covariance @ F.T + self._Q

    def update(self, measurement, measurement_covariance, has_velocity: bool) -> None:
        """Correct the state with a measurement.

        Without velocity only the first three elements of the measurement and
        the upper-left 3x3 block of its covariance are used.
        """
        z_full = np.asarray(measurement, dtype=float).reshape(-1)
        r_full = np.asarray(measurement_covariance, dtype=float)
        if has_velocity:
            H, z, R = self._H_full, z_full, r_full
        else:
            H, z, R = self._H_pos, z_full[:3], r_full[:3, :3]

        P = self._covariance
        y = z - H @ self._state
        S = H @ P @ H.T + R
        K = P @ H.T @ np.linalg.inv(S)

        self._state = self._state + K @ y
        self._covariance = (np.eye(_DIM) - K @ H) @ P

    @property
    def state(self) -> np.ndarray:
        return self._state.copy()

    @property
    def covariance(self) -> np.ndarray:
        return self._covariance.copy()

    @property
    def position(self) -> Position3D:
        x, y, z = self._state[:3]
        return Position3D(float(x), float(y), float(z))

    @property
    def velocity(self) -> Velocity3D:
        vx, vy, vz = self._state[3:]
        return Velocity3D(float(vx), float(vy), float(vz))

    def set_process_noise(self, pos_noise: float, vel_noise: float) -> None:
        self._Q = np.zeros((_DIM, _DIM))
        self._Q[:3, :3] = np.eye(3) * (pos_noise * pos_noise)
        self._Q[3:, 3:] = np.eye(3) * (vel_noise * vel_noise)

    def _build_transition_matrix(self, dt: float) -> None:
        self._F = np.eye(_DIM)
        self._F[:3, 3:] = np.eye(3) * dt

    def _build_process_noise(self, dt: float) -> None:
        dt2 = dt * dt
        dt3 = dt2 * dt
        dt4 = dt3 * dt
        eye = np.eye(3)
        self._Q = np.zeros((_DIM, _DIM))
        self._Q[:3, :3] = eye * (dt4 / 4.0) * _Q_POS
        self._Q[:3, 3:] = eye * (dt3 / 2.0) * _Q_POS
        self._Q[3:, :3] = eye * (dt3 / 2.0) * _Q_POS
        self._Q[3:, 3:] = eye * dt2 * _Q_VEL