"""Multi-sensor entity tracking with Kalman filter fusion, synthetic sensors and live outputs."""

__version__ = "1.0.0"