"""Multithreaded engine that routes measurements to per-entity trackers."""

from __future__ import annotations

import threading
import time
from typing import Callable, Dict, List, Optional

from .logger import get_logger
from .tracker import EntityTracker, FusedEntityState
from .tsqueue import QueueShutdown, ThreadSafeQueue
from .types import EntityType, SensorMeasurement

FusedStateCallback = Callable[[FusedEntityState], None]

_DEFAULT_STALE_TIMEOUT = 10.0
_DEFAULT_OUTPUT_RATE_HZ = 10.0
_OUTPUT_POLL_INTERVAL = 0.01


class FusionEngine:
    """Consumes measurements on one thread and publishes fused states on another."""

    def __init__(self) -> None:
        self._trackers: Dict[int, EntityTracker] = {}
        self._trackers_lock = threading.Lock()
        self._queue: ThreadSafeQueue[SensorMeasurement] = ThreadSafeQueue()
        self._callback: Optional[FusedStateCallback] = None
        self._running = False
        self._stop_event = threading.Event()
        self._fusion_thread: Optional[threading.Thread] = None
        self._output_thread: Optional[threading.Thread] = None
        self._stale_timeout = _DEFAULT_STALE_TIMEOUT
        self._output_rate_hz = _DEFAULT_OUTPUT_RATE_HZ

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._stop_event.clear()
        self._fusion_thread = threading.Thread(
            target=self._fusion_loop, name="fusion", daemon=True
        )
        self._output_thread = threading.Thread(
            target=self._output_loop, name="fusion-output", daemon=True
        )
        self._fusion_thread.start()
        self._output_thread.start()
        get_logger().info("Fusion Engine started")

    def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        self._stop_event.set()
        self._queue.shutdown()
        for thread in (self._fusion_thread, self._output_thread):
            if thread is not None:
                thread.join()
        self._fusion_thread = self._output_thread = None
        # A shut-down queue cannot be reopened; carry pending items into a fresh one.
        pending = ThreadSafeQueue()
        while (item := self._queue.try_pop()) is not None:
            pending.push(item)
        self._queue = pending
        get_logger().info("Fusion Engine stopped")

    def ingest_measurement(self, measurement: SensorMeasurement) -> None:
        self._queue.push(measurement)

    def set_output_callback(self, callback: Optional[FusedStateCallback]) -> None:
        self._callback = callback

    def all_entity_states(self) -> List[FusedEntityState]:
        """Return the fused state of every tracked entity, ordered by entity id."""
        with self._trackers_lock:
            return [self._trackers[eid].fused_state() for eid in sorted(self._trackers)]

    def set_stale_entity_timeout(self, timeout: float) -> None:
        """Drop entities not updated for more than ``timeout`` seconds."""
        self._stale_timeout = float(timeout)

    def set_output_rate_hz(self, rate_hz: float) -> None:
        if rate_hz <= 0:
            raise ValueError("output rate must be positive")
        self._output_rate_hz = float(rate_hz)

    def _fusion_loop(self) -> None:
        queue = self._queue
        while self._running:
            try:
                measurement = queue.pop()
            except QueueShutdown:
                break
            with self._trackers_lock:
                tracker = self._trackers.get(measurement.entity_id)
                if tracker is None:
                    tracker = EntityTracker(measurement.entity_id, EntityType.VEHICLE)
                    self._trackers[measurement.entity_id] = tracker
                    get_logger().info(
                        f"Created new tracker for entity {measurement.entity_id}"
                    )
                tracker.process_measurement(measurement)

    def _output_loop(self) -> None:
        period = 1.0 / self._output_rate_hz
        next_output = time.perf_counter()
        while self._running:
            if time.perf_counter() >= next_output:
                self._cleanup_stale_entities()
                states = self.all_entity_states()
                callback = self._callback
                if callback is not None:
                    for state in states:
                        callback(state)
                next_output += period
            self._stop_event.wait(_OUTPUT_POLL_INTERVAL)

    def _cleanup_stale_entities(self) -> None:
        with self._trackers_lock:
            now = time.perf_counter()
            stale = [
                eid
                for eid, tracker in self._trackers.items()
                if tracker.is_stale(now, self._stale_timeout)
            ]
            for eid in stale:
                get_logger().info(f"Removed stale entity {eid}")
                del self._trackers[eid]