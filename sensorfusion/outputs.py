"""Output sinks for fused entity states, including a terminal table view."""

from __future__ import annotations

import abc
import sys
import threading
from typing import IO, Dict, Iterable, Optional

from .tracker import FusedEntityState
from .types import Position3D, Velocity3D, entity_type_to_string

_CLEAR_SCREEN = "\033[2J\033[1;1H"
_RULE = "═" * 75
_THIN_RULE = "─" * 75
_TITLE = "                    BATTLE-NODE - REAL-TIME TRACKER                        "


def format_position(pos: Position3D) -> str:
    """Format a position as ``(x, y, z)`` with one decimal, each 7 wide."""
    return f"({pos.x:7.1f}, {pos.y:7.1f}, {pos.z:7.1f})"


def format_velocity(vel: Velocity3D) -> str:
    """Format a velocity as ``(vx, vy, vz)`` with two decimals, each 6 wide."""
    return f"({vel.vx:6.2f}, {vel.vy:6.2f}, {vel.vz:6.2f})"


def format_confidence(confidence: float) -> str:
    """Format a 0..1 confidence as a percentage with one decimal."""
    return f"{confidence * 100.0:.1f}%"


class OutputInterface(abc.ABC):
    """A consumer of fused entity states."""

    @abc.abstractmethod
    def start(self) -> None: ...

    @abc.abstractmethod
    def stop(self) -> None: ...

    @abc.abstractmethod
    def publish_state(self, state: FusedEntityState) -> None: ...

    @abc.abstractmethod
    def publish_states(self, states: Iterable[FusedEntityState]) -> None: ...


class CLIVisualizer(OutputInterface):
    """Prints fused states to a terminal, per state or as a summary table."""

    def __init__(self, enable_colors: bool = True, stream: Optional[IO[str]] = None) -> None:
        self.enable_colors = enable_colors
        self._verbose = False
        self._stream = stream
        self._lock = threading.Lock()
        self._latest: Dict[int, FusedEntityState] = {}

    def _write(self, text: str) -> None:
        out = self._stream or sys.stdout
        out.write(text)
        out.flush()

    def start(self) -> None:
        self._write(self._header())

    def stop(self) -> None:
        pass

    def publish_state(self, state: FusedEntityState) -> None:
        with self._lock:
            self._latest[state.entity_id] = state
            if self._verbose:
                self._write(self._state_line(state) + "\n")

    def publish_states(self, states: Iterable[FusedEntityState]) -> None:
        states = list(states)
        with self._lock:
            for state in states:
                self._latest[state.entity_id] = state
            self._write(_CLEAR_SCREEN + self._summary(states))

    def set_verbose(self, verbose: bool) -> None:
        self._verbose = bool(verbose)

    def clear_screen(self) -> None:
        self._write(_CLEAR_SCREEN)

    def latest_states(self) -> Dict[int, FusedEntityState]:
        """Return the most recent state seen for each entity id."""
        with self._lock:
            return dict(self._latest)

    @staticmethod
    def _header() -> str:
        return f"\n{_RULE}\n{_TITLE}\n{_RULE}\n\n"

    @staticmethod
    def _state_line(state: FusedEntityState) -> str:
        return (
            f"[Entity {state.entity_id:>3}] "
            f"{entity_type_to_string(state.entity_type):>10} | "
            f"Pos: {format_position(state.position)} | "
            f"Vel: {format_velocity(state.velocity)} | "
            f"Conf: {format_confidence(state.confidence)} | "
            f"Meas: {state.measurement_count:>4}"
        )

    def _summary(self, states: list) -> str:
        lines = [
            self._header() + f"Active Entities: {len(states)}",
            _THIN_RULE,
            f"{'ID':<6}{'Type':<12}{'Position (x,y,z)':<30}"
            f"{'Velocity (vx,vy,vz)':<30}{'Conf%':<10}{'Meas':<8}",
            _THIN_RULE,
        ]
        for state in states:
            lines.append(
                f"{state.entity_id!s:<6}"
                f"{entity_type_to_string(state.entity_type):<12}"
                f"{format_position(state.position):<30}"
                f"{format_velocity(state.velocity):<30}"
                f"{format_confidence(state.confidence):<10}"
                f"{state.measurement_count!s:<8}"
            )
        lines.append(_RULE)
        return "\n".join(lines) + "\n"