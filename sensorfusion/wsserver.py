"""WebSocket output that broadcasts fused states as JSON to connected clients."""

from __future__ import annotations

import asyncio
import threading
from collections import deque
from typing import Deque, Iterable, List, Optional, Set

import websockets
from websockets.exceptions import ConnectionClosed, ConnectionClosedError

from .logger import get_logger
from .outputs import OutputInterface
from .tracker import FusedEntityState
from .types import entity_type_to_string

_MAX_PENDING = 100
_MAX_SESSION_QUEUE = 50
_BROADCAST_INTERVAL = 0.1
_READY_TIMEOUT = 5.0


def serialize_state(state: FusedEntityState) -> str:
    """Encode one state as a compact JSON object with four-decimal numbers."""
    p, v = state.position, state.velocity
    return (
        "{"
        f'"entityId":{state.entity_id},'
        f'"type":"{entity_type_to_string(state.entity_type)}",'
        f'"position":{{"x":{p.x:.4f},"y":{p.y:.4f},"z":{p.z:.4f}}},'
        f'"velocity":{{"vx":{v.vx:.4f},"vy":{v.vy:.4f},"vz":{v.vz:.4f}}},'
        f'"confidence":{state.confidence:.4f},'
        f'"measurements":{state.measurement_count}'
        "}"
    )


def serialize_states(states: Iterable[FusedEntityState]) -> str:
    """Encode states as a JSON array."""
    return "[" + ",".join(serialize_state(s) for s in states) + "]"


class _Session:
    """One connected client with its own bounded outgoing queue."""

    def __init__(self, websocket) -> None:
        self.websocket = websocket
        self._queue: Deque[str] = deque(maxlen=_MAX_SESSION_QUEUE)
        self._wakeup = asyncio.Event()

    def send(self, message: str) -> None:
        self._queue.append(message)
        self._wakeup.set()

    async def write_loop(self) -> None:
        while True:
            await self._wakeup.wait()
            self._wakeup.clear()
            while self._queue:
                message = self._queue.popleft()
                try:
                    await self.websocket.send(message)
                except ConnectionClosed:
                    return

    async def close(self) -> None:
        try:
            await self.websocket.close(code=1000)
        except Exception:  # noqa: BLE001 - closing a broken socket
            pass


class WebSocketServer(OutputInterface):
    """Queues published states and broadcasts them every 100 ms."""

    def __init__(self, port: int, host: str = "0.0.0.0") -> None:
        self._port = port
        self._host = host
        self._running = False
        self._thread: Optional[threading.Thread] = None
        self._ready = threading.Event()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stop_async: Optional[asyncio.Event] = None
        self._sessions: Set[_Session] = set()
        self._queue_lock = threading.Lock()
        self._messages: Deque[str] = deque(maxlen=_MAX_PENDING)

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._ready.clear()
        self._thread = threading.Thread(target=self._run, name="websocket", daemon=True)
        self._thread.start()
        get_logger().info(f"WebSocket server started on port {self._port}")

    def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        self._ready.wait(_READY_TIMEOUT)
        loop, stop_async = self._loop, self._stop_async
        if loop is not None and stop_async is not None:
            try:
                loop.call_soon_threadsafe(stop_async.set)
            except RuntimeError:
                pass
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        self._loop = self._stop_async = None
        get_logger().info("WebSocket server stopped")

    def publish_state(self, state: FusedEntityState) -> None:
        self._enqueue(serialize_state(state))

    def publish_states(self, states: Iterable[FusedEntityState]) -> None:
        self._enqueue(serialize_states(states))

    def pending_messages(self) -> List[str]:
        """Messages waiting for the next broadcast, oldest first."""
        with self._queue_lock:
            return list(self._messages)

    def _enqueue(self, message: str) -> None:
        with self._queue_lock:
            self._messages.append(message)

    def _drain(self) -> List[str]:
        with self._queue_lock:
            messages = list(self._messages)
            self._messages.clear()
        return messages

    def _run(self) -> None:
        try:
            asyncio.run(self._serve())
        except Exception as exc:  # noqa: BLE001 - reported through the logger
            get_logger().error(f"WebSocket server error: {exc}")
        finally:
            self._ready.set()

    async def _serve(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._stop_async = asyncio.Event()
        async with websockets.serve(self._handle, self._host, self._port):
            self._ready.set()
            await self._broadcast_loop()
            for session in list(self._sessions):
                await session.close()
            self._sessions.clear()

    async def _broadcast_loop(self) -> None:
        stop_async = self._stop_async
        while True:
            try:
                await asyncio.wait_for(stop_async.wait(), _BROADCAST_INTERVAL)
            except asyncio.TimeoutError:
                pass
            else:
                return
            for message in self._drain():
                for session in list(self._sessions):
                    session.send(message)

    async def _handle(self, websocket, *_) -> None:
        session = _Session(websocket)
        self._sessions.add(session)
        get_logger().info(f"WebSocket client connected. Total: {len(self._sessions)}")
        writer = asyncio.ensure_future(session.write_loop())
        try:
            async for _message in websocket:
                pass
        except ConnectionClosedError as exc:
            get_logger().warning(f"WebSocket read error: {exc}")
        finally:
            writer.cancel()
            self._remove_session(session)

    def _remove_session(self, session: _Session) -> None:
        if session in self._sessions:
            self._sessions.discard(session)
            get_logger().info(
                f"WebSocket client disconnected. Remaining: {len(self._sessions)}"
            )