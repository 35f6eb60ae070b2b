# Transport: what the solvers need from the maze simulation
# Mazerunner, blind & omniscient maze solving

# Four remote operations: fetch the full map, issue one move, reset the
# maze, and stream sensor readings. The stream is a broadcast channel so
# that "drain stale readings" and "read the current reading" are well
# defined against a buffered backlog.

import asyncio
import logging
from typing import NamedTuple, Protocol

from cells import MoveDirection, SensorReadings
from errors import ChannelClosed

logger = logging.getLogger(__name__)

# Readings buffered per subscriber before the oldest are dropped
SENSOR_BUFFER = 100


class GridSnapshot(NamedTuple):
    """Full map as sent over the wire: flattened cell codes and [height, width]."""

    cells: list[str]
    shape: list[int]


class SensorSubscription:
    """One subscriber's view of the sensor stream, in emission order."""

    def __init__(self, channel: "SensorChannel", capacity: int):
        self._channel = channel
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=capacity)
        self.closed = False
        self.dropped = 0

    def _push(self, readings):
        if self._queue.full():
            # Lagging subscriber, make room by dropping the oldest reading
            self._queue.get_nowait()
            self.dropped += 1
        self._queue.put_nowait(readings)

    def is_empty(self) -> bool:
        return self._queue.empty()

    def drain(self) -> int:
        """Discard everything buffered so far. Returns how many readings were dropped."""
        count = 0
        while not self._queue.empty():
            item = self._queue.get_nowait()
            if item is None:
                # Keep the close marker so the next recv still reports it
                self._queue.put_nowait(None)
                break
            count += 1
        return count

    async def recv(self) -> SensorReadings:
        """Wait for the next reading."""
        if self.closed and self._queue.empty():
            raise ChannelClosed("sensor stream ended")
        item = await self._queue.get()
        if item is None:
            self.closed = True
            self._queue.put_nowait(None)
            raise ChannelClosed("sensor stream ended")
        return item

    def close(self):
        self._channel.unsubscribe(self)


class SensorChannel:
    """Broadcast channel fanning sensor readings out to every subscription."""

    def __init__(self, capacity: int = SENSOR_BUFFER):
        self.capacity = capacity
        self.subscribers: list[SensorSubscription] = []
        self.closed = False

    def subscribe(self) -> SensorSubscription:
        sub = SensorSubscription(self, self.capacity)
        if self.closed:
            sub.closed = True
        else:
            self.subscribers.append(sub)
        return sub

    def unsubscribe(self, sub: SensorSubscription):
        if sub in self.subscribers:
            self.subscribers.remove(sub)

    def publish(self, readings: SensorReadings) -> int:
        """Deliver readings to every subscriber. Returns the subscriber count."""
        if self.closed:
            raise ChannelClosed("publish on a closed sensor channel")
        for sub in self.subscribers:
            sub._push(readings)
        return len(self.subscribers)

    def close(self):
        if self.closed:
            return
        self.closed = True
        for sub in self.subscribers:
            sub.closed = True
            if sub._queue.full():
                sub._queue.get_nowait()
            sub._queue.put_nowait(None)
        logger.debug("sensor channel closed")


class Transport(Protocol):
    async def get_full_grid(self) -> GridSnapshot: ...

    async def move(self, direction: MoveDirection) -> bool: ...

    async def reset(self, is_random: bool = False, map_name: str = "") -> None: ...

    def subscribe_sensors(self) -> SensorSubscription: ...
