"""Closable in-memory channel connecting producers and a consumer."""

import asyncio
import threading
from collections import deque
from typing import Any, Deque, Iterator, Optional, Tuple

from .exceptions import ChannelClosedError


class _ChannelState:
    """Buffer and bookkeeping shared by both ends of a channel."""

    def __init__(self, capacity: Optional[int]):
        if capacity is not None and capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self.items: Deque[Any] = deque()
        self.condition = threading.Condition(threading.Lock())
        self.senders = 0
        self.receiver_closed = False

    def wait_until(self, predicate, timeout: Optional[float]) -> bool:
        """Wait on the condition; must be called with the lock held."""
        return self.condition.wait_for(predicate, timeout=timeout)


class Sender:
    """
    Sending end of a channel.

    A sender may be cloned; the receiver sees the channel as closed once
    every sender has been closed.
    """

    def __init__(self, state: _ChannelState):
        self._state = state
        self._closed = False
        with state.condition:
            state.senders += 1

    def send(self, item: Any, timeout: Optional[float] = None) -> None:
        """
        Send an item to the receiver.

        Blocks while a bounded channel is full.

        Args:
            item: Item to send
            timeout: Maximum seconds to wait for space in a bounded channel

        Raises:
            ChannelClosedError: If the receiver or this sender is closed
            TimeoutError: If no space became available in time
        """
        state = self._state
        with state.condition:
            if self._closed:
                raise ChannelClosedError("Sender is closed")

            def can_send() -> bool:
                return state.receiver_closed or state.capacity is None or len(state.items) < state.capacity

            if not state.wait_until(can_send, timeout):
                raise TimeoutError("Channel is full")
            if state.receiver_closed:
                raise ChannelClosedError("Receiver is closed")

            state.items.append(item)
            state.condition.notify_all()

    def clone(self) -> "Sender":
        """Create another sender for the same channel."""
        if self._closed:
            raise ChannelClosedError("Sender is closed")
        return Sender(self._state)

    @property
    def is_closed(self) -> bool:
        """True if this sender, or the receiving end, is closed."""
        return self._closed or self._state.receiver_closed

    def close(self) -> None:
        """Drop this sender."""
        state = self._state
        with state.condition:
            if self._closed:
                return
            self._closed = True
            state.senders -= 1
            state.condition.notify_all()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class Receiver:
    """Receiving end of a channel."""

    def __init__(self, state: _ChannelState):
        self._state = state

    def recv(self, timeout: Optional[float] = None) -> Any:
        """
        Receive the next item, blocking until one is available.

        Args:
            timeout: Maximum seconds to wait

        Returns:
            The next item in FIFO order

        Raises:
            ChannelClosedError: If the receiver is closed, or every sender is
                closed and no items remain
            TimeoutError: If nothing arrived in time
        """
        state = self._state
        with state.condition:
            if state.receiver_closed:
                raise ChannelClosedError("Receiver is closed")

            def ready() -> bool:
                return bool(state.items) or state.senders == 0 or state.receiver_closed

            if not state.wait_until(ready, timeout):
                raise TimeoutError("No item received")
            if state.receiver_closed:
                raise ChannelClosedError("Receiver is closed")
            if not state.items:
                raise ChannelClosedError("All senders are closed")

            item = state.items.popleft()
            state.condition.notify_all()
            return item

    def try_recv(self) -> Optional[Any]:
        """
        Receive the next item without blocking.

        Returns:
            The next item, or None if the channel is currently empty

        Raises:
            ChannelClosedError: If the channel is closed and drained
        """
        try:
            return self.recv(timeout=0)
        except TimeoutError:
            return None

    async def recv_async(self, poll_interval: float = 0.05) -> Any:
        """
        Receive the next item from a coroutine.

        Blocking waits happen in a worker thread in short slices so the
        calling task stays cancellable.

        Raises:
            ChannelClosedError: Same as recv()
        """
        while True:
            try:
                return await asyncio.to_thread(self.recv, poll_interval)
            except TimeoutError:
                continue

    def __len__(self) -> int:
        with self._state.condition:
            return len(self._state.items)

    @property
    def is_closed(self) -> bool:
        return self._state.receiver_closed

    def close(self) -> None:
        """Close the receiving end; pending items are dropped and sends fail."""
        state = self._state
        with state.condition:
            state.receiver_closed = True
            state.items.clear()
            state.condition.notify_all()

    def __iter__(self) -> Iterator[Any]:
        """Yield items until the channel is closed."""
        while True:
            try:
                yield self.recv()
            except ChannelClosedError:
                return

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def channel(capacity: Optional[int] = None) -> Tuple[Sender, Receiver]:
    """
    Create a channel.

    Args:
        capacity: Maximum number of buffered items, None for unbounded

    Returns:
        A (sender, receiver) pair
    """
    state = _ChannelState(capacity)
    return Sender(state), Receiver(state)
