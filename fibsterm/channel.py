"""
Thread-safe FIFO channels connecting the client's execution contexts.

A :class:`Channel` behaves like :class:`queue.Queue` with two additions:
the sending side may :meth:`~Channel.close` it, after which the receiver
drains what remains and then gets :class:`~.ChannelDisconnected`; and the
receiving side may :meth:`~Channel.hangup`, after which senders get
:class:`~.ChannelDisconnected` instead of blocking forever on a full channel.
"""
# std imports
import threading
import collections
from typing import Any, Iterator, Optional

# local
from .errors import ChannelDisconnected

__all__ = ("Channel", "DEFAULT_BYTE_CAPACITY")

#: capacity of the byte channel between the network reader and coordinator.
DEFAULT_BYTE_CAPACITY = 4096


class Channel(object):
    """
    FIFO channel.

    :param int capacity: maximum number of queued items, ``0`` for unbounded.
        A full bounded channel blocks :meth:`send` until the receiver catches
        up, which is the flow control of the byte channel.
    :param str name: used as the ``source`` of raised errors.
    """

    def __init__(self, capacity: int = 0, name: str = "channel"):
        if capacity < 0:
            raise ValueError("capacity must be >= 0, got {0}".format(capacity))
        self.capacity = capacity
        self.name = name
        self._items: "collections.deque[Any]" = collections.deque()
        self._mutex = threading.Lock()
        self._not_empty = threading.Condition(self._mutex)
        self._not_full = threading.Condition(self._mutex)
        self._closed = False
        self._hungup = False

    def __repr__(self):
        return "<Channel {0} items={1} capacity={2}{3}{4}>".format(
            self.name,
            len(self._items),
            self.capacity or "unbounded",
            " closed" if self._closed else "",
            " hungup" if self._hungup else "",
        )

    def __len__(self):
        with self._mutex:
            return len(self._items)

    @property
    def closed(self) -> bool:
        """Whether the sending side has closed the channel."""
        return self._closed

    def send(self, item: Any) -> None:
        """
        Append ``item``, blocking while a bounded channel is full.

        :raises ChannelDisconnected: when the receiver hung up, or the channel
            was already closed.
        """
        with self._not_full:
            if self.capacity:
                while len(self._items) >= self.capacity and not self._hungup:
                    self._not_full.wait()
            if self._hungup:
                raise ChannelDisconnected("receiver hung up", source=self.name)
            if self._closed:
                raise ChannelDisconnected("send on closed channel", source=self.name)
            self._items.append(item)
            self._not_empty.notify()

    def recv(self, timeout: Optional[float] = None) -> Any:
        """
        Remove and return the oldest item, blocking until one is available.

        :param timeout: seconds to wait, ``None`` waits indefinitely.
        :raises ChannelDisconnected: when the channel is closed and drained.
        :raises TimeoutError: when ``timeout`` elapses first.
        """
        with self._not_empty:
            if not self._not_empty.wait_for(
                lambda: self._items or self._closed, timeout=timeout
            ):
                raise TimeoutError("no item within {0}s".format(timeout))
            if not self._items:
                raise ChannelDisconnected("sender closed channel", source=self.name)
            item = self._items.popleft()
            self._not_full.notify()
            return item

    def close(self) -> None:
        """Sending side: no more items will be sent."""
        with self._mutex:
            self._closed = True
            self._not_empty.notify_all()

    def hangup(self) -> None:
        """Receiving side: discard queued items and fail further sends."""
        with self._mutex:
            self._hungup = True
            self._items.clear()
            self._not_full.notify_all()

    def __iter__(self) -> Iterator[Any]:
        """Yield items until the channel is closed and drained."""
        while True:
            try:
                yield self.recv()
            except ChannelDisconnected:
                return
