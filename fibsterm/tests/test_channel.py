"""Tests for fibsterm.channel."""

# std imports
import time
import threading

# 3rd party
import pytest

# local
from fibsterm.errors import ChannelDisconnected
from fibsterm.channel import Channel


def test_fifo_order():
    chan = Channel(name="test")
    for item in range(5):
        chan.send(item)
    assert len(chan) == 5
    assert [chan.recv() for _ in range(5)] == list(range(5))


def test_close_drains_then_disconnects():
    chan = Channel(capacity=4, name="byte channel")
    chan.send(1)
    chan.send(2)
    chan.close()
    assert chan.closed
    assert chan.recv() == 1
    assert chan.recv() == 2
    with pytest.raises(ChannelDisconnected) as exc_info:
        chan.recv()
    assert exc_info.value.source == "byte channel"


def test_send_after_close_fails():
    chan = Channel()
    chan.close()
    with pytest.raises(ChannelDisconnected):
        chan.send("x")


def test_recv_timeout():
    chan = Channel()
    with pytest.raises(TimeoutError):
        chan.recv(timeout=0.01)


def test_iteration_stops_at_close():
    chan = Channel()
    for item in "abc":
        chan.send(item)
    chan.close()
    assert list(chan) == ["a", "b", "c"]


def test_negative_capacity():
    with pytest.raises(ValueError):
        Channel(capacity=-1)


@pytest.mark.parametrize("capacity", [1, 2, 16])
def test_bounded_channel_delivers_everything_in_order(capacity):
    chan = Channel(capacity=capacity)
    data = bytes(range(256)) * 4

    def produce():
        for byte in data:
            chan.send(byte)
        chan.close()

    producer = threading.Thread(target=produce, daemon=True)
    producer.start()
    received = bytes(chan)
    producer.join(5)
    assert received == data


def test_full_channel_blocks_sender():
    chan = Channel(capacity=1)
    chan.send(1)
    sent = threading.Event()

    def produce():
        chan.send(2)
        sent.set()

    producer = threading.Thread(target=produce, daemon=True)
    producer.start()
    assert not sent.wait(0.1)
    assert chan.recv() == 1
    assert sent.wait(5)
    assert chan.recv() == 2
    producer.join(5)


def test_hangup_unblocks_sender():
    chan = Channel(capacity=1, name="byte channel")
    chan.send(1)
    errors = []

    def produce():
        try:
            chan.send(2)
        except ChannelDisconnected as err:
            errors.append(err)

    producer = threading.Thread(target=produce, daemon=True)
    producer.start()
    time.sleep(0.05)
    chan.hangup()
    producer.join(5)
    assert not producer.is_alive()
    assert len(errors) == 1
    assert len(chan) == 0


def test_disconnect_after_last_byte_no_duplicates():
    chan = Channel(capacity=3)
    data = b"0123456789"

    def produce():
        try:
            for byte in data:
                chan.send(byte)
        finally:
            chan.close()

    producer = threading.Thread(target=produce, daemon=True)
    producer.start()
    received = bytearray()
    with pytest.raises(ChannelDisconnected):
        while True:
            received.append(chan.recv(timeout=5))
    producer.join(5)
    assert bytes(received) == data
