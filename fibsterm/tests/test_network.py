"""Tests for fibsterm.network, the reader and input relay threads."""

# std imports
import curses
import socket
import threading
from unittest import mock

# 3rd party
import pytest
from blessed.keyboard import Keystroke

# local
from fibsterm.events import EchoInput, SubmitInput
from fibsterm.errors import StreamIOError, ChannelDisconnected
from fibsterm.channel import Channel
from fibsterm.network import KEYBOARD_ESCAPE, read_network, relay_input


class _Keys(object):
    """Replays keystrokes, then reports no key pressed."""

    def __init__(self, keys, on_exhausted=None):
        self._keys = list(keys)
        self._on_exhausted = on_exhausted

    def inkey(self, timeout=None):
        if self._keys:
            return self._keys.pop(0)
        if self._on_exhausted is not None:
            self._on_exhausted()
        return ""


def _run_reader(sock, chan, stopping):
    result = {}

    def target():
        result["error"] = read_network(sock, chan, stopping)

    thread = threading.Thread(target=target, daemon=True)
    thread.start()
    return thread, result


@pytest.mark.parametrize("capacity", [1, 7, 4096])
def test_reader_delivers_bytes_in_order(socket_pair, capacity):
    near, far = socket_pair
    chan = Channel(capacity=capacity, name="byte channel")
    stopping = threading.Event()
    thread, result = _run_reader(near, chan, stopping)
    payload = bytes(range(256)) * 8
    far.sendall(payload)
    received = bytes(chan.recv(timeout=5) for _ in payload)
    assert received == payload
    stopping.set()
    far.shutdown(socket.SHUT_WR)
    thread.join(5)
    assert result["error"] is None
    assert chan.closed


def test_reader_unexpected_disconnect(socket_pair):
    near, far = socket_pair
    chan = Channel(name="byte channel")
    stopping = threading.Event()
    thread, result = _run_reader(near, chan, stopping)
    far.sendall(b"\r\nWelc")
    far.close()
    thread.join(5)
    error = result["error"]
    assert isinstance(error, StreamIOError)
    assert error.source == "reader"
    assert bytes(chan) == b"\r\nWelc"


def test_reader_read_failure():
    sock = mock.Mock()
    sock.recv.side_effect = ConnectionResetError(104, "Connection reset by peer")
    chan = Channel()
    error = read_network(sock, chan, threading.Event())
    assert isinstance(error, StreamIOError)
    assert "reset" in error.message
    assert chan.closed


def test_reader_stops_when_receiver_hangs_up():
    sock = mock.Mock()
    sock.recv.return_value = b"abc"
    chan = Channel(capacity=1)
    chan.hangup()
    error = read_network(sock, chan, threading.Event())
    assert isinstance(error, ChannelDisconnected)

    stopping = threading.Event()
    stopping.set()
    assert read_network(sock, chan, stopping) is None


def test_relay_sends_line_with_carriage_return(socket_pair, make_key):
    near, far = socket_pair
    display = Channel(name="display channel")
    stopping = threading.Event()
    keys = _Keys([make_key(ucs) for ucs in "bob\n"], on_exhausted=stopping.set)
    assert relay_input(keys, near, display, stopping, timeout=0) is None
    far.settimeout(5)
    assert far.recv(16) == b"bob\r"
    display.close()
    assert list(display) == [
        EchoInput("b"),
        EchoInput("o"),
        EchoInput("b"),
        SubmitInput("bob"),
    ]


def test_relay_ignores_sequences_and_control_characters(make_key):
    sock = mock.Mock()
    display = Channel()
    stopping = threading.Event()
    arrow = Keystroke(ucs="\x1b[A", code=curses.KEY_UP, name="KEY_UP")
    keys = _Keys(
        [make_key("a"), arrow, make_key("\x03"), make_key("\x7f"), make_key("\r")],
        on_exhausted=stopping.set,
    )
    assert relay_input(keys, sock, display, stopping, timeout=0) is None
    sock.sendall.assert_called_once_with(b"a\r")


def test_relay_utf8_input(make_key):
    sock = mock.Mock()
    stopping = threading.Event()
    keys = _Keys([make_key("é"), make_key("\r")], on_exhausted=stopping.set)
    relay_input(keys, sock, Channel(), stopping, timeout=0)
    sock.sendall.assert_called_once_with("é\r".encode("utf-8"))


def test_relay_escape_closes_connection(make_key):
    sock = mock.Mock()
    stopping = threading.Event()
    keys = _Keys([make_key("x"), make_key(KEYBOARD_ESCAPE), make_key("y")])
    assert relay_input(keys, sock, Channel(), stopping, timeout=0) is None
    assert stopping.is_set()
    sock.shutdown.assert_called_once_with(socket.SHUT_RDWR)
    sock.sendall.assert_not_called()


def test_relay_write_failure(make_key):
    sock = mock.Mock()
    sock.sendall.side_effect = BrokenPipeError(32, "Broken pipe")
    keys = _Keys([make_key("\r")])
    error = relay_input(keys, sock, Channel(), threading.Event(), timeout=0)
    assert isinstance(error, StreamIOError)
    assert error.source == "relay"


def test_relay_keyboard_failure():
    term = mock.Mock()
    term.inkey.side_effect = OSError(5, "Input/output error")
    error = relay_input(term, mock.Mock(), Channel(), threading.Event())
    assert isinstance(error, StreamIOError)


def test_relay_display_closed(make_key):
    display = Channel()
    display.close()
    keys = _Keys([make_key("a")])
    error = relay_input(keys, mock.Mock(), display, threading.Event(), timeout=0)
    assert isinstance(error, ChannelDisconnected)
