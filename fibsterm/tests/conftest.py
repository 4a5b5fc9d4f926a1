"""Pytest configuration and fixtures."""

# std imports
import io
import queue
import socket
import curses
import warnings
import contextlib

# 3rd party
import pytest
import blessed
from blessed.keyboard import Keystroke


def make_terminal(**kwargs):
    """Create a blessed Terminal, falling back to ``ansi`` on setupterm failure."""
    kwargs.setdefault("kind", "xterm-256color")
    kwargs.setdefault("force_styling", True)
    factory = kwargs.pop("factory", blessed.Terminal)
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        term = factory(**kwargs)
    if any("setupterm" in str(w.message) for w in caught):
        kwargs["kind"] = "ansi"
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            term = factory(**kwargs)
    return term


def key(ucs):
    """Return a keystroke as delivered by :meth:`blessed.Terminal.inkey`."""
    if ucs in ("\r", "\n"):
        return Keystroke(ucs=ucs, code=curses.KEY_ENTER, name="KEY_ENTER")
    return Keystroke(ucs=ucs)


class ScriptedTerminal(blessed.Terminal):
    """Terminal writing into a string buffer, reading keys from a queue."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.keys = queue.Queue()
        self.raw_entered = 0
        self.raw_exited = 0

    def type(self, text):
        """Queue each character of ``text`` as a keystroke."""
        for ucs in text:
            self.keys.put(key(ucs))

    def inkey(self, timeout=None, esc_delay=0.35):
        try:
            return self.keys.get(timeout=timeout)
        except queue.Empty:
            return Keystroke("")

    @contextlib.contextmanager
    def raw(self):
        self.raw_entered += 1
        try:
            yield
        finally:
            self.raw_exited += 1

    @property
    def output(self):
        return self.stream.getvalue()


@pytest.fixture
def term():
    """Terminal of 24 rows and 80 columns writing into :class:`io.StringIO`."""
    return make_terminal(stream=io.StringIO())


@pytest.fixture
def scripted_term():
    """:class:`ScriptedTerminal` writing into :class:`io.StringIO`."""
    return make_terminal(stream=io.StringIO(), factory=ScriptedTerminal)


@pytest.fixture
def listener():
    """Listening IPv4 TCP socket on an unused localhost port."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    sock.bind(("127.0.0.1", 0))
    sock.listen(1)
    sock.settimeout(10)
    yield sock
    sock.close()


@pytest.fixture
def socket_pair():
    """Connected pair of stream sockets, ``(near, far)``."""
    near, far = socket.socketpair()
    yield near, far
    near.close()
    far.close()


@pytest.fixture
def make_key():
    """Factory of keystrokes, see :func:`key`."""
    return key
