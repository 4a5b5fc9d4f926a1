"""
Network reader and input relay, each run in its own thread.

Both entry points return an error value instead of raising it: ``None`` when
they stopped because they were asked to, or the :class:`~.ClientError`
that ended them.
"""
# std imports
import socket
import logging
import threading
from typing import Optional

# local
from .events import EchoInput, SubmitInput
from .errors import ClientError, StreamIOError, ChannelDisconnected
from .accessories import name_unicode

__all__ = ("read_network", "relay_input", "KEYBOARD_ESCAPE", "LINE_TERMINATOR")

log = logging.getLogger(__name__)

#: closes the connection from the local side, as ``telnet(1)``.
KEYBOARD_ESCAPE = "\x1d"

#: appended to each line sent to the server.
LINE_TERMINATOR = "\r"

_ENTER_KEYS = ("\r", "\n")


def read_network(
    sock: socket.socket, channel, stopping: threading.Event, bufsize: int = 4096
) -> Optional[ClientError]:
    """
    Push every byte received on ``sock`` onto ``channel``, in order.

    The channel is closed when this returns, whatever the reason.  End of
    stream while ``stopping`` is not set is an unexpected disconnect.
    """
    try:
        while True:
            try:
                data = sock.recv(bufsize)
            except OSError as err:
                if stopping.is_set():
                    return None
                return StreamIOError("read failed: {0}".format(err), source="reader")
            if not data:
                if stopping.is_set():
                    return None
                return StreamIOError("connection closed by foreign host", source="reader")
            for byte in data:
                channel.send(byte)
    except ChannelDisconnected as err:
        if stopping.is_set():
            return None
        return err
    finally:
        channel.close()


def _is_enter(key) -> bool:
    return getattr(key, "name", None) == "KEY_ENTER" or key in _ENTER_KEYS


def relay_input(
    term, sock: socket.socket, display, stopping: threading.Event, timeout: float = 0.1
) -> Optional[ClientError]:
    """
    Relay keystrokes read from ``term`` to ``sock`` a line at a time.

    Printable characters are echoed through ``display``; Enter sends the line
    followed by :data:`LINE_TERMINATOR`; :data:`KEYBOARD_ESCAPE` sets
    ``stopping`` and shuts the connection down.  Other keys are ignored.

    :param term: a :class:`blessed.Terminal`, or anything with a compatible
        ``inkey(timeout)`` method.
    :param display: display-update channel.
    :param float timeout: longest wait for a key before ``stopping`` is
        checked again.
    """
    line = []
    while not stopping.is_set():
        try:
            key = term.inkey(timeout=timeout)
        except OSError as err:
            return StreamIOError("keyboard read failed: {0}".format(err), source="relay")
        if not key:
            continue
        if _is_enter(key):
            text = "".join(line)
            del line[:]
            try:
                sock.sendall((text + LINE_TERMINATOR).encode("utf-8"))
            except OSError as err:
                if stopping.is_set():
                    return None
                return StreamIOError("write failed: {0}".format(err), source="relay")
            log.debug("sent line of %d characters", len(text))
            update = SubmitInput(text)
        elif key == KEYBOARD_ESCAPE:
            log.info("escape character %s pressed, closing connection", name_unicode(key))
            stopping.set()
            try:
                sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                # already disconnected by the remote end
                pass
            return None
        elif getattr(key, "is_sequence", False) or not key.isprintable():
            continue
        else:
            line.append(str(key))
            update = EchoInput(str(key))
        try:
            display.send(update)
        except ChannelDisconnected as err:
            if stopping.is_set():
                return None
            return err
    return None
