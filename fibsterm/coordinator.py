"""
Coordinator: wires the workers together and owns start-up and shutdown.

Start-up order::

    raw terminal mode -> resolve -> connect -> channels ->
    reader, renderer, relay threads -> session loop

and shutdown, whichever way the session loop ended::

    socket shut down both ways -> display channel closed -> renderer joined ->
    raw terminal mode released -> reader and relay joined -> socket closed
"""
# std imports
import socket
import logging
import threading
import traceback
from typing import Any, Dict, List, Callable, Optional, NamedTuple

# 3rd party
import blessed

# local
from .config import Settings
from .channel import Channel
from .display import Renderer
from .errors import ClientError, StreamIOError, ChannelDisconnected
from .network import read_network, relay_input
from .session import Phase, SessionMachine
from .resolver import resolve_ipv4

__all__ = ("Coordinator", "Worker", "WorkerResult", "main_loop", "JOIN_TIMEOUT")

log = logging.getLogger(__name__)

#: seconds to wait for each worker thread to finish during shutdown.
JOIN_TIMEOUT = 3.0


class WorkerResult(NamedTuple):
    """
    How a worker thread ended.

    ``error`` is the value returned by the worker's entry function,
    ``crash`` the formatted traceback of an exception it raised instead, and
    ``finished`` is false when the thread was still running after the join
    timeout.
    """

    name: str
    error: Optional[ClientError] = None
    crash: Optional[str] = None
    finished: bool = True

    def diagnostic(self) -> Optional[str]:
        """Return a one-line report of a crash or hang, else ``None``."""
        if self.crash:
            last = self.crash.strip().splitlines()[-1]
            return "worker {0} crashed: {1}".format(self.name, last)
        if not self.finished:
            return "worker {0} did not stop within {1}s".format(self.name, JOIN_TIMEOUT)
        return None


class Worker(threading.Thread):
    """
    Thread running ``entry(*args)`` and keeping its :class:`WorkerResult`.

    An exception escaping ``entry`` is logged and recorded as a crash; it
    never propagates out of the thread.
    """

    def __init__(self, name: str, entry: Callable[..., Optional[ClientError]], *args: Any):
        super().__init__(name="fibsterm-{0}".format(name), daemon=True)
        self.worker_name = name
        self.entry = entry
        self.entry_args = args
        self.result: Optional[WorkerResult] = None

    def run(self) -> None:
        try:
            error = self.entry(*self.entry_args)
        except Exception:  # pylint: disable=broad-except
            log.exception("worker %s crashed", self.worker_name)
            self.result = WorkerResult(self.worker_name, crash=traceback.format_exc())
        else:
            if error is not None:
                log.debug("worker %s ended: %s", self.worker_name, error.describe())
            self.result = WorkerResult(self.worker_name, error=error)

    def join_result(self, timeout: Optional[float] = JOIN_TIMEOUT) -> WorkerResult:
        """Join the thread and return its result."""
        self.join(timeout)
        if self.is_alive() or self.result is None:
            log.warning("worker %s still running after %ss", self.worker_name, timeout)
            return WorkerResult(self.worker_name, finished=False)
        return self.result


def main_loop(channel: Channel, machine: SessionMachine, display: Channel) -> Optional[ClientError]:
    """
    Run ``machine`` over bytes received from ``channel`` until it is done.

    Blocks on the channel between bytes.  Display-update events are
    forwarded to ``display`` in the order the machine produced them.

    :returns: the :class:`~.ChannelDisconnected` that ended the loop early,
        ``None`` once the machine reached :attr:`Phase.DONE`.
    """
    while machine.phase is not Phase.DONE:
        if machine.phase is Phase.AWAITING_PASSWORD:
            machine.hand_off()
            break
        try:
            byte = channel.recv()
        except ChannelDisconnected as err:
            log.debug("session loop ended in phase %s: %s", machine.phase.name, err)
            return err
        for update in machine.feed(byte):
            try:
                display.send(update)
            except ChannelDisconnected as err:
                return err
    return None


class Coordinator(object):
    """
    One client session, from raw mode to exit.

    :param Settings settings: where to connect, terminal layout.
    :param term: :class:`blessed.Terminal`, a new one for stdin/stdout
        by default.
    :param resolve: ``resolve(hostname, port) -> (address, port)``.
    """

    def __init__(
        self,
        settings: Settings,
        term: Optional[blessed.Terminal] = None,
        resolve: Callable = resolve_ipv4,
    ):
        self.settings = settings
        self.term = term if term is not None else blessed.Terminal()
        self.resolve = resolve
        self.stopping = threading.Event()
        self.machine = SessionMachine()
        self.bytes = Channel(settings.byte_capacity, name="byte channel")
        self.display = Channel(name="display channel")
        self.sock: Optional[socket.socket] = None
        self.workers: Dict[str, Worker] = {}
        self.results: Dict[str, WorkerResult] = {}
        self.diagnostics: List[str] = []
        self.user_quit = False

    def run(self) -> None:
        """
        Run the session to completion.

        :raises ClientError: the first hard error: resolution, connection,
            or I/O.
        """
        loop_error = None
        try:
            with self.term.raw(), self.term.fullscreen():
                try:
                    self._connect()
                    self._start_workers()
                    loop_error = main_loop(self.bytes, self.machine, self.display)
                    self.user_quit = self.stopping.is_set()
                finally:
                    self._shutdown()
        finally:
            self._join()
        error = self._first_error(loop_error)
        if error is not None:
            raise error
        log.debug("session complete in phase %s", self.machine.phase.name)

    def _connect(self) -> None:
        address = self.resolve(self.settings.hostname, self.settings.port)
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.connect(address)
        except OSError as err:
            sock.close()
            raise StreamIOError(
                "connect to {0}:{1} failed: {2}".format(address[0], address[1], err),
                source="coordinator",
            ) from err
        log.debug("connected to %s:%d", address[0], address[1])
        self.sock = sock

    def _start_workers(self) -> None:
        renderer = Renderer(self.term, input_panel=self.settings.input_panel)
        self.workers = {
            "reader": Worker("reader", read_network, self.sock, self.bytes, self.stopping),
            "renderer": Worker("renderer", renderer.run, self.display),
            "relay": Worker(
                "relay", relay_input, self.term, self.sock, self.display, self.stopping
            ),
        }
        for worker in self.workers.values():
            worker.start()

    def _shutdown(self) -> None:
        self.stopping.set()
        if self.sock is not None:
            try:
                self.sock.shutdown(socket.SHUT_RDWR)
            except OSError as err:
                log.debug("socket shutdown: %s", err)
        self.bytes.hangup()
        self.display.close()
        if "renderer" in self.workers:
            self.results["renderer"] = self.workers["renderer"].join_result()

    def _join(self) -> None:
        for name in ("reader", "relay"):
            if name in self.workers:
                self.results[name] = self.workers[name].join_result()
        if self.sock is not None:
            self.sock.close()
        for name in ("reader", "renderer", "relay"):
            result = self.results.get(name)
            diagnostic = result.diagnostic() if result is not None else None
            if diagnostic:
                self.diagnostics.append(diagnostic)

    def _first_error(self, loop_error: Optional[ClientError]) -> Optional[ClientError]:
        names = ("reader", "renderer", "relay")
        if loop_error is None and self.machine.phase is Phase.DONE:
            # the server may hang up as soon as it has prompted for a password
            names = ("renderer",)
        worker_errors = [
            self.results[name].error
            for name in names
            if name in self.results and self.results[name].error is not None
        ]
        if loop_error is not None and not isinstance(loop_error, ChannelDisconnected):
            return loop_error
        if worker_errors:
            return worker_errors[0]
        if loop_error is not None and not self.user_quit:
            return loop_error
        return None
