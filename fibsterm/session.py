"""
Session state machine: sequences prompt scanner matches into login phases.

The machine only sees bytes; it never touches the socket or the terminal.
Every call to :meth:`SessionMachine.feed` returns the display-update events
that byte produced, for the coordinator to forward to the renderer.
"""
# std imports
import enum
import logging
from typing import List, Optional

# local
from . import scanner
from .events import AppendLine, ShowBanner

__all__ = ("Phase", "SessionMachine", "PASSWORD_PROMPT_LINE")

log = logging.getLogger(__name__)

#: line appended to the content panel once the password prompt is seen.
PASSWORD_PROMPT_LINE = "password:"


class Phase(enum.Enum):
    """Protocol phases, in the only order they are entered."""

    COLLECTING_BANNER = 1
    AWAITING_LOGIN = 2
    AWAITING_PASSWORD = 3
    DONE = 4


class SessionMachine(object):
    """
    Login sequence of a talker server.

    :param banner_table: table finding the end of the banner.
    :param password_table: table finding the password prompt.
    :param str encoding: decoding of banner bytes, invalid sequences are
        replaced.
    """

    def __init__(
        self,
        banner_table: scanner.ScannerTable = scanner.BANNER_TABLE,
        password_table: scanner.ScannerTable = scanner.PASSWORD_TABLE,
        encoding: str = "utf-8",
    ):
        self.banner_table = banner_table
        self.password_table = password_table
        self.encoding = encoding
        self._phase = Phase.COLLECTING_BANNER
        self._state = 0
        self._banner: Optional[bytearray] = bytearray()

    @property
    def phase(self) -> Phase:
        """Current phase."""
        return self._phase

    @property
    def banner_pending(self) -> bytes:
        """Banner bytes collected so far, empty once the banner is shown."""
        return bytes(self._banner or b"")

    def _enter(self, phase: Phase) -> None:
        assert phase.value > self._phase.value, (self._phase, phase)
        log.debug("phase %s -> %s", self._phase.name, phase.name)
        self._phase = phase
        self._state = 0

    def feed(self, byte: int) -> List[tuple]:
        """Advance by one received byte; return display-update events."""
        if self._phase is Phase.COLLECTING_BANNER:
            return self._collect_banner(byte)
        if self._phase is Phase.AWAITING_LOGIN:
            return self._await_login(byte)
        # AWAITING_PASSWORD and DONE: beyond the login sequence
        return []

    def feed_bytes(self, data: bytes) -> List[tuple]:
        """Advance by each byte of ``data`` in order."""
        updates: List[tuple] = []
        for byte in data:
            updates.extend(self.feed(byte))
        return updates

    def _collect_banner(self, byte: int) -> List[tuple]:
        prev_state = self._state
        self._state, matched = scanner.advance(self.banner_table, self._state, byte)
        if prev_state == 0 and self._state == 0:
            # blank lines ahead of the banner
            return []
        self._banner.append(byte)
        if not matched:
            return []
        text = bytes(self._banner[: -len(self.banner_table.marker)])
        self._banner = None
        self._enter(Phase.AWAITING_LOGIN)
        return [ShowBanner(text.decode(self.encoding, "replace").strip("\r\n"))]

    def _await_login(self, byte: int) -> List[tuple]:
        self._state, matched = scanner.advance(self.password_table, self._state, byte)
        if not matched:
            return []
        self._enter(Phase.AWAITING_PASSWORD)
        return [AppendLine(PASSWORD_PROMPT_LINE)]

    def hand_off(self) -> None:
        """
        Finish the login sequence once the password prompt was seen.

        :raises RuntimeError: when the password prompt has not been seen yet.
        """
        if self._phase is not Phase.AWAITING_PASSWORD:
            raise RuntimeError("cannot hand off in phase {0}".format(self._phase.name))
        self._enter(Phase.DONE)
