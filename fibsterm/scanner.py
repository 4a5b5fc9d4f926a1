"""
Prompt scanner: a finite-state matcher for literal prompt markers.

The server gives no framing, so phase boundaries are found by walking a
transition table one byte at a time.  Each table encodes a single literal
marker, such as ``b'login: '``, as a chain of states::

    >>> table = marker_table(b'ok')
    >>> advance(table, 0, ord('o'))
    (1, False)
    >>> advance(table, 1, ord('k'))
    (2, True)

A byte that breaks a partial match moves to the default state of the current
state and is consumed.  Scanning does not fall back to the longest matching
suffix, so ``b'llogin: '`` does not match ``b'login: '`` from the content
state; servers are matched on exactly this behavior.
"""
# std imports
import types
from typing import Dict, List, Tuple, Mapping, Optional, Sequence

__all__ = (
    "ScannerTable",
    "marker_table",
    "advance",
    "scan",
    "BANNER_TABLE",
    "PASSWORD_TABLE",
    "LOGIN_MARKER",
    "PASSWORD_MARKER",
)

LOGIN_MARKER = b"login: "
PASSWORD_MARKER = b"password: "


class ScannerTable(object):
    """
    Immutable transition table.

    :param rows: one mapping per state, from input byte to next state.
    :param defaults: per-state fallback for unmapped bytes, ``None`` meaning
        state 0.
    :param int target: state signalling a completed match.
    :param bytes marker: the literal marker encoded, kept for display.
    """

    __slots__ = ("_rows", "_defaults", "_target", "_marker")

    def __init__(
        self,
        rows: Sequence[Mapping[int, int]],
        defaults: Sequence[Optional[int]],
        target: int,
        marker: bytes = b"",
    ):
        if len(rows) != len(defaults):
            raise ValueError("rows and defaults differ in length")
        if not 0 < target < len(rows):
            raise ValueError("target state {0} out of range".format(target))
        for state, row in enumerate(rows):
            for byte, nxt in row.items():
                if not 0 <= byte <= 255 or not 0 <= nxt < len(rows):
                    raise ValueError(
                        "bad transition {0}: {1!r} -> {2}".format(state, byte, nxt)
                    )
        object.__setattr__(
            self, "_rows", tuple(types.MappingProxyType(dict(row)) for row in rows)
        )
        object.__setattr__(self, "_defaults", tuple(defaults))
        object.__setattr__(self, "_target", target)
        object.__setattr__(self, "_marker", bytes(marker))

    def __setattr__(self, name, value):
        raise AttributeError("ScannerTable is immutable")

    @property
    def target(self) -> int:
        """State reached on a completed match."""
        return self._target

    @property
    def marker(self) -> bytes:
        """Literal byte sequence this table recognizes."""
        return self._marker

    def __len__(self):
        return len(self._rows)

    def row(self, state: int) -> Mapping[int, int]:
        """Return read-only transitions of ``state``."""
        return self._rows[state]

    def default(self, state: int) -> int:
        """Return fallback state of ``state`` for unmapped bytes."""
        fallback = self._defaults[state]
        return 0 if fallback is None else fallback

    def __repr__(self):
        return "<ScannerTable marker={0!r} states={1} target={2}>".format(
            self._marker, len(self._rows), self._target
        )


def marker_table(
    marker: bytes, default: int = 0, skip: bytes = b"", content_state: bool = False
) -> ScannerTable:
    """
    Build a chain table recognizing ``marker``.

    :param bytes marker: literal prompt to detect, at least one byte.
    :param int default: fallback state of every chain state when
        ``content_state`` is not used.
    :param bytes skip: bytes that keep state 0 in place, only meaningful with
        ``content_state``; used to pass over leading blank lines.
    :param bool content_state: insert state 1 as a "content" state: state 0
        falls to it on any byte not in ``skip``, it falls to itself, and
        every chain state falls back to it instead of to state 0.
    """
    if not marker:
        raise ValueError("marker must not be empty")
    rows: List[Dict[int, int]] = []
    defaults: List[Optional[int]] = []
    if content_state:
        first = 2
        rows.append({byte: 0 for byte in skip})
        rows[0][marker[0]] = first
        defaults.append(1)
        rows.append({marker[0]: first})
        defaults.append(1)
        fallback = 1
    else:
        first = 1
        rows.append({marker[0]: first})
        defaults.append(None)
        fallback = default
    for offset, byte in enumerate(marker[1:], start=first):
        rows.append({byte: offset + 1})
        defaults.append(fallback)
    # target: scanning goes on as from the fallback state after a match
    rows.append(dict(rows[fallback]))
    defaults.append(defaults[fallback])
    return ScannerTable(rows, defaults, target=len(rows) - 1, marker=marker)


def advance(table: ScannerTable, state: int, byte: int) -> Tuple[int, bool]:
    """Return ``(next_state, matched)`` for one input byte."""
    next_state = table.row(state).get(byte)
    if next_state is None:
        next_state = table.default(state)
    return next_state, next_state == table.target


def scan(table: ScannerTable, state: int, data: bytes) -> Tuple[int, List[int]]:
    """
    Feed ``data`` through ``table`` from ``state``.

    :returns: final state and the index within ``data`` of each byte that
        completed a match.
    """
    matches = []
    for index, byte in enumerate(data):
        state, matched = advance(table, state, byte)
        if matched:
            matches.append(index)
    return state, matches


#: end of the message-of-the-day: skip leading CR/LF, then collect content
#: until the login prompt.
BANNER_TABLE = marker_table(LOGIN_MARKER, skip=b"\r\n", content_state=True)

#: password prompt following a submitted login name.
PASSWORD_TABLE = marker_table(PASSWORD_MARKER)
