"""
Display renderer: the only writer to the terminal once the session runs.

Layout, for a terminal of ``rows`` by ``cols``::

    ┌──────────────────────┐  row 0
    │banner and traffic    │  content panel, scrolls to the last line
    │...                   │
    └──────────────────────┘
    ┌──────────────────────┐  rows - 3
    │> typed input         │  input panel, cursor left after the input
    └──────────────────────┘  rows - 1

Without the input panel the content panel takes the full height and typed
characters are echoed onto the current content line.
"""
# std imports
import logging
from typing import List, Tuple, Callable, Optional

# 3rd party
from wcwidth import wcwidth

# local
from .events import AppendLine, EchoInput, AppendText, ShowBanner, SubmitInput
from .errors import ClientError, StreamIOError

__all__ = ("DisplayBuffer", "Renderer", "clip", "INPUT_PROMPT")

log = logging.getLogger(__name__)

INPUT_PROMPT = "> "

#: height of the bordered input panel.
INPUT_PANEL_ROWS = 3

_BOX = {"tl": "┌", "tr": "┐", "bl": "└", "br": "┘", "h": "─", "v": "│"}


def clip(text: str, width: int) -> Tuple[str, int]:
    """
    Return the longest prefix of ``text`` fitting in ``width`` cells.

    Characters without a printable width, such as control characters, are
    dropped.  Wide characters count as two cells.

    :returns: ``(prefix, cells)``, the cells used by the prefix.
    """
    out: List[str] = []
    used = 0
    for ucs in text.expandtabs(8):
        cells = wcwidth(ucs)
        if cells < 0:
            continue
        if used + cells > width:
            break
        out.append(ucs)
        used += cells
    return "".join(out), used


class DisplayBuffer(object):
    """Lines of text shown in the content panel."""

    def __init__(self):
        self.lines: List[str] = []

    def __len__(self):
        return len(self.lines)

    @staticmethod
    def _split(text: str) -> List[str]:
        return text.replace("\r", "").split("\n")

    def append_line(self, text: str = "") -> None:
        """Start a new line, or several when ``text`` holds newlines."""
        self.lines.extend(self._split(text))

    def append_text(self, text: str) -> None:
        """Continue the current line; a newline in ``text`` starts the next."""
        head, *rest = self._split(text)
        if self.lines:
            self.lines[-1] += head
        else:
            self.lines.append(head)
        self.lines.extend(rest)

    def window(self, height: int) -> Tuple[int, int]:
        """Return ``(start, length)`` of the last ``height`` lines."""
        length = min(max(0, height), len(self.lines))
        return len(self.lines) - length, length

    def visible(self, height: int) -> List[str]:
        """Return the lines of :meth:`window`."""
        start, length = self.window(height)
        return self.lines[start : start + length]


class Renderer(object):
    """
    Consume display-update events and draw them.

    :param term: :class:`blessed.Terminal` used to position the cursor.
    :param bool input_panel: draw the bordered input panel.
    :param size: fixed ``(rows, cols)``, otherwise read from ``term`` on
        each full redraw.
    """

    def __init__(self, term, input_panel: bool = True, size: Optional[Tuple[int, int]] = None):
        self.term = term
        self.input_panel = input_panel
        self._size = size
        self.buffer = DisplayBuffer()
        self.input = ""
        self.rows, self.cols = self.geometry()
        self._window = (0, 0)
        self._handlers: "dict[type, Callable]" = {
            ShowBanner: self._on_banner,
            AppendLine: self._on_line,
            AppendText: self._on_text,
            EchoInput: self._on_echo,
            SubmitInput: self._on_submit,
        }

    def geometry(self) -> Tuple[int, int]:
        """Return ``(rows, cols)`` of the drawing area."""
        if self._size is not None:
            return self._size
        return (self.term.height or 25, self.term.width or 80)

    @property
    def content_rows(self) -> int:
        """Number of text rows inside the content panel border."""
        rows = self.rows - (INPUT_PANEL_ROWS if self.input_panel else 0)
        return max(0, rows - 2)

    @property
    def inner_width(self) -> int:
        """Number of text columns inside a panel border."""
        return max(0, self.cols - 2)

    def _write(self, text: str) -> None:
        self.term.stream.write(text)

    def _flush(self) -> None:
        self.term.stream.flush()

    def run(self, channel) -> Optional[ClientError]:
        """
        Draw every event of ``channel`` until it is closed.

        :returns: :class:`~.StreamIOError` when the terminal cannot be
            written, ``None`` otherwise.
        """
        try:
            self.redraw()
            for event in channel:
                self.handle(event)
        except OSError as err:
            return StreamIOError("terminal write failed: {0}".format(err), source="renderer")
        log.debug("display channel closed, %d lines shown", len(self.buffer))
        return None

    def handle(self, event) -> None:
        """Apply one display-update event and redraw what it changed."""
        try:
            handler = self._handlers[type(event)]
        except KeyError:
            raise TypeError("not a display-update event: {0!r}".format(event)) from None
        handler(event)
        self._place_cursor()
        self._flush()

    def _on_banner(self, event: ShowBanner) -> None:
        self.buffer.append_line(event.text)
        self.redraw()

    def _on_line(self, event: AppendLine) -> None:
        self.buffer.append_line(event.text)
        self.redraw()

    def _on_text(self, event: AppendText) -> None:
        first = max(0, len(self.buffer) - 1)
        self.buffer.append_text(event.text)
        if self.buffer.window(self.content_rows) != self._window:
            self.redraw()
        else:
            for index in range(first, len(self.buffer)):
                self._draw_content_line(index)

    def _on_echo(self, event: EchoInput) -> None:
        if not self.input_panel:
            self._on_text(AppendText(event.text))
            return
        self.input += event.text
        self._draw_input()

    def _on_submit(self, event: SubmitInput) -> None:
        if not self.input_panel:
            self._on_line(AppendLine(""))
            return
        self.input = ""
        self._draw_input()

    def redraw(self) -> None:
        """Clear the screen and draw every panel."""
        self.rows, self.cols = self.geometry()
        self._window = self.buffer.window(self.content_rows)
        self._write(self.term.home + self.term.clear)
        self._draw_box(0, self.content_rows + 2)
        start, length = self._window
        for index in range(start, start + length):
            self._draw_content_line(index)
        if self.input_panel:
            self._draw_box(self.rows - INPUT_PANEL_ROWS, INPUT_PANEL_ROWS)
            self._draw_input()
        self._place_cursor()
        self._flush()

    def _draw_box(self, top: int, height: int) -> None:
        if height < 2 or self.cols < 2:
            return
        inner = self.inner_width
        self._write(self.term.move_xy(0, top) + _BOX["tl"] + _BOX["h"] * inner + _BOX["tr"])
        for y in range(top + 1, top + height - 1):
            self._write(self.term.move_xy(0, y) + _BOX["v"])
            self._write(self.term.move_xy(self.cols - 1, y) + _BOX["v"])
        self._write(
            self.term.move_xy(0, top + height - 1) + _BOX["bl"] + _BOX["h"] * inner + _BOX["br"]
        )

    def _draw_content_line(self, index: int) -> None:
        start, length = self._window
        if not start <= index < start + length:
            return
        text, cells = clip(self.buffer.lines[index], self.inner_width)
        pad = " " * (self.inner_width - cells)
        self._write(self.term.move_xy(1, 1 + index - start) + text + pad)

    def _draw_input(self) -> None:
        if self.rows < INPUT_PANEL_ROWS:
            return
        text, cells = clip(INPUT_PROMPT + self.input, self.inner_width)
        pad = " " * (self.inner_width - cells)
        self._write(self.term.move_xy(1, self.rows - 2) + text + pad)

    def _place_cursor(self) -> None:
        if self.input_panel:
            _, cells = clip(INPUT_PROMPT + self.input, self.inner_width)
            self._write(self.term.move_xy(1 + cells, self.rows - 2))
            return
        start, length = self._window
        if not length:
            self._write(self.term.move_xy(1, 1))
            return
        _, cells = clip(self.buffer.lines[start + length - 1], self.inner_width)
        self._write(self.term.move_xy(1 + cells, length))
