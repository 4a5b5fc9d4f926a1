"""Display-update events consumed by :class:`~.display.Renderer`."""
# std imports
from typing import NamedTuple

__all__ = ("ShowBanner", "AppendLine", "AppendText", "EchoInput", "SubmitInput")


class ShowBanner(NamedTuple):
    """The complete message-of-the-day, one or more lines."""

    text: str


class AppendLine(NamedTuple):
    """Start a new line in the content panel holding ``text``."""

    text: str


class AppendText(NamedTuple):
    """Characters continuing the current content line."""

    text: str


class EchoInput(NamedTuple):
    """Characters typed by the user, echoed in the input panel."""

    text: str


class SubmitInput(NamedTuple):
    """The user sent ``line`` to the server; the input field is cleared."""

    line: str
