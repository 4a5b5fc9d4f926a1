"""Error kinds raised and returned by fibsterm."""

from typing import Optional

__all__ = (
    "ClientError",
    "StreamIOError",
    "AddressResolutionError",
    "MalformedConfigurationError",
    "ChannelDisconnected",
)


class ClientError(Exception):
    """
    Base class of every failure the client reports.

    :param str message: human readable description of the condition.
    :param str source: name of the execution context or channel that failed,
        such as ``'reader'`` or ``'byte channel'``.
    """

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.source = source

    @property
    def kind(self) -> str:
        """Name of the error kind, as shown to the user."""
        return type(self).__name__

    def describe(self) -> str:
        """Return ``'Kind: message'``, with the source when known."""
        if self.source:
            return "{0} ({1}): {2}".format(self.kind, self.source, self.message)
        return "{0}: {1}".format(self.kind, self.message)


class StreamIOError(ClientError):
    """Socket or terminal I/O failure."""


class AddressResolutionError(ClientError):
    """Hostname could not be resolved; ``reason`` is the resolver's text."""

    def __init__(self, hostname: str, reason: str, source: str = "resolver"):
        super().__init__(
            "cannot resolve {0!r}: {1}".format(hostname, reason), source=source
        )
        self.hostname = hostname
        self.reason = reason


class MalformedConfigurationError(ClientError):
    """A configuration value cannot be used."""


class ChannelDisconnected(ClientError):
    """The execution context at the other end of a channel went away."""
