"""Connection settings taken from the environment."""
# std imports
import os
from typing import Mapping, NamedTuple, Optional

# local
from .errors import MalformedConfigurationError
from .channel import DEFAULT_BYTE_CAPACITY
from .resolver import check_hostname

__all__ = ("Settings", "from_environ", "parse_port", "DEFAULT_HOSTNAME", "DEFAULT_PORT")

DEFAULT_HOSTNAME = "fibs.com"
DEFAULT_PORT = 4321


class Settings(NamedTuple):
    """Where to connect and how to lay out the terminal."""

    hostname: str = DEFAULT_HOSTNAME
    port: int = DEFAULT_PORT
    input_panel: bool = True
    byte_capacity: int = DEFAULT_BYTE_CAPACITY


def parse_port(value: str) -> int:
    """
    Parse an unsigned 16-bit TCP port number, ASCII digits only.

    :raises MalformedConfigurationError: when ``value`` is not in 0-65535.
    """
    port = int(value, 10) if value.isascii() and value.isdigit() else -1
    if not 0 <= port <= 0xFFFF:
        raise MalformedConfigurationError(
            "port must be an integer in 0-65535, got {0!r}".format(value),
            source="config",
        )
    return port


def from_environ(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Return :class:`Settings` from ``FIBS_HOSTNAME`` and ``FIBS_PORT``.

    :param environ: mapping to read, :data:`os.environ` by default.
    :raises MalformedConfigurationError: for a bad port or hostname.
    """
    if environ is None:
        environ = os.environ
    hostname = check_hostname(environ.get("FIBS_HOSTNAME", DEFAULT_HOSTNAME))
    port = DEFAULT_PORT
    if "FIBS_PORT" in environ:
        port = parse_port(environ["FIBS_PORT"])
    return Settings(hostname=hostname, port=port)
