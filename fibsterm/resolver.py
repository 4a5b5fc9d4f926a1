"""IPv4 address resolution."""
# std imports
import socket
import logging
from typing import Tuple

# local
from .errors import AddressResolutionError, MalformedConfigurationError

__all__ = ("resolve_ipv4", "check_hostname")

log = logging.getLogger(__name__)


def check_hostname(hostname: str) -> str:
    """
    Return ``hostname`` if it may be handed to the resolver.

    :raises MalformedConfigurationError: on an embedded NUL character.
    """
    pos = hostname.find("\x00")
    if pos != -1:
        raise MalformedConfigurationError(
            "interior nul byte found at position {0}, immediately following {1!r}".format(
                pos, hostname[:pos]
            ),
            source="config",
        )
    return hostname


def resolve_ipv4(hostname: str, port: int) -> Tuple[str, int]:
    """
    Resolve ``hostname`` to the first IPv4 TCP socket address.

    This is a single blocking ``getaddrinfo(3)`` call.

    :returns: ``(address, port)`` suitable for :meth:`socket.socket.connect`.
    :raises AddressResolutionError: carrying the resolver's reason.
    :raises MalformedConfigurationError: on an embedded NUL in ``hostname``.
    """
    check_hostname(hostname)
    try:
        infos = socket.getaddrinfo(
            hostname, port, family=socket.AF_INET, type=socket.SOCK_STREAM
        )
    except socket.gaierror as err:
        raise AddressResolutionError(hostname, err.strerror or str(err)) from err
    except UnicodeError as err:
        # idna codec refuses labels that are empty or too long
        raise AddressResolutionError(hostname, str(err)) from err
    if not infos:
        raise AddressResolutionError(hostname, "no IPv4 address")
    sockaddr = infos[0][4]
    log.debug("resolved %s:%d to %s:%d", hostname, port, sockaddr[0], sockaddr[1])
    return sockaddr[0], sockaddr[1]
