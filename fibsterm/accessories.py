"""Accessory functions."""
# std imports
import sys
import logging
import logging.handlers
import importlib.metadata

__all__ = ('name_unicode', 'make_logger', 'release_deferred_logs',
           'DeferredStderrHandler', 'repr_mapping', 'get_version')


def get_version():
    """Return installed distribution version of fibsterm."""
    try:
        return importlib.metadata.version("fibsterm")
    except importlib.metadata.PackageNotFoundError:
        return "0+unknown"


def name_unicode(ucs):
    """Return 7-bit ascii printable of any string. """
    # more or less the same as curses.ascii.unctrl -- but curses
    # module is conditionally excluded from many python distributions!
    bits = ord(ucs)
    if 32 <= bits <= 126:
        # ascii printable as one cell, as-is
        rep = chr(bits)
    elif bits == 127:
        rep = "^?"
    elif bits < 32:
        rep = "^" + chr(((bits & 0x7f) | 0x20) + 0x20)
    else:
        rep = r'\x{:02x}'.format(bits)
    return rep


_DEFAULT_LOGFMT = ' '.join(('%(asctime)s',
                            '%(levelname)s',
                            '%(filename)s:%(lineno)d',
                            '%(message)s'))


class DeferredStderrHandler(logging.handlers.MemoryHandler):
    """
    Hold log records until :meth:`flush`, then write them to stderr.

    Only the newest ``capacity`` records are kept.
    """

    def __init__(self, capacity=500, logfmt=_DEFAULT_LOGFMT):
        target = logging.StreamHandler(sys.stderr)
        target.setFormatter(logging.Formatter(logfmt))
        super().__init__(capacity, target=target)

    def shouldFlush(self, record):
        if len(self.buffer) > self.capacity:
            del self.buffer[0]
        return False


def make_logger(name, loglevel='info', logfile=None, logfmt=_DEFAULT_LOGFMT):
    """
    Create and return simple logger for given arguments.

    While the session runs the terminal belongs to the display renderer, so
    without ``logfile`` records at ``warn`` or above are held by a
    :class:`DeferredStderrHandler` until :func:`release_deferred_logs`.
    """
    lvl = getattr(logging, loglevel.upper())
    root = logging.getLogger()
    root.setLevel(lvl)

    if logfile:
        logging.basicConfig(format=logfmt, filename=logfile)
    else:
        root.setLevel(max(lvl, logging.WARNING))
        for handler in root.handlers[:]:
            if isinstance(handler, DeferredStderrHandler):
                root.removeHandler(handler)
        root.addHandler(DeferredStderrHandler(logfmt=logfmt))
    return logging.getLogger(name)


def release_deferred_logs():
    """Write records held by :class:`DeferredStderrHandler` to stderr."""
    for handler in logging.getLogger().handlers:
        if isinstance(handler, DeferredStderrHandler):
            handler.flush()


def repr_mapping(mapping):
    """Return printable string, 'key=value [key=value ...]' for mapping."""
    return ' '.join('='.join(map(str, kv)) for kv in mapping.items())
