#!/usr/bin/env python3
"""
Command-line 'fibsterm' entry point.

Connects to a FIBS-style talker server, shows the message of the day and
relays typed lines until the server asks for a password.  Press ``^]`` to
close the connection early.
"""
# std imports
import sys
import argparse
import logging

# local
from . import accessories, config
from .errors import ClientError, MalformedConfigurationError
from .coordinator import Coordinator

__all__ = ("main", "run_client")


def run_client(argv=None):
    """Parse arguments, run one session, and return the process exit code."""
    try:
        settings = config.from_environ()
    except ClientError as err:
        print("fibsterm: {0}".format(err.describe()), file=sys.stderr)
        return 1
    args = _get_argument_parser(settings).parse_args(argv)
    try:
        settings = _transform_args(args)
    except ClientError as err:
        print("fibsterm: {0}".format(err.describe()), file=sys.stderr)
        return 1

    log = accessories.make_logger(
        name=__name__,
        loglevel=args.loglevel,
        logfile=args.logfile,
        logfmt=args.logfmt,
    )
    log.debug("Client configuration: %s", accessories.repr_mapping(settings._asdict()))

    coordinator = Coordinator(settings)
    try:
        coordinator.run()
    except ClientError as err:
        log.debug("session failed", exc_info=True)
        print("fibsterm: {0}".format(err.describe()), file=sys.stderr)
        return 1
    finally:
        accessories.release_deferred_logs()
        for line in coordinator.diagnostics:
            print("fibsterm: {0}".format(line), file=sys.stderr)
    if coordinator.user_quit:
        print("Connection closed.", file=sys.stderr)
    return 0


def _get_argument_parser(defaults):
    parser = argparse.ArgumentParser(
        prog="fibsterm",
        description="Terminal client for FIBS-style talker servers",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--host", default=defaults.hostname, help="hostname (env FIBS_HOSTNAME)"
    )
    parser.add_argument(
        "--port", default=str(defaults.port), help="port number (env FIBS_PORT)"
    )
    parser.add_argument("--loglevel", default="warn", help="log level",
                        choices=("debug", "info", "warn", "error", "critical"))
    parser.add_argument(
        "--logfmt", default=accessories._DEFAULT_LOGFMT, help="log format"
    )
    parser.add_argument("--logfile", help="filepath")
    parser.add_argument(
        "--no-input-panel",
        dest="input_panel",
        action="store_false",
        help="echo typed characters in the content panel",
    )
    parser.add_argument(
        "--byte-capacity",
        default=defaults.byte_capacity,
        type=int,
        help="bytes buffered between network reader and session",
    )
    return parser


def _transform_args(args):
    if args.byte_capacity < 1:
        raise MalformedConfigurationError(
            "byte capacity must be at least 1, got {0}".format(args.byte_capacity),
            source="config",
        )
    return config.Settings(
        hostname=config.check_hostname(args.host),
        port=config.parse_port(args.port),
        input_panel=args.input_panel,
        byte_capacity=args.byte_capacity,
    )


def main():
    logging.captureWarnings(True)
    sys.exit(run_client())


if __name__ == "__main__":
    main()
