"""
Peer identity CLI entry point.

Create, inspect and check peer identities and their JSON records.

Usage::

    python -m peer_identity generate --output peer.json
    python -m peer_identity inspect QmXoypizjW3WknFiJnKLwHCnL72vedxjQkDDP1mXWo6uco
    python -m peer_identity verify peer.json
    python -m peer_identity from-address 0x8ba1f109551bd432803012645ac136ddd64dba72

Commands:
    generate      Generate a key pair and print its JSON record
    inspect       Show the hex, base58 and short forms of an encoded identity
    verify        Check that a JSON record's id and keys belong together
    from-address  Derive the identity of a raw address
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from peer_identity.peer_id import PeerIdentity
from peer_identity.types import PeerIdentityError

logger = logging.getLogger(__name__)


LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


class LevelFormatter(logging.Formatter):
    """
    Pads the level name and, when `color` is set, tints it by severity.

    Only the level name is colored, so the plain and colored outputs
    carry the same text.
    """

    RESET = "\x1b[0m"
    COLORS = {
        logging.DEBUG: "\x1b[38;5;244m",
        logging.INFO: "\x1b[38;5;40m",
        logging.WARNING: "\x1b[38;5;220m",
        logging.ERROR: "\x1b[38;5;196m",
        logging.CRITICAL: "\x1b[38;5;196;1m",
    }

    def __init__(self, color: bool = True) -> None:
        super().__init__(LOG_FORMAT)
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        levelname = f"{record.levelname:<8}"
        if self.color and record.levelno in self.COLORS:
            levelname = f"{self.COLORS[record.levelno]}{levelname}{self.RESET}"
        # Shallow copy: handlers further down still see the bare level name.
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = levelname
        return super().format(record)


def setup_logging(verbose: bool = False, no_color: bool = False) -> None:
    """Log to stderr so stdout carries only command output."""
    level = logging.DEBUG if verbose else logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(LevelFormatter(color=not no_color and sys.stderr.isatty()))

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)


def cmd_generate(args: argparse.Namespace) -> None:
    peer = PeerIdentity.generate()
    record = peer.to_json_string()

    if args.output is None:
        print(record)
        return

    args.output.write_text(record + "\n")
    logger.info("Wrote %r to %s", peer, args.output)


def cmd_inspect(args: argparse.Namespace) -> None:
    peer = PeerIdentity.from_encoded(args.identity)
    print(f"hex:     {peer.to_hex()}")
    print(f"base58:  {peer.to_base58()}")
    print(f"display: {peer.to_display_string()}")


def cmd_verify(args: argparse.Namespace) -> None:
    peer = PeerIdentity.from_json(args.record.read_text())
    if peer.private_key is not None:
        peer.validate()
    logger.info("Record for %r is consistent", peer)
    print(peer.to_base58())


def cmd_from_address(args: argparse.Namespace) -> None:
    address = args.address.removeprefix("0x")
    try:
        raw = bytes.fromhex(address)
    except ValueError as e:
        raise PeerIdentityError(f"Address is not hex: {args.address}") from e
    print(PeerIdentity.from_address(raw).to_base58())


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="peer_identity",
        description="Peer identity tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored logging output",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    generate = commands.add_parser("generate", help="Generate a new identity")
    generate.add_argument("--output", type=Path, default=None, help="Write the record here")
    generate.set_defaults(handler=cmd_generate)

    inspect = commands.add_parser("inspect", help="Show an encoded identity")
    inspect.add_argument("identity", help="Identity as hex or base58")
    inspect.set_defaults(handler=cmd_inspect)

    verify = commands.add_parser("verify", help="Check a JSON identity record")
    verify.add_argument("record", type=Path, help="Path to the JSON record")
    verify.set_defaults(handler=cmd_verify)

    from_address = commands.add_parser("from-address", help="Identity of a raw address")
    from_address.add_argument("address", help="Address as hex, with or without 0x")
    from_address.set_defaults(handler=cmd_from_address)

    args = parser.parse_args(argv)
    setup_logging(args.verbose, args.no_color)

    try:
        args.handler(args)
    except PeerIdentityError as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
