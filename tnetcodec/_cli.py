"""tnetcodec command-line interface.

Usage:
    echo '{"a": [1, 2]}' | python3 -m tnetcodec encode
    printf '5:hello,' | python3 -m tnetcodec decode
    python3 -m tnetcodec decode --all --input stream.tns
    python3 -m tnetcodec version
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from . import (
    DEFAULT_MAX_DEPTH,
    TNetStringError,
    __version__,
    dumps,
    iter_frames,
    loads,
)
from ._json_adapter import dumps_json_line, json_to_value

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tnetcodec",
        description="tnetcodec: typed netstring encoder/decoder",
    )
    parser.add_argument("--max-depth", type=int, default=DEFAULT_MAX_DEPTH,
                        metavar="N", help="Maximum container nesting "
                        "(default: %(default)s)")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log debug detail to stderr")
    sub = parser.add_subparsers(dest="command")

    # ── encode ──
    enc_p = sub.add_parser("encode", help="JSON in, tnetstring out")
    enc_p.add_argument("--input", "-i", metavar="FILE",
                       help="Read JSON from FILE instead of stdin")

    # ── decode ──
    dec_p = sub.add_parser("decode", help="tnetstring in, JSON out")
    dec_p.add_argument("--input", "-i", metavar="FILE",
                       help="Read tnetstring from FILE instead of stdin")
    dec_p.add_argument("--all", action="store_true",
                       help="Decode every value of a concatenated stream, "
                            "one JSON document per line")

    # ── version ──
    sub.add_parser("version", help="Print version and exit")

    return parser


def _read_input(filepath: Optional[str]) -> bytes:
    """Read bytes from a file or stdin."""
    if filepath:
        with open(filepath, "rb") as f:
            return f.read()
    if sys.stdin.isatty():
        print("tnetcodec: reading from stdin (Ctrl-D to end)...", file=sys.stderr)
    return sys.stdin.buffer.read()


def _cmd_encode(args: argparse.Namespace) -> None:
    raw = _read_input(args.input)
    value = json_to_value(raw)
    out = dumps(value, max_depth=args.max_depth)
    logger.debug("encoded %d JSON bytes into %d bytes", len(raw), len(out))
    sys.stdout.buffer.write(out)
    sys.stdout.buffer.flush()


def _cmd_decode(args: argparse.Namespace) -> None:
    raw = _read_input(args.input)
    if args.all:
        count = 0
        for value in iter_frames(raw, max_depth=args.max_depth):
            print(dumps_json_line(value))
            count += 1
        logger.debug("decoded %d frames from %d bytes", count, len(raw))
    else:
        print(dumps_json_line(loads(raw, max_depth=args.max_depth)))


def main(argv: Optional[List[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s: %(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "version":
        print(f"tnetcodec {__version__}")
        return

    try:
        if args.command == "encode":
            _cmd_encode(args)
        elif args.command == "decode":
            _cmd_decode(args)
    except TNetStringError as e:
        print(f"tnetcodec: error [{e.code}]: {e}", file=sys.stderr)
        sys.exit(2)
    except json.JSONDecodeError as e:
        print(f"tnetcodec: JSON parse error: {e}", file=sys.stderr)
        sys.exit(2)
    except UnicodeDecodeError as e:
        print(f"tnetcodec: input is not UTF-8: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
