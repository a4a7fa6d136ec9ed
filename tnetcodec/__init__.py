"""tnetcodec: typed netstring (tnetstring) encoder and decoder.

Every value is written as ``<length>:<payload><tag>``, so a reader always
knows how far to skip without scanning the payload, and several values
can be concatenated on one stream.

Quick start:
    >>> from tnetcodec import dumps, loads, pop
    >>> dumps({b"foo": [1, 2]})
    b'17:3:foo,8:1:1#1:2#]}'
    >>> loads(b"17:3:foo,8:1:1#1:2#]}")
    {b'foo': [1, 2]}
    >>> pop(b"1:5#4:true!")
    (5, b'4:true!')

`loads` insists on exactly one value; `pop` returns whatever follows the
first value so callers can frame a stream of messages.
"""

from __future__ import annotations

import logging
from typing import IO, Any, Iterator, Optional, Tuple

from ._constants import (
    DEFAULT_MAX_DEPTH,
    INT64_MAX,
    INT64_MIN,
    MAX_LENGTH_DIGITS,
    SEPARATOR,
)
from ._errors import (
    ERR_CONTAINER_OVERRUN,
    ERR_DANGLING_KEY,
    ERR_DEPTH_LIMIT,
    ERR_HOOK_FAILURE,
    ERR_INVALID_BOOL,
    ERR_INVALID_NULL,
    ERR_INVALID_NUMBER,
    ERR_MALFORMED_LENGTH,
    ERR_MISSING_SEPARATOR,
    ERR_OUT_OF_MEMORY,
    ERR_TRAILING_DATA,
    ERR_TRUNCATED,
    ERR_UNKNOWN_TAG,
    ERR_UNSUPPORTED_TYPE,
    OutOfMemory,
    ParseError,
    RenderError,
    TNetStringError,
)
from ._hooks import Hooks, PythonHooks, ValueKind
from ._outbuf import OutputBuffer
from ._parser import Parser
from ._renderer import Renderer

__version__ = "1.0.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
logger = logging.getLogger(__name__)

# Names used by the original C extension.
Error = TNetStringError
LoadError = ParseError
DumpError = RenderError

__all__ = [
    # Public API functions
    "dumps",
    "dump",
    "loads",
    "load",
    "pop",
    "iter_frames",
    # Engine
    "Parser",
    "Renderer",
    "OutputBuffer",
    "Hooks",
    "PythonHooks",
    "ValueKind",
    # Exceptions
    "TNetStringError",
    "ParseError",
    "RenderError",
    "OutOfMemory",
    "Error",
    "LoadError",
    "DumpError",
    # Error codes
    "ERR_MALFORMED_LENGTH",
    "ERR_MISSING_SEPARATOR",
    "ERR_TRUNCATED",
    "ERR_UNKNOWN_TAG",
    "ERR_INVALID_NUMBER",
    "ERR_INVALID_BOOL",
    "ERR_INVALID_NULL",
    "ERR_CONTAINER_OVERRUN",
    "ERR_DANGLING_KEY",
    "ERR_TRAILING_DATA",
    "ERR_UNSUPPORTED_TYPE",
    "ERR_DEPTH_LIMIT",
    "ERR_HOOK_FAILURE",
    "ERR_OUT_OF_MEMORY",
    # Limits
    "DEFAULT_MAX_DEPTH",
    "INT64_MIN",
    "INT64_MAX",
]


# ── Core API ──────────────────────────────────────────────────

def dumps(value: Any, *,
          hooks: Optional[Hooks] = None,
          max_depth: int = DEFAULT_MAX_DEPTH,
          max_size: Optional[int] = None) -> bytes:
    """Render `value` as a tnetstring.

    Accepts None, bool, int (int64 range), float, bytes, str (UTF-8),
    list, tuple and dict, nested to `max_depth` containers.  Dict pairs
    are written in the dict's iteration order.
    """
    return Renderer(hooks, max_depth=max_depth, max_size=max_size).render(value)


def pop(data: bytes, *,
        hooks: Optional[Hooks] = None,
        max_depth: int = DEFAULT_MAX_DEPTH) -> Tuple[Any, bytes]:
    """Parse the first value in `data`.

    Returns (value, remain) where `remain` is everything after the first
    value's tag, unexamined.
    """
    val, consumed = Parser(hooks, max_depth=max_depth).parse(data)
    return val, bytes(data[consumed:])


def loads(data: bytes, *,
          allow_trailing: bool = False,
          hooks: Optional[Hooks] = None,
          max_depth: int = DEFAULT_MAX_DEPTH) -> Any:
    """Parse exactly one value from `data`.

    Bytes left over after the value raise ERR_TRAILING_DATA unless
    `allow_trailing` is set, in which case they are ignored.  Use pop()
    or iter_frames() to read a stream of concatenated values.
    """
    val, consumed = Parser(hooks, max_depth=max_depth).parse(data)
    if consumed != len(data) and not allow_trailing:
        raise ParseError(ERR_TRAILING_DATA,
                         "{} trailing bytes after value".format(len(data) - consumed),
                         consumed)
    return val


def iter_frames(data: bytes, *,
                hooks: Optional[Hooks] = None,
                max_depth: int = DEFAULT_MAX_DEPTH) -> Iterator[Any]:
    """Yield each value of a stream of concatenated tnetstrings, in order."""
    parser = Parser(hooks, max_depth=max_depth)
    buf = bytes(data)
    pos = 0
    while pos < len(buf):
        val, consumed = parser.parse(buf, pos)
        pos += consumed
        yield val


# ── File API ──────────────────────────────────────────────────
# Parsing needs the whole value in memory, so these are no faster than
# the bytes API.  They exist so one value can be read from a file or
# socket without consuming anything after it.

def dump(value: Any, fp: IO[bytes], **kwargs: Any) -> None:
    """Render `value` and write it to the binary file `fp`."""
    fp.write(dumps(value, **kwargs))


def load(fp: IO[bytes], *,
         hooks: Optional[Hooks] = None,
         max_depth: int = DEFAULT_MAX_DEPTH) -> Any:
    """Read exactly one value from the binary file `fp`.

    Reads the length prefix one byte at a time, then the payload and tag
    in a single read, so nothing past the value's tag is consumed.
    """
    prefix = bytearray()
    c = fp.read(1)
    if not c:
        raise ParseError(ERR_TRUNCATED, "not a tnetstring: empty file", 0)
    while c.isdigit():
        prefix += c
        if len(prefix) > MAX_LENGTH_DIGITS:
            raise ParseError(ERR_MALFORMED_LENGTH,
                             "absurdly large length prefix", 0)
        c = fp.read(1)
    if not c:
        raise ParseError(ERR_TRUNCATED, "file ends inside length prefix",
                         len(prefix))
    if not prefix:
        raise ParseError(ERR_MALFORMED_LENGTH,
                         "length prefix must start with a digit", 0)
    if c[0] != SEPARATOR:
        raise ParseError(ERR_MISSING_SEPARATOR,
                         "expected ':' after length, got {!r}".format(c),
                         len(prefix))
    body = fp.read(int(prefix) + 1)
    data = bytes(prefix) + c + body
    logger.debug("load: read %d bytes", len(data))
    return loads(data, hooks=hooks, max_depth=max_depth)
