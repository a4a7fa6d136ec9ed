"""tnetstring parser: recursive descent over an explicit cursor.

Each call to `_parse_value` reads one ``<length>:<payload><tag>`` node that
must end before `end`, and returns the host value together with the
position just past the tag.  Container payloads are parsed by recursing with
`end` narrowed to the payload boundary, so a child can never read into its
parent's tag or a sibling.  Bytes after the top-level value are left for
the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Tuple

from ._constants import (
    DEFAULT_MAX_DEPTH,
    LITERAL_FALSE,
    LITERAL_TRUE,
    MAX_LENGTH_DIGITS,
    SEPARATOR,
    TAG_BOOL,
    TAG_DICT,
    TAG_LIST,
    TAG_NULL,
    TAG_NUMBER,
    TAG_STRING,
    VALID_TAGS,
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
    ERR_TRUNCATED,
    ERR_UNKNOWN_TAG,
    OutOfMemory,
    ParseError,
    TNetStringError,
)
from ._hooks import Hooks, PythonHooks

logger = logging.getLogger(__name__)

_DIGIT_0 = 0x30
_DIGIT_9 = 0x39


class Parser:
    """Parse tnetstring bytes into host values built through `hooks`.

    A Parser holds configuration only; every `parse` call keeps its own
    cursor, so one instance can serve concurrent callers.
    """

    def __init__(self, hooks: Optional[Hooks] = None,
                 max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self.hooks = hooks if hooks is not None else PythonHooks()
        self.max_depth = max_depth

    def parse(self, data: bytes, start: int = 0) -> Tuple[Any, int]:
        """Parse one value from `data`, beginning at byte `start`.

        Returns (value, consumed) where `consumed` is the number of bytes
        from `start` up to and including the value's tag.  Error offsets
        are positions in `data`.
        """
        buf = data if isinstance(data, bytes) else bytes(data)
        try:
            val, pos = self._parse_value(buf, start, len(buf), 0)
            return val, pos - start
        except ParseError as e:
            logger.debug("parse failed: %s [%s]", e, e.code)
            raise
        except RecursionError as exc:
            logger.debug("parse failed: recursion limit reached")
            raise ParseError(ERR_DEPTH_LIMIT,
                             "nesting exceeds the interpreter recursion limit",
                             start) from exc

    # ── Recursive descent ────────────────────────────────────

    def _parse_value(self, buf: bytes, pos: int, end: int,
                     depth: int) -> Tuple[Any, int]:
        # Running off `end` inside a container is the container's fault,
        # not the input's.
        short = ERR_CONTAINER_OVERRUN if end < len(buf) else ERR_TRUNCATED

        if pos >= end:
            raise ParseError(short, "expected a length prefix", pos)

        # ── length prefix ──
        first = buf[pos]
        if not _DIGIT_0 <= first <= _DIGIT_9:
            raise ParseError(ERR_MALFORMED_LENGTH,
                             "length prefix must start with a digit, "
                             "got {!r}".format(bytes([first])), pos)
        i = pos + 1
        limit = min(end, pos + MAX_LENGTH_DIGITS + 1)
        while i < limit and _DIGIT_0 <= buf[i] <= _DIGIT_9:
            i += 1
        ndigits = i - pos
        if ndigits > MAX_LENGTH_DIGITS:
            raise ParseError(ERR_MALFORMED_LENGTH,
                             "length prefix longer than {} digits".format(
                                 MAX_LENGTH_DIGITS), pos)
        # Netstring lengths never carry leading zeros.
        if first == _DIGIT_0 and ndigits > 1:
            raise ParseError(ERR_MALFORMED_LENGTH,
                             "length prefix has a leading zero", pos)
        if i >= end:
            raise ParseError(short, "input ends inside length prefix", i)
        if buf[i] != SEPARATOR:
            raise ParseError(ERR_MISSING_SEPARATOR,
                             "expected ':' after length, got {!r}".format(
                                 bytes([buf[i]])), i)
        length = int(buf[pos:i])

        # ── payload and tag ──
        pstart = i + 1
        pend = pstart + length
        if pend >= end:
            raise ParseError(short,
                             "declared length {} but only {} bytes remain "
                             "before the tag".format(length, max(0, end - pstart - 1)),
                             pos)
        tag = buf[pend]
        if tag not in VALID_TAGS:
            raise ParseError(ERR_UNKNOWN_TAG,
                             "unknown type tag {!r}".format(bytes([tag])), pend)

        if tag == TAG_STRING:
            val = self._hook(pstart, self.hooks.make_bytes, buf[pstart:pend])
        elif tag == TAG_NUMBER:
            val = self._parse_number(buf[pstart:pend], pstart)
        elif tag == TAG_BOOL:
            val = self._parse_bool(buf[pstart:pend], pstart)
        elif tag == TAG_NULL:
            if length != 0:
                raise ParseError(ERR_INVALID_NULL,
                                 "null must have an empty payload", pos)
            val = self._hook(pstart, self.hooks.make_null)
        elif tag == TAG_LIST:
            self._check_depth(depth, pos)
            val = self._parse_list(buf, pstart, pend, depth + 1)
        else:  # TAG_DICT
            self._check_depth(depth, pos)
            val = self._parse_dict(buf, pstart, pend, depth + 1)
        return val, pend + 1

    def _parse_number(self, text: bytes, offset: int) -> Any:
        # Integer first; anything that is not an int64 literal gets a
        # second chance as a float.
        for make in (self.hooks.make_integer, self.hooks.make_float):
            try:
                return make(text)
            except ValueError:
                continue
            except (TNetStringError, RecursionError):
                raise
            except MemoryError as exc:
                raise OutOfMemory("{} failed".format(make.__name__)) from exc
            except Exception as exc:
                raise ParseError(ERR_HOOK_FAILURE,
                                 "{} failed: {}".format(make.__name__, exc),
                                 offset) from exc
        raise ParseError(ERR_INVALID_NUMBER,
                         "invalid number literal {!r}".format(text), offset)

    def _parse_bool(self, text: bytes, offset: int) -> Any:
        if text == LITERAL_TRUE:
            return self._hook(offset, self.hooks.make_bool, True)
        if text == LITERAL_FALSE:
            return self._hook(offset, self.hooks.make_bool, False)
        raise ParseError(ERR_INVALID_BOOL,
                         "invalid boolean literal {!r}".format(text), offset)

    def _parse_list(self, buf: bytes, pos: int, end: int, depth: int) -> Any:
        hooks = self.hooks
        lst = self._hook(pos, hooks.new_list)
        try:
            while pos < end:
                item_pos = pos
                item, pos = self._parse_value(buf, pos, end, depth)
                self._hook(item_pos, hooks.list_append, lst, item)
        except Exception:
            hooks.discard_list(lst)
            raise
        return lst

    def _parse_dict(self, buf: bytes, pos: int, end: int, depth: int) -> Any:
        hooks = self.hooks
        dct = self._hook(pos, hooks.new_dict)
        try:
            while pos < end:
                key_pos = pos
                key, pos = self._parse_value(buf, pos, end, depth)
                if pos >= end:
                    raise ParseError(ERR_DANGLING_KEY,
                                     "dict key has no matching value", key_pos)
                val, pos = self._parse_value(buf, pos, end, depth)
                self._hook(key_pos, hooks.dict_insert, dct, key, val)
        except Exception:
            hooks.discard_dict(dct)
            raise
        return dct

    # ── Helpers ──────────────────────────────────────────────

    def _check_depth(self, depth: int, offset: int) -> None:
        if depth + 1 > self.max_depth:
            raise ParseError(ERR_DEPTH_LIMIT,
                             "nesting exceeds max depth {}".format(self.max_depth),
                             offset)

    @staticmethod
    def _hook(offset: int, fn: Callable[..., Any], *args: Any) -> Any:
        """Call a construction hook, reporting its exceptions as ParseError."""
        try:
            return fn(*args)
        except (TNetStringError, RecursionError):
            raise
        except MemoryError as exc:
            raise OutOfMemory("{} failed".format(fn.__name__)) from exc
        except Exception as exc:
            raise ParseError(ERR_HOOK_FAILURE,
                             "{} failed: {}".format(fn.__name__, exc),
                             offset) from exc
