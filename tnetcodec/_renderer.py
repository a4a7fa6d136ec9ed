"""tnetstring renderer: single pass, written backwards.

A container's length prefix is only known after its children are written.
Rather than size the tree first, every node is appended to an OutputBuffer
back to front (tag, reversed payload, ``:``, reversed length digits) and the
buffer is reversed once at the end.  Lists are therefore walked last item
first, and dict pairs are walked last pair first, each written value first,
then key.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Callable, Iterable, Optional

from ._constants import (
    DEFAULT_INITIAL_CAPACITY,
    DEFAULT_MAX_DEPTH,
    LITERAL_FALSE,
    LITERAL_TRUE,
    TAG_BOOL,
    TAG_DICT,
    TAG_LIST,
    TAG_NULL,
    TAG_NUMBER,
    TAG_STRING,
)
from ._errors import (
    ERR_DEPTH_LIMIT,
    ERR_HOOK_FAILURE,
    ERR_UNSUPPORTED_TYPE,
    OutOfMemory,
    RenderError,
    TNetStringError,
)
from ._hooks import Hooks, PythonHooks, ValueKind
from ._outbuf import OutputBuffer

logger = logging.getLogger(__name__)


class Renderer:
    """Render host values, inspected through `hooks`, to tnetstring bytes.

    `max_size` caps the output; exceeding it raises OutOfMemory.
    """

    def __init__(self, hooks: Optional[Hooks] = None,
                 max_depth: int = DEFAULT_MAX_DEPTH,
                 initial_capacity: int = DEFAULT_INITIAL_CAPACITY,
                 max_size: Optional[int] = None) -> None:
        self.hooks = hooks if hooks is not None else PythonHooks()
        self.max_depth = max_depth
        self.initial_capacity = initial_capacity
        self.max_size = max_size

    def render(self, value: Any) -> bytes:
        outbuf = OutputBuffer(self.initial_capacity, self.max_size)
        try:
            self._render_value(value, outbuf, 0)
        except TNetStringError as e:
            logger.debug("render failed: %s [%s]", e, e.code)
            raise
        except RecursionError as exc:
            logger.debug("render failed: recursion limit reached")
            raise RenderError(ERR_DEPTH_LIMIT,
                              "nesting exceeds the interpreter recursion limit") from exc
        return outbuf.getvalue()

    def _render_value(self, value: Any, outbuf: OutputBuffer, depth: int) -> None:
        hooks = self.hooks
        kind = self._hook(hooks.classify, value)
        if not isinstance(kind, ValueKind):
            raise RenderError(ERR_UNSUPPORTED_TYPE,
                              "unserializable object of type {}".format(
                                  type(value).__name__))

        if kind is ValueKind.NULL:
            outbuf.rputc(TAG_NULL)
            outbuf.rput_length(0)
            return

        if kind is ValueKind.LIST or kind is ValueKind.DICT:
            if depth + 1 > self.max_depth:
                raise RenderError(ERR_DEPTH_LIMIT,
                                  "nesting exceeds max depth {}".format(self.max_depth))

        if kind is ValueKind.BOOL:
            outbuf.rputc(TAG_BOOL)
            start = outbuf.used
            flag = self._hook(hooks.bool_value, value)
            outbuf.rputs(LITERAL_TRUE if flag else LITERAL_FALSE)
        elif kind is ValueKind.INTEGER or kind is ValueKind.FLOAT:
            outbuf.rputc(TAG_NUMBER)
            start = outbuf.used
            outbuf.rputs(self._payload(hooks.number_text_of, value, kind))
        elif kind is ValueKind.BYTES:
            outbuf.rputc(TAG_STRING)
            start = outbuf.used
            outbuf.rputs(self._payload(hooks.bytes_of, value))
        elif kind is ValueKind.LIST:
            outbuf.rputc(TAG_LIST)
            start = outbuf.used
            items = self._sequence(self._hook(hooks.iterate_list, value))
            #  Remember, all output is in reverse.
            #  So we must write the last element first.
            for item in reversed(items):
                self._render_value(item, outbuf, depth + 1)
        else:  # ValueKind.DICT
            outbuf.rputc(TAG_DICT)
            start = outbuf.used
            # Walking the pairs backwards keeps the wire order equal to the
            # host's iteration order.
            pairs = self._sequence(self._hook(hooks.iterate_dict_pairs, value))
            for key, item in reversed(pairs):
                self._render_value(item, outbuf, depth + 1)
                self._render_value(key, outbuf, depth + 1)
        outbuf.rput_length(outbuf.used - start)

    @classmethod
    def _sequence(cls, items: Iterable[Any]) -> Sequence:
        if isinstance(items, Sequence):
            return items
        return cls._hook(list, items)

    @staticmethod
    def _hook(fn: Callable[..., Any], *args: Any) -> Any:
        """Call an inspection hook, reporting its exceptions as RenderError."""
        try:
            return fn(*args)
        except (TNetStringError, RecursionError):
            raise
        except MemoryError as exc:
            raise OutOfMemory("{} failed".format(fn.__name__)) from exc
        except Exception as exc:
            raise RenderError(ERR_HOOK_FAILURE,
                              "{} failed: {}".format(fn.__name__, exc)) from exc

    @classmethod
    def _payload(cls, fn: Callable[..., Any], *args: Any) -> bytes:
        """Call a hook that supplies payload bytes and check what it returned."""
        data = cls._hook(fn, *args)
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise RenderError(ERR_HOOK_FAILURE,
                              "{} returned {}, expected bytes".format(
                                  fn.__name__, type(data).__name__))
        return data
