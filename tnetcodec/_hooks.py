"""Hook interface between the codec engine and a host value model.

The parser and renderer never look at host types directly.  They build
values through the construction hooks and take values apart through the
inspection hooks, switching only on the closed `ValueKind` enum returned
by `classify`.  A host implements `Hooks` once; `PythonHooks` is the
implementation for native Python objects.
"""

from __future__ import annotations

import enum
import re
from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional, Tuple

from ._constants import INT64_MAX, INT64_MIN


class ValueKind(enum.Enum):
    """The seven wire types a host value can classify as."""

    NULL = "null"
    BOOL = "bool"
    INTEGER = "integer"
    FLOAT = "float"
    BYTES = "bytes"
    LIST = "list"
    DICT = "dict"


class Hooks(ABC):
    """Capability set the engine calls to construct and inspect values.

    Construction hooks receive raw payload bytes.  `make_integer` and
    `make_float` raise ValueError when the text is not a valid literal;
    any other exception from a hook is reported by the engine as a
    hook failure.
    """

    # ── Construction ─────────────────────────────────────────

    @abstractmethod
    def make_null(self) -> Any: ...

    @abstractmethod
    def make_bool(self, value: bool) -> Any: ...

    @abstractmethod
    def make_bytes(self, data: bytes) -> Any: ...

    @abstractmethod
    def make_integer(self, text: bytes) -> Any: ...

    @abstractmethod
    def make_float(self, text: bytes) -> Any: ...

    @abstractmethod
    def new_list(self) -> Any: ...

    @abstractmethod
    def new_dict(self) -> Any: ...

    @abstractmethod
    def list_append(self, lst: Any, item: Any) -> None: ...

    @abstractmethod
    def dict_insert(self, dct: Any, key: Any, value: Any) -> None: ...

    # ── Inspection ───────────────────────────────────────────

    @abstractmethod
    def classify(self, value: Any) -> Optional[ValueKind]:
        """Return the wire type of `value`, or None if it has none."""

    @abstractmethod
    def bool_value(self, value: Any) -> bool: ...

    @abstractmethod
    def bytes_of(self, value: Any) -> bytes: ...

    @abstractmethod
    def number_text_of(self, value: Any, kind: ValueKind) -> bytes:
        """Return the canonical decimal text for an INTEGER or FLOAT value."""

    @abstractmethod
    def iterate_list(self, value: Any) -> Iterable[Any]:
        """Return the items in forward order.

        Returning a sequence lets the renderer walk it backwards without
        copying; any other iterable is materialized first.
        """

    @abstractmethod
    def iterate_dict_pairs(self, value: Any) -> Iterable[Tuple[Any, Any]]: ...

    # ── Cleanup ──────────────────────────────────────────────
    # Called on a container the parser started but could not finish.

    def discard_list(self, lst: Any) -> None:
        pass

    def discard_dict(self, dct: Any) -> None:
        pass


# ── Number literal grammar ───────────────────────────────────
# Python's int() and float() accept whitespace and underscores, which a
# tnetstring number payload must not contain.  Gate them with a regex.

_INT_RE = re.compile(rb"[+-]?[0-9]+\Z")
_FLOAT_RE = re.compile(
    rb"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
    rb"|(?i:inf|infinity|nan))\Z"
)


class PythonHooks(Hooks):
    """Hooks for native Python values.

    Parsing yields None, bool, int, float, bytes, list and dict.  Rendering
    additionally accepts bytearray/memoryview and str (UTF-8 encoded) as
    strings and tuple as a list.  Dict keys are whatever the parsed values
    are; an unhashable key (a list or dict) fails in `dict_insert`.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def make_null(self) -> Any:
        return None

    def make_bool(self, value: bool) -> Any:
        return bool(value)

    def make_bytes(self, data: bytes) -> Any:
        return bytes(data)

    def make_integer(self, text: bytes) -> Any:
        if not _INT_RE.match(text):
            raise ValueError("not an integer literal: {!r}".format(text))
        val = int(text)
        if val < INT64_MIN or val > INT64_MAX:
            raise ValueError("integer outside int64 range: {!r}".format(text))
        return val

    def make_float(self, text: bytes) -> Any:
        if not _FLOAT_RE.match(text):
            raise ValueError("not a float literal: {!r}".format(text))
        return float(text)

    def new_list(self) -> Any:
        return []

    def new_dict(self) -> Any:
        return {}

    def list_append(self, lst: Any, item: Any) -> None:
        lst.append(item)

    def dict_insert(self, dct: Any, key: Any, value: Any) -> None:
        dct[key] = value

    def discard_list(self, lst: Any) -> None:
        lst.clear()

    def discard_dict(self, dct: Any) -> None:
        dct.clear()

    def classify(self, value: Any) -> Optional[ValueKind]:
        if value is None:
            return ValueKind.NULL
        # bool before int: isinstance(True, int) is True.
        if isinstance(value, bool):
            return ValueKind.BOOL
        if isinstance(value, int):
            return ValueKind.INTEGER
        if isinstance(value, float):
            return ValueKind.FLOAT
        if isinstance(value, (bytes, bytearray, memoryview, str)):
            return ValueKind.BYTES
        if isinstance(value, (list, tuple)):
            return ValueKind.LIST
        if isinstance(value, dict):
            return ValueKind.DICT
        return None

    def bool_value(self, value: Any) -> bool:
        return bool(value)

    def bytes_of(self, value: Any) -> bytes:
        if isinstance(value, str):
            return value.encode(self.encoding)
        if isinstance(value, bytes):
            return value
        return bytes(value)

    def number_text_of(self, value: Any, kind: ValueKind) -> bytes:
        if kind is ValueKind.FLOAT:
            # repr() is the shortest text that round-trips the double.
            return repr(float(value)).encode("ascii")
        if value < INT64_MIN or value > INT64_MAX:
            raise ValueError("integer {} outside int64 range".format(value))
        return str(int(value)).encode("ascii")

    def iterate_list(self, value: Any) -> Iterable[Any]:
        return value

    def iterate_dict_pairs(self, value: Any) -> Iterable[Tuple[Any, Any]]:
        return value.items()
