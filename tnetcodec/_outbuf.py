"""Reverse-write output buffer used by the renderer.

The renderer only ever appends, but it appends each node back to front:
tag, then payload reversed, then ``:`` and the length digits reversed.  A
single reversal of the whole buffer at the end yields the forward wire
bytes.  This is what lets a container write its length prefix after its
children without a sizing pre-pass.
"""

from __future__ import annotations

import logging
from typing import Optional

from ._constants import DEFAULT_INITIAL_CAPACITY, SEPARATOR
from ._errors import OutOfMemory

logger = logging.getLogger(__name__)


class OutputBuffer:
    """A growable bytearray that is written forward and read in reverse.

    Capacity starts at `initial_capacity` and doubles on overflow, so
    appends are amortized O(1).  If `max_capacity` is set, a growth past it
    raises OutOfMemory just like a failed allocation does.
    """

    __slots__ = ("_buf", "_used", "_max_capacity")

    def __init__(self, initial_capacity: int = DEFAULT_INITIAL_CAPACITY,
                 max_capacity: Optional[int] = None) -> None:
        if initial_capacity < 1:
            raise ValueError("initial_capacity must be positive")
        if max_capacity is not None and max_capacity < initial_capacity:
            initial_capacity = max(1, max_capacity)
        self._buf = bytearray(initial_capacity)
        self._used = 0
        self._max_capacity = max_capacity

    @property
    def used(self) -> int:
        return self._used

    @property
    def capacity(self) -> int:
        return len(self._buf)

    def _reserve(self, extra: int) -> None:
        needed = self._used + extra
        capacity = len(self._buf)
        if needed <= capacity:
            return
        new_capacity = capacity
        while new_capacity < needed:
            new_capacity *= 2
        if self._max_capacity is not None and new_capacity > self._max_capacity:
            if needed > self._max_capacity:
                raise OutOfMemory(
                    "output exceeds max size of {} bytes".format(self._max_capacity))
            new_capacity = self._max_capacity
        try:
            self._buf.extend(bytes(new_capacity - capacity))
        except MemoryError as exc:
            raise OutOfMemory(
                "cannot grow output buffer to {} bytes".format(new_capacity)) from exc
        logger.debug("output buffer grown %d -> %d bytes", capacity, new_capacity)

    def rputc(self, byte: int) -> None:
        """Append a single byte."""
        self._reserve(1)
        self._buf[self._used] = byte
        self._used += 1

    def rputs(self, data: bytes) -> None:
        """Append `data` in reversed byte order."""
        n = len(data)
        if n == 0:
            return
        self._reserve(n)
        self._buf[self._used:self._used + n] = data[::-1]
        self._used += n

    def rput_length(self, n: int) -> None:
        """Append ``:`` and the reversed decimal digits of `n`.

        Once the buffer is reversed this reads forward as ``<n>:``.
        """
        self.rputc(SEPARATOR)
        self.rputs(str(n).encode("ascii"))

    def getvalue(self) -> bytes:
        """Return the forward-ordered contents (one full reversal)."""
        out = self._buf[:self._used]
        out.reverse()
        return bytes(out)
