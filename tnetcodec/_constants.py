"""tnetstring constants: wire tags, integer range, and default limits.

Every value on the wire is ``<length>:<payload><tag>``.  The tag is a single
ASCII byte; the set below is closed.
"""

from __future__ import annotations

from typing import FrozenSet

# ── Wire tags (single byte each) ─────────────────────────────
TAG_STRING: int = ord(",")
TAG_NUMBER: int = ord("#")
TAG_DICT: int = ord("}")
TAG_LIST: int = ord("]")
TAG_NULL: int = ord("~")
TAG_BOOL: int = ord("!")

VALID_TAGS: FrozenSet[int] = frozenset(
    [TAG_STRING, TAG_NUMBER, TAG_DICT, TAG_LIST, TAG_NULL, TAG_BOOL]
)

SEPARATOR: int = ord(":")

LITERAL_TRUE: bytes = b"true"
LITERAL_FALSE: bytes = b"false"

# ── Signed 64-bit integer range ──────────────────────────────
# Python ints are arbitrary-precision, so we must explicitly range-check.
INT64_MIN: int = -(2**63)
INT64_MAX: int = 2**63 - 1

# ── Limits ───────────────────────────────────────────────────
# A length prefix longer than this cannot describe a payload that fits in
# any buffer we could be handed (2**63 has 19 digits).
MAX_LENGTH_DIGITS: int = 19

# Nesting bound for both directions.  Each level costs a couple of Python
# frames, so this stays well under the interpreter's recursion limit.
DEFAULT_MAX_DEPTH: int = 256

DEFAULT_INITIAL_CAPACITY: int = 64
