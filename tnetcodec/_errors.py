"""tnetstring error codes and exception classes.

Every failure raised by the codec carries a ``.code`` (one of the ERR_*
strings below) and, where it makes sense, the byte ``.offset`` at which the
problem was detected.  Conformance vectors compare against the code only.
"""

from __future__ import annotations

from typing import Optional

# ── Parse error codes ────────────────────────────────────────
# The names are grep-friendly for cross-language tests.

ERR_MALFORMED_LENGTH: str = "ERR_MALFORMED_LENGTH"    # bad or absurd length prefix
ERR_MISSING_SEPARATOR: str = "ERR_MISSING_SEPARATOR"  # no ':' after the digits
ERR_TRUNCATED: str = "ERR_TRUNCATED"                  # buffer ends early
ERR_UNKNOWN_TAG: str = "ERR_UNKNOWN_TAG"              # tag byte not in , # } ] ~ !
ERR_INVALID_NUMBER: str = "ERR_INVALID_NUMBER"        # '#' payload is not a number
ERR_INVALID_BOOL: str = "ERR_INVALID_BOOL"            # '!' payload not true/false
ERR_INVALID_NULL: str = "ERR_INVALID_NULL"            # '~' with a payload
ERR_CONTAINER_OVERRUN: str = "ERR_CONTAINER_OVERRUN"  # child crosses its parent
ERR_DANGLING_KEY: str = "ERR_DANGLING_KEY"            # dict key without a value
ERR_TRAILING_DATA: str = "ERR_TRAILING_DATA"          # bytes left after loads()

# ── Render error codes ───────────────────────────────────────
ERR_UNSUPPORTED_TYPE: str = "ERR_UNSUPPORTED_TYPE"    # hooks could not classify

# ── Shared ───────────────────────────────────────────────────
ERR_DEPTH_LIMIT: str = "ERR_DEPTH_LIMIT"              # nesting exceeds max_depth
ERR_HOOK_FAILURE: str = "ERR_HOOK_FAILURE"            # a host hook raised
ERR_OUT_OF_MEMORY: str = "ERR_OUT_OF_MEMORY"          # output buffer cannot grow


class TNetStringError(Exception):
    """Base class for every error the codec raises.

    The `.code` attribute is one of the ERR_* strings above and is what
    conformance tests compare against.  `.offset` is the byte position in
    the input (parse) or None when there is no meaningful position.
    """

    def __init__(self, code: str, msg: str = "",
                 offset: Optional[int] = None) -> None:
        text = msg or code
        if offset is not None:
            text = "{} (at offset {})".format(text, offset)
        super().__init__(text)
        self.code = code
        self.offset = offset


class ParseError(TNetStringError, ValueError):
    """Malformed input.  Never accompanied by a partial value."""


class RenderError(TNetStringError, TypeError):
    """A value graph that cannot be rendered.  No partial output is returned."""


class OutOfMemory(TNetStringError, MemoryError):
    """The output buffer could not grow.  Fatal for the render in progress."""

    def __init__(self, msg: str = "") -> None:
        super().__init__(ERR_OUT_OF_MEMORY, msg)
