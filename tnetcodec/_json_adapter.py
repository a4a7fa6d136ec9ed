"""JSON bridge for the command-line tool.

JSON and tnetstring disagree in two places:

    JSON string   → tnetstring ',' payload (UTF-8 bytes)
    tnetstring ',' → JSON string, decoded as UTF-8 with undecodable bytes
                     shown as backslash escapes

and JSON object keys are always strings, while tnetstring dict keys may be
any scalar.  Non-string keys are stringified the way json.dumps would.
JSON integers outside int64 are rejected at parse time, before the
renderer ever sees them.
"""

from __future__ import annotations

import json
from typing import Any

from ._constants import INT64_MAX, INT64_MIN
from ._errors import ERR_HOOK_FAILURE, RenderError


def _intercept_int(s: str) -> int:
    """Called by json.loads for integer-shaped number tokens.

    The error message includes the raw token for debuggability.
    """
    val = int(s)
    if val < INT64_MIN or val > INT64_MAX:
        raise RenderError(ERR_HOOK_FAILURE, "integer overflow: {}".format(s))
    return val


def json_to_value(raw: bytes) -> Any:
    """Parse raw UTF-8 JSON bytes into values the renderer accepts.

    Raises json.JSONDecodeError (a ValueError) on malformed JSON and
    UnicodeDecodeError on non-UTF-8 input.
    """
    return json.loads(raw.decode("utf-8"), parse_int=_intercept_int)


def value_to_json(val: Any, encoding: str = "utf-8") -> Any:
    """Convert a parsed tnetstring value into something json.dumps accepts."""
    if isinstance(val, (bytes, bytearray)):
        return bytes(val).decode(encoding, errors="backslashreplace")

    if isinstance(val, list):
        return [value_to_json(item, encoding) for item in val]

    if isinstance(val, dict):
        out = {}
        for k, v in val.items():
            if isinstance(k, (bytes, bytearray)):
                k = bytes(k).decode(encoding, errors="backslashreplace")
            elif k is not None and not isinstance(k, (str, int, float)):
                k = repr(k)
            out[k] = value_to_json(v, encoding)
        return out

    # None, bool, int and float map straight across.
    return val


def dumps_json_line(val: Any, encoding: str = "utf-8") -> str:
    """Render one parsed value as a single line of JSON."""
    return json.dumps(value_to_json(val, encoding), ensure_ascii=False)
