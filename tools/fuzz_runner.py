#!/usr/bin/env python3
# tools/fuzz_runner.py
#
# Randomized round-trip and mutation fuzzing for tnetcodec.
#
# Generates two fuzz categories:
#   A) random value trees -> dumps -> loads, compared structurally
#   B) valid encodings with random byte flips, truncations and splices
#      -> loads, which must either succeed or raise ParseError
#
# Any failure prints a minimal repro payload and exits non-zero.

import os, sys, json, base64, random
from typing import Any, Dict

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT)

from tnetcodec import INT64_MAX, INT64_MIN, ParseError, dumps, iter_frames, loads

SEED = int(os.environ.get("TNETCODEC_SEED", "4242"))
ROUNDS = int(os.environ.get("TNETCODEC_FUZZ_ROUNDS", "5000"))
MAX_GEN_DEPTH = int(os.environ.get("TNETCODEC_GEN_MAX_DEPTH", "6"))

random.seed(SEED)

def b64(b: bytes) -> str:
    return base64.b64encode(b).decode("ascii")

def fail(label: str, ctx: Dict[str, Any]) -> None:
    print("FAIL:", label)
    print("CTX:", json.dumps(ctx)[:4000])
    raise SystemExit(1)

# --- generators ---

def rand_bytes(nmax: int) -> bytes:
    # Bias towards bytes that look like grammar so payloads get tricky.
    alphabet = b"0123456789:,#}]~!" + bytes(range(256))
    return bytes(random.choice(alphabet) for _ in range(random.randint(0, nmax)))

def rand_scalar() -> Any:
    r = random.random()
    if r < 0.10:
        return None
    if r < 0.20:
        return random.random() < 0.5
    if r < 0.45:
        return random.choice([0, -1, INT64_MIN, INT64_MAX, random.randint(INT64_MIN, INT64_MAX)])
    if r < 0.60:
        return random.choice([0.0, -0.5, 1e300, 5e-324, random.uniform(-1e9, 1e9)])
    return rand_bytes(24)

def rand_key() -> Any:
    # Dict keys must be hashable on the way back in.
    return rand_scalar()

def rand_tree(depth: int = 0) -> Any:
    if depth >= MAX_GEN_DEPTH or random.random() < 0.4:
        return rand_scalar()
    if random.random() < 0.5:
        return [rand_tree(depth + 1) for _ in range(random.randint(0, 5))]
    return {rand_key(): rand_tree(depth + 1) for _ in range(random.randint(0, 5))}

def mutate(data: bytes) -> bytes:
    b = bytearray(data)
    r = random.random()
    if r < 0.4 and b:
        b[random.randrange(len(b))] = random.randrange(256)
    elif r < 0.7:
        del b[random.randrange(len(b) + 1):]
    else:
        pos = random.randrange(len(b) + 1)
        b[pos:pos] = rand_bytes(6)
    return bytes(b)

def same(a: Any, b: Any) -> bool:
    # NaN is the only value that does not equal itself; the generators
    # never produce it, so plain equality plus exact types is enough.
    if type(a) is not type(b):
        return False
    if isinstance(a, list):
        return len(a) == len(b) and all(same(x, y) for x, y in zip(a, b))
    if isinstance(a, dict):
        return a.keys() == b.keys() and all(same(a[k], b[k]) for k in a)
    return a == b

def main() -> int:
    for i in range(ROUNDS):
        tree = rand_tree()
        data = dumps(tree)

        # A) round-trip
        back = loads(data)
        if not same(tree, back):
            fail("A round-trip", {"round": i, "input_b64": b64(data)})

        # B) mutation: never anything but ParseError
        bad = mutate(data)
        try:
            loads(bad)
            list(iter_frames(bad))
        except ParseError:
            pass
        except Exception as e:
            fail("B mutation raised {}: {}".format(type(e).__name__, e),
                 {"round": i, "input_b64": b64(bad)})

    print(f"OK: fuzz rounds={ROUNDS} seed={SEED} (no failures)")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
