"""Schema fingerprinting for change detection.

The hash must agree with the one the Hosby backend computes, so both the
serialization and the arithmetic follow JavaScript semantics: keys sorted
by UTF-16 code units and then laid out the way a JS object enumerates them
(array-index keys first, in numeric order), compact separators, integral
floats written without a fraction, and a djb2-style rolling hash over
UTF-16 code units where the shift wraps like a JavaScript int32.
Not a security hash.
"""

from __future__ import annotations

import json
import re
from typing import Any

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"
_INDEX_KEY = re.compile(r"0|[1-9][0-9]*")
_MAX_INDEX = 2**32 - 2


def _utf16_key(key: str) -> bytes:
    return key.encode("utf-16-be", errors="surrogatepass")


def _is_index(key: str) -> bool:
    return _INDEX_KEY.fullmatch(key) is not None and int(key) <= _MAX_INDEX


def js_key_order(keys: list[str]) -> list[str]:
    """Order *keys* as ``Object.keys(sorted)`` would after a JS ``.sort()``."""
    ordered = sorted(keys, key=_utf16_key)
    indices = sorted((k for k in ordered if _is_index(k)), key=int)
    return indices + [k for k in ordered if not _is_index(k)]


def _normalize(value: Any) -> Any:
    if isinstance(value, dict):
        items = {str(k): v for k, v in value.items()}
        return {k: _normalize(items[k]) for k in js_key_order(list(items))}
    if isinstance(value, (list, tuple)):
        return [_normalize(v) for v in value]
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def stable_json(value: Any) -> str:
    """Compact JSON with object keys in sorted JavaScript order at every depth."""
    return json.dumps(_normalize(value), separators=(",", ":"), ensure_ascii=False)


def _to_int32(n: int) -> int:
    n &= 0xFFFFFFFF
    return n - 0x1_0000_0000 if n & 0x8000_0000 else n


def _utf16_units(text: str) -> list[int]:
    data = text.encode("utf-16-le", errors="surrogatepass")
    return [int.from_bytes(data[i:i + 2], "little") for i in range(0, len(data), 2)]


def _base36(n: int) -> str:
    if n == 0:
        return "0"
    digits = []
    while n:
        n, rem = divmod(n, 36)
        digits.append(_DIGITS[rem])
    return "".join(reversed(digits))


def schema_hash(document: Any) -> str:
    """Fingerprint of *document*, independent of object key order."""
    h = 5381
    for unit in _utf16_units(stable_json(document)):
        # only the shift wraps to 32 bits; the sum itself is not truncated
        h = _to_int32(_to_int32(h) << 5) + h + unit
    return _base36(h & 0x7FFFFFFF)
