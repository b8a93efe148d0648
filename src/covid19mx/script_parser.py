"""Scanner for the municipal endpoint's embedded script blob.

The endpoint answers with a JavaScript fragment holding assignments such as
`arrMun['01001']=5;`. Only the quoted key and the value between `=` and `;`
matter:

1. seek the opening quote of the key
2. seek the closing quote; the key `body` ends the scan
3. seek `=`
4. seek `;`; ` new Array()` and non-integer values are dropped

Quotes are not escaped, and a trailing fragment without `;` yields nothing.
"""

from __future__ import annotations

import logging
import re

SENTINEL_KEY = "body"
EMPTY_ARRAY = " new Array()"

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")

logger = logging.getLogger("covid19mx.parser")


def parse_base10(expr: str) -> int:
    """Parse an ASCII base-10 integer with an optional sign; no whitespace or underscores."""
    if not _INTEGER_RE.fullmatch(expr):
        raise ValueError(f"not a base-10 integer: {expr!r}")
    return int(expr)


def parse_script(text: str) -> dict[str, int]:
    """Extract `'key'=<int>;` pairs from `text`; the last occurrence of a key wins."""
    values: dict[str, int] = {}
    pos = 0
    while True:
        key_start = text.find("'", pos)
        if key_start == -1:
            break
        key_end = text.find("'", key_start + 1)
        if key_end == -1:
            break
        key = text[key_start + 1 : key_end]
        if key == SENTINEL_KEY:
            break
        value_start = text.find("=", key_end + 1)
        if value_start == -1:
            break
        value_end = text.find(";", value_start + 1)
        if value_end == -1:
            break
        pos = value_end + 1

        expr = text[value_start + 1 : value_end]
        if expr == EMPTY_ARRAY:
            continue
        try:
            values[key] = parse_base10(expr)
        except ValueError:
            logger.debug("Skipping non-numeric entry %r=%r", key, expr[:40])
    return values
