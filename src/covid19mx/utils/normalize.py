"""Normalization helpers for state and municipality name matching."""

from __future__ import annotations

import re
import unicodedata


def normalize_name(value: str) -> str:
    """Normalize a place name for soft matching (trim, drop accents, uppercase)."""
    decomposed = unicodedata.normalize("NFKD", value)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return re.sub(r"\s+", " ", stripped.strip()).upper()


def compact_name(value: str) -> str:
    """Remove all whitespace from a name (awk-friendly output)."""
    return "".join(value.split())
