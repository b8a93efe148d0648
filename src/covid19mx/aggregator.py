"""Merge per-category municipal counts and roll them up by state."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Tuple

from .catalog import LookupTables
from .models import MunicipalRecord, StateRecord

CATEGORIES = ("positive", "negative", "suspect", "deaths")

# Filter values accepted for the municipal view besides a two-digit state code.
ALL_MUNICIPALITIES = ("*", "all")
STATES_ROLLUP = "states"


def merge_categories(
    positive: Mapping[str, int],
    negative: Mapping[str, int],
    suspect: Mapping[str, int],
    deaths: Mapping[str, int],
    tables: LookupTables,
) -> dict[str, MunicipalRecord]:
    """Combine four code -> count mappings into one record per municipality.

    A code missing from a category counts zero for that category. Codes the
    catalog does not know keep an empty name.
    """
    counts: dict[str, dict[str, int]] = {}
    for category, mapping in zip(CATEGORIES, (positive, negative, suspect, deaths)):
        for code, value in mapping.items():
            counts.setdefault(code, dict.fromkeys(CATEGORIES, 0))[category] = value
    return {
        code: MunicipalRecord(code=code, name=tables.municipality_name(code), **values)
        for code, values in counts.items()
    }


def rollup_states(
    municipalities: Mapping[str, MunicipalRecord],
    tables: LookupTables,
) -> dict[str, StateRecord]:
    """Sum municipality records into one record per two-digit state code."""
    totals: dict[str, dict[str, int]] = {}
    for record in municipalities.values():
        bucket = totals.setdefault(record.state_code, dict.fromkeys(CATEGORIES, 0))
        for category in CATEGORIES:
            bucket[category] += getattr(record, category)
    return {
        state_code: StateRecord(name=tables.state_name(state_code), **values)
        for state_code, values in totals.items()
    }


@dataclass(frozen=True)
class MunicipalReport:
    """Municipal records and their state rollups, both sorted by code."""

    municipalities: Tuple[MunicipalRecord, ...]
    states: Tuple[Tuple[str, StateRecord], ...]

    @classmethod
    def build(
        cls,
        positive: Mapping[str, int],
        negative: Mapping[str, int],
        suspect: Mapping[str, int],
        deaths: Mapping[str, int],
        tables: LookupTables,
    ) -> "MunicipalReport":
        merged = merge_categories(positive, negative, suspect, deaths, tables)
        rolled = rollup_states(merged, tables)
        return cls(
            municipalities=tuple(merged[code] for code in sorted(merged)),
            states=tuple((code, rolled[code]) for code in sorted(rolled)),
        )


def filter_municipalities(
    records: Iterable[MunicipalRecord], selector: str
) -> list[MunicipalRecord]:
    """Select municipalities by two-digit state code, or all of them for `*`/`all`."""
    selector = selector.strip().lower()
    if selector in ALL_MUNICIPALITIES:
        return list(records)
    if len(selector) == 2 and selector.isdigit():
        return [record for record in records if record.state_code == selector]
    raise ValueError(
        f"Filtro de municipio inválido: {selector!r} (use NN, '*', 'all' o 'states')."
    )
