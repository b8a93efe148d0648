"""Static code -> name lookup tables.

State codes are the two-digit INEGI entity keys (CVE_ENT). Municipal codes
are five digits: the state code followed by the three-digit CVE_MUN.
"""

from __future__ import annotations

import csv
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Tuple

import yaml

from .utils.normalize import normalize_name

NATIONAL = "NACIONAL"

STATE_NAMES: Mapping[str, str] = MappingProxyType(
    {
        "01": "Aguascalientes",
        "02": "Baja California",
        "03": "Baja California Sur",
        "04": "Campeche",
        "05": "Coahuila",
        "06": "Colima",
        "07": "Chiapas",
        "08": "Chihuahua",
        "09": "Ciudad de México",
        "10": "Durango",
        "11": "Guanajuato",
        "12": "Guerrero",
        "13": "Hidalgo",
        "14": "Jalisco",
        "15": "México",
        "16": "Michoacán",
        "17": "Morelos",
        "18": "Nayarit",
        "19": "Nuevo León",
        "20": "Oaxaca",
        "21": "Puebla",
        "22": "Querétaro",
        "23": "Quintana Roo",
        "24": "San Luis Potosí",
        "25": "Sinaloa",
        "26": "Sonora",
        "27": "Tabasco",
        "28": "Tamaulipas",
        "29": "Tlaxcala",
        "30": "Veracruz",
        "31": "Yucatán",
        "32": "Zacatecas",
    }
)

BUNDLED_MUNICIPALITIES = Path(__file__).with_name("municipios.yml")


@dataclass(frozen=True)
class LookupTables:
    """Read-only state and municipality name tables."""

    states: Mapping[str, str]
    municipalities: Mapping[str, Tuple[str, str]]
    _codes_by_name: Mapping[str, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "states", MappingProxyType(dict(self.states)))
        object.__setattr__(self, "municipalities", MappingProxyType(dict(self.municipalities)))
        object.__setattr__(
            self,
            "_codes_by_name",
            MappingProxyType({normalize_name(name): code for code, name in self.states.items()}),
        )

    def state_name(self, state_code: str) -> str:
        return self.states.get(state_code, "")

    def municipality_name(self, code: str) -> str:
        """Return the municipality name, or "" when the code is not catalogued."""
        entry = self.municipalities.get(code)
        return entry[1] if entry else ""

    def state_code_for_name(self, name: str) -> str | None:
        return self._codes_by_name.get(normalize_name(name))

    def state_sort_key(self, name: str) -> tuple[int, str, str]:
        """Sort by state code; names outside the catalog go last, by name."""
        code = self.state_code_for_name(name)
        if code is None:
            return (1, "", normalize_name(name))
        return (0, code, "")


def build_tables(municipalities: Mapping[str, Tuple[str, str]]) -> LookupTables:
    return LookupTables(states=STATE_NAMES, municipalities=municipalities)


def load_municipalities_yaml(path: Path) -> dict[str, Tuple[str, str]]:
    """Load a `{state_code: {mun_code: name}}` YAML document.

    Keys are read as strings; three-digit municipality keys are joined to
    the state code to form the five-digit code.
    """
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"El catálogo de municipios debe ser un mapeo: {path}")
    table: dict[str, Tuple[str, str]] = {}
    for state_code, entries in data.items():
        state_key = f"{int(state_code):02d}"
        for mun_code, name in (entries or {}).items():
            table[f"{state_key}{int(mun_code):03d}"] = (state_key, str(name))
    return table


def load_ageeml(path: Path) -> dict[str, Tuple[str, str]]:
    """Load municipality names from an INEGI AGEEML catalog (TSV, latin-1).

    Only CVE_ENT, CVE_MUN and NOM_MUN are used; rows whose keys are not
    numeric are ignored.
    """
    table: dict[str, Tuple[str, str]] = {}
    with path.open(encoding="latin-1", newline="") as src:
        reader = csv.DictReader(src, delimiter="\t")
        for row in reader:
            state = (row.get("CVE_ENT") or "").strip().strip('"')
            mun = (row.get("CVE_MUN") or "").strip().strip('"')
            name = (row.get("NOM_MUN") or "").strip().strip('"')
            if not (state.isdigit() and mun.isdigit()):
                continue
            state_key = f"{int(state):02d}"
            table[f"{state_key}{int(mun):03d}"] = (state_key, name)
    return table


@lru_cache(maxsize=None)
def load_default_tables() -> LookupTables:
    """Return the bundled tables (built once per process)."""
    return build_tables(load_municipalities_yaml(BUNDLED_MUNICIPALITIES))


def load_tables(catalog_path: str | None) -> LookupTables:
    """Return tables backed by an AGEEML file when given, else the bundled ones."""
    if not catalog_path:
        return load_default_tables()
    path = Path(catalog_path)
    if not path.exists():
        raise FileNotFoundError(f"Catálogo de municipios no encontrado: {path}")
    return build_tables(load_ageeml(path))
