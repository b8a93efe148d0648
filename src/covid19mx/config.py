"""Configuration model and helpers.

Data contract:
- endpoints.map_page_url: SINAVE map page, scanned to detect the live source
- endpoints.source_a_url / source_b_url: candidate state data endpoints
- endpoints.attack_rate_url: state endpoint that also reports attack rate
- endpoints.municipal_url: form endpoint returning the municipal script blob
- endpoints.snapshots_url: base URL of the dated <YYYY-MM-DD>.json archive
- user_agent: User-Agent header for HTTP requests
- request_timeout_sec: timeout in seconds for HTTP requests
- municipal_categories: sPatType form value for each case category
- municipal_catalog_path: optional INEGI AGEEML TSV with municipality names
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field


class Endpoints(BaseModel):
    """Remote endpoints queried by the fetch layer."""

    map_page_url: str
    source_a_url: str
    source_b_url: str
    attack_rate_url: str
    municipal_url: str
    snapshots_url: str


class MunicipalCategories(BaseModel):
    """Form values accepted by the municipal endpoint."""

    positive: str
    negative: str
    suspect: str
    deaths: str


class Config(BaseModel):
    """Root configuration model for covid19mx."""

    endpoints: Endpoints
    user_agent: str
    request_timeout_sec: int = Field(..., ge=1)
    municipal_categories: MunicipalCategories
    municipal_catalog_path: Optional[str] = None


def default_config() -> Config:
    """Return default configuration values."""
    return Config(
        endpoints=Endpoints(
            map_page_url="https://covid19.sinave.gob.mx/mapa.aspx",
            source_a_url="https://covid19.sinave.gob.mx/Mapa.aspx/Grafica22",
            source_b_url="https://covid19.sinave.gob.mx/Mapa.aspx/Grafica23",
            attack_rate_url="https://covid19.sinave.gob.mx/Log.aspx/Grafica22",
            municipal_url="https://coronavirus.gob.mx/fHDMap/info/getInfoMun.php",
            snapshots_url="https://wallyqs.github.io/covid19mx/data/",
        ),
        user_agent="covid19mx/0.4.0",
        request_timeout_sec=30,
        municipal_categories=MunicipalCategories(
            positive="Confirmados",
            negative="Negativos",
            suspect="Sospechosos",
            deaths="Defunciones",
        ),
    )


def load_config(path: Path) -> Config:
    """Load and validate config.yml from disk."""
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    return Config.model_validate(data)


def save_config(config: Config, path: Path) -> None:
    """Save config.yml to disk."""
    payload = config.model_dump()
    path.write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")


def resolve_config(path: Path) -> Config:
    """Load config.yml when present, falling back to the defaults."""
    if not path.exists():
        return default_config()
    return load_config(path)
