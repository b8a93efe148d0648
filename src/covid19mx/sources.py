"""Fetch state and municipal case data.

Every function raises on the first failure (HttpClientError, PayloadError,
SourceNotFoundError); nothing is retried and no partial result is returned.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import date
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .aggregator import MunicipalReport
from .catalog import LookupTables
from .config import Config
from .errors import PayloadError, SourceNotFoundError
from .http_client import HttpClient, HttpClientConfig
from .models import StateRecord, StateReport
from .script_parser import parse_base10, parse_script

logger = logging.getLogger("covid19mx.sources")

# Positional layout of a state row, e.g.
# ["1", "Aguascalientes", "1353758.409", "01", "24", "243", "74", "0", "1.77"]
ROW_NAME = 1
ROW_POSITIVE = 4
ROW_NEGATIVE = 5
ROW_SUSPECT = 6
ROW_DEATHS = 7
ROW_ATTACK_RATE = 8

AUTO_SOURCE = "auto"

_MUNICIPAL_CODE_RE = re.compile(r"\d{5}")


def build_client(config: Config, logger: logging.Logger | None = None) -> HttpClient:
    return HttpClient(
        HttpClientConfig(
            timeout_sec=config.request_timeout_sec,
            user_agent=config.user_agent,
        ),
        logger=logger,
    )


def parse_state_payload(body: bytes | str) -> StateReport:
    """Decode the `{"d": "<json array>"}` envelope into a StateReport."""
    envelope = _loads(body, "state envelope")
    if not isinstance(envelope, dict) or not isinstance(envelope.get("d"), str):
        raise PayloadError('State payload must be an object with a string "d" field.')
    rows = _loads(envelope["d"], "state rows")
    if not isinstance(rows, list):
        raise PayloadError("State rows must be a JSON array.")
    return StateReport.from_states(_parse_state_row(row, idx) for idx, row in enumerate(rows))


def _parse_state_row(row: Any, idx: int) -> StateRecord:
    if not isinstance(row, list) or len(row) <= ROW_DEATHS:
        raise PayloadError(f"State row {idx} has an unexpected shape: {row!r}")
    name = row[ROW_NAME]
    if not isinstance(name, str):
        raise PayloadError(f"State row {idx}: name is not a string: {name!r}")
    attack_rate = 0.0
    if len(row) > ROW_ATTACK_RATE:
        attack_rate = _field(row, ROW_ATTACK_RATE, idx, float)
    try:
        return StateRecord(
            name=name,
            positive=_field(row, ROW_POSITIVE, idx, parse_base10),
            negative=_field(row, ROW_NEGATIVE, idx, parse_base10),
            suspect=_field(row, ROW_SUSPECT, idx, parse_base10),
            deaths=_field(row, ROW_DEATHS, idx, parse_base10),
            attack_rate=attack_rate,
        )
    except ValidationError as exc:
        raise PayloadError(f"State row {idx} ({name}): {exc}") from exc


def _field(row: list[Any], pos: int, idx: int, cast):
    value = row[pos]
    if not isinstance(value, str):
        raise PayloadError(f"State row {idx}: field {pos} is not a string: {value!r}")
    try:
        return cast(value)
    except ValueError as exc:
        raise PayloadError(f"State row {idx}: field {pos} is not a number: {value!r}") from exc


def _loads(raw: bytes | str, what: str) -> Any:
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise PayloadError(f"Invalid JSON in {what}: {exc}") from exc


def detect_latest_source(client: HttpClient, config: Config) -> str:
    """Pick the state endpoint the SINAVE map page currently references."""
    body = client.get_bytes(config.endpoints.map_page_url)
    if b"Grafica22" in body:
        return config.endpoints.source_a_url
    if b"Grafica23" in body:
        return config.endpoints.source_b_url
    raise SourceNotFoundError()


def fetch_state_report(client: HttpClient, url: str) -> StateReport:
    report = parse_state_payload(client.post_json(url))
    logger.info("Obtenidos %s estados desde %s", len(report.states), url)
    return report


def parse_snapshot(body: bytes | str) -> StateReport:
    return StateReport.from_snapshot(_loads(body, "snapshot"))


def load_snapshot_file(path: Path) -> StateReport:
    """Read a local `{"states": [...]}` snapshot."""
    try:
        body = path.read_bytes()
    except OSError as exc:
        raise PayloadError(f"No se pudo leer {path}: {exc}") from exc
    return parse_snapshot(body)


def snapshot_url(base_url: str, day: date) -> str:
    return f"{base_url.rstrip('/')}/{day.isoformat()}.json"


def fetch_snapshot(client: HttpClient, base_url: str, day: date) -> StateReport:
    """Fetch the archived snapshot for `day`."""
    url = snapshot_url(base_url, day)
    report = parse_snapshot(client.get_bytes(url))
    logger.info("Snapshot %s: %s estados", day.isoformat(), len(report.states))
    return report


def is_local_snapshot(source: str) -> bool:
    return ".json" in source and not source.startswith(("http://", "https://"))


def resolve_source(client: HttpClient, config: Config, source: str) -> StateReport:
    """Load the current report from the default endpoint, detection, a URL or a file."""
    if is_local_snapshot(source):
        return load_snapshot_file(Path(source))
    if not source:
        url = config.endpoints.attack_rate_url
    elif source == AUTO_SOURCE:
        url = detect_latest_source(client, config)
    else:
        url = source
    return fetch_state_report(client, url)


def fetch_municipal_counts(client: HttpClient, url: str, category: str) -> dict[str, int]:
    """Fetch the script blob for one case category and scan it."""
    body = client.post_form(url, {"sPatType": category})
    parsed = parse_script(body.decode("utf-8", errors="replace"))
    counts = {key: value for key, value in parsed.items() if _MUNICIPAL_CODE_RE.fullmatch(key)}
    if len(counts) != len(parsed):
        logger.debug("%s: %s claves no municipales descartadas", category, len(parsed) - len(counts))
    return counts


def fetch_municipal_report(
    client: HttpClient, config: Config, tables: LookupTables
) -> MunicipalReport:
    """Fetch the four categories in turn and aggregate them."""
    url = config.endpoints.municipal_url
    categories = config.municipal_categories
    positive = fetch_municipal_counts(client, url, categories.positive)
    negative = fetch_municipal_counts(client, url, categories.negative)
    suspect = fetch_municipal_counts(client, url, categories.suspect)
    deaths = fetch_municipal_counts(client, url, categories.deaths)
    logger.info(
        "Municipios: %s positivos, %s negativos, %s sospechosos, %s decesos",
        len(positive),
        len(negative),
        len(suspect),
        len(deaths),
    )
    return MunicipalReport.build(positive, negative, suspect, deaths, tables)
