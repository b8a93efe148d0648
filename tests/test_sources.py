import json
from datetime import date
from pathlib import Path

import pytest
import requests
import responses
from responses import matchers

from covid19mx.catalog import build_tables
from covid19mx.config import default_config
from covid19mx.errors import HttpClientError, PayloadError, SourceNotFoundError
from covid19mx.http_client import HttpClient, HttpClientConfig
from covid19mx.sources import (
    detect_latest_source,
    fetch_municipal_counts,
    fetch_municipal_report,
    fetch_snapshot,
    fetch_state_report,
    load_snapshot_file,
    parse_state_payload,
    resolve_source,
    snapshot_url,
)

ROWS = [
    ["1", "Aguascalientes", "1353758.409", "01", "24", "243", "74", "0", "1.77"],
    ["9", "Ciudad de México", "9018645.0", "09", "1200", "2300", "800", "90", "13.30"],
    ["33", "NACIONAL", "127792286", "00", "1224", "2543", "874", "90", "0.96"],
]


def _envelope(rows) -> str:
    return json.dumps({"d": json.dumps(rows)})


def _client() -> HttpClient:
    return HttpClient(HttpClientConfig(timeout_sec=5, user_agent="covid19mx-test"))


def test_parse_state_payload_reads_positional_rows() -> None:
    report = parse_state_payload(_envelope(ROWS))
    assert [state.name for state in report.states] == ["Aguascalientes", "Ciudad de México"]
    ags = report.states[0]
    assert (ags.positive, ags.negative, ags.suspect, ags.deaths) == (24, 243, 74, 0)
    assert ags.attack_rate == pytest.approx(1.77)
    assert report.national is not None
    assert report.national_attack_rate == pytest.approx(0.96)


def test_parse_state_payload_without_attack_rate_column() -> None:
    report = parse_state_payload(_envelope([row[:8] for row in ROWS]))
    assert report.states[1].attack_rate == 0.0


@pytest.mark.parametrize(
    "body",
    [
        "not json",
        json.dumps({"x": "[]"}),
        json.dumps({"d": "not json"}),
        json.dumps({"d": json.dumps({"rows": []})}),
        _envelope([["1", 5, "x", "01", "1", "2", "3", "4"]]),
        _envelope([["1", "Colima", "x", "06", "uno", "2", "3", "4"]]),
        _envelope([["1", "Colima", "x", "06", 1, "2", "3", "4"]]),
        _envelope([["1", "Colima", "x", "06", "1", "2", "3", "4", "alta"]]),
        _envelope([["1", "Colima"]]),
        _envelope([["1", "Colima", "x", "06", "-1", "2", "3", "4"]]),
    ],
)
def test_parse_state_payload_rejects_malformed_bodies(body: str) -> None:
    with pytest.raises(PayloadError):
        parse_state_payload(body)


@responses.activate
def test_fetch_state_report_posts_json_request() -> None:
    url = "https://example.com/Log.aspx/Grafica22"
    responses.add(responses.POST, url, body=_envelope(ROWS), status=200)

    report = fetch_state_report(_client(), url)

    assert len(report.states) == 2
    request = responses.calls[0].request
    assert request.headers["Content-Type"] == "application/json; charset=UTF-8"
    assert request.headers["User-Agent"] == "covid19mx-test"


@responses.activate
def test_non_200_response_raises_http_error() -> None:
    url = "https://example.com/Log.aspx/Grafica22"
    responses.add(responses.POST, url, body="Server Error", status=500)

    with pytest.raises(HttpClientError) as excinfo:
        fetch_state_report(_client(), url)
    assert excinfo.value.status_code == 500
    assert len(responses.calls) == 1


@responses.activate
def test_transport_error_raises_http_error() -> None:
    url = "https://example.com/Log.aspx/Grafica22"
    responses.add(responses.POST, url, body=requests.exceptions.ConnectionError("refused"))

    with pytest.raises(HttpClientError):
        fetch_state_report(_client(), url)


@pytest.mark.parametrize(
    ("page", "expected"),
    [
        (b"<script>$.ajax({url: 'Mapa.aspx/Grafica22'})</script>", "source_a_url"),
        (b"<script>$.ajax({url: 'Mapa.aspx/Grafica23'})</script>", "source_b_url"),
    ],
)
@responses.activate
def test_detect_latest_source(page: bytes, expected: str) -> None:
    config = default_config()
    responses.add(responses.GET, config.endpoints.map_page_url, body=page, status=200)

    assert detect_latest_source(_client(), config) == getattr(config.endpoints, expected)


@responses.activate
def test_detect_latest_source_without_known_marker() -> None:
    config = default_config()
    responses.add(responses.GET, config.endpoints.map_page_url, body=b"<html></html>", status=200)

    with pytest.raises(SourceNotFoundError):
        detect_latest_source(_client(), config)


def test_snapshot_url_format() -> None:
    assert (
        snapshot_url("https://example.com/data/", date(2020, 4, 19))
        == "https://example.com/data/2020-04-19.json"
    )


@responses.activate
def test_fetch_snapshot_reads_states_document() -> None:
    payload = {"states": [{"name": "Colima", "positive": 3, "negative": 9, "suspect": 1, "deaths": 0}]}
    responses.add(
        responses.GET, "https://example.com/data/2020-04-19.json", json=payload, status=200
    )

    report = fetch_snapshot(_client(), "https://example.com/data", date(2020, 4, 19))

    assert report.states[0].name == "Colima"
    assert report.states[0].attack_rate == 0.0


def test_resolve_source_reads_local_snapshot(tmp_path: Path) -> None:
    path = tmp_path / "2020-04-19.json"
    path.write_text(
        json.dumps({"states": [{"name": "Colima", "positive": 3, "negative": 9, "suspect": 1, "deaths": 0}]}),
        encoding="utf-8",
    )

    report = resolve_source(_client(), default_config(), str(path))

    assert report.total_positive == 3


@responses.activate
def test_resolve_source_defaults_to_attack_rate_endpoint() -> None:
    config = default_config()
    responses.add(responses.POST, config.endpoints.attack_rate_url, body=_envelope(ROWS), status=200)

    report = resolve_source(_client(), config, "")

    assert report.national_attack_rate == pytest.approx(0.96)


@responses.activate
def test_resolve_source_auto_detects_endpoint() -> None:
    config = default_config()
    responses.add(responses.GET, config.endpoints.map_page_url, body=b"Grafica23", status=200)
    responses.add(responses.POST, config.endpoints.source_b_url, body=_envelope(ROWS), status=200)

    report = resolve_source(_client(), config, "auto")

    assert len(report.states) == 2


@responses.activate
def test_fetch_municipal_counts_sends_category_form_field() -> None:
    url = "https://example.com/getInfoMun.php"
    responses.add(
        responses.POST,
        url,
        body="arr['map']=1;arr['06002']=12;arr['06007']= new Array();$('body');",
        status=200,
        match=[matchers.urlencoded_params_matcher({"sPatType": "Confirmados"})],
    )

    assert fetch_municipal_counts(_client(), url, "Confirmados") == {"06002": 12}


@responses.activate
def test_fetch_municipal_report_fetches_four_categories() -> None:
    config = default_config()
    url = config.endpoints.municipal_url
    bodies = {
        "Confirmados": "a['06002']=12;a['06007']=3;a['99001']=1;",
        "Negativos": "a['06002']=40;",
        "Sospechosos": "a['06007']=5;",
        "Defunciones": "a['06002']=2;",
    }
    for category, body in bodies.items():
        responses.add(
            responses.POST,
            url,
            body=body,
            status=200,
            match=[matchers.urlencoded_params_matcher({"sPatType": category})],
        )
    tables = build_tables({"06002": ("06", "Colima"), "06007": ("06", "Manzanillo")})

    report = fetch_municipal_report(_client(), config, tables)

    assert len(responses.calls) == 4
    colima = report.municipalities[0]
    assert (colima.code, colima.name) == ("06002", "Colima")
    assert (colima.positive, colima.negative, colima.suspect, colima.deaths) == (12, 40, 0, 2)
    assert report.municipalities[-1].name == ""
    states = dict(report.states)
    assert states["06"].positive == 15
    assert states["06"].suspect == 5
    assert states["99"].positive == 1


def test_state_counts_use_strict_base10_integers() -> None:
    for count in (" 24 ", "1_000", "٢٤", "2.0"):
        with pytest.raises(PayloadError):
            parse_state_payload(_envelope([["1", "Colima", "x", "06", count, "2", "3", "4"]]))
    report = parse_state_payload(_envelope([["1", "Colima", "x", "06", "+24", "2", "3", "4"]]))
    assert report.states[0].positive == 24


def test_load_snapshot_file_wraps_os_errors(tmp_path: Path) -> None:
    path = tmp_path / "snap.json"
    path.mkdir()

    with pytest.raises(PayloadError):
        load_snapshot_file(path)
