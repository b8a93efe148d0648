"""Text renderers for state, municipal and diff reports.

Every renderer returns a string; rows are sorted by state code (states) or
municipal code (municipalities) so the output is reproducible.
"""

from __future__ import annotations

import csv
import io
import json
from typing import Sequence

from .catalog import LookupTables
from .diff import ReportDiff
from .models import MunicipalRecord, StateReport
from .utils.normalize import compact_name

FORMATS = ("table", "csv", "json", "awk")

CDMX_NAME = "Ciudad de México"
CDMX_SHORT = "CDMX"

_STATE_BORDER = (
    "|----------------------|-----------------|-----------------|"
    "-------------------|---------|-------------|------------|"
)
_STATE_HEADER = (
    "| Estado               | Casos Positivos | Casos Negativos | "
    "Casos Sospechosos | Decesos | Positividad | Incidencia |"
)
_DIFF_BORDER = (
    "|----------------------|-----------------|-----------------|"
    "-------------------|-------------|"
)
_DIFF_HEADER = (
    "| Estado               | Casos Positivos | Casos Negativos | "
    "Casos Sospechosos | Decesos     |"
)
_MUN_BORDER = (
    "|-------|--------------------------------|----------------------|"
    "-----------------|-----------------|-------------------|---------|-------------|"
)
_MUN_HEADER = (
    "| Clave | Municipio                      | Estado               | "
    "Casos Positivos | Casos Negativos | Casos Sospechosos | Decesos | Positividad |"
)
_CSV_HEADER = ["Estado", "Casos Positivos", "Casos Negativos", "Casos Sospechosos", "Decesos"]


def sort_report(report: StateReport, tables: LookupTables) -> StateReport:
    states = sorted(report.states, key=lambda s: tables.state_sort_key(s.name))
    return StateReport(states=tuple(states), national=report.national)


def render_report(report: StateReport, fmt: str, tables: LookupTables) -> str:
    report = sort_report(report, tables)
    if fmt == "csv":
        return render_csv(report)
    if fmt == "json":
        return render_json(report)
    if fmt == "awk":
        return render_awk(report)
    return render_table(report)


def render_table(report: StateReport) -> str:
    lines = [_STATE_BORDER, _STATE_HEADER, _STATE_BORDER]
    for state in report.states:
        lines.append(
            f"| {state.name:<20} | {state.positive:<15d} | {state.negative:<15d} | "
            f"{state.suspect:<17d} | {state.deaths:<7d} | "
            f"{state.test_positivity_rate:<8.4f}    | {state.attack_rate:<8.2f}   |"
        )
    lines.append(_STATE_BORDER)
    lines.append(
        f"| {'TOTAL':<20} | {report.total_positive:<15d} | {report.total_negative:<15d} | "
        f"{report.total_suspect:<17d} | {report.total_deaths:<7d} | "
        f"{report.test_positivity_rate:<8.4f}    | {report.national_attack_rate:<8.4f}   |"
    )
    lines.append(_STATE_BORDER)
    return "\n".join(lines)


def render_csv(report: StateReport) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    writer.writerow(_CSV_HEADER)
    for state in report.states:
        writer.writerow([state.name, state.positive, state.negative, state.suspect, state.deaths])
    return buffer.getvalue().rstrip("\n")


def render_json(report: StateReport) -> str:
    return json.dumps(report.to_snapshot(), indent=2, ensure_ascii=False)


def awk_name(name: str) -> str:
    if name == CDMX_NAME:
        return CDMX_SHORT
    return compact_name(name) or "-"


def render_awk(report: StateReport) -> str:
    return "\n".join(
        f"{awk_name(state.name):<20}\t{state.positive:<15d}\t{state.negative:<15d}\t"
        f"{state.suspect:<17d}\t{state.deaths:<7d}"
        for state in report.states
    )


def _delta_cell(delta: int, current: int) -> str:
    return f"{delta:<5d} ({current})"


def render_diff_table(diff: ReportDiff) -> str:
    lines = [_DIFF_BORDER, _DIFF_HEADER, _DIFF_BORDER]
    for row in diff.states:
        lines.append(
            f"| {row.name:<20} | {_delta_cell(row.positive_delta, row.positive):<15} | "
            f"{_delta_cell(row.negative_delta, row.negative):<15} | "
            f"{_delta_cell(row.suspect_delta, row.suspect):<17} | "
            f"{_delta_cell(row.deaths_delta, row.deaths):<11} |"
        )
    lines.append(_DIFF_BORDER)
    lines.append(
        f"| {'TOTAL':<20} | {diff.positive_delta:<15d} | {diff.negative_delta:<15d} | "
        f"{diff.suspect_delta:<17d} | {diff.deaths_delta:<11d} |"
    )
    lines.append(_DIFF_BORDER)
    return "\n".join(lines)


def render_diff_json(diff: ReportDiff) -> str:
    return json.dumps(diff.as_dict(), indent=2, ensure_ascii=False)


def render_municipal(
    records: Sequence[MunicipalRecord], fmt: str, tables: LookupTables
) -> str:
    records = sorted(records, key=lambda record: record.code)
    if fmt == "csv":
        return render_municipal_csv(records, tables)
    if fmt == "json":
        return render_municipal_json(records, tables)
    if fmt == "awk":
        return render_municipal_awk(records)
    return render_municipal_table(records, tables)


def render_municipal_table(records: Sequence[MunicipalRecord], tables: LookupTables) -> str:
    lines = [_MUN_BORDER, _MUN_HEADER, _MUN_BORDER]
    for record in records:
        lines.append(
            f"| {record.code:<5} | {record.name:<30} | "
            f"{tables.state_name(record.state_code):<20} | {record.positive:<15d} | "
            f"{record.negative:<15d} | {record.suspect:<17d} | {record.deaths:<7d} | "
            f"{record.test_positivity_rate:<8.4f}    |"
        )
    lines.append(_MUN_BORDER)
    return "\n".join(lines)


def render_municipal_csv(records: Sequence[MunicipalRecord], tables: LookupTables) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    writer.writerow(["Clave", "Municipio", *_CSV_HEADER])
    for record in records:
        writer.writerow(
            [
                record.code,
                record.name,
                tables.state_name(record.state_code),
                record.positive,
                record.negative,
                record.suspect,
                record.deaths,
            ]
        )
    return buffer.getvalue().rstrip("\n")


def render_municipal_json(records: Sequence[MunicipalRecord], tables: LookupTables) -> str:
    payload = {
        "municipalities": [
            {**record.model_dump(), "state": tables.state_name(record.state_code)}
            for record in records
        ]
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


def render_municipal_awk(records: Sequence[MunicipalRecord]) -> str:
    return "\n".join(
        f"{record.code}\t{compact_name(record.name) or '-':<30}\t{record.positive:<15d}\t"
        f"{record.negative:<15d}\t{record.suspect:<17d}\t{record.deaths:<7d}"
        for record in records
    )
