"""Day-over-day differences between two state reports."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .catalog import LookupTables
from .models import StateRecord, StateReport


@dataclass(frozen=True)
class StateDiff:
    """Current counts of a state and their change since the previous report."""

    name: str
    positive: int
    negative: int
    suspect: int
    deaths: int
    positive_delta: int
    negative_delta: int
    suspect_delta: int
    deaths_delta: int

    def as_dict(self) -> dict[str, int | str]:
        return {
            "name": self.name,
            "positive": self.positive,
            "negative": self.negative,
            "suspect": self.suspect,
            "deaths": self.deaths,
            "positive_delta": self.positive_delta,
            "negative_delta": self.negative_delta,
            "suspect_delta": self.suspect_delta,
            "deaths_delta": self.deaths_delta,
        }


@dataclass(frozen=True)
class ReportDiff:
    states: Tuple[StateDiff, ...]
    positive_delta: int
    negative_delta: int
    suspect_delta: int
    deaths_delta: int

    def as_dict(self) -> dict:
        return {
            "states": [state.as_dict() for state in self.states],
            "total": {
                "positive_delta": self.positive_delta,
                "negative_delta": self.negative_delta,
                "suspect_delta": self.suspect_delta,
                "deaths_delta": self.deaths_delta,
            },
        }


def diff_reports(current: StateReport, previous: StateReport, tables: LookupTables) -> ReportDiff:
    """Compare reports state by state (matched by name, absent states count zero)."""
    before = {state.name: state for state in previous.states}
    rows = []
    for state in sorted(current.states, key=lambda s: tables.state_sort_key(s.name)):
        old = before.get(state.name) or StateRecord(name=state.name)
        rows.append(
            StateDiff(
                name=state.name,
                positive=state.positive,
                negative=state.negative,
                suspect=state.suspect,
                deaths=state.deaths,
                positive_delta=state.positive - old.positive,
                negative_delta=state.negative - old.negative,
                suspect_delta=state.suspect - old.suspect,
                deaths_delta=state.deaths - old.deaths,
            )
        )
    return ReportDiff(
        states=tuple(rows),
        positive_delta=current.total_positive - previous.total_positive,
        negative_delta=current.total_negative - previous.total_negative,
        suspect_delta=current.total_suspect - previous.total_suspect,
        deaths_delta=current.total_deaths - previous.total_deaths,
    )
