"""Case record models.

Data contract (JSON, mirrors the dated snapshot archive):
- states: list of {name, positive, negative, suspect, deaths, attack_rate}
- the virtual NACIONAL row, when present, is stored last in the list
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import Any, Iterable, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError

from .catalog import NATIONAL
from .errors import PayloadError


def positivity_rate(positive: int, negative: int) -> float:
    """Positive / (positive + negative); 0.0 when nobody was tested."""
    tested = positive + negative
    if tested == 0:
        return 0.0
    return positive / tested


class StateRecord(BaseModel):
    """Cumulative counts for one state (or the NACIONAL aggregate)."""

    name: str
    positive: int = Field(0, ge=0)
    negative: int = Field(0, ge=0)
    suspect: int = Field(0, ge=0)
    deaths: int = Field(0, ge=0)
    attack_rate: float = 0.0

    @property
    def is_national(self) -> bool:
        return self.name == NATIONAL

    @property
    def test_positivity_rate(self) -> float:
        return positivity_rate(self.positive, self.negative)


class MunicipalRecord(BaseModel):
    """Cumulative counts for one municipality."""

    code: str = Field(..., pattern=r"^\d{5}$")
    name: str = ""
    positive: int = Field(0, ge=0)
    negative: int = Field(0, ge=0)
    suspect: int = Field(0, ge=0)
    deaths: int = Field(0, ge=0)

    @property
    def state_code(self) -> str:
        return self.code[:2]

    @property
    def test_positivity_rate(self) -> float:
        return positivity_rate(self.positive, self.negative)


@dataclass(frozen=True)
class StateReport:
    """Per-state rows plus the optional NACIONAL row.

    Totals are computed from `states` on first access and kept for the life
    of the instance; build a new report to recompute.
    """

    states: Tuple[StateRecord, ...]
    national: Optional[StateRecord] = None

    @classmethod
    def from_states(cls, rows: Iterable[StateRecord]) -> "StateReport":
        """Split the NACIONAL row off a mixed list of rows."""
        states: list[StateRecord] = []
        national: StateRecord | None = None
        for row in rows:
            if row.is_national:
                national = row
            else:
                states.append(row)
        return cls(states=tuple(states), national=national)

    @classmethod
    def from_snapshot(cls, payload: Any) -> "StateReport":
        """Build a report from a `{"states": [...]}` document."""
        if not isinstance(payload, dict) or not isinstance(payload.get("states"), list):
            raise PayloadError('Snapshot must be an object with a "states" list.')
        try:
            rows = [StateRecord.model_validate(item) for item in payload["states"]]
        except ValidationError as exc:
            raise PayloadError(f"Invalid snapshot row: {exc}") from exc
        return cls.from_states(rows)

    def to_snapshot(self) -> dict[str, Any]:
        rows = [state.model_dump() for state in self.states]
        if self.national is not None:
            rows.append(self.national.model_dump())
        return {"states": rows}

    @cached_property
    def total_positive(self) -> int:
        return sum(state.positive for state in self.states)

    @cached_property
    def total_negative(self) -> int:
        return sum(state.negative for state in self.states)

    @cached_property
    def total_suspect(self) -> int:
        return sum(state.suspect for state in self.states)

    @cached_property
    def total_deaths(self) -> int:
        return sum(state.deaths for state in self.states)

    @property
    def test_positivity_rate(self) -> float:
        return positivity_rate(self.total_positive, self.total_negative)

    @property
    def national_attack_rate(self) -> float:
        return self.national.attack_rate if self.national is not None else 0.0
