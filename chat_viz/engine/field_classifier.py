"""Field role classification from a single probe record.

Only the first normalized record is inspected. A dataset whose later records
change type for the same field keeps the first record's classification.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Union

_DECIMAL_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")


@dataclass(frozen=True)
class Categorical:
    text: str


@dataclass(frozen=True)
class Numeric:
    number: float


FieldValue = Union[Categorical, Numeric]


@dataclass(frozen=True)
class FieldClassification:
    categorical: Tuple[str, ...]
    numeric: Tuple[str, ...]
    probes: Dict[str, FieldValue] = field(default_factory=dict)

    @property
    def fields(self) -> Tuple[str, ...]:
        return tuple(self.probes.keys())

    def is_numeric(self, name: str) -> bool:
        return isinstance(self.probes.get(name), Numeric)


def probe_value(value: Any) -> FieldValue:
    """Tag one scalar as numeric-like or categorical-like."""
    if isinstance(value, bool):
        return Categorical(str(value).lower())
    if isinstance(value, (int, float)):
        number = _finite_float(value)
        return Categorical(str(value)) if number is None else Numeric(number)
    if isinstance(value, str):
        text = value.strip()
        if _DECIMAL_RE.match(text):
            number = _finite_float(text)
            if number is not None:
                return Numeric(number)
        return Categorical(value)
    return Categorical("" if value is None else str(value))


def _finite_float(value: Any) -> Optional[float]:
    # ints beyond float range overflow; "1e400" parses to inf
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def classify_fields(first_record: Mapping[str, Any]) -> FieldClassification:
    probes: Dict[str, FieldValue] = {}
    for name, value in first_record.items():
        probes[str(name)] = probe_value(value)
    categorical = tuple(name for name, tag in probes.items() if isinstance(tag, Categorical))
    numeric = tuple(name for name, tag in probes.items() if isinstance(tag, Numeric))
    return FieldClassification(categorical=categorical, numeric=numeric, probes=probes)
