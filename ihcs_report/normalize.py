"""
Field normalisation shared by every section of the report.

Records coming from the aggregator are permissive: any field may be missing,
``None``, an empty string or of the wrong type. Every value that ends up on a
page goes through :func:`normalize` (or :func:`format_value`) so that
fallback handling lives in one place.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime
from numbers import Number
from typing import Any, Iterable, Mapping, Optional, Tuple

import pandas as pd

from .config import NA

FIELD_TYPES = ("text", "date", "date_or_text", "integer", "list", "boolean")

_TRUTHY = {"true", "yes", "y", "1", "t"}


@dataclass(frozen=True)
class FieldSpec:
    """How one field is read from a record and rendered."""

    name: str
    type: str = "text"
    fallback: str = NA

    def __post_init__(self):
        if self.type not in FIELD_TYPES:
            raise ValueError(f"Unknown field type: {self.type!r}")


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, float) and pd.isna(value):
        return True
    if value is pd.NaT or value is pd.NA:
        return True
    return False


def read_field(record: Any, name: str) -> Any:
    """Read ``name`` from a mapping or an attribute holder; missing gives None."""
    if record is None:
        return None
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def parse_date(value: Any) -> Optional[date]:
    if is_blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    # Relative words such as "now" or "today" carry no digits and are not dates.
    if not any(ch.isdigit() for ch in text):
        return None
    parsed = pd.to_datetime(text, errors="coerce")
    if pd.isna(parsed):
        return None
    return parsed.date()


def format_date(value: Any, fallback: str = NA) -> str:
    """Render a date as DD/MM/YYYY; anything unparseable renders ``fallback``."""
    parsed = parse_date(value)
    if parsed is None:
        return fallback
    return f"{parsed.day:02d}/{parsed.month:02d}/{parsed.year:04d}"


def coerce_int(value: Any) -> int:
    """Absent or non-numeric values count as zero."""
    if is_blank(value) or isinstance(value, bool):
        return 0
    if not isinstance(value, (str, Number)) or isinstance(value, complex):
        return 0
    number = pd.to_numeric(value, errors="coerce")
    if pd.isna(number) or not math.isfinite(number):
        return 0
    return int(number)


def total_staff(directors: Any = None, managers: Any = None, supervisors: Any = None, employees: Any = None) -> int:
    return sum(coerce_int(v) for v in (directors, managers, supervisors, employees))


def coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if is_blank(value):
        return False
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    if isinstance(value, Number):
        return value != 0
    return False


def yes_no(value: Any) -> str:
    return "Yes" if coerce_bool(value) else "No"


def coerce_items(value: Any) -> Tuple[str, ...]:
    """
    Turn a list-like field into a tuple of non-blank strings.
    A bare string is a single item; numpy arrays from DuckDB are unpacked.
    """
    if isinstance(value, bytes):
        value = value.decode("utf-8", "replace")
    if is_blank(value):
        return ()
    if isinstance(value, str):
        return (value.strip(),)
    if hasattr(value, "tolist") and not isinstance(value, Number):
        value = value.tolist()
    if isinstance(value, Mapping) or not isinstance(value, Iterable):
        return (str(value),)
    return tuple(str(item).strip() for item in value if not is_blank(item))


def format_value(value: Any, spec: FieldSpec) -> str:
    """Render a raw value according to ``spec``; never returns an empty string."""
    kind = spec.type
    if kind == "boolean":
        return yes_no(value)
    if kind == "date":
        return format_date(value, spec.fallback)
    if kind == "date_or_text":
        if parse_date(value) is not None:
            return format_date(value, spec.fallback)
        return spec.fallback if is_blank(value) else str(value).strip()
    if kind == "integer":
        # Display-only integers keep their fallback when the source is absent.
        if is_blank(value):
            return spec.fallback
        return str(coerce_int(value))
    if kind == "list":
        items = coerce_items(value)
        return ", ".join(items) if items else spec.fallback
    if is_blank(value):
        return spec.fallback
    return str(value).strip()


def normalize(record: Any, spec: FieldSpec) -> str:
    """Read ``spec.name`` from ``record`` and render it for display."""
    return format_value(read_field(record, spec.name), spec)


def normalize_items(record: Any, spec: FieldSpec) -> Tuple[str, ...]:
    """Block display of a list field: one entry per item, or the fallback alone."""
    items = coerce_items(read_field(record, spec.name))
    return items if items else (spec.fallback,)
