from dataclasses import dataclass
from typing import Any, Callable, Sequence

from .config import NO_DATA
from .layout import TableRegion


@dataclass(frozen=True)
class ColumnSpec:
    header: str
    width: float
    formatter: Callable[[Any], str]


INDEX_HEADER = "No."
INDEX_WIDTH = 0.6


def field_column(header: str, name: str, width: float = 1.0) -> ColumnSpec:
    """Column showing a record's normalised ``name`` field."""
    return ColumnSpec(header, width, lambda record: record.display(name))


def render_table(columns: Sequence[ColumnSpec], rows: Sequence[Any], fallback: str = NO_DATA) -> TableRegion:
    """
    Lay out ``rows`` under ``columns`` with a 1-based index as the first column.
    An empty ``rows`` gives exactly one fallback row, never a bare header.
    """
    headers = (INDEX_HEADER,) + tuple(c.header for c in columns)
    widths = (INDEX_WIDTH,) + tuple(float(c.width) for c in columns)
    if not rows:
        return TableRegion(headers=headers, widths=widths, rows=((fallback,),), is_fallback=True)
    body = tuple(
        (str(idx),) + tuple(c.formatter(record) for c in columns)
        for idx, record in enumerate(rows, start=1)
    )
    return TableRegion(headers=headers, widths=widths, rows=body)
