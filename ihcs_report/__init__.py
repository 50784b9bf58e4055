"""
Internal Halal Control System (IHCS) report generation.

The compositor turns one company's section records into a page tree; the
aggregator, the renderers, the store and the queue sit around it as separate,
testable modules.
"""

from .compositor import build_pages
from .config import DEFAULT_REPORT_DIR, DOCUMENT_NAME, SECTION_TABLES
from .context import ReportContext
from .header import render_header
from .normalize import FieldSpec, normalize, total_staff
from .records import ReportSnapshot
from .tables import ColumnSpec, render_table

__all__ = [
    "DEFAULT_REPORT_DIR",
    "DOCUMENT_NAME",
    "SECTION_TABLES",
    "ColumnSpec",
    "FieldSpec",
    "ReportContext",
    "ReportSnapshot",
    "build_pages",
    "normalize",
    "render_header",
    "render_table",
    "total_staff",
]
