import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

from .compositor import build_pages
from .config import DEFAULT_REPORT_DIR, ENV_REPORT_DIR
from .context import ReportContext
from .fpdf_renderer import render_pdf
from .html_report import build_html_report
from .layout import Page
from .report_store import save_report_pdf

logger = logging.getLogger(__name__)


def resolve_report_dir() -> Path:
    env_dir = os.getenv(ENV_REPORT_DIR, "").strip()
    return Path(env_dir) if env_dir else DEFAULT_REPORT_DIR


def html_to_pdf_bytes(html: str) -> bytes:
    """
    Convert HTML to PDF with WeasyPrint. Raises if it is not installed.
    """
    try:
        from weasyprint import HTML
    except ImportError as exc:  # pragma: no cover - needs system libraries
        raise RuntimeError("weasyprint is not installed.") from exc

    return HTML(string=html).write_pdf()


def render_report_bytes(pages: Sequence[Page], renderer: str = "fpdf") -> bytes:
    if renderer == "fpdf":
        return render_pdf(pages)
    if renderer == "weasyprint":
        return html_to_pdf_bytes(build_html_report(pages))
    raise ValueError(f"Unknown renderer: {renderer!r}")


def generate_pdf(
    ctx: ReportContext,
    tables: Mapping[str, Any],
    output_dir: Optional[Path] = None,
) -> Path:
    """
    Compose, render and save one company's report. The caller fetches the
    tables first so slow queries stay outside the rendering step.
    """
    pages = build_pages(tables, numbering=ctx.numbering)
    pdf_bytes = render_report_bytes(pages, ctx.renderer)
    logger.info("Rendered %d-page report for company %s", len(pages), ctx.company_id)
    return save_report_pdf(ctx, pdf_bytes, page_count=len(pages), report_dir=output_dir or resolve_report_dir())
