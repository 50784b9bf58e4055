import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .config import DEFAULT_REPORT_DIR, DOCUMENT_NAME
from .context import ReportContext

logger = logging.getLogger(__name__)


def save_report_pdf(
    ctx: ReportContext,
    pdf_bytes: bytes,
    page_count: Optional[int] = None,
    report_dir: Path = DEFAULT_REPORT_DIR,
) -> Path:
    """
    Persist a generated PDF and a small metadata sidecar under ./reports.
    Returns the PDF path.
    """
    report_dir.mkdir(parents=True, exist_ok=True)
    pdf_path = report_dir / ctx.report_filename
    meta_path = pdf_path.with_suffix(".json")

    pdf_path.write_bytes(pdf_bytes)

    metadata = {
        "company_id": ctx.company_id,
        "document_name": DOCUMENT_NAME,
        "renderer": ctx.renderer,
        "numbering": ctx.numbering,
        "generated_at": ctx.issued_at or datetime.now(timezone.utc).isoformat(),
        "page_count": page_count,
        "cache_key": ctx.cache_key(),
        "path": str(pdf_path),
    }
    metadata.update(ctx.extra)
    try:
        meta_path.write_text(json.dumps(metadata, indent=2))
    except OSError as exc:
        # Metadata failures should not block PDF saving.
        logger.warning("Could not write report metadata %s: %s", meta_path, exc)
    return pdf_path
