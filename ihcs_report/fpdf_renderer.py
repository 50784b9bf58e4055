import logging
from typing import List, Optional, Sequence

from fpdf import FPDF, XPos, YPos

from .config import REPORT_TITLE
from .layout import LANDSCAPE, HeaderRegion, ImageRegion, Page, TableRegion, TextRegion

logger = logging.getLogger(__name__)


def _pdf_safe_text(text: str) -> str:
    if text is None:
        return ""
    return str(text).encode("latin-1", "replace").decode("latin-1")


PALETTE = {
    "ink": (0, 0, 0),
    "muted": (90, 90, 90),
    "link": (0, 0, 238),
    "rule": (0, 0, 0),
}

# Preferred image heights in mm, per image style.
IMAGE_HEIGHTS = {
    "logo": 18,
    "cover_logo": 45,
    "map": 70,
    "chart": 150,
    "flowchart": 160,
    "reference": 200,
}

TEXT_STYLES = {
    # style: (font style, size, line height, align)
    "title": ("B", 18, 9, "C"),
    "centered_title": ("B", 16, 8, "C"),
    "heading": ("BU", 14, 7, "C"),
    "subheading": ("B", 11, 6, "L"),
    "paragraph": ("", 10, 5.5, "J"),
    "link": ("U", 10, 5.5, "L"),
    "label": ("B", 12, 6, "C"),
    "signature": ("", 10, 6, "L"),
    "cover_info": ("B", 13, 8, "C"),
}


class IHCSReportPDF(FPDF):
    """A4 document whose header() draws the current page's header band."""

    def __init__(self):
        super().__init__(orientation="P", unit="mm", format="A4")
        self.band: Optional[HeaderRegion] = None
        self.set_margins(15, 15, 15)
        self.set_auto_page_break(auto=True, margin=15)

    def header(self):
        if self.band is None:
            return
        _draw_header_band(self, self.band)


def _draw_header_band(pdf: FPDF, band: HeaderRegion) -> None:
    width = pdf.w - pdf.l_margin - pdf.r_margin
    x0, y0 = pdf.l_margin, pdf.get_y()
    row_h, top_h, bottom_h = 6, 18, 7
    logo_w, name_w = width * 0.22, width * 0.35
    label_w = value_w = width * 0.215

    pdf.set_draw_color(*PALETTE["rule"])
    pdf.set_text_color(*PALETTE["ink"])

    pdf.rect(x0, y0, logo_w, top_h)
    if not _place_image(pdf, band.logo.src, x0 + 2, y0 + 2, logo_w - 4, top_h - 4):
        pdf.set_font("Helvetica", "I", 9)
        pdf.set_xy(x0, y0)
        pdf.cell(logo_w, top_h, _pdf_safe_text(band.logo.placeholder), align="C")

    pdf.rect(x0 + logo_w, y0, name_w, top_h)
    pdf.set_font("Helvetica", "B", 10)
    pdf.set_xy(x0 + logo_w, y0 + 2)
    pdf.multi_cell(name_w, 4.5, _pdf_safe_text(band.company_name), align="C", max_line_height=4.5)

    info_rows = (
        ("Implementation Date:", band.implementation_date),
        ("Reference No / Doc No:", band.reference_no),
        ("Review No:", band.review_no),
    )
    for idx, (label, value) in enumerate(info_rows):
        pdf.set_xy(x0 + logo_w + name_w, y0 + idx * row_h)
        pdf.set_font("Helvetica", "B", 8)
        pdf.cell(label_w, row_h, _pdf_safe_text(label), border=1)
        pdf.set_font("Helvetica", "", 8)
        pdf.cell(value_w, row_h, _pdf_safe_text(value), border=1)

    pdf.set_xy(x0, y0 + top_h)
    pdf.set_font("Helvetica", "", 8)
    pdf.cell(width - 2 * label_w, bottom_h, _pdf_safe_text(f"Document Name: {band.document_name}"), border=1)
    pdf.set_font("Helvetica", "B", 8)
    pdf.cell(label_w, bottom_h, "Page No:", border=1)
    pdf.set_font("Helvetica", "", 8)
    pdf.cell(value_w, bottom_h, _pdf_safe_text(band.page_number), border=1, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(8)


def _place_image(pdf: FPDF, src: Optional[str], x: float, y: float, w: float, h: float) -> bool:
    if not src:
        return False
    try:
        pdf.image(src, x=x, y=y, w=w, h=h, keep_aspect_ratio=True)
        return True
    except Exception as exc:
        logger.warning("Could not embed image %s: %s", src, exc)
        return False


def _draw_text(pdf: FPDF, region: TextRegion) -> None:
    font_style, size, line_h, align = TEXT_STYLES.get(region.style, TEXT_STYLES["paragraph"])
    if region.style == "centered_title":
        pdf.set_y(pdf.h * 0.45)
    if region.style == "link":
        pdf.set_text_color(*PALETTE["link"])
    pdf.set_font("Helvetica", font_style, size)
    pdf.multi_cell(0, line_h, _pdf_safe_text(region.text), align=align, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_text_color(*PALETTE["ink"])
    pdf.ln(4 if region.style in {"heading", "title"} else 2)


def _draw_image(pdf: FPDF, region: ImageRegion) -> None:
    avail_w = pdf.w - pdf.l_margin - pdf.r_margin
    box_h = IMAGE_HEIGHTS.get(region.style, 80)
    if pdf.get_y() + min(box_h, 40) > pdf.h - pdf.b_margin:
        pdf.add_page()
    box_h = min(box_h, pdf.h - pdf.b_margin - pdf.get_y() - 2)
    box_w = avail_w if region.style in {"chart", "reference", "flowchart"} else avail_w * 0.8
    x = pdf.l_margin + (avail_w - box_w) / 2
    if _place_image(pdf, region.src, x, pdf.get_y(), box_w, box_h):
        pdf.set_y(pdf.get_y() + box_h + 3)
        return
    pdf.set_font("Helvetica", "I", 10)
    pdf.set_text_color(*PALETTE["muted"])
    pdf.multi_cell(0, 5.5, _pdf_safe_text(region.placeholder), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_text_color(*PALETTE["ink"])
    pdf.ln(2)


def _draw_table(pdf: FPDF, region: TableRegion) -> None:
    pdf.set_font("Helvetica", "", 9)
    with pdf.table(col_widths=region.widths, line_height=5, text_align="LEFT") as table:
        header = table.row()
        for heading in region.headers:
            header.cell(_pdf_safe_text(heading))
        if region.is_fallback:
            row = table.row()
            row.cell(_pdf_safe_text(region.rows[0][0]), colspan=len(region.headers))
        else:
            for values in region.rows:
                row = table.row()
                for value in values:
                    row.cell(_pdf_safe_text(value))
    pdf.ln(3)


def _draw_region(pdf: FPDF, region) -> None:
    if isinstance(region, TextRegion):
        _draw_text(pdf, region)
    elif isinstance(region, ImageRegion):
        _draw_image(pdf, region)
    elif isinstance(region, TableRegion):
        _draw_table(pdf, region)
    else:
        raise TypeError(f"Unsupported region: {type(region).__name__}")


def render_pdf(pages: Sequence[Page], title: str = REPORT_TITLE) -> bytes:
    """
    Rasterise a page tree with FPDF. A region that fails to draw is listed on
    a closing "Rendering Notes" page instead of aborting the document.
    """
    pdf = IHCSReportPDF()
    pdf.set_title(_pdf_safe_text(title))
    errors: List[str] = []

    for page in pages:
        pdf.band = page.header
        pdf.add_page(orientation="L" if page.orientation == LANDSCAPE else "P")
        for region in page.regions:
            try:
                _draw_region(pdf, region)
            except Exception as exc:  # pragma: no cover - robustness
                logger.exception("Failed to draw %s region on %s page", region.kind, page.section)
                errors.append(f"{page.section}: {exc}")

    if errors:
        pdf.band = None
        pdf.add_page()
        _draw_text(pdf, TextRegion("Rendering Notes", "heading"))
        _draw_text(pdf, TextRegion("Some regions failed to render. The report is still usable; see notes below."))
        for note in errors:
            _draw_text(pdf, TextRegion(f"- {note}"))

    output = pdf.output()
    return bytes(output) if isinstance(output, (bytes, bytearray)) else output.encode("latin-1")
