"""
Report compositor: turns one company's section data into the ordered page tree
of the IHCS document.

The page sequence is fixed (cover, contents, then one block per section in
table-of-contents order). Each section has a builder registered in
``SECTION_REGISTRY``; builders never raise on missing data, every access path
goes through the record's normalised ``display`` values.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .config import (
    PAGE_NUMBERING_MODES,
    REPORT_TITLE,
    STATIC_PAGE_NUMBERS,
    STATIC_TOC_PAGE,
    STATIC_TRACEABILITY_PAGES,
    TOC_ENTRIES,
)
from .header import render_header
from .layout import LANDSCAPE, PORTRAIT, ImageRegion, Page, Region, TableRegion, TextRegion
from .normalize import is_blank
from .records import SOP_FIELDS, ReportSnapshot
from .tables import field_column, render_table

logger = logging.getLogger(__name__)

COVER_PAGE = 1
RUNNING_TOC_PAGE = 2
SIGNATURE_LINE = "." * 40


def _asset(value: Any) -> Optional[str]:
    if is_blank(value) or not isinstance(value, str):
        return None
    return value.strip()


def _image(value: Any, placeholder: str, style: str = "image") -> ImageRegion:
    return ImageRegion(src=_asset(value), placeholder=placeholder, style=style)


class _Composer:
    """Collects section pages and assigns page numbers as they are emitted."""

    def __init__(self, snapshot: ReportSnapshot, numbering: str):
        self.snapshot = snapshot
        self.numbering = numbering
        self.pages: List[Page] = []
        self.section_starts: Dict[str, int] = {}
        self._static_index: Dict[str, int] = {}

    def _static_number(self, section: str) -> int:
        numbers = STATIC_PAGE_NUMBERS[section]
        idx = self._static_index.get(section, 0)
        self._static_index[section] = idx + 1
        return numbers[min(idx, len(numbers) - 1)]

    def add(
        self,
        section: str,
        template: str,
        regions: Sequence[Region],
        orientation: str = PORTRAIT,
        static_number: Optional[int] = None,
    ) -> Page:
        if self.numbering == "running":
            # Cover and contents come first, so sections start at page 3.
            number = RUNNING_TOC_PAGE + 1 + len(self.pages)
        elif static_number is not None:
            number = static_number
        else:
            number = self._static_number(section)
        self.section_starts.setdefault(section, number)
        page = Page(
            template=template,
            section=section,
            orientation=orientation,
            header=render_header(number, self.snapshot.section_doc_control(section), self.snapshot.company_info),
            regions=tuple(regions),
            page_number=number,
        )
        self.pages.append(page)
        return page

    def title(self, section: str, text: str, static_number: Optional[int] = None) -> Page:
        return self.add(section, "title", [TextRegion(text, "centered_title")], static_number=static_number)


# ---- Section builders


def _company_background(c: _Composer, heading: str) -> None:
    bg = c.snapshot.company_background
    c.title("company_background", heading)
    c.add(
        "company_background",
        "content",
        [
            TextRegion("COMPANY BACKGROUND", "heading"),
            TextRegion("Company Establishment, Mission and Vision", "subheading"),
            TextRegion(bg.display("establishment_details")),
            TextRegion(bg.display("mission")),
            TextRegion(bg.display("vision")),
            TextRegion("Business Activity", "subheading"),
            TextRegion(bg.display("business_activity")),
            TextRegion("Management and Employees", "subheading"),
            TextRegion(bg.display("management_employees")),
            TextRegion("Reason for Applying Halal Certification", "subheading"),
            TextRegion(bg.display("halal_certification_reason")),
            TextRegion("Our Premise Location:", "subheading"),
            _image(c.snapshot.premise_plan.layout_image_ref, "No premise map provided.", "map"),
            TextRegion("Google Map Link to Premise:", "subheading"),
            TextRegion(bg.display("premise_map_url"), "link"),
        ],
    )


def _organisation_chart(c: _Composer, heading: str) -> None:
    org = c.snapshot.organisation_chart
    name = org.company_name
    if is_blank(name):
        name = c.snapshot.company_info.name
    name = "This company" if is_blank(name) else str(name).strip()

    c.title("organisation_chart", heading)
    c.add(
        "organisation_chart",
        "content",
        [
            TextRegion("ORGANISATION CHART", "heading"),
            TextRegion(
                f"{name} is currently managed and operated with a team of {org.total_staff} employees; "
                f"{org.display('directors')} Directors, {org.display('managers')} Managers, "
                f"{org.display('supervisors')} Supervisors and {org.display('employees')} general employees."
            ),
            TextRegion(
                "The organisation charts consist of:\n"
                "1. Company Organisation Chart (as a whole - if applicable)\n"
                "2. Subsidiary Organisation Chart (the premise intends to apply halal)"
            ),
            TextRegion(
                "To comply with the Malaysia Halal Certification requirements, our team members consist of "
                f"{org.display('muslim_employees')} Muslim employees who will operate, manage, determine "
                "and verify our Halal products."
            ),
            _image(org.chart_image_ref, org.FIELDS["chart_image_ref"].fallback, "chart"),
        ],
    )


def _halal_policy(c: _Composer, heading: str) -> None:
    info = c.snapshot.company_info
    policy = c.snapshot.halal_policy

    regions: List[Region] = []
    if _asset(info.logo_ref):
        regions.append(_image(info.logo_ref, "Logo", "logo"))
    regions.append(TextRegion(info.display("name").upper(), "label"))
    regions.append(TextRegion(f"({info.display('registration_number')})"))
    regions.append(TextRegion("HALAL POLICY", "heading"))

    if policy.has_policy:
        if not is_blank(policy.policy_text):
            regions.append(TextRegion(policy.display("policy_text")))
        for idx, point in enumerate(policy.policy_points, start=1):
            regions.append(TextRegion(f"{idx}. {point}"))
    else:
        regions.append(TextRegion(policy.FIELDS["policy_text"].fallback))

    regions.extend(
        [
            TextRegion(SIGNATURE_LINE, "signature"),
            TextRegion(f"Name : {policy.display('director_name')}", "signature"),
            TextRegion(f"Designation : {policy.display('director_designation')}", "signature"),
            TextRegion(f"Date : {policy.display('approval_date')}", "signature"),
        ]
    )

    c.title("halal_policy", heading)
    c.add("halal_policy", "content", regions)


def _product_list(c: _Composer, heading: str) -> None:
    products = c.snapshot.products
    summary = render_table([field_column("Product Name", "product_name", 6)], products, "No products found.")
    full = render_table(
        [
            field_column("Product Name", "product_name", 3),
            field_column("Ingredients", "ingredients", 6),
        ],
        products,
        "No products found.",
    )
    c.title("product_list", heading)
    c.add("product_list", "table", [TextRegion("PRODUCT LIST SUMMARY", "heading"), summary])
    c.add("product_list", "table", [TextRegion("PRODUCT LIST", "heading"), full])


RAW_MATERIAL_MASTER_COLUMNS = (
    field_column("Material Name", "material_name", 1.4),
    field_column("Scientific / Brand Name", "scientific_or_brand_name", 1.4),
    field_column("Raw Material Source", "source_of_material", 1.2),
    field_column("Manufacturer", "manufacturer", 1.6),
    field_column("Material Declaration", "has_declaration", 1.0),
    field_column("Halal Cert Body", "cert_body", 1.2),
    field_column("Expiry Date", "cert_expiry", 1.0),
)


def _raw_material_master(c: _Composer, heading: str) -> None:
    # The master list has no title page; the table itself opens the section.
    table = render_table(RAW_MATERIAL_MASTER_COLUMNS, c.snapshot.raw_materials, "No raw material data available.")
    c.add(
        "raw_material_master",
        "table",
        [TextRegion("RAW MATERIAL MASTER", "heading"), table],
        orientation=LANDSCAPE,
    )

    sop = c.snapshot.raw_material_sop
    regions: List[Region] = [
        TextRegion("RAW MATERIAL MASTERLIST", "heading"),
        TextRegion("SOP - RAW MATERIAL", "heading"),
    ]
    if sop.is_empty:
        regions.append(TextRegion("No SOP data available."))
    else:
        for name, label in SOP_FIELDS:
            regions.append(TextRegion(label, "subheading"))
            regions.append(TextRegion(sop.display(name)))
    c.add("raw_material_master", "content", regions)


def _raw_material_summary(c: _Composer, heading: str) -> None:
    table = render_table(
        [
            field_column("Material Name", "material_name", 3),
            field_column("Supplier", "supplier", 3),
            field_column("Cert No.", "cert_no", 2),
            field_column("Expiry Date", "expiry_date", 2),
        ],
        c.snapshot.raw_material_summary,
        "No raw material summary data available.",
    )
    c.title("raw_material_summary", heading)
    c.add("raw_material_summary", "table", [TextRegion("RAW MATERIAL SUMMARY", "heading"), table])


def _flow_chart(section: str, page_heading: str) -> Callable[[_Composer, str], None]:
    def build(c: _Composer, heading: str) -> None:
        record = getattr(c.snapshot, section)
        c.title(section, heading)
        c.add(
            section,
            "content",
            [
                TextRegion(page_heading, "heading"),
                TextRegion(record.display("description")),
                _image(record.flowchart_image_ref, record.FIELDS["flowchart_image_ref"].fallback, "flowchart"),
            ],
        )

    return build


def _premise_plan(c: _Composer, heading: str) -> None:
    premise = c.snapshot.premise_plan
    c.title("premise_plan", heading)
    c.add(
        "premise_plan",
        "content",
        [
            TextRegion("PREMISE PLAN", "heading"),
            _image(premise.layout_image_ref, premise.FIELDS["layout_image_ref"].fallback, "map"),
            TextRegion("Description", "subheading"),
            TextRegion(premise.display("description")),
        ],
    )


def _traceability(c: _Composer, heading: str) -> None:
    records = c.snapshot.traceability
    c.title("traceability", heading, static_number=STATIC_TRACEABILITY_PAGES["title"])

    ref1 = STATIC_TRACEABILITY_PAGES["reference_1"]
    ref2 = STATIC_TRACEABILITY_PAGES["reference_2"]
    for record in records:
        if _asset(record.file1_ref):
            c.add(
                "traceability",
                "reference",
                [TextRegion("REFERENCE 1", "heading"), _image(record.file1_ref, record.FIELDS["file1_ref"].fallback, "reference")],
                static_number=ref1,
            )
        elif not _asset(record.file2_ref):
            # A record with no files still gets a page, so it is not lost silently.
            c.add(
                "traceability",
                "reference",
                [TextRegion("REFERENCE", "heading"), TextRegion("No reference file provided.")],
                static_number=ref1,
            )
    for record in records:
        if _asset(record.file2_ref):
            c.add(
                "traceability",
                "reference",
                [TextRegion("REFERENCE 2", "heading"), _image(record.file2_ref, record.FIELDS["file2_ref"].fallback, "reference")],
                static_number=ref2,
            )


# ---- Section registry


@dataclass(frozen=True)
class SectionSpec:
    id: str
    title: str
    builder: Callable[[_Composer, str], None]


_BUILDERS: Dict[str, Callable[[_Composer, str], None]] = {
    "company_background": _company_background,
    "organisation_chart": _organisation_chart,
    "halal_policy": _halal_policy,
    "product_list": _product_list,
    "raw_material_master": _raw_material_master,
    "raw_material_summary": _raw_material_summary,
    "product_flow_chart_raw": _flow_chart("product_flow_chart_raw", "PRODUCT FLOW CHART (RAW)"),
    "product_flow_process": _flow_chart("product_flow_process", "PRODUCT FLOW PROCESS"),
    "premise_plan": _premise_plan,
    "traceability": _traceability,
}

SECTION_REGISTRY: Tuple[SectionSpec, ...] = tuple(
    SectionSpec(sid, title, _BUILDERS[sid]) for sid, title, _ in TOC_ENTRIES
)


# ---- Cover and contents


def _cover_page(snapshot: ReportSnapshot) -> Page:
    info = snapshot.company_info
    prepared, approved = info.prepared_by, info.approved_by
    signatories = TableRegion(
        headers=("Prepared By", "Approved By"),
        widths=(1.0, 1.0),
        rows=(
            (f"Name: {prepared.display('name')}", f"Name: {approved.display('name')}"),
            (f"Position: {prepared.display('position')}", f"Position: {approved.display('position')}"),
            (f"Date: {prepared.display('date')}", f"Date: {approved.display('date')}"),
        ),
    )
    return Page(
        template="cover",
        section="cover",
        regions=(
            TextRegion(REPORT_TITLE, "title"),
            _image(info.logo_ref, info.FIELDS["logo_ref"].fallback, "cover_logo"),
            TextRegion(info.display("name").upper(), "cover_info"),
            TextRegion(f"({info.display('registration_number')})", "cover_info"),
            TextRegion(info.display("address"), "cover_info"),
            signatories,
        ),
        page_number=COVER_PAGE,
    )


def _contents_page(snapshot: ReportSnapshot, numbering: str, starts: Mapping[str, int]) -> Page:
    rows = []
    for idx, (sid, title, static_page) in enumerate(TOC_ENTRIES, start=1):
        page = starts.get(sid, static_page) if numbering == "running" else static_page
        rows.append((f"{idx}.", title, str(page)))
    number = RUNNING_TOC_PAGE if numbering == "running" else STATIC_TOC_PAGE
    return Page(
        template="toc",
        section="contents",
        header=render_header(number, snapshot.section_doc_control("company_info"), snapshot.company_info),
        regions=(
            TextRegion("TABLE OF CONTENTS", "heading"),
            TableRegion(headers=("NO.", "TITLE", "PAGE"), widths=(1.0, 7.0, 2.0), rows=tuple(rows)),
        ),
        page_number=number,
    )


def build_pages(
    data: Union[ReportSnapshot, Mapping[str, Any], None],
    numbering: str = "static",
) -> Tuple[Page, ...]:
    """
    Compose the full report for one company.

    ``data`` is either a ``ReportSnapshot`` or the aggregator's raw
    ``{table: [row, ...]}`` map. ``numbering="static"`` keeps the fixed page
    numbers of the printed template; ``"running"`` numbers pages by their
    position and points the table of contents at each section's first page.
    """
    if numbering not in PAGE_NUMBERING_MODES:
        raise ValueError(f"Unknown page numbering mode: {numbering!r}")
    snapshot = data if isinstance(data, ReportSnapshot) else ReportSnapshot.from_tables(data)

    composer = _Composer(snapshot, numbering)
    for idx, spec in enumerate(SECTION_REGISTRY, start=1):
        spec.builder(composer, f"{idx}. {spec.title}")

    pages = (_cover_page(snapshot), _contents_page(snapshot, numbering, composer.section_starts))
    pages += tuple(composer.pages)
    logger.debug("Composed %d pages for company %s", len(pages), snapshot.company_id)
    return pages
