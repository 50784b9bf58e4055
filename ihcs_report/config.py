from pathlib import Path

# Environment overrides, resolved at call time.
ENV_DATA_PATH = "IHCS_DATA_PATH"
ENV_REPORT_DIR = "IHCS_REPORT_DIR"
ENV_PAGE_NUMBERING = "IHCS_PAGE_NUMBERING"
ENV_RENDERER = "IHCS_RENDERER"

# Output locations for PDFs and HTML templates.
DEFAULT_REPORT_DIR = Path(__file__).resolve().parent.parent / "reports"
DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent / "data"

DOCUMENT_NAME = "IHCS/HAS"
REPORT_TITLE = "INTERNAL HALAL CONTROL SYSTEM (IHCS)"

PAGE_NUMBERING_MODES = ("static", "running")
RENDERERS = ("fpdf", "weasyprint")

# Tables read by the aggregator, in fetch order. company_info is keyed by its
# own id, every other table by company_info_id.
SECTION_TABLES = (
    "company_info",
    "company_background",
    "organisation_chart",
    "halal_policy",
    "product_list",
    "raw_material_master",
    "raw_material_sop",
    "raw_material_summary",
    "product_flow_chart_raw",
    "product_flow_process",
    "premise_plan",
    "traceability",
    "profiles",
)
COMPANY_KEY_COLUMN = {"company_info": "id"}
DEFAULT_KEY_COLUMN = "company_info_id"

# Fixed table of contents. Page numbers are design constants and do not
# follow the real page count.
TOC_ENTRIES = (
    ("company_background", "Company Background", 4),
    ("organisation_chart", "Organisation Chart", 6),
    ("halal_policy", "Halal Policy", 8),
    ("product_list", "Product List", 10),
    ("raw_material_master", "Raw Material Master", 12),
    ("raw_material_summary", "Raw Material Summary", 14),
    ("product_flow_chart_raw", "Product Flow Chart Raw", 16),
    ("product_flow_process", "Product Flow Process", 18),
    ("premise_plan", "Premise Plan", 20),
    ("traceability", "Traceability", 21),
)

# Header page numbers per section, in page emission order. The last entry is
# reused when a section emits more pages than listed.
STATIC_TOC_PAGE = 3
STATIC_PAGE_NUMBERS = {
    "company_background": (4, 5),
    "organisation_chart": (6, 7),
    "halal_policy": (8, 9),
    "product_list": (10, 11, 12),
    "raw_material_master": (12, 12),
    "raw_material_summary": (14, 14),
    "product_flow_chart_raw": (16, 16),
    "product_flow_process": (18, 18),
    "premise_plan": (20, 20),
}
STATIC_TRACEABILITY_PAGES = {"title": 21, "reference_1": 22, "reference_2": 23}

# Fallback strings.
NA = "N/A"
NO_VALUE = "No value"
NO_DATA = "No data available"
NO_DESCRIPTION = "No description provided."
