"""
Typed section records.

Each record class is tagged with the table it is read from (``SECTION``) and
declares how its attributes map to table columns and how each attribute is
rendered. ``ReportSnapshot.from_tables`` turns the aggregator's
``{table: [row, ...]}`` map into these records and never raises.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Dict, List, Mapping, Optional, Tuple

from .config import NA, NO_DESCRIPTION, NO_VALUE
from .normalize import FieldSpec, coerce_bool, coerce_items, format_value, is_blank, total_staff

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocControl:
    """The implementation date / reference no / review no triple echoed in page headers."""

    implementation_date: Any = None
    reference_no: Any = None
    review_no: Any = None

    FIELDS: ClassVar[Dict[str, FieldSpec]] = {
        "implementation_date": FieldSpec("implementation_date", "date", NO_VALUE),
        "reference_no": FieldSpec("reference_no", "text", NO_VALUE),
        "review_no": FieldSpec("review_no", "text", NO_VALUE),
    }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "DocControl":
        return cls(
            implementation_date=row.get("implementation_date"),
            reference_no=row.get("reference_no"),
            review_no=row.get("review_no"),
        )

    def display(self, name: str) -> str:
        return format_value(getattr(self, name), self.FIELDS[name])


@dataclass(frozen=True)
class Signatory:
    name: Any = None
    position: Any = None
    date: Any = None

    FIELDS: ClassVar[Dict[str, FieldSpec]] = {
        "name": FieldSpec("name"),
        "position": FieldSpec("position"),
        "date": FieldSpec("date", "date"),
    }

    def display(self, name: str) -> str:
        return format_value(getattr(self, name), self.FIELDS[name])


def _specs(*specs: FieldSpec) -> Dict[str, FieldSpec]:
    return {spec.name: spec for spec in specs}


@dataclass(frozen=True)
class SectionRecord:
    """Base for all section records: column mapping plus per-field display rules."""

    SECTION: ClassVar[str] = ""
    COLUMNS: ClassVar[Dict[str, str]] = {}
    CONVERTERS: ClassVar[Dict[str, Callable[[Any], Any]]] = {}
    FIELDS: ClassVar[Dict[str, FieldSpec]] = {}

    doc_control: DocControl = field(default_factory=DocControl)

    @classmethod
    def from_row(cls, row: Optional[Mapping[str, Any]]):
        if not isinstance(row, Mapping):
            return cls()
        values: Dict[str, Any] = {"doc_control": DocControl.from_row(row)}
        for attr, column in cls.COLUMNS.items():
            value = row.get(column)
            convert = cls.CONVERTERS.get(attr)
            values[attr] = convert(value) if convert else value
        values.update(cls._extra_values(row))
        return cls(**values)

    @classmethod
    def _extra_values(cls, row: Mapping[str, Any]) -> Dict[str, Any]:
        return {}

    def display(self, name: str) -> str:
        return format_value(getattr(self, name), self.FIELDS[name])


@dataclass(frozen=True)
class CompanyInfo(SectionRecord):
    SECTION: ClassVar[str] = "company_info"
    COLUMNS: ClassVar[Dict[str, str]] = {
        "id": "id",
        "name": "company_name",
        "registration_number": "ssm_no",
        "address": "address",
        "logo_ref": "company_logo_url",
    }
    FIELDS: ClassVar[Dict[str, FieldSpec]] = _specs(
        FieldSpec("id"),
        FieldSpec("name", fallback="COMPANY NAME"),
        FieldSpec("registration_number", fallback="SSM NO"),
        FieldSpec("address", fallback="COMPANY ADDRESS"),
        FieldSpec("logo_ref", fallback="COMPANY LOGO"),
    )

    id: Any = None
    name: Any = None
    registration_number: Any = None
    address: Any = None
    logo_ref: Any = None
    prepared_by: Signatory = field(default_factory=Signatory)
    approved_by: Signatory = field(default_factory=Signatory)

    @classmethod
    def _extra_values(cls, row):
        return {
            "prepared_by": Signatory(
                row.get("prepared_by_name"), row.get("prepared_by_position"), row.get("prepared_date")
            ),
            "approved_by": Signatory(
                row.get("approved_by_name"), row.get("approved_by_position"), row.get("approved_date")
            ),
        }


@dataclass(frozen=True)
class CompanyBackground(SectionRecord):
    SECTION: ClassVar[str] = "company_background"
    COLUMNS: ClassVar[Dict[str, str]] = {
        "establishment_details": "establishment_details",
        "mission": "mission",
        "vision": "vision",
        "business_activity": "business_activity",
        "management_employees": "management_employees",
        "halal_certification_reason": "halal_certification_reason",
        "premise_map_url": "premise_location_map_url",
    }
    FIELDS: ClassVar[Dict[str, FieldSpec]] = _specs(
        FieldSpec("establishment_details"),
        FieldSpec("mission"),
        FieldSpec("vision"),
        FieldSpec("business_activity"),
        FieldSpec("management_employees"),
        FieldSpec("halal_certification_reason"),
        FieldSpec("premise_map_url", fallback="No map link provided."),
    )

    establishment_details: Any = None
    mission: Any = None
    vision: Any = None
    business_activity: Any = None
    management_employees: Any = None
    halal_certification_reason: Any = None
    premise_map_url: Any = None


@dataclass(frozen=True)
class OrganisationChart(SectionRecord):
    SECTION: ClassVar[str] = "organisation_chart"
    COLUMNS: ClassVar[Dict[str, str]] = {
        "company_name": "company_name",
        "directors": "directors",
        "managers": "managers",
        "supervisors": "supervisors",
        "employees": "employees",
        "muslim_employees": "muslim_employees",
        "chart_image_ref": "org_chart_url",
    }
    FIELDS: ClassVar[Dict[str, FieldSpec]] = _specs(
        FieldSpec("company_name", fallback="This company"),
        FieldSpec("directors", "integer", "0"),
        FieldSpec("managers", "integer", "0"),
        FieldSpec("supervisors", "integer", "0"),
        FieldSpec("employees", "integer", "0"),
        FieldSpec("muslim_employees", "integer", "0"),
        FieldSpec("chart_image_ref", fallback="[ Organisation Chart Image Not Available ]"),
    )

    company_name: Any = None
    directors: Any = None
    managers: Any = None
    supervisors: Any = None
    employees: Any = None
    muslim_employees: Any = None
    chart_image_ref: Any = None

    @property
    def total_staff(self) -> int:
        return total_staff(self.directors, self.managers, self.supervisors, self.employees)


@dataclass(frozen=True)
class HalalPolicy(SectionRecord):
    SECTION: ClassVar[str] = "halal_policy"
    COLUMNS: ClassVar[Dict[str, str]] = {
        "policy_text": "policy_text",
        "policy_points": "policy_points",
        "director_name": "director_name",
        "director_designation": "director_designation",
        "approval_date": "approval_date",
    }
    CONVERTERS: ClassVar[Dict[str, Callable[[Any], Any]]] = {"policy_points": coerce_items}
    FIELDS: ClassVar[Dict[str, FieldSpec]] = _specs(
        FieldSpec("policy_text", fallback="No halal policy data available."),
        FieldSpec("policy_points", "list", "No halal policy data available."),
        FieldSpec("director_name"),
        FieldSpec("director_designation"),
        FieldSpec("approval_date", "date"),
    )

    policy_text: Any = None
    policy_points: Tuple[str, ...] = ()
    director_name: Any = None
    director_designation: Any = None
    approval_date: Any = None

    @property
    def has_policy(self) -> bool:
        return not is_blank(self.policy_text) or bool(self.policy_points)


@dataclass(frozen=True)
class ProductListItem(SectionRecord):
    SECTION: ClassVar[str] = "product_list"
    COLUMNS: ClassVar[Dict[str, str]] = {
        "product_name": "product_name",
        "ingredients": "ingredients_raw_materials",
    }
    CONVERTERS: ClassVar[Dict[str, Callable[[Any], Any]]] = {"ingredients": coerce_items}
    FIELDS: ClassVar[Dict[str, FieldSpec]] = _specs(
        FieldSpec("product_name"),
        FieldSpec("ingredients", "list"),
    )

    product_name: Any = None
    ingredients: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RawMaterialMasterItem(SectionRecord):
    SECTION: ClassVar[str] = "raw_material_master"
    COLUMNS: ClassVar[Dict[str, str]] = {
        "material_name": "raw_material_name",
        "scientific_or_brand_name": "scientific_trade_name",
        "source_of_material": "source_of_raw_material",
        "manufacturer": "manufacturer_name_address",
        "has_declaration": "material_declaration_authorities",
        "cert_body": "halal_cert_body",
        "cert_expiry": "halal_cert_expiry",
    }
    CONVERTERS: ClassVar[Dict[str, Callable[[Any], Any]]] = {"has_declaration": coerce_bool}
    FIELDS: ClassVar[Dict[str, FieldSpec]] = _specs(
        FieldSpec("material_name"),
        FieldSpec("scientific_or_brand_name"),
        FieldSpec("source_of_material"),
        FieldSpec("manufacturer"),
        FieldSpec("has_declaration", "boolean"),
        FieldSpec("cert_body"),
        FieldSpec("cert_expiry", "date_or_text"),
    )

    material_name: Any = None
    scientific_or_brand_name: Any = None
    source_of_material: Any = None
    manufacturer: Any = None
    has_declaration: bool = False
    cert_body: Any = None
    cert_expiry: Any = None


SOP_FIELDS = (
    ("objective", "Objective"),
    ("scope", "Scope"),
    ("responsibilities", "Responsibilities"),
    ("frequency", "Frequency"),
    ("purchase", "Purchase"),
    ("receipt", "Receipt"),
    ("storage", "Storage"),
    ("record", "Record"),
)


@dataclass(frozen=True)
class RawMaterialSOP(SectionRecord):
    SECTION: ClassVar[str] = "raw_material_sop"
    COLUMNS: ClassVar[Dict[str, str]] = {name: name for name, _ in SOP_FIELDS}
    FIELDS: ClassVar[Dict[str, FieldSpec]] = _specs(*(FieldSpec(name) for name, _ in SOP_FIELDS))

    objective: Any = None
    scope: Any = None
    responsibilities: Any = None
    frequency: Any = None
    purchase: Any = None
    receipt: Any = None
    storage: Any = None
    record: Any = None

    @property
    def is_empty(self) -> bool:
        return all(is_blank(getattr(self, name)) for name, _ in SOP_FIELDS)


@dataclass(frozen=True)
class RawMaterialSummaryItem(SectionRecord):
    SECTION: ClassVar[str] = "raw_material_summary"
    COLUMNS: ClassVar[Dict[str, str]] = {
        "material_name": "material_name",
        "supplier": "supplier",
        "cert_no": "cert_no",
        "expiry_date": "expiry_date",
    }
    FIELDS: ClassVar[Dict[str, FieldSpec]] = _specs(
        FieldSpec("material_name"),
        FieldSpec("supplier"),
        FieldSpec("cert_no"),
        FieldSpec("expiry_date", "date_or_text"),
    )

    material_name: Any = None
    supplier: Any = None
    cert_no: Any = None
    expiry_date: Any = None


@dataclass(frozen=True)
class FlowChart(SectionRecord):
    COLUMNS: ClassVar[Dict[str, str]] = {
        "description": "description",
        "flowchart_image_ref": "flowchart_image_url",
    }
    FIELDS: ClassVar[Dict[str, FieldSpec]] = _specs(
        FieldSpec("description", fallback=NO_DESCRIPTION),
        FieldSpec("flowchart_image_ref", fallback="No image provided."),
    )

    description: Any = None
    flowchart_image_ref: Any = None


@dataclass(frozen=True)
class ProductFlowChartRaw(FlowChart):
    SECTION: ClassVar[str] = "product_flow_chart_raw"


@dataclass(frozen=True)
class ProductFlowProcess(FlowChart):
    SECTION: ClassVar[str] = "product_flow_process"
    FIELDS: ClassVar[Dict[str, FieldSpec]] = _specs(
        FieldSpec("description", fallback=NO_DESCRIPTION),
        FieldSpec("flowchart_image_ref", fallback="No flowchart image available."),
    )


@dataclass(frozen=True)
class PremisePlan(SectionRecord):
    SECTION: ClassVar[str] = "premise_plan"
    COLUMNS: ClassVar[Dict[str, str]] = {
        "layout_image_ref": "layout_image_url",
        "description": "description",
    }
    FIELDS: ClassVar[Dict[str, FieldSpec]] = _specs(
        FieldSpec("layout_image_ref", fallback="No premise plan image provided."),
        FieldSpec("description", fallback=NO_DESCRIPTION),
    )

    layout_image_ref: Any = None
    description: Any = None


@dataclass(frozen=True)
class TraceabilityRecord(SectionRecord):
    SECTION: ClassVar[str] = "traceability"
    COLUMNS: ClassVar[Dict[str, str]] = {"file1_ref": "file1_url", "file2_ref": "file2_url"}
    FIELDS: ClassVar[Dict[str, FieldSpec]] = _specs(
        FieldSpec("file1_ref", fallback="No Reference 1 file provided."),
        FieldSpec("file2_ref", fallback="No Reference 2 file provided."),
    )

    file1_ref: Any = None
    file2_ref: Any = None


def _rows(tables: Mapping[str, Any], name: str) -> List[Mapping[str, Any]]:
    value = tables.get(name)
    if value is None:
        return []
    if isinstance(value, Mapping):
        return [value]
    if isinstance(value, (str, bytes)) or not hasattr(value, "__iter__"):
        logger.debug("Ignoring %s: expected a list of rows, got %s", name, type(value).__name__)
        return []
    value = list(value)
    rows = [row for row in value if isinstance(row, Mapping)]
    dropped = len(value) - len(rows)
    if dropped:
        logger.debug("Dropped %d malformed %s row(s)", dropped, name)
    return rows


def _first(record_cls, rows: List[Mapping[str, Any]]):
    return record_cls.from_row(rows[0] if rows else None)


def _many(record_cls, rows: List[Mapping[str, Any]]) -> Tuple:
    return tuple(record_cls.from_row(row) for row in rows)


@dataclass(frozen=True)
class ReportSnapshot:
    """All section data for one company, shaped into typed records."""

    company_id: Optional[str] = None
    company_info: CompanyInfo = field(default_factory=CompanyInfo)
    company_background: CompanyBackground = field(default_factory=CompanyBackground)
    organisation_chart: OrganisationChart = field(default_factory=OrganisationChart)
    halal_policy: HalalPolicy = field(default_factory=HalalPolicy)
    products: Tuple[ProductListItem, ...] = ()
    raw_materials: Tuple[RawMaterialMasterItem, ...] = ()
    raw_material_sop: RawMaterialSOP = field(default_factory=RawMaterialSOP)
    raw_material_summary: Tuple[RawMaterialSummaryItem, ...] = ()
    product_flow_chart_raw: ProductFlowChartRaw = field(default_factory=ProductFlowChartRaw)
    product_flow_process: ProductFlowProcess = field(default_factory=ProductFlowProcess)
    premise_plan: PremisePlan = field(default_factory=PremisePlan)
    traceability: Tuple[TraceabilityRecord, ...] = ()

    @classmethod
    def from_tables(cls, tables: Optional[Mapping[str, Any]], company_id: Optional[str] = None) -> "ReportSnapshot":
        if not isinstance(tables, Mapping):
            tables = {}
        info = _first(CompanyInfo, _rows(tables, "company_info"))

        master_rows = _rows(tables, "raw_material_master")
        sop = _first(RawMaterialSOP, _rows(tables, "raw_material_sop"))
        if sop.is_empty and master_rows:
            # Older exports kept the SOP text on the first master row.
            sop = RawMaterialSOP.from_row(master_rows[0])

        if company_id is None and not is_blank(info.id):
            company_id = str(info.id)

        return cls(
            company_id=company_id,
            company_info=info,
            company_background=_first(CompanyBackground, _rows(tables, "company_background")),
            organisation_chart=_first(OrganisationChart, _rows(tables, "organisation_chart")),
            halal_policy=_first(HalalPolicy, _rows(tables, "halal_policy")),
            products=_many(ProductListItem, _rows(tables, "product_list")),
            raw_materials=_many(RawMaterialMasterItem, master_rows),
            raw_material_sop=sop,
            raw_material_summary=_many(RawMaterialSummaryItem, _rows(tables, "raw_material_summary")),
            product_flow_chart_raw=_first(ProductFlowChartRaw, _rows(tables, "product_flow_chart_raw")),
            product_flow_process=_first(ProductFlowProcess, _rows(tables, "product_flow_process")),
            premise_plan=_first(PremisePlan, _rows(tables, "premise_plan")),
            traceability=_many(TraceabilityRecord, _rows(tables, "traceability")),
        )

    def section_doc_control(self, section: str) -> DocControl:
        """Header doc control for a section: the first row's triple, if any."""
        record = {
            "company_info": self.company_info,
            "company_background": self.company_background,
            "organisation_chart": self.organisation_chart,
            "halal_policy": self.halal_policy,
            "product_list": self.products[0] if self.products else None,
            "raw_material_master": self.raw_materials[0] if self.raw_materials else None,
            "raw_material_summary": self.raw_material_summary[0] if self.raw_material_summary else None,
            "product_flow_chart_raw": self.product_flow_chart_raw,
            "product_flow_process": self.product_flow_process,
            "premise_plan": self.premise_plan,
            "traceability": self.traceability[0] if self.traceability else None,
        }.get(section)
        return record.doc_control if record is not None else DocControl()
