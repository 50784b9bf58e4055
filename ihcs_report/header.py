from typing import Optional

from .config import DOCUMENT_NAME
from .layout import HeaderRegion, ImageRegion
from .records import CompanyInfo, DocControl


def render_header(
    page_number: Optional[int],
    doc_control: Optional[DocControl] = None,
    company: Optional[CompanyInfo] = None,
) -> HeaderRegion:
    """
    Bordered band repeated at the top of every content page: logo, upper-cased
    company name, the section's doc control triple, and the document name with
    the page number underneath.
    """
    doc_control = doc_control or DocControl()
    company = company or CompanyInfo()
    logo = company.logo_ref if isinstance(company.logo_ref, str) and company.logo_ref.strip() else None
    return HeaderRegion(
        logo=ImageRegion(src=logo, placeholder="Logo", style="logo"),
        company_name=company.display("name").upper(),
        implementation_date=doc_control.display("implementation_date"),
        reference_no=doc_control.display("reference_no"),
        review_no=doc_control.display("review_no"),
        document_name=DOCUMENT_NAME,
        page_number="" if page_number is None else str(page_number),
    )
