import pytest

from ihcs_report.compositor import build_pages
from ihcs_report.config import TOC_ENTRIES
from ihcs_report.layout import LANDSCAPE, PORTRAIT, TableRegion, TextRegion
from ihcs_report.records import ReportSnapshot


def _section(pages, section):
    return [p for p in pages if p.section == section]


def _reference_pages(pages, heading):
    return [p for p in _section(pages, "traceability") if p.template == "reference" and p.texts()[0] == heading]


def test_fixed_page_order(company_tables):
    pages = build_pages(company_tables)
    order = []
    for page in pages:
        if page.section not in order:
            order.append(page.section)
    assert order == ["cover", "contents"] + [sid for sid, _, _ in TOC_ENTRIES]
    assert len(pages) == 25


def test_all_sections_empty_still_composes(empty_tables):
    pages = build_pages(empty_tables)
    assert len(pages) == 22
    assert pages[0].template == "cover"
    assert pages[1].template == "toc"
    assert build_pages({}) == pages
    assert build_pages(None) == pages

    titled = {p.section for p in pages if p.template == "title"}
    assert titled == {sid for sid, _, _ in TOC_ENTRIES} - {"raw_material_master"}


def test_no_blank_or_null_text_anywhere(empty_tables):
    for page in build_pages(empty_tables):
        for region in page.regions:
            if isinstance(region, TextRegion):
                assert region.text.strip()
                assert "None" not in region.text
            elif isinstance(region, TableRegion):
                for row in region.rows:
                    assert all(cell.strip() and cell != "None" for cell in row)
        if page.header is not None:
            assert page.header.implementation_date == "No value"
            assert page.header.reference_no == "No value"
            assert page.header.review_no == "No value"


def test_cover_page(company_tables):
    cover = build_pages(company_tables)[0]
    assert cover.header is None
    texts = cover.texts()
    assert texts[0] == "INTERNAL HALAL CONTROL SYSTEM (IHCS)"
    assert "KAZAI FOODS SDN BHD" in texts
    assert "(202301000123)" in texts
    assert cover.images()[0].placeholder == "COMPANY LOGO"
    signatories = cover.tables()[0]
    assert signatories.headers == ("Prepared By", "Approved By")
    assert signatories.rows[2] == ("Date: 01/02/2024", "Date: 03/02/2024")


def test_static_table_of_contents(company_tables):
    toc = build_pages(company_tables)[1]
    table = toc.tables()[0]
    assert len(table.rows) == 10
    assert table.rows[0] == ("1.", "Company Background", "4")
    assert table.rows[-1] == ("10.", "Traceability", "21")
    assert toc.header.page_number == "3"


def test_static_header_numbers_do_not_track_emission(company_tables):
    pages = build_pages(company_tables)
    refs = [p.page_number for p in _section(pages, "traceability")]
    assert refs == [21, 22, 22, 23]
    assert [p.page_number for p in _section(pages, "product_list")] == [10, 11, 12]


def test_running_numbering_follows_emission(company_tables):
    pages = build_pages(company_tables, numbering="running")
    assert [p.page_number for p in pages] == list(range(1, len(pages) + 1))
    toc_rows = {row[1]: row[2] for row in pages[1].tables()[0].rows}
    assert toc_rows["Company Background"] == "3"
    assert toc_rows["Raw Material Master"] == "12"
    assert toc_rows["Traceability"] == "22"
    assert all(p.header.page_number == str(p.page_number) for p in pages[1:])


def test_unknown_numbering_mode_is_rejected(company_tables):
    with pytest.raises(ValueError):
        build_pages(company_tables, numbering="roman")


def test_product_list_tables(company_tables):
    company_tables["product_list"] = [
        {"productName": "ignored", "product_name": "Soy Sauce", "ingredients_raw_materials": ["Soybean", "Salt", "Water"]}
    ]
    pages = _section(build_pages(company_tables), "product_list")
    summary, full = pages[1].tables()[0], pages[2].tables()[0]
    assert summary.rows == (("1", "Soy Sauce"),)
    assert full.rows == (("1", "Soy Sauce", "Soybean, Salt, Water"),)
    assert full.headers == ("No.", "Product Name", "Ingredients")


def test_empty_product_list_uses_fallback_row(empty_tables):
    pages = _section(build_pages(empty_tables), "product_list")
    for page in pages[1:]:
        table = page.tables()[0]
        assert table.is_fallback
        assert table.rows == (("No products found.",),)


def test_raw_material_master_is_landscape_with_single_sop_page(company_tables):
    pages = build_pages(company_tables)
    master = _section(pages, "raw_material_master")
    assert [p.orientation for p in master] == [LANDSCAPE, PORTRAIT]
    assert all(p.orientation == PORTRAIT for p in pages if p.section != "raw_material_master")

    table = master[0].tables()[0]
    assert table.headers[1:] == (
        "Material Name",
        "Scientific / Brand Name",
        "Raw Material Source",
        "Manufacturer",
        "Material Declaration",
        "Halal Cert Body",
        "Expiry Date",
    )
    assert table.rows[0][5:] == ("Yes", "JAKIM", "31/12/2025")
    assert table.rows[1] == ("2", "Salt", "N/A", "N/A", "N/A", "No", "N/A", "N/A")

    sop_texts = master[1].texts()
    assert sop_texts.count("Objective") == 1
    assert "Receiving log." in sop_texts


def test_missing_sop_renders_message(empty_tables):
    sop_page = _section(build_pages(empty_tables), "raw_material_master")[1]
    assert "No SOP data available." in sop_page.texts()


def test_organisation_chart_narrative(company_tables):
    content = _section(build_pages(company_tables), "organisation_chart")[1]
    texts = content.texts()
    assert texts[1] == (
        "Kazai Foods is currently managed and operated with a team of 8 employees; "
        "2 Directors, 0 Managers, 1 Supervisors and 5 general employees."
    )
    assert "consist of 6 Muslim employees" in texts[3]
    assert content.images()[0].src is None
    assert content.images()[0].placeholder == "[ Organisation Chart Image Not Available ]"


def test_halal_policy_content(company_tables):
    content = _section(build_pages(company_tables), "halal_policy")[1]
    texts = content.texts()
    assert "We are committed to halal." in texts
    assert "1. Use certified materials" in texts
    assert "2. Train staff" in texts
    assert "Date : 05/03/2024" in texts
    assert content.header.reference_no == "IHCS-01"


def test_halal_policy_fallback(empty_tables):
    content = _section(build_pages(empty_tables), "halal_policy")[1]
    texts = content.texts()
    assert "No halal policy data available." in texts
    assert "Name : N/A" in texts


def test_flow_charts_and_premise_fallbacks(empty_tables):
    pages = build_pages(empty_tables)
    raw = _section(pages, "product_flow_chart_raw")[1]
    process = _section(pages, "product_flow_process")[1]
    premise = _section(pages, "premise_plan")[1]
    assert "No description provided." in raw.texts()
    assert raw.images()[0].placeholder == "No image provided."
    assert process.images()[0].placeholder == "No flowchart image available."
    assert premise.images()[0].placeholder == "No premise plan image provided."
    assert premise.texts()[-1] == "No description provided."


def test_traceability_fan_out(company_tables):
    pages = build_pages(company_tables)
    assert len(_reference_pages(pages, "REFERENCE 1")) == 2
    assert len(_reference_pages(pages, "REFERENCE 2")) == 1


def test_traceability_record_with_only_second_file(company_tables):
    company_tables["traceability"] = [{"file1_url": None, "file2_url": "https://files.example/only2.png"}]
    pages = build_pages(company_tables)
    assert _reference_pages(pages, "REFERENCE 1") == []
    second = _reference_pages(pages, "REFERENCE 2")
    assert len(second) == 1
    assert second[0].images()[0].src == "https://files.example/only2.png"
    assert not any(p.texts()[0] == "REFERENCE" for p in _section(pages, "traceability"))


def test_traceability_record_without_files_gets_fallback_page(company_tables):
    company_tables["traceability"] = [{"file1_url": None, "file2_url": ""}]
    trace = _section(build_pages(company_tables), "traceability")
    assert len(trace) == 2
    assert trace[1].texts() == ("REFERENCE", "No reference file provided.")


def test_empty_traceability_emits_only_title(empty_tables):
    trace = _section(build_pages(empty_tables), "traceability")
    assert [p.template for p in trace] == ["title"]


def test_composition_is_idempotent(company_tables):
    first = build_pages(company_tables)
    second = build_pages(company_tables)
    assert first == second
    assert [p.to_dict() for p in first] == [p.to_dict() for p in second]


def test_accepts_prebuilt_snapshot(company_tables):
    snapshot = ReportSnapshot.from_tables(company_tables)
    assert build_pages(snapshot) == build_pages(company_tables)


@pytest.mark.parametrize("count", ["inf", "-inf", "1e400", float("inf")])
def test_non_finite_staff_counts_do_not_break_composition(count):
    pages = build_pages({"organisation_chart": [{"company_name": "Kazai Foods", "directors": count, "managers": 1}]})
    narrative = _section(pages, "organisation_chart")[1].texts()[1]
    assert "a team of 1 employees; 0 Directors, 1 Managers" in narrative


def test_relative_date_words_are_not_dates(company_tables):
    company_tables["halal_policy"][0]["approval_date"] = "now"
    company_tables["halal_policy"][0]["implementation_date"] = "today"
    content = _section(build_pages(company_tables), "halal_policy")[1]
    assert "Date : N/A" in content.texts()
    assert content.header.implementation_date == "No value"
