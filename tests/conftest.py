import pytest

DOC = {"implementation_date": "2024-01-15", "reference_no": "IHCS-01", "review_no": "2"}


@pytest.fixture
def company_tables():
    """A fully populated aggregator snapshot for one company."""
    return {
        "company_info": [
            {
                "id": "c-1",
                "company_name": "Kazai Foods Sdn Bhd",
                "ssm_no": "202301000123",
                "address": "12 Jalan Halal, Shah Alam",
                "company_logo_url": None,
                "prepared_by_name": "Aisyah",
                "prepared_by_position": "Halal Executive",
                "prepared_date": "2024-02-01",
                "approved_by_name": "Rahman",
                "approved_by_position": "Director",
                "approved_date": "2024-02-03",
            }
        ],
        "company_background": [
            {
                "company_info_id": "c-1",
                "establishment_details": "Established in 2010.",
                "mission": "Serve halal food.",
                "vision": "Regional leader.",
                "business_activity": "Sauce manufacturing.",
                "management_employees": "Family run.",
                "halal_certification_reason": "Export markets.",
                "premise_location_map_url": "https://maps.example/kazai",
                **DOC,
            }
        ],
        "organisation_chart": [
            {
                "company_info_id": "c-1",
                "company_name": "Kazai Foods",
                "directors": 2,
                "managers": None,
                "supervisors": 1,
                "employees": 5,
                "muslim_employees": 6,
                "org_chart_url": None,
                **DOC,
            }
        ],
        "halal_policy": [
            {
                "company_info_id": "c-1",
                "policy_text": "We are committed to halal.",
                "policy_points": ["Use certified materials", "Train staff"],
                "director_name": "Rahman",
                "director_designation": "Managing Director",
                "approval_date": "2024-03-05",
                **DOC,
            }
        ],
        "product_list": [
            {
                "company_info_id": "c-1",
                "product_name": "Soy Sauce",
                "ingredients_raw_materials": ["Soybean", "Salt", "Water"],
                **DOC,
            }
        ],
        "raw_material_master": [
            {
                "company_info_id": "c-1",
                "raw_material_name": "Soybean",
                "scientific_trade_name": "Glycine max",
                "source_of_raw_material": "Plant",
                "manufacturer_name_address": "Agro Sdn Bhd, Johor",
                "material_declaration_authorities": True,
                "halal_cert_body": "JAKIM",
                "halal_cert_expiry": "2025-12-31",
            },
            {
                "company_info_id": "c-1",
                "raw_material_name": "Salt",
                "material_declaration_authorities": False,
            },
        ],
        "raw_material_sop": [
            {
                "company_info_id": "c-1",
                "objective": "Control incoming materials.",
                "scope": "All raw materials.",
                "responsibilities": "Purchasing team.",
                "frequency": "Every delivery.",
                "purchase": "Approved suppliers only.",
                "receipt": "Check certificates.",
                "storage": "Segregated store.",
                "record": "Receiving log.",
            }
        ],
        "raw_material_summary": [
            {
                "company_info_id": "c-1",
                "material_name": "Soybean",
                "supplier": "Agro Sdn Bhd",
                "cert_no": "JAKIM-123",
                "expiry_date": "2025-12-31",
            }
        ],
        "product_flow_chart_raw": [
            {"company_info_id": "c-1", "description": "Receiving to storage.", "flowchart_image_url": None}
        ],
        "product_flow_process": [
            {"company_info_id": "c-1", "description": "Mixing and bottling.", "flowchart_image_url": ""}
        ],
        "premise_plan": [
            {"company_info_id": "c-1", "layout_image_url": None, "description": "Single storey factory."}
        ],
        "traceability": [
            {"company_info_id": "c-1", "file1_url": "https://files.example/t1a.png", "file2_url": None},
            {"company_info_id": "c-1", "file1_url": "https://files.example/t2a.png", "file2_url": "https://files.example/t2b.png"},
        ],
        "profiles": [],
    }


@pytest.fixture
def empty_tables():
    return {
        "company_info": [],
        "company_background": [],
        "organisation_chart": [],
        "halal_policy": [],
        "product_list": [],
        "raw_material_master": [],
        "raw_material_sop": [],
        "raw_material_summary": [],
        "product_flow_chart_raw": [],
        "product_flow_process": [],
        "premise_plan": [],
        "traceability": [],
        "profiles": [],
    }
