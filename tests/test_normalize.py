from datetime import date, datetime

import pandas as pd
import pytest

from ihcs_report.normalize import (
    FieldSpec,
    coerce_int,
    coerce_items,
    format_date,
    format_value,
    normalize,
    normalize_items,
    total_staff,
    yes_no,
)


@pytest.mark.parametrize("value", [None, "", "   "])
def test_blank_scalars_render_fallback(value):
    assert normalize({"product_name": value}, FieldSpec("product_name")) == "N/A"
    assert normalize({"reference_no": value}, FieldSpec("reference_no", fallback="No value")) == "No value"


def test_missing_field_and_missing_record_render_fallback():
    spec = FieldSpec("mission", fallback="N/A")
    assert normalize({}, spec) == "N/A"
    assert normalize(None, spec) == "N/A"


def test_iso_date_renders_day_month_year():
    assert format_date("2024-03-05") == "05/03/2024"
    assert format_date("2024-03-05T10:15:00Z") == "05/03/2024"
    assert format_date(date(2024, 3, 5)) == "05/03/2024"
    assert format_date(datetime(2024, 12, 31, 8, 0)) == "31/12/2024"


@pytest.mark.parametrize(
    "value", ["not-a-date", "2024-13-45", 42, ["2024-03-05"], None, "", "now", "today", " Today "]
)
def test_malformed_dates_render_fallback(value):
    assert format_date(value, "No value") == "No value"


def test_total_staff_treats_absent_terms_as_zero():
    assert total_staff(2, None, 1, 5) == 8
    assert total_staff() == 0
    assert total_staff("3", "abc", "", 1) == 4


def test_coerce_int_handles_floats_and_garbage():
    assert coerce_int(4.0) == 4
    assert coerce_int("7") == 7
    assert coerce_int(float("nan")) == 0
    assert coerce_int({"a": 1}) == 0
    assert coerce_int(True) == 0


def test_display_integer_keeps_fallback_only_when_absent():
    spec = FieldSpec("muslim_employees", "integer", "Not stated")
    assert format_value(None, spec) == "Not stated"
    assert format_value("abc", spec) == "0"
    assert format_value(6, spec) == "6"


def test_list_inline_and_block_display():
    spec = FieldSpec("ingredients", "list")
    record = {"ingredients": ["Soybean", "Salt", None, " ", "Water"]}
    assert normalize(record, spec) == "Soybean, Salt, Water"
    assert normalize_items(record, spec) == ("Soybean", "Salt", "Water")
    assert normalize({"ingredients": []}, spec) == "N/A"
    assert normalize_items({}, spec) == ("N/A",)
    assert normalize({"ingredients": "Sugar"}, spec) == "Sugar"


def test_boolean_renders_yes_or_no():
    assert yes_no(True) == "Yes"
    assert yes_no("true") == "Yes"
    assert yes_no(None) == "No"
    assert yes_no("") == "No"
    assert yes_no(False) == "No"
    assert format_value(None, FieldSpec("has_declaration", "boolean")) == "No"


def test_date_or_text_keeps_free_text():
    spec = FieldSpec("cert_expiry", "date_or_text")
    assert format_value("2025-12-31", spec) == "31/12/2025"
    assert format_value("Lifetime", spec) == "Lifetime"
    assert format_value(None, spec) == "N/A"


def test_unknown_field_type_is_rejected():
    with pytest.raises(ValueError):
        FieldSpec("x", "money")


@pytest.mark.parametrize("value", ["inf", "-inf", "1e400", float("inf"), float("-inf")])
def test_non_finite_counts_are_zero(value):
    assert coerce_int(value) == 0
    assert total_staff(value, 1, None, 2) == 3
    assert format_value(value, FieldSpec("directors", "integer", "0")) == "0"


def test_pandas_missing_markers_render_fallback():
    spec = FieldSpec("product_name")
    assert format_value(pd.NA, spec) == "N/A"
    assert format_value(pd.NaT, spec) == "N/A"
    assert format_date(pd.NA, "No value") == "No value"
    assert coerce_int(pd.NA) == 0


def test_bytes_list_field_is_one_item():
    assert coerce_items(b"salt") == ("salt",)
    assert coerce_items(b"  ") == ()
