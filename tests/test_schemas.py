from datetime import date

import pytest
from pydantic import ValidationError

from errors import validation_details
from schemas.common_schema import check_time_literal, parse_date_literal
from schemas.customer_schema import CustomerCreateSchema
from schemas.report_schema import ReportCreateSchema, ReportUpdateSchema
from schemas.sales_person_schema import SalesPersonCreateSchema


def test_parse_date_literal():
    assert parse_date_literal("2024-02-29") == date(2024, 2, 29)
    with pytest.raises(ValueError):
        parse_date_literal("2023-02-29")
    with pytest.raises(ValueError):
        parse_date_literal("2024-02-29T00:00:00")


def test_check_time_literal():
    assert check_time_literal("") is None
    assert check_time_literal(None) is None
    assert check_time_literal("23:59") == "23:59"
    with pytest.raises(ValueError):
        check_time_literal("7:5")


def test_report_create_unknown_fields_ignored():
    report = ReportCreateSchema.model_validate({
        "report_date": "2024-01-15",
        "problem": "p",
        "plan": "q",
        "visits": [{"customer_id": 1, "visit_content": "c", "visit_time": ""}],
        "sales_person_id": 42,
    })

    assert report.visits[0].visit_time is None
    assert not hasattr(report, "sales_person_id")


def test_report_create_rejects_non_positive_customer():
    with pytest.raises(ValidationError) as exc_info:
        ReportCreateSchema.model_validate({
            "report_date": "2024-01-15",
            "problem": "p",
            "plan": "q",
            "visits": [{"customer_id": 0, "visit_content": "c"}],
        })

    details = validation_details(exc_info.value.errors())
    assert details[0]["field"] == "visits.0.customer_id"


def test_report_update_tracks_supplied_fields():
    update = ReportUpdateSchema.model_validate({"plan": "new"})

    assert update.model_dump(exclude_unset=True) == {"plan": "new"}


def test_customer_strips_whitespace():
    customer = CustomerCreateSchema.model_validate({
        "company_name": "  ABC Trading  ",
        "contact_person": "Ichiro Sato",
        "phone": "03-1234-5678",
        "email": "sato@abc.co.jp",
    })

    assert customer.company_name == "ABC Trading"
    assert customer.address == ""


def test_customer_email_length():
    with pytest.raises(ValidationError):
        CustomerCreateSchema.model_validate({
            "company_name": "ABC",
            "contact_person": "Sato",
            "phone": "03",
            "email": "a" * 90 + "@example.com",
        })


def test_password_too_long_for_bcrypt():
    # 25 three-byte characters pass the length check but exceed 72 bytes
    with pytest.raises(ValidationError) as exc_info:
        SalesPersonCreateSchema.model_validate({
            "name": "Long",
            "email": "long@example.com",
            "password": "Aa1" + "あ" * 25,
        })

    assert "72 bytes" in validation_details(exc_info.value.errors())[0]["message"]
