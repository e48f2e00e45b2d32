from datetime import timezone

from sqlalchemy import DateTime

from models import Customer, DailyReport, ManagerComment, SalesPerson, VisitRecord, utcnow


def test_utcnow_is_timezone_aware():
    assert utcnow().tzinfo is timezone.utc


def test_timestamp_columns_store_timezone():
    for model in (SalesPerson, Customer, DailyReport, VisitRecord, ManagerComment):
        for name in ("created_at", "updated_at"):
            column = model.__table__.columns.get(name)
            if column is None:
                continue
            assert isinstance(column.type, DateTime)
            assert column.type.timezone is True
            assert column.nullable is False


def test_new_rows_get_aware_timestamps(session):
    customer = Customer(company_name="Aware Ltd", contact_person="Someone", phone="000", email="a@example.com")

    assert customer.created_at.tzinfo is not None
    assert customer.updated_at.tzinfo is not None

    session.add(customer)
    session.commit()
    session.refresh(customer)
    assert customer.id is not None
