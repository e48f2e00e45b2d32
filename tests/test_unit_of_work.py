import pytest
from sqlmodel import select

from database import unit_of_work
from models import Customer


def make_customer(name):
    return Customer(company_name=name, contact_person="Someone", phone="000", email="x@example.com")


def test_commits_on_success(session):
    with unit_of_work(session):
        session.add(make_customer("Kept"))

    assert [c.company_name for c in session.exec(select(Customer)).all()] == ["Kept"]


def test_rolls_back_everything_on_error(session):
    with pytest.raises(RuntimeError):
        with unit_of_work(session):
            session.add(make_customer("First"))
            session.flush()
            session.add(make_customer("Second"))
            raise RuntimeError("boom")

    assert session.exec(select(Customer)).all() == []
