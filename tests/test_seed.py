from sqlmodel import select

from models import Customer, DailyReport, ManagerComment, SalesPerson, VisitRecord
from seed import DEMO_PASSWORD, seed


def test_seed_demo_data(client, session):
    assert seed(session) is True

    assert len(session.exec(select(SalesPerson)).all()) == 3
    assert len(session.exec(select(Customer)).all()) == 3
    assert len(session.exec(select(DailyReport)).all()) == 2
    assert len(session.exec(select(VisitRecord)).all()) == 3
    assert len(session.exec(select(ManagerComment)).all()) == 1

    response = client.post("/api/auth/login", json={"email": "yamada@example.com", "password": DEMO_PASSWORD})
    assert response.status_code == 200
    assert response.json()["user"]["is_manager"] is False


def test_seed_skips_populated_database(session, yamada):
    assert seed(session) is False
    assert len(session.exec(select(SalesPerson)).all()) == 1
