import os

# must be set before the app modules read their settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret-key-for-the-suite"
os.environ["ENVIRONMENT"] = "test"

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from database import engine, get_session
from main import app
from models import Customer, SalesPerson
from security.hashing import hash_password
from security.token_jwt import issue_token

PASSWORD = "password123"


@pytest.fixture
def session():
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def client(session):
    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_sales_person(session, name, email, is_manager=False, is_active=True, department="Sales 1"):
    person = SalesPerson(
        name=name,
        email=email,
        password_hash=hash_password(PASSWORD),
        department=department,
        is_manager=is_manager,
        is_active=is_active,
    )
    session.add(person)
    session.commit()
    session.refresh(person)
    return person


def auth_headers(user):
    token, _ = issue_token(user)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def yamada(session):
    return make_sales_person(session, "Taro Yamada", "yamada@example.com")


@pytest.fixture
def suzuki(session):
    return make_sales_person(session, "Hanako Suzuki", "suzuki@example.com")


@pytest.fixture
def manager(session):
    return make_sales_person(session, "Manager Tanaka", "tanaka@example.com", is_manager=True)


@pytest.fixture
def yamada_headers(yamada):
    return auth_headers(yamada)


@pytest.fixture
def suzuki_headers(suzuki):
    return auth_headers(suzuki)


@pytest.fixture
def manager_headers(manager):
    return auth_headers(manager)


@pytest.fixture
def customers(session):
    rows = [
        Customer(company_name="ABC Trading", contact_person="Ichiro Sato",
                 phone="03-1234-5678", email="sato@abc.co.jp"),
        Customer(company_name="XYZ Industries", contact_person="Jiro Takahashi",
                 phone="06-9876-5432", email="takahashi@xyz.co.jp"),
        Customer(company_name="DEF Corporation", contact_person="Saburo Ito",
                 phone="045-1111-2222", email="ito@def.co.jp"),
    ]
    session.add_all(rows)
    session.commit()
    for row in rows:
        session.refresh(row)
    return rows


def report_payload(customers, report_date="2024-01-15", visits=1, **overrides):
    payload = {
        "report_date": report_date,
        "problem": "Competitor pricing is putting pressure on renewals.",
        "plan": "Follow up with ABC Trading on the quote.",
        "visits": [
            {
                "customer_id": customers[i % len(customers)].id,
                "visit_time": f"{9 + i:02d}:00",
                "visit_content": f"Visit number {i + 1}",
            }
            for i in range(visits)
        ],
    }
    payload.update(overrides)
    return payload
