"""
Load demo data into an empty database.

    python seed.py

Creates three sales persons (two reps and a manager, all with the password
``password123``), three customers, two reports for today and yesterday with
their visits, and one manager comment.
"""
import logging
from datetime import date, timedelta
from sqlmodel import Session, SQLModel, select
from database import engine, unit_of_work
from logging_config import setup_logging
from models import Customer, DailyReport, ManagerComment, SalesPerson, VisitRecord
from security.hashing import hash_password

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password123"


def seed(session: Session) -> bool:
    """Insert the demo rows. Returns False when the database already has users."""
    if session.exec(select(SalesPerson.id)).first() is not None:
        logger.info("Database already contains sales persons, skipping seed")
        return False

    password_hash = hash_password(DEMO_PASSWORD)

    with unit_of_work(session):
        yamada = SalesPerson(name="Taro Yamada", email="yamada@example.com",
                             password_hash=password_hash, department="Sales 1")
        suzuki = SalesPerson(name="Hanako Suzuki", email="suzuki@example.com",
                             password_hash=password_hash, department="Sales 1")
        tanaka = SalesPerson(name="Manager Tanaka", email="tanaka@example.com",
                             password_hash=password_hash, department="Sales 1", is_manager=True)

        abc = Customer(company_name="ABC Trading", contact_person="Ichiro Sato",
                       phone="03-1234-5678", email="sato@abc.co.jp",
                       address="1-1-1 Otemachi, Chiyoda-ku, Tokyo")
        xyz = Customer(company_name="XYZ Industries", contact_person="Jiro Takahashi",
                       phone="06-9876-5432", email="takahashi@xyz.co.jp",
                       address="2-2-2 Umeda, Kita-ku, Osaka")
        defco = Customer(company_name="DEF Corporation", contact_person="Saburo Ito",
                         phone="045-1111-2222", email="ito@def.co.jp",
                         address="3-3-3 Yamashitacho, Naka-ku, Yokohama")
        session.add_all([yamada, suzuki, tanaka, abc, xyz, defco])
        session.flush()

        today = date.today()
        report = DailyReport(
            sales_person_id=yamada.id,
            report_date=today,
            problem="New account development is behind schedule. Need more information on competitors.",
            plan="Prepare a quote for ABC Trading. Call 50 prospects from the new list.",
        )
        earlier = DailyReport(
            sales_person_id=yamada.id,
            report_date=today - timedelta(days=1),
            problem="Quotes take too long to prepare.",
            plan="Three customer visits. Book new appointments.",
        )
        session.add_all([report, earlier])
        session.flush()

        session.add_all([
            VisitRecord(report_id=report.id, customer_id=abc.id, visit_time="10:00",
                        visit_content="Proposed the new product line. Quote to follow."),
            VisitRecord(report_id=report.id, customer_id=xyz.id, visit_time="14:00",
                        visit_content="Maintenance consultation, they asked for extra features."),
            VisitRecord(report_id=earlier.id, customer_id=defco.id, visit_time="11:00",
                        visit_content="First visit. Company and product introduction."),
            ManagerComment(report_id=report.id, manager_id=tanaka.id,
                           comment="Let's talk about new accounts tomorrow. Prioritise the ABC quote."),
        ])

    logger.info("Seeded demo data")
    return True


if __name__ == "__main__":
    setup_logging()
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        seed(session)
