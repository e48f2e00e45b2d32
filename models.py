# models.py
from datetime import date, datetime, timezone
from typing import Optional
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, Date, DateTime, UniqueConstraint


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def timestamp_column() -> Column:
    # one Column per field, a Column cannot be shared between tables
    return Column(DateTime(timezone=True), nullable=False)


class SalesPerson(SQLModel, table=True):
    __tablename__ = "sales_person"
    __table_args__ = (
        UniqueConstraint("email", name="uq_sales_person_email"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100)
    email: str = Field(index=True, nullable=False, max_length=255)
    password_hash: str = Field(nullable=False)
    department: str = Field(default="", max_length=100)
    is_manager: bool = Field(default=False, description="Managers comment on reports and manage master data")
    is_active: bool = Field(default=True, description="Inactive accounts cannot log in")
    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
    updated_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())


class Customer(SQLModel, table=True):
    __tablename__ = "customer"

    id: Optional[int] = Field(default=None, primary_key=True)
    company_name: str = Field(index=True, max_length=200)
    contact_person: str = Field(max_length=100)
    phone: str = Field(max_length=20)
    email: str = Field(max_length=100)
    address: str = Field(default="", max_length=500)
    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
    updated_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())


class DailyReport(SQLModel, table=True):
    __tablename__ = "daily_report"
    __table_args__ = (
        # one report per sales person per day
        UniqueConstraint("sales_person_id", "report_date", name="uq_daily_report_owner_date"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    sales_person_id: int = Field(foreign_key="sales_person.id", index=True, nullable=False, ondelete="RESTRICT")
    report_date: date = Field(sa_column=Column(Date, nullable=False, index=True))
    problem: str = Field(max_length=1000)
    plan: str = Field(max_length=1000)
    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
    updated_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())


class VisitRecord(SQLModel, table=True):
    __tablename__ = "visit_record"

    id: Optional[int] = Field(default=None, primary_key=True)
    report_id: int = Field(foreign_key="daily_report.id", index=True, nullable=False, ondelete="CASCADE")
    customer_id: int = Field(foreign_key="customer.id", index=True, nullable=False, ondelete="RESTRICT")
    visit_time: Optional[str] = Field(default=None, nullable=True, max_length=5, description="HH:MM")
    visit_content: str = Field(max_length=500)
    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())


class ManagerComment(SQLModel, table=True):
    __tablename__ = "manager_comment"

    id: Optional[int] = Field(default=None, primary_key=True)
    report_id: int = Field(foreign_key="daily_report.id", index=True, nullable=False, ondelete="CASCADE")
    manager_id: int = Field(foreign_key="sales_person.id", index=True, nullable=False, ondelete="RESTRICT")
    comment: str = Field(max_length=500)
    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
