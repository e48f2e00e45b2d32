# schemas for daily reports and their visit records
from datetime import date, datetime
from typing import List, Optional
from sqlmodel import SQLModel, Field
from pydantic import field_validator

from schemas.common_schema import Pagination, check_time_literal, parse_date_literal


class VisitCreateSchema(SQLModel):
    customer_id: int = Field(gt=0)
    visit_time: Optional[str] = None
    visit_content: str = Field(min_length=1, max_length=500)

    @field_validator("visit_time", mode="before")
    @classmethod
    def validate_visit_time(cls, v):
        return check_time_literal(v)


class ReportCreateSchema(SQLModel):
    report_date: date
    problem: str = Field(min_length=1, max_length=1000)
    plan: str = Field(min_length=1, max_length=1000)
    visits: List[VisitCreateSchema] = Field(min_length=1)

    @field_validator("report_date", mode="before")
    @classmethod
    def validate_report_date(cls, v):
        return parse_date_literal(v, "report_date")


# Update schema: every field optional, but a supplied field must be valid
class ReportUpdateSchema(SQLModel):
    problem: Optional[str] = Field(default=None, min_length=1, max_length=1000)
    plan: Optional[str] = Field(default=None, min_length=1, max_length=1000)
    visits: Optional[List[VisitCreateSchema]] = Field(default=None, min_length=1)

    @field_validator("problem", "plan", "visits", mode="before")
    @classmethod
    def reject_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class SalesPersonRef(SQLModel):
    id: int
    name: str


class SalesPersonContact(SalesPersonRef):
    email: str


class CustomerRef(SQLModel):
    id: int
    company_name: str


class VisitReadSchema(SQLModel):
    id: int
    customer: CustomerRef
    visit_time: Optional[str] = None
    visit_content: str


class ReportCommentSchema(SQLModel):
    id: int
    manager: SalesPersonRef
    comment: str
    created_at: datetime


class ReportDetailSchema(SQLModel):
    id: int
    report_date: date
    sales_person: SalesPersonContact
    problem: str
    plan: str
    visits: List[VisitReadSchema] = []
    comments: List[ReportCommentSchema] = []
    created_at: datetime
    updated_at: datetime


class ReportCreatedSchema(SQLModel):
    id: int
    report_date: date
    sales_person_id: int
    problem: str
    plan: str
    created_at: datetime


class ReportUpdatedSchema(SQLModel):
    id: int
    report_date: date
    sales_person_id: int
    problem: str
    plan: str
    updated_at: datetime


class ReportListItemSchema(SQLModel):
    id: int
    report_date: date
    sales_person: SalesPersonRef
    visit_count: int = Field(ge=0)
    has_comments: bool
    created_at: datetime


class ReportListResponse(SQLModel):
    data: List[ReportListItemSchema]
    pagination: Pagination
