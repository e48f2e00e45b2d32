import math
from typing import Annotated, Optional
from fastapi import Depends
from sqlmodel import Session, select, func
from models import Customer, DailyReport, ManagerComment, SalesPerson, VisitRecord
from errors import ApiError, NotFoundError, ValidationFailed
from schemas.auth_schema import Principal
from schemas.common_schema import Pagination, parse_date_literal
from security.oauth2 import require_auth


# -------------------------------
# Path and query parsing
# -------------------------------
def parse_positive_id(raw: str, code: str = "VALIDATION_ERROR", message: str = "Invalid ID format") -> int:
    """Path ids arrive as text so that garbage maps to our own 400, not FastAPI's."""
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ApiError(400, code, message)
    if value <= 0:
        raise ApiError(400, code, message)
    return value


def parse_query_date(value: Optional[str], field_name: str):
    if value is None or value == "":
        return None
    try:
        return parse_date_literal(value, field_name)
    except ValueError as e:
        raise ValidationFailed(details=[{"field": field_name, "message": str(e)}])


# -------------------------------
# Pagination
# -------------------------------
def paginate(db: Session, stmt, page: int, per_page: int):
    total = db.exec(select(func.count()).select_from(stmt.subquery())).one()
    rows = db.exec(stmt.offset((page - 1) * per_page).limit(per_page)).all()
    pagination = Pagination(
        total=total,
        page=page,
        per_page=per_page,
        total_pages=math.ceil(total / per_page) if total else 0,
    )
    return rows, pagination


# -------------------------------
# Dependency: Filter reports by current user
# -------------------------------
def filter_reports_by_user(current_user: Annotated[Principal, Depends(require_auth)]):
    """
    Returns a function that limits report queries to the caller's own reports
    for normal sales persons. Managers see all reports.
    """
    def filter_stmt(stmt):
        if not current_user.is_manager:
            stmt = stmt.where(DailyReport.sales_person_id == current_user.id)
        return stmt
    return filter_stmt


# -------------------------------
# Lookups
# -------------------------------
def get_report_or_404(db: Session, report_id: int) -> DailyReport:
    report = db.get(DailyReport, report_id)
    if not report:
        raise NotFoundError("Report not found", code="REPORT_NOT_FOUND")
    return report


def missing_customer_ids(db: Session, customer_ids) -> set[int]:
    wanted = set(customer_ids)
    if not wanted:
        return set()
    found = db.exec(select(Customer.id).where(Customer.id.in_(wanted))).all()
    return wanted - set(found)


# -------------------------------
# To return nested names with a report
# -------------------------------
def sales_person_ref(person: Optional[SalesPerson], person_id: int, with_email: bool = False) -> dict:
    data = {"id": person_id, "name": person.name if person else ""}
    if with_email:
        data["email"] = person.email if person else ""
    return data


def comment_to_dict(comment: ManagerComment, manager: Optional[SalesPerson]) -> dict:
    return {
        "id": comment.id,
        "report_id": comment.report_id,
        "manager_id": comment.manager_id,
        "manager": sales_person_ref(manager, comment.manager_id),
        "comment": comment.comment,
        "created_at": comment.created_at,
    }


def report_detail(db: Session, report: DailyReport) -> dict:
    owner = db.get(SalesPerson, report.sales_person_id)

    visit_rows = db.exec(
        select(VisitRecord, Customer)
        .join(Customer, Customer.id == VisitRecord.customer_id)
        .where(VisitRecord.report_id == report.id)
        .order_by(VisitRecord.visit_time, VisitRecord.id)
    ).all()

    comment_rows = db.exec(
        select(ManagerComment, SalesPerson)
        .join(SalesPerson, SalesPerson.id == ManagerComment.manager_id)
        .where(ManagerComment.report_id == report.id)
        .order_by(ManagerComment.created_at, ManagerComment.id)
    ).all()

    return {
        "id": report.id,
        "report_date": report.report_date,
        "sales_person": sales_person_ref(owner, report.sales_person_id, with_email=True),
        "problem": report.problem,
        "plan": report.plan,
        "visits": [
            {
                "id": visit.id,
                "customer": {"id": customer.id, "company_name": customer.company_name},
                "visit_time": visit.visit_time,
                "visit_content": visit.visit_content,
            }
            for visit, customer in visit_rows
        ],
        "comments": [
            {
                "id": comment.id,
                "manager": sales_person_ref(manager, comment.manager_id),
                "comment": comment.comment,
                "created_at": comment.created_at,
            }
            for comment, manager in comment_rows
        ],
        "created_at": report.created_at,
        "updated_at": report.updated_at,
    }
