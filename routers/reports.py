import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select, func
from database import get_session, unit_of_work
from errors import ApiError, ConflictError, InternalError, ValidationFailed
from models import DailyReport, ManagerComment, SalesPerson, VisitRecord, utcnow
from schemas.auth_schema import Principal
from schemas.report_schema import (
    ReportCreateSchema, ReportCreatedSchema, ReportDetailSchema, ReportListResponse,
    ReportUpdateSchema, ReportUpdatedSchema,
)
from security.oauth2 import require_auth
from security.policy import Action, Resource, authorize
from utils import (
    filter_reports_by_user, get_report_or_404, missing_customer_ids, paginate,
    parse_positive_id, parse_query_date, report_detail,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/reports",
    tags=["Report"],
    dependencies=[Depends(require_auth)]
)


def _report_id(raw: str) -> int:
    return parse_positive_id(raw, "INVALID_REPORT_ID", "Invalid report ID")


def _check_customers(db: Session, visits) -> None:
    missing = missing_customer_ids(db, [v["customer_id"] for v in visits])
    if missing:
        raise ValidationFailed(details=[
            {"field": f"visits.{i}.customer_id", "message": "Customer not found"}
            for i, v in enumerate(visits) if v["customer_id"] in missing
        ])


def _duplicate_exists(db: Session, sales_person_id: int, report_date) -> bool:
    stmt = select(DailyReport.id).where(
        DailyReport.sales_person_id == sales_person_id,
        DailyReport.report_date == report_date,
    )
    return db.exec(stmt).first() is not None


def _duplicate_report() -> ConflictError:
    return ConflictError("DUPLICATE_REPORT", "A report for this date already exists")


# -------------------------------
# Get list of reports (paginated)
# -------------------------------
@router.get("", response_model=ReportListResponse, status_code=status.HTTP_200_OK)
def list_reports(
    start_date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    end_date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    sales_person_id: Optional[int] = Query(None, ge=1, description="Managers only; ignored for others"),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_session),
    current_user: Principal = Depends(require_auth),
    filter_stmt=Depends(filter_reports_by_user),
):
    date_from = parse_query_date(start_date, "start_date")
    date_to = parse_query_date(end_date, "end_date")
    try:
        visit_count = (
            select(func.count(VisitRecord.id))
            .where(VisitRecord.report_id == DailyReport.id)
            .correlate(DailyReport)
            .scalar_subquery()
        )
        comment_count = (
            select(func.count(ManagerComment.id))
            .where(ManagerComment.report_id == DailyReport.id)
            .correlate(DailyReport)
            .scalar_subquery()
        )
        stmt = filter_stmt(
            select(DailyReport, SalesPerson.name, visit_count.label("visit_count"), comment_count.label("comment_count"))
            .join(SalesPerson, SalesPerson.id == DailyReport.sales_person_id)
        )

        if current_user.is_manager and sales_person_id:
            stmt = stmt.where(DailyReport.sales_person_id == sales_person_id)
        if date_from:
            stmt = stmt.where(DailyReport.report_date >= date_from)
        if date_to:
            stmt = stmt.where(DailyReport.report_date <= date_to)

        stmt = stmt.order_by(DailyReport.report_date.desc(), DailyReport.id.desc())
        rows, pagination = paginate(db, stmt, page, per_page)

        return {
            "data": [
                {
                    "id": report.id,
                    "report_date": report.report_date,
                    "sales_person": {"id": report.sales_person_id, "name": name},
                    "visit_count": visits,
                    "has_comments": comments > 0,
                    "created_at": report.created_at,
                }
                for report, name, visits, comments in rows
            ],
            "pagination": pagination,
        }
    except ApiError:
        raise
    except Exception:
        logger.exception("Failed to fetch reports")
        raise InternalError()


# -------------------------------
# Create report with its visits
# -------------------------------
@router.post("", response_model=ReportCreatedSchema, status_code=status.HTTP_201_CREATED)
def create_report(
    payload: ReportCreateSchema,
    db: Session = Depends(get_session),
    current_user: Principal = Depends(require_auth),
):
    authorize(current_user, Resource.REPORT, Action.CREATE)
    try:
        if _duplicate_exists(db, current_user.id, payload.report_date):
            logger.info("Duplicate report for user %s on %s", current_user.id, payload.report_date)
            raise _duplicate_report()

        visits = [v.model_dump() for v in payload.visits]
        _check_customers(db, visits)

        report = DailyReport(
            sales_person_id=current_user.id,
            report_date=payload.report_date,
            problem=payload.problem,
            plan=payload.plan,
        )
        with unit_of_work(db):
            db.add(report)
            db.flush()  # assigns report.id for the children
            for visit in visits:
                db.add(VisitRecord(report_id=report.id, **visit))

        db.refresh(report)
        logger.info("Report %s created by user %s", report.id, current_user.id)
        return report

    except ApiError:
        raise
    except IntegrityError:
        # lost a race against a concurrent submit for the same date
        if _duplicate_exists(db, current_user.id, payload.report_date):
            raise _duplicate_report()
        logger.exception("Integrity error while creating report")
        raise InternalError()
    except Exception:
        logger.exception("Failed to create report")
        db.rollback()
        raise InternalError()


# -------------------------------
# Report detail
# -------------------------------
@router.get("/{report_id}", response_model=ReportDetailSchema, status_code=status.HTTP_200_OK)
def get_report(
    report_id: str,
    db: Session = Depends(get_session),
    current_user: Principal = Depends(require_auth),
):
    rid = _report_id(report_id)
    try:
        report = get_report_or_404(db, rid)
        authorize(current_user, Resource.REPORT, Action.READ, owner_id=report.sales_person_id)
        return report_detail(db, report)
    except ApiError:
        raise
    except Exception:
        logger.exception("Failed to fetch report %s", rid)
        raise InternalError()


# -------------------------------
# Update report (owner only)
# -------------------------------
@router.put("/{report_id}", response_model=ReportUpdatedSchema, status_code=status.HTTP_200_OK)
def update_report(
    report_id: str,
    payload: ReportUpdateSchema,
    db: Session = Depends(get_session),
    current_user: Principal = Depends(require_auth),
):
    rid = _report_id(report_id)
    try:
        report = get_report_or_404(db, rid)
        authorize(current_user, Resource.REPORT, Action.UPDATE, owner_id=report.sales_person_id)

        update_data = payload.model_dump(exclude_unset=True)
        visits = update_data.pop("visits", None)
        if visits is not None:
            _check_customers(db, visits)

        with unit_of_work(db):
            for key, value in update_data.items():
                setattr(report, key, value)
            report.updated_at = utcnow()
            db.add(report)

            if visits is not None:
                # the visit set is replaced wholesale, never diffed
                old_visits = db.exec(select(VisitRecord).where(VisitRecord.report_id == report.id)).all()
                for visit in old_visits:
                    db.delete(visit)
                db.flush()
                for visit in visits:
                    db.add(VisitRecord(report_id=report.id, **visit))

        db.refresh(report)
        return report

    except ApiError:
        raise
    except Exception:
        logger.exception("Failed to update report %s", rid)
        db.rollback()
        raise InternalError()


# -------------------------------
# Delete report (owner only)
# -------------------------------
@router.delete("/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_report(
    report_id: str,
    db: Session = Depends(get_session),
    current_user: Principal = Depends(require_auth),
):
    rid = _report_id(report_id)
    try:
        report = get_report_or_404(db, rid)
        authorize(current_user, Resource.REPORT, Action.DELETE, owner_id=report.sales_person_id)

        with unit_of_work(db):
            for model in (VisitRecord, ManagerComment):
                for child in db.exec(select(model).where(model.report_id == report.id)).all():
                    db.delete(child)
            db.flush()
            db.delete(report)

        logger.info("Report %s deleted by user %s", rid, current_user.id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    except ApiError:
        raise
    except Exception:
        logger.exception("Failed to delete report %s", rid)
        db.rollback()
        raise InternalError()
