import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select, func, or_
from database import get_session, unit_of_work
from errors import ApiError, ConflictError, ForbiddenError, InternalError, NotFoundError
from models import DailyReport, ManagerComment, SalesPerson, utcnow
from schemas.auth_schema import Principal
from schemas.sales_person_schema import (
    PasswordResetResponse, PasswordResetSchema, SalesPersonCreateSchema,
    SalesPersonListResponse, SalesPersonReadSchema, SalesPersonUpdateSchema,
)
from security.hashing import hash_password
from security.oauth2 import require_manager
from security.policy import Action, Resource, authorize
from utils import paginate, parse_positive_id

logger = logging.getLogger(__name__)

# personal data and credentials: every route is manager-only
router = APIRouter(
    prefix="/api/sales-persons",
    tags=["SalesPerson"],
    dependencies=[Depends(require_manager)]
)


def _get_sales_person_or_404(db: Session, raw_id: str) -> SalesPerson:
    person = db.get(SalesPerson, parse_positive_id(raw_id))
    if not person:
        raise NotFoundError("Sales person not found")
    return person


def _email_taken(db: Session, email: str) -> bool:
    return db.exec(select(SalesPerson.id).where(SalesPerson.email == email)).first() is not None


def _duplicate_email() -> ConflictError:
    message = "This email address is already in use"
    return ConflictError("DUPLICATE_EMAIL", message, details=[{"field": "email", "message": message}])


@router.get("", response_model=SalesPersonListResponse, status_code=status.HTTP_200_OK)
def get_sales_persons(
    search: Optional[str] = Query(None, description="Matches name, email or department"),
    department: Optional[str] = Query(None),
    is_manager: Optional[bool] = Query(None),
    is_active: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_session),
    current_user: Principal = Depends(require_manager),
):
    authorize(current_user, Resource.SALES_PERSON, Action.READ)
    try:
        stmt = select(SalesPerson)
        if search and search.strip():
            pattern = f"%{search.strip().lower()}%"
            stmt = stmt.where(or_(
                func.lower(SalesPerson.name).like(pattern),
                func.lower(SalesPerson.email).like(pattern),
                func.lower(SalesPerson.department).like(pattern),
            ))
        if department:
            stmt = stmt.where(func.lower(SalesPerson.department).like(f"%{department.strip().lower()}%"))
        if is_manager is not None:
            stmt = stmt.where(SalesPerson.is_manager == is_manager)
        if is_active is not None:
            stmt = stmt.where(SalesPerson.is_active == is_active)

        stmt = stmt.order_by(SalesPerson.created_at.desc(), SalesPerson.id.desc())
        people, pagination = paginate(db, stmt, page, per_page)
        return {"data": people, "pagination": pagination}
    except Exception:
        logger.exception("Failed to fetch sales persons")
        raise InternalError()


@router.get("/{sales_person_id}", response_model=SalesPersonReadSchema, status_code=status.HTTP_200_OK)
def get_sales_person(
    sales_person_id: str,
    db: Session = Depends(get_session),
    current_user: Principal = Depends(require_manager),
):
    authorize(current_user, Resource.SALES_PERSON, Action.READ)
    return _get_sales_person_or_404(db, sales_person_id)


@router.post("", response_model=SalesPersonReadSchema, status_code=status.HTTP_201_CREATED)
def create_sales_person(
    payload: SalesPersonCreateSchema,
    db: Session = Depends(get_session),
    current_user: Principal = Depends(require_manager),
):
    authorize(current_user, Resource.SALES_PERSON, Action.CREATE)
    try:
        if _email_taken(db, payload.email):
            raise _duplicate_email()

        data = payload.model_dump(exclude={"password"})
        person = SalesPerson(**data, password_hash=hash_password(payload.password))
        with unit_of_work(db):
            db.add(person)

        db.refresh(person)
        logger.info("Sales person %s created by manager %s", person.id, current_user.id)
        return person
    except ApiError:
        raise
    except IntegrityError:
        if _email_taken(db, payload.email):
            raise _duplicate_email()
        logger.exception("Integrity error while creating sales person")
        raise InternalError()
    except Exception:
        logger.exception("Failed to create sales person")
        db.rollback()
        raise InternalError()


@router.put("/{sales_person_id}", response_model=SalesPersonReadSchema, status_code=status.HTTP_200_OK)
def update_sales_person(
    sales_person_id: str,
    payload: SalesPersonUpdateSchema,
    db: Session = Depends(get_session),
    current_user: Principal = Depends(require_manager),
):
    authorize(current_user, Resource.SALES_PERSON, Action.UPDATE)
    try:
        person = _get_sales_person_or_404(db, sales_person_id)

        update_data = payload.model_dump(exclude_unset=True)
        new_email = update_data.get("email")
        if new_email and new_email != person.email and _email_taken(db, new_email):
            raise _duplicate_email()

        with unit_of_work(db):
            for key, value in update_data.items():
                setattr(person, key, value)
            person.updated_at = utcnow()
            db.add(person)

        db.refresh(person)
        return person
    except ApiError:
        raise
    except IntegrityError:
        if payload.email and _email_taken(db, payload.email):
            raise _duplicate_email()
        logger.exception("Integrity error while updating sales person %s", sales_person_id)
        raise InternalError()
    except Exception:
        logger.exception("Failed to update sales person %s", sales_person_id)
        db.rollback()
        raise InternalError()


@router.delete("/{sales_person_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_sales_person(
    sales_person_id: str,
    db: Session = Depends(get_session),
    current_user: Principal = Depends(require_manager),
):
    authorize(current_user, Resource.SALES_PERSON, Action.DELETE)
    try:
        person = _get_sales_person_or_404(db, sales_person_id)

        has_reports = db.exec(
            select(DailyReport.id).where(DailyReport.sales_person_id == person.id)
        ).first() is not None
        has_comments = db.exec(
            select(ManagerComment.id).where(ManagerComment.manager_id == person.id)
        ).first() is not None

        person_id = person.id
        deactivate = has_reports or has_comments
        with unit_of_work(db):
            if deactivate:
                # history must keep its author: deactivate instead
                person.is_active = False
                person.updated_at = utcnow()
                db.add(person)
            else:
                db.delete(person)

        logger.info(
            "Sales person %s %s by manager %s",
            person_id, "deactivated" if deactivate else "deleted", current_user.id,
        )
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except ApiError:
        raise
    except Exception:
        logger.exception("Failed to delete sales person %s", sales_person_id)
        db.rollback()
        raise InternalError()


@router.post("/{sales_person_id}/reset-password", response_model=PasswordResetResponse, status_code=status.HTTP_200_OK)
def reset_password(
    sales_person_id: str,
    payload: PasswordResetSchema,
    db: Session = Depends(get_session),
    current_user: Principal = Depends(require_manager),
):
    authorize(current_user, Resource.SALES_PERSON, Action.UPDATE)
    try:
        person = _get_sales_person_or_404(db, sales_person_id)
        if not person.is_active:
            raise ForbiddenError("Cannot reset the password of an inactive account", code="ACCOUNT_INACTIVE")

        with unit_of_work(db):
            person.password_hash = hash_password(payload.password)
            person.updated_at = utcnow()
            db.add(person)

        db.refresh(person)
        return {
            "message": "Password has been reset",
            "user": {"id": person.id, "name": person.name, "email": person.email},
        }
    except ApiError:
        raise
    except Exception:
        logger.exception("Failed to reset password for sales person %s", sales_person_id)
        db.rollback()
        raise InternalError()
