import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlmodel import Session, select, func, or_
from database import get_session, unit_of_work
from errors import ApiError, ConflictError, InternalError, NotFoundError
from models import Customer, VisitRecord, utcnow
from schemas.auth_schema import Principal
from schemas.customer_schema import CustomerCreateSchema, CustomerListResponse, CustomerReadSchema, CustomerUpdateSchema
from security.oauth2 import require_auth, require_manager
from security.policy import Action, Resource, authorize
from utils import paginate, parse_positive_id

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/customers",
    tags=["Customer"],
    dependencies=[Depends(require_auth)]
)


def _customer_id(raw: str) -> int:
    return parse_positive_id(raw, message="Invalid customer ID")


def _get_customer_or_404(db: Session, customer_id: int) -> Customer:
    customer = db.get(Customer, customer_id)
    if not customer:
        raise NotFoundError("Customer not found")
    return customer


# -------------------------------
# Get list of customers (paginated, searchable)
# -------------------------------
@router.get("", response_model=CustomerListResponse, status_code=status.HTTP_200_OK)
def get_customers(
    search: Optional[str] = Query(None, description="Matches company name or contact person"),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_session),
    current_user: Principal = Depends(require_auth),
):
    authorize(current_user, Resource.CUSTOMER, Action.READ)
    try:
        stmt = select(Customer)
        if search and search.strip():
            pattern = f"%{search.strip().lower()}%"
            stmt = stmt.where(or_(
                func.lower(Customer.company_name).like(pattern),
                func.lower(Customer.contact_person).like(pattern),
            ))
        stmt = stmt.order_by(Customer.id)
        customers, pagination = paginate(db, stmt, page, per_page)
        return {"data": customers, "pagination": pagination}
    except Exception:
        logger.exception("Failed to fetch customers")
        raise InternalError()


# -------------------------------
# Find customer by ID
# -------------------------------
@router.get("/{customer_id}", response_model=CustomerReadSchema, status_code=status.HTTP_200_OK)
def get_customer(
    customer_id: str,
    db: Session = Depends(get_session),
    current_user: Principal = Depends(require_auth),
):
    cid = _customer_id(customer_id)
    authorize(current_user, Resource.CUSTOMER, Action.READ)
    try:
        return _get_customer_or_404(db, cid)
    except ApiError:
        raise
    except Exception:
        logger.exception("Failed to fetch customer %s", cid)
        raise InternalError()


# -------------------------------
# Create customer (managers only)
# -------------------------------
@router.post("", response_model=CustomerReadSchema, status_code=status.HTTP_201_CREATED)
def create_customer(
    payload: CustomerCreateSchema,
    db: Session = Depends(get_session),
    current_user: Principal = Depends(require_manager),
):
    authorize(current_user, Resource.CUSTOMER, Action.CREATE)
    try:
        customer = Customer(**payload.model_dump())
        with unit_of_work(db):
            db.add(customer)
        db.refresh(customer)
        logger.info("Customer %s created by manager %s", customer.id, current_user.id)
        return customer
    except Exception:
        logger.exception("Failed to create customer")
        db.rollback()
        raise InternalError()


# -------------------------------
# Update customer (partial)
# -------------------------------
@router.put("/{customer_id}", response_model=CustomerReadSchema, status_code=status.HTTP_200_OK)
def update_customer(
    customer_id: str,
    payload: CustomerUpdateSchema,
    db: Session = Depends(get_session),
    current_user: Principal = Depends(require_manager),
):
    cid = _customer_id(customer_id)
    authorize(current_user, Resource.CUSTOMER, Action.UPDATE)
    try:
        customer = _get_customer_or_404(db, cid)

        update_data = payload.model_dump(exclude_unset=True)
        with unit_of_work(db):
            for key, value in update_data.items():
                setattr(customer, key, value)
            customer.updated_at = utcnow()
            db.add(customer)

        db.refresh(customer)
        return customer
    except ApiError:
        raise
    except Exception:
        logger.exception("Failed to update customer %s", cid)
        db.rollback()
        raise InternalError()


# -------------------------------
# Delete customer unless visits reference it
# -------------------------------
@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(
    customer_id: str,
    db: Session = Depends(get_session),
    current_user: Principal = Depends(require_manager),
):
    cid = _customer_id(customer_id)
    authorize(current_user, Resource.CUSTOMER, Action.DELETE)
    try:
        customer = _get_customer_or_404(db, cid)

        visit_count = db.exec(
            select(func.count()).select_from(VisitRecord).where(VisitRecord.customer_id == cid)
        ).one()
        if visit_count > 0:
            raise ConflictError(
                "CONFLICT",
                "This customer is referenced by visit records and cannot be deleted",
                details=[{"field": "customer", "message": f"{visit_count} visit record(s) exist"}],
            )

        with unit_of_work(db):
            db.delete(customer)
        logger.info("Customer %s deleted by manager %s", cid, current_user.id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except ApiError:
        raise
    except Exception:
        logger.exception("Failed to delete customer %s", cid)
        db.rollback()
        raise InternalError()
