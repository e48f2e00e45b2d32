import re
from datetime import date, datetime
from typing import List, Optional
from sqlmodel import SQLModel, Field


DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_PATTERN = re.compile(r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$")
PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d).*$")
PHONE_PATTERN = re.compile(r"^[\d\-()+\s]+$")

MAX_BCRYPT_BYTES = 72


def parse_date_literal(v, field_name: str = "date") -> date:
    """Accept only the literal YYYY-MM-DD form (no slashes, no times)."""
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    if not isinstance(v, str) or not DATE_PATTERN.match(v):
        raise ValueError(f"{field_name} must be in YYYY-MM-DD format")
    try:
        return datetime.strptime(v, "%Y-%m-%d").date()
    except ValueError:
        raise ValueError(f"{field_name} is not a valid calendar date")


def check_time_literal(v: Optional[str]) -> Optional[str]:
    if v is None or v == "":
        return None
    if not isinstance(v, str) or not TIME_PATTERN.match(v):
        raise ValueError("visit_time must be in HH:MM format")
    return v


def check_password_strength(v: str) -> str:
    if not PASSWORD_PATTERN.match(v):
        raise ValueError("Password must contain upper-case, lower-case and numeric characters")
    if len(v.encode("utf-8")) > MAX_BCRYPT_BYTES:
        raise ValueError("Password is too long (max 72 bytes when UTF-8 encoded)")
    return v


def check_max_length(v: Optional[str], limit: int, field_name: str) -> Optional[str]:
    if v is not None and len(v) > limit:
        raise ValueError(f"{field_name} must be at most {limit} characters")
    return v


class ErrorDetail(SQLModel):
    field: str
    message: str


class ErrorBody(SQLModel):
    code: str
    message: str
    details: Optional[List[ErrorDetail]] = None


class ErrorResponse(SQLModel):
    error: ErrorBody


class Pagination(SQLModel):
    total: int = Field(ge=0)
    page: int = Field(ge=1)
    per_page: int = Field(ge=1, le=100)
    total_pages: int = Field(ge=0)
