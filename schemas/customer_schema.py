# schemas.py
from datetime import datetime
from typing import List, Optional
from sqlmodel import SQLModel, Field
from pydantic import EmailStr, field_validator

from schemas.common_schema import PHONE_PATTERN, Pagination, check_max_length


def _validate_phone(v):
    if v is None:
        return v
    if not PHONE_PATTERN.match(v):
        raise ValueError("Phone number may contain only digits, hyphens, parentheses, plus signs and spaces")
    return v


class CustomerCreateSchema(SQLModel):
    company_name: str = Field(min_length=1, max_length=200)
    contact_person: str = Field(min_length=1, max_length=100)
    phone: str = Field(min_length=1, max_length=20)
    email: EmailStr
    address: str = Field(default="", max_length=500)

    @field_validator("company_name", "contact_person", "phone", "address", mode="before")
    @classmethod
    def strip_strings(cls, v):
        if isinstance(v, str):
            v = v.strip()
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return _validate_phone(v)

    @field_validator("email")
    @classmethod
    def validate_email_length(cls, v):
        return check_max_length(v, 100, "email")


# Update schema: all editable fields optional
class CustomerUpdateSchema(SQLModel):
    company_name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    contact_person: Optional[str] = Field(default=None, min_length=1, max_length=100)
    phone: Optional[str] = Field(default=None, min_length=1, max_length=20)
    email: Optional[EmailStr] = None
    address: Optional[str] = Field(default=None, max_length=500)

    # Strip strings
    @field_validator("company_name", "contact_person", "phone", "address", mode="before")
    @classmethod
    def strip_strings(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("company_name", "contact_person", "phone", "email", "address", mode="before")
    @classmethod
    def reject_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return _validate_phone(v)

    @field_validator("email")
    @classmethod
    def validate_email_length(cls, v):
        return check_max_length(v, 100, "email")


class CustomerReadSchema(SQLModel):
    id: int
    company_name: str
    contact_person: str
    phone: str
    email: str
    address: str
    created_at: datetime
    updated_at: datetime


class CustomerListResponse(SQLModel):
    data: List[CustomerReadSchema]
    pagination: Pagination
