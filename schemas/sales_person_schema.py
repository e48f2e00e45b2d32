from datetime import datetime
from typing import List, Optional
from sqlmodel import SQLModel, Field
from pydantic import EmailStr, field_validator

from schemas.common_schema import Pagination, check_max_length, check_password_strength


class SalesPersonCreateSchema(SQLModel):
    name: str = Field(min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(min_length=8, max_length=100)
    department: str = Field(default="", max_length=50)
    is_manager: bool = False
    is_active: bool = True

    @field_validator("name", "department", mode="before")
    @classmethod
    def strip_strings(cls, v):
        if isinstance(v, str):
            v = v.strip()
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        return check_password_strength(v)

    @field_validator("email")
    @classmethod
    def validate_email_length(cls, v):
        return check_max_length(v, 255, "email")


# Partial update: only supplied fields change, password has its own endpoint
class SalesPersonUpdateSchema(SQLModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    department: Optional[str] = Field(default=None, max_length=50)
    is_manager: Optional[bool] = None
    is_active: Optional[bool] = None

    @field_validator("name", "department", mode="before")
    @classmethod
    def strip_strings(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("name", "email", "department", "is_manager", "is_active", mode="before")
    @classmethod
    def reject_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @field_validator("email")
    @classmethod
    def validate_email_length(cls, v):
        return check_max_length(v, 255, "email")


class PasswordResetSchema(SQLModel):
    password: str = Field(min_length=8, max_length=100)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        return check_password_strength(v)


class SalesPersonReadSchema(SQLModel):
    id: int
    name: str
    email: str
    department: str
    is_manager: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime


class SalesPersonListResponse(SQLModel):
    data: List[SalesPersonReadSchema]
    pagination: Pagination


class PasswordResetUser(SQLModel):
    id: int
    name: str
    email: str


class PasswordResetResponse(SQLModel):
    message: str
    user: PasswordResetUser
