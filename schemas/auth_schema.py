from datetime import datetime
from sqlmodel import SQLModel, Field
from pydantic import EmailStr


class LoginSchema(SQLModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=100)


class UserPublic(SQLModel):
    id: int
    name: str
    email: str
    department: str
    is_manager: bool


class LoginResponse(SQLModel):
    token: str
    expires_at: datetime
    user: UserPublic


class Principal(SQLModel):
    """Identity carried by a verified access token."""
    user_id: int
    email: str
    name: str
    department: str = ""
    is_manager: bool = False

    @property
    def id(self) -> int:
        return self.user_id
