from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from pydantic import ValidationError

from config import settings
from models import SalesPerson
from schemas.auth_schema import Principal

SECRET_KEY = settings.JWT_SECRET
ALGORITHM = settings.JWT_ALGORITHM
ACCESS_TOKEN_EXPIRE_MINUTES = settings.ACCESS_TOKEN_EXPIRE_MINUTES


class TokenInvalid(Exception):
    """Token is malformed, tampered with, or carries unusable claims"""


class TokenExpired(TokenInvalid):
    """Token signature is fine but its exp claim is in the past"""


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> tuple[str, datetime]:
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = dict(data)
    to_encode.update({"exp": expire, "iat": now})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM), expire


def issue_token(user: SalesPerson, expires_delta: Optional[timedelta] = None) -> tuple[str, datetime]:
    return create_access_token(
        data={
            "sub": str(user.id),
            "user_id": user.id,
            "email": user.email,
            "name": user.name,
            "department": user.department,
            "is_manager": user.is_manager,
        },
        expires_delta=expires_delta,
    )


def verify_access_token(token: str) -> Principal:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError as e:
        raise TokenExpired("Token has expired") from e
    except jwt.InvalidTokenError as e:
        raise TokenInvalid("Could not validate token") from e

    try:
        return Principal.model_validate(payload)
    except ValidationError as e:
        raise TokenInvalid("Token claims are incomplete") from e
