import logging
from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session, select

from config import settings
from database import get_session
from errors import ApiError, AuthenticationError, ForbiddenError
from models import SalesPerson
from schemas.auth_schema import LoginSchema, LoginResponse, Principal, UserPublic
from security.token_jwt import issue_token, ACCESS_TOKEN_EXPIRE_MINUTES
from security.oauth2 import require_auth
from security.hashing import verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def _public(user: SalesPerson) -> UserPublic:
    return UserPublic(
        id=user.id,
        name=user.name,
        email=user.email,
        department=user.department,
        is_manager=user.is_manager,
    )


@router.post("/login", response_model=LoginResponse, status_code=status.HTTP_200_OK)
def login(req: LoginSchema, response: Response, db: Session = Depends(get_session)):
    user = db.exec(select(SalesPerson).where(SalesPerson.email == req.email)).first()
    if not user or not verify_password(req.password, user.password_hash):
        logger.info("Failed login for %s", req.email)
        raise ApiError(status.HTTP_401_UNAUTHORIZED, "AUTH_INVALID_CREDENTIALS", "Incorrect email or password")

    # 🚫 Check if the user is deactivated
    if not user.is_active:
        raise ForbiddenError("Login failed. Please contact an administrator.", code="ACCOUNT_INACTIVE")

    token, expires_at = issue_token(user)
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
        path="/",
    )
    logger.info("User %s logged in", user.id)
    return LoginResponse(token=token, expires_at=expires_at, user=_public(user))


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout():
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(key=settings.AUTH_COOKIE_NAME, path="/")
    return response


@router.get("/me", response_model=UserPublic)
def get_current_user_info(
    current_user: Principal = Depends(require_auth),
    db: Session = Depends(get_session),
):
    """Get current user information"""
    user = db.get(SalesPerson, current_user.id)
    if not user or not user.is_active:
        raise AuthenticationError()
    return _public(user)
