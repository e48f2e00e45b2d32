import logging
from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config import settings
from errors import AuthenticationError, ForbiddenError
from schemas.auth_schema import Principal
from security.token_jwt import TokenExpired, TokenInvalid, verify_access_token

logger = logging.getLogger(__name__)

# only used for docs and header parsing; a missing header is handled below
bearer_scheme = HTTPBearer(auto_error=False)


def get_token(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
) -> Optional[str]:
    """Bearer header first, then the auth cookie set at login."""
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.AUTH_COOKIE_NAME) or None


def require_auth(token: Annotated[Optional[str], Depends(get_token)]) -> Principal:
    if not token:
        raise AuthenticationError("AUTH_TOKEN_MISSING", "Authentication token is missing")
    try:
        return verify_access_token(token)
    except TokenExpired:
        raise AuthenticationError("AUTH_TOKEN_INVALID", "Authentication token has expired")
    except TokenInvalid:
        raise AuthenticationError("AUTH_TOKEN_INVALID", "Invalid authentication token")


def require_manager(principal: Annotated[Principal, Depends(require_auth)]) -> Principal:
    if not principal.is_manager:
        logger.info("Manager-only endpoint refused for user %s", principal.id)
        raise ForbiddenError()
    return principal
