import uuid

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from formcraft.core.database import get_db
from formcraft.models.user import User
from formcraft.services.auth import ACCESS_TOKEN_TYPE, decode_token, get_user_by_id

security = HTTPBearer()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def _owner_id_from_token(token: str) -> uuid.UUID:
    """Resolve the user id an access token was issued for. Raises 401."""
    try:
        payload = decode_token(token)
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.PyJWTError:
        raise _unauthorized("Invalid token")

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise _unauthorized("Invalid token type")

    try:
        return uuid.UUID(str(payload["sub"]))
    except (KeyError, ValueError):
        raise _unauthorized("Invalid token payload")


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """The form owner behind the Bearer token on this request."""
    user = get_user_by_id(db, _owner_id_from_token(credentials.credentials))
    if user is None:
        raise _unauthorized("User not found")
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is deactivated",
        )
    return user
