"""
Authentication utilities for the storage service.

Tokens are JWTs issued by the dashboard's auth service and carried in the
``auth-token`` cookie (or an ``Authorization: Bearer`` header). The role is
always read from the profiles table, never trusted from the token.
"""

from typing import Dict, Optional

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from medflow.auth_schemas import Requester
from medflow.config import get_settings
from medflow.db.database import get_db
from medflow.db.repositories.profiles import ProfileRepository
from medflow.structlog_config import get_logger

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def decode_token(token: str) -> Dict:
    """
    Decode and validate a JWT token.

    Args:
        token: The JWT token to decode

    Returns:
        The decoded token payload

    Raises:
        HTTPException: If the token is invalid or expired
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM]
        )
        return payload
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )


def extract_token(
    request: Request, credentials: Optional[HTTPAuthorizationCredentials]
) -> Optional[str]:
    """Prefer the session cookie, fall back to a bearer header."""
    token = request.cookies.get(get_settings().AUTH_COOKIE_NAME)
    if token:
        return token
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return None


async def get_current_requester(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Requester:
    """
    FastAPI dependency returning the authenticated requester.

    Raises:
        HTTPException: 401 if the token is missing, invalid, or names no profile
    """
    token = extract_token(request, credentials)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_token(token)
    user_id = payload.get("id")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )

    profile = ProfileRepository(db).get_by_id(str(user_id))
    if profile is None:
        logger.warning(
            "Token names an unknown profile",
            operation="authenticate",
            error_type="unknown_profile",
            user_id=user_id,
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return Requester(id=profile.id, role=profile.role, email=profile.email)
