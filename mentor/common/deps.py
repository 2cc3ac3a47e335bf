"""Shared FastAPI dependencies for authentication and request context."""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel

from mentor.core.config import get_settings


logger = logging.getLogger("auth.deps")
security = HTTPBearer(auto_error=False)

ANONYMOUS_USER_ID = "anonymous"


class CurrentUser(BaseModel):
    """Identity carried by the bearer token issued by the portfolio site."""
    id: str
    email: str = ""
    first_name: str = ""
    last_name: str = ""

    @property
    def display_name(self) -> str:
        if self.is_anonymous:
            return "Anonymous User"
        return f"{self.first_name} {self.last_name}".strip() or self.email or self.id

    @property
    def is_anonymous(self) -> bool:
        return self.id == ANONYMOUS_USER_ID


ANONYMOUS_USER = CurrentUser(id=ANONYMOUS_USER_ID)


def decode_token(token: str) -> dict[str, Any]:
    """Verify an HS-signed token locally and return its claims.

    Raises ``JWTError`` on a bad signature, expiry or a missing secret.
    """
    settings = get_settings()
    if not settings.jwt_secret:
        raise JWTError("JWT_SECRET not configured")
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])


def user_from_claims(claims: dict[str, Any]) -> CurrentUser:
    user_id = claims.get("id") or claims.get("sub")
    if not user_id:
        raise JWTError("Token missing user id")
    return CurrentUser(
        id=str(user_id),
        email=str(claims.get("email") or ""),
        first_name=str(claims.get("firstName") or ""),
        last_name=str(claims.get("lastName") or ""),
    )


def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None) or request.headers.get("X-Request-Id")


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> CurrentUser:
    """Resolve the bearer token into a user or fail with 401."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    try:
        current = user_from_claims(decode_token(credentials.credentials))
    except JWTError as exc:
        logger.info("auth_rejected reason=%s path=%s", exc, request.url.path)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required"
        ) from exc
    logger.info(
        "auth_resolved user_id=%s request_id=%s path=%s",
        current.id,
        _request_id(request),
        request.url.path,
    )
    return current


async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> CurrentUser:
    """Like ``get_current_user`` but an absent or invalid token means anonymous."""
    if credentials is None or not credentials.credentials:
        return ANONYMOUS_USER
    try:
        return user_from_claims(decode_token(credentials.credentials))
    except JWTError:
        logger.info("auth_invalid_token_anonymous path=%s", request.url.path)
        return ANONYMOUS_USER
