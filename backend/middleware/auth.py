"""
Admin authentication helpers.

Admin endpoints require `Authorization: Bearer <jwt>`:
  - HS256, signed with JWT_SECRET, issuer JWT_ISSUER
  - `sub` is the admin's user id (as a string), `role` must be ADMIN

The resolved admin id is handed to services as an explicit argument;
nothing downstream reads identity from request-global state.
"""
import logging
from datetime import datetime, timezone, timedelta
from fastapi import Header
from typing import Optional

import jwt

from config import settings
from domain.enums import UserRole
from domain.errors import DomainError, PermissionDeniedError, UnauthorizedError

logger = logging.getLogger(__name__)

def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _parse_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    token = parts[1].strip()
    return token or None


def _require_secret() -> str:
    if not settings.jwt_secret:
        raise DomainError("Server auth misconfigured (JWT secret missing).", status_code=500)
    return settings.jwt_secret


def decode_access_token(token: str) -> dict:
    secret = _require_secret()
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=["HS256"],
            issuer=settings.jwt_issuer,
            options={"require": ["exp", "iat", "iss", "sub"]},
        )
        return payload
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Access token expired.")
    except jwt.InvalidTokenError:
        raise UnauthorizedError("Invalid access token.")


def issue_access_token(*, user_id: int, role: str = UserRole.ADMIN.value) -> str:
    """Sign an access token for a user. Used by tests and operator tooling."""
    now = _now_utc()
    exp = now.replace(microsecond=0) + timedelta(minutes=settings.jwt_access_ttl_minutes)
    payload = {
        "iss": settings.jwt_issuer,
        "sub": str(user_id),
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, _require_secret(), algorithm="HS256")


async def require_admin_token(
    authorization: Optional[str] = Header(None, alias="Authorization"),
) -> int:
    """
    Resolve the admin user id from the bearer token.

    401 when the token is missing or invalid, 403 when it is not an admin token.
    """
    token = _parse_bearer_token(authorization)
    if not token:
        raise UnauthorizedError("Authentication required. Provide Authorization: Bearer <token>.")

    payload = decode_access_token(token)
    if payload.get("role") != UserRole.ADMIN.value:
        logger.warning(f"Non-admin token rejected for subject {payload.get('sub')}")
        raise PermissionDeniedError("Admin role required for this endpoint.")

    try:
        return int(payload["sub"])
    except (TypeError, ValueError):
        raise UnauthorizedError("Invalid access token subject.")
