"""
Tests for admin authentication.

Tests: require_admin_token (bearer parsing, JWT validation, role claim)
and the require_admin dependency (user row checks).
"""
import os, sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

import pytest
from datetime import datetime, timedelta, timezone

import jwt
from fastapi import HTTPException

from config import settings
from domain.enums import UserRole


def _token(**overrides) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "iss": settings.jwt_issuer,
        "sub": "1",
        "role": "ADMIN",
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=5)).timestamp()),
    }
    payload.update(overrides)
    return jwt.encode(payload, settings.jwt_secret, algorithm="HS256")


class TestRequireAdminToken:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_issued_token_round_trips(self):
        from middleware.auth import issue_access_token, require_admin_token
        token = issue_access_token(user_id=42)
        assert await require_admin_token(authorization=f"Bearer {token}") == 42

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_header_raises_401(self):
        from middleware.auth import require_admin_token
        with pytest.raises(HTTPException) as exc_info:
            await require_admin_token(authorization=None)
        assert exc_info.value.status_code == 401
        assert "Authentication required" in exc_info.value.detail

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_non_bearer_scheme_raises_401(self):
        from middleware.auth import require_admin_token
        with pytest.raises(HTTPException) as exc_info:
            await require_admin_token(authorization=f"Basic {_token()}")
        assert exc_info.value.status_code == 401

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_expired_token_raises_401(self):
        from middleware.auth import require_admin_token
        past = datetime.now(timezone.utc) - timedelta(hours=1)
        token = _token(iat=int(past.timestamp()), exp=int((past + timedelta(minutes=1)).timestamp()))
        with pytest.raises(HTTPException) as exc_info:
            await require_admin_token(authorization=f"Bearer {token}")
        assert exc_info.value.status_code == 401
        assert "expired" in exc_info.value.detail

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_wrong_issuer_raises_401(self):
        from middleware.auth import require_admin_token
        with pytest.raises(HTTPException) as exc_info:
            await require_admin_token(authorization=f"Bearer {_token(iss='someone-else')}")
        assert exc_info.value.status_code == 401

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_bad_signature_raises_401(self):
        from middleware.auth import require_admin_token
        forged = jwt.encode(
            {"iss": settings.jwt_issuer, "sub": "1", "role": "ADMIN", "iat": 0, "exp": 9999999999},
            "not-the-secret",
            algorithm="HS256",
        )
        with pytest.raises(HTTPException) as exc_info:
            await require_admin_token(authorization=f"Bearer {forged}")
        assert exc_info.value.status_code == 401

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_customer_token_raises_403(self):
        from middleware.auth import require_admin_token
        with pytest.raises(HTTPException) as exc_info:
            await require_admin_token(authorization=f"Bearer {_token(role='CUSTOMER')}")
        assert exc_info.value.status_code == 403

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_non_numeric_subject_raises_401(self):
        from middleware.auth import require_admin_token
        with pytest.raises(HTTPException) as exc_info:
            await require_admin_token(authorization=f"Bearer {_token(sub='admin')}")
        assert exc_info.value.status_code == 401


class TestRequireAdmin:

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_active_admin(self, db_session, sample_admin):
        from deps import require_admin
        assert await require_admin(admin_id=sample_admin.id, db=db_session) == sample_admin.id

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_unknown_user(self, db_session):
        from deps import require_admin
        with pytest.raises(HTTPException) as exc_info:
            await require_admin(admin_id=999, db=db_session)
        assert exc_info.value.status_code == 403

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_customer_row_rejected(self, db_session, sample_customer):
        from deps import require_admin
        with pytest.raises(HTTPException) as exc_info:
            await require_admin(admin_id=sample_customer.id, db=db_session)
        assert exc_info.value.status_code == 403

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_disabled_admin_rejected(self, db_session):
        from db_models import User
        from deps import require_admin

        admin = User(full_name="Old Admin", email="old@storefront.test", role=UserRole.ADMIN.value, is_active=False)
        db_session.add(admin)
        await db_session.commit()

        with pytest.raises(HTTPException) as exc_info:
            await require_admin(admin_id=admin.id, db=db_session)
        assert "disabled" in exc_info.value.detail
