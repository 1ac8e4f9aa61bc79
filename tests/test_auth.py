"""
Reviewer-role guard and token helpers.
"""
import pytest
from fastapi import HTTPException

from app.core.auth import caller_identity, require_reviewer, token_roles, verify_token
from app.core.config import Settings


def _settings(**kwargs) -> Settings:
    return Settings(_env_file=None, **kwargs)


class TestTokenHelpers:
    def test_roles_merged_from_realm_access(self):
        payload = {"roles": ["a"], "realm_access": {"roles": ["bank-reviewer"]}}
        assert token_roles(payload) == {"a", "bank-reviewer"}

    def test_identity_prefers_username(self):
        assert caller_identity({"sub": "123", "preferred_username": "ADITI_ADMIN"}) == "ADITI_ADMIN"
        assert caller_identity({"sub": "123"}) == "123"
        assert caller_identity({}) == "unknown"


class TestRequireReviewer:
    @pytest.mark.asyncio
    async def test_reviewer_allowed(self):
        token = {"sub": "r", "realm_access": {"roles": ["bank-reviewer"]}}
        assert await require_reviewer(token=token, settings=_settings()) is token

    @pytest.mark.asyncio
    async def test_customer_forbidden(self):
        with pytest.raises(HTTPException) as exc:
            await require_reviewer(token={"sub": "c", "roles": []}, settings=_settings())
        assert exc.value.status_code == 403

    @pytest.mark.asyncio
    async def test_dev_mode_identity_is_reviewer(self):
        settings = _settings(auth_enabled=False)
        token = await verify_token(credentials=None, settings=settings)
        assert await require_reviewer(token=token, settings=settings) is token

    @pytest.mark.asyncio
    async def test_missing_header_when_enabled(self):
        with pytest.raises(HTTPException) as exc:
            await verify_token(credentials=None, settings=_settings(auth_enabled=True))
        assert exc.value.status_code == 401
