"""
Credit API - Password & Auth Service Tests
===========================================

What:  bcrypt helpers, the password policy, login and password reset.
"""

import pytest

from credit_api import security
from credit_api.exceptions import NotFoundError, ValidationError
from credit_api.schemas.user import LoginRequest, UserCreate
from credit_api.services.auth_service import AuthService
from credit_api.services.user_service import UserService


class TestPasswordHelpers:

    def test_hash_and_verify(self):
        hashed = security.hash_password("Secret1!")
        assert hashed != "Secret1!"
        assert security.verify_password("Secret1!", hashed)
        assert not security.verify_password("secret1!", hashed)

    def test_verify_without_hash(self):
        assert security.verify_password("Secret1!", None) is False

    def test_verify_malformed_hash(self):
        assert security.verify_password("Secret1!", "not-a-bcrypt-hash") is False

    def test_empty_password_cannot_be_hashed(self):
        with pytest.raises(ValueError):
            security.hash_password("")

    def test_strong_password_has_no_violations(self):
        assert security.password_policy_violations("Secret1!") == []

    @pytest.mark.parametrize(
        "password, fragment",
        [
            ("Se1!", "at least 6 characters"),
            ("Secret!!", "digit"),
            ("SECRET1!", "lowercase"),
            ("secret1!", "uppercase"),
            ("Secret12", "non alphanumeric"),
        ],
    )
    def test_each_rule(self, password, fragment):
        violations = security.password_policy_violations(password)
        assert len(violations) == 1
        assert fragment in violations[0]

    def test_password_over_72_bytes(self):
        violations = security.password_policy_violations("Aa1!" + "x" * 76)
        assert violations == ["Passwords must be at most 72 bytes long."]

    def test_byte_limit_counts_utf8_bytes(self):
        # 39 characters, 74 bytes
        password = "Aa1!" + "\u00e9" * 35
        assert len(password) < 72
        assert any("72 bytes" in v for v in security.password_policy_violations(password))

    def test_verify_password_over_72_bytes(self):
        hashed = security.hash_password("Secret1!")
        assert security.verify_password("Secret1!" + "x" * 80, hashed) is False

    def test_relaxed_policy(self, monkeypatch):
        monkeypatch.setattr(security.settings, "password_require_non_alphanumeric", False)
        monkeypatch.setattr(security.settings, "password_require_uppercase", False)
        assert security.password_policy_violations("secret12") == []


class TestAuthService:

    def setup_method(self):
        self.service = AuthService()
        self.users = UserService()

    @pytest.mark.asyncio
    async def test_login(self, db_session):
        await self.users.create_user(
            db_session, UserCreate(username="Alice", password="Secret1!")
        )

        assert await self.service.login(db_session, LoginRequest(username="alice", password="Secret1!"))
        assert not await self.service.login(db_session, LoginRequest(username="alice", password="wrong"))
        assert not await self.service.login(db_session, LoginRequest(username="bob", password="Secret1!"))

    @pytest.mark.asyncio
    async def test_login_with_non_ascii_username(self, db_session):
        await self.users.create_user(
            db_session, UserCreate(username="\u00c9lise", password="Secret1!")
        )

        assert await self.service.login(
            db_session, LoginRequest(username="\u00c9lise", password="Secret1!")
        )

    @pytest.mark.asyncio
    async def test_reset_password_over_72_bytes(self, db_session):
        user = await self.users.create_user(db_session, UserCreate(username="alice"))

        with pytest.raises(ValidationError) as exc_info:
            await self.service.reset_password(db_session, user.id, "Aa1!" + "x" * 76)

        assert "Passwords must be at most 72 bytes long." in exc_info.value.context["violations"]

    @pytest.mark.asyncio
    async def test_login_user_without_password(self, db_session):
        await self.users.create_user(db_session, UserCreate(username="alice"))

        assert not await self.service.login(db_session, LoginRequest(username="alice", password="x"))

    @pytest.mark.asyncio
    async def test_reset_password(self, db_session):
        user = await self.users.create_user(
            db_session, UserCreate(username="alice", password="Secret1!")
        )

        result = await self.service.reset_password(db_session, user.id, "Changed2?")

        assert result.message == "Password reset successful"
        assert await self.service.login(db_session, LoginRequest(username="alice", password="Changed2?"))
        assert not await self.service.login(db_session, LoginRequest(username="alice", password="Secret1!"))

    @pytest.mark.asyncio
    async def test_reset_password_policy(self, db_session):
        user = await self.users.create_user(db_session, UserCreate(username="alice"))

        with pytest.raises(ValidationError, match="Error resetting password") as exc_info:
            await self.service.reset_password(db_session, user.id, "weak")

        assert exc_info.value.context["violations"]

    @pytest.mark.asyncio
    async def test_reset_password_unknown_user(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.reset_password(db_session, "nobody", "Changed2?")
