"""
Unit tests for SessionService.

Run against the in-memory session store; store failures are simulated with
AsyncMock.
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from user_service.domain.value_objects import AccessToken, SessionToken, UserRole
from user_service.exceptions import (
    InvalidCredentialsError,
    InvalidParametersError,
    InvalidSessionError,
)
from user_service.services import SessionService

TEST_PASSWORD = "TestPass123!"


@pytest.fixture
def session_service(settings, store) -> SessionService:
    return SessionService(settings, store)


class TestCreateSession:
    """Tests for login."""

    async def test_login_success(self, session_service, store, test_user, public_key):
        session_token, access_token = await session_service.create_session(
            "test_user", TEST_PASSWORD
        )

        assert session_token.value in store.sessions
        verified = AccessToken.verify(access_token.token, public_key)
        assert verified.user_profile.username.value == "test_user"
        assert verified.user_profile.user_role is UserRole.USER

    async def test_session_expiry_uses_configured_lifetime(
        self, session_service, store, settings, test_user
    ):
        session_token, _ = await session_service.create_session("test_user", TEST_PASSWORD)

        expire_time = store.sessions[session_token.value]["expire_time"]
        expected = datetime.now(UTC) + timedelta(milliseconds=settings.session_expire_millis)
        assert abs((expire_time - expected).total_seconds()) < 5

    async def test_wrong_password_same_as_unknown_user(self, session_service, test_user):
        """Login failures give no hint whether the username exists."""
        with pytest.raises(InvalidCredentialsError) as wrong_password:
            await session_service.create_session("test_user", "WrongPass123!")

        with pytest.raises(InvalidCredentialsError) as unknown_user:
            await session_service.create_session("nobody", TEST_PASSWORD)

        assert wrong_password.value.status_code == unknown_user.value.status_code == 401
        assert wrong_password.value.message == unknown_user.value.message

    async def test_missing_fields_reported_together(self, session_service):
        with pytest.raises(InvalidParametersError) as exc_info:
            await session_service.create_session(None, ["a", "b"])

        assert exc_info.value.details == {
            "username": "Username cannot be empty.",
            "password": "Password must be a string.",
        }

    @pytest.mark.parametrize("collisions", [0, 1, 3])
    async def test_retries_after_token_collisions(
        self, session_service, store, test_user, collisions
    ):
        """A token is returned only after exactly N+1 attempts."""
        store.forced_collisions = collisions

        session_token, _ = await session_service.create_session("test_user", TEST_PASSWORD)

        assert len(store.session_attempts) == collisions + 1
        assert store.session_attempts[-1] == session_token
        assert len(set(store.session_attempts)) == collisions + 1
        assert list(store.sessions) == [session_token.value]

    async def test_other_store_errors_are_not_retried(self, settings):
        store = MagicMock()
        store.fetch_password_hash_from_username = AsyncMock(
            return_value=MagicMock(is_match=AsyncMock(return_value=True))
        )
        store.create_user_session = AsyncMock(side_effect=ConnectionError("db down"))
        store.is_unique_constraint_violated = MagicMock(return_value=False)

        with pytest.raises(ConnectionError):
            await SessionService(settings, store).create_session("test_user", TEST_PASSWORD)

        assert store.create_user_session.await_count == 1


class TestDeleteSession:
    """Tests for logout."""

    async def test_logout_deletes_session(self, session_service, store, test_user):
        session_token, _ = await session_service.create_session("test_user", TEST_PASSWORD)

        await session_service.delete_session(session_token.value)

        assert store.sessions == {}

    async def test_logout_twice_fails(self, session_service, test_user):
        session_token, _ = await session_service.create_session("test_user", TEST_PASSWORD)
        await session_service.delete_session(session_token.value)

        with pytest.raises(InvalidSessionError):
            await session_service.delete_session(session_token.value)

    @pytest.mark.parametrize("raw", [None, "", ["a", "b"], "unknown-token"])
    async def test_missing_or_unknown_token(self, session_service, raw):
        with pytest.raises(InvalidSessionError):
            await session_service.delete_session(raw)

    async def test_expired_session_cannot_log_out(self, session_service, store, test_user):
        session_token, _ = await session_service.create_session("test_user", TEST_PASSWORD)
        store.sessions[session_token.value]["expire_time"] = datetime.now(UTC) - timedelta(seconds=1)

        with pytest.raises(InvalidSessionError):
            await session_service.delete_session(session_token.value)


class TestRefresh:
    """Tests for access token refresh and keep-alive."""

    async def test_refresh_extends_session_and_reissues_token(
        self, session_service, store, test_user, public_key
    ):
        session_token, _ = await session_service.create_session("test_user", TEST_PASSWORD)
        store.sessions[session_token.value]["expire_time"] = datetime.now(UTC) + timedelta(seconds=10)

        refreshed_token, access_token = await session_service.get_access_token(session_token.value)

        assert refreshed_token == session_token
        assert store.sessions[session_token.value]["expire_time"] > datetime.now(UTC) + timedelta(days=6)
        assert AccessToken.verify(access_token.token, public_key).user_profile.user_id == test_user

    async def test_refresh_picks_up_role_change(self, session_service, store, test_user):
        """Tokens issued after a role change carry the new role."""
        session_token, first = await session_service.create_session("test_user", TEST_PASSWORD)
        await store.update_user_role(test_user, UserRole.MAINTAINER)

        _, second = await session_service.get_access_token(session_token.value)

        assert first.user_profile.user_role is UserRole.USER
        assert second.user_profile.user_role is UserRole.MAINTAINER

    async def test_refresh_expired_session(self, session_service, store, test_user):
        session_token, _ = await session_service.create_session("test_user", TEST_PASSWORD)
        store.sessions[session_token.value]["expire_time"] = datetime.now(UTC) - timedelta(seconds=1)

        with pytest.raises(InvalidSessionError):
            await session_service.get_access_token(session_token.value)

    async def test_keep_alive(self, session_service, store, test_user):
        session_token, _ = await session_service.create_session("test_user", TEST_PASSWORD)
        store.sessions[session_token.value]["expire_time"] = datetime.now(UTC) + timedelta(seconds=10)

        await session_service.keep_session_alive(session_token.value)

        assert store.sessions[session_token.value]["expire_time"] > datetime.now(UTC) + timedelta(days=6)

    async def test_keep_alive_unknown_session(self, session_service):
        with pytest.raises(InvalidSessionError):
            await session_service.keep_session_alive(SessionToken.create().value)


class TestGetUserIdentity:
    """Tests for identity lookup."""

    async def test_query_token(self, session_service, test_user):
        session_token, _ = await session_service.create_session("test_user", TEST_PASSWORD)

        identity = await session_service.get_user_identity(session_token.value, None)

        assert identity.user_id == test_user
        assert identity.user_role is UserRole.USER

    @pytest.mark.parametrize("bad_query", [None, "", "unknown-token", ["a", "b"]])
    async def test_falls_back_to_cookie(self, session_service, test_user, bad_query):
        session_token, _ = await session_service.create_session("test_user", TEST_PASSWORD)

        identity = await session_service.get_user_identity(bad_query, session_token.value)

        assert identity.user_id == test_user

    async def test_neither_source_valid(self, session_service):
        with pytest.raises(InvalidSessionError):
            await session_service.get_user_identity("unknown", None)

    async def test_logout_then_identity(self, session_service, test_user):
        session_token, _ = await session_service.create_session("test_user", TEST_PASSWORD)
        await session_service.delete_session(session_token.value)

        with pytest.raises(InvalidSessionError):
            await session_service.get_user_identity(session_token.value, None)
