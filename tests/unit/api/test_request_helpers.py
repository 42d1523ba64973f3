"""
Unit tests for parameter extraction and cookie writing.
"""

from datetime import UTC, datetime

import pytest
from fastapi import Request, Response

from user_service.api.cookies import (
    expire_cookies,
    set_access_token_cookies,
    set_session_token_cookie,
)
from user_service.api.dependencies import cookie, query_param
from user_service.domain.value_objects import (
    AccessToken,
    EmailAddress,
    SessionToken,
    UserId,
    UserProfile,
    UserRole,
    Username,
)


def _request(query_string: bytes = b"", cookie_header: bytes | None = None) -> Request:
    headers = [(b"cookie", cookie_header)] if cookie_header else []
    return Request(
        {
            "type": "http",
            "method": "GET",
            "path": "/",
            "query_string": query_string,
            "headers": headers,
        }
    )


class TestQueryParam:
    """Test raw query parameter extraction."""

    def test_absent(self):
        assert query_param(_request(), "username") is None

    def test_single_value(self):
        assert query_param(_request(b"username=alice"), "username") == "alice"

    def test_repeated_key_is_a_list(self):
        assert query_param(_request(b"username=a&username=b"), "username") == ["a", "b"]

    def test_hyphenated_key(self):
        assert query_param(_request(b"email-address=a%40b.com"), "email-address") == "a@b.com"


class TestCookie:
    def test_reads_cookie(self):
        assert cookie(_request(cookie_header=b"session-token=abc"), "session-token") == "abc"

    def test_missing_cookie(self):
        assert cookie(_request(), "session-token") is None


class TestCookieWriting:
    """Test the Set-Cookie headers written for each token."""

    @pytest.fixture
    def access_token(self) -> AccessToken:
        return AccessToken(
            token="header.payload.signature",
            user_profile=UserProfile(
                user_id=UserId(1),
                username=Username.parse("test_user"),
                email_address=EmailAddress.parse("test@example.com"),
                user_role=UserRole.USER,
            ),
            expiry=datetime(2030, 1, 1, tzinfo=UTC),
        )

    def test_session_token_cookie(self):
        response = Response()
        token = SessionToken.create()

        set_session_token_cookie(response, token)

        header = response.headers["set-cookie"]
        assert header.startswith(f"session-token={token.value}")
        assert "HttpOnly" in header
        assert "SameSite=strict" in header
        assert "2038" in header

    def test_access_token_cookies(self, access_token):
        response = Response()

        set_access_token_cookies(response, access_token)

        headers = response.headers.getlist("set-cookie")
        assert headers[0].startswith("access-token=header.payload.signature")
        assert "HttpOnly" in headers[0]
        assert headers[1].startswith("access-token-expiry=2030-01-01T00:00:00+00:00")
        assert "HttpOnly" not in headers[1]

    def test_expire_cookies(self):
        response = Response()

        expire_cookies(response)

        headers = response.headers.getlist("set-cookie")
        assert [h.split("=", 1)[0] for h in headers] == [
            "session-token",
            "access-token",
            "access-token-expiry",
        ]
        assert all("Max-Age=0" in h for h in headers)
