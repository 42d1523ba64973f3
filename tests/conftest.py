"""
Pytest configuration and fixtures for user service tests.

This module provides:
- RSA key pair and settings fixtures
- An in-memory session store implementing the store port
- Application and HTTP client fixtures
- Registered user and logged in session fixtures
"""

import itertools
from datetime import UTC, datetime
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from argon2 import PasswordHasher
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from user_service.core.config import Settings
from user_service.core.security import create_password_hasher
from user_service.domain.value_objects import (
    ClientModifiableUserProfile,
    EmailAddress,
    Password,
    PasswordHash,
    SessionToken,
    UserId,
    UserIdentity,
    UserProfile,
    UserRole,
    Username,
)
from user_service.main import create_app


# ============================================================================
# Keys and Settings
# ============================================================================
def generate_key_pair() -> tuple[str, str]:
    """Return a fresh (private, public) PEM encoded RSA key pair."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = (
        private_key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode()
    )
    return private_pem, public_pem


@pytest.fixture(scope="session")
def key_pair() -> tuple[str, str]:
    return generate_key_pair()


@pytest.fixture(scope="session")
def other_key_pair() -> tuple[str, str]:
    return generate_key_pair()


@pytest.fixture(scope="session")
def private_key(key_pair) -> str:
    return key_pair[0]


@pytest.fixture(scope="session")
def public_key(key_pair) -> str:
    return key_pair[1]


@pytest.fixture
def settings(private_key, public_key) -> Settings:
    """Settings with cheap hashing and generated keys."""
    return Settings(
        _env_file=None,
        access_token_private_key=private_key,
        access_token_public_key=public_key,
        database_password="test-password",
        hash_cost=1,
        hash_memory_cost=1024,
        hash_parallelism=1,
        log_level="DEBUG",
    )


@pytest.fixture
def password_hasher(settings) -> PasswordHasher:
    return create_password_hasher(settings)


# ============================================================================
# In-memory Session Store
# ============================================================================
class UniqueViolation(Exception):
    """Duplicate key error raised by the in-memory store."""


class FakeSessionStore:
    """
    Dict backed implementation of the session store port.

    Set forced_collisions to make the next N create_user_session calls fail
    with a duplicate key error. Every attempted token is recorded in
    session_attempts.
    """

    def __init__(self) -> None:
        self.profiles: dict[int, dict] = {}
        self.password_hashes: dict[int, str] = {}
        self.sessions: dict[str, dict] = {}
        self.forced_collisions = 0
        self.session_attempts: list[SessionToken] = []
        self._ids = itertools.count(1)

    # ---- Helpers ----

    def _live_owner(self, session_token: SessionToken) -> Optional[int]:
        session = self.sessions.get(session_token.value)
        if session is None or session["expire_time"] <= datetime.now(UTC):
            return None
        return session["user_id"]

    def _profile(self, user_id: int) -> UserProfile:
        row = self.profiles[user_id]
        return UserProfile(
            user_id=UserId(user_id),
            username=Username.parse(row["username"]),
            email_address=EmailAddress.parse(row["email_address"]),
            user_role=row["user_role"],
        )

    def _delete_user(self, user_id: int) -> None:
        del self.profiles[user_id]
        self.password_hashes.pop(user_id, None)
        for token in [t for t, s in self.sessions.items() if s["user_id"] == user_id]:
            del self.sessions[token]

    # ---- Port ----

    async def initialise(self) -> None:
        pass

    async def dispose(self) -> None:
        pass

    async def check_connection(self) -> bool:
        return True

    def is_unique_constraint_violated(self, error: BaseException) -> bool:
        return isinstance(error, UniqueViolation)

    async def create_user_session(self, session_token, username, expiry) -> None:
        self.session_attempts.append(session_token)

        if self.forced_collisions > 0:
            self.forced_collisions -= 1
            raise UniqueViolation("duplicate key value violates unique constraint")

        if session_token.value in self.sessions:
            raise UniqueViolation("duplicate key value violates unique constraint")

        user_id = next(
            uid for uid, row in self.profiles.items() if row["username"] == username.value
        )
        self.sessions[session_token.value] = {
            "user_id": user_id,
            "login_time": datetime.now(UTC),
            "expire_time": expiry,
        }

    async def update_user_session_expiry(self, session_token, expiry) -> bool:
        if self._live_owner(session_token) is None:
            return False
        self.sessions[session_token.value]["expire_time"] = expiry
        return True

    async def delete_user_session(self, session_token) -> bool:
        if self._live_owner(session_token) is None:
            return False
        del self.sessions[session_token.value]
        return True

    async def fetch_password_hash_from_username(self, username):
        for user_id, row in self.profiles.items():
            if row["username"] == username.value:
                return PasswordHash(self.password_hashes[user_id])
        return None

    async def fetch_password_hash_from_session_token(self, session_token):
        user_id = self._live_owner(session_token)
        if user_id is None:
            return None
        return PasswordHash(self.password_hashes[user_id])

    async def update_password_hash(self, password_hash, session_token) -> bool:
        user_id = self._live_owner(session_token)
        if user_id is None:
            return False
        self.password_hashes[user_id] = password_hash.value
        return True

    async def create_user_profile_and_credential(self, user_profile, password_hash) -> UserId:
        for row in self.profiles.values():
            if (
                row["username"] == user_profile.username.value
                or row["email_address"] == user_profile.email_address.value
            ):
                raise UniqueViolation("duplicate key value violates unique constraint")

        user_id = next(self._ids)
        self.profiles[user_id] = {
            "username": user_profile.username.value,
            "email_address": user_profile.email_address.value,
            "user_role": UserRole.USER,
        }
        self.password_hashes[user_id] = password_hash.value
        return UserId(user_id)

    async def fetch_user_profile_from_session_token(self, session_token):
        user_id = self._live_owner(session_token)
        return self._profile(user_id) if user_id is not None else None

    async def fetch_user_identity_from_session_token(self, session_token):
        user_id = self._live_owner(session_token)
        if user_id is None:
            return None
        return UserIdentity(UserId(user_id), self.profiles[user_id]["user_role"])

    async def fetch_usernames_from_user_ids(self, user_ids):
        return {
            user_id: Username.parse(self.profiles[user_id.value]["username"])
            for user_id in user_ids
            if user_id.value in self.profiles
        }

    async def update_user_profile(self, user_profile, session_token) -> bool:
        user_id = self._live_owner(session_token)
        if user_id is None:
            return False
        self.profiles[user_id]["username"] = user_profile.username.value
        self.profiles[user_id]["email_address"] = user_profile.email_address.value
        return True

    async def update_user_role(self, user_id, user_role) -> bool:
        if user_id.value not in self.profiles:
            return False
        self.profiles[user_id.value]["user_role"] = user_role
        return True

    async def delete_user_profile(self, session_token) -> bool:
        user_id = self._live_owner(session_token)
        if user_id is None:
            return False
        self._delete_user(user_id)
        return True

    def _excluded(self, excluding_session_token) -> Optional[int]:
        if excluding_session_token is None:
            return None
        session = self.sessions.get(excluding_session_token.value)
        return session["user_id"] if session else None

    async def is_username_in_use(self, username, excluding_session_token=None) -> bool:
        excluded = self._excluded(excluding_session_token)
        return any(
            row["username"] == username.value and uid != excluded
            for uid, row in self.profiles.items()
        )

    async def is_email_address_in_use(self, email_address, excluding_session_token=None) -> bool:
        excluded = self._excluded(excluding_session_token)
        return any(
            row["email_address"] == email_address.value and uid != excluded
            for uid, row in self.profiles.items()
        )

    async def do_entities_exist(self) -> bool:
        return bool(self.profiles)

    async def delete_entities(self) -> None:
        self.profiles.clear()
        self.password_hashes.clear()
        self.sessions.clear()

    async def synchronise(self) -> None:
        pass


@pytest.fixture
def store() -> FakeSessionStore:
    return FakeSessionStore()


# ============================================================================
# Users
# ============================================================================
TEST_PASSWORD = "TestPass123!"


async def add_user(
    store: FakeSessionStore,
    hasher: PasswordHasher,
    username: str,
    email_address: str,
    password: str = TEST_PASSWORD,
    user_role: UserRole = UserRole.USER,
) -> UserId:
    """Register a user directly in the store."""
    user_id = await store.create_user_profile_and_credential(
        ClientModifiableUserProfile(
            username=Username.parse(username),
            email_address=EmailAddress.parse(email_address),
        ),
        await PasswordHash.create(Password.parse(password), hasher),
    )
    await store.update_user_role(user_id, user_role)
    return user_id


@pytest_asyncio.fixture
async def test_user(store, password_hasher) -> UserId:
    return await add_user(store, password_hasher, "test_user", "test@example.com")


@pytest_asyncio.fixture
async def admin_user(store, password_hasher) -> UserId:
    return await add_user(
        store, password_hasher, "admin", "admin@example.com", user_role=UserRole.ADMIN
    )


# ============================================================================
# Application and Client
# ============================================================================
@pytest.fixture
def app(settings, store, password_hasher) -> FastAPI:
    """
    Application wired to the in-memory store.

    ASGITransport does not run the lifespan, so app.state is filled in here.
    """
    application = create_app(settings)
    application.state.session_store = store
    application.state.password_hasher = password_hasher
    return application


@pytest_asyncio.fixture
async def async_client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as client:
        yield client


async def login(client: AsyncClient, username: str, password: str = TEST_PASSWORD) -> str:
    """Log in and return the session token cookie value."""
    response = await client.post(
        "/user-service/sessions",
        params={"username": username, "password": password},
    )
    assert response.status_code == 201
    return response.cookies["session-token"]


@pytest.fixture
def login_as():
    """Log in through the API; see login()."""
    return login


@pytest_asyncio.fixture
async def user_session_token(async_client, test_user) -> str:
    return await login(async_client, "test_user")


@pytest_asyncio.fixture
async def admin_session_token(async_client, admin_user) -> str:
    return await login(async_client, "admin")
