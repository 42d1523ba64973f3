"""Credential primitives and identity records."""

from user_service.domain.value_objects.access_token import AccessToken
from user_service.domain.value_objects.email_address import EmailAddress
from user_service.domain.value_objects.password import Password
from user_service.domain.value_objects.password_hash import PasswordHash
from user_service.domain.value_objects.session_token import SessionToken
from user_service.domain.value_objects.user_id import UserId
from user_service.domain.value_objects.user_profile import (
    ClientModifiableUserProfile,
    UserIdentity,
    UserProfile,
)
from user_service.domain.value_objects.user_role import UserRole
from user_service.domain.value_objects.username import Username

__all__ = [
    "AccessToken",
    "ClientModifiableUserProfile",
    "EmailAddress",
    "Password",
    "PasswordHash",
    "SessionToken",
    "UserId",
    "UserIdentity",
    "UserProfile",
    "UserRole",
    "Username",
]
