"""Authentication and account flows."""

from user_service.services.session_service import SessionService
from user_service.services.user_service import UserService

__all__ = ["SessionService", "UserService"]
