"""SQLAlchemy models backing the session store."""

from user_service.models.base import Base
from user_service.models.user_credential import UserCredentialModel
from user_service.models.user_profile import UserProfileModel
from user_service.models.user_session import UserSessionModel

__all__ = [
    "Base",
    "UserCredentialModel",
    "UserProfileModel",
    "UserSessionModel",
]
