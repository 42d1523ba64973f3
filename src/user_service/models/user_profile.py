"""UserProfile model."""

from sqlalchemy import Enum, Identity, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from user_service.domain.value_objects import UserRole
from user_service.models.base import Base


class UserProfileModel(Base):
    """
    A registered user.

    Attributes:
        user_id: Sequential primary key, starting at 1
        username: Unique username
        email_address: Unique, lower-cased email address
        user_role: One of user, maintainer, admin

    Deleting a profile cascades to its credential and sessions at the
    database level.
    """

    __tablename__ = "user_profile"

    user_id: Mapped[int] = mapped_column(Integer, Identity(), primary_key=True)

    username: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    email_address: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True
    )

    user_role: Mapped[UserRole] = mapped_column(
        Enum(
            UserRole,
            name="user_role",
            values_callable=lambda roles: [role.value for role in roles],
        ),
        nullable=False,
        default=UserRole.USER,
    )

    def __repr__(self) -> str:
        return f"UserProfileModel(user_id={self.user_id}, username={self.username!r})"
