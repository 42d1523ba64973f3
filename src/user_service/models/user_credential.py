"""UserCredential model."""

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from user_service.models.base import Base


class UserCredentialModel(Base):
    """Argon2id password hash of a user, one row per profile."""

    __tablename__ = "user_credential"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_profile.user_id", ondelete="CASCADE"),
        primary_key=True,
    )

    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"UserCredentialModel(user_id={self.user_id})"
