"""UserSession model."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from user_service.models.base import Base


class UserSessionModel(Base):
    """
    A login session.

    A session is live while expire_time is in the future. Expired rows are
    not purged; every read filters on expire_time.
    """

    __tablename__ = "user_session"

    session_token: Mapped[str] = mapped_column(String(255), primary_key=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_profile.user_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    login_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    expire_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    def __repr__(self) -> str:
        return f"UserSessionModel(user_id={self.user_id}, expire_time={self.expire_time})"
