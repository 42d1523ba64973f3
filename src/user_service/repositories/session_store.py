"""
SQLAlchemy implementation of the session store.

Each public operation runs in its own transaction on a pooled connection.
Sessions are filtered on expire_time at read time; expired rows are left in
place.
"""

import logging
from datetime import UTC, datetime
from typing import Optional

from sqlalchemy import delete, exists, inspect, select, text, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from user_service.core.database import close_database_connection
from user_service.domain.value_objects import (
    ClientModifiableUserProfile,
    EmailAddress,
    PasswordHash,
    SessionToken,
    UserId,
    UserIdentity,
    UserProfile,
    UserRole,
    Username,
)
from user_service.models import (
    Base,
    UserCredentialModel,
    UserProfileModel,
    UserSessionModel,
)

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION_SQLSTATE = "23505"
UNIQUE_VIOLATION_MESSAGE = "duplicate key value violates unique constraint"


def is_unique_constraint_violated(error: BaseException) -> bool:
    """
    Classify a store error as a duplicate key violation.

    Checks the PostgreSQL SQLSTATE reported by the driver, falling back to
    the server's message text when the driver does not expose one.
    """
    if not isinstance(error, IntegrityError):
        return False

    orig = error.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate is not None:
        return sqlstate == UNIQUE_VIOLATION_SQLSTATE

    return UNIQUE_VIOLATION_MESSAGE in str(orig)


def _now() -> datetime:
    return datetime.now(UTC)


def _live_session_owner(session_token: SessionToken):
    """Scalar subquery selecting the owner of a live session."""
    return (
        select(UserSessionModel.user_id)
        .where(
            UserSessionModel.session_token == session_token.value,
            UserSessionModel.expire_time > _now(),
        )
        .scalar_subquery()
    )


def _to_user_profile(model: UserProfileModel) -> UserProfile:
    return UserProfile(
        user_id=UserId(model.user_id),
        username=Username.parse(model.username),
        email_address=EmailAddress.parse(model.email_address),
        user_role=UserRole(model.user_role),
    )


class SqlAlchemySessionStore:
    """
    PostgreSQL session store on an async SQLAlchemy engine.

    Attributes:
        engine: Async engine owning the connection pool
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._sessionmaker = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    async def initialise(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Session store connected")

    async def dispose(self) -> None:
        await close_database_connection(self.engine)

    async def check_connection(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Database connection check failed: {e}")
            return False

    def is_unique_constraint_violated(self, error: BaseException) -> bool:
        return is_unique_constraint_violated(error)

    # =========================================================================
    # Sessions
    # =========================================================================

    async def create_user_session(
        self,
        session_token: SessionToken,
        username: Username,
        expiry: datetime,
    ) -> None:
        """
        Insert a session row for the user with the given username.

        Raises:
            IntegrityError: If the session token already exists
            NoResultFound: If no user has the username
        """
        async with self._sessionmaker.begin() as session:
            result = await session.execute(
                select(UserProfileModel.user_id).where(
                    UserProfileModel.username == username.value
                )
            )
            user_id = result.scalar_one()

            session.add(
                UserSessionModel(
                    session_token=session_token.value,
                    user_id=user_id,
                    login_time=_now(),
                    expire_time=expiry,
                )
            )

    async def update_user_session_expiry(
        self, session_token: SessionToken, expiry: datetime
    ) -> bool:
        async with self._sessionmaker.begin() as session:
            result = await session.execute(
                update(UserSessionModel)
                .where(
                    UserSessionModel.session_token == session_token.value,
                    UserSessionModel.expire_time > _now(),
                )
                .values(expire_time=expiry)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount > 0

    async def delete_user_session(self, session_token: SessionToken) -> bool:
        async with self._sessionmaker.begin() as session:
            result = await session.execute(
                delete(UserSessionModel)
                .where(
                    UserSessionModel.session_token == session_token.value,
                    UserSessionModel.expire_time > _now(),
                )
                .execution_options(synchronize_session=False)
            )
            return result.rowcount > 0

    # =========================================================================
    # Credentials
    # =========================================================================

    async def fetch_password_hash_from_username(
        self, username: Username
    ) -> Optional[PasswordHash]:
        async with self._sessionmaker() as session:
            result = await session.execute(
                select(UserCredentialModel.password_hash)
                .join(
                    UserProfileModel,
                    UserProfileModel.user_id == UserCredentialModel.user_id,
                )
                .where(UserProfileModel.username == username.value)
            )
            password_hash = result.scalar_one_or_none()

        return PasswordHash(password_hash) if password_hash is not None else None

    async def fetch_password_hash_from_session_token(
        self, session_token: SessionToken
    ) -> Optional[PasswordHash]:
        async with self._sessionmaker() as session:
            result = await session.execute(
                select(UserCredentialModel.password_hash).where(
                    UserCredentialModel.user_id == _live_session_owner(session_token)
                )
            )
            password_hash = result.scalar_one_or_none()

        return PasswordHash(password_hash) if password_hash is not None else None

    async def update_password_hash(
        self, password_hash: PasswordHash, session_token: SessionToken
    ) -> bool:
        async with self._sessionmaker.begin() as session:
            result = await session.execute(
                update(UserCredentialModel)
                .where(UserCredentialModel.user_id == _live_session_owner(session_token))
                .values(password_hash=password_hash.value)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount > 0

    # =========================================================================
    # Profiles
    # =========================================================================

    async def create_user_profile_and_credential(
        self,
        user_profile: ClientModifiableUserProfile,
        password_hash: PasswordHash,
    ) -> UserId:
        """
        Insert a profile and its credential in one transaction.

        Raises:
            IntegrityError: If the username or email address is taken
        """
        async with self._sessionmaker.begin() as session:
            profile = UserProfileModel(
                username=user_profile.username.value,
                email_address=user_profile.email_address.value,
                user_role=UserRole.USER,
            )
            session.add(profile)
            await session.flush()

            session.add(
                UserCredentialModel(
                    user_id=profile.user_id,
                    password_hash=password_hash.value,
                )
            )

        return UserId(profile.user_id)

    async def fetch_user_profile_from_session_token(
        self, session_token: SessionToken
    ) -> Optional[UserProfile]:
        async with self._sessionmaker() as session:
            result = await session.execute(
                select(UserProfileModel).where(
                    UserProfileModel.user_id == _live_session_owner(session_token)
                )
            )
            profile = result.scalar_one_or_none()

        return _to_user_profile(profile) if profile is not None else None

    async def fetch_user_identity_from_session_token(
        self, session_token: SessionToken
    ) -> Optional[UserIdentity]:
        async with self._sessionmaker() as session:
            result = await session.execute(
                select(UserProfileModel.user_id, UserProfileModel.user_role).where(
                    UserProfileModel.user_id == _live_session_owner(session_token)
                )
            )
            row = result.one_or_none()

        if row is None:
            return None

        return UserIdentity(user_id=UserId(row.user_id), user_role=UserRole(row.user_role))

    async def fetch_usernames_from_user_ids(
        self, user_ids: list[UserId]
    ) -> dict[UserId, Username]:
        if not user_ids:
            return {}

        async with self._sessionmaker() as session:
            result = await session.execute(
                select(UserProfileModel.user_id, UserProfileModel.username).where(
                    UserProfileModel.user_id.in_([user_id.value for user_id in user_ids])
                )
            )
            rows = result.all()

        return {UserId(row.user_id): Username.parse(row.username) for row in rows}

    async def update_user_profile(
        self,
        user_profile: ClientModifiableUserProfile,
        session_token: SessionToken,
    ) -> bool:
        async with self._sessionmaker.begin() as session:
            result = await session.execute(
                update(UserProfileModel)
                .where(UserProfileModel.user_id == _live_session_owner(session_token))
                .values(
                    username=user_profile.username.value,
                    email_address=user_profile.email_address.value,
                )
                .execution_options(synchronize_session=False)
            )
            return result.rowcount > 0

    async def update_user_role(self, user_id: UserId, user_role: UserRole) -> bool:
        async with self._sessionmaker.begin() as session:
            result = await session.execute(
                update(UserProfileModel)
                .where(UserProfileModel.user_id == user_id.value)
                .values(user_role=user_role)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount > 0

    async def delete_user_profile(self, session_token: SessionToken) -> bool:
        # Credential and session rows go with it via ON DELETE CASCADE
        async with self._sessionmaker.begin() as session:
            result = await session.execute(
                delete(UserProfileModel)
                .where(UserProfileModel.user_id == _live_session_owner(session_token))
                .execution_options(synchronize_session=False)
            )
            return result.rowcount > 0

    async def is_username_in_use(
        self,
        username: Username,
        excluding_session_token: Optional[SessionToken] = None,
    ) -> bool:
        query = select(UserProfileModel.user_id).where(
            UserProfileModel.username == username.value
        )
        return await self._exists(query, excluding_session_token)

    async def is_email_address_in_use(
        self,
        email_address: EmailAddress,
        excluding_session_token: Optional[SessionToken] = None,
    ) -> bool:
        query = select(UserProfileModel.user_id).where(
            UserProfileModel.email_address == email_address.value
        )
        return await self._exists(query, excluding_session_token)

    async def _exists(self, query, excluding_session_token: Optional[SessionToken]) -> bool:
        if excluding_session_token is not None:
            excluded_user_ids = select(UserSessionModel.user_id).where(
                UserSessionModel.session_token == excluding_session_token.value
            )
            query = query.where(UserProfileModel.user_id.not_in(excluded_user_ids))

        async with self._sessionmaker() as session:
            result = await session.execute(select(exists(query)))
            return bool(result.scalar())

    # =========================================================================
    # Schema management
    # =========================================================================

    async def do_entities_exist(self) -> bool:
        async with self.engine.connect() as conn:
            table_names = await conn.run_sync(
                lambda sync_conn: inspect(sync_conn).get_table_names()
            )

        return any(name in table_names for name in Base.metadata.tables)

    async def delete_entities(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        logger.info("Dropped user tables")

    async def synchronise(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Created user tables")
