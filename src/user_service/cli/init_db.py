"""
Database initialiser job.

Responsibilities:
  - Create the user_profile, user_credential and user_session tables
  - Refuse to touch existing tables unless initialisation is forced
  - Create the `admin` user from ADMIN_EMAIL_ADDRESS / ADMIN_PASSWORD
"""

import argparse
import asyncio
import logging
import sys

from user_service.core.config import Settings, get_settings
from user_service.core.database import create_database_engine
from user_service.core.logging import setup_logging
from user_service.core.security import create_password_hasher
from user_service.domain.exceptions import InvalidValueError
from user_service.domain.value_objects import (
    ClientModifiableUserProfile,
    EmailAddress,
    Password,
    PasswordHash,
    UserRole,
    Username,
)
from user_service.ports import SessionStore
from user_service.repositories import SqlAlchemySessionStore

logger = logging.getLogger(__name__)

ADMIN_USERNAME = "admin"


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Create the user service tables and the admin user."
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Drop existing tables first (overrides SHOULD_FORCE_INITIALISATION)",
    )
    return parser.parse_args(argv)


def _admin_profile(settings: Settings) -> tuple[ClientModifiableUserProfile, Password]:
    if not settings.admin_email_address or settings.admin_password is None:
        raise SystemExit("ADMIN_EMAIL_ADDRESS and ADMIN_PASSWORD are required.")

    try:
        email_address = EmailAddress.parse_and_validate(settings.admin_email_address)
        password = Password.parse_and_validate(settings.admin_password.get_secret_value())
    except InvalidValueError as e:
        raise SystemExit(f"Invalid admin credentials: {e.message}") from e

    user_profile = ClientModifiableUserProfile(
        username=Username.parse(ADMIN_USERNAME),
        email_address=email_address,
    )
    return user_profile, password


async def initialise(store: SessionStore, settings: Settings, force: bool) -> bool:
    """
    Create the tables and the admin user.

    Returns:
        False if tables already existed and initialisation was not forced
    """
    user_profile, password = _admin_profile(settings)

    await store.initialise()

    if await store.do_entities_exist():
        logger.warning("One or more tables to be created already exist")

        if not force:
            logger.warning("Initialisation aborted")
            return False

        logger.info("Deleting existing tables...")
        await store.delete_entities()

    logger.info("Creating tables...")
    await store.synchronise()

    logger.info("Creating admin user...")
    password_hash = await PasswordHash.create(password, create_password_hasher(settings))
    user_id = await store.create_user_profile_and_credential(user_profile, password_hash)
    await store.update_user_role(user_id, UserRole.ADMIN)

    logger.info(f"Created admin user: {user_id}")
    return True


async def _run(settings: Settings, force: bool) -> bool:
    store = SqlAlchemySessionStore(create_database_engine(settings))
    try:
        return await initialise(store, settings, force)
    finally:
        await store.dispose()


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    settings = get_settings()
    setup_logging(settings)

    force = args.force or settings.should_force_initialisation
    if not asyncio.run(_run(settings, force)):
        sys.exit(1)


if __name__ == "__main__":
    main()
