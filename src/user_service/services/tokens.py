"""Access token issuing shared by the session and user flows."""

import logging

from starlette.concurrency import run_in_threadpool

from user_service.core.config import Settings
from user_service.domain.value_objects import AccessToken, SessionToken
from user_service.exceptions import InvalidSessionError
from user_service.ports import SessionStore

logger = logging.getLogger(__name__)


async def issue_access_token(
    store: SessionStore,
    settings: Settings,
    session_token: SessionToken,
) -> AccessToken:
    """
    Sign an access token for the owner of a live session.

    The profile is read fresh from the store, so role and profile changes
    show up in every token issued after them.

    Raises:
        InvalidSessionError: If the session is not live
    """
    user_profile = await store.fetch_user_profile_from_session_token(session_token)
    if user_profile is None:
        logger.warning("Access token requested for an invalid session")
        raise InvalidSessionError()

    # RSA signing is CPU bound
    return await run_in_threadpool(
        AccessToken.create,
        user_profile,
        settings.access_token_private_key.get_secret_value(),
        settings.access_token_expire_millis,
    )
