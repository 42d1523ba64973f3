"""Access token public key endpoint."""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from user_service.api.dependencies import AppSettings

router = APIRouter(tags=["Keys"])


@router.get(
    "/access-token-public-key",
    response_class=PlainTextResponse,
    summary="Get access token public key",
)
async def get_access_token_public_key(settings: AppSettings) -> str:
    """PEM public key other services use to verify access tokens locally."""
    return settings.access_token_public_key
