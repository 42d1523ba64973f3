"""
FastAPI dependencies.

This module provides:
- Settings and session store lookup from app.state
- Service construction per request
- Raw request parameter and cookie extraction
"""

from typing import Annotated, Any

from fastapi import Depends, Request

from user_service.core.config import Settings
from user_service.ports import SessionStore
from user_service.services import SessionService, UserService


def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


def get_session_store(request: Request) -> SessionStore:
    """Session store opened by the lifespan handler."""
    return request.app.state.session_store


def get_session_service(
    settings: Annotated[Settings, Depends(get_app_settings)],
    store: Annotated[SessionStore, Depends(get_session_store)],
) -> SessionService:
    return SessionService(settings, store)


def get_user_service(
    request: Request,
    settings: Annotated[Settings, Depends(get_app_settings)],
    store: Annotated[SessionStore, Depends(get_session_store)],
) -> UserService:
    return UserService(
        settings,
        store,
        getattr(request.app.state, "password_hasher", None),
    )


def query_param(request: Request, key: str) -> Any:
    """
    Raw value of a query parameter.

    Returns None when absent, the string when given once, and the list of
    values when repeated. Parsers reject the list shape.
    """
    values = request.query_params.getlist(key)
    if not values:
        return None
    if len(values) == 1:
        return values[0]
    return values


def cookie(request: Request, key: str) -> Any:
    """Raw value of a cookie, or None."""
    return request.cookies.get(key)


AppSettings = Annotated[Settings, Depends(get_app_settings)]
Store = Annotated[SessionStore, Depends(get_session_store)]
SessionServiceDep = Annotated[SessionService, Depends(get_session_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
