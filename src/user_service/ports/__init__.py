"""Outbound ports the authentication flows depend on."""

from user_service.ports.session_store import SessionStore

__all__ = ["SessionStore"]
