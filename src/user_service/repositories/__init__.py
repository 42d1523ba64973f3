"""Concrete session store implementations."""

from user_service.repositories.session_store import (
    SqlAlchemySessionStore,
    is_unique_constraint_violated,
)

__all__ = ["SqlAlchemySessionStore", "is_unique_constraint_violated"]
