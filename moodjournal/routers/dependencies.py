"""Shared router dependencies."""

import logging

from fastapi import Depends, Request

from moodjournal.core.auth import AuthUser, require_auth_from_state
from moodjournal.models.entry import JournalError
from moodjournal.services.journal_session import JournalSession, SessionRegistry

logger = logging.getLogger(__name__)


def get_session_registry(request: Request) -> SessionRegistry:
    """Registry created in the app lifespan."""
    return request.app.state.session_registry


def get_journal_session(
    user: AuthUser = Depends(require_auth_from_state),
    registry: SessionRegistry = Depends(get_session_registry),
) -> JournalSession:
    """
    The signed-in user's journal session.

    History loads on first use while online. Offline, or when that load
    fails, the request is served from the current local snapshot and the
    load is retried on the next refresh, submission or request.
    """
    session = registry.get(user.auth_id)
    if not session.loaded and registry.gate.is_online:
        try:
            session.refresh()
        except JournalError as e:
            logger.warning(
                "History load failed, serving local snapshot: %s",
                e,
                extra={"user_id": user.auth_id},
            )
    return session
