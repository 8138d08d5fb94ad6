"""
Profile endpoints.

Endpoints:
- PUT /: Complete initial profile setup, or edit name/age/gender
- DELETE /session: Sign out, dropping the in-memory journal session
"""

import logging

from fastapi import APIRouter, Depends, Request, status

from moodjournal.core.auth import AuthUser, require_auth_from_state
from moodjournal.models.profile import ProfileResponse, ProfileUpdate
from moodjournal.routers.dependencies import get_session_registry
from moodjournal.services.journal_session import SessionRegistry
from moodjournal.services.profile_service import ProfileService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_profile_service(
    request: Request,
    user: AuthUser = Depends(require_auth_from_state),
) -> ProfileService:
    """ProfileService bound to the signed-in user and the app's connectivity gate."""
    return ProfileService(
        gate=request.app.state.connectivity_gate,
        current_user_id=lambda: user.auth_id,
    )


@router.put("", response_model=ProfileResponse)
async def complete_profile(
    update: ProfileUpdate,
    profile_service: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    """Create the profile (merging saved questionnaire answers) or update it."""
    return profile_service.complete_profile(update)


@router.delete("/session", status_code=status.HTTP_204_NO_CONTENT)
async def sign_out(
    user: AuthUser = Depends(require_auth_from_state),
    registry: SessionRegistry = Depends(get_session_registry),
) -> None:
    registry.discard(user.auth_id)
    logger.info("Signed out", extra={"user_id": user.auth_id})
