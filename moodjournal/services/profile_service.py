"""
Profile service for account creation and edits.

Handles:
- Creating the profile document (name, age, gender) on first setup,
  merged with the locally saved questionnaire answers
- Updating name/age/gender when the document already exists

The questionnaire file is an optional enrichment: missing or malformed
files are ignored.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

from supabase import Client

from moodjournal.core.config import get_settings
from moodjournal.core.connectivity import ConnectivityGate
from moodjournal.core.database import get_supabase
from moodjournal.models.entry import AuthRequiredError, RemoteReadError, RemoteWriteError
from moodjournal.models.profile import ProfileResponse, ProfileUpdate

logger = logging.getLogger(__name__)


def load_questionnaire_answers(path: Path) -> dict[str, str]:
    """Read the saved questionnaire answers map. Returns {} if absent or malformed."""
    path = Path(path).expanduser()
    if not path.exists():
        return {}

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Ignoring unreadable questionnaire answers at %s: %s", path, e)
        return {}

    if not isinstance(data, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in data.items()
    ):
        logger.warning("Ignoring questionnaire answers at %s: not a string map", path)
        return {}
    return data


class ProfileService:
    """Service for the user's profile document."""

    def __init__(
        self,
        gate: ConnectivityGate,
        current_user_id: Callable[[], Optional[str]],
        supabase: Optional[Client] = None,
        questionnaire_path: Optional[Path] = None,
        table: Optional[str] = None,
    ) -> None:
        settings = get_settings()
        self.gate = gate
        self.current_user_id = current_user_id
        self._supabase = supabase
        self.questionnaire_path = Path(questionnaire_path or settings.questionnaire_answers_path)
        self.table = table or settings.profiles_table
        self._answers: Optional[dict[str, str]] = None

    @property
    def supabase(self) -> Client:
        if self._supabase is None:
            self._supabase = get_supabase()
        return self._supabase

    @property
    def questionnaire_answers(self) -> dict[str, str]:
        """Answers map, read from disk on first access only."""
        if self._answers is None:
            self._answers = load_questionnaire_answers(self.questionnaire_path)
        return self._answers

    def complete_profile(self, update: ProfileUpdate) -> ProfileResponse:
        """
        Create or update the signed-in user's profile.

        Raises:
            NetworkUnavailableError: Gate is closed
            AuthRequiredError: No signed-in user
            RemoteReadError / RemoteWriteError: Store failures
        """
        self.gate.require_online()
        user_id = self.current_user_id()
        if not user_id:
            raise AuthRequiredError("No authenticated user")

        existing = self._get_row(user_id)
        now = datetime.now(timezone.utc).isoformat()

        if existing is not None:
            fields = {**update.model_dump(), "updated_at": now}
            try:
                self.supabase.table(self.table).update(fields).eq("user_id", user_id).execute()
            except Exception as e:
                raise RemoteWriteError(f"Error updating profile: {e}") from e
            logger.info("Profile updated", extra={"user_id": user_id})
            return ProfileResponse(
                user_id=user_id,
                profile_complete=True,
                questionnaire=existing.get("questionnaire") or {},
                created=False,
                **update.model_dump(),
            )

        row: dict[str, Any] = {
            "user_id": user_id,
            **update.model_dump(),
            "profile_complete": True,
            "created_at": now,
        }
        if self.questionnaire_answers:
            row["questionnaire"] = self.questionnaire_answers

        try:
            self.supabase.table(self.table).insert(row).execute()
        except Exception as e:
            raise RemoteWriteError(f"Error creating profile: {e}") from e

        logger.info("Profile created", extra={"user_id": user_id})
        return ProfileResponse(
            user_id=user_id,
            profile_complete=True,
            questionnaire=self.questionnaire_answers,
            created=True,
            **update.model_dump(),
        )

    def _get_row(self, user_id: str) -> Optional[dict[str, Any]]:
        try:
            result = self.supabase.table(self.table).select("*").eq("user_id", user_id).execute()
        except Exception as e:
            raise RemoteReadError(f"Error loading profile: {e}") from e
        return result.data[0] if result.data else None
