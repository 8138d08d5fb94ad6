"""
Mood entry endpoints.

Endpoints (static routes before parameterized):
- POST /: Submit today's mood (201 committed, 200 pending conflict)
- GET /: Current entries plus any pending replacement
- POST /refresh: Reload all entries from the remote store
- POST /pending/confirm: Replace the day's entry with the pending one
- DELETE /pending: Discard the pending replacement
- GET /day/{day}: Entry for a calendar day
"""

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Response, status

from moodjournal.models.entry import (
    EntriesResponse,
    FetchResult,
    MoodEntry,
    MoodEntryCreate,
    ReplaceResult,
    SubmitResult,
    SubmitStatus,
)
from moodjournal.routers.dependencies import get_journal_session
from moodjournal.services.journal_session import JournalSession

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=SubmitResult, status_code=status.HTTP_201_CREATED)
async def submit_entry(
    request: MoodEntryCreate,
    response: Response,
    session: JournalSession = Depends(get_journal_session),
) -> SubmitResult:
    """
    Log today's mood.

    If today already has an entry, nothing is saved: the response carries
    status "pending_conflict" and the client must confirm or cancel.
    """
    result = session.log_mood(request)
    if result.status == SubmitStatus.PENDING_CONFLICT:
        response.status_code = status.HTTP_200_OK
    return result


@router.get("", response_model=EntriesResponse)
async def list_entries(session: JournalSession = Depends(get_journal_session)) -> EntriesResponse:
    """Entries ascending by date, plus the pending replacement if any."""
    return session.entries()


@router.post("/refresh", response_model=FetchResult)
async def refresh_entries(session: JournalSession = Depends(get_journal_session)) -> FetchResult:
    """Replace local entries with the remote store's copy."""
    return session.refresh()


@router.post("/pending/confirm", response_model=ReplaceResult)
async def confirm_replace(session: JournalSession = Depends(get_journal_session)) -> ReplaceResult:
    return session.sync.confirm_replace()


@router.delete("/pending", response_model=MoodEntry)
async def cancel_replace(session: JournalSession = Depends(get_journal_session)) -> MoodEntry:
    """Discard the pending replacement; returns the discarded candidate."""
    return session.sync.cancel_replace()


@router.get("/day/{day}", response_model=MoodEntry)
async def get_entry_for_day(
    day: date, session: JournalSession = Depends(get_journal_session)
) -> MoodEntry:
    entry = session.analytics.entry_for(day)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"No entry for {day.isoformat()}")
    return entry
