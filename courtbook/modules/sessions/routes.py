from fastapi import APIRouter, Depends
from courtbook.database.supabase_client import get_service_supabase
from courtbook.modules.sessions.schemas import (
    SessionCreate, SessionUpdate, SessionResponse,
    RecurrenceGenerateRequest, RecurrenceGenerateResponse, RecurrenceDeleteResponse
)
from courtbook.modules.sessions.service import SessionService
from courtbook.core.dependencies import get_current_user, require_approved_user
from supabase import Client
from typing import List, Optional, Dict
from datetime import date

router = APIRouter(prefix="/sessions", tags=["sessions"])


def get_session_service(supabase: Client = Depends(get_service_supabase)) -> SessionService:
    return SessionService(supabase)


@router.get("", response_model=List[SessionResponse])
async def list_sessions(
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    sport_type: Optional[str] = None,
    include_cancelled: bool = True,
    limit: int = 100,
    offset: int = 0,
    user_data: Dict = Depends(get_current_user),
    service: SessionService = Depends(get_session_service)
):
    """List sessions ordered by date and start time"""
    return service.list_sessions(
        from_date=from_date,
        to_date=to_date,
        sport_type=sport_type,
        include_cancelled=include_cancelled,
        limit=limit,
        offset=offset
    )


@router.post("", response_model=SessionResponse, status_code=201)
async def create_session(
    session_data: SessionCreate,
    user_data: Dict = Depends(require_approved_user),
    service: SessionService = Depends(get_session_service)
):
    """Create a session (and its instances when a recurrence rule is given)"""
    return service.create_session(session_data, user_data["id"])


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    user_data: Dict = Depends(get_current_user),
    service: SessionService = Depends(get_session_service)
):
    return service.get_session(session_id)


@router.patch("/{session_id}", response_model=SessionResponse)
async def update_session(
    session_id: str,
    session_data: SessionUpdate,
    user_data: Dict = Depends(require_approved_user),
    service: SessionService = Depends(get_session_service)
):
    """Update session (organizer or admin); booked users are notified of changes"""
    return service.update_session(session_id, session_data, user_data["id"])


@router.post("/{session_id}/cancel", response_model=SessionResponse)
async def cancel_session(
    session_id: str,
    user_data: Dict = Depends(require_approved_user),
    service: SessionService = Depends(get_session_service)
):
    return service.cancel_session(session_id, user_data["id"])


@router.delete("/{session_id}", status_code=204)
async def delete_session(
    session_id: str,
    user_data: Dict = Depends(require_approved_user),
    service: SessionService = Depends(get_session_service)
):
    """Delete session (organizer or admin)"""
    service.delete_session(session_id, user_data["id"])
    return None


@router.post("/{session_id}/recurrence", response_model=RecurrenceGenerateResponse, status_code=201)
async def generate_recurring_sessions(
    session_id: str,
    request: RecurrenceGenerateRequest,
    user_data: Dict = Depends(require_approved_user),
    service: SessionService = Depends(get_session_service)
):
    """Generate recurring instances of a session. Call once per parent."""
    return service.generate_recurring_sessions(
        session_id,
        request.recurrence_type,
        request.recurrence_days,
        request.end_date,
        user_data["id"]
    )


@router.delete("/{session_id}/recurrence", response_model=RecurrenceDeleteResponse)
async def delete_future_recurring_sessions(
    session_id: str,
    user_data: Dict = Depends(require_approved_user),
    service: SessionService = Depends(get_session_service)
):
    """Delete the instances of a recurring session that are still in the future"""
    return service.delete_future_recurring_sessions(session_id, user_data["id"])
