from fastapi import APIRouter, Depends
from courtbook.database.supabase_client import get_service_supabase
from courtbook.modules.bookings.schemas import BookingResponse, BookingWithProfileResponse
from courtbook.modules.bookings.service import BookingService
from courtbook.core.dependencies import get_current_user, require_approved_user
from supabase import Client
from typing import List, Dict

router = APIRouter(tags=["bookings"])


def get_booking_service(supabase: Client = Depends(get_service_supabase)) -> BookingService:
    return BookingService(supabase)


@router.post("/sessions/{session_id}/bookings", response_model=BookingResponse, status_code=201)
async def book_session(
    session_id: str,
    user_data: Dict = Depends(require_approved_user),
    service: BookingService = Depends(get_booking_service)
):
    """Book a place in a session for the current user"""
    return service.book_session(session_id, user_data["id"])


@router.delete("/sessions/{session_id}/bookings/me", status_code=204)
async def cancel_my_booking(
    session_id: str,
    user_data: Dict = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service)
):
    service.cancel_booking(session_id, user_data["id"])
    return None


@router.get("/sessions/{session_id}/bookings", response_model=List[BookingWithProfileResponse])
async def list_session_bookings(
    session_id: str,
    user_data: Dict = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service)
):
    return service.list_session_bookings(session_id)


@router.get("/bookings/me", response_model=List[BookingResponse])
async def list_my_bookings(
    user_data: Dict = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service)
):
    return service.list_user_bookings(user_data["id"])
