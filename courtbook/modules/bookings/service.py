from supabase import Client
from postgrest.exceptions import APIError
from courtbook.modules.bookings.schemas import BookingResponse, BookingWithProfileResponse
from courtbook.modules.invites.models import UNIQUE_VIOLATION
from courtbook.modules.notifications.service import NotificationService
from courtbook.modules.sessions.service import SessionService
from typing import List
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class BookingService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.sessions = SessionService(supabase)
        self.notifications = NotificationService(supabase)

    def book_session(self, session_id: str, user_id: str) -> BookingResponse:
        """
        Book a place for user_id. Capacity is checked first but not locked:
        concurrent bookings for the last place can oversubscribe the session.
        """
        session = self.sessions.get_session_row(session_id)
        if session.get("is_cancelled"):
            raise HTTPException(status_code=400, detail="Session is cancelled")
        if self.sessions.count_bookings(session_id) >= session["max_participants"]:
            raise HTTPException(status_code=409, detail="Session is full")

        try:
            result = self.supabase.table("bookings").insert({
                "session_id": session_id,
                "user_id": user_id,
                "reminder_sent": False,
            }).execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise HTTPException(status_code=409, detail="You already booked this session")
            logger.error(f"Error booking session {session_id} for {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to book session")
        except Exception as e:
            logger.error(f"Error booking session {session_id} for {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to book session")
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to book session")

        booking = result.data[0]
        self.notifications.on_booking_created(booking, session)
        return BookingResponse(**booking)

    def cancel_booking(self, session_id: str, user_id: str) -> bool:
        """Remove the caller's own booking"""
        session = self.sessions.get_session_row(session_id)
        try:
            result = self.supabase.table("bookings")\
                .delete()\
                .eq("session_id", session_id)\
                .eq("user_id", user_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error cancelling booking on {session_id} for {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to cancel booking")
        if not result.data:
            raise HTTPException(status_code=404, detail="Booking not found")
        self.notifications.on_booking_cancelled(result.data[0], session)
        return True

    def list_session_bookings(self, session_id: str) -> List[BookingWithProfileResponse]:
        self.sessions.get_session_row(session_id)
        try:
            bookings = self.supabase.table("bookings")\
                .select("*")\
                .eq("session_id", session_id)\
                .order("created_at")\
                .execute()
            rows = bookings.data or []
            profiles = {}
            if rows:
                profile_result = self.supabase.table("profiles")\
                    .select("user_id, full_name, avatar_url")\
                    .in_("user_id", [b["user_id"] for b in rows])\
                    .execute()
                profiles = {p["user_id"]: p for p in (profile_result.data or [])}
            return [
                BookingWithProfileResponse(
                    **b,
                    full_name=profiles.get(b["user_id"], {}).get("full_name"),
                    avatar_url=profiles.get(b["user_id"], {}).get("avatar_url"),
                )
                for b in rows
            ]
        except Exception as e:
            logger.error(f"Error listing bookings of session {session_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to load bookings")

    def list_user_bookings(self, user_id: str) -> List[BookingResponse]:
        try:
            result = self.supabase.table("bookings")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .execute()
            return [BookingResponse(**b) for b in (result.data or [])]
        except Exception as e:
            logger.error(f"Error listing bookings of user {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to load bookings")
