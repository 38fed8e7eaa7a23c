from supabase import Client
from courtbook.config import settings
from courtbook.modules.sessions.schemas import (
    SessionCreate, SessionUpdate, SessionResponse,
    RecurrenceGenerateResponse, RecurrenceDeleteResponse
)
from courtbook.modules.sessions.recurrence import (
    RecurrenceError, validate_recurrence, expand_recurrence
)
from courtbook.modules.notifications.service import NotificationService
from courtbook.core.authorization import check_session_manager
from courtbook.utils.datetime_utils import local_today, parse_date
from typing import Any, Dict, List, Optional
from datetime import date
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

# Copied from the parent onto every generated instance
INSTANCE_FIELDS = (
    "title", "description", "sport_type", "location",
    "start_time", "end_time", "max_participants", "created_by",
)


class SessionService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.notifications = NotificationService(supabase)

    def get_session_row(self, session_id: str) -> Dict[str, Any]:
        try:
            result = self.supabase.table("sessions")\
                .select("*")\
                .eq("id", session_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching session {session_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to load session")
        if not result.data:
            raise HTTPException(status_code=404, detail="Session not found")
        return result.data[0]

    def count_bookings(self, session_id: str) -> int:
        result = self.supabase.table("bookings")\
            .select("id")\
            .eq("session_id", session_id)\
            .execute()
        return len(result.data or [])

    def get_session(self, session_id: str) -> SessionResponse:
        """Get session by ID with its current booking count"""
        row = self.get_session_row(session_id)
        return SessionResponse(**row, booking_count=self.count_bookings(session_id))

    def list_sessions(
        self,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        sport_type: Optional[str] = None,
        include_cancelled: bool = True,
        limit: int = 100,
        offset: int = 0
    ) -> List[SessionResponse]:
        try:
            query = self.supabase.table("sessions").select("*")
            if from_date:
                query = query.gte("session_date", from_date.isoformat())
            if to_date:
                query = query.lte("session_date", to_date.isoformat())
            if sport_type:
                query = query.eq("sport_type", sport_type)
            if not include_cancelled:
                query = query.eq("is_cancelled", False)
            result = query.order("session_date")\
                .order("start_time")\
                .limit(limit)\
                .offset(offset)\
                .execute()
            sessions = result.data or []
            counts: Dict[str, int] = {}
            if sessions:
                bookings = self.supabase.table("bookings")\
                    .select("session_id")\
                    .in_("session_id", [s["id"] for s in sessions])\
                    .execute()
                for b in bookings.data or []:
                    counts[b["session_id"]] = counts.get(b["session_id"], 0) + 1
            return [SessionResponse(**s, booking_count=counts.get(s["id"], 0)) for s in sessions]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error listing sessions: {e}")
            raise HTTPException(status_code=500, detail="Failed to load sessions")

    def create_session(self, session_data: SessionCreate, user_id: str) -> SessionResponse:
        """Create a session; a recurrence rule generates its instances once, right after."""
        recurring = session_data.recurrence_type != "none"
        if recurring:
            try:
                validate_recurrence(
                    session_data.session_date,
                    session_data.recurrence_type,
                    session_data.recurrence_days,
                    session_data.recurrence_end_date,
                    settings.recurrence_max_years,
                )
            except RecurrenceError as e:
                raise HTTPException(status_code=400, detail=str(e))

        insert_data = session_data.model_dump(mode="json")
        insert_data["created_by"] = user_id
        insert_data["is_cancelled"] = False
        insert_data["is_recurring_instance"] = False
        insert_data["parent_session_id"] = None
        if not recurring:
            insert_data["recurrence_days"] = None
            insert_data["recurrence_end_date"] = None
        elif session_data.recurrence_type != "custom":
            insert_data["recurrence_days"] = None

        try:
            result = self.supabase.table("sessions").insert(insert_data).execute()
        except Exception as e:
            logger.error(f"Error creating session for {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to create session")
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create session")
        session = result.data[0]
        logger.info(f"Session {session['id']} created by {user_id}")

        if recurring:
            self.generate_recurring_sessions(
                session["id"],
                session_data.recurrence_type,
                session_data.recurrence_days,
                session_data.recurrence_end_date,
                user_id,
            )
        return SessionResponse(**session, booking_count=0)

    def update_session(self, session_id: str, session_data: SessionUpdate, user_id: str) -> SessionResponse:
        old = self.get_session_row(session_id)
        check_session_manager(self.supabase, old, user_id)

        update_data = session_data.model_dump(mode="json", exclude_none=True)
        if not update_data:
            return self.get_session(session_id)
        start = update_data.get("start_time", old["start_time"])
        end = update_data.get("end_time", old["end_time"])
        if str(end)[:8] <= str(start)[:8]:
            raise HTTPException(status_code=400, detail="end_time must be after start_time")

        try:
            result = self.supabase.table("sessions")\
                .update(update_data)\
                .eq("id", session_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error updating session {session_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update session")
        if not result.data:
            raise HTTPException(status_code=404, detail="Session not found")
        new = result.data[0]
        self.notifications.on_session_modified(old, new)
        return SessionResponse(**new, booking_count=self.count_bookings(session_id))

    def cancel_session(self, session_id: str, user_id: str) -> SessionResponse:
        """Flag the session cancelled and tell everyone who booked it"""
        session = self.get_session_row(session_id)
        check_session_manager(self.supabase, session, user_id)
        if session.get("is_cancelled"):
            return SessionResponse(**session, booking_count=self.count_bookings(session_id))
        try:
            result = self.supabase.table("sessions")\
                .update({"is_cancelled": True})\
                .eq("id", session_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error cancelling session {session_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to cancel session")
        if not result.data:
            raise HTTPException(status_code=404, detail="Session not found")
        self.notifications.on_session_cancelled(session, deleted=False)
        logger.info(f"Session {session_id} cancelled by {user_id}")
        return SessionResponse(**result.data[0], booking_count=self.count_bookings(session_id))

    def _announce_deletion(self, sessions: List[Dict[str, Any]]) -> int:
        """
        Tell booked users that these sessions are going away. Sessions already
        cancelled were announced at cancellation time and are skipped; a delete
        trigger would have notified them a second time.
        """
        sent = 0
        for session in sessions:
            if not session.get("is_cancelled"):
                sent += self.notifications.on_session_cancelled(session, deleted=True)
        return sent

    def _list_instances(self, parent_id: str, after: Optional[date] = None) -> List[Dict[str, Any]]:
        query = self.supabase.table("sessions")\
            .select("*")\
            .eq("parent_session_id", parent_id)
        if after is not None:
            query = query.gt("session_date", after.isoformat())
        return query.execute().data or []

    def delete_session(self, session_id: str, user_id: str) -> bool:
        """
        Notify booked users, remove the bookings, then the session. Instances of
        a recurring parent go with it by cascade, so their booked users are
        notified first too.
        Unlike the "always notify" rule of a delete trigger, sessions that were
        already cancelled are not announced again.
        Not atomic: a failure between steps leaves the earlier steps applied.
        """
        session = self.get_session_row(session_id)
        check_session_manager(self.supabase, session, user_id)
        try:
            instances = self._list_instances(session_id)
        except Exception as e:
            logger.error(f"Error loading instances of session {session_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete session")
        self._announce_deletion([session] + instances)
        try:
            self.supabase.table("bookings")\
                .delete()\
                .eq("session_id", session_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error deleting bookings of session {session_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete session")
        try:
            result = self.supabase.table("sessions")\
                .delete()\
                .eq("id", session_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error deleting session {session_id} (bookings already removed): {e}")
            raise HTTPException(status_code=500, detail="Failed to delete session")
        logger.info(f"Session {session_id} deleted by {user_id}")
        return len(result.data) > 0

    def generate_recurring_sessions(
        self,
        parent_id: str,
        recurrence_type: str,
        recurrence_days: Optional[List[int]],
        end_date: date,
        user_id: str
    ) -> RecurrenceGenerateResponse:
        """
        Materialise the instances of a recurring parent session.
        Not idempotent: calling it twice for the same range duplicates instances.
        """
        parent = self.get_session_row(parent_id)
        if parent.get("created_by") != user_id:
            raise HTTPException(status_code=403, detail="Only session creator can generate recurring instances")
        parent_date = parse_date(parent["session_date"])
        try:
            validate_recurrence(parent_date, recurrence_type, recurrence_days, end_date, settings.recurrence_max_years)
        except RecurrenceError as e:
            raise HTTPException(status_code=400, detail=str(e))

        dates, capped = expand_recurrence(
            parent_date, recurrence_type, recurrence_days, end_date, settings.recurrence_max_instances
        )
        if capped:
            logger.warning(
                f"Maximum recurring instances limit reached ({settings.recurrence_max_instances}) "
                f"for session {parent_id}; stopped at {dates[-1].isoformat()}"
            )
        if not dates:
            return RecurrenceGenerateResponse(parent_id=parent_id, instances_created=0, capped=False)

        template = {field: parent.get(field) for field in INSTANCE_FIELDS}
        rows = [
            {
                **template,
                "session_date": day.isoformat(),
                "is_cancelled": False,
                "recurrence_type": "none",
                "recurrence_days": None,
                "recurrence_end_date": None,
                "parent_session_id": parent_id,
                "is_recurring_instance": True,
            }
            for day in dates
        ]
        try:
            result = self.supabase.table("sessions").insert(rows).execute()
        except Exception as e:
            logger.error(f"Error inserting {len(rows)} instances for session {parent_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to generate recurring sessions")
        created = len(result.data or [])
        logger.info(f"Generated {created} {recurrence_type} instances for session {parent_id}")
        return RecurrenceGenerateResponse(parent_id=parent_id, instances_created=created, capped=capped)

    def delete_future_recurring_sessions(self, parent_id: str, user_id: str) -> RecurrenceDeleteResponse:
        """
        Delete instances dated after today; past and today's instances are kept.
        Users booked on a removed instance are notified before it goes.
        """
        parent = self.get_session_row(parent_id)
        check_session_manager(self.supabase, parent, user_id)
        try:
            instances = self._list_instances(parent_id, after=local_today())
        except Exception as e:
            logger.error(f"Error loading future instances of session {parent_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete recurring sessions")
        if not instances:
            return RecurrenceDeleteResponse(parent_id=parent_id, deleted=0)
        self._announce_deletion(instances)
        try:
            result = self.supabase.table("sessions")\
                .delete()\
                .in_("id", [i["id"] for i in instances])\
                .execute()
        except Exception as e:
            logger.error(f"Error deleting future instances of session {parent_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete recurring sessions")
        deleted = len(result.data or [])
        logger.info(f"Deleted {deleted} future instances of session {parent_id}")
        return RecurrenceDeleteResponse(parent_id=parent_id, deleted=deleted)
