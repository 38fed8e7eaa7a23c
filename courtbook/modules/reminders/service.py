from supabase import Client
from courtbook.config import settings
from courtbook.modules.reminders.schemas import ReminderDispatchResponse
from courtbook.utils.datetime_utils import format_hhmm, local_now, to_local
from typing import Any, Dict, List, Optional, Tuple
from datetime import date, datetime, time, timedelta
import logging
import pytz

logger = logging.getLogger(__name__)

REMINDER_TYPE = "session_reminder"


def reminder_message(session: Dict[str, Any]) -> str:
    return (
        f'Reminder: your session "{session.get("title")}" starts in 1 hour '
        f'at {format_hhmm(session["start_time"])} - {session.get("location")}'
    )


def reminder_window(now: datetime, start_minutes: int, end_minutes: int) -> List[Tuple[date, time, time]]:
    """
    (day, from, to) ranges of start times to remind about, inclusive.
    A window that crosses midnight becomes two ranges, one per day.
    Offsets are added in UTC so the window stays right across DST changes;
    naive values are taken as UTC.
    """
    now_utc = to_local(now).astimezone(pytz.UTC)
    window_start = to_local(now_utc + timedelta(minutes=start_minutes))
    window_end = to_local(now_utc + timedelta(minutes=end_minutes))
    if window_start.date() == window_end.date():
        return [(window_start.date(), window_start.time(), window_end.time())]
    return [
        (window_start.date(), window_start.time(), time(23, 59, 59)),
        (window_end.date(), time(0, 0), window_end.time()),
    ]


class ReminderService:
    """
    Sends one "starts in 1 hour" notification per booking.

    bookings.reminder_sent is the only guard against duplicates: a booking is
    flagged right after its notification is written, so overlapping runs are
    harmless but a crash between the two writes can re-send on the next run.
    """

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def find_upcoming_sessions(self, now: datetime) -> List[Dict[str, Any]]:
        sessions: List[Dict[str, Any]] = []
        ranges = reminder_window(
            now,
            settings.reminder_window_start_minutes,
            settings.reminder_window_end_minutes
        )
        for day, start, end in ranges:
            result = self.supabase.table("sessions")\
                .select("*")\
                .eq("session_date", day.isoformat())\
                .eq("is_cancelled", False)\
                .gte("start_time", start.strftime("%H:%M:%S"))\
                .lte("start_time", end.strftime("%H:%M:%S"))\
                .execute()
            sessions.extend(result.data or [])
        return sessions

    def remind_session(self, session: Dict[str, Any]) -> int:
        """Notify every booking of one session that has not been reminded yet."""
        bookings = self.supabase.table("bookings")\
            .select("id, user_id")\
            .eq("session_id", session["id"])\
            .eq("reminder_sent", False)\
            .execute()
        pending = bookings.data or []
        if not pending:
            return 0

        message = reminder_message(session)
        rows = [
            {
                "user_id": b["user_id"],
                "type": REMINDER_TYPE,
                "session_id": session["id"],
                "session_title": session.get("title"),
                "message": message,
                "is_read": False,
            }
            for b in pending
        ]
        self.supabase.table("notifications").insert(rows).execute()
        self.supabase.table("bookings")\
            .update({"reminder_sent": True})\
            .in_("id", [b["id"] for b in pending])\
            .execute()
        return len(rows)

    def dispatch(self, now: Optional[datetime] = None) -> ReminderDispatchResponse:
        """One pass over the reminder window. A failing session is logged and skipped."""
        now = to_local(now) if now is not None else local_now()
        sessions = self.find_upcoming_sessions(now)
        sent = 0
        for session in sessions:
            try:
                sent += self.remind_session(session)
            except Exception as e:
                logger.error(f"Error sending reminders for session {session.get('id')}: {e}")
        if sent:
            logger.info(f"Sent {sent} reminder(s) across {len(sessions)} session(s)")
        else:
            logger.debug(f"No reminders due ({len(sessions)} session(s) in window)")
        return ReminderDispatchResponse(reminders_sent=sent, sessions_checked=len(sessions))
