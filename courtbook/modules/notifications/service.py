from supabase import Client
from courtbook.modules.notifications.schemas import NotificationResponse
from courtbook.core.authorization import ADMIN_ROLE, check_notification_owner
from typing import Any, Dict, List, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

# Fields whose change is worth telling booked users about
TRACKED_SESSION_FIELDS = ("title", "session_date", "start_time", "end_time", "location")


class NotificationService:
    """
    Per-user notification records.

    The on_* hooks are the fan-out rules that used to live in database
    triggers. Mutating services call them after their own write succeeded.
    Hooks are best-effort: they log failures and never raise into the caller.
    """

    def __init__(self, supabase: Client):
        self.supabase = supabase

    # ------------------------------------------------------------------
    # Fan-out helpers
    # ------------------------------------------------------------------

    def resolve_actor_name(self, user_id: Optional[str]) -> str:
        """Display name, falling back to email."""
        if not user_id:
            return "Someone"
        try:
            result = self.supabase.table("profiles")\
                .select("full_name, email")\
                .eq("user_id", user_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Error resolving actor name for {user_id}: {e}")
            return "Someone"
        if not result.data:
            return "Someone"
        profile = result.data[0]
        return profile.get("full_name") or profile.get("email") or "Someone"

    def _booked_user_ids(self, session_id: str, exclude_user_id: Optional[str]) -> List[str]:
        result = self.supabase.table("bookings")\
            .select("user_id")\
            .eq("session_id", session_id)\
            .execute()
        return [b["user_id"] for b in (result.data or []) if b["user_id"] != exclude_user_id]

    def _admin_user_ids(self) -> List[str]:
        result = self.supabase.table("user_roles")\
            .select("user_id")\
            .eq("role", ADMIN_ROLE)\
            .execute()
        return list(dict.fromkeys(r["user_id"] for r in (result.data or [])))

    def deliver(self, rows: List[Dict[str, Any]]) -> int:
        """Insert notification rows; one failed recipient does not block the others."""
        if not rows:
            return 0
        try:
            result = self.supabase.table("notifications").insert(rows).execute()
            return len(result.data or rows)
        except Exception as e:
            logger.warning(f"Batch notification insert failed ({len(rows)} rows), retrying per recipient: {e}")
        delivered = 0
        for row in rows:
            try:
                self.supabase.table("notifications").insert(row).execute()
                delivered += 1
            except Exception as e:
                logger.error(f"Failed to notify user {row.get('user_id')} ({row.get('type')}): {e}")
        return delivered

    # ------------------------------------------------------------------
    # Fan-out rules
    # ------------------------------------------------------------------

    def on_booking_created(self, booking: Dict[str, Any], session: Dict[str, Any]) -> int:
        creator_id = session.get("created_by")
        if not creator_id or creator_id == booking["user_id"]:
            return 0
        try:
            actor_name = self.resolve_actor_name(booking["user_id"])
            return self.deliver([{
                "user_id": creator_id,
                "type": "booking_created",
                "session_id": session["id"],
                "actor_id": booking["user_id"],
                "actor_name": actor_name,
                "session_title": session["title"],
                "message": f'{actor_name} booked your session "{session["title"]}"',
            }])
        except Exception as e:
            logger.error(f"booking_created fan-out failed for session {session.get('id')}: {e}")
            return 0

    def on_booking_cancelled(self, booking: Dict[str, Any], session: Dict[str, Any]) -> int:
        creator_id = session.get("created_by")
        if not creator_id or creator_id == booking["user_id"]:
            return 0
        try:
            actor_name = self.resolve_actor_name(booking["user_id"])
            return self.deliver([{
                "user_id": creator_id,
                "type": "booking_cancelled",
                "session_id": session["id"],
                "actor_id": booking["user_id"],
                "actor_name": actor_name,
                "session_title": session["title"],
                "message": f'{actor_name} cancelled their booking for "{session["title"]}"',
            }])
        except Exception as e:
            logger.error(f"booking_cancelled fan-out failed for session {session.get('id')}: {e}")
            return 0

    def on_session_modified(self, old: Dict[str, Any], new: Dict[str, Any]) -> int:
        if all(str(old.get(f)) == str(new.get(f)) for f in TRACKED_SESSION_FIELDS):
            return 0
        try:
            organizer_id = new.get("created_by")
            recipients = self._booked_user_ids(new["id"], organizer_id)
            if not recipients:
                return 0
            actor_name = self.resolve_actor_name(organizer_id)
            return self.deliver([
                {
                    "user_id": user_id,
                    "type": "session_modified",
                    "session_id": new["id"],
                    "actor_id": organizer_id,
                    "actor_name": actor_name,
                    "session_title": new["title"],
                    "message": f'"{new["title"]}" was modified by its organizer',
                }
                for user_id in recipients
            ])
        except Exception as e:
            logger.error(f"session_modified fan-out failed for session {new.get('id')}: {e}")
            return 0

    def on_session_cancelled(self, session: Dict[str, Any], deleted: bool = False) -> int:
        """Notify booked users. Must run before the bookings are removed."""
        try:
            organizer_id = session.get("created_by")
            recipients = self._booked_user_ids(session["id"], organizer_id)
            if not recipients:
                return 0
            actor_name = self.resolve_actor_name(organizer_id)
            return self.deliver([
                {
                    "user_id": user_id,
                    "type": "session_cancelled",
                    # a deleted session would cascade its notifications away
                    "session_id": None if deleted else session["id"],
                    "actor_id": organizer_id,
                    "actor_name": actor_name,
                    "session_title": session["title"],
                    "message": f'"{session["title"]}" was cancelled by its organizer',
                }
                for user_id in recipients
            ])
        except Exception as e:
            logger.error(f"session_cancelled fan-out failed for session {session.get('id')}: {e}")
            return 0

    def on_profile_pending(self, profile: Dict[str, Any]) -> int:
        if profile.get("is_approved"):
            return 0
        try:
            name = profile.get("full_name") or profile.get("email") or "A new user"
            return self.deliver([
                {
                    "user_id": admin_id,
                    "type": "new_user_pending",
                    "actor_id": profile["user_id"],
                    "actor_name": name,
                    "message": f"{name} is awaiting approval",
                }
                for admin_id in self._admin_user_ids()
            ])
        except Exception as e:
            logger.error(f"new_user_pending fan-out failed for user {profile.get('user_id')}: {e}")
            return 0

    # ------------------------------------------------------------------
    # Recipient operations
    # ------------------------------------------------------------------

    def _get_notification(self, notification_id: str) -> Dict[str, Any]:
        result = self.supabase.table("notifications")\
            .select("*")\
            .eq("id", notification_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Notification not found")
        return result.data[0]

    def list_notifications(
        self,
        user_id: str,
        unread_only: bool = False,
        limit: int = 50,
        offset: int = 0
    ) -> List[NotificationResponse]:
        try:
            query = self.supabase.table("notifications").select("*").eq("user_id", user_id)
            if unread_only:
                query = query.eq("is_read", False)
            result = query.order("created_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
            return [NotificationResponse(**n) for n in (result.data or [])]
        except Exception as e:
            logger.error(f"Error listing notifications for {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to load notifications")

    def count_unread(self, user_id: str) -> int:
        try:
            result = self.supabase.table("notifications")\
                .select("id")\
                .eq("user_id", user_id)\
                .eq("is_read", False)\
                .execute()
            return len(result.data or [])
        except Exception as e:
            logger.error(f"Error counting notifications for {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to load notifications")

    def mark_read(self, notification_id: str, user_id: str) -> NotificationResponse:
        notification = self._get_notification(notification_id)
        check_notification_owner(notification, user_id)
        try:
            result = self.supabase.table("notifications")\
                .update({"is_read": True})\
                .eq("id", notification_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error marking notification {notification_id} read: {e}")
            raise HTTPException(status_code=500, detail="Failed to update notification")
        if not result.data:
            raise HTTPException(status_code=404, detail="Notification not found")
        return NotificationResponse(**result.data[0])

    def mark_all_read(self, user_id: str) -> int:
        try:
            result = self.supabase.table("notifications")\
                .update({"is_read": True})\
                .eq("user_id", user_id)\
                .eq("is_read", False)\
                .execute()
            return len(result.data or [])
        except Exception as e:
            logger.error(f"Error marking notifications read for {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update notifications")

    def delete_notification(self, notification_id: str, user_id: str) -> bool:
        notification = self._get_notification(notification_id)
        check_notification_owner(notification, user_id)
        try:
            result = self.supabase.table("notifications")\
                .delete()\
                .eq("id", notification_id)\
                .execute()
            return len(result.data) > 0
        except Exception as e:
            logger.error(f"Error deleting notification {notification_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete notification")
