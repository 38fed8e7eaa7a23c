# Supabase table: notifications
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Rows are only ever created by NotificationService hooks and the reminder dispatcher.

"""
Expected Supabase table structure:

notifications:
- id: uuid (primary key)
- user_id: uuid (not null) - recipient
- type: text (not null) - one of NOTIFICATION_TYPES
- session_id: uuid (foreign key to sessions.id, ON DELETE CASCADE, nullable) - null when the session was deleted
- actor_id: uuid (nullable) - user whose action produced the notification
- actor_name: text (nullable) - display name or email of the actor at the time
- session_title: text (nullable)
- message: text (not null)
- is_read: boolean (not null, default: false)
- created_at: timestamp (default: now())
"""

NOTIFICATION_TYPES = (
    "booking",
    "cancellation",
    "session_update",
    "comment",
    "reminder",
    "new_user_pending",
    "booking_created",
    "booking_cancelled",
    "session_modified",
    "session_cancelled",
    "session_reminder",
)
