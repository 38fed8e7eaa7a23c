# Supabase table: sessions
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

sessions:
- id: uuid (primary key)
- title: text (not null)
- description: text (nullable)
- sport_type: text (not null) - free-form tag
- location: text (not null)
- session_date: date (not null)
- start_time: time (not null)
- end_time: time (not null)
- max_participants: integer (not null, default: 10) - advisory, checked before booking
- created_by: uuid (references auth.users.id ON DELETE SET NULL, nullable)
- is_cancelled: boolean (not null, default: false)
- recurrence_type: text (default: 'none') - one of RECURRENCE_TYPES
- recurrence_days: integer[] (nullable) - weekday indices, 0=Sunday..6=Saturday
- recurrence_end_date: date (nullable) - as declared on the parent, even if the instance cap stopped generation earlier
- parent_session_id: uuid (foreign key to sessions.id ON DELETE CASCADE, nullable) - set on generated instances
- is_recurring_instance: boolean (default: false)
- created_at: timestamp (default: now())

Deleting a session cascades to its bookings, comments and instances.
"""

RECURRENCE_TYPES = ("none", "daily", "weekly", "custom")
