# Supabase table: bookings
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

bookings:
- id: uuid (primary key)
- session_id: uuid (foreign key to sessions.id ON DELETE CASCADE, not null)
- user_id: uuid (foreign key to profiles.user_id ON DELETE CASCADE, not null)
- reminder_sent: boolean (default: false) - set by the reminder dispatcher
- created_at: timestamp (default: now())
- unique constraint on (session_id, user_id)

Capacity (sessions.max_participants) is not a database constraint; BookingService
checks it before inserting, so two concurrent bookings for the last place can
both succeed.
"""
