# Supabase table: invites
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

invites:
- id: uuid (primary key)
- email: text (not null, unique) - stored lower-cased
- invite_code: text (not null, unique) - 32 hex chars
- invited_by: uuid (references auth.users.id ON DELETE SET NULL, nullable)
- used: boolean (not null, default: false) - flipped when the invitee signs up
- created_at: timestamp (default: now())
"""

UNIQUE_VIOLATION = "23505"
