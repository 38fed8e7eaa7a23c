# Supabase table: session_comments
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

session_comments:
- id: uuid (primary key)
- session_id: uuid (foreign key to sessions.id ON DELETE CASCADE, not null)
- user_id: uuid (not null) - author
- content: text (not null, CHECK 0 < char_length(content) <= 2000)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())
"""
