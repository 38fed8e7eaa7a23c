# Supabase tables: profiles, user_roles, view profiles_safe
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key)
- user_id: uuid (unique, not null, references auth.users.id ON DELETE CASCADE)
- email: text (not null) - cached copy of auth.users.email, kept in sync by admin updates
- full_name: text (nullable)
- avatar_url: text (nullable) - public URL in blob storage
- is_approved: boolean (not null, default: false)
- approved_at: timestamp (nullable)
- approved_by: uuid (nullable)
- rejected_at: timestamp (nullable)
- rejected_by: uuid (nullable)
- created_at: timestamp (default: now())

user_roles:
- id: uuid (primary key)
- user_id: uuid (not null, references auth.users.id ON DELETE CASCADE)
- role: app_role enum ('admin', 'member'), default 'member'
- unique constraint on (user_id, role)

profiles_safe (view):
- every profiles column except approval actors, with email NULL unless user_id = caller
"""
