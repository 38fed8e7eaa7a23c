# Identity lives in Supabase Auth (GoTrue); courtbook keeps no credential tables.

"""
auth.users (managed by Supabase):
- id: uuid - referenced by profiles.user_id, user_roles.user_id, bookings.user_id
- email: text - mirrored into profiles.email; admins change both via auth.admin.update_user_by_id
- raw_user_meta_data: jsonb - carries full_name given at sign-up

Calls made by AuthService / AdminService:
- anon client: sign_up, sign_in_with_password, get_user(jwt), sign_out
- service client: auth.admin.delete_user, auth.admin.update_user_by_id,
  reset_password_for_email (credential recovery for already-registered emails)

Access tokens are Supabase JWTs passed as "Authorization: Bearer <token>".
Deleting an auth user cascades to the profile, roles and bookings.
"""
