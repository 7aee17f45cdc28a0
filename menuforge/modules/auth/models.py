# Supabase Auth
# Restaurant owners sign up and sign in through Supabase's built-in auth.
# No custom tables are required for authentication itself; the per-user
# subscription/credit state lives in the `profiles` table (see modules/profiles/models.py).

"""
Supabase Auth provides:
- auth.sign_up() - Register new users
- auth.sign_in_with_password() - Authenticate users
- auth.get_user() - Resolve the user behind a bearer JWT
- auth.sign_out() - Logout users

user_metadata may carry `full_name`, `name` and `avatar_url` (set at sign-up or
by the OAuth provider); these seed the profile row on first access.
"""
