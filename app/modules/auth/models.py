# Supabase Auth
# Accounts live in Supabase's auth.users table; this backend never stores passwords.
# Each account gets a row in public.profiles (see app/modules/profiles/models.py)
# created right after sign up.

"""
Supabase Auth calls used here:
- auth.sign_up() - Register new users (Supabase sends the verification email)
- auth.sign_in_with_password() - Authenticate users
- auth.get_user() - Resolve the user behind a JWT
- auth.sign_out() - Logout users
- auth.resend() - Send the signup verification email again

Welcome emails are sent separately through the Resend HTTP API (see email.py).
"""
