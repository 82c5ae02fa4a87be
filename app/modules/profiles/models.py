# Supabase table: profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id)
- username: text (unique, nullable)
- full_name: text (nullable)
- avatar_url: text (nullable) - public URL in the "avatars" storage bucket
- latitude: float8 (nullable) - last reported position
- longitude: float8 (nullable)
- last_seen: timestamp (nullable) - refreshed on every location sync
- bio: text (nullable)
- website: text (nullable)
- location_name: text (nullable)
- occupation: text (nullable)
- created_at: timestamp (default: now())
"""
