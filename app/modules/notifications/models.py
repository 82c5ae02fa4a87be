# Supabase tables: notifications, push_tokens
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

notifications:
- id: uuid (primary key)
- user_id: uuid (foreign key to profiles.id, not null) - recipient
- type: text (not null) - values: friend_request, friend_accepted, message, tapin
- title: text (not null)
- content: text (not null)
- data: jsonb (nullable) - ids the client needs to deep-link (room_id, request_id, tapin_id)
- is_read: boolean (default: false)
- created_at: timestamp (default: now())

push_tokens:
- id: uuid (primary key)
- user_id: uuid (foreign key to profiles.id, not null)
- token: text (unique, not null) - Expo push token
- platform: text (nullable) - ios | android | web
- updated_at: timestamp (nullable)
"""
