# Supabase tables: friend_requests, friends
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

friend_requests:
- id: uuid (primary key)
- sender_id: uuid (foreign key to profiles.id, not null)
- receiver_id: uuid (foreign key to profiles.id, not null)
- status: text (default: 'pending') - values: pending, accepted, rejected
- created_at: timestamp (default: now())

friends:
- id: uuid (primary key)
- user_id_1: uuid (foreign key to profiles.id) - always the lower of the two ids
- user_id_2: uuid (foreign key to profiles.id) - always the higher of the two ids
- created_at: timestamp (default: now())
- unique (user_id_1, user_id_2)
"""
