# Supabase table: messages
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

messages:
- id: uuid (primary key)
- room_id: uuid (foreign key to chat_rooms.id, on delete cascade)
- sender_id: uuid (foreign key to profiles.id)
- content: text (not null) - message text, or a public URL for image/gif messages
- type: text (default: 'text') - values: text, image, gif
- client_msg_id: text (nullable) - client-generated id; a retry with the same value returns the stored row
- created_at: timestamp (default: now())

Realtime is enabled on this table; clients subscribe to INSERTs filtered by room_id.
"""
