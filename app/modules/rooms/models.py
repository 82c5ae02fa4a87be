# Supabase tables: chat_rooms, room_participants
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

chat_rooms:
- id: uuid (primary key)
- name: text (nullable) - "private_<lower user id>_<higher user id>" for private rooms
- type: text (not null) - values: public, auto_generated, private
- latitude: float8 (nullable) - room centre; null for private rooms
- longitude: float8 (nullable)
- radius: float8 (nullable) - metres; geofence for discovery and the proximity gate
- created_at: timestamp (default: now())
- expires_at: timestamp (nullable) - past values make the room read-only and hidden; null never expires

room_participants:
- id: uuid (primary key)
- room_id: uuid (foreign key to chat_rooms.id, on delete cascade)
- user_id: uuid (foreign key to profiles.id)
- joined_at: timestamp (default: now())

RPC:
- cleanup_expired_rooms() - deletes rooms whose expires_at has passed
"""
