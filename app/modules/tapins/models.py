# Supabase table: tapins
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

tapins:
- id: uuid (primary key)
- sender_id: uuid (foreign key to profiles.id, not null)
- receiver_id: uuid (foreign key to profiles.id, not null)
- image_url: text (not null)
- caption: text (nullable)
- viewed_at: timestamp (nullable)
- created_at: timestamp (default: now())
- expires_at: timestamp (nullable)
"""
