# Supabase table: profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# DDL lives in supabase/migrations/

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id, on delete cascade)
- email: text (nullable)
- name: text (nullable)
- avatar_url: text (nullable)
- stripe_customer_id: text (nullable)
- stripe_subscription_id: text (nullable) - legacy monthly plan
- subscription_status: text (nullable) - active, trialing, canceled, free, ...
- has_activated: boolean (default: false) - one-time activation paid
- menu_credits: integer (default: 0) - remaining generation credits
- total_generated: integer (default: 0)
- created_at: timestamptz (default: now())
- updated_at: timestamptz (default: now(), maintained by trigger)
"""
