# Supabase table: menu_generations
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key, default uuid_generate_v4())
- user_id: uuid (foreign key to profiles.id, on delete cascade, not null)
- file_name: text (not null) - name of the uploaded menu document
- extracted_text: text (not null) - menu text sent to the designer
- colors: text[] (not null, default '{}') - palette, e.g. {"#1a1a1a", "#c9a96e"}
- size: text (not null, default 'a4') - see style_catalog.MENU_SIZES
- style_prompt: text (not null, default '')
- html_variations: text[] (nullable) - generated HTML documents
- selected_variation: integer (nullable) - 0, 1 or 2
- is_downloaded: boolean (default: false)
- created_at: timestamptz (default: now())
"""
