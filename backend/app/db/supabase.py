"""
Supabase Client
===============
Thin wrapper that provides a configured Supabase client for the
services and the auth helper.

Uses the service_role key (not the anon key) so the backend can write
session rows on behalf of the authenticated user. Ownership is checked
in the services; RLS still protects direct client access.
"""

from functools import lru_cache

from supabase import Client, create_client

from app.config import get_settings


@lru_cache
def get_supabase_client() -> Client:
    settings = get_settings()
    return create_client(settings.supabase_url, settings.supabase_service_key)
