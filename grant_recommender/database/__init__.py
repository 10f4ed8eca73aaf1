"""Supabase persistence boundary."""

from .client import SupabaseClient

__all__ = ["SupabaseClient"]
