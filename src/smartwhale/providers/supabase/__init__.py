"""Supabase Auth provider."""
from smartwhale.providers.supabase.auth_provider import (SupabaseAuthError,
                                                         SupabaseAuthProvider)

__all__ = ["SupabaseAuthError", "SupabaseAuthProvider"]
