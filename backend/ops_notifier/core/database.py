"""
Supabase database client management.

The notifier never writes to the portal database. It only reads
reference data used to enrich notifications (e.g. the display
name of the user who changed a project).
"""
from typing import Optional

from supabase import create_client, Client

from .config import settings


class SupabaseClient:
    """
    Singleton wrapper for Supabase client.
    Provides read helpers for portal tables.
    """

    _instance: Optional["SupabaseClient"] = None
    _client: Optional[Client] = None

    def __new__(cls) -> "SupabaseClient":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if self._client is None and settings.database_enabled:
            self._client = create_client(
                settings.supabase_url,
                settings.supabase_anon_key
            )

    @property
    def client(self) -> Client:
        """Get the Supabase client instance."""
        if self._client is None:
            raise RuntimeError("Supabase client not initialized")
        return self._client

    def get_user(self, user_id: str) -> Optional[dict]:
        """Fetch a portal user's display fields, or None if they don't exist."""
        response = self.client.table("users").select(
            "id, name, email"
        ).eq("id", user_id).limit(1).execute()

        return response.data[0] if response.data else None


def get_supabase_client() -> SupabaseClient:
    """Get the singleton Supabase client instance."""
    return SupabaseClient()
