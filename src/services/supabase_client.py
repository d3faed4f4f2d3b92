"""Supabase client wrapper with async context manager support."""

import os
from datetime import datetime
from typing import Optional
from supabase import create_client, Client
from supabase.client import ClientOptions
from src.models.application import Application
from src.utils.errors import ConfigurationError, SupabaseError
from src.utils.logging import mask_sensitive_data
import logging

logger = logging.getLogger(__name__)

MISSING_ENV_MESSAGE = "Server misconfiguration: Missing Supabase Environment Variables"

# Global client instances (singleton pattern), one per key role
_client: Optional[Client] = None
_anon_client: Optional[Client] = None


def _create_client(key_env: str) -> Client:
    url = os.environ.get("SUPABASE_URL", "").strip()
    key = os.environ.get(key_env, "").strip()
    
    if not url or not key:
        raise ConfigurationError(MISSING_ENV_MESSAGE)
    
    options = ClientOptions(
        auto_refresh_token=False,
        persist_session=False,
    )
    client = create_client(url, key, options)
    logger.info("Supabase client initialized", extra={"url": url, "key_role": key_env})
    return client


def get_supabase_client() -> Client:
    """Get or create the service-role Supabase client (bypasses RLS)."""
    global _client
    
    if _client is None:
        _client = _create_client("SUPABASE_SERVICE_ROLE_KEY")
    
    return _client


def get_anon_supabase_client() -> Client:
    """Get or create the anon-key Supabase client used by the dashboard."""
    global _anon_client
    
    if _anon_client is None:
        _anon_client = _create_client("SUPABASE_ANON_KEY")
    
    return _anon_client


class SupabaseClient:
    """Async context manager for Supabase client."""
    
    def __init__(self, anon: bool = False):
        self.anon = anon
        self.client: Optional[Client] = None
    
    async def __aenter__(self) -> Client:
        self.client = get_anon_supabase_client() if self.anon else get_supabase_client()
        return self.client
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            logger.error(
                "Supabase operation error",
                extra={"error": mask_sensitive_data(str(exc_val)), "type": exc_type.__name__}
            )
        return False


# Applications table operations
async def get_application(application_id: str) -> Optional[Application]:
    """Get the application's id and tenant, or None if it does not exist."""
    async with SupabaseClient() as client:
        try:
            result = (
                client.table("applications")
                .select("id, tenant_id")
                .eq("id", application_id)
                .maybe_single()
                .execute()
            )
            # No row: newer postgrest returns None, older an empty response
            if result is None or not result.data:
                return None
            return Application(**result.data)
        except Exception as e:
            raise SupabaseError(f"Failed to get application: {e}")


async def get_application_tenant_id(application_id: str) -> Optional[str]:
    """Get the tenant ID owning an application."""
    application = await get_application(application_id)
    return application.tenant_id if application else None


# Tasks table operations
async def insert_task(task_data: dict) -> dict:
    """Insert a task row and return the created record."""
    async with SupabaseClient() as client:
        try:
            result = client.table("tasks").insert(task_data).execute()
        except Exception as e:
            raise SupabaseError(f"Failed to insert task: {e}")
        
        if result.data and len(result.data) > 0:
            return result.data[0]
        raise SupabaseError("Failed to insert task: no data returned")


async def get_tasks_due_between(start: datetime, end: datetime) -> list[dict]:
    """Get tasks with start <= due_at <= end, earliest first."""
    async with SupabaseClient(anon=True) as client:
        try:
            result = (
                client.table("tasks")
                .select("*")
                .gte("due_at", start.isoformat())
                .lte("due_at", end.isoformat())
                .order("due_at", desc=False)
                .execute()
            )
            return result.data if result.data else []
        except Exception as e:
            raise SupabaseError(f"Failed to get tasks: {e}")


async def update_task_status(task_id: str, status: str) -> None:
    """Set the status of a single task."""
    async with SupabaseClient(anon=True) as client:
        try:
            client.table("tasks").update({"status": status}).eq("id", task_id).execute()
        except Exception as e:
            raise SupabaseError(f"Failed to update task status: {e}")
