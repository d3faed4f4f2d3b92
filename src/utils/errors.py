"""Error handling utilities."""

from typing import Optional


class CRMTasksError(Exception):
    """Base exception for the CRM tasks backend."""
    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class TaskValidationError(CRMTasksError):
    """Request payload failed validation."""
    status_code = 400


class ApplicationNotFoundError(CRMTasksError):
    """Parent application does not exist or could not be read."""
    status_code = 404


class ConfigurationError(CRMTasksError):
    """Required environment configuration is missing."""
    pass


class SupabaseError(CRMTasksError):
    """Supabase operation error."""
    pass


class BroadcastError(CRMTasksError):
    """Realtime broadcast error."""
    pass
