"""Supabase Realtime broadcast publisher."""

import os
from typing import Any
import httpx
from src.utils.errors import BroadcastError, ConfigurationError
from src.services.supabase_client import MISSING_ENV_MESSAGE
from src.utils.logging import get_structured_logger, log_timing

logger = get_structured_logger(__name__)

TASKS_CHANNEL = os.environ.get("TASKS_CHANNEL", "tasks-channel")
TASK_CREATED_EVENT = "task.created"
REALTIME_TIMEOUT_SECONDS = float(os.environ.get("REALTIME_TIMEOUT_SECONDS", "5"))


def get_broadcast_url() -> str:
    """Realtime REST broadcast endpoint for the configured project."""
    url = os.environ.get("SUPABASE_URL", "").strip().rstrip("/")
    if not url:
        raise ConfigurationError(MISSING_ENV_MESSAGE)
    return f"{url}/realtime/v1/api/broadcast"


def build_broadcast_message(topic: str, event: str, payload: dict[str, Any]) -> dict:
    """Build the broadcast request body for a single message."""
    return {
        "messages": [
            {
                "topic": topic,
                "event": event,
                "payload": payload,
            }
        ]
    }


async def broadcast(topic: str, event: str, payload: dict[str, Any]) -> None:
    """
    Publish a fire-and-forget broadcast to realtime subscribers.
    
    Raises BroadcastError if the Realtime service rejects or cannot be reached.
    """
    key = os.environ.get("SUPABASE_SERVICE_ROLE_KEY", "").strip()
    if not key:
        raise ConfigurationError(MISSING_ENV_MESSAGE)
    
    headers = {
        "apikey": key,
        "Authorization": f"Bearer {key}",
        "Content-Type": "application/json",
    }
    body = build_broadcast_message(topic, event, payload)
    
    with log_timing("realtime.broadcast", logger=logger, topic=topic, realtime_event=event):
        try:
            async with httpx.AsyncClient(timeout=REALTIME_TIMEOUT_SECONDS) as client:
                response = await client.post(get_broadcast_url(), json=body, headers=headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise BroadcastError(
                f"Broadcast rejected with status {e.response.status_code}"
            )
        except httpx.HTTPError as e:
            raise BroadcastError(f"Broadcast failed: {e}")


async def broadcast_task_created(task: dict) -> None:
    """Notify subscribers of a newly created task."""
    await broadcast(TASKS_CHANNEL, TASK_CREATED_EVENT, {"task": task})
