"""Task creation pipeline - validate, resolve tenant, insert, broadcast."""

from datetime import datetime, timezone
from typing import Any, Optional
from pydantic import ValidationError
from src.models.task import CreateTaskRequest, CreateTaskResponse, TaskStatus, TaskType
from src.services.supabase_client import get_application, insert_task
from src.services.realtime import broadcast_task_created
from src.utils.errors import (
    ApplicationNotFoundError,
    CRMTasksError,
    SupabaseError,
    TaskValidationError,
)
from src.utils.logging import get_structured_logger, log_timing, get_correlation_id

logger = get_structured_logger(__name__)

VALID_TASK_TYPES = tuple(t.value for t in TaskType)

MISSING_APPLICATION_MESSAGE = "Missing required field: application_id"
INVALID_TASK_TYPE_MESSAGE = "Invalid task_type. Must be: call, email, or review"
INVALID_DUE_AT_MESSAGE = "due_at must be a valid date in the future"
INVALID_BODY_MESSAGE = "Invalid JSON body"
APPLICATION_NOT_FOUND_MESSAGE = "Application not found"


def parse_due_at(value: Any) -> Optional[datetime]:
    """
    Parse an ISO 8601 timestamp into an aware datetime.

    A trailing "Z" means UTC; values without an offset are taken as UTC.
    Returns None for anything that is not a parseable string.
    """
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def validate_create_request(body: Any, now: Optional[datetime] = None) -> tuple[CreateTaskRequest, datetime]:
    """
    Validate a task creation payload.

    Checks run in a fixed order: application_id, task_type, due_at.
    Returns the parsed request and its due timestamp.
    """
    if not isinstance(body, dict):
        raise TaskValidationError(INVALID_BODY_MESSAGE)

    try:
        request = CreateTaskRequest(**{k: v for k, v in body.items() if isinstance(k, str)})
    except ValidationError:
        raise TaskValidationError(INVALID_BODY_MESSAGE)

    if not request.application_id:
        raise TaskValidationError(MISSING_APPLICATION_MESSAGE)

    if request.task_type and request.task_type not in VALID_TASK_TYPES:
        raise TaskValidationError(INVALID_TASK_TYPE_MESSAGE)

    due_at = parse_due_at(request.due_at)
    now = now or datetime.now(timezone.utc)
    if due_at is None or due_at <= now:
        raise TaskValidationError(INVALID_DUE_AT_MESSAGE)

    return request, due_at


def build_task_row(request: CreateTaskRequest, due_at: datetime, tenant_id: str) -> dict:
    """Build the `tasks` row; tenant always comes from the parent application."""
    task_type = request.task_type or TaskType.CALL.value
    description = request.description or request.title or f"New {task_type} task"

    return {
        "tenant_id": tenant_id,
        "related_id": str(request.application_id),
        "type": task_type,
        "due_at": due_at.isoformat(),
        "description": str(description),
        "status": TaskStatus.PENDING.value,
    }


async def resolve_tenant_id(application_id: str) -> str:
    """Look up the tenant of the parent application."""
    try:
        application = await get_application(application_id)
    except SupabaseError as e:
        logger.warning(
            "Application lookup failed",
            application_id=application_id,
            error=str(e)
        )
        raise ApplicationNotFoundError(APPLICATION_NOT_FOUND_MESSAGE)

    if application is None:
        raise ApplicationNotFoundError(APPLICATION_NOT_FOUND_MESSAGE)
    return application.tenant_id


async def create_task(body: Any) -> CreateTaskResponse:
    """
    Create a task from a request payload.

    Raises TaskValidationError (400), ApplicationNotFoundError (404) or any
    other exception for server-side failures.
    """
    request, due_at = validate_create_request(body)
    application_id = str(request.application_id)

    tenant_id = await resolve_tenant_id(application_id)

    with log_timing("tasks.insert", logger=logger, application_id=application_id):
        task = await insert_task(build_task_row(request, due_at, tenant_id))

    logger.info(
        "Task created",
        task_id=task.get("id"),
        application_id=application_id,
        tenant_id=tenant_id,
        task_type=task.get("type")
    )

    # Broadcast is best-effort; the inserted row stays even if it fails
    try:
        await broadcast_task_created(task)
    except Exception as e:
        logger.warning(
            "Failed to broadcast task.created (non-fatal)",
            task_id=task.get("id"),
            error=str(e)
        )

    return CreateTaskResponse(task_id=str(task["id"]))


async def handle_create_task(body: Any) -> tuple[int, dict]:
    """Run task creation and map the outcome to (status_code, response body)."""
    correlation_id = get_correlation_id()

    try:
        response = await create_task(body)
        return 200, response.model_dump()
    except (TaskValidationError, ApplicationNotFoundError) as e:
        logger.info(
            "Task creation rejected",
            correlation_id=correlation_id,
            status_code=e.status_code,
            reason=e.message
        )
        return e.status_code, {"error": e.message}
    except CRMTasksError as e:
        logger.error(f"Task creation failed: {e}", correlation_id=correlation_id)
        return e.status_code, {"error": e.message}
    except Exception as e:
        logger.exception(f"Unexpected error creating task: {e}", correlation_id=correlation_id)
        return 500, {"error": str(e)}
