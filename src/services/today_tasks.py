"""Today's tasks - fetch tasks due in the current local day and complete them."""

from datetime import datetime, time
from typing import Optional
from src.models.task import Task, TaskStatus
from src.services.supabase_client import get_tasks_due_between, update_task_status
from src.utils.logging import get_structured_logger, log_timing

logger = get_structured_logger(__name__)

END_OF_DAY = time(23, 59, 59, 999000)


def local_now() -> datetime:
    """Current time in the server's local timezone."""
    return datetime.now().astimezone()


def day_bounds(now: Optional[datetime] = None) -> tuple[datetime, datetime]:
    """
    Start (00:00:00.000) and end (23:59:59.999) of the local calendar day of `now`.

    Each bound is localised on its own, so on a DST change day start and end
    carry different UTC offsets.
    """
    now = now or local_now()
    local_date = now.astimezone().date()

    start = datetime.combine(local_date, time.min).astimezone()
    end = datetime.combine(local_date, END_OF_DAY).astimezone()
    return start, end


def is_due_today(task: Task, now: Optional[datetime] = None) -> bool:
    start, end = day_bounds(now)
    return start <= task.due_at <= end


async def fetch_today_tasks(now: Optional[datetime] = None) -> list[Task]:
    """Fetch tasks due today, earliest first."""
    start, end = day_bounds(now)

    with log_timing("tasks.fetch_today", logger=logger):
        rows = await get_tasks_due_between(start, end)

    tasks = [Task(**row) for row in rows]
    # The query already bounds the range; this guards against rows outside it
    return sorted(
        (t for t in tasks if start <= t.due_at <= end),
        key=lambda t: t.due_at,
    )


class TodayTasksView:
    """
    Transient cached copy of today's task list.

    The database stays authoritative: every mutation is followed by a refetch,
    which also reverts an optimistic change that failed to persist.
    """

    def __init__(self):
        self.tasks: list[Task] = []
        self.error: Optional[str] = None
        self.loaded = False

    @property
    def is_loading(self) -> bool:
        return not self.loaded and self.error is None

    @property
    def is_empty(self) -> bool:
        return self.loaded and not self.tasks

    async def refresh(self, now: Optional[datetime] = None) -> None:
        """Refetch today's tasks; on failure keep the previous list and record the error."""
        try:
            self.tasks = await fetch_today_tasks(now)
            self.error = None
            self.loaded = True
        except Exception as e:
            logger.error("Failed to load today's tasks", error=str(e))
            self.error = str(e)

    def _set_local_status(self, task_id: str, status: TaskStatus) -> None:
        self.tasks = [
            t.model_copy(update={"status": status}) if t.id == task_id else t
            for t in self.tasks
        ]

    async def mark_complete(self, task_id: str, now: Optional[datetime] = None) -> Optional[str]:
        """
        Mark a task complete.

        Updates the cached list optimistically, persists the change and then
        reconciles with a refetch whether or not the update succeeded.
        Returns the alert message to show on failure, otherwise None.
        """
        self._set_local_status(task_id, TaskStatus.COMPLETED)

        alert = None
        try:
            await update_task_status(task_id, TaskStatus.COMPLETED.value)
            logger.info("Task marked complete", task_id=task_id)
        except Exception as e:
            logger.warning("Failed to mark task complete", task_id=task_id, error=str(e))
            alert = f"Failed to mark task complete: {e}"

        await self.refresh(now)
        return alert
