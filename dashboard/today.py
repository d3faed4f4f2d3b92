"""Today's Agenda - tasks due today with a mark-complete action.

Run with: streamlit run dashboard/today.py
"""

import asyncio
import os
import sys

import streamlit as st

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from src.models.task import Task  # noqa: E402
from src.services.today_tasks import TodayTasksView, local_now  # noqa: E402
from src.utils.logging_config import LoggingConfig  # noqa: E402

LoggingConfig.setup_logging()

PAGE_TITLE = "Today's Agenda"
LOADING_MESSAGE = "Loading today's tasks..."
EMPTY_MESSAGE = "No tasks due today. You're all caught up!"
COLUMNS = ["Task Title", "App ID", "Type", "Due Time", "Status", "Actions"]
COLUMN_WIDTHS = [4, 2, 1.5, 1.5, 1.5, 2]


def get_view() -> TodayTasksView:
    """Session-scoped cached task list."""
    if "today_view" not in st.session_state:
        st.session_state.today_view = TodayTasksView()
    return st.session_state.today_view


def refresh(view: TodayTasksView) -> None:
    asyncio.run(view.refresh())


def mark_complete(task_id: str) -> None:
    alert = asyncio.run(get_view().mark_complete(task_id))
    if alert:
        st.session_state.complete_alert = alert


def short_id(value: str) -> str:
    return f"{value[:8]}..."


def format_due_time(task: Task) -> str:
    return task.due_at.astimezone().strftime("%H:%M")


def status_badge(task: Task) -> str:
    color = "green" if task.is_completed else "orange"
    return f":{color}-background[{task.status.value}]"


def render_header(view: TodayTasksView) -> None:
    title_col, action_col = st.columns([5, 1])
    with title_col:
        st.title(PAGE_TITLE)
        st.caption(f"Overview of tasks due on {local_now().strftime('%x')}")
    with action_col:
        st.button("Refresh", key="refresh", on_click=refresh, args=(view,))


def render_table(view: TodayTasksView) -> None:
    header = st.columns(COLUMN_WIDTHS)
    for col, label in zip(header, COLUMNS):
        col.markdown(f"**{label}**")

    if view.is_empty:
        st.info(EMPTY_MESSAGE)
        return

    for task in view.tasks:
        cols = st.columns(COLUMN_WIDTHS)
        description = task.description or ""
        cols[0].markdown(f":gray[{description}]" if task.is_completed else description)
        cols[1].code(short_id(task.related_id), language=None)
        cols[2].markdown(task.type.value.capitalize())
        cols[3].markdown(format_due_time(task))
        cols[4].markdown(status_badge(task))
        if not task.is_completed:
            cols[5].button(
                "Mark Complete",
                key=f"complete-{task.id}",
                on_click=mark_complete,
                args=(task.id,),
            )


st.set_page_config(page_title=PAGE_TITLE, layout="wide")

view = get_view()
if view.is_loading:
    with st.spinner(LOADING_MESSAGE):
        refresh(view)

render_header(view)

alert = st.session_state.pop("complete_alert", None)
if alert:
    st.error(alert)

if view.error:
    st.error(f"Error loading tasks: {view.error}")
    st.button("Retry", key="retry", on_click=refresh, args=(view,))
    st.stop()

render_table(view)
