import streamlit as st

from dashboard.constants import PRIORITY_META, PRIORITY_TAGS, TASK_STATUS_LABELS, TASK_STATUSES
from dashboard.data import repositories
from dashboard.data.api_client import ApiError
from dashboard.metrics import task_stats


def _add_task():
    title = str(st.session_state.get("tasks.new_title", "")).strip()
    if not title:
        st.session_state["tasks.flash"] = "Title is required"
        return
    tags = [item.strip() for item in str(st.session_state.get("tasks.new_tags", "")).split(",") if item.strip()]
    payload = {
        "title": title,
        "description": st.session_state.get("tasks.new_description") or None,
        "priority": st.session_state.get("tasks.new_priority", "medium"),
        "due_date": st.session_state.get("tasks.new_due") if st.session_state.get("tasks.has_due") else None,
        "tags": tags,
    }
    try:
        repositories.create_task(payload)
        st.session_state["tasks.new_title"] = ""
        st.session_state["tasks.new_description"] = ""
        st.session_state["tasks.new_tags"] = ""
    except ApiError as exc:
        st.session_state["tasks.flash"] = exc.message


def _set_status(task_id, key):
    try:
        repositories.update_task(task_id, {"status": st.session_state[key]})
    except ApiError as exc:
        st.session_state["tasks.flash"] = exc.message


def _toggle_done(task_id, key):
    status = "completed" if st.session_state.get(key) else "pending"
    try:
        repositories.update_task(task_id, {"status": status})
    except ApiError as exc:
        st.session_state["tasks.flash"] = exc.message


def render_tasks_tab(ctx, compact=False):
    if not compact:
        st.markdown("<div class='section-title'>Tasks</div>", unsafe_allow_html=True)

    flash = st.session_state.pop("tasks.flash", None)
    if flash:
        st.error(flash)

    status_filter = None
    if not compact:
        choice = st.segmented_control(
            "Show",
            ["all"] + TASK_STATUSES,
            key="tasks.filter",
            default="all",
            format_func=lambda value: "All" if value == "all" else TASK_STATUS_LABELS[value],
        )
        status_filter = None if choice in (None, "all") else choice

    try:
        tasks = repositories.list_tasks(status=status_filter, limit=100 if not compact else 10)
    except ApiError as exc:
        st.error(exc.message)
        return

    stats = task_stats(tasks)
    st.caption(f"{stats['completed']} of {stats['total']} completed ({stats['percent']}%)")

    with st.expander("Add task", expanded=not tasks and not compact):
        st.text_input("Title", key="tasks.new_title")
        if not compact:
            st.text_area("Description", key="tasks.new_description", height=80)
            st.text_input("Tags (comma-separated)", key="tasks.new_tags")
        cols = st.columns(2)
        with cols[0]:
            st.selectbox("Priority", PRIORITY_TAGS, index=1, key="tasks.new_priority")
        with cols[1]:
            st.checkbox("Due date", key="tasks.has_due")
            if st.session_state.get("tasks.has_due"):
                st.date_input("Due", key="tasks.new_due", value=ctx.today())
        st.button("Add", key="tasks.add", on_click=_add_task)

    if not tasks:
        st.caption("No tasks yet.")
        return

    for task in tasks:
        priority = task.get("priority") or "medium"
        color = PRIORITY_META.get(priority, PRIORITY_META["medium"])["color"]
        cols = st.columns([0.08, 0.62, 0.3] if not compact else [0.12, 0.88])
        with cols[0]:
            done_key = f"tasks.done.{task['id']}"
            st.checkbox(
                "done",
                value=task.get("status") == "completed",
                key=done_key,
                label_visibility="collapsed",
                on_change=_toggle_done,
                args=(task["id"], done_key),
            )
        with cols[1]:
            title = task.get("title") or ""
            if task.get("status") == "completed":
                title = f"~~{title}~~"
            st.markdown(
                f"{title} <span style='color:{color};font-size:0.75rem;'>● {priority}</span>",
                unsafe_allow_html=True,
            )
            if task.get("due_date") and not compact:
                st.caption(f"Due {task['due_date']}")
        if compact:
            continue
        with cols[2]:
            status_key = f"tasks.status.{task['id']}"
            current = task.get("status") if task.get("status") in TASK_STATUSES else "pending"
            st.selectbox(
                "Status",
                TASK_STATUSES,
                index=TASK_STATUSES.index(current),
                key=status_key,
                format_func=TASK_STATUS_LABELS.get,
                label_visibility="collapsed",
                on_change=_set_status,
                args=(task["id"], status_key),
            )
            if st.button("Delete", key=f"tasks.delete.{task['id']}"):
                try:
                    repositories.delete_task(task["id"])
                    st.rerun()
                except ApiError as exc:
                    st.error(exc.message)
