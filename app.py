from __future__ import annotations
import logging
import streamlit as st
import pandas as pd
from datetime import date

from assistant import AssistantError, build_subject_context, stream_reply
from calendar_export import plan_to_ics
from models import AppState
from paths import get_assistant_config, get_log_level
from pdf_export import week_plan_to_pdf
from planner import (
    build_progress_rows,
    calculate_streak,
    count_active_exams,
    get_day_summary,
    get_hours_studied,
    get_overall_progress,
    get_subject_progress,
    get_tasks_for_date,
    get_week_days,
)
from session import (
    add_subject,
    clear_all,
    regenerate_plan,
    remove_subject,
    reschedule,
    set_study_hours,
    toggle_task,
)
from snapshot import clear_snapshot, load_snapshot, save_snapshot


DIFFICULTY_LABELS = ["Easy", "Medium", "Hard", "Very Hard", "Expert"]

logging.basicConfig(
    level=get_log_level(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

st.set_page_config(page_title="Smart Study Planner", page_icon="📚", layout="wide")


def _ensure_session_state() -> None:
    if "state" not in st.session_state:
        st.session_state.state = load_snapshot()
    if "selected_date" not in st.session_state:
        st.session_state.selected_date = date.today()
    if "chat_messages" not in st.session_state:
        st.session_state.chat_messages = []


def _commit(new_state: AppState) -> None:
    st.session_state.state = new_state
    save_snapshot(new_state)


def _queue_toast(message: str) -> None:
    st.session_state.toast_message = message


def _flush_toast() -> None:
    message = st.session_state.pop("toast_message", None)
    if message:
        st.toast(message)


def render_sidebar(state: AppState) -> str:
    with st.sidebar:
        st.header("Settings")
        current = min(16.0, max(0.5, float(state.study_hours_per_day)))
        hours = st.slider("Study hours per day", 0.5, 16.0, current, 0.5)
        if hours != state.study_hours_per_day:
            _commit(set_study_hours(state, hours))
            _queue_toast("Daily hours updated. Regenerate to apply.")
            st.rerun()

        if st.button("Regenerate plan", type="primary", disabled=not state.subjects):
            _commit(regenerate_plan(state))
            _queue_toast("Plan regenerated.")
            st.rerun()

        if st.button("Reschedule missed tasks", disabled=not state.plan.tasks):
            _commit(reschedule(state))
            _queue_toast("Missed tasks moved forward.")
            st.rerun()

        if st.button("Clear all"):

            @st.dialog("Clear everything?")
            def _confirm_clear() -> None:
                st.write("This removes all subjects and the plan.")
                if st.button("Clear", type="primary"):
                    st.session_state.state = clear_all()
                    st.session_state.chat_messages = []
                    clear_snapshot()
                    _queue_toast("All data cleared.")
                    st.rerun()

            _confirm_clear()

        st.divider()
        st.header("Navigate")
        pages = ["Plan", "Subjects", "Progress", "Assistant"]
        page = st.radio("Page", pages, key="nav_page", label_visibility="collapsed")
        st.caption("Data is stored locally on this machine.")
    return page


def render_stats(state: AppState) -> None:
    a, b, c, d = st.columns(4)
    a.metric("Day streak", calculate_streak(state.plan))
    b.metric("Tasks done", sum(1 for t in state.plan.tasks if t.completed))
    c.metric("Hours studied", f"{get_hours_studied(state.plan):g}")
    d.metric("Active exams", count_active_exams(state.subjects))


def render_week_strip(state: AppState) -> None:
    selected: date = st.session_state.selected_date
    today = date.today()
    cols = st.columns(7)
    for col, day in zip(cols, get_week_days(selected)):
        summary = get_day_summary(state.plan, day)
        marker = ""
        if summary["all_done"]:
            marker = " ✅"
        elif summary["tasks"]:
            marker = " •"
        label = f"{day.strftime('%a')} {day.day}{marker}"
        button_type = "primary" if day == selected else "secondary"
        if day == today:
            label = f"**{label}**"
        if col.button(label, key=f"week_day_{day.isoformat()}", type=button_type):
            st.session_state.selected_date = day
            st.rerun()


def render_plan(state: AppState) -> None:
    st.header("Plan")

    if not state.subjects:
        st.info("Add a subject to generate your study plan.")
        return

    render_stats(state)
    st.divider()

    col_left, col_right = st.columns([3, 1])
    with col_right:
        picked = st.date_input("Jump to date", value=st.session_state.selected_date)
        if picked != st.session_state.selected_date:
            st.session_state.selected_date = picked
            st.rerun()
    with col_left:
        render_week_strip(state)

    selected: date = st.session_state.selected_date
    tasks = get_tasks_for_date(state.plan, selected)
    summary = get_day_summary(state.plan, selected)

    st.subheader(selected.strftime("%A, %B %d"))
    st.caption(
        f"{summary['hours']:g}h planned, {summary['completed_hours']:g}h done"
    )
    if not tasks:
        st.info("No tasks scheduled for this day.")
        return

    for task in tasks:
        label = f"{task.subject_name} - {task.hours:g}h"
        if task.kind == "revision":
            label += " (revision)"
        checked = st.checkbox(label, value=task.completed, key=f"task_done_{task.id}")
        if checked != task.completed:
            _commit(toggle_task(state, task.id))
            st.rerun()


def render_subjects(state: AppState) -> None:
    st.header("Subjects")

    st.subheader("Add a subject")
    with st.form("add_subject_form", clear_on_submit=True):
        col1, col2, col3, col4 = st.columns([2, 1, 1, 1])
        with col1:
            name = st.text_input("Subject name", placeholder="e.g. Mathematics")
        with col2:
            difficulty = st.select_slider(
                "Difficulty",
                options=[1, 2, 3, 4, 5],
                value=3,
                format_func=lambda x: f"{x} - {DIFFICULTY_LABELS[x - 1]}",
            )
        with col3:
            exam_date = st.date_input("Exam date", value=None, min_value=date.today())
        with col4:
            hours_needed = st.number_input(
                "Hours needed", min_value=1.0, max_value=500.0, value=20.0, step=1.0
            )
        submitted = st.form_submit_button("Add subject", type="primary")
        if submitted:
            if exam_date is None:
                st.warning("Pick an exam date.")
            else:
                try:
                    new_state = add_subject(
                        state, name, int(difficulty), exam_date, float(hours_needed)
                    )
                except ValueError as e:
                    st.warning(str(e))
                else:
                    _commit(new_state)
                    _queue_toast("Subject added and plan updated.")
                    st.rerun()

    st.divider()
    st.subheader("Your subjects")
    if not state.subjects:
        st.info("No subjects yet.")
        return

    today = date.today()
    for subject in state.subjects:
        days_left = max(0, (subject.exam_date - today).days)
        progress = get_subject_progress(state.plan, subject)
        col_name, col_info, col_progress, col_remove = st.columns([2, 3, 2, 1])
        col_name.markdown(
            f"<span style='color:{subject.color}'>●</span> **{subject.name}**",
            unsafe_allow_html=True,
        )
        col_info.caption(
            f"Exam {subject.exam_date.isoformat()} · {days_left} days left · "
            f"difficulty {subject.difficulty} · {subject.hours_needed:g}h total"
        )
        col_progress.progress(progress / 100, text=f"{progress}%")
        if col_remove.button("Remove", key=f"remove_{subject.id}"):
            _commit(remove_subject(state, subject.id))
            _queue_toast(f"Removed {subject.name}.")
            st.rerun()


def render_progress(state: AppState) -> None:
    st.header("Progress")

    if not state.subjects:
        st.info("No subjects yet.")
        return

    overall = get_overall_progress(state.plan)
    completed = sum(1 for t in state.plan.tasks if t.completed)
    st.subheader(f"Overall progress: {overall}%")
    st.progress(overall / 100)
    st.caption(f"{completed} of {len(state.plan.tasks)} tasks completed")

    st.divider()
    progress_rows = build_progress_rows(state.subjects, state.plan)
    df = pd.DataFrame(
        [
            {
                "Subject": r["subject"],
                "Exam": r["exam_date"],
                "Days left": r["days_left"],
                "Difficulty": r["difficulty"],
                "Hours needed": r["hours_needed"],
                "Planned hours": r["planned_hours"],
                "Progress %": r["progress"],
            }
            for r in progress_rows
        ]
    )
    st.dataframe(
        df,
        hide_index=True,
        use_container_width=True,
        column_config={
            "Exam": st.column_config.DateColumn("Exam"),
            "Progress %": st.column_config.ProgressColumn(
                "Progress %", min_value=0, max_value=100, format="%d%%"
            ),
        },
    )

    st.divider()
    st.subheader("Exports")
    if not state.plan.tasks:
        st.info("No tasks to export yet.")
        return

    week_start = get_week_days(st.session_state.selected_date)[0]
    st.download_button(
        "Download ICS (full plan)",
        data=plan_to_ics(state.plan.tasks),
        file_name=f"study_plan_{state.plan.start_date.isoformat()}.ics",
        mime="text/calendar",
    )
    st.download_button(
        "Download PDF (selected week)",
        data=week_plan_to_pdf(
            state.plan.tasks, week_start, state.study_hours_per_day, progress_rows
        ),
        file_name=f"study_plan_{week_start.isoformat()}.pdf",
        mime="application/pdf",
    )


def render_assistant(state: AppState) -> None:
    st.header("Study assistant")

    config = get_assistant_config()
    if config is None:
        st.info("Set STUDY_ASSISTANT_URL to enable the study assistant.")
        return

    messages = st.session_state.chat_messages
    if not messages:
        st.caption("Ask me anything about study techniques, exam prep, or your subjects!")
    for msg in messages:
        with st.chat_message(msg["role"]):
            st.markdown(msg["content"])

    prompt = st.chat_input("Ask about your studies...")
    if not prompt:
        return

    user_msg = {"role": "user", "content": prompt.strip()}
    messages.append(user_msg)
    with st.chat_message("user"):
        st.markdown(user_msg["content"])

    context = build_subject_context(state.subjects, state.plan)
    with st.chat_message("assistant"):
        try:
            reply = st.write_stream(stream_reply(list(messages), context, config))
        except AssistantError as e:
            st.error(str(e))
            messages.pop()
            return
    messages.append({"role": "assistant", "content": reply})


_ensure_session_state()
state: AppState = st.session_state.state

st.title("Smart Study Planner")
st.caption("Plans your study hours around exam dates, difficulty and what you missed.")
_flush_toast()

page = render_sidebar(state)

if page == "Plan":
    render_plan(state)
elif page == "Subjects":
    render_subjects(state)
elif page == "Progress":
    render_progress(state)
elif page == "Assistant":
    render_assistant(state)
