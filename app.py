"""Streamlit front-end for the student enrollment roster."""

from __future__ import annotations

import hashlib
import io
from html import escape

import streamlit as st

from enrollment import config, data_loader
from enrollment.data_loader import DataLoaderError
from enrollment.errors import RosterError
from enrollment.models import STUDENT_STATUSES, Plan
from enrollment.plans import PlanRegistry
from enrollment.query import ALL
from enrollment.reports import (
    ROSTER_COLUMNS,
    plan_usage,
    roster_rows,
    roster_stats,
    rows_to_csv,
    rows_to_image_bytes,
)
from enrollment.roster import RosterStore
from enrollment.session import RosterSession

STATUS_CLASS_MAP: dict[str, str] = {
    "active": "status-active",
    "inactive": "status-inactive",
    "suspended": "status-suspended",
}

CAPACITY_CLASS_MAP: dict[str, str] = {
    "good": "capacity-good",
    "warning": "capacity-warning",
    "critical": "capacity-critical",
}


class StreamlitNotifier:
    """Queues outcome messages so they survive the rerun after a callback."""

    def success(self, message: str) -> None:
        st.session_state.setdefault("flash", []).append(("success", message))

    def error(self, message: str) -> None:
        st.session_state.setdefault("flash", []).append(("error", message))


def status_to_class(status: str | None) -> str:
    if not status:
        return "status-inactive"
    return STATUS_CLASS_MAP.get(status.lower().strip(), "status-inactive")


def build_table_html(rows: list[dict[str, str]], columns: list[str]) -> str:
    header_html = "".join(f"<th>{escape(column)}</th>" for column in columns)
    body_rows = []
    for row in rows:
        cells = []
        for column in columns:
            value = escape(str(row.get(column, "")))
            if column == "Status":
                value = f"<span class='status-badge {status_to_class(row.get(column))}'>{value}</span>"
            cells.append(f"<td>{value}</td>")
        body_rows.append(f"<tr>{''.join(cells)}</tr>")
    return (
        "<table class='roster-table'>"
        f"<thead><tr>{header_html}</tr></thead>"
        f"<tbody>{''.join(body_rows)}</tbody>"
        "</table>"
    )


def build_plan_cards_html(session: RosterSession) -> str:
    cards = []
    for usage in plan_usage(session.store):
        css_class = CAPACITY_CLASS_MAP[usage.capacity_level]
        cards.append(
            f"<div class='plan-card {css_class}'>"
            f"<div class='plan-title'>{escape(usage.name)}</div>"
            f"<div class='plan-price'>{escape(usage.price)}</div>"
            f"<div class='plan-usage'>{usage.occupancy} / {usage.capacity}</div>"
            "</div>"
        )
    return f"<div class='plan-cards'>{''.join(cards)}</div>"


def stringio_from_bytes(data: bytes, *, name: str) -> io.StringIO:
    text = data.decode("utf-8-sig")
    buffer = io.StringIO(text)
    setattr(buffer, "name", name)
    return buffer


def compute_signature(*datasets: bytes) -> str:
    hasher = hashlib.sha256()
    for data in datasets:
        hasher.update(data)
    return hasher.hexdigest()


def format_plan_option(plan: Plan) -> str:
    return f"{plan.name} - {plan.price}" if plan.price else plan.name


def build_session(plans_bytes: bytes, students_bytes: bytes) -> RosterSession:
    plans = data_loader.load_plans(stringio_from_bytes(plans_bytes, name="plans.csv"))
    students = data_loader.load_students(stringio_from_bytes(students_bytes, name="students.csv"), plans=plans)
    store = RosterStore(PlanRegistry(plans), students)
    return RosterSession(store, notifier=StreamlitNotifier())


def get_dataset_bytes(state_key: str, label: str, *, default_bytes: bytes) -> tuple[bytes, bool]:
    uploaded = st.file_uploader(label, type="csv", key=f"{state_key}_uploader")
    if uploaded is not None:
        st.session_state[state_key] = uploaded.getvalue()
    if state_key in st.session_state:
        return st.session_state[state_key], True
    return default_bytes, False


def show_flash_messages() -> None:
    for kind, message in st.session_state.pop("flash", []):
        if kind == "success":
            st.success(message)
        else:
            st.error(message)


def render_student_form(session: RosterSession) -> None:
    workflow = session.workflow
    form_values = workflow.form
    if form_values is None:
        return

    editing = workflow.state == "editing"
    plans = session.list_plans()
    plan_ids = [plan.identifier for plan in plans]
    plans_by_id = {plan.identifier: plan for plan in plans}

    st.subheader("Edit Student Information" if editing else "Enroll New Student")
    with st.form("student_form"):
        name_left, name_right = st.columns(2)
        with name_left:
            first_name = st.text_input("First Name", value=form_values.first_name)
        with name_right:
            last_name = st.text_input("Last Name", value=form_values.last_name)
        email = st.text_input("Email Address", value=form_values.email)
        plan_id = st.selectbox(
            "Enrollment Plan",
            options=plan_ids,
            index=plan_ids.index(form_values.plan_id) if form_values.plan_id in plan_ids else None,
            format_func=lambda key: format_plan_option(plans_by_id[key]),
            placeholder="Select a plan",
        )
        submit_col, cancel_col = st.columns(2)
        with submit_col:
            submitted = st.form_submit_button("Update Student" if editing else "Enroll Student", type="primary")
        with cancel_col:
            cancelled = st.form_submit_button("Cancel")

    if cancelled:
        session.cancel_form()
        st.rerun()
    if submitted:
        workflow.update_form(first_name=first_name, last_name=last_name, email=email, plan_id=plan_id or "")
        try:
            session.submit_form()
        except RosterError:
            show_flash_messages()
            return
        st.rerun()


def render_roster(session: RosterSession) -> None:
    visible = session.visible_students
    form_open = session.workflow.state != "idle"

    # Checkbox state is derived from the selection on every run.
    st.session_state["select_all_box"] = session.all_visible_selected
    for student in visible:
        st.session_state[f"select_{student.identifier}"] = student.identifier in session.selected_ids

    def on_select_all() -> None:
        session.select_all(st.session_state["select_all_box"])

    def on_toggle(student_id: str) -> None:
        session.toggle_select(student_id, st.session_state[f"select_{student_id}"])

    def on_edit(student_id: str) -> None:
        try:
            session.open_edit_form(student_id)
        except RosterError as exc:
            StreamlitNotifier().error(str(exc))

    st.checkbox(
        f"Select all ({len(visible)} shown)",
        key="select_all_box",
        on_change=on_select_all,
        disabled=not visible,
    )

    plans = {plan.identifier: plan for plan in session.list_plans()}
    for student in visible:
        select_col, info_col, plan_col, status_col, action_col = st.columns([0.5, 4, 2.5, 2, 2.5])
        with select_col:
            st.checkbox(
                "Select",
                key=f"select_{student.identifier}",
                on_change=on_toggle,
                args=(student.identifier,),
                label_visibility="collapsed",
            )
        with info_col:
            st.markdown(f"**{escape(student.full_name)}**  \n{escape(student.email)}")
        with plan_col:
            plan = plans.get(student.plan_id)
            st.markdown(f"{escape(plan.name if plan else student.plan_id)}  \n{escape(plan.price if plan else '')}")
        with status_col:
            st.markdown(
                f"<span class='status-badge {status_to_class(student.status)}'>{escape(student.status)}</span>",
                unsafe_allow_html=True,
            )
            st.progress(student.progress, text=f"{student.progress}%")
        with action_col:
            edit_col, delete_col = st.columns(2)
            with edit_col:
                st.button(
                    "Edit",
                    key=f"edit_{student.identifier}",
                    on_click=on_edit,
                    args=(student.identifier,),
                    disabled=form_open,
                )
            with delete_col:
                st.button(
                    "Delete",
                    key=f"delete_{student.identifier}",
                    on_click=session.delete_student,
                    args=(student.identifier,),
                )

    if not visible:
        st.info("No students match the current filters.")


def main() -> None:
    config.configure_logging()
    st.set_page_config(page_title="Student Enrollment", layout="wide")

    st.title("Student Management System")
    st.caption("Enroll students on capacity-limited plans and keep the roster tidy.")
    st.markdown(
        """
        <style>
        .roster-table {width: 100%; border-collapse: collapse;}
        .roster-table th, .roster-table td {
            border: 1px solid #d9d9d9;
            padding: 0.5rem;
            text-align: left;
        }
        .roster-table thead tr {background-color: #f8f9fa;}
        .status-badge {
            display: inline-block;
            padding: 0.15rem 0.5rem;
            border-radius: 4px;
            font-weight: 600;
            font-size: 0.75rem;
        }
        .status-badge.status-active {background-color: #dcfce7; color: #15803d;}
        .status-badge.status-inactive {background-color: #fef9c3; color: #a16207;}
        .status-badge.status-suspended {background-color: #fee2e2; color: #b91c1c;}
        .plan-cards {display: flex; gap: 1rem; flex-wrap: wrap; margin-bottom: 1rem;}
        .plan-card {
            flex: 1;
            min-width: 180px;
            padding: 0.75rem 1rem;
            border-radius: 8px;
            border: 1px solid #e5e7eb;
        }
        .plan-card.capacity-good {background-color: #f0fdf4;}
        .plan-card.capacity-warning {background-color: #fefce8;}
        .plan-card.capacity-critical {background-color: #fef2f2;}
        .plan-title {font-weight: 700; text-transform: uppercase; font-size: 0.9rem;}
        .plan-price {font-size: 0.8rem; color: #6c757d;}
        .plan-usage {font-size: 1.2rem; font-weight: 600;}
        .sidebar-hint {font-size: 0.75rem; color: #6c757d;}
        </style>
        """,
        unsafe_allow_html=True,
    )

    default_plans_bytes = config.PLANS_CSV.read_bytes()
    default_students_bytes = config.STUDENTS_CSV.read_bytes()

    with st.sidebar:
        st.header("Data")
        st.caption("Upload CSV files with the same columns to work on your own roster.")
        plans_bytes, plans_custom = get_dataset_bytes("plans_csv", "Plans (CSV)", default_bytes=default_plans_bytes)
        students_bytes, students_custom = get_dataset_bytes(
            "students_csv",
            "Students (CSV)",
            default_bytes=default_students_bytes,
        )

        if plans_custom or students_custom:
            st.markdown(
                "<p class='sidebar-hint'>Uploaded data is only kept for the current session.</p>",
                unsafe_allow_html=True,
            )

        if st.button("Reset uploaded data", use_container_width=True):
            for key in ("plans_csv", "students_csv", "roster_signature", "roster"):
                st.session_state.pop(key, None)
            st.rerun()

    signature = compute_signature(plans_bytes, students_bytes)
    if "roster" not in st.session_state or st.session_state.get("roster_signature") != signature:
        try:
            st.session_state.roster = build_session(plans_bytes, students_bytes)
        except (DataLoaderError, RosterError, ValueError) as exc:
            st.error(f"Could not load the roster: {exc}")
            st.stop()
        st.session_state.roster_signature = signature

    session: RosterSession = st.session_state.roster

    stats = roster_stats(session.store.list_all())
    total_col, active_col, progress_col = st.columns(3)
    total_col.metric("Total Students", stats.total)
    active_col.metric("Active", stats.active)
    progress_col.metric("Avg Progress", f"{stats.average_progress}%")

    st.markdown(build_plan_cards_html(session), unsafe_allow_html=True)
    show_flash_messages()

    st.divider()
    action_left, action_right = st.columns([3, 1])
    with action_left:
        st.subheader("Student Directory")
    with action_right:
        if session.selected_ids:
            if st.button(f"Delete Selected ({len(session.selected_ids)})", type="secondary", use_container_width=True):
                session.delete_selected()
                st.rerun()
        if st.button(
            "Add Student",
            type="primary",
            use_container_width=True,
            disabled=session.workflow.state != "idle",
        ):
            session.open_create_form()
            st.rerun()

    render_student_form(session)

    plan_filter_options = [ALL, *(plan.identifier for plan in session.list_plans())]
    plan_names = {plan.identifier: plan.name for plan in session.list_plans()}
    search_col, status_col, plan_col = st.columns([3, 1, 1])
    with search_col:
        search = st.text_input("Search students...", value=session.query.search)
    with status_col:
        status = st.selectbox(
            "Status",
            options=[ALL, *STUDENT_STATUSES],
            index=[ALL, *STUDENT_STATUSES].index(session.query.status),
            format_func=lambda value: "All Status" if value == ALL else value.capitalize(),
        )
    with plan_col:
        plan_filter = st.selectbox(
            "Plan",
            options=plan_filter_options,
            index=plan_filter_options.index(session.query.plan),
            format_func=lambda value: "All Plans" if value == ALL else plan_names[value],
        )
    session.set_search_text(search)
    session.set_status_filter(status)
    session.set_plan_filter(plan_filter)

    render_roster(session)

    st.divider()
    st.subheader("Export")
    visible_rows = roster_rows(session.visible_students, session.store.plans)
    st.markdown(build_table_html(visible_rows, ROSTER_COLUMNS), unsafe_allow_html=True)
    download_left, download_right = st.columns(2)
    with download_left:
        st.download_button(
            "Download as CSV",
            data=rows_to_csv(visible_rows, ROSTER_COLUMNS),
            file_name="roster.csv",
            mime="text/csv",
        )
    with download_right:
        st.download_button(
            "Download as image",
            data=rows_to_image_bytes(visible_rows, ROSTER_COLUMNS),
            file_name="roster.png",
            mime="image/png",
        )


if __name__ == "__main__":
    main()
