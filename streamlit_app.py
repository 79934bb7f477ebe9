import logging
from datetime import date

import pandas as pd
import streamlit as st

from clientpay.config import DAYS, GRADES, load_settings
from clientpay.errors import ConfigError, StoreError, ValidationError
from clientpay.logging_config import configure_logging
from clientpay.models.clients import ClientDraft
from clientpay.repositories.record_store import BACKEND_ERRORS, RecordStore
from clientpay.services.actions import TrackerService
from clientpay.services.gsheets_client import get_spreadsheet
from clientpay.services.ledger import partition
from clientpay.services.timetable import (
    TIME_OPTIONS,
    bucket_grid,
    day_name,
    find_overlaps,
    project_week,
    short_date,
    week_label,
    week_window,
)
from clientpay.ui.grid import render_week_html
from clientpay.ui.state import (
    VIEW_HISTORY,
    VIEW_LABELS,
    VIEW_SCHEDULE,
    VIEW_TODAY,
    VIEWS,
    cancel_delete,
    close_form,
    dispatch,
    get_state,
    mark_reload,
    open_add_form,
    open_edit_form,
    put_state,
    request_delete,
    reset_week,
    set_view,
    shift_week,
    take_reload_flag,
    update_draft,
    with_load_error,
    with_snapshot,
)
from clientpay.utils.amount_parser import format_amount

logger = logging.getLogger("clientpay.app")

KEY_FLASH = "_flash"

st.set_page_config(page_title="Client Pay", layout="wide")

# -----------------------------
# Startup: secrets are checked before anything touches the store
# -----------------------------
try:
    settings = load_settings()
except ConfigError as e:
    st.error(f"Configuration error: {e.message}")
    st.stop()

configure_logging(settings.log_level)


@st.cache_resource
def get_tracker(credentials_json: str, sheet_id: str) -> TrackerService:
    return TrackerService(RecordStore(get_spreadsheet(credentials_json, sheet_id)))


try:
    # ValueError: credentials rejected by google-auth before any request
    tracker = get_tracker(settings.credentials_json, settings.sheet_id)
except BACKEND_ERRORS + (ValueError,) as e:
    logger.exception("Could not open the store")
    st.error(f"Could not open the store: {e}")
    st.stop()


def reload_records() -> None:
    # Full, unconditional reload; on failure the previous snapshot stays on screen
    state = get_state()
    try:
        put_state(with_snapshot(state, tracker.reload()))
    except StoreError as e:
        put_state(with_load_error(state, e.message))


def run_action(fn, *args, success: str = "") -> None:
    """Issue one store mutation, then reload everything on success."""
    try:
        fn(*args)
    except ValidationError as e:
        st.error(str(e))
        return
    except StoreError as e:
        st.error(e.message)
        return
    if success:
        st.session_state[KEY_FLASH] = success
    mark_reload()
    st.rerun()


def confirm_delete_box(kind: str, delete_fn) -> None:
    pending = get_state().pending_delete
    if pending is None or pending.kind != kind:
        return
    with st.container(border=True):
        st.warning(f"Delete {pending.label}? This cannot be undone.")
        c1, c2, _ = st.columns([1, 1, 6])
        with c1:
            if st.button("Delete", type="primary", key=f"confirm_delete_{pending.record_id}"):
                put_state(cancel_delete(get_state()))
                run_action(delete_fn, pending.record_id, success=f"Deleted {pending.label}.")
        with c2:
            st.button("Cancel", on_click=dispatch, args=(cancel_delete,), key=f"cancel_delete_{pending.record_id}")


state = get_state()
if not state.loaded or take_reload_flag():
    reload_records()
    state = get_state()

today = date.today()
records = partition(state.clients, state.lessons, today)

# -----------------------------
# Header + stats bar
# -----------------------------
st.title("Client Pay")
st.caption("Manage schedules & payments")

if state.load_error:
    st.error(f"Could not sync with the store: {state.load_error}")

flash = st.session_state.pop(KEY_FLASH, None)
if flash:
    st.success(flash)

m1, m2, m3, m4 = st.columns([2, 2, 2, 1])
m1.metric("Total clients", records.client_count)
m2.metric("Pending payment", format_amount(records.total_pending))
m3.metric("Total earned", format_amount(records.total_earned))
with m4:
    st.button("Add client", type="primary", on_click=dispatch, args=(open_add_form,), key="open_add_btn")

# -----------------------------
# Create / edit form
# -----------------------------
if state.form_open:
    editing = state.editing_id is not None
    d = state.draft
    n = state.form_nonce
    with st.container(border=True):
        st.subheader("Edit client" if editing else "Add client")
        with st.form(f"client_form_{n}"):
            name = st.text_input("Client name", value=d.name)
            phone = st.text_input("Phone number", value=d.phone)
            email = st.text_input("Email (optional)", value=d.email)
            amount = st.text_input("Payment amount ($)", value=d.payment_amount)
            day = st.selectbox("Day", DAYS, index=DAYS.index(d.day) if d.day in DAYS else 0)
            c1, c2 = st.columns(2)
            with c1:
                start = st.selectbox(
                    "Start", TIME_OPTIONS,
                    index=TIME_OPTIONS.index(d.start_time) if d.start_time in TIME_OPTIONS else 18,
                )
            with c2:
                end = st.selectbox(
                    "End", TIME_OPTIONS,
                    index=TIME_OPTIONS.index(d.end_time) if d.end_time in TIME_OPTIONS else 20,
                )
            grade_options = GRADES if d.grade in GRADES else GRADES + [d.grade]
            grade = st.selectbox("Grade", grade_options, index=grade_options.index(d.grade))
            saved = st.form_submit_button("Save client", type="primary")

        if saved:
            draft = ClientDraft(
                name=name, phone=phone, email=email, day=day,
                start_time=start, end_time=end, grade=grade,
                payment_amount=amount, type=d.type,
            )
            put_state(update_draft(get_state(), draft))
            editing_id = state.editing_id
            action_name = "Updated" if editing else "Added"

            def _save(dr, eid):
                tracker.save_client(dr, eid)
                put_state(close_form(get_state()))

            run_action(_save, draft, editing_id, success=f"{action_name} {draft.name.strip()}.")

        b1, b2, _ = st.columns([1, 1, 6])
        with b1:
            st.button("Close", on_click=dispatch, args=(close_form,), key=f"close_form_{n}")
        if editing:
            with b2:
                st.button(
                    "Delete client",
                    on_click=dispatch,
                    args=(request_delete, "client", state.editing_id, d.name or "this client"),
                    key=f"delete_client_{n}",
                )

            def _delete_client(cid):
                tracker.delete_client(cid)
                put_state(close_form(get_state()))

            confirm_delete_box("client", _delete_client)

# -----------------------------
# Navigation
# -----------------------------
chosen = st.radio(
    "View",
    VIEWS,
    index=VIEWS.index(state.view),
    format_func=lambda v: VIEW_LABELS[v],
    horizontal=True,
    label_visibility="collapsed",
)
if chosen != state.view:
    state = dispatch(set_view, chosen)

# -----------------------------
# Schedule view
# -----------------------------
if state.view == VIEW_SCHEDULE:
    dates = week_window(today, state.week_offset)

    c1, c2, c3, c4 = st.columns([1, 3, 1, 1])
    with c1:
        st.button("◀", on_click=dispatch, args=(shift_week, -1), key="prev_week")
    with c2:
        st.markdown(f"**{week_label(dates, state.week_offset)}**")
    with c3:
        st.button("▶", on_click=dispatch, args=(shift_week, 1), key="next_week")
    with c4:
        st.button("Today", on_click=dispatch, args=(reset_week,), key="this_week", disabled=state.week_offset == 0)

    for day in DAYS:
        for a, b in find_overlaps(state.clients, day):
            st.warning(f"{day}: {a.name} ({a.start_time}-{a.end_time}) overlaps {b.name} ({b.start_time}-{b.end_time})")

    compact = st.toggle("Compact hour view", key="compact_grid")
    if compact:
        st.dataframe(bucket_grid(state.clients), use_container_width=True, height=600)
    else:
        grid = project_week(state.clients, dates, state.lessons)
        st.markdown(render_week_html(grid, dates), unsafe_allow_html=True)

    with st.expander("Edit a client"):
        by_label = {f"{c.name} ({c.day} {c.start_time})": c for c in state.clients}
        if by_label:
            pick = st.selectbox("Client", list(by_label), key="edit_pick")
            st.button("Edit", on_click=dispatch, args=(open_edit_form, by_label[pick]), key="edit_pick_btn")
        else:
            st.info("No clients yet.")

# -----------------------------
# Today view
# -----------------------------
elif state.view == VIEW_TODAY:
    st.subheader(f"Upcoming classes ({len(records.upcoming)})")
    if not records.upcoming:
        st.info(f"Nothing left to teach this {day_name(today)}.")
    for c in records.upcoming:
        with st.container(border=True):
            c1, c2, c3, c4 = st.columns([3, 2, 1, 1])
            c1.markdown(f"**{c.name.upper()}**  \n{c.grade}")
            c2.markdown(f"📞 {c.phone}  \n🕒 {c.start_time}-{c.end_time}")
            with c3:
                st.button("Edit", on_click=dispatch, args=(open_edit_form, c), key=f"edit_{c.id}")
            with c4:
                if st.button("Taught", type="primary", key=f"taught_{c.id}"):
                    run_action(tracker.mark_taught, c, today, success=f"{c.name} marked as taught.")

    st.subheader(f"Awaiting payment ({len(records.awaiting_payment)})")
    for lesson in records.awaiting_payment:
        with st.container(border=True):
            c1, c2, c3 = st.columns([3, 2, 1])
            c1.markdown(f"**{lesson.client_name.upper()}**  \nSession on: {lesson.date}")
            c2.metric("Amount due", format_amount(lesson.amount))
            with c3:
                if st.button("Paid", type="primary", key=f"paid_{lesson.id}"):
                    run_action(tracker.mark_paid, lesson.id, success=f"{lesson.client_name} marked as paid.")

# -----------------------------
# History view
# -----------------------------
elif state.view == VIEW_HISTORY:
    st.subheader(f"Completed sessions ({len(records.paid_history)})")
    confirm_delete_box("lesson", tracker.delete_lesson)

    if not records.paid_history:
        st.info("Your history is currently empty. Completed payments will appear here.")
    else:
        history_df = pd.DataFrame(
            [
                {
                    "Client": x.client_name,
                    "Completed on": short_date(x.occurred_on) + f", {x.occurred_on.year}" if x.occurred_on else x.date,
                    "Revenue": format_amount(x.amount),
                    "Ref ID": x.short_id,
                }
                for x in records.paid_history
            ]
        )
        st.dataframe(history_df, use_container_width=True, hide_index=True)

        by_ref = {f"{x.short_id} - {x.client_name} ({x.date})": x for x in records.paid_history}
        c1, c2 = st.columns([4, 1])
        with c1:
            pick = st.selectbox("Record", list(by_ref), key="history_pick", label_visibility="collapsed")
        with c2:
            chosen_lesson = by_ref[pick]
            st.button(
                "Delete record",
                on_click=dispatch,
                args=(request_delete, "lesson", chosen_lesson.id, f"{chosen_lesson.client_name} on {chosen_lesson.date}"),
                key="delete_history_btn",
            )

    st.metric("Lifetime earnings", format_amount(records.total_earned))
