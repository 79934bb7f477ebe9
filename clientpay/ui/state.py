# clientpay/ui/state.py
"""
Application state for the Streamlit page.

One frozen AppState snapshot lives in st.session_state. Handlers below are
pure: they take a snapshot and return a new one. The page swaps snapshots
only through them.
"""
from dataclasses import dataclass, field, replace
from typing import Optional

import streamlit as st

from clientpay.models.clients import Client, ClientDraft

# Centralize keys to avoid typos across files
KEY_APP_STATE = "app_state"
KEY_NEEDS_RELOAD = "_needs_reload"

VIEW_SCHEDULE = "schedule"
VIEW_TODAY = "today"
VIEW_HISTORY = "history"
VIEWS = [VIEW_SCHEDULE, VIEW_TODAY, VIEW_HISTORY]
VIEW_LABELS = {VIEW_SCHEDULE: "Schedule", VIEW_TODAY: "Today", VIEW_HISTORY: "History"}


@dataclass(frozen=True)
class PendingDelete:
    kind: str                    # "client" or "lesson"
    record_id: str
    label: str


@dataclass(frozen=True)
class AppState:
    view: str = VIEW_SCHEDULE
    week_offset: int = 0
    form_open: bool = False
    form_nonce: int = 0          # bumped on open so widgets start from the draft
    draft: ClientDraft = field(default_factory=ClientDraft)
    editing_id: Optional[str] = None
    pending_delete: Optional[PendingDelete] = None
    clients: tuple = ()
    lessons: tuple = ()
    loaded: bool = False
    load_error: Optional[str] = None


# -----------------------------
# Handlers
# -----------------------------
def set_view(state: AppState, view: str) -> AppState:
    if view not in VIEWS:
        raise ValueError(f"Unknown view: {view}")
    return replace(state, view=view, pending_delete=None)


def shift_week(state: AppState, delta: int) -> AppState:
    return replace(state, week_offset=state.week_offset + delta)


def reset_week(state: AppState) -> AppState:
    return replace(state, week_offset=0)


def open_add_form(state: AppState) -> AppState:
    return replace(
        state,
        form_open=True,
        form_nonce=state.form_nonce + 1,
        draft=ClientDraft(),
        editing_id=None,
        pending_delete=None,
    )


def open_edit_form(state: AppState, client: Client) -> AppState:
    return replace(
        state,
        form_open=True,
        form_nonce=state.form_nonce + 1,
        draft=client.to_draft(),
        editing_id=client.id,
        pending_delete=None,
    )


def update_draft(state: AppState, draft: ClientDraft) -> AppState:
    return replace(state, draft=draft)


def close_form(state: AppState) -> AppState:
    return replace(state, form_open=False, draft=ClientDraft(), editing_id=None, pending_delete=None)


def request_delete(state: AppState, kind: str, record_id: str, label: str) -> AppState:
    return replace(state, pending_delete=PendingDelete(kind=kind, record_id=record_id, label=label))


def cancel_delete(state: AppState) -> AppState:
    return replace(state, pending_delete=None)


def with_snapshot(state: AppState, snapshot) -> AppState:
    return replace(
        state,
        clients=tuple(snapshot.clients),
        lessons=tuple(snapshot.lessons),
        loaded=True,
        load_error=None,
    )


def with_load_error(state: AppState, message: str) -> AppState:
    # Keep whatever was loaded last
    return replace(state, load_error=message)


# -----------------------------
# Session-state plumbing
# -----------------------------
def get_state() -> AppState:
    """Call at the top of the page before rendering widgets."""
    if KEY_APP_STATE not in st.session_state:
        st.session_state[KEY_APP_STATE] = AppState()
    return st.session_state[KEY_APP_STATE]


def put_state(state: AppState) -> None:
    st.session_state[KEY_APP_STATE] = state


def dispatch(handler, *args) -> AppState:
    """Apply a handler to the stored snapshot; usable as a widget on_click."""
    state = handler(get_state(), *args)
    put_state(state)
    return state


def mark_reload() -> None:
    st.session_state[KEY_NEEDS_RELOAD] = True


def take_reload_flag() -> bool:
    return bool(st.session_state.pop(KEY_NEEDS_RELOAD, False))
