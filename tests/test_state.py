"""Tests for AppState handlers."""

import pytest

from clientpay.models.clients import ClientDraft
from clientpay.services.actions import Snapshot
from clientpay.ui.state import (
    VIEW_HISTORY,
    AppState,
    cancel_delete,
    close_form,
    open_add_form,
    open_edit_form,
    request_delete,
    reset_week,
    set_view,
    shift_week,
    with_load_error,
    with_snapshot,
)

from conftest import make_client, make_lesson


class TestHandlers:
    """Handlers return new snapshots and never mutate the old one."""

    def test_set_view(self):
        """Switching views clears any pending delete."""
        s0 = request_delete(AppState(), "lesson", "l1", "Ada")
        s1 = set_view(s0, VIEW_HISTORY)
        assert s1.view == VIEW_HISTORY
        assert s1.pending_delete is None
        assert s0.pending_delete is not None

    def test_unknown_view(self):
        """Only the three views exist."""
        with pytest.raises(ValueError):
            set_view(AppState(), "settings")

    def test_week_navigation(self):
        """Offsets move by the given delta and reset to zero."""
        s = shift_week(shift_week(AppState(), -1), -1)
        assert s.week_offset == -2
        assert reset_week(s).week_offset == 0

    def test_edit_form_loads_client(self):
        """Editing copies the client into the draft and remembers its id."""
        c = make_client("c9", name="Grace Hopper")
        s = open_edit_form(AppState(), c)
        assert s.form_open
        assert s.editing_id == "c9"
        assert s.draft.name == "Grace Hopper"

    def test_add_form_starts_blank(self):
        """Adding after editing starts from an empty draft with a new nonce."""
        s1 = open_edit_form(AppState(), make_client())
        s2 = open_add_form(s1)
        assert s2.editing_id is None
        assert s2.draft == ClientDraft()
        assert s2.form_nonce == s1.form_nonce + 1

    def test_close_form(self):
        """Closing drops the draft and edit target."""
        s = close_form(open_edit_form(AppState(), make_client()))
        assert not s.form_open
        assert s.editing_id is None

    def test_delete_confirmation_round_trip(self):
        """A delete request can be cancelled."""
        s = request_delete(AppState(), "client", "c1", "Ada")
        assert s.pending_delete.record_id == "c1"
        assert cancel_delete(s).pending_delete is None


class TestSnapshots:
    """Tests for loading records into state."""

    def test_with_snapshot_replaces_records(self):
        """A reload replaces both lists and clears the last error."""
        s = with_load_error(AppState(), "offline")
        s = with_snapshot(s, Snapshot(clients=[make_client()], lessons=[make_lesson()]))
        assert s.loaded
        assert s.load_error is None
        assert len(s.clients) == 1 and len(s.lessons) == 1

    def test_load_error_keeps_previous_records(self):
        """A failed reload leaves the last good records on screen."""
        s = with_snapshot(AppState(), Snapshot(clients=[make_client()]))
        s = with_load_error(s, "offline")
        assert s.load_error == "offline"
        assert len(s.clients) == 1
