"""Tests for user actions against the store."""

from dataclasses import replace
from datetime import date

import pytest

from clientpay.config import CLIENTS_TAB, LESSONS_TAB
from clientpay.errors import RecordNotFoundError, StoreError, ValidationError
from clientpay.models.clients import ClientDraft
from clientpay.models.lessons import LessonStatus
from clientpay.services.actions import validate_draft
from clientpay.services.ledger import partition

D = date(2026, 10, 19)


class TestValidation:
    """Tests for required-field validation."""

    def test_complete_draft_passes(self, draft):
        """Name, phone and a numeric amount are enough."""
        assert validate_draft(draft) == []

    def test_missing_fields_listed(self):
        """Every missing required field is reported."""
        problems = validate_draft(ClientDraft())
        assert len(problems) == 3

    def test_amount_must_be_numeric(self, draft):
        """A non-numeric amount is rejected."""
        assert validate_draft(replace(draft, payment_amount="lots")) != []

    @pytest.mark.parametrize("amount", ["1e30", "9" * 29])
    def test_oversized_amount_is_a_validation_problem(self, tracker, draft, amount):
        """Huge amounts are reported as form problems, not raised."""
        assert len(validate_draft(replace(draft, payment_amount=amount))) == 1
        with pytest.raises(ValidationError):
            tracker.save_client(replace(draft, payment_amount=amount))

    def test_email_is_optional(self, draft):
        """Email may be blank."""
        assert validate_draft(replace(draft, email="")) == []

    def test_invalid_draft_never_reaches_store(self, tracker, spreadsheet):
        """Validation fails before any store call."""
        with pytest.raises(ValidationError) as exc:
            tracker.save_client(ClientDraft(name="Ada"))
        assert "Phone is required." in exc.value.problems
        assert spreadsheet.sheets == {}


class TestClientActions:
    """Tests for add, edit and delete."""

    def test_add_then_edit(self, tracker, draft):
        """Saving without an id inserts; with an id updates in place."""
        added = tracker.save_client(draft)
        tracker.save_client(replace(draft, day="Friday"), editing_id=added.id)
        clients = tracker.reload().clients
        assert [(c.id, c.day) for c in clients] == [(added.id, "Friday")]

    def test_delete_client_keeps_history(self, tracker, draft):
        """Deleting a client does not touch its lessons."""
        added = tracker.save_client(draft)
        tracker.mark_taught(added, D)
        tracker.delete_client(added.id)
        snap = tracker.reload()
        assert snap.clients == []
        assert len(snap.lessons) == 1


class TestLessonLifecycle:
    """Tests for the Scheduled -> Taught -> Paid transitions."""

    def test_taught_then_paid_leaves_one_paid_lesson(self, tracker, draft):
        """Marking taught then paid yields exactly one lesson for (id, date)."""
        client = tracker.save_client(draft)
        lesson = tracker.mark_taught(client, D)
        assert lesson.status is LessonStatus.TAUGHT
        tracker.mark_paid(lesson.id)

        lessons = tracker.reload().lessons
        matching = [x for x in lessons if x.client_id == client.id and x.date == D.isoformat()]
        assert len(matching) == 1
        assert matching[0].status is LessonStatus.PAID

    def test_mark_taught_twice_is_a_no_op(self, tracker, draft):
        """A second mark for the same date returns the first lesson."""
        client = tracker.save_client(draft)
        first = tracker.mark_taught(client, D)
        second = tracker.mark_taught(client, D)
        assert second.id == first.id
        assert len(tracker.reload().lessons) == 1

    def test_mark_taught_after_paid_does_not_regress(self, tracker, draft):
        """Re-marking a paid occurrence keeps it paid."""
        client = tracker.save_client(draft)
        lesson = tracker.mark_taught(client, D)
        tracker.mark_paid(lesson.id)
        again = tracker.mark_taught(client, D)
        assert again.status is LessonStatus.PAID
        assert [x.status for x in tracker.reload().lessons] == [LessonStatus.PAID]

    def test_mark_paid_twice_is_a_no_op(self, tracker, draft):
        """Paying an already paid lesson leaves the row untouched."""
        client = tracker.save_client(draft)
        lesson = tracker.mark_taught(client, D)
        paid = tracker.mark_paid(lesson.id)
        again = tracker.mark_paid(lesson.id)
        assert again.updated_at_utc == paid.updated_at_utc

    def test_lesson_copies_client_name_and_amount(self, tracker, draft):
        """Lessons carry a snapshot of the client's name and price."""
        client = tracker.save_client(replace(draft, payment_amount="75"))
        lesson = tracker.mark_taught(client, D)
        assert lesson.client_name == "Ada Lovelace"
        assert lesson.amount == 75

    def test_mark_paid_unknown_lesson(self, tracker):
        """Paying an id the store does not hold is a store error."""
        with pytest.raises(RecordNotFoundError):
            tracker.mark_paid("missing")

    def test_earned_never_decreases(self, tracker, draft):
        """Each mark-paid keeps lifetime earnings the same or higher."""
        client = tracker.save_client(draft)
        days = [date(2026, 10, d) for d in (5, 12, 19)]
        lessons = [tracker.mark_taught(client, d) for d in days]

        earned = []
        for lesson in lessons + lessons[:1]:
            tracker.mark_paid(lesson.id)
            snap = tracker.reload()
            earned.append(partition(snap.clients, snap.lessons, D).total_earned)
        assert earned == sorted(earned)
        assert earned[-1] == 180

    def test_delete_lesson(self, tracker, draft):
        """A deleted lesson is gone after reload and the occurrence is scheduled again."""
        client = tracker.save_client(draft)
        lesson = tracker.mark_taught(client, D)
        tracker.delete_lesson(lesson.id)
        snap = tracker.reload()
        assert snap.lessons == []
        assert [c.id for c in partition(snap.clients, snap.lessons, D).upcoming] == [client.id]


class TestStoreFailures:
    """Tests for failed writes."""

    def test_failed_insert_surfaces_store_error(self, tracker, draft, spreadsheet):
        """A failing write raises StoreError and stores nothing."""
        tracker.reload()
        spreadsheet.sheets[CLIENTS_TAB].fail_on.add("append_row")
        with pytest.raises(StoreError):
            tracker.save_client(draft)
        spreadsheet.sheets[CLIENTS_TAB].fail_on.clear()
        assert tracker.reload().clients == []

    def test_failed_reload(self, tracker, spreadsheet):
        """Any failed read during reload is one StoreError."""
        tracker.reload()
        spreadsheet.sheets[LESSONS_TAB].fail_on.add("get_all_records")
        with pytest.raises(StoreError):
            tracker.reload()
