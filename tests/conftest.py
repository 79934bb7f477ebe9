"""Pytest configuration and shared fixtures.

FakeSpreadsheet / FakeWorksheet mimic the slice of the gspread API the
record store uses, keeping every cell as text like a RAW-input sheet.
"""

from datetime import date

import pytest
from gspread.exceptions import GSpreadException, WorksheetNotFound

from clientpay.models.clients import Client, ClientDraft
from clientpay.models.lessons import Lesson, LessonStatus
from clientpay.repositories.record_store import RecordStore
from clientpay.services.actions import TrackerService


class FakeWorksheet:
    def __init__(self, title):
        self.title = title
        self.rows = []
        self.fail_on = set()
        self.fail_with = {}
        self.calls = []

    def _check(self, op):
        self.calls.append(op)
        if op in self.fail_with:
            raise self.fail_with[op]
        if op in self.fail_on:
            raise GSpreadException(f"{op} failed")

    def row_values(self, n):
        self._check("row_values")
        return list(self.rows[n - 1]) if n <= len(self.rows) else []

    def col_values(self, n):
        self._check("col_values")
        return [r[n - 1] if len(r) >= n else "" for r in self.rows]

    def update(self, range_name=None, values=None, raw=True):
        self._check("update")
        start = int(range_name[1:])
        for offset, row in enumerate(values):
            idx = start - 1 + offset
            while len(self.rows) <= idx:
                self.rows.append([])
            self.rows[idx] = [str(v) for v in row]

    def append_row(self, values, value_input_option="RAW"):
        self._check("append_row")
        self.rows.append([str(v) for v in values])

    def delete_rows(self, n):
        self._check("delete_rows")
        del self.rows[n - 1]

    def get_all_records(self, expected_headers=None, numericise_ignore=None):
        self._check("get_all_records")
        if not self.rows:
            return []
        headers = self.rows[0]
        return [dict(zip(headers, r + [""] * (len(headers) - len(r)))) for r in self.rows[1:]]


class FakeSpreadsheet:
    id = "fake-sheet"

    def __init__(self):
        self.sheets = {}

    def worksheet(self, title):
        if title not in self.sheets:
            raise WorksheetNotFound(title)
        return self.sheets[title]

    def add_worksheet(self, title, rows, cols):
        ws = FakeWorksheet(title)
        self.sheets[title] = ws
        return ws


@pytest.fixture
def spreadsheet() -> FakeSpreadsheet:
    return FakeSpreadsheet()


@pytest.fixture
def store(spreadsheet) -> RecordStore:
    return RecordStore(spreadsheet)


@pytest.fixture
def tracker(store) -> TrackerService:
    return TrackerService(store)


@pytest.fixture
def draft() -> ClientDraft:
    return ClientDraft(
        name="Ada Lovelace",
        phone="0412 555 010",
        day="Monday",
        start_time="09:30",
        end_time="11:00",
        payment_amount="60",
    )


def make_client(cid="c1", name="Ada Lovelace", day="Monday", start="09:00", end="10:00", amount="60"):
    return Client(
        id=cid,
        name=name,
        phone="0412 555 010",
        email="",
        day=day,
        start_time=start,
        end_time=end,
        grade="Grade 9",
        payment_amount=amount,
        type="client",
        created_at_utc="2026-01-01T00:00:00+00:00",
    )


def make_lesson(lid="l1", client_id="c1", on="2026-10-19", status=LessonStatus.TAUGHT, amount="60", name="Ada"):
    if isinstance(on, date):
        on = on.isoformat()
    return Lesson(
        id=lid,
        client_id=client_id,
        client_name=name,
        amount_text=amount,
        date=on,
        status=status,
        created_at_utc="",
        updated_at_utc="",
    )
