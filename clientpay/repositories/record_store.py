# clientpay/repositories/record_store.py
import logging
import uuid

from google.auth.exceptions import GoogleAuthError
from gspread.exceptions import GSpreadException, WorksheetNotFound
from requests.exceptions import RequestException

from clientpay.config import CLIENTS_HEADERS, CLIENTS_TAB, LESSONS_HEADERS, LESSONS_TAB
from clientpay.errors import RecordNotFoundError, StoreError
from clientpay.models.clients import utc_now_iso

logger = logging.getLogger(__name__)

# API errors, dropped connections and token refresh failures
BACKEND_ERRORS = (GSpreadException, RequestException, GoogleAuthError)

COLLECTIONS = {
    CLIENTS_TAB: CLIENTS_HEADERS,
    LESSONS_TAB: LESSONS_HEADERS,
}


def get_or_create_worksheet(sh, tab_name: str):
    try:
        return sh.worksheet(tab_name)
    except WorksheetNotFound:
        logger.info("Creating worksheet %s", tab_name)
        return sh.add_worksheet(title=tab_name, rows=1000, cols=len(COLLECTIONS.get(tab_name, [])) or 26)


def ensure_headers(ws, headers):
    values = ws.row_values(1)
    if values != headers:
        ws.update(range_name="A1", values=[headers])


class RecordStore:
    """
    Stateless pass-through to the hosted spreadsheet: one worksheet per
    collection, header in row 1, record id in column A.
    Worksheet handles are kept per instance to avoid repeated metadata reads;
    rows are never cached.
    """

    def __init__(self, spreadsheet, collections=None):
        self._sh = spreadsheet
        self._collections = dict(collections or COLLECTIONS)
        self._ws_cache = {}

    def headers(self, collection: str) -> list:
        try:
            return self._collections[collection]
        except KeyError:
            raise StoreError(f"Unknown collection: {collection}") from None

    def _worksheet(self, collection: str):
        headers = self.headers(collection)
        if collection in self._ws_cache:
            return self._ws_cache[collection]
        try:
            ws = get_or_create_worksheet(self._sh, collection)
            ensure_headers(ws, headers)
        except BACKEND_ERRORS as e:
            logger.exception("Could not open worksheet %s", collection)
            raise StoreError(f"Could not open {collection}: {e}") from e
        self._ws_cache[collection] = ws
        return ws

    def _row_number(self, ws, record_id: str):
        # Column A holds ids; row 1 is the header
        ids = ws.col_values(1)
        for idx, v in enumerate(ids[1:], start=2):
            if str(v).strip() == record_id:
                return idx
        return None

    def list(self, collection: str) -> list[dict]:
        ws = self._worksheet(collection)
        headers = self.headers(collection)
        try:
            records = ws.get_all_records(expected_headers=headers, numericise_ignore=["all"])
        except BACKEND_ERRORS as e:
            logger.exception("Reading %s failed", collection)
            raise StoreError(f"Could not load {collection}: {e}") from e
        return [{h: str(r.get(h, "")) for h in headers} for r in records]

    def insert(self, collection: str, row: dict) -> dict:
        ws = self._worksheet(collection)
        headers = self.headers(collection)

        stored = {h: "" for h in headers}
        stored.update({k: v for k, v in row.items() if k in stored})
        stored["id"] = str(uuid.uuid4())
        stored["created_at_utc"] = utc_now_iso()
        if "updated_at_utc" in stored:
            stored["updated_at_utc"] = stored["created_at_utc"]

        values = ["" if stored[h] is None else str(stored[h]) for h in headers]
        try:
            ws.append_row(values, value_input_option="RAW")
        except BACKEND_ERRORS as e:
            logger.exception("Insert into %s failed", collection)
            raise StoreError(f"Could not save to {collection}: {e}") from e

        logger.info("Inserted %s into %s", stored["id"], collection)
        return stored

    def update(self, collection: str, record_id: str, partial: dict) -> dict:
        ws = self._worksheet(collection)
        headers = self.headers(collection)
        record_id = str(record_id)

        try:
            n = self._row_number(ws, record_id)
            if n is None:
                raise RecordNotFoundError(collection, record_id)
            current = ws.row_values(n)
            current = current + [""] * (len(headers) - len(current))
            row = dict(zip(headers, current))
            for k, v in partial.items():
                if k in row and k not in ("id", "created_at_utc"):
                    row[k] = "" if v is None else str(v)
            if "updated_at_utc" in row:
                row["updated_at_utc"] = utc_now_iso()
            ws.update(range_name=f"A{n}", values=[[row[h] for h in headers]], raw=True)
        except BACKEND_ERRORS as e:
            logger.exception("Update of %s in %s failed", record_id, collection)
            raise StoreError(f"Could not update {collection}: {e}") from e

        logger.info("Updated %s in %s (%s)", record_id, collection, ", ".join(sorted(partial)))
        return row

    def delete(self, collection: str, record_id: str) -> None:
        ws = self._worksheet(collection)
        record_id = str(record_id)
        try:
            n = self._row_number(ws, record_id)
            if n is None:
                logger.warning("Delete of %s in %s: already gone", record_id, collection)
                return
            ws.delete_rows(n)
        except BACKEND_ERRORS as e:
            logger.exception("Delete of %s in %s failed", record_id, collection)
            raise StoreError(f"Could not delete from {collection}: {e}") from e

        logger.info("Deleted %s from %s", record_id, collection)
