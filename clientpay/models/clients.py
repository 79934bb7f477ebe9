from dataclasses import dataclass, asdict
from datetime import datetime
from decimal import Decimal
from typing import Optional

import pytz

from clientpay.config import (
    CLIENTS_HEADERS,
    DEFAULT_DAY,
    DEFAULT_END,
    DEFAULT_GRADE,
    DEFAULT_START,
    DEFAULT_TYPE,
)
from clientpay.utils.amount_parser import to_amount


# -----------------------------
# Data model
# -----------------------------
@dataclass(frozen=True)
class ClientDraft:
    """Form contents for creating or editing a client. All fields are raw text."""

    name: str = ""
    phone: str = ""
    email: str = ""
    day: str = DEFAULT_DAY
    start_time: str = DEFAULT_START
    end_time: str = DEFAULT_END
    grade: str = DEFAULT_GRADE
    payment_amount: str = ""
    type: str = DEFAULT_TYPE

    def to_row(self) -> dict:
        row = asdict(self)
        row["name"] = self.name.strip()
        row["phone"] = self.phone.strip()
        row["email"] = self.email.strip()
        row["payment_amount"] = self.payment_amount.strip()
        return row


@dataclass(frozen=True)
class Client:
    id: str
    name: str
    phone: str
    email: str
    day: str                     # Monday..Sunday
    start_time: str              # HH:MM
    end_time: str                # HH:MM
    grade: str
    payment_amount: str          # as typed; see amount
    type: str
    created_at_utc: str

    @property
    def amount(self) -> Decimal:
        return to_amount(self.payment_amount)

    @property
    def short_name(self) -> str:
        parts = self.name.split()
        return parts[0] if parts else ""

    def to_draft(self) -> ClientDraft:
        return ClientDraft(
            name=self.name,
            phone=self.phone,
            email=self.email,
            day=self.day,
            start_time=self.start_time,
            end_time=self.end_time,
            grade=self.grade,
            payment_amount=self.payment_amount,
            type=self.type,
        )

    @staticmethod
    def from_row(row: dict) -> Optional["Client"]:
        """Build from a store row; rows without an id are not addressable and are dropped."""
        rid = str(row.get("id", "") or "").strip()
        if not rid:
            return None
        values = {h: str(row.get(h, "") or "").strip() for h in CLIENTS_HEADERS}
        values["id"] = rid
        values["day"] = values["day"] or DEFAULT_DAY
        values["type"] = values["type"] or DEFAULT_TYPE
        return Client(**values)


def utc_now_iso() -> str:
    return datetime.now(pytz.UTC).isoformat()
